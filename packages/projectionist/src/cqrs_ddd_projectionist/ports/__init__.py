"""Ports: handler capability, queue and messaging protocols."""

from __future__ import annotations

from .event_handler import (
    HandledEvents,
    HandlerRole,
    HandlesExceptions,
    IEventHandler,
)
from .messaging import IMessagePublisher
from .queue import IHandlerQueue

__all__ = [
    "HandledEvents",
    "HandlerRole",
    "HandlesExceptions",
    "IEventHandler",
    "IHandlerQueue",
    "IMessagePublisher",
]
