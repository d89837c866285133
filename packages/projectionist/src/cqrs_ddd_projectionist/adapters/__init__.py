"""Adapters for the handler queue port."""

from __future__ import annotations

from .memory import InMemoryHandlerQueue
from .publisher import PublisherHandlerQueue

__all__ = ["InMemoryHandlerQueue", "PublisherHandlerQueue"]
