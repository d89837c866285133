"""Primitives: exceptions."""

from __future__ import annotations

from .exceptions import (
    HandlerError,
    HandlerInvocationError,
    HandlerResolutionError,
    InvalidEventHandlerError,
    ProjectionistError,
    WorkItemError,
)

__all__ = [
    "HandlerError",
    "HandlerInvocationError",
    "HandlerResolutionError",
    "InvalidEventHandlerError",
    "ProjectionistError",
    "WorkItemError",
]
