"""Exceptions for cqrs-ddd-projectionist."""

from __future__ import annotations

from typing import Any


class ProjectionistError(Exception):
    """Root exception for the projectionist package."""


class HandlerError(ProjectionistError):
    """Base class for all event handler errors (resolution, routing, execution)."""


class HandlerResolutionError(HandlerError):
    """Raised when a handler reference cannot be resolved or constructed.

    Usage: ``EventHandlerRegistry.add_projector("no.such.Projector")``.
    Registration errors always reach the caller; the exception policy
    never contains them.
    """


class InvalidEventHandlerError(HandlerError):
    """Raised when a handler maps an event to a method it does not have.

    This is a configuration defect of the handler itself and is raised at
    dispatch time regardless of ``catch_exceptions``.
    """

    def __init__(self, handler: Any, event_type: str, method: str) -> None:
        self.handler = handler
        self.event_type = event_type
        self.method = method
        super().__init__(
            f"{type(handler).__name__} declares method {method!r} for "
            f"{event_type} but has no such callable"
        )


class HandlerInvocationError(HandlerError):
    """Raised when a handler method (or enqueueing it) fails.

    The original exception is available as ``__cause__`` and ``original``.
    When raised by a dispatch pass, ``report`` holds the aborted
    :class:`~cqrs_ddd_projectionist.policy.DispatchReport`.
    """

    def __init__(
        self,
        message: str,
        *,
        event: Any = None,
        handler: Any = None,
        method: str | None = None,
        original: BaseException | None = None,
    ) -> None:
        self.report: Any = None
        self.event = event
        self.handler = handler
        self.method = method
        self.original = original
        super().__init__(message)


class WorkItemError(HandlerError):
    """Raised when a queued work item cannot be executed by a worker."""
