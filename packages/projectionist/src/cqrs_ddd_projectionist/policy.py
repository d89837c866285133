"""ExceptionPolicy — decides whether a handler failure aborts the fan-out."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from inspect import isawaitable
from typing import TYPE_CHECKING, Any

from .ports.event_handler import HandlesExceptions
from .primitives.exceptions import HandlerInvocationError

if TYPE_CHECKING:
    from .routing import DispatchRecord

logger = logging.getLogger(__name__)


class DispatchState(str, enum.Enum):
    """Lifecycle of a single dispatch pass."""

    RUNNING = "running"
    ABORTED = "aborted"
    COMPLETED = "completed"


@dataclass(frozen=True)
class InvocationResult:
    """Outcome of one handler invocation (inline call or enqueue)."""

    record: DispatchRecord
    queued: bool = False
    error: Exception | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    @classmethod
    def success(
        cls, record: DispatchRecord, *, queued: bool = False
    ) -> InvocationResult:
        return cls(record=record, queued=queued)

    @classmethod
    def failure(
        cls,
        record: DispatchRecord,
        error: Exception,
        *,
        queued: bool = False,
    ) -> InvocationResult:
        return cls(record=record, queued=queued, error=error)


@dataclass
class DispatchReport:
    """Aggregated results of one dispatch pass."""

    event: Any
    state: DispatchState = DispatchState.RUNNING
    results: list[InvocationResult] = field(default_factory=list)

    @property
    def failures(self) -> list[InvocationResult]:
        return [r for r in self.results if not r.succeeded]

    @property
    def invoked(self) -> list[InvocationResult]:
        """Handlers that ran inline, successfully or not."""
        return [r for r in self.results if not r.queued]

    @property
    def enqueued(self) -> list[InvocationResult]:
        """Handlers whose work item was accepted by the queue."""
        return [r for r in self.results if r.queued and r.succeeded]


class ExceptionPolicy:
    """Fail-fast (default) or contain-and-continue handling of handler failures.

    With ``catch_exceptions=False`` the first failed invocation aborts the
    pass and surfaces as :class:`HandlerInvocationError`. With
    ``catch_exceptions=True`` the failure is logged, handed to the handler's
    ``on_handler_exception`` hook when it has one, and dispatch continues.
    A failing hook is not caught.
    """

    def __init__(self, catch_exceptions: bool = False) -> None:
        self.catch_exceptions = catch_exceptions

    def should_abort(self, result: InvocationResult) -> bool:
        return not result.succeeded and not self.catch_exceptions

    def to_exception(self, result: InvocationResult) -> HandlerInvocationError:
        """Build the error raised to the dispatcher's caller on abort."""
        record = result.record
        action = "enqueue" if result.queued else "invoke"
        return HandlerInvocationError(
            f"Failed to {action} {record.handler_name}.{record.method} "
            f"for {record.event_name}: {result.error}",
            event=record.event,
            handler=record.handler,
            method=record.method,
            original=result.error,
        )

    async def contain(self, result: InvocationResult) -> None:
        """Report a failure that is not allowed to abort the pass."""
        record = result.record
        error = result.error
        if error is None:
            return

        logger.error(
            "Handler %s.%s failed for event %s; continuing dispatch",
            record.handler_name,
            record.method,
            record.event_name,
            exc_info=error,
        )

        if isinstance(record.handler, HandlesExceptions):
            outcome = record.handler.on_handler_exception(record.event, error)
            if isawaitable(outcome):
                await outcome
