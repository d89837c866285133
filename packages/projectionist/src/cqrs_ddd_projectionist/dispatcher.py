"""DispatchExecutor — sequential fan-out of one event to its handlers."""

from __future__ import annotations

import logging
from inspect import isawaitable
from typing import TYPE_CHECKING, Any

from .correlation import get_correlation_id
from .instrumentation import DispatchAttributes, get_hook_registry
from .policy import DispatchReport, DispatchState, ExceptionPolicy, InvocationResult
from .primitives.exceptions import InvalidEventHandlerError, WorkItemError
from .routing import EventRouter
from .work_item import QueuedWorkItem

if TYPE_CHECKING:
    from .ports.queue import IHandlerQueue
    from .registry import EventHandlerRegistry
    from .routing import DispatchRecord

logger = logging.getLogger(__name__)


class DispatchExecutor:
    """Runs one dispatch pass per event over a registry snapshot.

    Projectors go first, then reactors, each in registration order. A handler
    is either invoked inline (its coroutine awaited to completion before the
    next handler is considered) or, when ``queued``, turned into a
    :class:`QueuedWorkItem` and submitted to the handler queue.

    Every step yields an :class:`InvocationResult`; the
    :class:`ExceptionPolicy` decides from it whether the pass continues.
    """

    def __init__(
        self,
        registry: EventHandlerRegistry,
        *,
        policy: ExceptionPolicy | None = None,
        router: EventRouter | None = None,
        queue: IHandlerQueue | None = None,
    ) -> None:
        self.registry = registry
        self.policy = policy or ExceptionPolicy()
        self.router = router or EventRouter()
        self.queue = queue

    # ── Dispatching ──────────────────────────────────────────────

    async def dispatch(
        self, event: Any, *, include_queued: bool = True
    ) -> DispatchReport:
        """Fan *event* out to every interested handler.

        Raises:
            InvalidEventHandlerError: a handler maps the event to a missing
                method (never contained by the policy).
            HandlerInvocationError: a handler failed and the policy is
                fail-fast.
        """
        handlers = self.registry.get_event_handlers()
        report = DispatchReport(event=event)
        event_name = type(event).__name__
        attributes: DispatchAttributes = {
            "event.type": event_name,
            "event.id": str(getattr(event, "event_id", "")),
            "event.class": type(event),
            "correlation_id": get_correlation_id()
            or getattr(event, "correlation_id", None),
        }

        async def _run_pass() -> None:
            for handler in handlers:
                try:
                    record = self.router.record(handler, event)
                except InvalidEventHandlerError:
                    report.state = DispatchState.ABORTED
                    raise
                if record is None:
                    continue

                if getattr(handler, "queued", False):
                    if not include_queued:
                        logger.debug(
                            "Skipping queued handler %s for %s",
                            record.handler_name,
                            event_name,
                        )
                        continue
                    result = await self.enqueue(record, attributes)
                else:
                    result = await self.invoke(record, attributes)

                report.results.append(result)
                if result.succeeded:
                    continue
                if self.policy.should_abort(result):
                    report.state = DispatchState.ABORTED
                    error = self.policy.to_exception(result)
                    error.report = report
                    raise error from result.error
                await self.policy.contain(result)

            report.state = DispatchState.COMPLETED

        await get_hook_registry().execute_all(
            f"projectionist.dispatch.{event_name}",
            attributes,
            _run_pass,
        )
        return report

    # ── Single steps ─────────────────────────────────────────────

    async def invoke(
        self,
        record: DispatchRecord,
        attributes: DispatchAttributes | None = None,
        *,
        operation: str = "projectionist.handler",
    ) -> InvocationResult:
        """Call the resolved method inline and capture any failure."""

        async def _call() -> None:
            outcome = record.bound_method()(record.event)
            if isawaitable(outcome):
                await outcome

        try:
            await get_hook_registry().execute_all(
                f"{operation}.{record.event_name}.{record.handler_name}",
                self._handler_attributes(record, attributes),
                _call,
            )
        except Exception as exc:  # noqa: BLE001
            return InvocationResult.failure(record, exc)
        return InvocationResult.success(record)

    async def enqueue(
        self,
        record: DispatchRecord,
        attributes: DispatchAttributes | None = None,
    ) -> InvocationResult:
        """Submit the resolved method to the handler queue."""
        try:
            queue = self._require_queue(record)
            tags_of = getattr(record.handler, "tags", None)
            tags = list(tags_of(record.event)) if callable(tags_of) else []
            work_item = QueuedWorkItem.for_handler(
                record.event, record.handler, record.method, tags
            )

            async def _submit() -> None:
                await queue.enqueue(work_item)

            enqueue_attributes = self._handler_attributes(record, attributes)
            enqueue_attributes["work_item.id"] = work_item.work_item_id
            enqueue_attributes["work_item.tags"] = list(work_item.tags)
            await get_hook_registry().execute_all(
                f"projectionist.enqueue.{record.event_name}.{record.handler_name}",
                enqueue_attributes,
                _submit,
            )
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "Failed to enqueue %s.%s for %s: %s",
                record.handler_name,
                record.method,
                record.event_name,
                exc,
            )
            return InvocationResult.failure(record, exc, queued=True)

        logger.debug(
            "Enqueued %s.%s for %s",
            record.handler_name,
            record.method,
            record.event_name,
        )
        return InvocationResult.success(record, queued=True)

    def _require_queue(self, record: DispatchRecord) -> IHandlerQueue:
        if self.queue is None:
            raise WorkItemError(
                f"{record.handler_name} is queued but no handler queue is configured"
            )
        return self.queue

    @staticmethod
    def _handler_attributes(
        record: DispatchRecord, attributes: DispatchAttributes | None
    ) -> DispatchAttributes:
        role = getattr(record.handler, "role", None)
        handler_attributes: DispatchAttributes = {
            "event.type": record.event_name,
            "event.class": type(record.event),
        }
        handler_attributes.update(attributes or {})
        handler_attributes["handler.type"] = record.handler_name
        handler_attributes["handler.method"] = record.method
        handler_attributes["handler.role"] = getattr(role, "value", role)
        return handler_attributes
