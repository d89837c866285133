"""QueuedHandlerWorker — executes queued work items on the worker side."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .correlation import correlation_context
from .primitives.exceptions import HandlerResolutionError, WorkItemError
from .routing import DispatchRecord

if TYPE_CHECKING:
    from .instrumentation import DispatchAttributes
    from .ports.event_handler import IEventHandler
    from .projectionist import Projectionist
    from .work_item import QueuedWorkItem

logger = logging.getLogger(__name__)


class QueuedHandlerWorker:
    """Runs the handler method a :class:`QueuedWorkItem` points at.

    The handler is looked up in the projectionist's registry first, so the
    worker reuses registered instances; unregistered identities are imported
    and constructed. The correlation context captured at enqueue time is
    restored around the call.

    Failures follow the projectionist's exception policy: in fail-fast mode
    they are raised so that the queue can retry the item.
    """

    def __init__(self, projectionist: Projectionist) -> None:
        self.projectionist = projectionist

    async def __call__(self, work_item: QueuedWorkItem) -> None:
        await self.process(work_item)

    async def process(self, work_item: QueuedWorkItem) -> None:
        handler = self._resolve_handler(work_item.handler)
        if not callable(getattr(handler, work_item.method, None)):
            raise WorkItemError(
                f"{work_item.handler} has no callable {work_item.method!r}"
            )

        record = DispatchRecord(
            event=work_item.event, handler=handler, method=work_item.method
        )
        attributes: DispatchAttributes = {
            "event.type": record.event_name,
            "event.id": str(getattr(work_item.event, "event_id", "")),
            "event.class": type(work_item.event),
            "correlation_id": work_item.correlation_id,
            "work_item.id": work_item.work_item_id,
            "work_item.tags": list(work_item.tags),
        }

        executor = self.projectionist.executor
        with correlation_context(work_item.correlation_id, work_item.causation_id):
            result = await executor.invoke(
                record, attributes, operation="projectionist.work_item"
            )
            if result.succeeded:
                logger.debug(
                    "Processed work item %s (%s.%s)",
                    work_item.work_item_id,
                    record.handler_name,
                    record.method,
                )
                return
            if executor.policy.should_abort(result):
                raise executor.policy.to_exception(result) from result.error
            await executor.policy.contain(result)

    def _resolve_handler(self, identity: str) -> IEventHandler:
        registry = self.projectionist.registry
        handler = registry.get_event_handler(identity)
        if handler is not None:
            return handler
        try:
            return registry.resolve(identity)
        except HandlerResolutionError as exc:
            raise WorkItemError(
                f"Cannot resolve handler for work item: {identity}"
            ) from exc
