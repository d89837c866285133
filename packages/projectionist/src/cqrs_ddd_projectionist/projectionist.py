"""Projectionist — owns the handler registry, policy and dispatch executor."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .adapters.publisher import PublisherHandlerQueue
from .config import ProjectionistConfig
from .dispatcher import DispatchExecutor
from .policy import ExceptionPolicy
from .registry import EventHandlerRegistry
from .routing import EventRouter

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .policy import DispatchReport
    from .ports.event_handler import IEventHandler
    from .ports.messaging import IMessagePublisher
    from .ports.queue import IHandlerQueue
    from .registry import HandlerRef

logger = logging.getLogger(__name__)


class Projectionist:
    """Entry point of the dispatch core.

    Construct one per application (or per test) and hand it every event the
    event store persists::

        projectionist = Projectionist(queue=InMemoryHandlerQueue())
        projectionist.add_projector(BalanceProjector)
        projectionist.add_reactor(BrokeReactor)

        await projectionist.handle(MoneyAdded(account_id=42, amount=500))

    Registration methods are forwarded to the underlying
    :class:`EventHandlerRegistry`, available as :attr:`registry`.
    """

    def __init__(
        self,
        config: ProjectionistConfig | None = None,
        *,
        queue: IHandlerQueue | None = None,
        publisher: IMessagePublisher | None = None,
        registry: EventHandlerRegistry | None = None,
        router: EventRouter | None = None,
        **options: Any,
    ) -> None:
        if config is None:
            config = ProjectionistConfig(**options)
        elif options:
            config = config.model_copy(update=options)
        self.config = config
        if queue is None and publisher is not None:
            queue = PublisherHandlerQueue(publisher, config.queue_topic)
        self.registry = registry if registry is not None else EventHandlerRegistry()
        self.policy = ExceptionPolicy(catch_exceptions=config.catch_exceptions)
        self.executor = DispatchExecutor(
            self.registry,
            policy=self.policy,
            router=router,
            queue=queue,
        )
        self._active_passes = 0

    # ── Configuration ────────────────────────────────────────────

    @property
    def catch_exceptions(self) -> bool:
        return self.policy.catch_exceptions

    @catch_exceptions.setter
    def catch_exceptions(self, value: bool) -> None:
        self.policy.catch_exceptions = value
        self.config = self.config.model_copy(update={"catch_exceptions": value})

    @property
    def queue(self) -> IHandlerQueue | None:
        return self.executor.queue

    @property
    def is_projecting(self) -> bool:
        """True while at least one dispatch pass is running."""
        return self._active_passes > 0

    # ── Registration ─────────────────────────────────────────────

    def add_projector(self, handler: HandlerRef) -> IEventHandler:
        return self.registry.add_projector(handler)

    def add_projectors(self, handlers: Iterable[HandlerRef]) -> Projectionist:
        self.registry.add_projectors(handlers)
        return self

    def add_reactor(self, handler: HandlerRef) -> IEventHandler:
        return self.registry.add_reactor(handler)

    def add_reactors(self, handlers: Iterable[HandlerRef]) -> Projectionist:
        self.registry.add_reactors(handlers)
        return self

    def add_event_handler(self, handler: HandlerRef) -> IEventHandler:
        return self.registry.add_event_handler(handler)

    def add_event_handlers(self, handlers: Iterable[HandlerRef]) -> Projectionist:
        self.registry.add_event_handlers(handlers)
        return self

    def get_projectors(self) -> tuple[IEventHandler, ...]:
        return self.registry.get_projectors()

    def get_reactors(self) -> tuple[IEventHandler, ...]:
        return self.registry.get_reactors()

    def get_projector(self, identity: HandlerRef) -> IEventHandler | None:
        return self.registry.get_projector(identity)

    def get_reactor(self, identity: HandlerRef) -> IEventHandler | None:
        return self.registry.get_reactor(identity)

    def without_event_handler(self, identity: HandlerRef) -> Projectionist:
        self.registry.without_event_handler(identity)
        return self

    def without_event_handlers(
        self, identities: Iterable[HandlerRef] | None = None
    ) -> Projectionist:
        self.registry.without_event_handlers(identities)
        return self

    def without_projectors(
        self, identities: Iterable[HandlerRef] | None = None
    ) -> Projectionist:
        self.registry.without_projectors(identities)
        return self

    def without_reactors(
        self, identities: Iterable[HandlerRef] | None = None
    ) -> Projectionist:
        self.registry.without_reactors(identities)
        return self

    # ── Dispatching ──────────────────────────────────────────────

    async def handle(self, event: Any) -> DispatchReport:
        """Dispatch *event* to projectors, then reactors."""
        return await self._dispatch(event, include_queued=True)

    async def handle_with_sync_event_handlers(self, event: Any) -> DispatchReport:
        """Dispatch *event* to the inline handlers only, skipping queued ones."""
        return await self._dispatch(event, include_queued=False)

    async def handle_events(self, events: Iterable[Any]) -> list[DispatchReport]:
        """Dispatch *events* one after another, stopping at the first raise."""
        return [await self.handle(event) for event in events]

    async def _dispatch(self, event: Any, *, include_queued: bool) -> DispatchReport:
        self._active_passes += 1
        try:
            report = await self.executor.dispatch(event, include_queued=include_queued)
        finally:
            self._active_passes -= 1
        if report.failures:
            logger.debug(
                "%s dispatched with %d contained failure(s)",
                type(event).__name__,
                len(report.failures),
            )
        return report
