"""Projector and Reactor base classes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from .ports.event_handler import HandlerRole

if TYPE_CHECKING:
    from .ports.event_handler import HandledEvents, HandlerMethod


class EventHandler:
    """Base class for everything the projectionist dispatches to.

    Subclasses declare the events they care about in ``handles_events``,
    either as a mapping of event class (or type identifier) to method::

        class BalanceProjector(Projector):
            handles_events = {MoneyAdded: "on_money_added"}

            def on_money_added(self, event: MoneyAdded) -> None:
                ...

    or as a sequence of event classes, in which case every entry is routed to
    ``handle_event`` when set (a method name or a method defined on the
    class), or to ``on_<snake_case_event_name>`` otherwise.

    Handler methods may be plain functions or coroutines. The class is the
    handler's identity: registering a second instance of the same class is a
    no-op.
    """

    role: ClassVar[HandlerRole | None] = None
    handles_events: ClassVar[HandledEvents] = {}
    handle_event: ClassVar[HandlerMethod | None] = None
    queued: ClassVar[bool] = False

    def tags(self, event: Any) -> list[str]:
        """Return observability tags for a queued invocation of *event*."""
        del event
        return []

    def __repr__(self) -> str:
        return f"<{type(self).__name__}>"


class Projector(EventHandler):
    """Handler that builds and maintains read-model state from events."""

    role = HandlerRole.PROJECTOR


class Reactor(EventHandler):
    """Handler that triggers side effects (mail, notifications, …) from events."""

    role = HandlerRole.REACTOR


def handler_identity(handler: Any) -> str:
    """Return the dotted import path identifying a handler class or instance."""
    if isinstance(handler, str):
        return handler
    cls = handler if isinstance(handler, type) else type(handler)
    return f"{cls.__module__}.{cls.__qualname__}"
