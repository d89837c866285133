"""EventRouter — resolves which handler method receives an event."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .domain.events import event_type_id
from .primitives.exceptions import InvalidEventHandlerError

if TYPE_CHECKING:
    from .ports.event_handler import IEventHandler

logger = logging.getLogger(__name__)

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def default_method_name(event_key: str) -> str:
    """Derive ``on_money_added`` from ``MoneyAdded`` (or its dotted id)."""
    short_name = event_key.rsplit(".", 1)[-1]
    return "on_" + _CAMEL_BOUNDARY.sub("_", short_name).lower()


@dataclass(frozen=True)
class DispatchRecord:
    """One fan-out step: the event, the handler and the resolved method."""

    event: Any
    handler: IEventHandler
    method: str

    @property
    def handler_name(self) -> str:
        return type(self.handler).__name__

    @property
    def event_name(self) -> str:
        return type(self.event).__name__

    def bound_method(self) -> Any:
        return getattr(self.handler, self.method)


class EventRouter:
    """Maps an event onto at most one method of a handler.

    The handler's ``handles_events`` declaration is normalized to
    ``{type identifier or bare class name: method name}`` on every call, so
    there is no cache to invalidate when handlers come and go.

    Only the event's own class is looked up: a handler declared for
    ``MoneyAdded`` does not receive a ``LargeMoneyAdded`` subclass unless it
    lists that class too.
    """

    def handled_event_types(self, handler: IEventHandler) -> dict[str, str]:
        """Return the normalized event-key to method-name mapping of *handler*.

        Raises:
            InvalidEventHandlerError: a sequence declaration relies on a
                ``handle_event`` that is neither a method name nor callable.
        """
        declared = getattr(handler, "handles_events", None) or {}
        if isinstance(declared, Mapping):
            items = list(declared.items())
        else:
            items = [(key, None) for key in declared]

        normalized: dict[str, str] = {}
        for key, method in items:
            event_key = event_type_id(key) if isinstance(key, type) else str(key)
            if method is None:
                method_name = self._fallback_method(handler, event_key)
            elif isinstance(method, str):
                method_name = method
            else:
                method_name = getattr(method, "__name__", repr(method))
            normalized[event_key] = method_name
        return normalized

    @staticmethod
    def _fallback_method(handler: IEventHandler, event_key: str) -> str:
        fallback = getattr(handler, "handle_event", None)
        if fallback is None:
            return default_method_name(event_key)
        if isinstance(fallback, str):
            return fallback
        if callable(fallback):
            return str(getattr(fallback, "__name__", "handle_event"))
        raise InvalidEventHandlerError(handler, event_key, repr(fallback))

    def resolve(self, handler: IEventHandler, event: Any) -> str | None:
        """Return the method name *handler* declares for *event*, or ``None``.

        Raises:
            InvalidEventHandlerError: the declared method does not exist on
                the handler or is not callable.
        """
        declared = self.handled_event_types(handler)
        if not declared:
            return None

        event_class = type(event)
        type_id = event_type_id(event_class)
        method = declared.get(type_id) or declared.get(event_class.__name__)
        if method is None:
            logger.debug(
                "%s does not handle %s",
                type(handler).__name__,
                event_class.__name__,
            )
            return None
        if not callable(getattr(handler, method, None)):
            raise InvalidEventHandlerError(handler, type_id, method)
        return method

    def record(self, handler: IEventHandler, event: Any) -> DispatchRecord | None:
        """Resolve *handler* for *event* into a :class:`DispatchRecord`."""
        method = self.resolve(handler, event)
        if method is None:
            return None
        return DispatchRecord(event=event, handler=handler, method=method)
