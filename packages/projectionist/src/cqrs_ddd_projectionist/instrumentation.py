"""Instrumentation hooks wrapped around dispatch passes and handler calls.

Operations emitted by the dispatch core:

- ``projectionist.dispatch.<Event>`` around a whole dispatch pass
- ``projectionist.handler.<Event>.<Handler>`` around an inline invocation
- ``projectionist.enqueue.<Event>.<Handler>`` around a queue submission
- ``projectionist.work_item.<Event>.<Handler>`` around a worker execution

Pass-level operations carry only the ``event.*`` and ``correlation_id``
attributes; the other three add ``handler.*``, and queue related ones add
``work_item.*``.
"""

from __future__ import annotations

import fnmatch
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, TypedDict, runtime_checkable

from .ports.event_handler import HandlerRole

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable

DispatchAttributes = TypedDict(
    "DispatchAttributes",
    {
        "event.type": str,
        "event.id": str,
        "event.class": type,
        "correlation_id": "str | None",
        "handler.type": str,
        "handler.method": str,
        "handler.role": "str | None",
        "work_item.id": str,
        "work_item.tags": "list[str]",
    },
    total=False,
)


@runtime_checkable
class InstrumentationHook(Protocol):
    """Middleware around one dispatch operation (tracing, metrics, etc.)."""

    async def __call__(
        self,
        operation: str,
        attributes: DispatchAttributes,
        next_handler: Callable[[], Awaitable[Any]],
    ) -> Any:
        ...


@dataclass(frozen=True)
class HookRegistration:
    """A hook plus the dispatch steps it applies to.

    Empty filters match everything. ``roles`` only matches handler-level
    operations, since a dispatch pass has no single handler. ``events``
    matches the event class or any of its subclasses.
    """

    hook: InstrumentationHook
    priority: int = 0
    operations: tuple[str, ...] = ()
    roles: frozenset[HandlerRole] = field(default_factory=frozenset)
    events: tuple[type[Any], ...] = ()

    def matches(self, operation: str, attributes: DispatchAttributes) -> bool:
        if self.operations and not any(
            fnmatch.fnmatchcase(operation, pattern) for pattern in self.operations
        ):
            return False
        if self.roles:
            role = attributes.get("handler.role")
            if role is None or role not in {r.value for r in self.roles}:
                return False
        if self.events:
            event_class = attributes.get("event.class")
            if event_class is None or not issubclass(event_class, self.events):
                return False
        return True


class HookRegistry:
    """Ordered set of instrumentation hooks, lowest priority outermost."""

    def __init__(self) -> None:
        self._registrations: list[HookRegistration] = []

    def register(
        self,
        hook: InstrumentationHook,
        *,
        priority: int = 0,
        operations: Iterable[str] = (),
        roles: Iterable[HandlerRole] = (),
        events: Iterable[type[Any]] = (),
    ) -> HookRegistration:
        registration = HookRegistration(
            hook=hook,
            priority=priority,
            operations=tuple(operations),
            roles=frozenset(roles),
            events=tuple(events),
        )
        self._registrations.append(registration)
        self._registrations.sort(key=lambda r: r.priority)
        return registration

    def unregister(self, registration: HookRegistration) -> None:
        if registration in self._registrations:
            self._registrations.remove(registration)

    async def execute_all(
        self,
        operation: str,
        attributes: DispatchAttributes,
        next_handler: Callable[[], Awaitable[Any]],
    ) -> Any:
        """Run *next_handler* wrapped by every matching hook."""
        matching = [r for r in self._registrations if r.matches(operation, attributes)]

        async def pipeline(index: int = 0) -> Any:
            if index >= len(matching):
                return await next_handler()
            return await matching[index].hook(
                operation,
                attributes,
                lambda: pipeline(index + 1),
            )

        return await pipeline()

    def clear(self) -> None:
        self._registrations.clear()


_hook_registry_var: ContextVar[HookRegistry | None] = ContextVar(
    "projectionist_hook_registry", default=None
)


def get_hook_registry() -> HookRegistry:
    """Get the hook registry for the current context.

    A fresh ``HookRegistry`` is created on first access within each context.
    """
    registry = _hook_registry_var.get()
    if registry is None:
        registry = HookRegistry()
        _hook_registry_var.set(registry)
    return registry


def set_hook_registry(registry: HookRegistry) -> None:
    _hook_registry_var.set(registry)
