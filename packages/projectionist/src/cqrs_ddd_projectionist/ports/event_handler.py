from __future__ import annotations

import enum
from typing import (
    TYPE_CHECKING,
    Any,
    ClassVar,
    Protocol,
    TypeAlias,
    runtime_checkable,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Mapping, Sequence

EventKey: TypeAlias = "type[Any] | str"
HandlerMethod: TypeAlias = "str | Callable[..., Any]"
HandledEvents: TypeAlias = "Mapping[EventKey, HandlerMethod] | Sequence[EventKey]"


class HandlerRole(str, enum.Enum):
    """Discriminates the two handler collections of the registry."""

    PROJECTOR = "projector"
    REACTOR = "reactor"


@runtime_checkable
class IEventHandler(Protocol):
    """Capability every projector and reactor exposes.

    ``handles_events`` is the only mandatory member. ``queued``, ``tags``
    and ``role`` are read with defaults (see :class:`EventHandler`), so plain
    objects declaring ``handles_events`` can be registered too.
    """

    handles_events: ClassVar[HandledEvents]


@runtime_checkable
class HandlesExceptions(Protocol):
    """Optional hook invoked when the handler fails in catch mode."""

    def on_handler_exception(
        self, event: Any, error: Exception
    ) -> Awaitable[None] | None:
        ...
