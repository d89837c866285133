"""EventHandlerRegistry — ordered, deduplicated projectors and reactors."""

from __future__ import annotations

import importlib
import logging
from typing import TYPE_CHECKING, Any, TypeAlias

from .handlers import handler_identity
from .ports.event_handler import HandlerRole, IEventHandler
from .primitives.exceptions import HandlerResolutionError

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)

HandlerRef: TypeAlias = "IEventHandler | type[IEventHandler] | str"
_Collection: TypeAlias = "dict[type[IEventHandler], IEventHandler]"


def import_handler_class(path: str) -> type[Any]:
    """Import ``package.module.Class`` (nested classes allowed)."""
    parts = path.split(".")
    for split in range(len(parts) - 1, 0, -1):
        module_name = ".".join(parts[:split])
        try:
            target: Any = importlib.import_module(module_name)
        except ModuleNotFoundError as exc:
            missing = exc.name or ""
            if module_name != missing and not module_name.startswith(missing + "."):
                raise HandlerResolutionError(
                    f"Cannot resolve event handler {path!r}: {exc}"
                ) from exc
            continue
        except ImportError as exc:
            raise HandlerResolutionError(
                f"Cannot resolve event handler {path!r}: {exc}"
            ) from exc
        try:
            for attr in parts[split:]:
                target = getattr(target, attr)
        except AttributeError as exc:
            raise HandlerResolutionError(
                f"Cannot resolve event handler {path!r}: {exc}"
            ) from exc
        if not isinstance(target, type):
            raise HandlerResolutionError(
                f"Cannot resolve event handler {path!r}: not a class"
            )
        return target
    raise HandlerResolutionError(
        f"Cannot resolve event handler {path!r}: no importable module"
    )


class EventHandlerRegistry:
    """Holds the projectors and reactors of one projectionist.

    Both collections are keyed by handler class, so registration is
    idempotent and insertion order is dispatch order. Handlers can be
    given as instances, classes (constructed without arguments) or dotted
    import paths.

    Mutation is single-writer; dispatch works on the tuples returned by
    :meth:`get_projectors` / :meth:`get_reactors`, which are snapshots.
    """

    def __init__(self) -> None:
        self._projectors: _Collection = {}
        self._reactors: _Collection = {}

    # ── Registration ─────────────────────────────────────────────

    def add_projector(self, handler: HandlerRef) -> IEventHandler:
        """Register a projector; returns the registered instance."""
        return self._add(self._projectors, HandlerRole.PROJECTOR, handler)

    def add_reactor(self, handler: HandlerRef) -> IEventHandler:
        """Register a reactor; returns the registered instance."""
        return self._add(self._reactors, HandlerRole.REACTOR, handler)

    def add_projectors(self, handlers: Iterable[HandlerRef]) -> None:
        for handler in handlers:
            self.add_projector(handler)

    def add_reactors(self, handlers: Iterable[HandlerRef]) -> None:
        for handler in handlers:
            self.add_reactor(handler)

    def add_event_handler(self, handler: HandlerRef) -> IEventHandler:
        """Register *handler* as projector or reactor according to its ``role``."""
        instance = self.resolve(handler)
        role = getattr(instance, "role", None)
        if role == HandlerRole.PROJECTOR:
            return self._add(self._projectors, HandlerRole.PROJECTOR, instance)
        if role == HandlerRole.REACTOR:
            return self._add(self._reactors, HandlerRole.REACTOR, instance)
        raise HandlerResolutionError(
            f"{type(instance).__name__} is neither a Projector nor a Reactor"
        )

    def add_event_handlers(self, handlers: Iterable[HandlerRef]) -> None:
        for handler in handlers:
            self.add_event_handler(handler)

    def _add(
        self,
        collection: _Collection,
        role: HandlerRole,
        handler: HandlerRef,
    ) -> IEventHandler:
        instance = self.resolve(handler)
        key = type(instance)
        existing = collection.get(key)
        if existing is not None:
            return existing
        collection[key] = instance
        logger.debug("Registered %s %s", role.value, handler_identity(key))
        return instance

    def resolve(self, handler: HandlerRef) -> IEventHandler:
        """Turn an instance, class or dotted path into a handler instance."""
        target: Any = handler
        if isinstance(target, str):
            target = import_handler_class(target)

        if isinstance(target, type):
            try:
                instance = target()
            except Exception as exc:  # noqa: BLE001
                raise HandlerResolutionError(
                    f"Cannot construct event handler {target.__name__}: {exc}"
                ) from exc
        else:
            instance = target

        if not isinstance(instance, IEventHandler):
            raise HandlerResolutionError(
                f"{type(instance).__name__} does not declare handles_events"
            )
        return instance

    # ── Lookup ───────────────────────────────────────────────────

    def get_projectors(self) -> tuple[IEventHandler, ...]:
        return tuple(self._projectors.values())

    def get_reactors(self) -> tuple[IEventHandler, ...]:
        return tuple(self._reactors.values())

    def get_event_handlers(self) -> tuple[IEventHandler, ...]:
        """Return projectors followed by reactors, in dispatch order."""
        return self.get_projectors() + self.get_reactors()

    def get_projector(self, identity: HandlerRef) -> IEventHandler | None:
        key = self._find(self._projectors, identity)
        return None if key is None else self._projectors[key]

    def get_reactor(self, identity: HandlerRef) -> IEventHandler | None:
        key = self._find(self._reactors, identity)
        return None if key is None else self._reactors[key]

    def get_event_handler(self, identity: HandlerRef) -> IEventHandler | None:
        projector = self.get_projector(identity)
        return projector if projector is not None else self.get_reactor(identity)

    def __contains__(self, identity: Any) -> bool:
        return self.get_event_handler(identity) is not None

    def __len__(self) -> int:
        return len(self._projectors) + len(self._reactors)

    @staticmethod
    def _find(
        collection: _Collection, identity: HandlerRef
    ) -> type[IEventHandler] | None:
        if isinstance(identity, str):
            for key in collection:
                if handler_identity(key) == identity:
                    return key
            return None
        key = identity if isinstance(identity, type) else type(identity)
        return key if key in collection else None

    # ── Removal ──────────────────────────────────────────────────

    def without_event_handler(self, identity: HandlerRef) -> None:
        """Remove one handler from whichever collection holds it."""
        self.without_event_handlers([identity])

    def without_event_handlers(
        self, identities: Iterable[HandlerRef] | None = None
    ) -> None:
        """Remove the given handlers from both collections, or everything."""
        targets = self._as_list(identities)
        self._remove(self._projectors, HandlerRole.PROJECTOR, targets)
        self._remove(self._reactors, HandlerRole.REACTOR, targets)

    def without_projectors(
        self, identities: Iterable[HandlerRef] | None = None
    ) -> None:
        self._remove(self._projectors, HandlerRole.PROJECTOR, self._as_list(identities))

    def without_reactors(self, identities: Iterable[HandlerRef] | None = None) -> None:
        self._remove(self._reactors, HandlerRole.REACTOR, self._as_list(identities))

    @staticmethod
    def _as_list(identities: Any) -> list[HandlerRef] | None:
        if identities is None:
            return None
        if isinstance(identities, (str, type)):
            return [identities]
        return list(identities)

    def _remove(
        self,
        collection: _Collection,
        role: HandlerRole,
        identities: list[HandlerRef] | None,
    ) -> None:
        if identities is None:
            if collection:
                logger.debug("Removing all %d %ss", len(collection), role.value)
            collection.clear()
            return
        for identity in identities:
            key = self._find(collection, identity)
            if key is not None:
                del collection[key]
                logger.debug("Removed %s %s", role.value, handler_identity(key))


__all__ = ["EventHandlerRegistry", "HandlerRef", "import_handler_class"]
