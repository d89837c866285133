"""InMemoryHandlerQueue — IHandlerQueue with assertion helpers for tests."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ...handlers import handler_identity
from ...ports.queue import IHandlerQueue

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from ...work_item import QueuedWorkItem


class InMemoryHandlerQueue(IHandlerQueue):
    """Buffers work items in memory until :meth:`drain` is called.

    ``enqueue`` only records the item, mirroring fire-and-forget submission
    to a real broker. ``get_enqueued()`` and ``assert_enqueued()`` support
    test assertions.
    """

    def __init__(self) -> None:
        self._items: list[QueuedWorkItem] = []

    async def enqueue(self, work_item: QueuedWorkItem) -> None:
        self._items.append(work_item)

    def get_enqueued(self, handler: Any = None) -> list[QueuedWorkItem]:
        """Return buffered items, optionally only those for *handler*."""
        if handler is None:
            return list(self._items)
        identity = handler_identity(handler)
        return [item for item in self._items if item.handler == identity]

    def assert_enqueued(
        self,
        handler: Any = None,
        count: int = 1,
        tags: list[str] | None = None,
    ) -> None:
        """Assert that exactly *count* matching items are buffered.

        Optionally restrict to a handler and to an exact list of tags.
        Raises AssertionError if not met.
        """
        items = self.get_enqueued(handler)
        if tags is not None:
            items = [item for item in items if item.tags == tags]
        assert len(items) == count, (
            f"Expected {count} work item(s) for handler={handler!r} "
            f"tags={tags!r}, got {len(items)}. Enqueued: "
            f"{[(item.handler, item.tags) for item in self._items]}"
        )

    async def drain(
        self, worker: Callable[[QueuedWorkItem], Awaitable[None]]
    ) -> int:
        """Hand every buffered item to *worker* in FIFO order.

        Items are removed before they are processed; a failing item stays
        removed and the exception propagates.
        """
        processed = 0
        while self._items:
            item = self._items.pop(0)
            await worker(item)
            processed += 1
        return processed

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)
