"""IHandlerQueue — the asynchronous collaborator for queued handlers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..work_item import QueuedWorkItem


@runtime_checkable
class IHandlerQueue(Protocol):
    """
    Port for deferring handler invocations to a background worker.

    The queue is expected to deliver each accepted work item at least once.
    Retries and dead-lettering belong to the adapter, not to the dispatch core.
    """

    async def enqueue(self, work_item: QueuedWorkItem) -> None:
        """
        Submit *work_item* for asynchronous execution.

        Should return as soon as the item is accepted; raising signals a
        transport failure, which the dispatcher treats as a handler failure.
        """
        ...
