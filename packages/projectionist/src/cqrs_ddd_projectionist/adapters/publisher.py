"""PublisherHandlerQueue — sends work items through a message publisher."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..config import ProjectionistConfig
from ..ports.queue import IHandlerQueue

if TYPE_CHECKING:
    from ..ports.messaging import IMessagePublisher
    from ..work_item import QueuedWorkItem

logger = logging.getLogger(__name__)


class PublisherHandlerQueue(IHandlerQueue):
    """Adapts any ``IMessagePublisher`` (RabbitMQ, Kafka, SQS, in-memory…).

    The work item is published as-is; its tags and correlation IDs are also
    passed as publisher metadata so the transport can expose them to
    monitoring and filtering tools.
    """

    def __init__(
        self,
        publisher: IMessagePublisher,
        topic: str | None = None,
    ) -> None:
        self._publisher = publisher
        self._topic = topic or ProjectionistConfig().queue_topic

    @property
    def topic(self) -> str:
        return self._topic

    async def enqueue(self, work_item: QueuedWorkItem) -> None:
        await self._publisher.publish(
            self._topic,
            work_item,
            correlation_id=work_item.correlation_id,
            causation_id=work_item.causation_id,
            tags=list(work_item.tags),
            message_id=work_item.work_item_id,
        )
        logger.debug(
            "Published work item %s to %s", work_item.work_item_id, self._topic
        )
