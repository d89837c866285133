from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class IMessagePublisher(Protocol):
    """
    Port for publishing messages to a transport (RabbitMQ, Kafka, SQS, …).

    Any cqrs-ddd messaging publisher satisfies it structurally.
    """

    async def publish(self, topic: str, message: Any, **kwargs: Any) -> None:
        """
        Publish *message* to *topic*.

        Args:
            topic: Routing key, topic name, or exchange.
            message: Payload — may be a work item, dict, or bytes.
            **kwargs: Transport-specific metadata
                (``correlation_id``, ``causation_id``, headers, …).
        """
        ...
