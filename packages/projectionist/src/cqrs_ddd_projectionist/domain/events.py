"""Domain Event base class and event type identifiers."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def event_type_id(event: Any) -> str:
    """Return the stable type identifier of an event instance or class.

    The identifier is the fully-qualified ``module.QualName`` of the class.
    """
    cls = event if isinstance(event, type) else type(event)
    return f"{cls.__module__}.{cls.__qualname__}"


class DomainEvent(BaseModel):
    """Base class for all Domain Events.

    Events are immutable and carry full tracing context. Handlers receive the
    very instance that was dispatched; nothing in the dispatch core copies or
    mutates it.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    event_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    occurred_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    version: int = 1
    aggregate_id: str | None = Field(
        default=None, description="ID of the aggregate instance this event belongs to"
    )
    aggregate_type: str | None = Field(
        default=None,
        description=(
            "Class name or type identifier of the aggregate (e.g., 'Account')"
        ),
    )
    metadata: dict[str, object] = Field(default_factory=dict)
    correlation_id: str | None = None
    causation_id: str | None = None

    @classmethod
    def event_type_id(cls) -> str:
        """Return the fully-qualified type identifier of this event class."""
        return event_type_id(cls)
