"""QueuedWorkItem — envelope handed to the queue for deferred handlers."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .correlation import get_context_vars
from .domain.events import event_type_id
from .handlers import handler_identity


class QueuedWorkItem(BaseModel):
    """Immutable description of one deferred handler invocation.

    Carries the event itself, the handler identity (dotted import path),
    the resolved method and the handler's tags, plus the correlation context
    that was active when the event was dispatched.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    work_item_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    event: Any
    event_type: str = Field(..., description="Type identifier of the event")
    handler: str = Field(..., description="Dotted path of the handler class")
    method: str
    tags: list[str] = Field(default_factory=list)
    correlation_id: str | None = None
    causation_id: str | None = None
    enqueued_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def for_handler(
        cls,
        event: Any,
        handler: Any,
        method: str,
        tags: list[str] | None = None,
    ) -> QueuedWorkItem:
        """Build a work item, capturing the current correlation context.

        The context wins; the event's own ``correlation_id`` is the fallback
        and the event id becomes the causation id when none is set.
        """
        context = get_context_vars()
        correlation_id = context["correlation_id"] or getattr(
            event, "correlation_id", None
        )
        causation_id = context["causation_id"] or getattr(event, "event_id", None)
        return cls(
            event=event,
            event_type=event_type_id(event),
            handler=handler_identity(handler),
            method=method,
            tags=list(tags or []),
            correlation_id=correlation_id,
            causation_id=str(causation_id) if causation_id is not None else None,
        )
