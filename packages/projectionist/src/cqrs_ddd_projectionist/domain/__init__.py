"""Domain primitives: events."""

from __future__ import annotations

from .events import DomainEvent, event_type_id

__all__ = ["DomainEvent", "event_type_id"]
