"""Correlation ID management for dispatch passes and queued work items."""

from __future__ import annotations

import contextlib
from contextvars import ContextVar
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

# ContextVar for correlation/causation tracking across async boundaries.
_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)
_causation_id: ContextVar[str | None] = ContextVar("causation_id", default=None)


def get_correlation_id() -> str | None:
    """Get current correlation ID from context."""
    return _correlation_id.get()


def get_causation_id() -> str | None:
    """Get current causation ID from context."""
    return _causation_id.get()


def get_context_vars() -> dict[str, str | None]:
    """Get all correlation context variables for background work items."""
    return {
        "correlation_id": get_correlation_id(),
        "causation_id": get_causation_id(),
    }


@contextlib.contextmanager
def correlation_context(
    correlation_id: str | None, causation_id: str | None = None
) -> Iterator[None]:
    """Temporarily install correlation/causation IDs, restoring them on exit."""
    correlation_token = _correlation_id.set(correlation_id)
    causation_token = _causation_id.set(causation_id)
    try:
        yield
    finally:
        _causation_id.reset(causation_token)
        _correlation_id.reset(correlation_token)
