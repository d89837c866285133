"""Projectionist configuration."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ProjectionistConfig(BaseModel):
    """Configuration for a :class:`~cqrs_ddd_projectionist.Projectionist`.

    ``catch_exceptions`` chooses between fail-fast dispatch (the default) and
    contained handler failures.
    """

    catch_exceptions: bool = False

    # Topic used by PublisherHandlerQueue when none is given explicitly
    queue_topic: str = Field(default="projectionist.handlers", min_length=1)
