"""cqrs-ddd-projectionist — event handler registry and dispatch core.

Routes domain events to projectors and reactors, inline or through a
handler queue, under a fail-fast or catch-and-continue exception policy.
"""

from __future__ import annotations

from .adapters import InMemoryHandlerQueue, PublisherHandlerQueue
from .config import ProjectionistConfig
from .correlation import (
    correlation_context,
    get_causation_id,
    get_context_vars,
    get_correlation_id,
)
from .dispatcher import DispatchExecutor
from .domain import DomainEvent, event_type_id
from .handlers import EventHandler, Projector, Reactor, handler_identity
from .instrumentation import (
    DispatchAttributes,
    HookRegistration,
    HookRegistry,
    InstrumentationHook,
    get_hook_registry,
    set_hook_registry,
)
from .policy import DispatchReport, DispatchState, ExceptionPolicy, InvocationResult
from .ports import (
    HandlerRole,
    HandlesExceptions,
    IEventHandler,
    IHandlerQueue,
    IMessagePublisher,
)
from .primitives import (
    HandlerError,
    HandlerInvocationError,
    HandlerResolutionError,
    InvalidEventHandlerError,
    ProjectionistError,
    WorkItemError,
)
from .projectionist import Projectionist
from .registry import EventHandlerRegistry, HandlerRef
from .routing import DispatchRecord, EventRouter
from .work_item import QueuedWorkItem
from .worker import QueuedHandlerWorker

__all__: list[str] = [
    # Entry point
    "Projectionist",
    "ProjectionistConfig",
    # Handlers
    "EventHandler",
    "Projector",
    "Reactor",
    "HandlerRole",
    "IEventHandler",
    "HandlesExceptions",
    "handler_identity",
    # Core
    "EventHandlerRegistry",
    "HandlerRef",
    "EventRouter",
    "DispatchRecord",
    "DispatchExecutor",
    "ExceptionPolicy",
    "InvocationResult",
    "DispatchReport",
    "DispatchState",
    # Queue
    "IHandlerQueue",
    "IMessagePublisher",
    "InMemoryHandlerQueue",
    "PublisherHandlerQueue",
    "QueuedWorkItem",
    "QueuedHandlerWorker",
    # Domain
    "DomainEvent",
    "event_type_id",
    # Correlation & instrumentation
    "correlation_context",
    "get_causation_id",
    "get_context_vars",
    "get_correlation_id",
    "DispatchAttributes",
    "HookRegistration",
    "HookRegistry",
    "InstrumentationHook",
    "get_hook_registry",
    "set_hook_registry",
    # Errors
    "ProjectionistError",
    "HandlerError",
    "HandlerResolutionError",
    "InvalidEventHandlerError",
    "HandlerInvocationError",
    "WorkItemError",
]
