"""fsm-builder - Declarative finite state machines with lifecycle callbacks."""
from __future__ import annotations

from fsm_builder.config import FSMConfig
from fsm_builder.engine import EngineFactory, TransitionEngine, TransitionsEngine
from fsm_builder.errors import (
    AlreadyStartedError,
    DuplicateHandlerError,
    DuplicateInitStateError,
    DuplicateStateError,
    DuplicateTransitionError,
    FSMError,
    IllegalTransitionError,
    MissingInitStateError,
    NotStartedError,
    UnknownStateError,
)
from fsm_builder.machine import FiniteStateMachine, make_default_error_handler
from fsm_builder.types import HookKey, HookKind, LifecycleEvent, TransitionDescriptor

__all__ = [
    "FiniteStateMachine",
    "FSMConfig",
    "TransitionEngine",
    "TransitionsEngine",
    "EngineFactory",
    "LifecycleEvent",
    "HookKey",
    "HookKind",
    "TransitionDescriptor",
    "make_default_error_handler",
    "FSMError",
    "AlreadyStartedError",
    "NotStartedError",
    "DuplicateStateError",
    "DuplicateInitStateError",
    "DuplicateTransitionError",
    "DuplicateHandlerError",
    "UnknownStateError",
    "MissingInitStateError",
    "IllegalTransitionError",
]
