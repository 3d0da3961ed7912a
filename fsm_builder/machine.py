"""FiniteStateMachine - declarative builder and runtime facade."""
from __future__ import annotations

import logging

from fsm_builder.config import FSMConfig
from fsm_builder.engine import EngineFactory, TransitionEngine, TransitionsEngine
from fsm_builder.errors import (
    AlreadyStartedError,
    DuplicateInitStateError,
    DuplicateStateError,
    DuplicateTransitionError,
    IllegalTransitionError,
    MissingInitStateError,
    NotStartedError,
    UnknownStateError,
)
from fsm_builder.handlers import HandlerRegistry
from fsm_builder.text import substitute
from fsm_builder.types import (
    Callback,
    ErrorHandler,
    HookKey,
    HookKind,
    HookTable,
    StateSpec,
    TransitionDescriptor,
    TransitionSpec,
)

logger = logging.getLogger(__name__)


def make_default_error_handler(config: FSMConfig) -> ErrorHandler:
    """Return a handler that logs invalid transitions using *config*'s format."""

    def log_invalid_transition(name: str, source: str, dest: str | None) -> None:
        logger.log(
            config.error_log_level,
            substitute(config.error_message_format, {"name": name, "from": source, "to": dest}),
        )

    return log_invalid_transition


class FiniteStateMachine:
    """Finite state machine with a configuration stage and a running stage.

    States, the init state, transitions and the error handler are declared
    while configuring. ``start()`` compiles them into a TransitionEngine and
    freezes the topology; afterwards only ``go()`` and ``current()`` apply.
    Global enter/leave listeners may be attached in either stage.
    """

    def __init__(
        self,
        config: FSMConfig | None = None,
        engine_factory: EngineFactory | None = None,
    ) -> None:
        self._config = config if config is not None else FSMConfig()
        self._engine_factory: EngineFactory = (
            engine_factory if engine_factory is not None else TransitionsEngine
        )
        self._engine: TransitionEngine | None = None
        self._init_state: str | None = None
        self._error_handler: ErrorHandler | None = None
        self._states: dict[str, StateSpec] = {}
        self._transitions: dict[str, TransitionSpec] = {}
        self._handlers = HandlerRegistry()

    @property
    def config(self) -> FSMConfig:
        return self._config

    @property
    def started(self) -> bool:
        return self._engine is not None

    @property
    def init_state(self) -> str | None:
        return self._init_state

    def states(self) -> list[str]:
        """Declared state names in declaration order."""
        return list(self._states)

    def transitions(self) -> list[str]:
        """Declared transition keys in declaration order."""
        return list(self._transitions)

    def transition_key(self, source: str, dest: str) -> str:
        return substitute(self._config.transition_key_format, {"from": source, "to": dest})

    def _ensure_configure_stage(self) -> None:
        if self._engine is not None:
            raise AlreadyStartedError("State machine has started.")

    def _ensure_running_stage(self) -> TransitionEngine:
        if self._engine is None:
            raise NotStartedError("State machine has not yet started.")
        return self._engine

    # -- configuration ------------------------------------------------------

    def add_state(
        self,
        name: str,
        on_enter: Callback | None = None,
        on_leave: Callback | None = None,
    ) -> FiniteStateMachine:
        """Declare a state with optional enter/leave callbacks.

        Raises ValueError if *name* is not a non-empty string.
        """
        self._ensure_configure_stage()
        if not isinstance(name, str) or not name:
            raise ValueError(f"State name must be a non-empty string, got {name!r}")
        if name in self._states:
            raise DuplicateStateError(name)
        self._states[name] = StateSpec(name, on_enter=on_enter, on_leave=on_leave)
        return self

    def set_init_state(self, name: str) -> FiniteStateMachine:
        """Designate the initial state. May only be called once.

        The name need not be declared yet; start() checks it.
        """
        self._ensure_configure_stage()
        if self._init_state is not None:
            raise DuplicateInitStateError(self._init_state)
        self._init_state = name
        return self

    def add_transition(
        self,
        source: str,
        dest: str,
        on_after: Callback | None = None,
        on_before: Callback | None = None,
    ) -> FiniteStateMachine:
        """Declare the directed transition *source* -> *dest*.

        The transition key comes from ``FSMConfig.transition_key_format``.
        State names containing the format's separator can collide: with the
        default ``"{from}->{to}"``, ``("a->b", "c")`` and ``("a", "b->c")``
        both yield ``"a->b->c"``, and the second declaration raises
        DuplicateTransitionError.
        """
        self._ensure_configure_stage()
        if source not in self._states:
            raise UnknownStateError(source, f"Undefined source state: {source}")
        if dest not in self._states:
            raise UnknownStateError(dest, f"Undefined target state: {dest}")
        key = self.transition_key(source, dest)
        if key in self._transitions:
            raise DuplicateTransitionError(source, dest)
        self._transitions[key] = TransitionSpec(
            key, source, dest, on_before=on_before, on_after=on_after,
        )
        return self

    def add_error_handler(self, fn: ErrorHandler) -> FiniteStateMachine:
        """Set the invalid-transition handler, replacing any previous one.

        ``fn(transition, source, dest)`` is called whenever go() requests a
        transition the topology does not allow. ``dest`` is None when the
        requested transition was never declared.
        """
        self._ensure_configure_stage()
        if self._error_handler is not None:
            logger.debug("Replacing error handler %r with %r", self._error_handler, fn)
        self._error_handler = fn
        return self

    def start(self) -> FiniteStateMachine:
        """Compile the declared topology and enter the running stage."""
        self._ensure_configure_stage()
        if self._init_state is None:
            raise MissingInitStateError("Init state has not been defined.")
        if self._init_state not in self._states:
            raise UnknownStateError(
                self._init_state, f"Undefined init state: {self._init_state}"
            )

        descriptors = [
            TransitionDescriptor(spec.key, spec.source, spec.dest)
            for spec in self._transitions.values()
        ]
        hooks = self._compile_hooks()
        error_handler = self._error_handler or make_default_error_handler(self._config)
        self._engine = self._engine_factory(
            initial=self._init_state,
            transitions=descriptors,
            hooks=hooks,
            on_invalid_transition=error_handler,
        )
        logger.debug(
            "State machine started in %s with %d states and %d transitions",
            self._init_state, len(self._states), len(descriptors),
        )
        return self

    def _compile_hooks(self) -> HookTable:
        hooks: HookTable = {}
        for key, spec in self._transitions.items():
            if spec.on_before is not None:
                hooks[HookKey(HookKind.BEFORE_TRANSITION, key)] = spec.on_before
            if spec.on_after is not None:
                hooks[HookKey(HookKind.AFTER_TRANSITION, key)] = spec.on_after
        for name, spec in self._states.items():
            if spec.on_enter is not None:
                hooks[HookKey(HookKind.ENTER_STATE, name)] = spec.on_enter
            if spec.on_leave is not None:
                hooks[HookKey(HookKind.LEAVE_STATE, name)] = spec.on_leave
        hooks[HookKey(HookKind.ENTER_ANY)] = self._handlers.enter.dispatch
        hooks[HookKey(HookKind.LEAVE_ANY)] = self._handlers.leave.dispatch
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Compiled hooks: %s", ", ".join(k.method_name for k in hooks))
        return hooks

    # -- global listeners ---------------------------------------------------

    def on_enter_state(self, handler: Callback) -> FiniteStateMachine:
        """Call *handler* on every state entry. Raises DuplicateHandlerError."""
        self._handlers.enter.add(handler)
        return self

    def on_exit_state(self, handler: Callback) -> FiniteStateMachine:
        """Call *handler* on every state exit. Raises DuplicateHandlerError."""
        self._handlers.leave.add(handler)
        return self

    def off_enter_state(self, handler: Callback) -> FiniteStateMachine:
        self._handlers.enter.remove(handler)
        return self

    def off_exit_state(self, handler: Callback) -> FiniteStateMachine:
        self._handlers.leave.remove(handler)
        return self

    # -- runtime ------------------------------------------------------------

    def go(self, dest: str) -> FiniteStateMachine:
        """Move to *dest* through the declared transition from the current state.

        Going to the current state is a no-op: no callback or listener fires.
        Raises UnknownStateError for undeclared states and
        IllegalTransitionError when no transition leads from the current
        state to *dest* (after the error handler has been notified).
        """
        engine = self._ensure_running_stage()
        if dest not in self._states:
            raise UnknownStateError(dest, f"Go to undefined state: {dest}")
        if engine.is_state(dest):
            logger.debug("Already in %s, ignoring self-transition", dest)
            return self
        source = engine.state
        transition = self.transition_key(source, dest)
        if engine.cannot(transition):
            raise IllegalTransitionError(transition, source, dest)
        engine.fire(transition)
        logger.debug("Transitioned %s -> %s", source, dest)
        return self

    def current(self) -> str:
        """Return the current state name."""
        return self._ensure_running_stage().state
