"""Transition engine protocol and the default implementation on ``transitions``."""
from __future__ import annotations

import logging
from types import SimpleNamespace
from typing import Any, Iterable, Mapping, Protocol

from transitions import Machine

from fsm_builder.types import (
    Callback,
    ErrorHandler,
    HookKey,
    HookKind,
    LifecycleEvent,
    TransitionDescriptor,
)

logger = logging.getLogger(__name__)


class TransitionEngine(Protocol):
    """Runtime primitive a FiniteStateMachine delegates to after start().

    Stores the current state, answers legality checks for named transitions
    and executes them, running the compiled hooks.
    """

    @property
    def state(self) -> str: ...

    def is_state(self, name: str) -> bool: ...

    def cannot(self, transition: str) -> bool:
        """Return True if *transition* is not allowed from the current state.

        Implementations notify their invalid-transition handler before
        returning True.
        """
        ...

    def fire(self, transition: str) -> None: ...


class EngineFactory(Protocol):
    def __call__(
        self,
        *,
        initial: str,
        transitions: list[TransitionDescriptor],
        hooks: Mapping[HookKey, Callback],
        on_invalid_transition: ErrorHandler,
    ) -> TransitionEngine: ...


def _adapt(callback: Callback) -> Callback:
    """Wrap *callback* so it receives a LifecycleEvent instead of EventData."""

    def invoke(event_data: Any) -> None:
        callback(LifecycleEvent(
            transition=event_data.event.name,
            source=event_data.transition.source,
            dest=event_data.transition.dest,
        ))

    return invoke


def _hooks_for(hooks: Mapping[HookKey, Callback], *keys: HookKey) -> list[Callback]:
    return [_adapt(hooks[key]) for key in keys if key in hooks]


class TransitionsEngine:
    """TransitionEngine backed by :class:`transitions.Machine`.

    Per transition, callbacks run in this order: the transition's before hook,
    the source state's leave hook, the global leave dispatcher, the state
    change, the destination's enter hook, the global enter dispatcher and
    finally the transition's after hook.
    """

    def __init__(
        self,
        *,
        initial: str,
        transitions: list[TransitionDescriptor],
        hooks: Mapping[HookKey, Callback],
        on_invalid_transition: ErrorHandler,
    ) -> None:
        self._on_invalid_transition = on_invalid_transition
        self._dests = {t.name: t.dest for t in transitions}
        self._model = SimpleNamespace()
        self._machine = Machine(
            model=self._model,
            states=[
                {
                    "name": name,
                    "on_enter": _hooks_for(
                        hooks,
                        HookKey(HookKind.ENTER_STATE, name),
                        HookKey(HookKind.ENTER_ANY),
                    ),
                    "on_exit": _hooks_for(
                        hooks,
                        HookKey(HookKind.LEAVE_STATE, name),
                        HookKey(HookKind.LEAVE_ANY),
                    ),
                }
                for name in _state_names(initial, transitions)
            ],
            transitions=[
                {
                    "trigger": t.name,
                    "source": t.source,
                    "dest": t.dest,
                    "before": _hooks_for(hooks, HookKey(HookKind.BEFORE_TRANSITION, t.name)),
                    "after": _hooks_for(hooks, HookKey(HookKind.AFTER_TRANSITION, t.name)),
                }
                for t in transitions
            ],
            initial=initial,
            send_event=True,
            auto_transitions=False,
        )

    @property
    def state(self) -> str:
        return self._model.state

    def is_state(self, name: str) -> bool:
        return self._model.state == name

    def cannot(self, transition: str) -> bool:
        source = self._model.state
        if transition in self._machine.get_triggers(source):
            return False
        self._on_invalid_transition(transition, source, self._dests.get(transition))
        return True

    def fire(self, transition: str) -> None:
        logger.debug("Firing %s from %s", transition, self._model.state)
        self._model.trigger(transition)


def _state_names(initial: str, transitions: Iterable[TransitionDescriptor]) -> list[str]:
    """Initial state first, then every endpoint in declaration order."""
    names = [initial]
    for t in transitions:
        for name in (t.source, t.dest):
            if name not in names:
                names.append(name)
    return names
