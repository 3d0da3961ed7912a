"""Data model shared by the builder and the transition engine."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from fsm_builder.text import capitalize_first


@dataclass(frozen=True, slots=True)
class LifecycleEvent:
    """Payload passed to every lifecycle callback and global listener."""

    transition: str
    source: str
    dest: str


Callback = Callable[[LifecycleEvent], None]
ErrorHandler = Callable[[str, str, Optional[str]], None]


@dataclass(frozen=True)
class StateSpec:
    """A declared state and its optional enter/leave callbacks."""

    name: str
    on_enter: Callback | None = None
    on_leave: Callback | None = None


@dataclass(frozen=True)
class TransitionSpec:
    """A declared directed edge. ``key`` is derived from (source, dest)."""

    key: str
    source: str
    dest: str
    on_before: Callback | None = None
    on_after: Callback | None = None


@dataclass(frozen=True, slots=True)
class TransitionDescriptor:
    """Engine input: one named edge of the compiled transition table."""

    name: str
    source: str
    dest: str


class HookKind(Enum):
    ENTER_STATE = "onEnter"
    LEAVE_STATE = "onLeave"
    BEFORE_TRANSITION = "onBefore"
    AFTER_TRANSITION = "onAfter"
    ENTER_ANY = "onEnterState"
    LEAVE_ANY = "onLeaveState"


@dataclass(frozen=True, slots=True)
class HookKey:
    """Key of the compiled hook table.

    ``target`` is a state name for ENTER_STATE/LEAVE_STATE, a transition key
    for BEFORE_TRANSITION/AFTER_TRANSITION, and None for the global
    ENTER_ANY/LEAVE_ANY dispatchers.
    """

    kind: HookKind
    target: str | None = None

    @property
    def method_name(self) -> str:
        """Conventional name, e.g. ``onEnterIdle`` or ``onLeaveState``."""
        if self.target is None:
            return self.kind.value
        return self.kind.value + capitalize_first(self.target)


HookTable = dict[HookKey, Callback]
