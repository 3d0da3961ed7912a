"""Exceptions raised by the finite state machine builder."""
from __future__ import annotations


class FSMError(Exception):
    """Base class for every error raised by fsm_builder."""


class AlreadyStartedError(FSMError):
    """Raised when a configuration method is called after start()."""


class NotStartedError(FSMError):
    """Raised when a runtime method is called before start()."""


class DuplicateStateError(FSMError):
    """Raised when a state name is declared twice."""

    def __init__(self, state: str) -> None:
        self.state = state
        super().__init__(f"Redefined state: {state}")


class DuplicateInitStateError(FSMError):
    """Raised when the init state is set more than once."""

    def __init__(self, init_state: str) -> None:
        self.init_state = init_state
        super().__init__(f"Redefined init state: {init_state}")


class DuplicateTransitionError(FSMError):
    """Raised when a (source, dest) pair is declared twice."""

    def __init__(self, source: str, dest: str) -> None:
        self.source = source
        self.dest = dest
        super().__init__(f"Redefined transition: {source} -> {dest}")


class DuplicateHandlerError(FSMError):
    """Raised when the same global listener is registered twice."""


class UnknownStateError(FSMError):
    """Raised when a state name was never declared with add_state()."""

    def __init__(self, state: str, message: str) -> None:
        self.state = state
        super().__init__(message)


class MissingInitStateError(FSMError):
    """Raised when start() is called before set_init_state()."""


class IllegalTransitionError(FSMError):
    """Raised when go() requests a transition absent from the topology."""

    def __init__(self, transition: str, source: str, dest: str) -> None:
        self.transition = transition
        self.source = source
        self.dest = dest
        super().__init__(f"Transition is not allowed: {source} -> {dest}")
