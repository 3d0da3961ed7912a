"""Global enter/leave listener registry."""
from __future__ import annotations

from typing import Iterator

from fsm_builder.errors import DuplicateHandlerError
from fsm_builder.types import Callback, LifecycleEvent


class ListenerList:
    """Ordered set of listeners, invoked in registration order."""

    def __init__(self, label: str) -> None:
        self._label = label
        self._listeners: list[Callback] = []

    def add(self, listener: Callback) -> None:
        """Append a listener. Raises DuplicateHandlerError if already present.

        Listeners are matched by identity, never by ``==``.
        """
        if listener in self:
            raise DuplicateHandlerError(
                f"Listener {listener!r} is already registered for {self._label}"
            )
        self._listeners.append(listener)

    def remove(self, listener: Callback) -> None:
        """Remove the first identical listener. Unknown listeners are ignored."""
        for index, registered in enumerate(self._listeners):
            if registered is listener:
                del self._listeners[index]
                return

    def dispatch(self, event: LifecycleEvent) -> None:
        # Iterate a snapshot so listeners may detach themselves mid-dispatch.
        for listener in list(self._listeners):
            listener(event)

    def __contains__(self, listener: object) -> bool:
        return any(registered is listener for registered in self._listeners)

    def __iter__(self) -> Iterator[Callback]:
        return iter(list(self._listeners))

    def __len__(self) -> int:
        return len(self._listeners)


class HandlerRegistry:
    """Holds the enter-any-state and leave-any-state listener lists.

    The engine receives the bound ``dispatch`` methods of both lists, so
    listeners attached after the machine has started still fire.
    """

    def __init__(self) -> None:
        self.enter = ListenerList("enter state")
        self.leave = ListenerList("leave state")
