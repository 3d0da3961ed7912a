"""FSM configuration dataclass."""
from __future__ import annotations

import logging
import string
from dataclasses import dataclass


@dataclass(frozen=True)
class FSMConfig:
    """Immutable configuration for a FiniteStateMachine.

    Attributes:
        transition_key_format: Template deriving a transition key from its
            ``{from}`` and ``{to}`` states. No other placeholder is allowed.
        error_message_format: Template for the default invalid-transition
            notification. Placeholders: ``{name}``, ``{from}``, ``{to}``.
        error_log_level: Level the default notification is logged at.
    """

    transition_key_format: str = "{from}->{to}"
    error_message_format: str = "Transition {name} from {from} to {to} fails."
    error_log_level: int = logging.WARNING

    def __post_init__(self) -> None:
        fields = {
            name
            for _, name, _, _ in string.Formatter().parse(self.transition_key_format)
            if name is not None
        }
        if fields != {"from", "to"}:
            raise ValueError(
                "transition_key_format must use exactly the {from} and {to} "
                f"placeholders, got {self.transition_key_format!r}"
            )
