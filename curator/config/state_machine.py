"""Configuration loading state machine."""

from enum import Enum, auto
from typing import ClassVar


class ConfigState(Enum):
    """Configuration loading states.

    State transitions:
        UNLOADED -> LOADING: Start reading the configuration document
        LOADING -> VALIDATED: Document parsed and validated
        VALIDATED -> READY: Configuration handed to the caller
        Any -> FAILED: Error occurred at any stage
    """

    UNLOADED = auto()
    LOADING = auto()
    VALIDATED = auto()
    READY = auto()
    FAILED = auto()


class ConfigStateError(Exception):
    """Raised when an invalid state transition is attempted."""

    def __init__(self, from_state: ConfigState, to_state: ConfigState) -> None:
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Invalid state transition: {from_state.name} -> {to_state.name}"
        )


class ConfigStateMachine:
    """Enforces valid transitions while a configuration is loaded."""

    VALID_TRANSITIONS: ClassVar[dict[ConfigState, set[ConfigState]]] = {
        ConfigState.UNLOADED: {ConfigState.LOADING, ConfigState.FAILED},
        ConfigState.LOADING: {ConfigState.VALIDATED, ConfigState.FAILED},
        ConfigState.VALIDATED: {ConfigState.READY, ConfigState.FAILED},
        ConfigState.READY: {ConfigState.FAILED},
        ConfigState.FAILED: set(),
    }

    def __init__(self) -> None:
        self._state = ConfigState.UNLOADED

    @property
    def state(self) -> ConfigState:
        """Get the current state."""
        return self._state

    def transition(self, to_state: ConfigState) -> None:
        """Move to ``to_state``.

        Raises:
            ConfigStateError: If the transition is not allowed.
        """
        if to_state not in self.VALID_TRANSITIONS[self._state]:
            raise ConfigStateError(self._state, to_state)
        self._state = to_state
