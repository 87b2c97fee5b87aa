"""State machine for a single category curation pass."""

from enum import Enum

import structlog


logger = structlog.get_logger()


class PassState(str, Enum):
    """State of a curation pass.

    - CANDIDATES_LOADED: Candidates and judgments are materialized
    - RANKED: Ranking engine produced the ordered list
    - RERANKED: Exclusions and focus re-ranking applied (possibly no-op)
    - SELECTED: Diversity selection produced the shortlist
    """

    CANDIDATES_LOADED = "CANDIDATES_LOADED"
    RANKED = "RANKED"
    RERANKED = "RERANKED"
    SELECTED = "SELECTED"


_VALID_TRANSITIONS: dict[PassState, set[PassState]] = {
    PassState.CANDIDATES_LOADED: {PassState.RANKED},
    PassState.RANKED: {PassState.RERANKED},
    PassState.RERANKED: {PassState.SELECTED},
    PassState.SELECTED: set(),
}


class PipelineStateError(Exception):
    """Raised when an illegal pass state transition is attempted."""

    def __init__(
        self,
        run_id: str,
        from_state: PassState,
        to_state: PassState,
    ) -> None:
        self.run_id = run_id
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Illegal pass state transition for run '{run_id}': "
            f"{from_state.value} -> {to_state.value}"
        )


class PassStateMachine:
    """Tracks one pass through load -> rank -> rerank -> select."""

    def __init__(
        self,
        run_id: str,
        category: str,
        initial_state: PassState = PassState.CANDIDATES_LOADED,
    ) -> None:
        """Initialize the state machine.

        Args:
            run_id: Identifier for the current run.
            category: Category of the pass.
            initial_state: Starting state.
        """
        self._run_id = run_id
        self._state = initial_state
        self._log = logger.bind(component="pipeline", run_id=run_id, category=category)

    @property
    def run_id(self) -> str:
        """Get the run identifier."""
        return self._run_id

    @property
    def state(self) -> PassState:
        """Get the current state."""
        return self._state

    @property
    def is_terminal(self) -> bool:
        """Check if current state is terminal."""
        return self._state == PassState.SELECTED

    def can_transition_to(self, target: PassState) -> bool:
        """Check if a transition to the target state is valid."""
        return target in _VALID_TRANSITIONS.get(self._state, set())

    def transition_to(self, target: PassState) -> None:
        """Transition to a new state.

        Raises:
            PipelineStateError: If the transition is invalid.
        """
        if not self.can_transition_to(target):
            self._log.error(
                "illegal_pass_state_transition",
                from_state=self._state.value,
                to_state=target.value,
            )
            raise PipelineStateError(self._run_id, self._state, target)

        old_state = self._state
        self._state = target
        self._log.debug(
            "pass_state_transition",
            from_state=old_state.value,
            to_state=target.value,
        )

    def to_ranked(self) -> None:
        """Transition to RANKED state."""
        self.transition_to(PassState.RANKED)

    def to_reranked(self) -> None:
        """Transition to RERANKED state."""
        self.transition_to(PassState.RERANKED)

    def to_selected(self) -> None:
        """Transition to SELECTED state."""
        self.transition_to(PassState.SELECTED)
