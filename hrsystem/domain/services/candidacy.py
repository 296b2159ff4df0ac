"""
Candidacy State Machine - Forward-only application workflow.

    APPLIED --interview--> INTERVIEWED --approve--> APPROVED
                                       --reject---> REJECTED

Any other (state, event) pair leaves the state unchanged. Callers that need
to know whether a transition happened compare the result with the input.
"""

from enum import Enum, IntEnum


class CandidacyState(IntEnum):
    """Progress of one candidate through one job's pipeline.

    Integer values are the persisted representation.
    """

    APPLIED = 0
    INTERVIEWED = 1
    REJECTED = 2
    APPROVED = 3

    @property
    def is_terminal(self) -> bool:
        """Terminal states accept no further events."""
        return self in TERMINAL_STATES

    @property
    def label(self) -> str:
        return self.name.capitalize()


class CandidacyEvent(Enum):
    """Reviewer decisions that drive a candidacy forward."""

    INTERVIEW = "interview"
    APPROVE = "approve"
    REJECT = "reject"


TERMINAL_STATES = frozenset({CandidacyState.REJECTED, CandidacyState.APPROVED})

TRANSITIONS: dict[tuple[CandidacyState, CandidacyEvent], CandidacyState] = {
    (CandidacyState.APPLIED, CandidacyEvent.INTERVIEW): CandidacyState.INTERVIEWED,
    (CandidacyState.INTERVIEWED, CandidacyEvent.APPROVE): CandidacyState.APPROVED,
    (CandidacyState.INTERVIEWED, CandidacyEvent.REJECT): CandidacyState.REJECTED,
}


def advance(state: CandidacyState, event: CandidacyEvent) -> CandidacyState:
    """
    Apply an event to a candidacy state.

    Args:
        state: Current state.
        event: Reviewer decision.

    Returns:
        The next state, or ``state`` itself when the event is not
        permitted from it.
    """
    return TRANSITIONS.get((state, event), state)

