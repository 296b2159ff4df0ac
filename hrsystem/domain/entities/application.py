"""
Application Entity - One candidate's candidacy for one job posting.
"""

from dataclasses import dataclass

from hrsystem.domain.services.candidacy import (
    CandidacyEvent,
    CandidacyState,
    advance,
)


@dataclass
class Application:
    """
    Application entity keyed by the (job_id, candidate_id) pair.

    Corresponds to the `applications` table in the database schema.

    Attributes:
        job_id: Posting the candidate applied to
        candidate_id: Applying candidate
        state: Current candidacy state
    """

    job_id: int
    candidate_id: int
    state: CandidacyState = CandidacyState.APPLIED

    def __post_init__(self) -> None:
        """Validate and normalize application data."""
        if self.job_id is None or self.candidate_id is None:
            raise ValueError("job_id and candidate_id are required")

        # Convert stored integer state to enum if needed
        if not isinstance(self.state, CandidacyState):
            self.state = CandidacyState(self.state)

    @property
    def key(self) -> tuple[int, int]:
        """Composite storage key."""
        return (self.job_id, self.candidate_id)

    def apply_event(self, event: CandidacyEvent) -> bool:
        """
        Advance the candidacy in place.

        Returns:
            True if the state changed, False if the event was a no-op.
        """
        previous = self.state
        self.state = advance(self.state, event)
        return self.state != previous

    @property
    def is_approved(self) -> bool:
        return self.state == CandidacyState.APPROVED

    def to_dict(self) -> dict:
        """Convert to dictionary for database storage."""
        return {
            "job_id": self.job_id,
            "candidate_id": self.candidate_id,
            "state": int(self.state),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Application":
        """Create Application from dictionary (database row)."""
        return cls(
            job_id=data["job_id"],
            candidate_id=data["candidate_id"],
            state=CandidacyState(data["state"]),
        )
