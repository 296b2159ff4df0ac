"""
Job Entity - Represents a job posting and its applicants.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional

from hrsystem.domain.services.candidacy import CandidacyState


class JobState(IntEnum):
    """Lifecycle of a job posting. Only OPEN -> CLOSED is allowed."""

    OPEN = 0
    CLOSED = 1

    @property
    def label(self) -> str:
        return self.name.capitalize()


@dataclass
class JobPosting:
    """
    Job posting entity.

    Attributes:
        name: Unique, non-empty posting name (e.g., "Engineer")
        id: Storage-assigned identifier (None until persisted)
        state: Lifecycle state
        applicants: Candidate username -> candidacy state
    """

    name: str
    id: Optional[int] = None
    state: JobState = JobState.OPEN
    applicants: dict[str, CandidacyState] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate and normalize job data."""
        if not self.name or not self.name.strip():
            raise ValueError("name is required")

        # Rows come back from storage as plain integers
        if not isinstance(self.state, JobState):
            self.state = JobState(self.state)

    @property
    def is_open(self) -> bool:
        """Check if the posting still accepts actions."""
        return self.state == JobState.OPEN

    def close(self) -> bool:
        """
        Close the posting.

        Returns:
            True if the state changed, False if it was already closed.
        """
        if self.state == JobState.CLOSED:
            return False
        self.state = JobState.CLOSED
        return True

    def __str__(self) -> str:
        applicants = ", ".join(
            f"{user}: {state.label}" for user, state in sorted(self.applicants.items())
        )
        return f"Name: {self.name}, State: {self.state.label}\n Applicants: {{{applicants}}}"

    def to_dict(self) -> dict:
        """Convert to dictionary for database storage."""
        return {
            "id": self.id,
            "name": self.name,
            "state": int(self.state),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "JobPosting":
        """Create JobPosting from dictionary (database row)."""
        return cls(
            id=data.get("id"),
            name=data["name"],
            state=JobState(data["state"]),
        )
