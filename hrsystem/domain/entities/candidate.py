"""
Candidate Entity - Represents a registered job seeker.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Candidate:
    """
    Candidate identity record.

    Candidates are never edited after registration, hence frozen.

    Attributes:
        username: Unique login name
        credential: Opaque credential digest (never the raw password)
        id: Storage-assigned identifier (None until persisted)
    """

    username: str
    credential: str
    id: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate candidate data."""
        if not self.username:
            raise ValueError("username is required")
        if not self.credential:
            raise ValueError("credential is required")

    def __repr__(self) -> str:
        return f"Candidate(id={self.id!r}, username={self.username!r})"

    def to_dict(self) -> dict:
        """Convert to dictionary for database storage."""
        return {
            "id": self.id,
            "username": self.username,
            "credential": self.credential,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Candidate":
        """Create Candidate from dictionary (database row)."""
        return cls(
            id=data.get("id"),
            username=data["username"],
            credential=data["credential"],
        )
