"""
Session Value Object - Bearer token bound to an authenticated candidate.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional


@dataclass(frozen=True)
class Session:
    """
    Immutable binding of a candidate identity to a bearer token.

    Attributes:
        token: Opaque bearer token
        candidate_id: Authenticated candidate id
        username: Authenticated candidate username
        expires_at: UTC instant after which the token is rejected
    """

    token: str
    candidate_id: int
    username: str
    expires_at: datetime

    def __post_init__(self) -> None:
        if not self.token:
            raise ValueError("token is required")

    def __repr__(self) -> str:
        return (
            f"Session(username={self.username!r}, candidate_id={self.candidate_id!r}, "
            f"expires_at={self.expires_at.isoformat()})"
        )

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Check if the session is past its expiry."""
        return (now or datetime.now(timezone.utc)) >= self.expires_at

    def belongs_to(self, username: str) -> bool:
        return self.username == username
