"""
Credentials Value Object - Immutable login input.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Credentials:
    """
    Immutable value object for a username/password pair as typed by the user.

    Only the credential digest is ever persisted; this object lives for the
    duration of a register or login call.

    Attributes:
        username: Candidate username
        password: Plain text password
    """

    username: str
    password: str

    def __post_init__(self) -> None:
        """Validate credentials."""
        if not self.username:
            raise ValueError("Username is required")
        if not self.password:
            raise ValueError("Password is required")

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, password={self.masked().password!r})"

    def masked(self) -> "Credentials":
        """Return credentials with masked password for display."""
        masked_pw = "*" * min(len(self.password), 8)
        return Credentials(username=self.username, password=masked_pw)
