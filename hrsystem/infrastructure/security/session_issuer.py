"""
Session Issuer - Bearer tokens for authenticated candidates.

Holds the token -> session mapping outside persistent storage. A token is
valid until logout or expiry, whichever comes first.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from hrsystem.domain.entities import Candidate
from hrsystem.domain.value_objects import Session
from .crypto import CryptoService


logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionIssuer:
    """
    Mints and validates session tokens.

    Tokens are Fernet tokens over the candidate id, so they cannot be
    guessed and decrypt back to the identity they were issued for.
    """

    def __init__(
        self,
        crypto: CryptoService,
        ttl_seconds: int = 3600,
        clock: Clock = utcnow,
    ) -> None:
        """
        Initialize the issuer.

        Args:
            crypto: Initialized crypto service.
            ttl_seconds: Token lifetime.
            clock: Source of the current UTC time.
        """
        self.crypto = crypto
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._sessions: dict[str, Session] = {}

    @property
    def active_count(self) -> int:
        return len(self._sessions)

    def issue(self, candidate: Candidate) -> Session:
        """Create a session for an authenticated candidate."""
        if candidate.id is None:
            raise ValueError("Cannot issue a session for an unsaved candidate")

        purged = self.purge_expired()
        if purged:
            logger.debug(f"Dropped {purged} expired session(s)")

        session = Session(
            token=self.crypto.encrypt(str(candidate.id)),
            candidate_id=candidate.id,
            username=candidate.username,
            expires_at=self.clock() + timedelta(seconds=self.ttl_seconds),
        )
        self._sessions[session.token] = session
        logger.info(f"Session opened for {candidate.username}")
        return session

    def validate(self, token: str) -> Optional[Session]:
        """
        Resolve a token to its session.

        Returns:
            The session, or None if the token is unknown, revoked or expired.
        """
        session = self._sessions.get(token)
        if session is None:
            return None

        if session.is_expired(self.clock()):
            self._sessions.pop(token, None)
            logger.info(f"Session expired for {session.username}")
            return None

        # Fernet's own ttl guards against a tampered in-memory expiry
        subject = self.crypto.try_decrypt(token, ttl=self.ttl_seconds)
        if subject != str(session.candidate_id):
            self._sessions.pop(token, None)
            return None

        return session

    def revoke(self, token: str) -> bool:
        """End a session. Returns False if the token was not active."""
        session = self._sessions.pop(token, None)
        if session is None:
            return False
        logger.info(f"Session closed for {session.username}")
        return True

    def purge_expired(self) -> int:
        """Drop expired sessions and return how many were removed."""
        now = self.clock()
        expired = [token for token, session in self._sessions.items() if session.is_expired(now)]
        for token in expired:
            del self._sessions[token]
        return len(expired)
