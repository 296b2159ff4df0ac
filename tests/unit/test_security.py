"""
Unit tests for CryptoService and SessionIssuer.
"""

from pathlib import Path

import pytest
from cryptography.fernet import InvalidToken

from hrsystem.domain.entities import Candidate
from hrsystem.infrastructure.security import CryptoService, SessionIssuer


@pytest.fixture
def issuer(crypto: CryptoService, clock) -> SessionIssuer:
    return SessionIssuer(crypto, ttl_seconds=60, clock=clock)


@pytest.fixture
def alice() -> Candidate:
    return Candidate(username="alice", credential="digest", id=7)


class TestCryptoService:
    """Tests for token encryption and credential digests."""

    def test_requires_initialize(self):
        with pytest.raises(RuntimeError, match="not initialized"):
            CryptoService().encrypt("x")

    def test_key_file_is_reused(self, tmp_path: Path):
        """A second service over the same key file reads earlier tokens."""
        key_path = tmp_path / ".session_key"
        first = CryptoService(key_path)
        first.initialize()
        token = first.encrypt("7")

        second = CryptoService(key_path)
        second.initialize()

        assert second.decrypt(token) == "7"
        assert key_path.stat().st_mode & 0o777 == 0o600

    def test_foreign_token_rejected(self, crypto: CryptoService):
        other = CryptoService()
        other.initialize()
        token = other.encrypt("7")

        with pytest.raises(InvalidToken):
            crypto.decrypt(token)
        assert crypto.try_decrypt(token) is None
        assert crypto.try_decrypt("not-a-token") is None

    def test_credential_digest(self, crypto: CryptoService):
        """Digests verify the right credential only and are salted."""
        digest = crypto.hash_credential("pw")

        assert digest.startswith("scrypt$16$")
        assert crypto.verify_credential("pw", digest) is True
        assert crypto.verify_credential("wrong", digest) is False
        assert crypto.hash_credential("pw") != digest

    def test_malformed_digest_never_matches(self, crypto: CryptoService):
        assert crypto.verify_credential("pw", "pw") is False
        assert crypto.verify_credential("pw", "bcrypt$1$a$b") is False

    async def test_async_digest(self, crypto: CryptoService):
        digest = await crypto.hash_credential_async("pw")

        assert await crypto.verify_credential_async("pw", digest) is True
        assert await crypto.verify_credential_async("wrong", digest) is False


class TestSessionIssuer:
    """Tests for bearer token sessions."""

    def test_issue_and_validate(self, issuer: SessionIssuer, alice: Candidate):
        session = issuer.issue(alice)

        assert issuer.validate(session.token) == session
        assert session.username == "alice"
        assert session.candidate_id == 7

    def test_tokens_are_unique(self, issuer: SessionIssuer, alice: Candidate):
        """Each login gets its own unguessable token."""
        assert issuer.issue(alice).token != issuer.issue(alice).token
        assert issuer.active_count == 2

    def test_unknown_token(self, issuer: SessionIssuer):
        assert issuer.validate("0") is None

    def test_revoke(self, issuer: SessionIssuer, alice: Candidate):
        session = issuer.issue(alice)

        assert issuer.revoke(session.token) is True
        assert issuer.validate(session.token) is None
        assert issuer.revoke(session.token) is False

    def test_expiry(self, issuer: SessionIssuer, alice: Candidate, clock):
        """Tokens stop working once the ttl has elapsed."""
        session = issuer.issue(alice)
        clock.advance(59)
        assert issuer.validate(session.token) is not None

        clock.advance(1)
        assert issuer.validate(session.token) is None
        assert issuer.active_count == 0

    def test_purge_expired(self, issuer: SessionIssuer, alice: Candidate, clock):
        issuer.issue(alice)
        clock.advance(30)
        fresh = issuer.issue(alice)
        clock.advance(30)

        assert issuer.purge_expired() == 1
        assert issuer.validate(fresh.token) is not None

    def test_issue_drops_expired(self, issuer: SessionIssuer, alice: Candidate, clock):
        """Opening a session clears the ones already past expiry."""
        issuer.issue(alice)
        issuer.issue(alice)
        clock.advance(60)

        issuer.issue(alice)

        assert issuer.active_count == 1

    def test_unsaved_candidate(self, issuer: SessionIssuer):
        with pytest.raises(ValueError):
            issuer.issue(Candidate(username="alice", credential="digest"))
