"""
Unit tests for domain entities and value objects.
"""

import pytest
from datetime import datetime, timedelta, timezone

from hrsystem.domain.entities import Application, Candidate, JobPosting, JobState
from hrsystem.domain.services import CandidacyEvent, CandidacyState
from hrsystem.domain.value_objects import Credentials, Session


class TestJobPosting:
    """Tests for JobPosting entity."""

    def test_create_job(self):
        """Should start Open with no applicants."""
        job = JobPosting(name="Engineer")

        assert job.name == "Engineer"
        assert job.state == JobState.OPEN
        assert job.is_open is True
        assert job.applicants == {}

    def test_job_requires_name(self):
        """Should raise error without a name."""
        with pytest.raises(ValueError, match="name is required"):
            JobPosting(name="  ")

    def test_state_from_int(self):
        """Should convert stored integer state to enum."""
        job = JobPosting(name="Engineer", state=1)  # type: ignore[arg-type]
        assert job.state == JobState.CLOSED

    def test_close_is_idempotent(self):
        """Closing twice only changes state once."""
        job = JobPosting(name="Engineer")

        assert job.close() is True
        assert job.close() is False
        assert job.state == JobState.CLOSED

    def test_str_lists_applicants(self):
        """Should render name, state and applicants."""
        job = JobPosting(
            name="Engineer",
            applicants={"alice": CandidacyState.INTERVIEWED},
        )
        text = str(job)

        assert "Name: Engineer, State: Open" in text
        assert "alice: Interviewed" in text

    def test_to_dict(self):
        """Should convert to a storage row."""
        job = JobPosting(name="Engineer", id=3, state=JobState.CLOSED)
        assert job.to_dict() == {"id": 3, "name": "Engineer", "state": 1}


class TestCandidate:
    """Tests for Candidate entity."""

    def test_candidate_immutable(self):
        """Candidates are never edited after registration."""
        candidate = Candidate(username="alice", credential="digest")

        with pytest.raises(Exception):
            candidate.username = "bob"  # type: ignore[misc]

    def test_repr_hides_credential(self):
        """Should not leak the credential digest."""
        candidate = Candidate(username="alice", credential="secret-digest", id=1)
        assert "secret-digest" not in repr(candidate)

    def test_requires_username(self):
        with pytest.raises(ValueError, match="username is required"):
            Candidate(username="", credential="digest")


class TestApplication:
    """Tests for Application entity."""

    def test_starts_applied(self):
        """New applications start in Applied."""
        app = Application(job_id=1, candidate_id=2)

        assert app.state == CandidacyState.APPLIED
        assert app.key == (1, 2)

    def test_status_from_int(self):
        """Should convert stored integer state to enum."""
        app = Application(job_id=1, candidate_id=2, state=3)  # type: ignore[arg-type]
        assert app.state == CandidacyState.APPROVED

    def test_approve_before_interview_is_noop(self):
        """Should stay Applied and report no change."""
        app = Application(job_id=1, candidate_id=2)

        assert app.apply_event(CandidacyEvent.APPROVE) is False
        assert app.state == CandidacyState.APPLIED

    def test_full_flow(self):
        app = Application(job_id=1, candidate_id=2)

        assert app.apply_event(CandidacyEvent.INTERVIEW) is True
        assert app.apply_event(CandidacyEvent.APPROVE) is True
        assert app.is_approved is True
        assert app.apply_event(CandidacyEvent.REJECT) is False

    def test_round_trip_row(self):
        app = Application(job_id=1, candidate_id=2, state=CandidacyState.REJECTED)
        assert Application.from_dict(app.to_dict()) == app


class TestCredentials:
    """Tests for Credentials value object."""

    def test_credentials_immutable(self):
        """Credentials should be immutable."""
        creds = Credentials(username="user", password="pass")

        with pytest.raises(Exception):
            creds.username = "other"  # type: ignore[misc]

    def test_masked_password(self):
        """Should mask password for display."""
        creds = Credentials(username="user", password="secretpassword")
        masked = creds.masked()

        assert masked.password == "********"
        assert "secretpassword" not in repr(creds)

    def test_requires_password(self):
        with pytest.raises(ValueError, match="Password is required"):
            Credentials(username="user", password="")


class TestSession:
    """Tests for Session value object."""

    def test_expiry(self):
        now = datetime(2024, 1, 1, tzinfo=timezone.utc)
        session = Session(
            token="t",
            candidate_id=1,
            username="alice",
            expires_at=now + timedelta(seconds=10),
        )

        assert session.is_expired(now) is False
        assert session.is_expired(now + timedelta(seconds=10)) is True
        assert session.belongs_to("alice") is True
        assert session.belongs_to("bob") is False
