"""
HR System - Recruitment workflow orchestration.

Validates preconditions, drives candidacies through the state machine,
persists the results and closes a posting once a candidate is approved.
"""

import hashlib
import hmac
import logging
from typing import Optional

from hrsystem.application.interfaces import KeyConflictError, StoragePort
from hrsystem.domain.entities import Application, JobPosting
from hrsystem.domain.services import CandidacyEvent, CandidacyState
from hrsystem.domain.value_objects import Session
from hrsystem.infrastructure.security import CryptoService, SessionIssuer
from hrsystem.infrastructure.security.session_issuer import Clock, utcnow
from .credential_directory import CredentialDirectory
from .job_registry import JobRegistry
from .results import OperationResult, Outcome


logger = logging.getLogger(__name__)


class HRSystem:
    """
    Workflow engine over a Storage Port.

    Every mutation of a posting or of its candidacies runs under that
    posting's storage lock, from the precondition checks to the final
    write. Business-rule violations come back as OperationResult values;
    StorageError propagates to the caller.
    """

    def __init__(
        self,
        storage: StoragePort,
        crypto: CryptoService,
        session_ttl_seconds: int = 3600,
        recruiter_api_key: Optional[str] = None,
        clock: Clock = utcnow,
    ) -> None:
        """
        Initialize the engine.

        Args:
            storage: Storage Port implementation.
            crypto: Initialized crypto service.
            session_ttl_seconds: Bearer token lifetime.
            recruiter_api_key: When set, required to create postings and
                advance candidacies.
            clock: Source of the current UTC time.
        """
        self.storage = storage
        self.directory = CredentialDirectory(storage, crypto)
        self.jobs = JobRegistry(storage)
        self.sessions = SessionIssuer(crypto, ttl_seconds=session_ttl_seconds, clock=clock)
        self._recruiter_key_hash = (
            self._hash_key(recruiter_api_key) if recruiter_api_key else None
        )

    async def initialize(self) -> None:
        await self.storage.initialize()

    async def close(self) -> None:
        await self.storage.close()

    async def __aenter__(self) -> "HRSystem":
        await self.initialize()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # ==================== Postings ====================

    async def list_jobs(self) -> list[JobPosting]:
        return await self.jobs.list_all()

    async def get_job_by_id(self, job_id: int) -> Optional[JobPosting]:
        return await self.jobs.get_by_id(job_id)

    async def create_job_posting(
        self,
        name: str,
        recruiter_key: Optional[str] = None,
    ) -> OperationResult[int]:
        denied = self._authorize_recruiter(recruiter_key)
        if denied is not None:
            return denied
        return await self.jobs.create_posting(name)

    # ==================== Candidates & Sessions ====================

    async def register_candidate(self, username: str, credential: str) -> OperationResult[int]:
        return await self.directory.register(username, credential)

    async def login(self, username: str, credential: str) -> Optional[Session]:
        """
        Authenticate a candidate and open a session.

        Returns:
            The session holding the bearer token, or None on bad credentials.
        """
        candidate = await self.directory.authenticate(username, credential)
        if candidate is None:
            logger.info("Login failed")
            return None
        return self.sessions.issue(candidate)

    def logout(self, token: str) -> bool:
        return self.sessions.revoke(token)

    def check_token(self, token: str) -> OperationResult[Session]:
        session = self.sessions.validate(token) if token else None
        if session is None:
            return OperationResult.failure(Outcome.UNAUTHORIZED, "Invalid or expired token")
        return OperationResult.success(session)

    # ==================== Workflow ====================

    async def apply(self, username: str, token: str, job_id: int) -> OperationResult[None]:
        """
        Apply a logged-in candidate to an Open posting.

        Returns:
            OK, or UNAUTHORIZED (bad token, or token of another candidate),
            NOT_FOUND (no such job), INVALID_STATE (job closed),
            CONFLICT (already applied).
        """
        checked = self.check_token(token)
        session = checked.value
        if session is None:
            return OperationResult.failure(checked.outcome, checked.message)
        if not session.belongs_to(username):
            logger.warning(f"Token of {session.username} used to apply as {username}")
            return OperationResult.failure(
                Outcome.UNAUTHORIZED, f"Token does not belong to '{username}'"
            )

        async with self.storage.jobs.lock(job_id):
            job = await self.jobs.get_by_id(job_id, with_applicants=False)
            if job is None:
                return self._job_not_found(job_id)
            if not job.is_open:
                return self._job_closed(job)

            application = Application(job_id=job_id, candidate_id=session.candidate_id)
            if await self.storage.applications.exists(application.key):
                return self._already_applied(username, job)
            try:
                await self.storage.applications.put(application.key, application)
            except KeyConflictError:
                return self._already_applied(username, job)

        logger.info(f"{username} applied to {job.name!r} (id={job_id})")
        return OperationResult.success()

    async def interview(
        self, username: str, job_id: int, recruiter_key: Optional[str] = None
    ) -> OperationResult[CandidacyState]:
        return await self._advance_process(username, job_id, CandidacyEvent.INTERVIEW, recruiter_key)

    async def approve(
        self, username: str, job_id: int, recruiter_key: Optional[str] = None
    ) -> OperationResult[CandidacyState]:
        """Approve an interviewed candidate and close the posting for everyone."""
        return await self._advance_process(username, job_id, CandidacyEvent.APPROVE, recruiter_key)

    async def reject(
        self, username: str, job_id: int, recruiter_key: Optional[str] = None
    ) -> OperationResult[CandidacyState]:
        return await self._advance_process(username, job_id, CandidacyEvent.REJECT, recruiter_key)

    async def _advance_process(
        self,
        username: str,
        job_id: int,
        event: CandidacyEvent,
        recruiter_key: Optional[str],
    ) -> OperationResult[CandidacyState]:
        """
        Apply a reviewer decision to one candidacy.

        A decision that does not move the candidacy forward (e.g. approve
        before interview) leaves it untouched and returns INVALID_STATE.
        """
        denied = self._authorize_recruiter(recruiter_key)
        if denied is not None:
            return denied

        async with self.storage.jobs.lock(job_id):
            job = await self.jobs.get_by_id(job_id, with_applicants=False)
            if job is None:
                return self._job_not_found(job_id)
            if not job.is_open:
                return self._job_closed(job)

            candidate = await self.directory.get_by_username(username)
            if candidate is None or candidate.id is None:
                return OperationResult.failure(
                    Outcome.NOT_FOUND, f"Candidate '{username}' does not exist"
                )

            key = (job_id, candidate.id)
            application = await self.storage.applications.get(key)
            if application is None:
                return OperationResult.failure(
                    Outcome.NOT_FOUND, f"'{username}' has not applied to '{job.name}'"
                )

            previous = application.state
            if not application.apply_event(event):
                logger.info(
                    f"Refused to {event.value} {username} for {job.name!r}: "
                    f"candidacy is {previous.label}"
                )
                return OperationResult.failure(
                    Outcome.INVALID_STATE,
                    f"Cannot {event.value} '{username}': candidacy is {previous.label}",
                )

            await self.storage.applications.update(key, application)

            stored = await self.storage.applications.get(key)
            if stored is None or stored.state != application.state:
                return OperationResult.failure(
                    Outcome.INVALID_STATE,
                    f"Candidacy of '{username}' changed concurrently",
                )

            if stored.is_approved:
                await self.jobs.close(job_id, locked=True)

        logger.info(
            f"{username} moved from {previous.label} to {stored.state.label} for {job.name!r}"
        )
        return OperationResult.success(stored.state)

    # ==================== Helpers ====================

    @staticmethod
    def _hash_key(key: str) -> str:
        return hashlib.sha256(key.encode("utf-8")).hexdigest()

    def _authorize_recruiter(self, recruiter_key: Optional[str]) -> Optional[OperationResult]:
        if self._recruiter_key_hash is None:
            return None
        if recruiter_key and hmac.compare_digest(
            self._hash_key(recruiter_key), self._recruiter_key_hash
        ):
            return None
        logger.warning("Recruiter operation refused: missing or invalid recruiter key")
        return OperationResult.failure(Outcome.UNAUTHORIZED, "Recruiter key required")

    @staticmethod
    def _job_not_found(job_id: int) -> OperationResult:
        return OperationResult.failure(Outcome.NOT_FOUND, f"Job {job_id} does not exist")

    @staticmethod
    def _job_closed(job: JobPosting) -> OperationResult:
        logger.info(f"Refused action on closed job {job.name!r} (id={job.id})")
        return OperationResult.failure(Outcome.INVALID_STATE, f"Job '{job.name}' is closed")

    @staticmethod
    def _already_applied(username: str, job: JobPosting) -> OperationResult:
        return OperationResult.failure(
            Outcome.CONFLICT, f"'{username}' already applied to '{job.name}'"
        )
