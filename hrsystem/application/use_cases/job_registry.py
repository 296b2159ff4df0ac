"""
Job Registry - Job postings and their Open/Closed lifecycle.
"""

import logging
from typing import Optional

from hrsystem.application.interfaces import KeyConflictError, StoragePort
from hrsystem.domain.entities import JobPosting
from .results import OperationResult, Outcome


logger = logging.getLogger(__name__)


class JobRegistry:
    """Creates, loads and closes job postings."""

    def __init__(self, storage: StoragePort) -> None:
        self.storage = storage

    async def create_posting(self, name: str) -> OperationResult[int]:
        """
        Create an Open posting with no applicants.

        Returns:
            Result holding the new job id, CONFLICT on a duplicate name,
            INVALID_INPUT on an empty name.
        """
        try:
            job = JobPosting(name=name)
        except ValueError as e:
            return OperationResult.failure(Outcome.INVALID_INPUT, str(e))

        try:
            job_id = await self.storage.jobs.add(job)
        except KeyConflictError:
            logger.info(f"Posting refused, name {name!r} already exists")
            return OperationResult.failure(Outcome.CONFLICT, f"A job named '{name}' already exists")

        logger.info(f"Created job posting {name!r} (id={job_id})")
        return OperationResult.success(job_id)

    async def get_by_id(self, job_id: int, with_applicants: bool = True) -> Optional[JobPosting]:
        """
        Load a posting.

        Args:
            job_id: Posting id.
            with_applicants: Also load the username -> candidacy mapping.
        """
        job = await self.storage.jobs.get(job_id)
        if job is None:
            return None
        job.id = job_id
        job.applicants = {}
        if with_applicants:
            job.applicants = {
                username: application.state
                for username, application in await self.storage.applications_for_job(job_id)
            }
        return job

    async def list_all(self) -> list[JobPosting]:
        """Get every posting with its applicants, in no particular order."""
        jobs = []
        for job_id, job in await self.storage.jobs.list_all():
            job.id = job_id
            job.applicants = {
                username: application.state
                for username, application in await self.storage.applications_for_job(job_id)
            }
            jobs.append(job)
        return jobs

    async def close(self, job_id: int, locked: bool = False) -> OperationResult[bool]:
        """
        Close a posting. Closing a closed posting is a no-op.

        Args:
            job_id: Posting id.
            locked: The caller already holds the posting's lock.

        Returns:
            Result holding True if the state changed.
        """
        if locked:
            return await self._close(job_id)
        async with self.storage.jobs.lock(job_id):
            return await self._close(job_id)

    async def _close(self, job_id: int) -> OperationResult[bool]:
        job = await self.get_by_id(job_id, with_applicants=False)
        if job is None:
            return OperationResult.failure(Outcome.NOT_FOUND, f"Job {job_id} does not exist")

        changed = job.close()
        if changed:
            await self.storage.jobs.update(job_id, job)
            logger.info(f"Closed job posting {job.name!r} (id={job_id})")
        return OperationResult.success(changed)
