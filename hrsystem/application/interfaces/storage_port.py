"""
Storage Port - Abstract interface for data persistence.

The workflow engine only talks to keyed collections. An in-memory map and a
relational store must behave identically behind this contract:

- read-your-writes for a single caller
- values handed out are copies, mutating them never changes stored state
- unique fields are enforced on insert (KeyConflictError)
- ``lock(key)`` serializes read-modify-write sequences on one key
"""

from abc import ABC, abstractmethod
from typing import AsyncContextManager, Generic, Hashable, Optional, TypeVar

from hrsystem.domain.entities import Application, Candidate, JobPosting


K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class StorageError(Exception):
    """Storage layer failure (connectivity, schema, driver errors)."""


class KeyConflictError(StorageError):
    """Insert collided with an existing key or unique field."""


class KeyNotFoundError(StorageError):
    """Update targeted a key that does not exist."""


class KeyedCollection(ABC, Generic[K, V]):
    """Abstract keyed collection of domain values."""

    @abstractmethod
    async def put(self, key: K, value: V) -> None:
        """Insert a value under ``key``. Raises KeyConflictError if taken."""
        pass

    @abstractmethod
    async def add(self, value: V) -> K:
        """Insert a value under a storage-assigned key and return the key."""
        pass

    @abstractmethod
    async def get(self, key: K) -> Optional[V]:
        """Get a value by key."""
        pass

    @abstractmethod
    async def update(self, key: K, value: V) -> None:
        """Replace an existing value. Raises KeyNotFoundError if absent."""
        pass

    @abstractmethod
    async def exists(self, key: K) -> bool:
        """Check if a key is present."""
        pass

    @abstractmethod
    async def list_all(self) -> list[tuple[K, V]]:
        """Get all (key, value) pairs, in no particular order."""
        pass

    @abstractmethod
    def lock(self, key: K) -> AsyncContextManager[None]:
        """Serialize updates on ``key`` for the duration of the block."""
        pass


class StoragePort(ABC):
    """Abstract interface for data storage."""

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize storage connection."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close storage connection."""
        pass

    @property
    @abstractmethod
    def jobs(self) -> KeyedCollection[int, JobPosting]:
        """Job postings keyed by id (applicants are not stored here)."""
        pass

    @property
    @abstractmethod
    def candidates(self) -> KeyedCollection[int, Candidate]:
        """Candidates keyed by id."""
        pass

    @property
    @abstractmethod
    def applications(self) -> KeyedCollection[tuple[int, int], Application]:
        """Applications keyed by (job_id, candidate_id)."""
        pass

    # Queries below scan the collections; adapters may override them with
    # indexed lookups.

    async def find_candidate(self, username: str) -> Optional[Candidate]:
        """Get a candidate by username."""
        for _, candidate in await self.candidates.list_all():
            if candidate.username == username:
                return candidate
        return None

    async def applications_for_job(self, job_id: int) -> list[tuple[str, Application]]:
        """Get (username, application) pairs for one job."""
        usernames = {
            candidate_id: candidate.username
            for candidate_id, candidate in await self.candidates.list_all()
        }
        return [
            (usernames[application.candidate_id], application)
            for (app_job_id, _), application in await self.applications.list_all()
            if app_job_id == job_id
        ]

    async def __aenter__(self) -> "StoragePort":
        await self.initialize()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
