"""
In-Memory Adapter - Dict-backed Storage Port with no persistence.

Mirrors the uniqueness rules of the relational schema so both adapters
behave the same for the workflow engine.
"""

import copy
import dataclasses
import logging
from typing import AsyncContextManager, Generic, Hashable, Optional

from hrsystem.application.interfaces import (
    KeyConflictError,
    KeyedCollection,
    KeyNotFoundError,
    StoragePort,
)
from hrsystem.application.interfaces.storage_port import K, V
from hrsystem.domain.entities import Application, Candidate, JobPosting
from .locks import KeyLocks


logger = logging.getLogger(__name__)


class InMemoryCollection(KeyedCollection[K, V], Generic[K, V]):
    """
    Keyed collection over a plain dict.

    Args:
        name: Collection name used in error messages.
        unique_fields: Value attributes that must be unique across the collection.
        key_field: Attribute receiving storage-assigned keys on ``add``.
    """

    def __init__(
        self,
        name: str,
        unique_fields: tuple[str, ...] = (),
        key_field: Optional[str] = None,
    ) -> None:
        self.name = name
        self.unique_fields = unique_fields
        self.key_field = key_field
        self._items: dict[K, V] = {}
        self._next_key = 1
        self._locks = KeyLocks()

    def _check_unique(self, value: V, ignore_key: Optional[Hashable] = None) -> None:
        for field_name in self.unique_fields:
            candidate = getattr(value, field_name)
            for key, stored in self._items.items():
                if key != ignore_key and getattr(stored, field_name) == candidate:
                    raise KeyConflictError(
                        f"{self.name}.{field_name} {candidate!r} already exists"
                    )

    async def put(self, key: K, value: V) -> None:
        if key in self._items:
            raise KeyConflictError(f"{self.name} key {key!r} already exists")
        self._check_unique(value)
        self._items[key] = copy.deepcopy(value)

    async def add(self, value: V) -> K:
        if self.key_field is None:
            raise TypeError(f"{self.name} does not assign keys")
        self._check_unique(value)
        key = self._next_key
        self._next_key += 1
        self._items[key] = dataclasses.replace(copy.deepcopy(value), **{self.key_field: key})
        return key  # type: ignore[return-value]

    async def get(self, key: K) -> Optional[V]:
        value = self._items.get(key)
        return copy.deepcopy(value) if value is not None else None

    async def update(self, key: K, value: V) -> None:
        if key not in self._items:
            raise KeyNotFoundError(f"{self.name} key {key!r} not found")
        self._check_unique(value, ignore_key=key)
        self._items[key] = copy.deepcopy(value)

    async def exists(self, key: K) -> bool:
        return key in self._items

    async def list_all(self) -> list[tuple[K, V]]:
        return [(key, copy.deepcopy(value)) for key, value in self._items.items()]

    def lock(self, key: K) -> AsyncContextManager[None]:
        return self._locks.hold(key)


class InMemoryStorage(StoragePort):
    """Storage Port over in-process dicts. Data is lost on exit."""

    def __init__(self) -> None:
        self._jobs: InMemoryCollection[int, JobPosting] = InMemoryCollection(
            "jobs", unique_fields=("name",), key_field="id"
        )
        self._candidates: InMemoryCollection[int, Candidate] = InMemoryCollection(
            "candidates", unique_fields=("username",), key_field="id"
        )
        self._applications: InMemoryCollection[tuple[int, int], Application] = (
            InMemoryCollection("applications")
        )

    async def initialize(self) -> None:
        logger.debug("In-memory storage ready")

    async def close(self) -> None:
        pass

    @property
    def jobs(self) -> InMemoryCollection[int, JobPosting]:
        return self._jobs

    @property
    def candidates(self) -> InMemoryCollection[int, Candidate]:
        return self._candidates

    @property
    def applications(self) -> InMemoryCollection[tuple[int, int], Application]:
        return self._applications
