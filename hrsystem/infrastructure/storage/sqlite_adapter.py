"""
SQLite Adapter - Durable Storage Port for the HR system.

All statements go through a single aiosqlite connection guarded by one
asyncio lock; the driver connection is not shared between concurrent
statements.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, AsyncContextManager, Callable, Generic, Optional, Sequence

import aiosqlite

from hrsystem.application.interfaces import (
    KeyConflictError,
    KeyedCollection,
    KeyNotFoundError,
    StorageError,
    StoragePort,
)
from hrsystem.application.interfaces.storage_port import K, V
from hrsystem.domain.entities import Application, Candidate, JobPosting
from .locks import KeyLocks
from .migrations import run_migrations


logger = logging.getLogger(__name__)


class SQLiteCollection(KeyedCollection[K, V], Generic[K, V]):
    """
    Keyed collection mapped onto one table.

    Args:
        storage: Owning adapter (provides the guarded connection).
        table: Table name.
        key_columns: Primary key columns; composite keys are tuples.
        value_columns: Remaining columns written on insert/update.
        from_row: Builds a domain value from a row dict.
    """

    def __init__(
        self,
        storage: "SQLiteStorage",
        table: str,
        key_columns: tuple[str, ...],
        value_columns: tuple[str, ...],
        from_row: Callable[[dict], V],
    ) -> None:
        self.storage = storage
        self.table = table
        self.key_columns = key_columns
        self.value_columns = value_columns
        self.from_row = from_row
        self._locks = KeyLocks()

    @property
    def _where(self) -> str:
        return " AND ".join(f"{column} = ?" for column in self.key_columns)

    def _key_params(self, key: K) -> tuple:
        return tuple(key) if len(self.key_columns) > 1 else (key,)  # type: ignore[arg-type]

    def _row_key(self, row: dict) -> K:
        values = tuple(row[column] for column in self.key_columns)
        return values if len(values) > 1 else values[0]  # type: ignore[return-value]

    def _value_params(self, value: V) -> tuple:
        data = value.to_dict()  # type: ignore[attr-defined]
        return tuple(data[column] for column in self.value_columns)

    async def put(self, key: K, value: V) -> None:
        columns = self.key_columns + self.value_columns
        placeholders = ", ".join("?" for _ in columns)
        await self.storage.write(
            f"INSERT INTO {self.table} ({', '.join(columns)}) VALUES ({placeholders})",
            self._key_params(key) + self._value_params(value),
        )

    async def add(self, value: V) -> K:
        if len(self.key_columns) > 1:
            raise TypeError(f"{self.table} does not assign keys")
        placeholders = ", ".join("?" for _ in self.value_columns)
        rowid, _ = await self.storage.write(
            f"INSERT INTO {self.table} ({', '.join(self.value_columns)}) VALUES ({placeholders})",
            self._value_params(value),
        )
        return rowid  # type: ignore[return-value]

    async def get(self, key: K) -> Optional[V]:
        row = await self.storage.fetchone(
            f"SELECT * FROM {self.table} WHERE {self._where}",
            self._key_params(key),
        )
        return self.from_row(row) if row else None

    async def update(self, key: K, value: V) -> None:
        assignments = ", ".join(f"{column} = ?" for column in self.value_columns)
        _, rowcount = await self.storage.write(
            f"UPDATE {self.table} SET {assignments} WHERE {self._where}",
            self._value_params(value) + self._key_params(key),
        )
        if rowcount == 0:
            raise KeyNotFoundError(f"{self.table} key {key!r} not found")

    async def exists(self, key: K) -> bool:
        row = await self.storage.fetchone(
            f"SELECT 1 AS present FROM {self.table} WHERE {self._where}",
            self._key_params(key),
        )
        return row is not None

    async def list_all(self) -> list[tuple[K, V]]:
        rows = await self.storage.fetchall(f"SELECT * FROM {self.table}")
        return [(self._row_key(row), self.from_row(row)) for row in rows]

    def lock(self, key: K) -> AsyncContextManager[None]:
        return self._locks.hold(key)


class SQLiteStorage(StoragePort):
    """
    SQLite database adapter.

    Provides async keyed access to jobs, candidates and applications.
    """

    def __init__(self, db_path: Path) -> None:
        """
        Initialize the adapter.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = db_path
        self._connection: Optional[aiosqlite.Connection] = None
        self._conn_lock = asyncio.Lock()

        self._jobs: SQLiteCollection[int, JobPosting] = SQLiteCollection(
            self, "jobs", ("id",), ("name", "state"), JobPosting.from_dict
        )
        self._candidates: SQLiteCollection[int, Candidate] = SQLiteCollection(
            self, "candidates", ("id",), ("username", "credential"), Candidate.from_dict
        )
        self._applications: SQLiteCollection[tuple[int, int], Application] = SQLiteCollection(
            self, "applications", ("job_id", "candidate_id"), ("state",), Application.from_dict
        )

    async def initialize(self) -> None:
        """Initialize database and run migrations."""
        if self._connection:
            return

        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

            # Run migrations synchronously first
            run_migrations(self.db_path)

            self._connection = await aiosqlite.connect(str(self.db_path))
            self._connection.row_factory = aiosqlite.Row
            await self._connection.execute("PRAGMA foreign_keys = ON")
        except (OSError, aiosqlite.Error) as e:
            raise StorageError(f"Cannot open database {self.db_path}: {e}") from e

        logger.info(f"SQLite storage ready at {self.db_path}")

    async def close(self) -> None:
        """Close the database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    @property
    def conn(self) -> aiosqlite.Connection:
        """Get the active connection or raise error."""
        if not self._connection:
            raise StorageError("Database not initialized. Call initialize() first.")
        return self._connection

    @property
    def jobs(self) -> SQLiteCollection[int, JobPosting]:
        return self._jobs

    @property
    def candidates(self) -> SQLiteCollection[int, Candidate]:
        return self._candidates

    @property
    def applications(self) -> SQLiteCollection[tuple[int, int], Application]:
        return self._applications

    # ==================== Statement Execution ====================

    async def fetchone(self, sql: str, params: Sequence[Any] = ()) -> Optional[dict]:
        """Run a query and return the first row as a dict."""
        async with self._conn_lock:
            try:
                cursor = await self.conn.execute(sql, params)
                row = await cursor.fetchone()
            except aiosqlite.Error as e:
                raise StorageError(str(e)) from e
        return dict(row) if row else None

    async def fetchall(self, sql: str, params: Sequence[Any] = ()) -> list[dict]:
        """Run a query and return all rows as dicts."""
        async with self._conn_lock:
            try:
                cursor = await self.conn.execute(sql, params)
                rows = await cursor.fetchall()
            except aiosqlite.Error as e:
                raise StorageError(str(e)) from e
        return [dict(row) for row in rows]

    async def write(self, sql: str, params: Sequence[Any] = ()) -> tuple[int, int]:
        """
        Run a statement and commit.

        Returns:
            (lastrowid, rowcount) of the statement.

        Raises:
            KeyConflictError: On primary key or UNIQUE violations.
            StorageError: On any other driver error.
        """
        async with self._conn_lock:
            try:
                cursor = await self.conn.execute(sql, params)
                await self.conn.commit()
            except aiosqlite.IntegrityError as e:
                await self.conn.rollback()
                message = str(e)
                if "UNIQUE" in message or "PRIMARY KEY" in message:
                    raise KeyConflictError(message) from e
                raise StorageError(message) from e
            except aiosqlite.Error as e:
                await self.conn.rollback()
                raise StorageError(str(e)) from e
        return cursor.lastrowid or 0, cursor.rowcount

    # ==================== Indexed Queries ====================

    async def find_candidate(self, username: str) -> Optional[Candidate]:
        row = await self.fetchone(
            "SELECT id, username, credential FROM candidates WHERE username = ?",
            (username,),
        )
        return Candidate.from_dict(row) if row else None

    async def applications_for_job(self, job_id: int) -> list[tuple[str, Application]]:
        rows = await self.fetchall(
            """
            SELECT candidates.username, applications.job_id,
                   applications.candidate_id, applications.state
            FROM applications
            JOIN candidates ON candidates.id = applications.candidate_id
            WHERE applications.job_id = ?
            """,
            (job_id,),
        )
        return [(row["username"], Application.from_dict(row)) for row in rows]
