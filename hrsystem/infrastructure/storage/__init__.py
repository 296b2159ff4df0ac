# Storage Package
from .memory_adapter import InMemoryStorage
from .sqlite_adapter import SQLiteStorage
from .migrations import run_migrations

__all__ = ["InMemoryStorage", "SQLiteStorage", "run_migrations"]
