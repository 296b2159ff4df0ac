# Interfaces Package
from .storage_port import (
    KeyConflictError,
    KeyedCollection,
    KeyNotFoundError,
    StorageError,
    StoragePort,
)

__all__ = [
    "KeyConflictError",
    "KeyedCollection",
    "KeyNotFoundError",
    "StorageError",
    "StoragePort",
]
