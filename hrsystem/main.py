"""
HR System - Recruitment workflow engine

Entry point: wires settings, storage and security into an HRSystem.
Running the module prepares the configured store and reports its postings.
"""

import asyncio
import logging
import sys
from typing import Optional

from hrsystem.application.interfaces import StorageError, StoragePort
from hrsystem.application.use_cases import HRSystem
from hrsystem.config import Settings, get_settings
from hrsystem.infrastructure.security import CryptoService
from hrsystem.infrastructure.storage import InMemoryStorage, SQLiteStorage


logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO") -> None:
    """Configure logging for the application."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ]
    )


def build_storage(settings: Settings) -> StoragePort:
    """Select the Storage Port implementation from settings."""
    if settings.storage_backend == "memory":
        return InMemoryStorage()
    return SQLiteStorage(settings.database_path)


def build_system(settings: Optional[Settings] = None) -> HRSystem:
    """
    Construct an HRSystem from settings.

    The returned engine still needs ``await engine.initialize()`` (or
    ``async with``) before use.
    """
    settings = settings or get_settings()

    crypto = CryptoService(settings.session_key_path, scrypt_n=settings.scrypt_n)
    crypto.initialize()

    recruiter_key = settings.recruiter_api_key
    return HRSystem(
        storage=build_storage(settings),
        crypto=crypto,
        session_ttl_seconds=settings.session_ttl_seconds,
        recruiter_api_key=recruiter_key.get_secret_value() if recruiter_key else None,
    )


async def run(settings: Settings) -> None:
    """Open the store and log the current postings."""
    async with build_system(settings) as system:
        jobs = await system.list_jobs()
        if not jobs:
            logger.info("There are no jobs posted yet")
        for job in sorted(jobs, key=lambda j: j.id or 0):
            logger.info(f"{job.id}: {job}")


def main() -> int:
    settings = get_settings()
    setup_logging(settings.log_level)
    try:
        asyncio.run(run(settings))
    except StorageError as e:
        logger.error(f"Storage failure: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
