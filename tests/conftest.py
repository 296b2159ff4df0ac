"""
Shared fixtures: every storage-backed test runs against both adapters.
"""

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
import pytest_asyncio

from hrsystem.application.use_cases import HRSystem
from hrsystem.config.settings import Settings
from hrsystem.infrastructure.security import CryptoService
from hrsystem.infrastructure.storage import InMemoryStorage, SQLiteStorage


# Cheap scrypt cost keeps the suite fast
TEST_SCRYPT_N = 2**4


class FakeClock:
    """Controllable UTC clock."""

    def __init__(self) -> None:
        self.now = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Create test settings."""
    return Settings(
        data_dir=tmp_path,
        storage_backend="memory",
        session_ttl_seconds=60,
        scrypt_n=TEST_SCRYPT_N,
    )


@pytest.fixture
def crypto() -> CryptoService:
    """Crypto service with an ephemeral key."""
    service = CryptoService(scrypt_n=TEST_SCRYPT_N)
    service.initialize()
    return service


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest_asyncio.fixture(params=["memory", "sqlite"])
async def storage(request: pytest.FixtureRequest, tmp_path: Path):
    """Initialized Storage Port, once per adapter."""
    if request.param == "memory":
        store = InMemoryStorage()
    else:
        store = SQLiteStorage(tmp_path / "hr_store.db")
    await store.initialize()
    yield store
    await store.close()


@pytest.fixture
def system(storage, crypto: CryptoService, clock: FakeClock) -> HRSystem:
    """Engine over an initialized store."""
    return HRSystem(storage, crypto, session_ttl_seconds=60, clock=clock)
