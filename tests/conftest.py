"""Pytest configuration and fixtures."""

import os
import random
import tempfile
from datetime import datetime, timedelta, timezone

import pytest

from crate_rewards.config import Settings
from crate_rewards.db import InMemoryAccountStore, SQLiteAccountStore
from crate_rewards.economy.draw import DrawEngine
from crate_rewards.identity import StaticIdentityProvider
from crate_rewards.services import RewardService


class FakeClock:
    """Settable clock for deterministic day boundaries."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def temp_db_path():
    """Create a temporary database file path."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = f.name
    yield db_path
    try:
        os.unlink(db_path)
    except OSError:
        pass


@pytest.fixture
def settings():
    """Settings independent of the environment and any .env file."""
    return Settings(_env_file=None, storage_backend="memory")


@pytest.fixture
def memory_store():
    return InMemoryAccountStore()


@pytest.fixture
def sqlite_store(temp_db_path):
    return SQLiteAccountStore(temp_db_path)


@pytest.fixture
def identity():
    return StaticIdentityProvider("user-123", display_name="Noah Sacks")


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 3, 10, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def service(memory_store, identity, settings, clock):
    """RewardService over an in-memory store with a seeded draw engine."""
    return RewardService(
        store=memory_store,
        identity=identity,
        draw_engine=DrawEngine(rng=random.Random(42)),
        settings=settings,
        clock=clock,
    )
