"""Test configuration and shared fixtures.

Pattern: Pytest fixtures, conftest.py
"""

import random

import pytest

from persona_rooms.core.config import Settings
from persona_rooms.personas.directory import InMemoryPersonaDirectory
from persona_rooms.personas.models import PersonaDescriptor
from persona_rooms.rooms.store import RoomStore
from tests.fakes import FakeClock, ManualScheduler


_TEST_SEED = 1234


# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def test_settings() -> Settings:
    """Settings with no inter-turn pause and default scheduling constants."""
    return Settings(
        environment="test",
        log_level="DEBUG",
        turn_pause_seconds=0.0,
    )


# ============================================================================
# Determinism Fixtures
# ============================================================================

@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def scheduler(clock: FakeClock) -> ManualScheduler:
    return ManualScheduler(clock)


@pytest.fixture
def rng() -> random.Random:
    return random.Random(_TEST_SEED)


# ============================================================================
# Store and Directory Fixtures
# ============================================================================

@pytest.fixture
def store(test_settings: Settings, clock: FakeClock, scheduler: ManualScheduler) -> RoomStore:
    """RoomStore with a fake clock, manual scheduler and sequential ids."""
    counter = iter(range(1, 10_000))
    return RoomStore(
        test_settings,
        scheduler=scheduler,
        clock=clock,
        id_factory=lambda scope_id: f"room-{scope_id}-{next(counter)}",
    )


@pytest.fixture
def directory() -> InMemoryPersonaDirectory:
    """The default nine-persona catalogue."""
    return InMemoryPersonaDirectory()


@pytest.fixture
def letter_directory() -> InMemoryPersonaDirectory:
    """Three neutral personas A, B and C with no keywords."""
    return InMemoryPersonaDirectory(
        PersonaDescriptor(id=pid, name=pid, persona_type="knowledge") for pid in ("A", "B", "C")
    )
