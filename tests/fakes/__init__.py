"""Test doubles shared across unit and integration tests."""

from tests.fakes.clock import FakeClock, ManualScheduler
from tests.fakes.generation import FakeTextGenerator


__all__ = ["FakeClock", "FakeTextGenerator", "ManualScheduler"]
