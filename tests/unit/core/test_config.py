"""Unit tests for core configuration.

Pattern: Pydantic Settings testing
"""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from persona_rooms.core import constants
from persona_rooms.core.config import Settings, get_settings
from persona_rooms.core.exceptions import RoomConfigError


class TestSettings:
    """Tests for Settings configuration class."""

    def test_settings_default_values(self) -> None:
        """Field defaults mirror the scheduling constants."""
        fields = Settings.model_fields

        assert fields["room_ttl_seconds"].default == 1800.0
        assert fields["eviction_interval_seconds"].default == 300.0
        assert fields["leave_grace_seconds"].default == 1.0
        assert fields["min_turns"].default == 3
        assert fields["max_turns"].default == 5
        assert fields["turn_pause_seconds"].default == pytest.approx(0.1)
        assert fields["selection_temperature"].default == pytest.approx(0.7)
        assert fields["max_room_participants"].default == constants.MAX_ROOM_PARTICIPANTS
        assert fields["allow_autonomous_leave"].default is False

    def test_settings_from_environment(self) -> None:
        env_vars = {
            "PERSONA_ROOMS_ROOM_TTL_SECONDS": "60",
            "PERSONA_ROOMS_ALLOW_AUTONOMOUS_LEAVE": "true",
            "PERSONA_ROOMS_LOG_LEVEL": "DEBUG",
        }

        with patch.dict(os.environ, env_vars, clear=False):
            settings = Settings()

        assert settings.room_ttl_seconds == 60.0
        assert settings.allow_autonomous_leave is True
        assert settings.log_level == "DEBUG"

    def test_settings_env_prefix(self) -> None:
        with patch.dict(os.environ, {"MIN_TURNS": "4"}, clear=False):
            settings = Settings()

        assert settings.min_turns == Settings.model_fields["min_turns"].default

    def test_turn_bounds_validated(self) -> None:
        with pytest.raises(RoomConfigError) as exc_info:
            Settings(min_turns=6, max_turns=5)

        assert exc_info.value.field == "min_turns"

    def test_probabilities_bounded(self) -> None:
        with pytest.raises(ValidationError):
            Settings(default_join_probability=1.2)


class TestGetSettings:
    """Tests for the cached settings accessor."""

    def test_get_settings_is_cached(self) -> None:
        get_settings.cache_clear()

        assert get_settings() is get_settings()
