"""Application configuration using Pydantic Settings.

Environment variables are loaded with the PERSONA_ROOMS_ prefix. Every
scheduling constant the orchestration core uses (TTLs, delays, turn bounds,
probabilities) can be overridden here; defaults come from
``persona_rooms.core.constants``.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from persona_rooms.core import constants
from persona_rooms.core.exceptions import RoomConfigError


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Attributes mirror the knobs of the room scheduler. Validation of
    cross-field constraints (e.g. min_turns <= max_turns) happens in
    ``validate_turn_bounds``.
    """

    # Service configuration
    service_name: str = "persona-rooms"
    environment: str = Field(default="development", description="Runtime environment")
    log_level: str = Field(default="INFO", description="Logging level")

    # Room store
    room_ttl_seconds: float = Field(
        default=constants.ROOM_TTL_SECONDS,
        gt=0,
        description="Rooms idle longer than this are evicted",
    )
    eviction_interval_seconds: float = Field(
        default=constants.EVICTION_INTERVAL_SECONDS,
        gt=0,
        description="Period of the background eviction sweep",
    )
    leave_grace_seconds: float = Field(
        default=constants.LEAVE_GRACE_SECONDS,
        ge=0,
        description="Delay between 'leaving' and physical removal",
    )
    settle_delay_seconds: float = Field(
        default=constants.SETTLE_DELAY_SECONDS,
        ge=0,
        description="Delay before a joining participant is promoted to active",
    )
    history_limit: int = Field(
        default=constants.ROOM_HISTORY_LIMIT,
        gt=0,
        description="Dialogue history entries retained per room",
    )

    # Orchestration loop
    min_turns: int = Field(default=constants.MIN_TURNS_PER_RUN, ge=1)
    max_turns: int = Field(default=constants.MAX_TURNS_PER_RUN, ge=1)
    turn_pause_seconds: float = Field(
        default=constants.TURN_PAUSE_SECONDS,
        ge=0,
        description="Pause inserted between turns to pace typing",
    )
    selection_temperature: float = Field(
        default=constants.SELECTION_TEMPERATURE,
        gt=0,
        description="Temperature of the weighted speaker draw",
    )

    # Personas
    personas_file: str | None = Field(
        default=None,
        description="YAML persona catalogue; the built-in catalogue when unset",
    )

    # Membership
    max_room_participants: int = Field(default=constants.MAX_ROOM_PARTICIPANTS, ge=1)
    default_join_probability: float = Field(
        default=constants.DEFAULT_JOIN_PROBABILITY, ge=0.0, le=1.0
    )
    default_leave_probability: float = Field(
        default=constants.DEFAULT_LEAVE_PROBABILITY, ge=0.0, le=1.0
    )
    allow_autonomous_leave: bool = Field(
        default=False,
        description="Generate persona-initiated leave events (off by product policy)",
    )

    # Text generation service
    generation_base_url: str = Field(
        default="http://localhost:8085",
        description="OpenAI-compatible chat completions endpoint",
    )
    generation_model: str = Field(default="gpt-4o-mini", description="Model ID")
    generation_timeout_seconds: float = Field(default=30.0, gt=0)

    model_config = SettingsConfigDict(
        env_prefix="PERSONA_ROOMS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode="after")
    def validate_turn_bounds(self) -> Settings:
        """Reject a turn range whose lower bound exceeds its upper bound."""
        if self.min_turns > self.max_turns:
            raise RoomConfigError(
                f"min_turns ({self.min_turns}) must not exceed max_turns ({self.max_turns})",
                field="min_turns",
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: Application settings singleton
    """
    return Settings()
