"""Core module - Configuration, logging, exceptions, and scheduling constants.

Exports:
    - Settings, get_settings: Pydantic Settings configuration
    - configure_logging, get_logger, room_log_context: Structured logging (structlog)
    - ParticipantStatus: Participant lifecycle states
    - Exception classes: PersonaRoomsError, RoomConfigError, etc.
"""

from persona_rooms.core.config import Settings, get_settings
from persona_rooms.core.constants import ParticipantStatus
from persona_rooms.core.exceptions import (
    GenerationError,
    GenerationTimeoutError,
    PersonaRoomsError,
    RoomConfigError,
)
from persona_rooms.core.logging import configure_logging, get_logger, room_log_context


__all__ = [
    # Exceptions
    "GenerationError",
    "GenerationTimeoutError",
    # Constants
    "ParticipantStatus",
    "PersonaRoomsError",
    "RoomConfigError",
    # Configuration
    "Settings",
    # Logging
    "configure_logging",
    "get_logger",
    "get_settings",
    "room_log_context",
]
