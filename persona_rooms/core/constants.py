"""Scheduling constants for the persona room orchestration core.

Provides centralized values for:
- Room lifecycle (TTL, eviction cadence, lifecycle delays)
- Speaker selection weights
- Handover thresholds
- Membership limits and probabilities

Settings defaults are taken from here; see ``persona_rooms.core.config``.
"""

from enum import Enum


# =============================================================================
# Room Lifecycle
# =============================================================================

ROOM_TTL_SECONDS: float = 30 * 60.0
EVICTION_INTERVAL_SECONDS: float = 5 * 60.0
LEAVE_GRACE_SECONDS: float = 1.0
SETTLE_DELAY_SECONDS: float = 3.0
ROOM_HISTORY_LIMIT: int = 100
ROOM_ID_PREFIX: str = "room"

GENERAL_TOPIC: str = "general"


class ParticipantStatus(str, Enum):
    """Presence status of a persona inside a room.

    A removed participant has no status: it is absent from the room.
    """

    JOINING = "joining"
    ACTIVE = "active"
    LEAVING = "leaving"


# =============================================================================
# Speaker Selection
# =============================================================================

class SelectionWeights:
    """Additive weights of the speaker scoring terms."""

    TOPIC_AFFINITY: float = 0.4
    RECENCY: float = 0.2
    DOMINANCE_BONUS: float = 0.2
    FAIRNESS: float = 0.1
    INTEREST: float = 0.1
    REPEAT_PENALTY: float = 0.15


RECENCY_WINDOW: int = 10
DOMINANCE_BONUS_TURNS: int = 5
FAIRNESS_MAX_BOOST: float = 0.15
FAIRNESS_EMPTY_HISTORY_BONUS: float = 0.05
SELECTION_TEMPERATURE: float = 0.7
TOP_CANDIDATES_LOGGED: int = 3

# Content-interest match
KEYWORD_MATCH_CAP: float = 0.5
QUESTION_BONUS: float = 0.3
LONG_MESSAGE_BONUS: float = 0.2
LONG_MESSAGE_CHARS: int = 100
EMOTION_BONUS: float = 0.2
EXPRESSIVE_PERSONA_TYPES: frozenset[str] = frozenset({"empath", "creative", "humor"})
EMOTION_MARKERS: tuple[str, ...] = (
    "!", "haha", "lol", "love", "sad", "happy", "miss", "cry", "angry",
    "excited", "wow", "ㅋ", "ㅎ", "ㅠ",
)

DEFAULT_TOPIC_AFFINITY: float = 0.3


# =============================================================================
# Handover
# =============================================================================

TOPIC_SHIFT_THRESHOLD: float = 0.5
TURN_LIMIT: int = 7


# =============================================================================
# Membership
# =============================================================================

MAX_ROOM_PARTICIPANTS: int = 6
DEFAULT_JOIN_PROBABILITY: float = 0.5
DEFAULT_LEAVE_PROBABILITY: float = 0.1
AUTONOMOUS_LEAVE_MIN_ACTIVE: int = 4


# =============================================================================
# Orchestration Loop
# =============================================================================

MIN_TURNS_PER_RUN: int = 3
MAX_TURNS_PER_RUN: int = 5
TURN_PAUSE_SECONDS: float = 0.1
MIN_INITIAL_PERSONAS: int = 3
MAX_INITIAL_PERSONAS: int = 4


# =============================================================================
# Generation Fallbacks
# =============================================================================

FALLBACK_THINKING: str = "..."
FALLBACK_DIALOGUE: str = "Hmm, let me think about that for a moment."
FALLBACK_INTRODUCTION: str = "Hi, I'm {name}! Mind if I join?"
