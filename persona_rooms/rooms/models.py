"""Room Models - Scheduling state for a single conversation room.

This module defines the mutable room record owned by ``RoomStore`` and the
frozen snapshot handed to readers that must not observe partial updates.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from persona_rooms.core.constants import ParticipantStatus
from persona_rooms.topics.vectors import TopicWeight


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    """One recorded utterance in a room's dialogue history.

    Attributes:
        persona_id: Who spoke (None for a human message).
        text: The utterance.
        thinking: The persona's internal reasoning line, if any.
    """

    persona_id: str | None
    text: str
    thinking: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "persona_id": self.persona_id,
            "text": self.text,
            "thinking": self.thinking,
        }


@dataclass(slots=True)
class ParticipantState:
    """One persona's presence in a room.

    Attributes:
        id: Persona identifier (unique within the room).
        status: joining, active or leaving.
        joined_at: When the persona (re)joined.
        last_spoke_at: Time of the last recorded turn, 0.0 if never.
        message_count: Number of recorded turns.
    """

    id: str
    status: ParticipantStatus
    joined_at: float
    last_spoke_at: float = 0.0
    message_count: int = 0

    @property
    def is_active(self) -> bool:
        """True when the participant can be selected to speak."""
        return self.status is ParticipantStatus.ACTIVE

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "status": self.status.value,
            "joined_at": self.joined_at,
            "last_spoke_at": self.last_spoke_at,
            "message_count": self.message_count,
        }


@dataclass
class ConversationRoom:
    """Complete scheduling state of one room.

    Only ``RoomStore`` mutates instances of this class. Components that
    receive a room treat it as read-only and go through the store's
    mutators.

    Attributes:
        room_id: Unique, never-reused room identifier.
        scope_id: External entity the room is bound to (e.g. a post).
        participants: Participants keyed by persona id, in join order.
        current_topics: Current topic weight vector.
        previous_topics: Topic vector before the last update.
        dominant_participant: Conversational lead, if any.
        turns_since_dominant_change: Turns since dominance last changed.
        total_turns: Turns recorded over the room's lifetime.
        created_at: Creation timestamp.
        last_activity: Last mutation timestamp (drives eviction).
        history: Recent dialogue, bounded by the store's history limit.
    """

    room_id: str
    scope_id: str
    created_at: float
    last_activity: float
    participants: dict[str, ParticipantState] = field(default_factory=dict)
    current_topics: tuple[TopicWeight, ...] = ()
    previous_topics: tuple[TopicWeight, ...] = ()
    dominant_participant: str | None = None
    turns_since_dominant_change: int = 0
    total_turns: int = 0
    history: list[HistoryEntry] = field(default_factory=list)

    def get_participant(self, persona_id: str) -> ParticipantState | None:
        """Get a participant by persona id."""
        return self.participants.get(persona_id)

    def active_participants(self) -> list[ParticipantState]:
        """Participants with status active, in join order."""
        return [p for p in self.participants.values() if p.is_active]

    def present_count(self) -> int:
        """Number of participants that are active or still joining."""
        return sum(
            1 for p in self.participants.values()
            if p.status in (ParticipantStatus.ACTIVE, ParticipantStatus.JOINING)
        )

    def is_active(self) -> bool:
        """True when at least one participant is active."""
        return any(p.is_active for p in self.participants.values())

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "room_id": self.room_id,
            "scope_id": self.scope_id,
            "participants": [p.to_dict() for p in self.participants.values()],
            "current_topics": [t.to_dict() for t in self.current_topics],
            "previous_topics": [t.to_dict() for t in self.previous_topics],
            "dominant_participant": self.dominant_participant,
            "turns_since_dominant_change": self.turns_since_dominant_change,
            "total_turns": self.total_turns,
            "created_at": self.created_at,
            "last_activity": self.last_activity,
        }


@dataclass(frozen=True, slots=True)
class RoomSnapshot:
    """Immutable point-in-time copy of a room for status readers.

    Taken under the store lock, so every field reflects fully applied
    mutations.
    """

    room_id: str
    scope_id: str
    participants: tuple[ParticipantState, ...]
    current_topics: tuple[TopicWeight, ...]
    previous_topics: tuple[TopicWeight, ...]
    dominant_participant: str | None
    turns_since_dominant_change: int
    total_turns: int
    created_at: float
    last_activity: float

    @classmethod
    def of(cls, room: ConversationRoom) -> RoomSnapshot:
        """Copy a live room into a snapshot."""
        return cls(
            room_id=room.room_id,
            scope_id=room.scope_id,
            participants=tuple(
                ParticipantState(
                    id=p.id,
                    status=p.status,
                    joined_at=p.joined_at,
                    last_spoke_at=p.last_spoke_at,
                    message_count=p.message_count,
                )
                for p in room.participants.values()
            ),
            current_topics=room.current_topics,
            previous_topics=room.previous_topics,
            dominant_participant=room.dominant_participant,
            turns_since_dominant_change=room.turns_since_dominant_change,
            total_turns=room.total_turns,
            created_at=room.created_at,
            last_activity=room.last_activity,
        )
