"""Join/leave events as immutable tagged values."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any


class EventKind(str, Enum):
    """Kind of membership change."""

    JOIN = "join"
    LEAVE = "leave"


@dataclass(frozen=True, slots=True)
class JoinLeaveEvent:
    """A single membership change to execute.

    Attributes:
        room_id: Target room.
        persona_id: Persona joining or leaving.
        kind: JOIN or LEAVE.
        timestamp: When the event was produced.
        introduction: Greeting posted by a joining persona, once executed.
    """

    room_id: str
    persona_id: str
    kind: EventKind
    timestamp: float
    introduction: str | None = None

    @property
    def is_join(self) -> bool:
        return self.kind is EventKind.JOIN

    def with_introduction(self, text: str) -> JoinLeaveEvent:
        """Copy of this event carrying ``text`` as its introduction."""
        return replace(self, introduction=text)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "room_id": self.room_id,
            "persona_id": self.persona_id,
            "kind": self.kind.value,
            "timestamp": self.timestamp,
            "introduction": self.introduction,
        }


__all__ = ["EventKind", "JoinLeaveEvent"]
