"""Orchestration output handed to the broadcast layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from persona_rooms.expansion.info import ExpandedInfo
from persona_rooms.membership.events import EventKind, JoinLeaveEvent


@dataclass(frozen=True, slots=True)
class TurnMessage:
    """One persona utterance produced by a run.

    Attributes:
        persona_id: Speaker.
        text: Utterance.
        thinking: Internal reasoning line shown before the utterance.
        expanded_info_type: Persona type of the attachment, if any.
        expanded_info: Attachment payload, if any.
    """

    persona_id: str
    text: str
    thinking: str
    expanded_info_type: str | None = None
    expanded_info: dict[str, Any] | None = None

    @classmethod
    def build(
        cls,
        persona_id: str,
        text: str,
        thinking: str,
        info: ExpandedInfo | None,
    ) -> TurnMessage:
        if info is None:
            return cls(persona_id, text, thinking)
        return cls(persona_id, text, thinking, info.type, info.data)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "persona_id": self.persona_id,
            "text": self.text,
            "thinking": self.thinking,
            "expanded_info_type": self.expanded_info_type,
            "expanded_info": self.expanded_info,
        }


@dataclass(frozen=True, slots=True)
class MembershipNotice:
    """A join or leave to announce to observers."""

    persona_id: str
    kind: EventKind
    introduction: str | None = None

    @classmethod
    def from_event(cls, event: JoinLeaveEvent) -> MembershipNotice:
        return cls(event.persona_id, event.kind, event.introduction)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "persona_id": self.persona_id,
            "kind": self.kind.value,
            "introduction": self.introduction,
        }


@dataclass(frozen=True)
class OrchestrationResult:
    """Everything one run produced.

    Attributes:
        room_id: Room the run drove.
        messages: Turn messages in speaking order.
        membership_events: Executed join/leave notices.
        stopped_early: True when the run ended before its turn budget.
    """

    room_id: str
    messages: list[TurnMessage] = field(default_factory=list)
    membership_events: list[MembershipNotice] = field(default_factory=list)
    stopped_early: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "room_id": self.room_id,
            "messages": [m.to_dict() for m in self.messages],
            "membership_events": [e.to_dict() for e in self.membership_events],
            "stopped_early": self.stopped_early,
        }


__all__ = ["MembershipNotice", "OrchestrationResult", "TurnMessage"]
