"""Handover decisions as tagged values."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class HandoverReason(str, Enum):
    """Why dominance should (or should not) move."""

    NONE = "none"
    TOPIC_SHIFT = "topic_shift"
    TURN_LIMIT = "turn_limit"


@dataclass(frozen=True, slots=True)
class HandoverDecision:
    """Recommendation produced by ``HandoverManager.check_handover``.

    Build instances through the ``none``, ``topic_shift`` and ``turn_limit``
    constructors so that ``new_dominant`` is set exactly when a handover is
    recommended.

    Attributes:
        reason: Trigger that fired, or NONE.
        new_dominant: Recommended dominant participant, if any.
    """

    reason: HandoverReason = HandoverReason.NONE
    new_dominant: str | None = None

    @classmethod
    def none(cls) -> HandoverDecision:
        return cls()

    @classmethod
    def topic_shift(cls, persona_id: str) -> HandoverDecision:
        return cls(HandoverReason.TOPIC_SHIFT, persona_id)

    @classmethod
    def turn_limit(cls, persona_id: str) -> HandoverDecision:
        return cls(HandoverReason.TURN_LIMIT, persona_id)

    @property
    def should_handover(self) -> bool:
        """True when the decision recommends a new dominant participant."""
        return self.reason is not HandoverReason.NONE

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "should_handover": self.should_handover,
            "reason": self.reason.value,
            "new_dominant": self.new_dominant,
        }


__all__ = ["HandoverDecision", "HandoverReason"]
