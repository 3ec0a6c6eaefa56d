"""Handover Manager - Decides when conversational dominance should move.

Two triggers, checked in order, first match wins:

1. Topic shift: cosine(current, previous topics) < 0.5 hands dominance to the
   active participant with the highest weighted topic affinity.
2. Turn limit: after 7 turns under one dominant participant, dominance
   rotates to the active participant with the fewest turns in history.

The manager only recommends. Callers apply a decision with
``RoomStore.set_dominant``.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence

from persona_rooms.core import constants
from persona_rooms.core.logging import get_logger
from persona_rooms.handover.models import HandoverDecision
from persona_rooms.personas.affinity import AffinityFunction, TableAffinity, weighted_affinity
from persona_rooms.rooms.models import ConversationRoom, HistoryEntry
from persona_rooms.topics.vectors import cosine_similarity


logger = get_logger(__name__)


class HandoverManager:
    """Recommends dominance changes for a room.

    Attributes:
        topic_shift_threshold: Cosine similarity below which topics shifted.
        turn_limit: Turns under one dominant participant before rotation.
    """

    def __init__(
        self,
        affinity: AffinityFunction | None = None,
        topic_shift_threshold: float = constants.TOPIC_SHIFT_THRESHOLD,
        turn_limit: int = constants.TURN_LIMIT,
    ) -> None:
        self._affinity = affinity or TableAffinity()
        self.topic_shift_threshold = topic_shift_threshold
        self.turn_limit = turn_limit

    def check_handover(
        self,
        room: ConversationRoom,
        history: Sequence[HistoryEntry],
    ) -> HandoverDecision:
        """Check whether dominance should move to another participant.

        Args:
            room: Room to inspect (read only).
            history: Dialogue so far, used to count turns per participant.

        Returns:
            A topic_shift or turn_limit decision naming the new dominant
            participant, or HandoverDecision.none().
        """
        if room.current_topics and room.previous_topics:
            similarity = cosine_similarity(room.current_topics, room.previous_topics)
            if similarity < self.topic_shift_threshold:
                candidate = self._best_topic_match(room)
                if candidate is not None and candidate != room.dominant_participant:
                    logger.info(
                        "handover_recommended",
                        room_id=room.room_id,
                        reason="topic_shift",
                        similarity=round(similarity, 3),
                        new_dominant=candidate,
                    )
                    return HandoverDecision.topic_shift(candidate)

        if room.turns_since_dominant_change >= self.turn_limit:
            candidate = self._least_represented(room, history)
            if candidate is not None:
                logger.info(
                    "handover_recommended",
                    room_id=room.room_id,
                    reason="turn_limit",
                    turns=room.turns_since_dominant_change,
                    new_dominant=candidate,
                )
                return HandoverDecision.turn_limit(candidate)

        return HandoverDecision.none()

    def _best_topic_match(self, room: ConversationRoom) -> str | None:
        best_id: str | None = None
        best_score = float("-inf")
        for participant in room.active_participants():
            score = weighted_affinity(self._affinity, participant.id, room.current_topics)
            # strict comparison keeps the earliest participant on ties
            if score > best_score:
                best_id, best_score = participant.id, score
        return best_id

    @staticmethod
    def _least_represented(
        room: ConversationRoom,
        history: Sequence[HistoryEntry],
    ) -> str | None:
        counts = Counter(entry.persona_id for entry in history)
        candidates = [
            p.id for p in room.active_participants()
            if p.id != room.dominant_participant
        ]
        if not candidates:
            return None
        return min(candidates, key=lambda persona_id: counts[persona_id])


__all__ = ["HandoverManager"]
