"""Speaker Selector - Weighted, temperature-sharpened choice of the next speaker.

Each active participant receives an additive score built from six terms:

    affinity   0.4 * sum(affinity(persona, topic) * weight)
    recency    0.2 * min(1, turns since last spoke / 10)   (never spoke: 1.0)
    dominance  +0.2 while dominant for fewer than 5 turns
    fairness   0.1 * f(turn share vs. average share)      (no persona turns: +0.05)
    interest   0.1 * min(1, keyword/question/length/emotion match)
    penalty    -0.15 for the previous speaker

The clamped scores are normalised, raised to ``1 / temperature`` and
renormalised before a weighted draw from the injected RNG.
"""

from __future__ import annotations

import random
import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from persona_rooms.core import constants
from persona_rooms.core.constants import SelectionWeights
from persona_rooms.core.logging import get_logger
from persona_rooms.personas.affinity import AffinityFunction, TableAffinity, weighted_affinity
from persona_rooms.personas.directory import PersonaDirectoryProtocol
from persona_rooms.personas.models import PersonaDescriptor
from persona_rooms.rooms.models import ConversationRoom, HistoryEntry, ParticipantState


logger = get_logger(__name__)

_WORD_PATTERN = re.compile(r"\w+")


@dataclass(frozen=True, slots=True)
class CandidateScore:
    """Score breakdown for one eligible participant.

    Attributes:
        persona_id: Candidate persona.
        affinity: Weighted topic affinity term.
        recency: Recency term.
        dominance: Dominance bonus term.
        fairness: Fairness term.
        interest: Content-interest term.
        penalty: Repeat-speaker penalty (non-positive).
        total: Sum of the terms, clamped to [0, 1].
    """

    persona_id: str
    affinity: float
    recency: float
    dominance: float
    fairness: float
    interest: float
    penalty: float
    total: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging and debugging."""
        return {
            "persona_id": self.persona_id,
            "affinity": round(self.affinity, 4),
            "recency": round(self.recency, 4),
            "dominance": round(self.dominance, 4),
            "fairness": round(self.fairness, 4),
            "interest": round(self.interest, 4),
            "penalty": round(self.penalty, 4),
            "total": round(self.total, 4),
        }


class SpeakerSelector:
    """Chooses who speaks next in a room.

    Usage:
        selector = SpeakerSelector(directory, rng=random.Random(7))
        speaker = selector.select_next_speaker(room, "Any tips for Lisbon?", "Kai", history)
    """

    def __init__(
        self,
        directory: PersonaDirectoryProtocol,
        affinity: AffinityFunction | None = None,
        rng: random.Random | None = None,
        temperature: float = constants.SELECTION_TEMPERATURE,
    ) -> None:
        """Initialize the selector.

        Args:
            directory: Source of persona keywords and types.
            affinity: Persona/topic affinity. Defaults to TableAffinity.
            rng: Random source for the weighted draw.
            temperature: Sharpening temperature; lower is greedier.
        """
        self._directory = directory
        self._affinity = affinity or TableAffinity()
        self._rng = rng or random.Random()
        self._temperature = temperature

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def select_next_speaker(
        self,
        room: ConversationRoom,
        last_message_text: str,
        last_speaker_id: str | None,
        history: Sequence[HistoryEntry],
    ) -> str | None:
        """Pick the next speaker among the room's active participants.

        Args:
            room: Room to select in (read only).
            last_message_text: Text the next speaker responds to.
            last_speaker_id: Previous speaker, penalised to avoid repeats.
            history: Dialogue so far, oldest first.

        Returns:
            The chosen persona id. With no eligible participant,
            ``last_speaker_id`` is returned unchanged.
        """
        eligible = room.active_participants()
        if not eligible:
            logger.debug("speaker_no_eligible", room_id=room.room_id)
            return last_speaker_id
        if len(eligible) == 1:
            return eligible[0].id

        candidates = self._score(room, eligible, last_message_text, last_speaker_id, history)
        chosen = self._draw(candidates)

        top = sorted(candidates, key=lambda c: c.total, reverse=True)[: constants.TOP_CANDIDATES_LOGGED]
        logger.info(
            "speaker_selected",
            room_id=room.room_id,
            selected=chosen,
            top_candidates=[(c.persona_id, round(c.total, 3)) for c in top],
        )
        return chosen

    def score_candidates(
        self,
        room: ConversationRoom,
        last_message_text: str,
        last_speaker_id: str | None,
        history: Sequence[HistoryEntry],
    ) -> list[CandidateScore]:
        """Score every active participant without drawing.

        Returns:
            One CandidateScore per active participant, in participant order.
        """
        return self._score(
            room, room.active_participants(), last_message_text, last_speaker_id, history
        )

    # -------------------------------------------------------------------------
    # Scoring
    # -------------------------------------------------------------------------

    def _score(
        self,
        room: ConversationRoom,
        eligible: list[ParticipantState],
        last_message_text: str,
        last_speaker_id: str | None,
        history: Sequence[HistoryEntry],
    ) -> list[CandidateScore]:
        turn_counts: dict[str, int] = {}
        last_index: dict[str, int] = {}
        for index, entry in enumerate(history):
            if entry.persona_id is None:
                continue
            turn_counts[entry.persona_id] = turn_counts.get(entry.persona_id, 0) + 1
            last_index[entry.persona_id] = index

        message = last_message_text.lower()
        words = set(_WORD_PATTERN.findall(message))
        persona_turns = sum(turn_counts.values())
        average_share = 1.0 / len(eligible)

        scores = []
        for participant in eligible:
            persona_id = participant.id
            persona = self._directory.get_persona(persona_id)

            affinity = SelectionWeights.TOPIC_AFFINITY * weighted_affinity(
                self._affinity, persona_id, room.current_topics
            )
            recency = SelectionWeights.RECENCY * self._recency(last_index.get(persona_id), len(history))

            dominance = 0.0
            if (
                room.dominant_participant == persona_id
                and room.turns_since_dominant_change < constants.DOMINANCE_BONUS_TURNS
            ):
                dominance = SelectionWeights.DOMINANCE_BONUS

            if persona_turns:
                share = turn_counts.get(persona_id, 0) / persona_turns
                fairness = SelectionWeights.FAIRNESS * self._fairness(share, average_share)
            else:
                fairness = constants.FAIRNESS_EMPTY_HISTORY_BONUS

            interest = SelectionWeights.INTEREST * self._interest(persona, message, words)
            penalty = -SelectionWeights.REPEAT_PENALTY if persona_id == last_speaker_id else 0.0

            raw = affinity + recency + dominance + fairness + interest + penalty
            scores.append(
                CandidateScore(
                    persona_id=persona_id,
                    affinity=affinity,
                    recency=recency,
                    dominance=dominance,
                    fairness=fairness,
                    interest=interest,
                    penalty=penalty,
                    total=min(1.0, max(0.0, raw)),
                )
            )
        return scores

    @staticmethod
    def _recency(last_index: int | None, history_length: int) -> float:
        if last_index is None:
            return 1.0
        return min(1.0, (history_length - last_index) / constants.RECENCY_WINDOW)

    @staticmethod
    def _fairness(share: float, average_share: float) -> float:
        if share < average_share:
            deficit = (average_share - share) / average_share
            return 1.0 + constants.FAIRNESS_MAX_BOOST * min(1.0, deficit)
        excess = (share - average_share) / average_share
        return max(0.0, 1.0 - excess)

    @staticmethod
    def _interest(persona: PersonaDescriptor | None, message: str, words: set[str]) -> float:
        match = 0.0
        if persona is not None and persona.keywords:
            hits = sum(1 for keyword in persona.keywords if keyword.lower() in words)
            match += min(constants.KEYWORD_MATCH_CAP, hits / len(persona.keywords))

        if "?" in message:
            match += constants.QUESTION_BONUS
        if len(message) > constants.LONG_MESSAGE_CHARS:
            match += constants.LONG_MESSAGE_BONUS
        if (
            persona is not None
            and persona.persona_type in constants.EXPRESSIVE_PERSONA_TYPES
            and any(marker in message for marker in constants.EMOTION_MARKERS)
        ):
            match += constants.EMOTION_BONUS

        return min(1.0, match)

    # -------------------------------------------------------------------------
    # Sampling
    # -------------------------------------------------------------------------

    def _draw(self, candidates: list[CandidateScore]) -> str:
        total = sum(c.total for c in candidates)
        if total <= 0.0:
            return self._rng.choice(candidates).persona_id

        exponent = 1.0 / self._temperature
        sharpened = [(c.total / total) ** exponent for c in candidates]
        norm = sum(sharpened)

        threshold = self._rng.random()
        cumulative = 0.0
        for candidate, weight in zip(candidates, sharpened):
            cumulative += weight / norm
            if threshold < cumulative:
                return candidate.persona_id
        return candidates[-1].persona_id


__all__ = ["CandidateScore", "SpeakerSelector"]
