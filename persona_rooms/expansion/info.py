"""Expanded info - Supplementary data attached to a persona's turn.

Some persona types decorate their utterance with structured side data that
UIs render as an expandable card:

- knowledge: topic facts and sources
- analyst: turn-share and topic-weight patterns from the dialogue
- empath: emotions read from the last message
- creative: metaphors and analogies for the topics
- humor: jokes and references for the topics

Every builder is deterministic; other persona types get no attachment.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from persona_rooms.rooms.models import HistoryEntry
from persona_rooms.topics.vectors import TopicWeight


# =============================================================================
# Topic Tables
# =============================================================================

_FACTS: dict[str, tuple[str, ...]] = {
    "tech": (
        "Modern language models are built on the transformer architecture.",
        "Quantum computing is expected to reshape cryptography.",
    ),
    "travel": (
        "Jeju Island is a volcanic island listed as a UNESCO World Natural Heritage site.",
        "Northern Europe is among the best places to watch the aurora.",
    ),
    "cuisine": (
        "Fermented foods contain probiotics that support gut health.",
        "Glutamate occurs naturally in kelp and tomatoes.",
    ),
    "art": (
        "Impressionist painters worked outdoors to capture changing light.",
        "Contemporary art tends to emphasise concept and context.",
    ),
}
_FACTS_FALLBACK = ("Looking for something interesting to share.",)
_FACT_SOURCES = ("Wikipedia", "Academic Database")

_METAPHORS: dict[str, tuple[str, str]] = {
    "emotion": (
        "Feelings are waves that rise and fade.",
        "The mind is like the sky: clouds pass, the sky stays.",
    ),
    "tech": (
        "Technology is humanity's wings.",
        "AI is a mirror reflecting what we show it.",
    ),
    "travel": (
        "Travel is a key that opens the windows of the mind.",
        "A new place is like opening a new chapter of a book.",
    ),
    "cuisine": (
        "Food is the language of culture.",
        "Cooking, like making art, takes care and a feel for the senses.",
    ),
}
_METAPHOR_FALLBACK = "Every experience is a picture painted on the canvas of life."
_ANALOGY_FALLBACK = "This moment is as precious as a single drop in a river."

_JOKES: dict[str, tuple[str, str]] = {
    "tech": (
        "A developer walks into a bar... and the drink is null.",
        "Stack Overflow, the developer's saviour.",
    ),
    "cuisine": (
        "Instant noodles are done in three minutes, so why isn't my to-do list?",
        "If it tastes good, it has zero calories.",
    ),
    "travel": (
        "'I want to travel' usually means 'I want to escape reality'.",
        "The best part of a trip is planning it.",
    ),
    "social": (
        "'Let's grab lunch sometime' - the plan that never happens.",
        "A promise is a confirmed maybe.",
    ),
}
_JOKE_FALLBACK = "Life is a comedy and we are both the audience and the cast."
_REFERENCE_FALLBACK = "You've got this today!"

# (marker, emotion, intensity), checked in order
_EMOTION_CUES: tuple[tuple[tuple[str, ...], str, float], ...] = (
    (("!",), "excitement", 0.8),
    (("?",), "curiosity", 0.7),
    (("haha", "lol", "ㅋ", "ㅎ"), "joy", 0.85),
    (("hmm", "well", "..."), "contemplation", 0.6),
)


# =============================================================================
# Model
# =============================================================================

@dataclass(frozen=True, slots=True)
class ExpandedInfo:
    """Typed attachment for a turn message.

    Attributes:
        type: Persona type that produced it.
        data: JSON-serializable payload.
    """

    type: str
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"type": self.type, "data": self.data}


# =============================================================================
# Builders
# =============================================================================

def expand_knowledge(topics: Sequence[TopicWeight]) -> dict[str, Any]:
    facts = [fact for t in topics for fact in _FACTS.get(t.topic, ())]
    return {
        "facts": facts or list(_FACTS_FALLBACK),
        "sources": list(_FACT_SOURCES),
    }


def expand_analyst(
    topics: Sequence[TopicWeight],
    history: Sequence[HistoryEntry],
) -> dict[str, Any]:
    """Turn shares per speaker and the topic distribution."""
    counts = Counter(entry.persona_id or "user" for entry in history)
    total = sum(counts.values())
    patterns = [
        f"{speaker}: {count / total:.0%} of turns"
        for speaker, count in counts.most_common()
    ]
    patterns.extend(f"topic {t.topic}: {t.weight:.0%}" for t in topics)
    return {
        "patterns": patterns,
        "stats": {
            "total_turns": total,
            "speakers": len(counts),
            "average_length": (
                round(sum(len(e.text) for e in history) / total, 1) if total else 0.0
            ),
        },
    }


def expand_emotions(last_message: str) -> dict[str, Any]:
    text = last_message.lower()
    emotions = [
        {"type": emotion, "intensity": intensity}
        for markers, emotion, intensity in _EMOTION_CUES
        if any(marker in text for marker in markers)
    ]
    if not emotions:
        emotions = [{"type": "neutral", "intensity": 0.5}]
    return {
        "emotions": emotions,
        "intensity": round(sum(e["intensity"] for e in emotions) / len(emotions), 4),
        "dominant_emotion": emotions[0]["type"],
    }


def expand_creative(topics: Sequence[TopicWeight]) -> dict[str, Any]:
    pairs = [_METAPHORS[t.topic] for t in topics if t.topic in _METAPHORS]
    return {
        "metaphors": [m for m, _ in pairs] or [_METAPHOR_FALLBACK],
        "analogies": [a for _, a in pairs] or [_ANALOGY_FALLBACK],
    }


def expand_humor(topics: Sequence[TopicWeight]) -> dict[str, Any]:
    pairs = [_JOKES[t.topic] for t in topics if t.topic in _JOKES]
    return {
        "jokes": [j for j, _ in pairs] or [_JOKE_FALLBACK],
        "references": [r for _, r in pairs] or [_REFERENCE_FALLBACK],
    }


def expand_info(
    persona_type: str,
    topics: Sequence[TopicWeight],
    last_message: str,
    history: Sequence[HistoryEntry] = (),
) -> ExpandedInfo | None:
    """Build the attachment for a persona type.

    Args:
        persona_type: Speaking persona's type.
        topics: Room's current topic vector.
        last_message: Message the persona is replying to.
        history: Dialogue so far.

    Returns:
        ExpandedInfo, or None for persona types without attachments.
    """
    if persona_type == "knowledge":
        return ExpandedInfo("knowledge", expand_knowledge(topics))
    if persona_type == "analyst":
        return ExpandedInfo("analyst", expand_analyst(topics, history))
    if persona_type == "empath":
        return ExpandedInfo("empath", expand_emotions(last_message))
    if persona_type == "creative":
        return ExpandedInfo("creative", expand_creative(topics))
    if persona_type == "humor":
        return ExpandedInfo("humor", expand_humor(topics))
    return None


__all__ = [
    "ExpandedInfo",
    "expand_analyst",
    "expand_creative",
    "expand_emotions",
    "expand_humor",
    "expand_info",
    "expand_knowledge",
]
