"""Persona-topic affinity.

Affinity expresses how drawn a persona is to a topic, in [0, 1]. Speaker
selection, handover and initial persona choice all weigh it against the
room's topic vector through ``weighted_affinity``.

Two implementations are provided:
- TableAffinity: fixed topic -> persona table with a default for misses
- RandomAffinity: uniform draw from an injected RNG, for catalogues with no
  table entries
"""

from __future__ import annotations

import random
from collections.abc import Mapping, Sequence
from typing import Protocol, runtime_checkable

from persona_rooms.core.constants import DEFAULT_TOPIC_AFFINITY
from persona_rooms.topics.vectors import TopicWeight


@runtime_checkable
class AffinityFunction(Protocol):
    """Maps (persona id, topic) to an affinity in [0, 1]."""

    def __call__(self, persona_id: str, topic: str) -> float:
        ...


DEFAULT_TOPIC_TABLE: dict[str, dict[str, float]] = {
    "emotion": {"Espri": 0.9, "Luna": 0.6, "Milo": 0.4, "Eden": 0.5},
    "tech": {"Rho": 0.9, "Kai": 0.7, "Namu": 0.5},
    "humor": {"Milo": 0.9, "Ava": 0.7},
    "philosophy": {"Eden": 0.9, "Noir": 0.7, "Luna": 0.5},
    "analysis": {"Namu": 0.9, "Kai": 0.7, "Rho": 0.5},
    "creativity": {"Luna": 0.9, "Noir": 0.6, "Espri": 0.4},
    "trend": {"Ava": 0.9, "Milo": 0.6},
    "travel": {"Kai": 0.7, "Ava": 0.6, "Luna": 0.5},
    "cuisine": {"Milo": 0.7, "Ava": 0.6, "Espri": 0.5},
    "art": {"Luna": 0.9, "Noir": 0.7, "Eden": 0.5},
    "mystery": {"Noir": 0.9, "Eden": 0.6},
    "social": {"Ava": 0.8, "Espri": 0.7, "Milo": 0.6},
}


class TableAffinity:
    """Affinity looked up in a topic -> persona -> score table.

    Unknown topics and personas absent from a topic's row score ``default``.
    """

    def __init__(
        self,
        table: Mapping[str, Mapping[str, float]] | None = None,
        default: float = DEFAULT_TOPIC_AFFINITY,
    ) -> None:
        self._table = DEFAULT_TOPIC_TABLE if table is None else table
        self._default = default

    def __call__(self, persona_id: str, topic: str) -> float:
        row = self._table.get(topic)
        if row is None:
            return self._default
        return row.get(persona_id, self._default)


class RandomAffinity:
    """Affinity drawn uniformly from [0, 1) on every call."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def __call__(self, persona_id: str, topic: str) -> float:
        return self._rng.random()


def weighted_affinity(
    affinity: AffinityFunction,
    persona_id: str,
    topics: Sequence[TopicWeight],
) -> float:
    """Sum of ``affinity(persona, topic) * weight`` over a topic vector."""
    return sum(affinity(persona_id, t.topic) * t.weight for t in topics)


__all__ = [
    "DEFAULT_TOPIC_TABLE",
    "AffinityFunction",
    "RandomAffinity",
    "TableAffinity",
    "weighted_affinity",
]
