"""Topic weight vectors and cosine similarity.

A room's conversational context is a small, normalized distribution over
topic labels. Two such distributions are compared with cosine similarity to
detect topic drift between updates.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

import numpy as np

from persona_rooms.core.constants import GENERAL_TOPIC


@dataclass(frozen=True, slots=True)
class TopicWeight:
    """A single topic label with its weight in [0, 1].

    Attributes:
        topic: Topic label (e.g. "travel")
        weight: Share of the conversation attributed to the topic
    """

    topic: str
    weight: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"topic": self.topic, "weight": self.weight}


def to_topic_weights(labels: Iterable[str]) -> tuple[TopicWeight, ...]:
    """Convert topic labels into a uniform topic weight vector.

    Args:
        labels: Topic labels, possibly with duplicates.

    Returns:
        One TopicWeight per unique label (first-occurrence order), each with
        weight 1/N. An empty input yields a single "general" topic of weight 1.0.
    """
    unique = list(dict.fromkeys(labels))
    if not unique:
        return (TopicWeight(GENERAL_TOPIC, 1.0),)

    weight = 1.0 / len(unique)
    return tuple(TopicWeight(topic, weight) for topic in unique)


def topic_labels(topics: Sequence[TopicWeight]) -> list[str]:
    """Return the labels of a topic vector, in order."""
    return [t.topic for t in topics]


def _as_mapping(topics: Sequence[TopicWeight]) -> dict[str, float]:
    mapping: dict[str, float] = {}
    for t in topics:
        mapping[t.topic] = mapping.get(t.topic, 0.0) + t.weight
    return mapping


def cosine_similarity(a: Sequence[TopicWeight], b: Sequence[TopicWeight]) -> float:
    """Cosine similarity between two topic weight vectors.

    Labels missing on one side count as weight 0. The label union is sorted so
    that both argument orders produce bit-identical results.

    Args:
        a: First topic vector
        b: Second topic vector

    Returns:
        Similarity in [0, 1]; 0 when either side is empty or has zero magnitude.
    """
    if not a or not b:
        return 0.0

    weights_a = _as_mapping(a)
    weights_b = _as_mapping(b)
    union = sorted(weights_a.keys() | weights_b.keys())

    vec_a = np.array([weights_a.get(topic, 0.0) for topic in union], dtype=float)
    vec_b = np.array([weights_b.get(topic, 0.0) for topic in union], dtype=float)

    norm_a = float(np.linalg.norm(vec_a))
    norm_b = float(np.linalg.norm(vec_b))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0

    similarity = float(np.dot(vec_a, vec_b)) / (norm_a * norm_b)
    return min(1.0, max(0.0, similarity))


__all__ = ["TopicWeight", "cosine_similarity", "to_topic_weights", "topic_labels"]
