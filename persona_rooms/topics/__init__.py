"""Topic weight vectors and similarity."""

from persona_rooms.topics.vectors import (
    TopicWeight,
    cosine_similarity,
    to_topic_weights,
    topic_labels,
)


__all__ = ["TopicWeight", "cosine_similarity", "to_topic_weights", "topic_labels"]
