"""Unit tests for topic weight vectors and cosine similarity."""

import pytest

from persona_rooms.topics.vectors import (
    TopicWeight,
    cosine_similarity,
    to_topic_weights,
    topic_labels,
)


class TestToTopicWeights:
    """Tests for to_topic_weights()."""

    def test_empty_labels_map_to_general(self) -> None:
        assert to_topic_weights([]) == (TopicWeight("general", 1.0),)

    def test_two_labels_split_evenly(self) -> None:
        weights = to_topic_weights(["a", "b"])

        assert [w.topic for w in weights] == ["a", "b"]
        assert [w.weight for w in weights] == [0.5, 0.5]

    def test_duplicates_collapse_in_first_occurrence_order(self) -> None:
        weights = to_topic_weights(["tech", "art", "tech"])

        assert topic_labels(weights) == ["tech", "art"]
        assert sum(w.weight for w in weights) == pytest.approx(1.0)

    def test_to_dict(self) -> None:
        assert TopicWeight("travel", 1.0).to_dict() == {"topic": "travel", "weight": 1.0}


class TestCosineSimilarity:
    """Tests for cosine_similarity()."""

    def test_identical_vectors_score_one(self) -> None:
        a = to_topic_weights(["tech", "art"])

        assert cosine_similarity(a, a) == pytest.approx(1.0)

    def test_disjoint_vectors_score_zero(self) -> None:
        assert cosine_similarity(to_topic_weights(["travel"]), to_topic_weights(["emotion"])) == 0.0

    def test_empty_side_scores_zero(self) -> None:
        a = to_topic_weights(["tech"])

        assert cosine_similarity(a, ()) == 0.0
        assert cosine_similarity((), a) == 0.0

    def test_zero_magnitude_scores_zero(self) -> None:
        assert cosine_similarity((TopicWeight("tech", 0.0),), to_topic_weights(["tech"])) == 0.0

    @pytest.mark.parametrize(
        ("left", "right"),
        [
            (["tech"], ["tech", "art"]),
            (["travel", "cuisine", "art"], ["art", "travel"]),
            (["humor"], ["social", "humor", "trend"]),
        ],
    )
    def test_symmetric(self, left: list[str], right: list[str]) -> None:
        a = to_topic_weights(left)
        b = to_topic_weights(right)

        assert cosine_similarity(a, b) == cosine_similarity(b, a)

    def test_partial_overlap(self) -> None:
        # (0.5 * 1) / (sqrt(0.5) * 1)
        similarity = cosine_similarity(to_topic_weights(["tech", "art"]), to_topic_weights(["tech"]))

        assert similarity == pytest.approx(0.7071, abs=1e-4)
