"""Unit tests for HandoverManager and HandoverDecision."""

import pytest

from persona_rooms.handover.manager import HandoverManager
from persona_rooms.handover.models import HandoverDecision, HandoverReason
from persona_rooms.rooms.models import HistoryEntry
from persona_rooms.rooms.store import RoomStore


@pytest.fixture
def manager() -> HandoverManager:
    return HandoverManager()


class TestHandoverDecision:
    """Tests for the tagged decision value."""

    def test_none(self) -> None:
        decision = HandoverDecision.none()

        assert not decision.should_handover
        assert decision.reason is HandoverReason.NONE
        assert decision.new_dominant is None

    def test_constructors(self) -> None:
        assert HandoverDecision.topic_shift("Espri").to_dict() == {
            "should_handover": True,
            "reason": "topic_shift",
            "new_dominant": "Espri",
        }
        assert HandoverDecision.turn_limit("B").reason is HandoverReason.TURN_LIMIT


class TestTopicShift:
    """Tests for the topic-shift trigger."""

    def test_disjoint_topics_hand_over_to_best_match(self, manager: HandoverManager, store: RoomStore) -> None:
        room_id = store.create_room("post-1", ["Kai", "Espri", "Luna"], ["travel"]).room_id
        store.set_dominant(room_id, "Kai")
        store.update_topics(room_id, ["emotion"])

        decision = manager.check_handover(store.get(room_id), [])

        assert decision.should_handover
        assert decision.reason is HandoverReason.TOPIC_SHIFT
        assert decision.new_dominant == "Espri"

    def test_no_handover_when_best_match_is_already_dominant(
        self, manager: HandoverManager, store: RoomStore
    ) -> None:
        room_id = store.create_room("post-1", ["Kai", "Espri"], ["travel"]).room_id
        store.set_dominant(room_id, "Espri")
        store.update_topics(room_id, ["emotion"])

        assert not manager.check_handover(store.get(room_id), []).should_handover

    def test_ties_resolve_to_participant_order(self, manager: HandoverManager, store: RoomStore) -> None:
        room_id = store.create_room("post-1", ["A", "B", "C"], ["travel"]).room_id
        store.set_dominant(room_id, "B")
        store.update_topics(room_id, ["emotion"])

        assert manager.check_handover(store.get(room_id), []).new_dominant == "A"

    def test_identical_topics_below_limit_do_not_hand_over(
        self, manager: HandoverManager, store: RoomStore
    ) -> None:
        room_id = store.create_room("post-1", ["A", "B", "C"], ["tech"]).room_id
        store.set_dominant(room_id, "A")
        store.update_topics(room_id, ["tech"])
        for _ in range(6):
            store.record_turn(room_id, "A")

        decision = manager.check_handover(store.get(room_id), [HistoryEntry("A", "x")] * 6)

        assert decision == HandoverDecision.none()


class TestTurnLimit:
    """Tests for the turn-limit rotation trigger."""

    def test_fires_at_seven_turns(self, manager: HandoverManager, store: RoomStore) -> None:
        room_id = store.create_room("post-1", ["A", "B", "C"], ["tech"]).room_id
        store.set_dominant(room_id, "A")
        history = [HistoryEntry("A", "x"), HistoryEntry("B", "y")]
        for _ in range(7):
            store.record_turn(room_id, "A")

        decision = manager.check_handover(store.get(room_id), history)

        assert decision.reason is HandoverReason.TURN_LIMIT
        assert decision.new_dominant == "C"

    def test_least_represented_tie_uses_list_order(self, manager: HandoverManager, store: RoomStore) -> None:
        room_id = store.create_room("post-1", ["A", "B", "C"], ["tech"]).room_id
        store.set_dominant(room_id, "A")
        for _ in range(7):
            store.record_turn(room_id, "A")

        assert manager.check_handover(store.get(room_id), []).new_dominant == "B"

    def test_no_candidate_means_no_handover(self, manager: HandoverManager, store: RoomStore) -> None:
        room_id = store.create_room("post-1", ["A"], ["tech"]).room_id
        store.set_dominant(room_id, "A")
        for _ in range(9):
            store.record_turn(room_id, "A")

        assert not manager.check_handover(store.get(room_id), []).should_handover

    def test_leaving_participants_are_not_candidates(self, manager: HandoverManager, store: RoomStore) -> None:
        room_id = store.create_room("post-1", ["A", "B", "C"], ["tech"]).room_id
        store.set_dominant(room_id, "A")
        store.remove_participant(room_id, "B")
        for _ in range(7):
            store.record_turn(room_id, "A")

        assert manager.check_handover(store.get(room_id), []).new_dominant == "C"
