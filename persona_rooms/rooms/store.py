"""RoomStore - In-memory owner of every conversation room.

Implements:
- Room creation with collision-free ids (scope id + counter + random suffix)
- Lookup by room id and by scope id
- Participant, topic, turn and dominance mutators
- Delayed participant removal and settle-to-active promotion via
  cancellable scheduled tasks
- Time-based eviction of idle rooms, with an optional background sweep
- Per-room run locks guaranteeing at most one orchestration run per room

Every mutator on an unknown room id is a no-op. Field mutations are applied
under a single re-entrant lock so readers never observe a half-applied
change; ``snapshot()`` returns an immutable copy for status readers.
"""

from __future__ import annotations

import asyncio
import itertools
import threading
import time
import uuid
from collections.abc import AsyncIterator, Callable, Iterable
from contextlib import asynccontextmanager

from persona_rooms.core.config import Settings, get_settings
from persona_rooms.core.constants import ROOM_ID_PREFIX, ParticipantStatus
from persona_rooms.core.logging import get_logger
from persona_rooms.rooms.models import (
    ConversationRoom,
    HistoryEntry,
    ParticipantState,
    RoomSnapshot,
)
from persona_rooms.rooms.scheduler import AsyncioScheduler, ScheduledHandle, TaskScheduler
from persona_rooms.topics.vectors import to_topic_weights, topic_labels


logger = get_logger(__name__)

Clock = Callable[[], float]
RoomIdFactory = Callable[[str], str]

_TIMER_REMOVE = "remove"
_TIMER_SETTLE = "settle"


class RoomStore:
    """Thread-safe registry and mutator surface for conversation rooms.

    Constructed once at process start and passed to every component that
    needs room state. Clock, scheduler and id factory are injectable so tests
    get deterministic ids and timings.

    Attributes:
        settings: Scheduler settings (TTL, delays, history limit).
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        scheduler: TaskScheduler | None = None,
        clock: Clock = time.time,
        id_factory: RoomIdFactory | None = None,
    ) -> None:
        """Initialize an empty store.

        Args:
            settings: Scheduler settings. Uses get_settings() if not provided.
            scheduler: Delayed-task scheduler for lifecycle transitions.
            clock: Returns the current time in seconds.
            id_factory: Builds a room id from a scope id.
        """
        self.settings = settings or get_settings()
        self._scheduler = scheduler or AsyncioScheduler()
        self._clock = clock
        self._counter = itertools.count(1)
        self._id_factory = id_factory or self._default_room_id

        self._rooms: dict[str, ConversationRoom] = {}
        self._timers: dict[str, dict[str, ScheduledHandle]] = {}
        self._run_locks: dict[str, asyncio.Lock] = {}
        self._busy: set[str] = set()
        self._lock = threading.RLock()
        self._eviction_task: asyncio.Task[None] | None = None

    # -------------------------------------------------------------------------
    # Creation and lookup
    # -------------------------------------------------------------------------

    def _default_room_id(self, scope_id: str) -> str:
        return f"{ROOM_ID_PREFIX}-{scope_id}-{next(self._counter)}-{uuid.uuid4().hex[:8]}"

    def create_room(
        self,
        scope_id: str,
        initial_participant_ids: Iterable[str],
        topic_labels_: Iterable[str],
    ) -> ConversationRoom:
        """Create a room bound to an external scope.

        Args:
            scope_id: External entity the room belongs to (e.g. a post id).
            initial_participant_ids: Personas present from the start (active).
            topic_labels_: Initial topic labels.

        Returns:
            The newly registered room.
        """
        now = self._clock()
        with self._lock:
            room_id = self._id_factory(scope_id)
            while room_id in self._rooms:
                room_id = self._id_factory(scope_id)

            participants = {
                persona_id: ParticipantState(
                    id=persona_id,
                    status=ParticipantStatus.ACTIVE,
                    joined_at=now,
                )
                for persona_id in dict.fromkeys(initial_participant_ids)
            }
            room = ConversationRoom(
                room_id=room_id,
                scope_id=scope_id,
                created_at=now,
                last_activity=now,
                participants=participants,
                current_topics=to_topic_weights(topic_labels_),
            )
            self._rooms[room_id] = room
            self._timers[room_id] = {}

        logger.info(
            "room_created",
            room_id=room_id,
            scope_id=scope_id,
            participants=len(participants),
            topics=topic_labels(room.current_topics),
        )
        return room

    def get(self, room_id: str) -> ConversationRoom | None:
        """Get a room by id, healing an invalid dominant reference.

        Args:
            room_id: Room identifier

        Returns:
            The room if found, None otherwise
        """
        with self._lock:
            room = self._rooms.get(room_id)
            if room is not None:
                self._heal(room)
            return room

    def get_by_scope(self, scope_id: str) -> ConversationRoom | None:
        """Get the first live room bound to ``scope_id``."""
        with self._lock:
            for room in self._rooms.values():
                if room.scope_id == scope_id:
                    self._heal(room)
                    return room
            return None

    def snapshot(self, room_id: str) -> RoomSnapshot | None:
        """Immutable copy of a room's current state, or None if absent."""
        with self._lock:
            room = self._rooms.get(room_id)
            if room is None:
                return None
            self._heal(room)
            return RoomSnapshot.of(room)

    def list_rooms(self) -> list[ConversationRoom]:
        """All live rooms in creation order."""
        with self._lock:
            return list(self._rooms.values())

    def active_rooms(self) -> list[ConversationRoom]:
        """Rooms with at least one active participant."""
        with self._lock:
            return [room for room in self._rooms.values() if room.is_active()]

    def room_count(self) -> int:
        """Number of live rooms."""
        with self._lock:
            return len(self._rooms)

    def delete_room(self, room_id: str) -> bool:
        """Delete a room and cancel its pending transitions.

        Returns:
            True if the room existed, False otherwise
        """
        with self._lock:
            room = self._rooms.pop(room_id, None)
            if room is None:
                return False
            for handle in self._timers.pop(room_id, {}).values():
                handle.cancel()
            if room_id not in self._busy:
                self._run_locks.pop(room_id, None)

        logger.info("room_deleted", room_id=room_id, scope_id=room.scope_id)
        return True

    # -------------------------------------------------------------------------
    # Mutators
    # -------------------------------------------------------------------------

    def update_topics(self, room_id: str, labels: Iterable[str]) -> None:
        """Install a new topic vector, keeping the old one as previous."""
        with self._lock:
            room = self._rooms.get(room_id)
            if room is None:
                return
            room.previous_topics = room.current_topics
            room.current_topics = to_topic_weights(labels)
            room.last_activity = self._clock()
            current = topic_labels(room.current_topics)

        logger.info("topics_updated", room_id=room_id, topics=current)

    def add_participant(self, room_id: str, persona_id: str) -> None:
        """Add a persona to a room, or reactivate it if already present.

        A newly added persona starts as joining and is promoted to active on
        its first turn or after the settle delay, whichever comes first.
        """
        with self._lock:
            room = self._rooms.get(room_id)
            if room is None:
                return
            now = self._clock()
            room.last_activity = now

            existing = room.participants.get(persona_id)
            if existing is not None:
                self._cancel_timer(room_id, _TIMER_REMOVE, persona_id)
                self._cancel_timer(room_id, _TIMER_SETTLE, persona_id)
                existing.status = ParticipantStatus.ACTIVE
                existing.joined_at = now
                logger.info("participant_rejoined", room_id=room_id, persona_id=persona_id)
                return

            # Participant dicts are replaced, never resized in place, so a
            # reader iterating a room from another thread keeps a stable view
            room.participants = {
                **room.participants,
                persona_id: ParticipantState(
                    id=persona_id,
                    status=ParticipantStatus.JOINING,
                    joined_at=now,
                ),
            }
            self._schedule(
                room_id,
                _TIMER_SETTLE,
                persona_id,
                self.settings.settle_delay_seconds,
                lambda: self._settle(room_id, persona_id),
            )

        logger.info("participant_joining", room_id=room_id, persona_id=persona_id)

    def remove_participant(self, room_id: str, persona_id: str) -> None:
        """Mark a persona as leaving and schedule its physical removal.

        If the persona was dominant, dominance moves to the remaining active
        participant with the most messages (earliest join breaks ties), or is
        cleared when none remain.
        """
        with self._lock:
            room = self._rooms.get(room_id)
            if room is None:
                return
            participant = room.participants.get(persona_id)
            if participant is None:
                logger.debug("participant_remove_unknown", room_id=room_id, persona_id=persona_id)
                return

            participant.status = ParticipantStatus.LEAVING
            self._cancel_timer(room_id, _TIMER_SETTLE, persona_id)
            if room.dominant_participant == persona_id:
                self._reassign_dominant(room)
            room.last_activity = self._clock()

            self._schedule(
                room_id,
                _TIMER_REMOVE,
                persona_id,
                self.settings.leave_grace_seconds,
                lambda: self._finalize_removal(room_id, persona_id),
            )

        logger.info("participant_leaving", room_id=room_id, persona_id=persona_id)

    def record_turn(self, room_id: str, persona_id: str) -> None:
        """Record one utterance by ``persona_id`` and advance room counters."""
        with self._lock:
            room = self._rooms.get(room_id)
            if room is None:
                return
            now = self._clock()

            participant = room.participants.get(persona_id)
            if participant is not None:
                participant.last_spoke_at = now
                participant.message_count += 1
                if participant.status is ParticipantStatus.JOINING:
                    participant.status = ParticipantStatus.ACTIVE
                    self._cancel_timer(room_id, _TIMER_SETTLE, persona_id)
            else:
                logger.warning("turn_for_unknown_participant", room_id=room_id, persona_id=persona_id)

            room.total_turns += 1
            room.turns_since_dominant_change += 1
            room.last_activity = now

    def set_dominant(self, room_id: str, persona_id: str) -> None:
        """Make ``persona_id`` the dominant participant.

        No-op when it already is (the turn counter is not reset) or when the
        persona is not an active participant of the room.
        """
        with self._lock:
            room = self._rooms.get(room_id)
            if room is None or room.dominant_participant == persona_id:
                return
            participant = room.participants.get(persona_id)
            if participant is None or not participant.is_active:
                logger.warning("dominant_rejected", room_id=room_id, persona_id=persona_id)
                return
            previous = room.dominant_participant
            room.dominant_participant = persona_id
            room.turns_since_dominant_change = 0

        logger.info("dominant_changed", room_id=room_id, previous=previous, dominant=persona_id)

    def append_history(self, room_id: str, entry: HistoryEntry) -> None:
        """Append an utterance to the room's bounded dialogue history."""
        with self._lock:
            room = self._rooms.get(room_id)
            if room is None:
                return
            room.history.append(entry)
            overflow = len(room.history) - self.settings.history_limit
            if overflow > 0:
                del room.history[:overflow]
            room.last_activity = self._clock()

    def recent_history(self, room_id: str, count: int = 10) -> list[HistoryEntry]:
        """The last ``count`` history entries of a room (empty if absent)."""
        with self._lock:
            room = self._rooms.get(room_id)
            if room is None or count <= 0:
                return []
            return list(room.history[-count:])

    # -------------------------------------------------------------------------
    # Eviction
    # -------------------------------------------------------------------------

    def evict_stale(self, now: float | None = None) -> list[str]:
        """Delete rooms idle for longer than the configured TTL.

        Rooms with an in-flight orchestration run are skipped.

        Args:
            now: Reference time; defaults to the store clock.

        Returns:
            Ids of the evicted rooms.
        """
        reference = self._clock() if now is None else now
        cutoff = reference - self.settings.room_ttl_seconds

        with self._lock:
            stale = [
                room_id for room_id, room in self._rooms.items()
                if room.last_activity < cutoff and room_id not in self._busy
            ]
            for room_id in stale:
                self.delete_room(room_id)

        if stale:
            logger.info("rooms_evicted", count=len(stale), room_ids=stale)
        return stale

    async def _eviction_loop(self) -> None:
        interval = self.settings.eviction_interval_seconds
        while True:
            await asyncio.sleep(interval)
            self.evict_stale()

    def start_eviction(self) -> None:
        """Start the periodic eviction sweep on the running event loop."""
        if self._eviction_task is None or self._eviction_task.done():
            self._eviction_task = asyncio.get_running_loop().create_task(self._eviction_loop())
            logger.debug("eviction_started", interval=self.settings.eviction_interval_seconds)

    async def stop_eviction(self) -> None:
        """Stop the periodic eviction sweep, if running."""
        task, self._eviction_task = self._eviction_task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.debug("eviction_stopped")

    # -------------------------------------------------------------------------
    # Run exclusivity
    # -------------------------------------------------------------------------

    @asynccontextmanager
    async def run_lock(self, room_id: str) -> AsyncIterator[None]:
        """Hold exclusive orchestration rights on a room.

        Runs on the same room are serialized; runs on different rooms never
        block each other. While held, the room is exempt from eviction.
        """
        with self._lock:
            lock = self._run_locks.setdefault(room_id, asyncio.Lock())
        try:
            async with lock:
                with self._lock:
                    self._busy.add(room_id)
                try:
                    yield
                finally:
                    with self._lock:
                        self._busy.discard(room_id)
        finally:
            # A room deleted while held keeps its lock only until release
            with self._lock:
                if (
                    room_id not in self._rooms
                    and not lock.locked()
                    and self._run_locks.get(room_id) is lock
                ):
                    del self._run_locks[room_id]

    def is_busy(self, room_id: str) -> bool:
        """True while an orchestration run holds the room."""
        with self._lock:
            return room_id in self._busy

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _heal(self, room: ConversationRoom) -> None:
        dominant = room.dominant_participant
        if dominant is None:
            return
        participant = room.participants.get(dominant)
        if participant is None or not participant.is_active:
            logger.warning("dominant_reference_cleared", room_id=room.room_id, persona_id=dominant)
            room.dominant_participant = None

    def _reassign_dominant(self, room: ConversationRoom) -> None:
        leaving = room.dominant_participant
        remaining = [
            p for p in room.participants.values()
            if p.id != leaving and p.is_active
        ]
        if not remaining:
            room.dominant_participant = None
            logger.info("dominant_cleared", room_id=room.room_id, previous=leaving)
            return

        # max() keeps the first of equal keys, i.e. list order after joined_at
        successor = max(remaining, key=lambda p: (p.message_count, -p.joined_at))
        room.dominant_participant = successor.id
        room.turns_since_dominant_change = 0
        logger.info(
            "dominant_reassigned",
            room_id=room.room_id,
            previous=leaving,
            dominant=successor.id,
        )

    def _schedule(
        self,
        room_id: str,
        kind: str,
        persona_id: str,
        delay: float,
        callback: Callable[[], None],
    ) -> None:
        key = f"{kind}:{persona_id}"
        timers = self._timers.setdefault(room_id, {})
        previous = timers.pop(key, None)
        if previous is not None:
            previous.cancel()
        timers[key] = self._scheduler.call_later(delay, callback)

    def _cancel_timer(self, room_id: str, kind: str, persona_id: str) -> None:
        handle = self._timers.get(room_id, {}).pop(f"{kind}:{persona_id}", None)
        if handle is not None:
            handle.cancel()

    def _settle(self, room_id: str, persona_id: str) -> None:
        with self._lock:
            self._timers.get(room_id, {}).pop(f"{_TIMER_SETTLE}:{persona_id}", None)
            room = self._rooms.get(room_id)
            if room is None:
                return
            participant = room.participants.get(persona_id)
            if participant is None or participant.status is not ParticipantStatus.JOINING:
                return
            participant.status = ParticipantStatus.ACTIVE

        logger.debug("participant_settled", room_id=room_id, persona_id=persona_id)

    def _finalize_removal(self, room_id: str, persona_id: str) -> None:
        with self._lock:
            self._timers.get(room_id, {}).pop(f"{_TIMER_REMOVE}:{persona_id}", None)
            room = self._rooms.get(room_id)
            if room is None:
                return
            participant = room.participants.get(persona_id)
            if participant is None or participant.status is not ParticipantStatus.LEAVING:
                return
            room.participants = {
                pid: state for pid, state in room.participants.items() if pid != persona_id
            }

        logger.info("participant_removed", room_id=room_id, persona_id=persona_id)


__all__ = ["Clock", "RoomIdFactory", "RoomStore"]
