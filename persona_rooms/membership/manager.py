"""Join/Leave Event Manager - Probabilistic room membership changes.

Join rule: while a room holds fewer than ``max_room_participants`` active or
joining participants, every known persona not in the room joins with its own
probability (independent draws, several joins per check are possible).

Leave rule: persona-initiated leave is off by product policy. Membership
shrinks through explicit ``RoomStore.remove_participant`` calls. Setting
``allow_autonomous_leave`` restores the legacy rule (rooms with more than
four active participants lose each one with its leave probability).
"""

from __future__ import annotations

import asyncio
import random
import time
from collections.abc import Iterable, Sequence

from persona_rooms.core.config import Settings, get_settings
from persona_rooms.core.constants import AUTONOMOUS_LEAVE_MIN_ACTIVE
from persona_rooms.core.logging import get_logger
from persona_rooms.generation.fallback import FallbackTextGenerator
from persona_rooms.membership.events import EventKind, JoinLeaveEvent
from persona_rooms.personas.directory import PersonaDirectoryProtocol
from persona_rooms.personas.models import PersonaDescriptor
from persona_rooms.rooms.models import ConversationRoom
from persona_rooms.rooms.store import Clock, RoomStore
from persona_rooms.topics.vectors import topic_labels


logger = get_logger(__name__)


class JoinLeaveManager:
    """Produces and executes membership events for rooms."""

    def __init__(
        self,
        store: RoomStore,
        directory: PersonaDirectoryProtocol,
        generator: FallbackTextGenerator | None = None,
        settings: Settings | None = None,
        rng: random.Random | None = None,
        clock: Clock = time.time,
    ) -> None:
        """Initialize the manager.

        Args:
            store: Room store used to apply events.
            directory: Source of per-persona probabilities and names.
            generator: Introduction generator (fallback-wrapped).
            settings: Membership limits, probabilities and leave policy.
            rng: Random source for the Bernoulli draws.
            clock: Timestamp source for produced events.
        """
        self._store = store
        self._directory = directory
        self._generator = generator or FallbackTextGenerator()
        self._settings = settings or get_settings()
        self._rng = rng or random.Random()
        self._clock = clock

    # -------------------------------------------------------------------------
    # Event production
    # -------------------------------------------------------------------------

    def check_events(
        self,
        room: ConversationRoom,
        all_known_persona_ids: Iterable[str],
    ) -> list[JoinLeaveEvent]:
        """Decide which personas join (or, if enabled, leave) the room.

        Args:
            room: Room to evaluate (read only).
            all_known_persona_ids: Every persona that could join.

        Returns:
            Events to hand to ``execute_events``. Nothing is applied here.
        """
        now = self._clock()
        events: list[JoinLeaveEvent] = []

        # Capacity gates the check as a whole; every persona that passes its
        # draw joins, even if that takes the room past the cap.
        if room.present_count() < self._settings.max_room_participants:
            for persona_id in all_known_persona_ids:
                if persona_id in room.participants:
                    continue
                if self._rng.random() < self._join_probability(persona_id):
                    events.append(JoinLeaveEvent(room.room_id, persona_id, EventKind.JOIN, now))

        if self._settings.allow_autonomous_leave:
            active = room.active_participants()
            if len(active) > AUTONOMOUS_LEAVE_MIN_ACTIVE:
                for participant in active:
                    if self._rng.random() < self._leave_probability(participant.id):
                        events.append(
                            JoinLeaveEvent(room.room_id, participant.id, EventKind.LEAVE, now)
                        )

        if events:
            logger.info(
                "membership_events_planned",
                room_id=room.room_id,
                joins=[e.persona_id for e in events if e.kind is EventKind.JOIN],
                leaves=[e.persona_id for e in events if e.kind is EventKind.LEAVE],
            )
        return events

    def _join_probability(self, persona_id: str) -> float:
        persona = self._directory.get_persona(persona_id)
        if persona is None or persona.join_probability is None:
            return self._settings.default_join_probability
        return persona.join_probability

    def _leave_probability(self, persona_id: str) -> float:
        persona = self._directory.get_persona(persona_id)
        if persona is None or persona.leave_probability is None:
            return self._settings.default_leave_probability
        return persona.leave_probability

    # -------------------------------------------------------------------------
    # Event execution
    # -------------------------------------------------------------------------

    async def execute_events(self, events: Sequence[JoinLeaveEvent]) -> list[JoinLeaveEvent]:
        """Apply events concurrently and independently.

        A join adds the participant and generates its introduction; a leave
        marks the participant as leaving. One failing event never blocks or
        rolls back the others.

        Returns:
            Executed events (joins carry their introduction), in input order.
            Events that raised are logged and omitted.
        """
        if not events:
            return []

        results = await asyncio.gather(
            *(self._execute(event) for event in events),
            return_exceptions=True,
        )

        executed: list[JoinLeaveEvent] = []
        for event, result in zip(events, results):
            if isinstance(result, BaseException):
                logger.error(
                    "membership_event_failed",
                    room_id=event.room_id,
                    persona_id=event.persona_id,
                    kind=event.kind.value,
                    exc_info=result,
                )
                continue
            executed.append(result)
        return executed

    async def _execute(self, event: JoinLeaveEvent) -> JoinLeaveEvent:
        if event.kind is EventKind.LEAVE:
            self._store.remove_participant(event.room_id, event.persona_id)
            return event

        self._store.add_participant(event.room_id, event.persona_id)
        room = self._store.get(event.room_id)
        if room is None:
            return event

        persona = self._directory.get_persona(event.persona_id) or PersonaDescriptor(
            id=event.persona_id, name=event.persona_id
        )
        introduction = await self._generator.generate_introduction(
            persona, topic_labels(room.current_topics)
        )
        logger.info(
            "participant_introduced",
            room_id=event.room_id,
            persona_id=event.persona_id,
        )
        return event.with_introduction(introduction)


__all__ = ["JoinLeaveManager"]
