"""Conversation Orchestrator - Drives a bounded run of persona turns.

A trigger (a new post or a new user message) runs 3-5 turns in the room
bound to the trigger's scope:

    for each turn:
        select speaker -> generate thinking + dialogue -> record turn
        -> check handover (apply) -> append history -> attach expanded info
        -> pause
    after the budget:
        check join/leave events once -> execute them

Runs on the same room are serialized through ``RoomStore.run_lock``; runs on
different rooms interleave freely. ``request_stop`` and ``shutdown`` let a
run finish its current turn and stop.
"""

from __future__ import annotations

import asyncio
import random
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from persona_rooms.core import constants
from persona_rooms.core.config import Settings, get_settings
from persona_rooms.core.exceptions import PersonaRoomsError
from persona_rooms.core.logging import get_logger, room_log_context
from persona_rooms.expansion.info import expand_info
from persona_rooms.generation.fallback import FallbackTextGenerator
from persona_rooms.generation.prompts import format_history
from persona_rooms.generation.protocols import TextGenerationProtocol
from persona_rooms.handover.manager import HandoverManager
from persona_rooms.membership.manager import JoinLeaveManager
from persona_rooms.orchestration.models import MembershipNotice, OrchestrationResult, TurnMessage
from persona_rooms.personas.affinity import AffinityFunction, TableAffinity, weighted_affinity
from persona_rooms.personas.directory import PersonaDirectoryProtocol
from persona_rooms.rooms.models import ConversationRoom, HistoryEntry
from persona_rooms.rooms.store import RoomStore
from persona_rooms.selection.speaker import SpeakerSelector
from persona_rooms.topics.vectors import to_topic_weights, topic_labels


logger = get_logger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class ConversationOrchestrator:
    """Runs multi-persona conversation turns for rooms in a RoomStore.

    Usage:
        store = RoomStore()
        orchestrator = ConversationOrchestrator(store, InMemoryPersonaDirectory())
        result = await orchestrator.run("post-42", post_text, ["travel"])
    """

    def __init__(
        self,
        store: RoomStore,
        directory: PersonaDirectoryProtocol,
        generator: TextGenerationProtocol | None = None,
        *,
        settings: Settings | None = None,
        affinity: AffinityFunction | None = None,
        rng: random.Random | None = None,
        selector: SpeakerSelector | None = None,
        handover: HandoverManager | None = None,
        membership: JoinLeaveManager | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        """Initialize the orchestrator.

        Components not passed in are built from the shared settings,
        affinity and RNG.

        Args:
            store: Room store owning all rooms.
            directory: Persona directory.
            generator: Text generator; wrapped in FallbackTextGenerator
                unless it already is one.
            settings: Turn bounds, pause and membership policy.
            affinity: Persona/topic affinity. Defaults to TableAffinity.
            rng: Random source for turn budgets and persona choice.
            selector: Speaker selector override.
            handover: Handover manager override.
            membership: Join/leave manager override.
            sleep: Awaitable pause used between turns.
        """
        self._store = store
        self._directory = directory
        self._settings = settings or get_settings()
        self._affinity = affinity or TableAffinity()
        self._rng = rng or random.Random()
        self._sleep = sleep

        if isinstance(generator, FallbackTextGenerator):
            self._generator = generator
        else:
            self._generator = FallbackTextGenerator(generator)

        self._selector = selector or SpeakerSelector(
            directory,
            affinity=self._affinity,
            rng=self._rng,
            temperature=self._settings.selection_temperature,
        )
        self._handover = handover or HandoverManager(affinity=self._affinity)
        self._membership = membership or JoinLeaveManager(
            store,
            directory,
            generator=self._generator,
            settings=self._settings,
            rng=self._rng,
        )

        self._stop_requests: set[str] = set()
        self._active_runs: dict[str, int] = {}
        self._runs: dict[asyncio.Event, asyncio.Task[Any] | None] = {}
        self._closed = False

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    async def run(
        self,
        scope_id: str,
        trigger_text: str,
        topic_labels_: Sequence[str],
        initial_persona_ids: Sequence[str] | None = None,
        scope_content: str | None = None,
    ) -> OrchestrationResult:
        """Run one bounded sequence of turns for a scope.

        Reuses the live room bound to ``scope_id`` (continuation) or creates
        one (new post).

        Args:
            scope_id: External scope (post or thread) the room is bound to.
            trigger_text: Post or user message that triggered the run.
            topic_labels_: Topic labels of the trigger.
            initial_persona_ids: Personas for a new room; chosen by affinity
                when omitted.
            scope_content: Content the dialogue is about; defaults to
                ``trigger_text``.

        Returns:
            Messages and membership notices produced by the run.

        Raises:
            PersonaRoomsError: If the orchestrator has been shut down.
        """
        if self._closed:
            raise PersonaRoomsError("orchestrator is shut down")

        labels = list(topic_labels_)
        room = self._prepare_room(scope_id, labels, initial_persona_ids)

        finished = asyncio.Event()
        self._runs[finished] = asyncio.current_task()
        self._active_runs[scope_id] = self._active_runs.get(scope_id, 0) + 1
        try:
            with room_log_context(room.room_id, scope_id):
                async with self._store.run_lock(room.room_id):
                    return await self._run_locked(
                        scope_id,
                        room.room_id,
                        trigger_text,
                        scope_content or trigger_text,
                    )
        finally:
            remaining = self._active_runs[scope_id] - 1
            if remaining:
                self._active_runs[scope_id] = remaining
            else:
                del self._active_runs[scope_id]
                self._stop_requests.discard(scope_id)
            del self._runs[finished]
            finished.set()

    def request_stop(self, scope_id: str) -> bool:
        """Ask in-flight runs for ``scope_id`` to stop after their current turn.

        Returns:
            True if at least one run was signalled.
        """
        if scope_id not in self._active_runs:
            return False
        self._stop_requests.add(scope_id)
        logger.info("run_stop_requested", scope_id=scope_id)
        return True

    async def shutdown(self) -> None:
        """Refuse new runs and wait for in-flight runs to finish their turn.

        Only the ``run`` calls themselves are awaited, never the tasks that
        made them. Runs started by the calling task are not waited for.
        """
        self._closed = True
        current = asyncio.current_task()
        pending = [
            finished for finished, owner in self._runs.items()
            if owner is None or owner is not current
        ]
        logger.info("orchestrator_shutdown", pending_runs=len(pending))
        if pending:
            await asyncio.gather(*(finished.wait() for finished in pending))

    def select_initial_personas(self, labels: Sequence[str]) -> list[str]:
        """Pick 3-4 personas for a new room.

        Personas are ranked by weighted affinity to the labels (catalogue
        order breaks ties); without labels the choice is random.
        """
        personas = [p.id for p in self._directory.list_personas()]
        count = min(
            len(personas),
            self._rng.randint(constants.MIN_INITIAL_PERSONAS, constants.MAX_INITIAL_PERSONAS),
        )
        if not labels:
            return self._rng.sample(personas, count)

        topics = to_topic_weights(labels)
        ranked = sorted(
            personas,
            key=lambda persona_id: weighted_affinity(self._affinity, persona_id, topics),
            reverse=True,
        )
        return ranked[:count]

    # -------------------------------------------------------------------------
    # Run internals
    # -------------------------------------------------------------------------

    def _prepare_room(
        self,
        scope_id: str,
        labels: list[str],
        initial_persona_ids: Sequence[str] | None,
    ) -> ConversationRoom:
        room = self._store.get_by_scope(scope_id)
        if room is None:
            persona_ids = (
                list(initial_persona_ids)
                if initial_persona_ids
                else self.select_initial_personas(labels)
            )
            return self._store.create_room(scope_id, persona_ids, labels)

        if labels and labels != topic_labels(room.current_topics):
            self._store.update_topics(room.room_id, labels)
        return room

    def _should_stop(self, scope_id: str) -> bool:
        return self._closed or scope_id in self._stop_requests

    async def _run_locked(
        self,
        scope_id: str,
        room_id: str,
        trigger_text: str,
        scope_content: str,
    ) -> OrchestrationResult:
        room = self._store.get(room_id)
        if room is None:
            logger.warning("run_room_missing", room_id=room_id, scope_id=scope_id)
            return OrchestrationResult(room_id=room_id, stopped_early=True)

        if room.dominant_participant is None:
            active = room.active_participants()
            if active:
                self._store.set_dominant(room_id, active[0].id)

        history = self._store.recent_history(room_id, self._settings.history_limit)
        last_speaker = next(
            (e.persona_id for e in reversed(history) if e.persona_id is not None),
            None,
        )
        if trigger_text:
            trigger = HistoryEntry(persona_id=None, text=trigger_text)
            history.append(trigger)
            self._store.append_history(room_id, trigger)

        budget = self._rng.randint(self._settings.min_turns, self._settings.max_turns)
        logger.info("run_started", room_id=room_id, scope_id=scope_id, turns=budget)

        messages: list[TurnMessage] = []
        last_message = trigger_text
        stopped_early = False

        for turn in range(budget):
            if self._should_stop(scope_id):
                stopped_early = True
                break
            message = await self._take_turn(room_id, last_message, last_speaker, history, scope_content)
            if message is None:
                stopped_early = True
                break
            messages.append(message)
            last_message, last_speaker = message.text, message.persona_id

            if turn < budget - 1:
                await self._sleep(self._settings.turn_pause_seconds)

        notices: list[MembershipNotice] = []
        room = self._store.get(room_id)
        if room is not None and not self._should_stop(scope_id):
            events = self._membership.check_events(room, [p.id for p in self._directory.list_personas()])
            executed = await self._membership.execute_events(events)
            notices = [MembershipNotice.from_event(e) for e in executed]

        logger.info(
            "run_finished",
            room_id=room_id,
            scope_id=scope_id,
            turns=len(messages),
            membership_events=len(notices),
            stopped_early=stopped_early,
        )
        return OrchestrationResult(
            room_id=room_id,
            messages=messages,
            membership_events=notices,
            stopped_early=stopped_early,
        )

    async def _take_turn(
        self,
        room_id: str,
        last_message: str,
        last_speaker: str | None,
        history: list[HistoryEntry],
        scope_content: str,
    ) -> TurnMessage | None:
        room = self._store.get(room_id)
        if room is None:
            logger.warning("turn_room_missing", room_id=room_id)
            return None

        speaker = self._selector.select_next_speaker(room, last_message, last_speaker, history)
        participant = room.get_participant(speaker) if speaker is not None else None
        persona = self._directory.get_persona(speaker) if speaker is not None else None
        if participant is None or not participant.is_active or persona is None:
            logger.warning("turn_no_speaker", room_id=room_id, speaker=speaker)
            return None

        labels = topic_labels(room.current_topics)
        thinking = await self._generator.generate_thinking(
            persona, labels, last_message, format_history(history)
        )
        text = await self._generator.generate_dialogue_turn(persona, scope_content, history)

        self._store.record_turn(room_id, speaker)

        room = self._store.get(room_id)
        if room is not None:
            decision = self._handover.check_handover(room, history)
            if decision.should_handover and decision.new_dominant is not None:
                self._store.set_dominant(room_id, decision.new_dominant)
                logger.info(
                    "handover_applied",
                    room_id=room_id,
                    reason=decision.reason.value,
                    dominant=decision.new_dominant,
                )

        entry = HistoryEntry(persona_id=speaker, text=text, thinking=thinking)
        history.append(entry)
        self._store.append_history(room_id, entry)

        topics = room.current_topics if room is not None else ()
        info = expand_info(persona.persona_type, topics, last_message, history)
        return TurnMessage.build(speaker, text, thinking, info)


__all__ = ["ConversationOrchestrator"]
