"""Fallback wrapper guaranteeing a value from every generation call.

A failed or empty generation degrades to a visibly generic line instead of
dropping the turn.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence

from persona_rooms.core import constants
from persona_rooms.core.logging import get_logger
from persona_rooms.generation.protocols import TextGenerationProtocol
from persona_rooms.personas.models import PersonaDescriptor
from persona_rooms.rooms.models import HistoryEntry


logger = get_logger(__name__)


class FallbackTextGenerator:
    """Wraps a TextGenerationProtocol and substitutes defaults on failure.

    With no inner generator every call returns its fallback, which is useful
    for dry runs and tests.

    Attributes:
        inner: Wrapped generator, or None.
    """

    def __init__(self, inner: TextGenerationProtocol | None = None) -> None:
        self.inner = inner

    async def _guarded(
        self,
        operation: str,
        persona: PersonaDescriptor,
        call: Callable[[TextGenerationProtocol], Awaitable[str]],
        fallback: str,
    ) -> str:
        if self.inner is None:
            return fallback
        try:
            text = await call(self.inner)
        except Exception:
            logger.warning(
                "generation_failed",
                operation=operation,
                persona_id=persona.id,
                exc_info=True,
            )
            return fallback

        if not text or not text.strip():
            logger.info("generation_empty", operation=operation, persona_id=persona.id)
            return fallback
        return text.strip()

    async def generate_thinking(
        self,
        persona: PersonaDescriptor,
        topics: Sequence[str],
        last_message: str,
        history_text: str,
    ) -> str:
        return await self._guarded(
            "thinking",
            persona,
            lambda inner: inner.generate_thinking(persona, topics, last_message, history_text),
            constants.FALLBACK_THINKING,
        )

    async def generate_introduction(
        self,
        persona: PersonaDescriptor,
        topic_labels: Sequence[str],
    ) -> str:
        return await self._guarded(
            "introduction",
            persona,
            lambda inner: inner.generate_introduction(persona, topic_labels),
            constants.FALLBACK_INTRODUCTION.format(name=persona.name),
        )

    async def generate_dialogue_turn(
        self,
        persona: PersonaDescriptor,
        scope_content: str,
        history: Sequence[HistoryEntry],
    ) -> str:
        return await self._guarded(
            "dialogue",
            persona,
            lambda inner: inner.generate_dialogue_turn(persona, scope_content, history),
            constants.FALLBACK_DIALOGUE,
        )


__all__ = ["FallbackTextGenerator"]
