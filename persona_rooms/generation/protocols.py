"""Protocol for the text-generation collaborator.

The orchestration core never generates language itself. It asks a
collaborator for three kinds of text and relies on
``FallbackTextGenerator`` to guarantee a usable value for each.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from persona_rooms.personas.models import PersonaDescriptor
    from persona_rooms.rooms.models import HistoryEntry


@runtime_checkable
class TextGenerationProtocol(Protocol):
    """Duck-typed interface of a text generator.

    Implementations may raise on failure or return an empty string; both are
    absorbed by the fallback wrapper.
    """

    async def generate_thinking(
        self,
        persona: PersonaDescriptor,
        topics: Sequence[str],
        last_message: str,
        history_text: str,
    ) -> str:
        """Short internal reasoning line shown before the persona speaks."""
        ...

    async def generate_introduction(
        self,
        persona: PersonaDescriptor,
        topic_labels: Sequence[str],
    ) -> str:
        """Greeting a persona posts when it joins a room."""
        ...

    async def generate_dialogue_turn(
        self,
        persona: PersonaDescriptor,
        scope_content: str,
        history: Sequence[HistoryEntry],
    ) -> str:
        """The persona's next utterance in the conversation."""
        ...


__all__ = ["TextGenerationProtocol"]
