"""Prompt builders for the HTTP text-generation client.

Each builder returns OpenAI-style chat messages. Persona trait sliders are
rendered into the system prompt so the same model can voice every persona.
"""

from __future__ import annotations

from collections.abc import Sequence

from persona_rooms.personas.models import PersonaDescriptor
from persona_rooms.rooms.models import HistoryEntry


# =============================================================================
# Constants
# =============================================================================

_HISTORY_TURNS_IN_PROMPT = 8
_HUMAN_SPEAKER = "user"


def _describe_traits(persona: PersonaDescriptor) -> str:
    traits = persona.traits
    return (
        f"empathy {traits.empathy}/100, humor {traits.humor}/100, "
        f"sociability {traits.sociability}/100, creativity {traits.creativity}/100, "
        f"knowledge {traits.knowledge}/100"
    )


def build_persona_system_prompt(persona: PersonaDescriptor) -> str:
    """System prompt establishing a persona's voice."""
    lines = [
        f"You are {persona.name}, a {persona.persona_type} persona in a group conversation.",
        f"Role: {persona.description}" if persona.description else "",
        f"Tone: {persona.tone}" if persona.tone else "",
        f"Style: {persona.style}" if persona.style else "",
        f"Personality: {_describe_traits(persona)}",
        "Stay in character and keep replies short and natural.",
    ]
    return "\n".join(line for line in lines if line)


def format_history(history: Sequence[HistoryEntry], limit: int = _HISTORY_TURNS_IN_PROMPT) -> str:
    """Render the most recent history entries as ``speaker: text`` lines."""
    recent = list(history)[-limit:] if limit > 0 else []
    return "\n".join(f"{entry.persona_id or _HUMAN_SPEAKER}: {entry.text}" for entry in recent)


def build_thinking_messages(
    persona: PersonaDescriptor,
    topics: Sequence[str],
    last_message: str,
    history_text: str,
) -> list[dict[str, str]]:
    """Messages asking for a one-line internal thought before speaking."""
    user = (
        f"Current topics: {', '.join(topics) or 'general'}\n"
        f"Recent conversation:\n{history_text or '(none yet)'}\n\n"
        f"Last message: {last_message}\n\n"
        "In one short sentence, what are you thinking before you reply? "
        "Output only the thought."
    )
    return [
        {"role": "system", "content": build_persona_system_prompt(persona)},
        {"role": "user", "content": user},
    ]


def build_introduction_messages(
    persona: PersonaDescriptor,
    topic_labels: Sequence[str],
) -> list[dict[str, str]]:
    """Messages asking for a one-sentence greeting on joining a room."""
    user = (
        f"You are joining a conversation about: {', '.join(topic_labels) or 'general'}.\n"
        "Introduce yourself in one natural sentence, showing interest in the topic. "
        "Output only the introduction."
    )
    return [
        {"role": "system", "content": build_persona_system_prompt(persona)},
        {"role": "user", "content": user},
    ]


def build_dialogue_messages(
    persona: PersonaDescriptor,
    scope_content: str,
    history: Sequence[HistoryEntry],
) -> list[dict[str, str]]:
    """Messages asking for the persona's next utterance."""
    user = (
        f"The conversation is about this post:\n{scope_content}\n\n"
        f"Conversation so far:\n{format_history(history) or '(you speak first)'}\n\n"
        f"Reply as {persona.name} in one to three sentences."
    )
    return [
        {"role": "system", "content": build_persona_system_prompt(persona)},
        {"role": "user", "content": user},
    ]


__all__ = [
    "build_dialogue_messages",
    "build_introduction_messages",
    "build_persona_system_prompt",
    "build_thinking_messages",
    "format_history",
]
