"""Persona descriptors supplied by the persona directory.

A persona is an AI character with a conversational role. The orchestration
core never owns personas; it reads descriptors to score speakers, decide join
probabilities and build generation prompts.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class PersonaTraits(BaseModel):
    """Personality sliders, each in 0-100.

    Used to flavour generation prompts; scheduling does not read them.
    """

    model_config = ConfigDict(frozen=True)

    empathy: int = Field(default=50, ge=0, le=100)
    humor: int = Field(default=50, ge=0, le=100)
    sociability: int = Field(default=50, ge=0, le=100)
    creativity: int = Field(default=50, ge=0, le=100)
    knowledge: int = Field(default=50, ge=0, le=100)


class PersonaDescriptor(BaseModel):
    """Read-only description of a persona.

    Attributes:
        id: Stable persona identifier (also the room participant id).
        name: Display name used in greetings.
        description: One-line role description.
        persona_type: Behavioural archetype (knowledge, empath, creative,
            analyst, humor, philosopher, trend, tech, mystery).
        tone: Speaking tone hint for prompts.
        style: Speaking style hint for prompts.
        traits: Personality sliders.
        keywords: Words that raise the persona's interest in a message.
        join_probability: Per-evaluation join probability; None uses the
            configured default.
        leave_probability: Per-evaluation leave probability; None uses the
            configured default.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    description: str = ""
    persona_type: str = Field(default="knowledge", description="Persona archetype")
    tone: str = ""
    style: str = ""
    traits: PersonaTraits = Field(default_factory=PersonaTraits)
    keywords: tuple[str, ...] = ()
    join_probability: float | None = Field(default=None, ge=0.0, le=1.0)
    leave_probability: float | None = Field(default=None, ge=0.0, le=1.0)


__all__ = ["PersonaDescriptor", "PersonaTraits"]
