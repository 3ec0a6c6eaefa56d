"""Persona Directory - Lookup of persona descriptors.

The directory is an external collaborator: the orchestration core only reads
it. ``InMemoryPersonaDirectory`` ships the default nine-persona catalogue and
can be loaded from a YAML file of the form::

    personas:
      - id: Kai
        name: Kai
        persona_type: knowledge
        keywords: [history, science]
        join_probability: 0.15   # optional; Settings default otherwise
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Protocol, runtime_checkable

import yaml

from persona_rooms.core.logging import get_logger
from persona_rooms.personas.models import PersonaDescriptor, PersonaTraits


logger = get_logger(__name__)


# =============================================================================
# Protocol
# =============================================================================

@runtime_checkable
class PersonaDirectoryProtocol(Protocol):
    """Read-only persona lookup."""

    def list_personas(self) -> list[PersonaDescriptor]:
        """All known personas, in catalogue order."""
        ...

    def get_persona(self, persona_id: str) -> PersonaDescriptor | None:
        """Descriptor for ``persona_id``, or None if unknown."""
        ...


# =============================================================================
# Default Catalogue
# =============================================================================

# Join and leave probabilities unset: Settings defaults apply.
DEFAULT_PERSONAS: tuple[PersonaDescriptor, ...] = (
    PersonaDescriptor(
        id="Kai",
        name="Kai",
        description="Knowledge - provides information and expertise",
        persona_type="knowledge",
        tone="calm and logical",
        style="Gives grounded information and explains background plainly",
        traits=PersonaTraits(empathy=45, humor=30, sociability=50, creativity=45, knowledge=95),
        keywords=("history", "science", "fact", "why", "how", "travel", "culture", "learn"),
    ),
    PersonaDescriptor(
        id="Espri",
        name="Espri",
        description="Empath - emotional understanding and support",
        persona_type="empath",
        tone="warm and empathetic",
        style="Focuses on feelings and offers comfort and encouragement",
        traits=PersonaTraits(empathy=95, humor=45, sociability=80, creativity=55, knowledge=45),
        keywords=("feel", "feeling", "sad", "happy", "lonely", "love", "friend", "worry"),
    ),
    PersonaDescriptor(
        id="Luna",
        name="Luna",
        description="Creative - artistic and imaginative",
        persona_type="creative",
        tone="creative and sensory",
        style="Uses metaphors and offers fresh perspectives",
        traits=PersonaTraits(empathy=70, humor=50, sociability=60, creativity=95, knowledge=55),
        keywords=("art", "music", "dream", "color", "imagine", "story", "design", "beautiful"),
    ),
    PersonaDescriptor(
        id="Namu",
        name="Namu",
        description="Analyst - data and logic first",
        persona_type="analyst",
        tone="analytical and objective",
        style="Looks for patterns and breaks things down structurally",
        traits=PersonaTraits(empathy=35, humor=25, sociability=40, creativity=50, knowledge=85),
        keywords=("data", "number", "pattern", "trend", "compare", "analysis", "cost", "statistics"),
    ),
    PersonaDescriptor(
        id="Milo",
        name="Milo",
        description="Humor - witty and cheerful",
        persona_type="humor",
        tone="witty and bright",
        style="Mixes in light jokes and keeps the mood fun",
        traits=PersonaTraits(empathy=60, humor=95, sociability=90, creativity=70, knowledge=45),
        keywords=("funny", "joke", "lol", "haha", "food", "party", "weekend", "fun"),
    ),
    PersonaDescriptor(
        id="Eden",
        name="Eden",
        description="Philosopher - deep reflection and insight",
        persona_type="philosopher",
        tone="reflective and insightful",
        style="Asks fundamental questions and explores meaning",
        traits=PersonaTraits(empathy=70, humor=30, sociability=45, creativity=70, knowledge=80),
        keywords=("meaning", "life", "truth", "time", "exist", "value", "think", "purpose"),
    ),
    PersonaDescriptor(
        id="Ava",
        name="Ava",
        description="Trend - latest trends and culture",
        persona_type="trend",
        tone="trendy and lively",
        style="References current fashions and culture with energy",
        traits=PersonaTraits(empathy=60, humor=70, sociability=95, creativity=65, knowledge=55),
        keywords=("trend", "new", "fashion", "viral", "popular", "style", "social", "brand"),
    ),
    PersonaDescriptor(
        id="Rho",
        name="Rho",
        description="Tech - technology and innovation",
        persona_type="tech",
        tone="technical and forward-looking",
        style="Explains technical angles and proposes inventive ideas",
        traits=PersonaTraits(empathy=35, humor=40, sociability=45, creativity=70, knowledge=90),
        keywords=("tech", "ai", "code", "app", "device", "software", "future", "robot"),
    ),
    PersonaDescriptor(
        id="Noir",
        name="Noir",
        description="Mystery - enigmatic and intriguing",
        persona_type="mystery",
        tone="mysterious and intriguing",
        style="Speaks in hints and metaphors to spark curiosity",
        traits=PersonaTraits(empathy=50, humor=35, sociability=35, creativity=85, knowledge=70),
        keywords=("secret", "mystery", "night", "hidden", "strange", "shadow", "unknown", "clue"),
    ),
)


# =============================================================================
# In-Memory Directory
# =============================================================================

class InMemoryPersonaDirectory:
    """Persona directory backed by a dict, preserving catalogue order.

    Example:
        >>> directory = InMemoryPersonaDirectory()
        >>> directory.get_persona("Kai").persona_type
        'knowledge'
    """

    def __init__(self, personas: Iterable[PersonaDescriptor] | None = None) -> None:
        """Initialize the directory.

        Args:
            personas: Descriptors to serve. Defaults to the built-in catalogue.
        """
        source = DEFAULT_PERSONAS if personas is None else personas
        self._personas: dict[str, PersonaDescriptor] = {p.id: p for p in source}

    @classmethod
    def from_yaml(cls, path: Path | str) -> InMemoryPersonaDirectory:
        """Load a directory from a YAML file with a top-level ``personas`` list.

        Raises:
            FileNotFoundError: If the file does not exist.
            yaml.YAMLError: If the file is not valid YAML.
            pydantic.ValidationError: If an entry is not a valid descriptor.
        """
        yaml_path = Path(path)
        data = yaml.safe_load(yaml_path.read_text(encoding="utf-8")) or {}
        personas = [PersonaDescriptor.model_validate(entry) for entry in data.get("personas", [])]
        logger.info("persona_directory_loaded", path=str(yaml_path), count=len(personas))
        return cls(personas)

    def list_personas(self) -> list[PersonaDescriptor]:
        return list(self._personas.values())

    def get_persona(self, persona_id: str) -> PersonaDescriptor | None:
        return self._personas.get(persona_id)

    def persona_ids(self) -> list[str]:
        """All persona ids, in catalogue order."""
        return list(self._personas)

    def __len__(self) -> int:
        return len(self._personas)

    def __contains__(self, persona_id: object) -> bool:
        return persona_id in self._personas


__all__ = [
    "DEFAULT_PERSONAS",
    "InMemoryPersonaDirectory",
    "PersonaDirectoryProtocol",
]
