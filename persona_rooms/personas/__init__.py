"""Personas - descriptors, directory and topic affinity."""

from persona_rooms.personas.affinity import (
    DEFAULT_TOPIC_TABLE,
    AffinityFunction,
    RandomAffinity,
    TableAffinity,
    weighted_affinity,
)
from persona_rooms.personas.directory import (
    DEFAULT_PERSONAS,
    InMemoryPersonaDirectory,
    PersonaDirectoryProtocol,
)
from persona_rooms.personas.models import PersonaDescriptor, PersonaTraits


__all__ = [
    "DEFAULT_PERSONAS",
    "DEFAULT_TOPIC_TABLE",
    "AffinityFunction",
    "InMemoryPersonaDirectory",
    "PersonaDescriptor",
    "PersonaDirectoryProtocol",
    "PersonaTraits",
    "RandomAffinity",
    "TableAffinity",
    "weighted_affinity",
]
