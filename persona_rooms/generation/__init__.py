"""Text generation: collaborator protocol, fallback wrapper and HTTP client."""

from persona_rooms.generation.client import ChatGenerationClient
from persona_rooms.generation.fallback import FallbackTextGenerator
from persona_rooms.generation.protocols import TextGenerationProtocol


__all__ = ["ChatGenerationClient", "FallbackTextGenerator", "TextGenerationProtocol"]
