"""Unit tests for FallbackTextGenerator."""

from unittest.mock import AsyncMock

import pytest

from persona_rooms.core.exceptions import GenerationTimeoutError
from persona_rooms.generation.fallback import FallbackTextGenerator
from persona_rooms.generation.protocols import TextGenerationProtocol
from persona_rooms.personas.models import PersonaDescriptor
from tests.fakes import FakeTextGenerator


_PERSONA = PersonaDescriptor(id="Kai", name="Kai", persona_type="knowledge")


class TestFallbackTextGenerator:
    """Tests for fallback substitution."""

    def test_fake_satisfies_protocol(self) -> None:
        assert isinstance(FakeTextGenerator(), TextGenerationProtocol)
        assert isinstance(FallbackTextGenerator(), TextGenerationProtocol)

    @pytest.mark.asyncio
    async def test_passes_through_successful_text(self) -> None:
        generator = FallbackTextGenerator(FakeTextGenerator(thinking="  hmm, travel  "))

        assert await generator.generate_thinking(_PERSONA, ["travel"], "hi", "") == "hmm, travel"

    @pytest.mark.asyncio
    async def test_no_inner_generator_returns_fallbacks(self) -> None:
        generator = FallbackTextGenerator()

        assert await generator.generate_thinking(_PERSONA, [], "hi", "") == "..."
        assert await generator.generate_introduction(_PERSONA, []) == "Hi, I'm Kai! Mind if I join?"
        assert (
            await generator.generate_dialogue_turn(_PERSONA, "post", [])
            == "Hmm, let me think about that for a moment."
        )

    @pytest.mark.asyncio
    async def test_errors_are_absorbed(self) -> None:
        inner = FakeTextGenerator(
            fail_on={"generate_thinking", "generate_introduction", "generate_dialogue_turn"}
        )
        generator = FallbackTextGenerator(inner)

        assert await generator.generate_thinking(_PERSONA, [], "hi", "") == "..."
        assert await generator.generate_introduction(_PERSONA, []) == "Hi, I'm Kai! Mind if I join?"
        assert (
            await generator.generate_dialogue_turn(_PERSONA, "post", [])
            == "Hmm, let me think about that for a moment."
        )
        assert len(inner.call_history) == 3

    @pytest.mark.asyncio
    async def test_timeouts_are_absorbed(self) -> None:
        inner = AsyncMock()
        inner.generate_dialogue_turn.side_effect = GenerationTimeoutError(
            "slow", operation="dialogue", timeout_seconds=1.0
        )

        text = await FallbackTextGenerator(inner).generate_dialogue_turn(_PERSONA, "post", [])

        assert text == "Hmm, let me think about that for a moment."

    @pytest.mark.asyncio
    @pytest.mark.parametrize("empty", ["", "   "])
    async def test_empty_text_uses_fallback(self, empty: str) -> None:
        generator = FallbackTextGenerator(FakeTextGenerator(introduction=empty))

        assert await generator.generate_introduction(_PERSONA, ["tech"]) == "Hi, I'm Kai! Mind if I join?"
