"""Fake text generator for orchestration and membership tests.

Satisfies TextGenerationProtocol via duck typing and records every call.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import Any


# =============================================================================
# Test Constants
# =============================================================================

_DEFAULT_THINKING = "thinking about it"
_DEFAULT_INTRODUCTION = "hello everyone"


class FakeTextGenerator:
    """Test double for the text-generation collaborator.

    Attributes:
        call_history: Recorded calls as dicts with method and persona_id.
    """

    def __init__(
        self,
        *,
        thinking: str = _DEFAULT_THINKING,
        introduction: str = _DEFAULT_INTRODUCTION,
        dialogue: str | None = None,
        fail_on: set[str] | None = None,
        fail_for_personas: set[str] | None = None,
        delay: float = 0.0,
    ) -> None:
        """Initialize the fake.

        Args:
            thinking: Text returned by generate_thinking.
            introduction: Text returned by generate_introduction.
            dialogue: Text returned by generate_dialogue_turn; defaults to
                "<persona id> says something #<n>".
            fail_on: Method names that raise RuntimeError.
            fail_for_personas: Persona ids whose calls raise RuntimeError.
            delay: Simulated latency per call.
        """
        self.thinking = thinking
        self.introduction = introduction
        self.dialogue = dialogue
        self.fail_on = fail_on or set()
        self.fail_for_personas = fail_for_personas or set()
        self.delay = delay
        self.call_history: list[dict[str, Any]] = []

    async def _record(self, method: str, persona_id: str) -> None:
        self.call_history.append({"method": method, "persona_id": persona_id})
        if self.delay:
            await asyncio.sleep(self.delay)
        if method in self.fail_on or persona_id in self.fail_for_personas:
            raise RuntimeError(f"{method} failed for {persona_id}")

    def calls(self, method: str) -> list[dict[str, Any]]:
        return [c for c in self.call_history if c["method"] == method]

    async def generate_thinking(self, persona, topics: Sequence[str], last_message: str, history_text: str) -> str:
        await self._record("generate_thinking", persona.id)
        return self.thinking

    async def generate_introduction(self, persona, topic_labels: Sequence[str]) -> str:
        await self._record("generate_introduction", persona.id)
        return self.introduction

    async def generate_dialogue_turn(self, persona, scope_content: str, history) -> str:
        await self._record("generate_dialogue_turn", persona.id)
        if self.dialogue is not None:
            return self.dialogue
        return f"{persona.id} says something #{len(self.calls('generate_dialogue_turn'))}"
