"""Chat Generation Client.

HTTP client for an OpenAI-compatible ``/v1/chat/completions`` endpoint that
implements TextGenerationProtocol. Transport failures are raised as
GenerationError / GenerationTimeoutError; wrap the client in
FallbackTextGenerator to turn them into default lines.
"""

from __future__ import annotations

from collections.abc import Sequence

import httpx
from pydantic import BaseModel, Field, ValidationError

from persona_rooms.core.config import Settings, get_settings
from persona_rooms.core.exceptions import GenerationError, GenerationTimeoutError
from persona_rooms.core.logging import get_logger
from persona_rooms.generation import prompts
from persona_rooms.personas.models import PersonaDescriptor
from persona_rooms.rooms.models import HistoryEntry


logger = get_logger(__name__)

_COMPLETIONS_PATH = "/v1/chat/completions"


# =============================================================================
# Request/Response Models
# =============================================================================

class ChatMessage(BaseModel):
    """Chat message."""

    role: str = Field(..., description="Message role: user, system, assistant")
    content: str = Field(..., description="Message content")


class ChatCompletionRequest(BaseModel):
    """OpenAI-compatible chat completion request."""

    model: str = Field(..., description="Model ID")
    messages: list[ChatMessage] = Field(..., description="Conversation messages")
    temperature: float = Field(default=0.8, ge=0.0, le=2.0)
    max_tokens: int = Field(default=200, gt=0)
    stream: bool = Field(default=False)


class ChatCompletionChoice(BaseModel):
    """Choice in chat completion response."""

    index: int = 0
    message: ChatMessage
    finish_reason: str | None = None


class ChatCompletionResponse(BaseModel):
    """OpenAI-compatible chat completion response."""

    id: str = ""
    model: str = ""
    choices: list[ChatCompletionChoice]


# =============================================================================
# Client
# =============================================================================

class ChatGenerationClient:
    """Text generator backed by a chat completions service.

    Usage:
        client = ChatGenerationClient.from_settings(get_settings())
        generator = FallbackTextGenerator(client)
        ...
        await client.close()

    Attributes:
        base_url: Base URL of the service
        model: Model ID sent with every request
        timeout: Request timeout in seconds
    """

    def __init__(
        self,
        base_url: str,
        model: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Base URL of the chat completions service
            model: Model ID
            timeout: Request timeout in seconds
            transport: Optional httpx transport (e.g. httpx.MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> ChatGenerationClient:
        """Build a client from application settings."""
        settings = settings or get_settings()
        return cls(
            base_url=settings.generation_base_url,
            model=settings.generation_model,
            timeout=settings.generation_timeout_seconds,
        )

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client (lazy initialization)."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Release HTTP client resources."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def complete(
        self,
        messages: list[dict[str, str]],
        operation: str,
        persona_id: str | None = None,
        max_tokens: int = 200,
        temperature: float = 0.8,
    ) -> str:
        """Run one chat completion.

        Args:
            messages: Message dicts with 'role' and 'content'
            operation: Generation call name, used in errors and logs
            persona_id: Persona the text is generated for
            max_tokens: Maximum tokens to generate
            temperature: Sampling temperature

        Returns:
            Completion text of the first choice

        Raises:
            GenerationTimeoutError: If the request times out
            GenerationError: On HTTP errors or an invalid response
        """
        request = ChatCompletionRequest(
            model=self.model,
            messages=[ChatMessage(**m) for m in messages],
            temperature=temperature,
            max_tokens=max_tokens,
        )

        try:
            response = await self._get_client().post(
                _COMPLETIONS_PATH,
                json=request.model_dump(),
            )
            response.raise_for_status()
            completion = ChatCompletionResponse.model_validate(response.json())
        except httpx.TimeoutException as e:
            raise GenerationTimeoutError(
                f"{operation} generation timed out",
                operation=operation,
                timeout_seconds=self.timeout,
                persona_id=persona_id,
                cause=e,
            ) from e
        except (httpx.HTTPError, ValidationError, ValueError) as e:
            raise GenerationError(
                f"{operation} generation failed: {e}",
                operation=operation,
                persona_id=persona_id,
                cause=e,
            ) from e

        if not completion.choices:
            raise GenerationError(
                f"{operation} generation returned no choices",
                operation=operation,
                persona_id=persona_id,
            )

        logger.debug(
            "generation_complete",
            operation=operation,
            persona_id=persona_id,
            model=completion.model or self.model,
        )
        return completion.choices[0].message.content.strip()

    # -------------------------------------------------------------------------
    # TextGenerationProtocol
    # -------------------------------------------------------------------------

    async def generate_thinking(
        self,
        persona: PersonaDescriptor,
        topics: Sequence[str],
        last_message: str,
        history_text: str,
    ) -> str:
        return await self.complete(
            prompts.build_thinking_messages(persona, topics, last_message, history_text),
            operation="thinking",
            persona_id=persona.id,
            max_tokens=60,
        )

    async def generate_introduction(
        self,
        persona: PersonaDescriptor,
        topic_labels: Sequence[str],
    ) -> str:
        return await self.complete(
            prompts.build_introduction_messages(persona, topic_labels),
            operation="introduction",
            persona_id=persona.id,
            max_tokens=60,
        )

    async def generate_dialogue_turn(
        self,
        persona: PersonaDescriptor,
        scope_content: str,
        history: Sequence[HistoryEntry],
    ) -> str:
        return await self.complete(
            prompts.build_dialogue_messages(persona, scope_content, history),
            operation="dialogue",
            persona_id=persona.id,
        )


__all__ = [
    "ChatCompletionRequest",
    "ChatCompletionResponse",
    "ChatGenerationClient",
    "ChatMessage",
]
