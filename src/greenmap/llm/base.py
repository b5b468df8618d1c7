"""Provider interface used by the chat relay and the insight tasks."""

from abc import ABC, abstractmethod
from typing import Any

from .models import ChatMessage, LLMResponse, StreamingResponse


class LLMProvider(ABC):
    """A generative-language backend for GreenBot.

    The relay only needs ``chat_completion_stream``; the insight tasks use
    the one-shot ``chat_completion`` and ``structured_completion``.
    Providers are async context managers and close their client on exit:

        async with create_llm_provider("gemini", api_key=key) as llm:
            reply = await llm.chat_completion(turns)
    """

    @abstractmethod
    async def chat_completion(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> LLMResponse:
        """Return the whole reply to ``messages`` in one response.

        Args:
            messages: Turns in order; a "system" turn becomes the instruction
            model: Overrides the provider's default model
            temperature: Sampling temperature
            max_tokens: Upper bound on generated tokens
            **kwargs: Extra generation options (top_p, tools, ...)
        """

    @abstractmethod
    async def chat_completion_stream(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> StreamingResponse:
        """Return a lazy stream of reply fragments.

        The upstream request starts on the first ``__anext__``, which is
        also where request errors are raised.
        """

    @abstractmethod
    async def structured_completion(
        self,
        prompt: str,
        schema: Any,
        model: str | None = None,
        **kwargs: Any
    ) -> Any:
        """Ask for JSON shaped like ``schema`` (a pydantic model class).

        Returns:
            The parsed JSON value, or None when the reply does not parse
        """

    @abstractmethod
    async def close(self) -> None:
        """Release the underlying client."""

    async def __aenter__(self) -> "LLMProvider":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        try:
            await self.close()
        except RuntimeError as e:
            # Raised by httpx when the loop is already gone at interpreter exit
            if "Event loop is closed" not in str(e):
                raise
