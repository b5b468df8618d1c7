"""Value types exchanged with LLM providers."""

from collections.abc import AsyncIterator
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class StreamingResponse:
    """Reply fragments of a streaming completion, in arrival order.

    ``usage`` stays None until the provider reports token counts, which
    happens after the last fragment:

        stream = await llm.chat_completion_stream(turns)
        reply = "".join([f async for f in stream])
        logger.debug("usage: {}", stream.usage)
    """

    def __init__(self, fragments: AsyncIterator[str]):
        self._fragments = fragments
        self._usage: dict[str, Any] | None = None

    @property
    def usage(self) -> dict[str, Any] | None:
        return self._usage

    def set_usage(self, usage: dict[str, Any]) -> None:
        self._usage = usage

    def __aiter__(self) -> "StreamingResponse":
        return self

    async def __anext__(self) -> str:
        return await self._fragments.__anext__()

    async def aclose(self) -> None:
        """Stop the stream early; a no-op for iterators that cannot close."""
        close = getattr(self._fragments, "aclose", None)
        if close is not None:
            await close()


class ChatMessage(BaseModel):
    """A role-tagged turn: "system", "user" or "assistant"."""

    model_config = ConfigDict(frozen=True)

    role: str = Field(description="system, user or assistant")
    content: str = Field(description="Text of the turn")


class LLMResponse(BaseModel):
    """A complete (non-streamed) reply."""

    model_config = ConfigDict(frozen=True)

    content: str = Field(description="Reply text; empty if the model produced none")
    model: str = Field(description="Model that answered")
    usage: dict[str, int] | None = Field(default=None, description="Token counts, if reported")
