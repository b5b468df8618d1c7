"""Gemini backend built on the google-genai SDK.

https://github.com/googleapis/python-genai

Gemini sometimes answers a one-shot request with no text at all (safety
filtering or a transient service fault). One-shot calls retry with a
short linear backoff; streams are relayed as-is.
"""

import asyncio
import json
from collections.abc import AsyncIterator, Callable
from typing import Any

from google import genai
from google.genai import types

from ..base import LLMProvider
from ..models import ChatMessage, LLMResponse, StreamingResponse

DEFAULT_MODEL = "gemini-2.5-flash"

# Gemini calls the assistant side of a conversation "model"
_GEMINI_ROLES = {"user": "user", "assistant": "model"}


def split_turns(messages: list[ChatMessage]) -> tuple[str | None, list[types.Content]]:
    """Separate the system instruction from the conversational turns.

    Turns with a role other than user, assistant or system are ignored.
    If several system turns are given the last one wins.
    """
    instruction = None
    contents: list[types.Content] = []
    for turn in messages:
        if turn.role == "system":
            instruction = turn.content
            continue
        role = _GEMINI_ROLES.get(turn.role)
        if role is not None:
            contents.append(types.Content(role=role, parts=[types.Part(text=turn.content)]))
    return instruction, contents


def text_of(response: Any) -> str:
    """Concatenated text parts of a response or stream chunk ("" if none)."""
    for candidate in response.candidates or []:
        parts = candidate.content.parts if candidate.content else None
        texts = [p.text for p in parts or [] if getattr(p, "text", None)]
        if texts:
            return "".join(texts)
        break
    try:
        return response.text or ""
    except (ValueError, AttributeError):
        return ""


def usage_of(response: Any) -> dict[str, int] | None:
    meta = response.usage_metadata
    if not meta:
        return None
    return {
        "prompt_tokens": meta.prompt_token_count or 0,
        "completion_tokens": meta.candidates_token_count or 0,
        "total_tokens": meta.total_token_count or 0,
    }


class GeminiProvider(LLMProvider):
    """LLMProvider for Google Gemini.

    Extra keyword arguments to the completion methods are passed straight
    into ``types.GenerateContentConfig`` (``top_p``, ``tools``,
    ``response_mime_type``, ``response_schema`` ...).
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        max_retries: int = 3,
        **client_kwargs: Any
    ):
        """
        Args:
            api_key: Gemini API key
            model: Model used when a call does not name one
            max_retries: Attempts per one-shot call when the reply is empty
            **client_kwargs: Passed to ``genai.Client``
        """
        self._client = genai.Client(api_key=api_key, **client_kwargs)
        self._model = model
        self._max_retries = max(1, max_retries)

    @property
    def model(self) -> str:
        return self._model

    def _request(
        self,
        messages: list[ChatMessage],
        model: str | None,
        temperature: float,
        max_tokens: int | None,
        options: dict[str, Any],
    ) -> dict[str, Any]:
        """Keyword arguments for a generate_content call."""
        instruction, contents = split_turns(messages)
        config = types.GenerateContentConfig(
            system_instruction=instruction,
            temperature=temperature,
            max_output_tokens=max_tokens,
            **options
        )
        return {"model": model or self._model, "contents": contents, "config": config}

    async def chat_completion(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> LLMResponse:
        request = self._request(messages, model, temperature, max_tokens, kwargs)
        content, usage = "", None

        for attempt in range(1, self._max_retries + 1):
            response = await self._client.aio.models.generate_content(**request)
            usage = usage_of(response) or usage
            content = text_of(response)
            if content or attempt == self._max_retries:
                break
            await asyncio.sleep(0.5 * attempt)

        return LLMResponse(content=content, model=request["model"], usage=usage)

    async def chat_completion_stream(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> StreamingResponse:
        request = self._request(messages, model, temperature, max_tokens, kwargs)
        stream = StreamingResponse(self._fragments(request, lambda usage: stream.set_usage(usage)))
        return stream

    async def _fragments(
        self,
        request: dict[str, Any],
        on_usage: Callable[[dict[str, int]], None],
    ) -> AsyncIterator[str]:
        """Yield non-empty chunk texts; report usage once the stream ends."""
        usage = None
        chunks = await self._client.aio.models.generate_content_stream(**request)
        async for chunk in chunks:
            # Only the last chunk carries usage_metadata
            usage = usage_of(chunk) or usage
            text = text_of(chunk)
            if text:
                yield text
        if usage:
            on_usage(usage)

    async def structured_completion(
        self,
        prompt: str,
        schema: Any,
        model: str | None = None,
        **kwargs: Any
    ) -> Any:
        response = await self.chat_completion(
            [ChatMessage(role="user", content=prompt)],
            model=model,
            response_mime_type="application/json",
            response_schema=schema,
            **kwargs
        )
        try:
            return json.loads(response.content)
        except json.JSONDecodeError:
            return None

    async def close(self) -> None:
        # genai.Client keeps no connection that needs closing
        pass
