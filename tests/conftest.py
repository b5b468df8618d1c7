"""Pytest configuration and shared fixtures."""
import os
from collections.abc import AsyncIterator, Callable
from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient

from greenmap.chat import ChatStreamClient
from greenmap.llm import ChatMessage, LLMProvider, LLMResponse, StreamingResponse
from greenmap.server import create_app


class TrackedFragments:
    """Async iterator over a generator that remembers whether it was closed."""

    def __init__(self, generator):
        self._generator = generator
        self.pulled = 0
        self.closed = False

    def __aiter__(self):
        return self

    async def __anext__(self) -> str:
        self.pulled += 1
        return await self._generator.__anext__()

    async def aclose(self) -> None:
        self.closed = True
        await self._generator.aclose()


class FakeProvider(LLMProvider):
    """Scripted LLM provider that records every call."""

    def __init__(
        self,
        fragments: list[str] | None = None,
        fail_before: Exception | None = None,
        fail_after: int | None = None,
        completion: str | Exception = "",
        structured: Any = None,
    ):
        self.fragments = list(fragments or [])
        self.fail_before = fail_before
        self.fail_after = fail_after
        self.completion = completion
        self.structured = structured
        self.calls: list[dict[str, Any]] = []
        self.streams: list[TrackedFragments] = []
        self.closed = False

    async def chat_completion(self, messages, model=None, temperature=0.7, max_tokens=None, **kwargs):
        self.calls.append({"messages": messages, "model": model, "temperature": temperature, **kwargs})
        if isinstance(self.completion, Exception):
            raise self.completion
        return LLMResponse(content=self.completion, model=model or "fake-model")

    async def chat_completion_stream(self, messages, model=None, temperature=0.7, max_tokens=None, **kwargs):
        self.calls.append({"messages": messages, "model": model, "temperature": temperature, **kwargs})
        fragments = TrackedFragments(self._generate())
        self.streams.append(fragments)
        return StreamingResponse(fragments)

    async def _generate(self) -> AsyncIterator[str]:
        if self.fail_before is not None:
            raise self.fail_before
        for index, fragment in enumerate(self.fragments):
            if self.fail_after is not None and index == self.fail_after:
                raise RuntimeError("upstream connection dropped")
            yield fragment

    async def structured_completion(self, prompt, schema, model=None, **kwargs):
        self.calls.append({"prompt": prompt, "schema": schema, "model": model, **kwargs})
        if isinstance(self.structured, Exception):
            raise self.structured
        return self.structured

    async def close(self) -> None:
        self.closed = True

    @property
    def last_turns(self) -> list[ChatMessage]:
        return self.calls[-1]["messages"]


class ChunkStream(httpx.AsyncByteStream):
    """Response body that yields the given byte chunks one by one.

    An Exception in ``chunks`` is raised at that position.
    """

    def __init__(self, chunks: list[bytes | Exception]):
        self._chunks = chunks

    async def __aiter__(self):
        for chunk in self._chunks:
            if isinstance(chunk, Exception):
                raise chunk
            yield chunk


@pytest.fixture
def fake_llm() -> Callable[..., FakeProvider]:
    """Factory for scripted providers."""
    return FakeProvider


@pytest.fixture
def relay_client(fake_llm) -> Callable[[FakeProvider | None], TestClient]:
    """Build a TestClient around an app using the given provider."""
    def _build(llm: FakeProvider | None) -> TestClient:
        return TestClient(create_app(llm=llm, cors_origins=[]))
    return _build


@pytest.fixture
def stream_client() -> Callable[..., ChatStreamClient]:
    """Build a ChatStreamClient whose transport is an httpx.MockTransport handler."""
    def _build(handler) -> ChatStreamClient:
        http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return ChatStreamClient("http://relay.test/api/chat", client=http)
    return _build


@pytest.fixture
def chunked() -> Callable[..., httpx.Response]:
    """Build a plain-text response whose body arrives in the given chunks."""
    def _build(chunks: list[bytes | Exception], status_code: int = 200) -> httpx.Response:
        return httpx.Response(
            status_code,
            headers={"content-type": "text/plain; charset=utf-8"},
            stream=ChunkStream(chunks),
        )
    return _build


@pytest.fixture(scope="session")
def api_keys():
    """Return API keys from environment."""
    return {
        "gemini": os.getenv("GEMINI_API_KEY"),
    }
