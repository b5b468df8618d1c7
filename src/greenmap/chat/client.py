"""HTTP client for the GreenBot streaming relay.

Hides the transport details of ``POST /api/chat``:
- Request encoding (ChatRequest as JSON)
- Incremental reading of the chunked response body
- Stateful UTF-8 decoding across chunk boundaries
- Mapping of non-2xx replies to RelayError
"""

from collections.abc import AsyncIterator, Sequence
from typing import Any

import httpx

from .decoding import FragmentDecoder
from .errors import RelayError
from .models import ChatRequest, HistoryTurn

DEFAULT_RELAY_URL = "http://127.0.0.1:8000/api/chat"


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        return str(body.get("error") or body.get("detail") or body)
    return str(body)


class ChatStreamClient:
    """Streams GreenBot replies from the relay as decoded text fragments.

    Usage:
        async with ChatStreamClient(url) as client:
            async for fragment in client.stream_reply("Hello", history=[]):
                print(fragment, end="")

    Breaking out of the loop (or cancelling the task running it) closes
    the underlying HTTP response.
    """

    def __init__(
        self,
        url: str = DEFAULT_RELAY_URL,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ):
        """Initialize the relay client.

        Args:
            url: Full URL of the chat relay endpoint
            client: Existing AsyncClient to use (not closed by this object)
            timeout: Connect/write timeout in seconds; reads wait indefinitely
        """
        self._url = url
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout, read=None)
        )

    @property
    def url(self) -> str:
        return self._url

    async def stream_reply(
        self,
        message: str,
        history: Sequence[HistoryTurn] = ()
    ) -> AsyncIterator[str]:
        """Post a chat request and yield reply fragments in arrival order.

        Args:
            message: The new user message
            history: Prior turns, excluding the message and any placeholder

        Yields:
            Decoded text fragments; concatenated they form the full reply

        Raises:
            RelayError: If the relay answers with a non-success status
            httpx.HTTPError: On connection or read failures
        """
        request = ChatRequest(message=message, history=list(history))
        decoder = FragmentDecoder()

        async with self._client.stream(
            "POST",
            self._url,
            json=request.model_dump(mode="json"),
            headers={"Accept": "text/plain"},
        ) as response:
            if response.is_error:
                await response.aread()
                raise RelayError(response.status_code, _error_detail(response))

            async for chunk in response.aiter_bytes():
                text = decoder.decode(chunk)
                if text:
                    yield text

        tail = decoder.flush()
        if tail:
            yield tail

    async def close(self) -> None:
        """Close the HTTP client if this object created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "ChatStreamClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
