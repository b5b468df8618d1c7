"""Tests for the relay client and the chat session driver."""
import asyncio
import json

import httpx
import pytest

from greenmap.chat import (
    APOLOGY_TEXT,
    ChatBusyError,
    ChatMessage,
    ChatSession,
    RelayError,
    Sender,
)
from greenmap.storage import create_conversation_store


class TestChatStreamClient:
    """Tests for ChatStreamClient.stream_reply."""

    @pytest.mark.asyncio
    async def test_posts_request_and_yields_fragments(self, stream_client, chunked):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return chunked([b"Hi", b" there", b"!"])

        client = stream_client(handler)
        fragments = [f async for f in client.stream_reply("Hello")]

        assert "".join(fragments) == "Hi there!"
        assert seen[0].method == "POST"
        assert str(seen[0].url) == "http://relay.test/api/chat"
        assert json.loads(seen[0].content) == {"message": "Hello", "history": []}

    @pytest.mark.asyncio
    async def test_multibyte_character_split_across_chunks(self, stream_client, chunked):
        data = "Go green 🌍!".encode("utf-8")
        split = data.index("🌍".encode("utf-8")) + 1

        client = stream_client(lambda request: chunked([data[:split], data[split:]]))
        fragments = [f async for f in client.stream_reply("Hello")]

        assert "".join(fragments) == "Go green 🌍!"
        assert all("�" not in f for f in fragments)

    @pytest.mark.asyncio
    async def test_error_status_raises_relay_error(self, stream_client):
        client = stream_client(lambda request: httpx.Response(502, json={"error": "quota exceeded"}))

        with pytest.raises(RelayError) as exc_info:
            async for _ in client.stream_reply("Hello"):
                pass

        assert exc_info.value.status_code == 502
        assert exc_info.value.detail == "quota exceeded"


class TestChatSession:
    """Tests for the placeholder lifecycle driven by ChatSession.send."""

    @pytest.mark.asyncio
    async def test_successful_reply(self, stream_client, chunked):
        session = ChatSession(stream_client(lambda request: chunked([b"Hi", b" there", b"!"])))

        reply = await session.send("Hello")

        messages = session.conversation.messages
        assert [(m.sender, m.text) for m in messages] == [
            (Sender.USER, "Hello"),
            (Sender.BOT, "Hi there!"),
        ]
        assert reply is messages[-1]
        assert reply.is_typing is False
        assert session.is_loading is False

    @pytest.mark.asyncio
    async def test_placeholder_exists_before_request(self, stream_client, chunked):
        session: ChatSession

        def handler(request: httpx.Request) -> httpx.Response:
            messages = session.conversation.messages
            assert [m.sender for m in messages] == [Sender.USER, Sender.BOT]
            assert messages[-1].is_typing is True
            assert messages[-1].text == ""
            assert session.is_loading is True
            return chunked([b"ok"])

        session = ChatSession(stream_client(handler))
        await session.send("Hello")

    @pytest.mark.asyncio
    async def test_history_excludes_new_message_and_placeholder(self, stream_client, chunked):
        bodies: list[dict] = []
        replies = iter([b"Hello! How can I help?", b"Sort it by material."])

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(json.loads(request.content))
            return chunked([next(replies)])

        session = ChatSession(stream_client(handler))
        await session.send("Hi")
        await session.send("How do I recycle?")

        assert bodies[0] == {"message": "Hi", "history": []}
        assert bodies[1] == {
            "message": "How do I recycle?",
            "history": [
                {"sender": "user", "text": "Hi"},
                {"sender": "bot", "text": "Hello! How can I help?"},
            ],
        }

    @pytest.mark.asyncio
    async def test_connection_failure_becomes_apology(self, stream_client):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        session = ChatSession(stream_client(handler))
        reply = await session.send("Hello")

        assert reply.text == APOLOGY_TEXT
        assert reply.is_typing is False
        assert session.is_loading is False
        assert len(session.conversation) == 2

    @pytest.mark.asyncio
    async def test_read_failure_replaces_partial_text(self, stream_client, chunked):
        session = ChatSession(stream_client(
            lambda request: chunked([b"Partial ", httpx.ReadError("connection reset")])
        ))

        reply = await session.send("Hello")

        assert reply.text == APOLOGY_TEXT
        assert reply.is_typing is False

    @pytest.mark.asyncio
    async def test_relay_error_becomes_apology(self, stream_client):
        session = ChatSession(stream_client(
            lambda request: httpx.Response(502, json={"error": "upstream down"})
        ))

        reply = await session.send("Hello")

        assert reply.text == APOLOGY_TEXT

    @pytest.mark.asyncio
    async def test_unexpected_body_error_becomes_apology(self, stream_client, chunked):
        session = ChatSession(stream_client(
            lambda request: chunked([b"part", RuntimeError("decoder blew up")])
        ))

        reply = await session.send("Hello")

        assert reply.text == APOLOGY_TEXT
        assert reply.is_typing is False
        assert session.conversation.typing_message is None
        assert session.is_loading is False

    @pytest.mark.asyncio
    async def test_session_usable_after_unexpected_error(self, stream_client, chunked):
        attempts = iter([RuntimeError("transport bug"), None])

        def handler(request: httpx.Request) -> httpx.Response:
            error = next(attempts)
            if error is not None:
                raise error
            return chunked([b"Recovered"])

        session = ChatSession(stream_client(handler))
        first = await session.send("Hello")
        second = await session.send("Hello again")

        assert first.text == APOLOGY_TEXT
        assert second.text == "Recovered"
        assert [m.is_typing for m in session.conversation.messages] == [False] * 4

    @pytest.mark.asyncio
    async def test_empty_stream_completes_with_empty_text(self, stream_client, chunked):
        session = ChatSession(stream_client(lambda request: chunked([])))

        reply = await session.send("Hello")

        assert reply.text == ""
        assert reply.is_typing is False

    @pytest.mark.asyncio
    async def test_resend_after_failure_appends_new_turn(self, stream_client, chunked):
        attempts = iter([httpx.ConnectError("down"), None])

        def handler(request: httpx.Request) -> httpx.Response:
            error = next(attempts)
            if error is not None:
                raise error
            return chunked([b"Back online"])

        session = ChatSession(stream_client(handler))
        await session.send("Hello")
        await session.send("Hello")

        assert [m.text for m in session.conversation.messages] == [
            "Hello", APOLOGY_TEXT, "Hello", "Back online",
        ]

    @pytest.mark.asyncio
    async def test_at_most_one_typing_message_per_update(self, stream_client, chunked):
        snapshots: list[list[ChatMessage]] = []
        session: ChatSession

        def on_update(message: ChatMessage) -> None:
            snapshots.append(session.conversation.messages)

        session = ChatSession(
            stream_client(lambda request: chunked([b"a", b"b", b"c"])),
            on_update=on_update,
        )
        await session.send("one")
        await session.send("two")

        assert snapshots
        for messages in snapshots:
            assert sum(m.is_typing for m in messages) <= 1

    @pytest.mark.asyncio
    async def test_listener_sees_fragments_grow(self, stream_client, chunked):
        texts: list[str] = []

        def on_update(message: ChatMessage) -> None:
            if message.sender == Sender.BOT:
                texts.append(message.text)

        session = ChatSession(stream_client(lambda request: chunked([b"Hi", b" there"])), on_update=on_update)
        await session.send("Hello")

        assert texts == ["", "Hi", "Hi there", "Hi there"]

    @pytest.mark.asyncio
    async def test_blank_message_rejected(self, stream_client, chunked):
        session = ChatSession(stream_client(lambda request: chunked([b"x"])))

        with pytest.raises(ValueError):
            await session.send("   ")
        assert len(session.conversation) == 0

    @pytest.mark.asyncio
    async def test_concurrent_send_is_busy(self, stream_client, chunked):
        release = asyncio.Event()

        class SlowStream(httpx.AsyncByteStream):
            async def __aiter__(self):
                await release.wait()
                yield b"done"

        session = ChatSession(stream_client(lambda request: httpx.Response(200, stream=SlowStream())))
        first = asyncio.create_task(session.send("one"))
        while not session.is_loading:
            await asyncio.sleep(0)

        with pytest.raises(ChatBusyError):
            await session.send("two")

        release.set()
        reply = await first
        assert reply.text == "done"
        assert len(session.conversation) == 2

    @pytest.mark.asyncio
    async def test_cancellation_freezes_partial_reply(self, stream_client):
        got_first = asyncio.Event()

        class StallingStream(httpx.AsyncByteStream):
            async def __aiter__(self):
                yield b"Half a "
                got_first.set()
                await asyncio.Event().wait()
                yield b"never"

        session = ChatSession(stream_client(lambda request: httpx.Response(200, stream=StallingStream())))
        task = asyncio.create_task(session.send("Hello"))
        await got_first.wait()
        # Let the session apply the first fragment
        while session.conversation.messages[-1].text != "Half a ":
            await asyncio.sleep(0)

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        reply = session.conversation.messages[-1]
        assert reply.text == "Half a "
        assert reply.is_typing is False
        assert session.is_loading is False

    @pytest.mark.asyncio
    async def test_saves_transcript_to_store(self, stream_client, chunked):
        store = create_conversation_store("memory")
        await store.connect()
        session = ChatSession(stream_client(lambda request: chunked([b"Plant trees!"])), store=store)

        await session.send("Any tips?")

        saved = await store.get(session.conversation.conversation_id)
        assert saved is not None
        assert [m.text for m in saved.messages] == ["Any tips?", "Plant trees!"]
        assert saved.typing_message is None
