"""GreenBot streaming relay (POST /api/chat)."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, StreamingResponse
from loguru import logger

from ..chat import ChatRequest, build_turns
from ..llm import LLMProvider
from ..llm import StreamingResponse as FragmentStream
from ..prompts import get_system_prompt
from .deps import require_llm

router = APIRouter(tags=["Chat"])

CHAT_TEMPERATURE = 0.7
CHAT_TOP_P = 0.95


async def _relay(stream: FragmentStream, first: str | None):
    """Write fragments to the response body exactly as they arrive.

    An upstream error after the first byte ends the body early; the
    client sees a normal end-of-stream and keeps the partial reply.
    """
    fragments = 0
    written = 0
    try:
        if first is not None:
            data = first.encode("utf-8")
            fragments += 1
            written += len(data)
            yield data

        async for fragment in stream:
            data = fragment.encode("utf-8")
            fragments += 1
            written += len(data)
            yield data
    except Exception:
        logger.exception("Upstream failed mid-stream after {} fragments ({} bytes); ending response",
                         fragments, written)
    else:
        logger.info("Chat stream complete: {} fragments, {} bytes", fragments, written)
    finally:
        await stream.aclose()


@router.post("/chat")
async def relay_chat(body: ChatRequest, llm: LLMProvider = Depends(require_llm)):
    """Stream a GreenBot reply for ``body.message``.

    The first fragment is read before the response starts, so an upstream
    failure that happens before any text is produced becomes a 502 JSON
    error instead of an empty stream.

    Args:
        body: New message and prior turns

    Returns:
        StreamingResponse with a ``text/plain; charset=utf-8`` body of raw fragments
    """
    turns = build_turns(body.history, body.message, get_system_prompt())
    logger.debug("Chat request with {} turns", len(turns))

    stream = None
    try:
        stream = await llm.chat_completion_stream(turns, temperature=CHAT_TEMPERATURE, top_p=CHAT_TOP_P)
        try:
            first = await anext(stream)
        except StopAsyncIteration:
            first = None
    except Exception as e:
        logger.error("Upstream failed before streaming: {}", e)
        if stream is not None:
            await stream.aclose()
        return JSONResponse(
            status_code=502,
            content={"error": str(e) or "An error occurred while processing your request with the AI."},
        )

    return StreamingResponse(_relay(stream, first), media_type="text/plain")
