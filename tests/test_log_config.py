"""Tests for server logging setup."""
import logging
import sys

import pytest
from loguru import logger

from greenmap.server import configure_logging
from greenmap.server.log_config import InterceptHandler


@pytest.fixture
def captured():
    """Configure logging, then collect loguru messages into a list."""
    configure_logging("DEBUG")
    messages: list[str] = []
    sink_id = logger.add(messages.append, format="{level}|{message}")
    yield messages
    logger.remove(sink_id)
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi"):
        logging.getLogger(name).handlers = []
        logging.getLogger(name).propagate = True
    logger.remove()
    logger.add(sys.stderr)


def test_uvicorn_records_reach_loguru(captured):
    logging.getLogger("uvicorn.error").warning("Shutting down %s", "worker")

    assert any(m.startswith("WARNING|Shutting down worker") for m in captured)
    assert isinstance(logging.getLogger("uvicorn.error").handlers[0], InterceptHandler)


def test_file_sink_created(tmp_path):
    log_file = tmp_path / "logs" / "greenmap.log"
    try:
        configure_logging("INFO", log_file)
        logger.info("relay started")
        logger.complete()
    finally:
        logger.remove()
        logger.add(sys.stderr)

    assert "relay started" in log_file.read_text(encoding="utf-8")
