from __future__ import annotations

import pytest
from loguru import logger


@pytest.fixture
def caplog_loguru():
    """Collect loguru messages emitted during a test."""
    messages: list[str] = []
    handler_id = logger.add(lambda m: messages.append(m.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)
