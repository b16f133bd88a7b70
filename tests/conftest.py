"""Root test configuration: quiet loguru and isolate config lookups"""

import pytest
from loguru import logger


@pytest.fixture(autouse=True)
def quiet_logs():
    """Drop loguru's default stderr sink for each test; tests add their own sinks when asserting on logs."""
    logger.remove()
    yield
    logger.remove()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Run every test from an empty directory with no BLOCKMD_* variables set."""
    import os
    for name in list(os.environ):
        if name.startswith("BLOCKMD_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)


@pytest.fixture(name="log_messages")
def log_messages_fixture():
    """Collect loguru messages emitted during the test."""
    messages: list[str] = []
    sink_id = logger.add(lambda m: messages.append(m.record["message"]), level="DEBUG")
    yield messages
    logger.remove(sink_id)
