"""Pytest configuration and fixtures."""
import asyncio
import os
import tempfile

import httpx
import pytest

# Keep audit logs and stored sessions out of the working tree
_TMP_DIR = tempfile.mkdtemp(prefix="hlsa-tests-")
os.environ.setdefault("LOG_PATH", os.path.join(_TMP_DIR, "logs"))
os.environ.setdefault("DATA_PATH", os.path.join(_TMP_DIR, "store"))


class FakeCompletionClient:
    """Stands in for the chat completion service.

    Replies are chosen by a keyword found in the system prompt.
    """

    def __init__(self, replies=None, default="Score: 0.8\nReads like a person.", fail_on=(), delay=0.0):
        self.replies = replies or {}
        self.default = default
        self.fail_on = set(fail_on)
        self.delay = delay
        self.calls = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def complete(self, messages, temperature=0.3, max_tokens=250):
        self.calls.append({
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        })
        system = messages[0]["content"]
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            for key in self.fail_on:
                if key in system:
                    raise httpx.ConnectError(f"cannot reach server for {key}")
            for key, reply in self.replies.items():
                if key in system:
                    return reply
            return self.default
        finally:
            self.in_flight -= 1


def keyword_polarity(text: str) -> float:
    """Deterministic polarity: 'love' is positive, 'hate' negative."""
    lowered = text.lower()
    if "love" in lowered:
        return 0.8
    if "hate" in lowered:
        return -0.8
    return 0.0


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset settings cache and service singletons before each test."""
    from hlsa.config import get_settings
    from hlsa.services.analyzer import reset_analysis_service
    from hlsa.services.llm_client import reset_llm_client
    from hlsa.services.store import reset_session_store

    get_settings.cache_clear()
    reset_llm_client()
    reset_session_store()
    reset_analysis_service()
    yield
    get_settings.cache_clear()
    reset_llm_client()
    reset_session_store()
    reset_analysis_service()


@pytest.fixture
def make_client():
    """Factory for fake completion clients."""
    return FakeCompletionClient


@pytest.fixture
def fake_client():
    """Fake completion client scoring every dimension 0.8."""
    return FakeCompletionClient()


@pytest.fixture
def polarity():
    """Deterministic polarity primitive."""
    return keyword_polarity
