"""Shared fixtures for all tests."""

import pytest

from backend.core.config import ProviderConfig, Settings
from backend.core.llm_adapter import ProviderError, ProviderResult


class FakeProvider:
    """Stands in for a provider adapter; records every conversation it receives."""

    def __init__(self, name, text="", error=None, configured=True, log=None):
        self.name = name
        self.text = text
        self.error = error
        self.configured = configured
        self.calls = []
        self._log = log

    async def generate(self, conversation):
        self.calls.append(conversation)
        if self._log is not None:
            self._log.append(self.name)
        if self.error is not None:
            raise self.error
        return ProviderResult(text=self.text, provider=self.name)

    async def aclose(self):
        pass


@pytest.fixture
def fake_provider():
    return FakeProvider


@pytest.fixture
def provider_error():
    return ProviderError


@pytest.fixture
def primary_config() -> ProviderConfig:
    return ProviderConfig(
        base_url="",
        model="test-openai-model",
        enabled=True,
        api_key="test-openai-key",
    )


@pytest.fixture
def secondary_config() -> ProviderConfig:
    return ProviderConfig(
        base_url="http://ollama.test:11434",
        model="test-ollama-model",
        enabled=True,
    )


@pytest.fixture
def settings(primary_config, secondary_config) -> Settings:
    return Settings(
        primary=primary_config,
        secondary=secondary_config,
        timeout=1.0,
        cors_origins=("http://localhost:8501",),
        max_body_bytes=4096,
    )


@pytest.fixture
def hi_conversation() -> list[dict]:
    return [{"role": "user", "content": "hi"}]


@pytest.fixture
def long_conversation() -> list[dict]:
    """25 alternating turns; content encodes the original index."""
    return [
        {"role": "user" if i % 2 == 0 else "assistant", "content": f"msg {i}"}
        for i in range(25)
    ]
