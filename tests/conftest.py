# tests/conftest.py
import os
import asyncio
import logging
from typing import Optional

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# Ensure test-friendly env (no real keys, no .env surprises)
os.environ.setdefault("LLM_BACKENDS", "openai,anthropic,ollama")
os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")
os.environ.setdefault("ANTHROPIC_API_KEY", "test-anthropic-key")
os.environ.setdefault("CORS_ALLOWED_ORIGINS", "http://localhost:5173")

# IMPORTANT: import the app after envs are set
from llm_compare.main import create_app
from llm_compare.providers.base import ChatCompletion, RateLimit, Usage
from llm_compare.providers.registry import ModelRegistry
from llm_compare.services.comparison import ComparisonService


class FakeClient:
    """In-memory ModelClient: records calls, answers or raises."""

    def __init__(
        self,
        name: str,
        text: str = "",
        *,
        model: str = "",
        error: Optional[Exception] = None,
        delay: float = 0.0,
        rate_limit: Optional[RateLimit] = None,
    ) -> None:
        self.name = name
        self.text = text or f"answer from {name}"
        self.model = model or f"{name}-model"
        self.error = error
        self.delay = delay
        self.rate_limit = rate_limit
        self.calls: list[tuple[str, str]] = []

    async def send(self, system_prompt: str, user_prompt: str) -> ChatCompletion:
        self.calls.append((system_prompt, user_prompt))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return ChatCompletion(
            text=self.text,
            model=self.model,
            finish_reason="stop",
            usage=Usage(prompt_tokens=25, completion_tokens=150, total_tokens=175),
            rate_limit=self.rate_limit,
        )


@pytest.fixture
def fake_clients():
    return {
        "openai": FakeClient("openai", model="gpt-4-turbo"),
        "anthropic": FakeClient("anthropic", model="claude-3-opus"),
        "ollama": FakeClient("ollama", model="llama3"),
    }

@pytest.fixture
def registry(fake_clients):
    return ModelRegistry(fake_clients)

@pytest.fixture
def service(registry):
    return ComparisonService(registry)

@pytest_asyncio.fixture
async def app(registry):
    return create_app(registry=registry)

@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

@pytest.fixture
def caplog_info(caplog):
    caplog.set_level(logging.INFO)
    return caplog
