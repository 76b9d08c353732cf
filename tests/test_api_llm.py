# tests/test_api_llm.py
import pytest
from httpx import AsyncClient, ASGITransport

from conftest import FakeClient
from llm_compare.main import create_app
from llm_compare.providers.base import ChatCompletion, RateLimit, Usage
from llm_compare.providers.registry import ModelRegistry
from llm_compare.schemas.compare import RateLimitInfo

COMPARE = "/api/llm/compare"


@pytest.mark.asyncio
async def test_health(client):
    # /health answers 200 with an empty body.
    r = await client.get("/api/llm/health")
    assert r.status_code == 200
    assert r.content == b""


@pytest.mark.asyncio
async def test_available(client):
    r = await client.get("/api/llm/available")
    assert r.status_code == 200
    names = r.json()
    assert len(names) == 3
    assert set(names) == {"openai", "anthropic", "ollama"}


@pytest.mark.asyncio
async def test_compare_success(client):
    r = await client.post(COMPARE, json={"prompt": "What is AI?", "llms": ["openai", "anthropic"]})
    assert r.status_code == 200
    responses = r.json()["responses"]
    assert len(responses) == 2
    assert responses[0]["llm"] == "openai"
    assert responses[0]["response"] == "answer from openai"
    meta = responses[0]["metadata"]
    assert meta["model"] == "gpt-4-turbo"
    assert meta["finishReason"] == "stop"
    assert meta["promptTokens"] == 25
    assert meta["generationTokens"] == 150
    assert meta["totalTokens"] == 175
    assert meta["responseTime"] >= 0
    assert meta["timestamp"]
    assert "rateLimit" in meta
    assert responses[1]["llm"] == "anthropic"
    assert responses[1]["metadata"]["model"] == "claude-3-opus"


@pytest.mark.asyncio
async def test_compare_rate_limit_serialized():
    registry = ModelRegistry({
        "openai": FakeClient("openai", rate_limit=RateLimit(requests_limit=500, requests_remaining=499, reset_after_seconds=3)),
    })
    transport = ASGITransport(app=create_app(registry=registry))
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        r = await ac.post(COMPARE, json={"prompt": "hi", "llms": ["openai"]})
    rate = r.json()["responses"][0]["metadata"]["rateLimit"]
    assert rate["requestsLimit"] == 500
    assert rate["requestsRemaining"] == 499
    assert rate["resetAfter"] == 3


@pytest.mark.asyncio
async def test_compare_error_entry_has_no_metadata():
    registry = ModelRegistry({
        "openai": FakeClient("openai", error=RuntimeError("API Error")),
        "ollama": FakeClient("ollama"),
    })
    transport = ASGITransport(app=create_app(registry=registry))
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        r = await ac.post(COMPARE, json={"prompt": "hi", "llms": ["openai", "ollama"]})
    assert r.status_code == 200
    failed, ok = r.json()["responses"]
    assert failed == {"llm": "openai", "response": "Error: API Error"}
    assert ok["llm"] == "ollama"
    assert "metadata" in ok


@pytest.mark.asyncio
async def test_compare_empty_llms(client):
    r = await client.post(COMPARE, json={"prompt": "hi", "llms": []})
    assert r.status_code == 200
    assert r.json() == {"responses": []}


@pytest.mark.asyncio
async def test_compare_empty_prompt(client, fake_clients):
    r = await client.post(COMPARE, json={"prompt": "", "llms": ["openai"]})
    assert r.status_code == 400
    body = r.json()
    assert body["error"] == "Validation Failed"
    assert body["status"] == 400
    assert body["message"] == "Invalid request parameters"
    assert "prompt" in body["details"]
    assert fake_clients["openai"].calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [{"prompt": "hi"}, {"prompt": "hi", "llms": None}])
async def test_compare_missing_or_null_llms(client, payload):
    r = await client.post(COMPARE, json=payload)
    assert r.status_code == 400
    body = r.json()
    assert body["error"] == "Validation Failed"
    assert "llms" in body["details"]


@pytest.mark.asyncio
async def test_compare_unknown_model(client, fake_clients):
    r = await client.post(COMPARE, json={"prompt": "hi", "llms": ["openai", "doesnotexist"]})
    assert r.status_code == 404
    body = r.json()
    assert body["error"] == "Model Not Found"
    assert "doesnotexist" in body["message"]
    assert "timestamp" in body
    assert "details" not in body
    assert fake_clients["openai"].calls == []


@pytest.mark.asyncio
async def test_compare_invalid_json(client):
    r = await client.post(COMPARE, content=b"{not json", headers={"Content-Type": "application/json"})
    assert r.status_code == 400
    assert r.json()["error"] == "Malformed JSON"


@pytest.mark.asyncio
async def test_compare_missing_content_type(client):
    r = await client.post(COMPARE, content=b'{"prompt": "hi", "llms": ["openai"]}')
    assert r.status_code == 415
    assert r.json()["error"] == "Unsupported Media Type"


@pytest.mark.asyncio
async def test_compare_text_plain_rejected(client):
    r = await client.post(COMPARE, content=b"hi", headers={"Content-Type": "text/plain"})
    assert r.status_code == 415
    assert "text/plain" in r.json()["message"]


@pytest.mark.asyncio
async def test_unknown_route_uses_error_shape(client):
    r = await client.get("/api/llm/nothing-here")
    assert r.status_code == 404
    assert r.json()["error"] == "Not Found"


class ExplodingRegistry(ModelRegistry):
    def missing(self, names):
        raise RuntimeError("registry exploded")


@pytest.mark.asyncio
async def test_unexpected_error_is_500_with_stable_message():
    app = create_app(registry=ExplodingRegistry({}))
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        r = await ac.post(COMPARE, json={"prompt": "hi", "llms": ["openai"]})
    assert r.status_code == 500
    body = r.json()
    assert body["error"] == "Internal Server Error"
    assert body["message"] == "An unexpected error occurred"
    assert "exploded" not in body["message"]


@pytest.mark.asyncio
async def test_cors_preflight(client):
    r = await client.options(
        COMPARE,
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "POST",
        },
    )
    assert r.status_code == 200
    assert r.headers["access-control-allow-origin"] == "http://localhost:5173"
    assert r.headers["access-control-allow-credentials"] == "true"


class NegativeUsageClient:
    name = "odd"

    async def send(self, system_prompt, user_prompt):
        return ChatCompletion(text="x", model="odd", usage=Usage(prompt_tokens=-1))


@pytest.mark.asyncio
async def test_compare_malformed_completion_is_one_error_entry():
    registry = ModelRegistry({"odd": NegativeUsageClient(), "ollama": FakeClient("ollama")})
    transport = ASGITransport(app=create_app(registry=registry))
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        r = await ac.post(COMPARE, json={"prompt": "hi", "llms": ["odd", "ollama"]})
    assert r.status_code == 200
    odd, ok = r.json()["responses"]
    assert odd["response"].startswith("Error: ")
    assert "metadata" not in odd
    assert ok["metadata"]["totalTokens"] == 175


class BrokenModelRegistry(ModelRegistry):
    def missing(self, names):
        # an internal model that fails validation, not a client mistake
        RateLimitInfo(reset_after="soon")
        return []


class BadArgumentRegistry(ModelRegistry):
    def missing(self, names):
        raise ValueError("backend list is unusable")


@pytest.mark.asyncio
async def test_internal_validation_error_is_500():
    transport = ASGITransport(app=create_app(registry=BrokenModelRegistry({})), raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        r = await ac.post(COMPARE, json={"prompt": "hi", "llms": ["openai"]})
    assert r.status_code == 500
    body = r.json()
    assert body["error"] == "Internal Server Error"
    assert body["message"] == "An unexpected error occurred"


@pytest.mark.asyncio
async def test_plain_value_error_is_400():
    transport = ASGITransport(app=create_app(registry=BadArgumentRegistry({})), raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        r = await ac.post(COMPARE, json={"prompt": "hi", "llms": ["openai"]})
    assert r.status_code == 400
    body = r.json()
    assert body["error"] == "Bad Request"
    assert body["message"] == "backend list is unusable"
