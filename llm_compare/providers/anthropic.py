import math
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

import httpx

from llm_compare.core import config
from llm_compare.providers.base import (
    ChatCompletion,
    ProviderError,
    RateLimit,
    Usage,
    default_timeout,
    int_header,
)


def seconds_until(value: Optional[str], now: Optional[datetime] = None) -> Optional[int]:
    """Seconds from now until an RFC 3339 instant, never negative."""
    if not value:
        return None
    try:
        reset_at = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if reset_at.tzinfo is None:
        reset_at = reset_at.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    return max(0, int(math.ceil((reset_at - now).total_seconds())))


def rate_limit_from_headers(headers: Mapping[str, str]) -> RateLimit:
    return RateLimit(
        requests_limit=int_header(headers, "anthropic-ratelimit-requests-limit"),
        requests_remaining=int_header(headers, "anthropic-ratelimit-requests-remaining"),
        tokens_limit=int_header(headers, "anthropic-ratelimit-tokens-limit"),
        tokens_remaining=int_header(headers, "anthropic-ratelimit-tokens-remaining"),
        reset_after_seconds=seconds_until(headers.get("anthropic-ratelimit-requests-reset")),
    )


class AnthropicClient:
    """Anthropic Messages API client."""

    def __init__(
        self,
        *,
        name: str = "anthropic",
        api_key: str = "",
        model: str = "",
        base_url: str = "",
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        timeout: Optional[httpx.Timeout] = None,
    ) -> None:
        self.name = name
        self.api_key = api_key or config.ANTHROPIC_API_KEY
        self.model = model or config.ANTHROPIC_MODEL
        self.base_url = (base_url or config.ANTHROPIC_BASE_URL).rstrip("/")
        self.max_tokens = max_tokens if max_tokens is not None else config.MAX_TOKENS
        self.temperature = temperature if temperature is not None else config.TEMPERATURE
        self.timeout = timeout or default_timeout(config.REQUEST_TIMEOUT, config.CONNECT_TIMEOUT)

    def _payload(self, system_prompt: str, user_prompt: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "system": system_prompt,
            "messages": [{"role": "user", "content": user_prompt}],
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }

    async def send(self, system_prompt: str, user_prompt: str) -> ChatCompletion:
        if not self.api_key:
            raise ProviderError("Anthropic API key is not configured.")
        headers = {
            "x-api-key": self.api_key,
            "anthropic-version": config.ANTHROPIC_VERSION,
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                r = await client.post(
                    f"{self.base_url}/v1/messages",
                    json=self._payload(system_prompt, user_prompt),
                    headers=headers,
                )
                r.raise_for_status()
                data = r.json()
        except httpx.HTTPError as e:
            raise ProviderError(f"Anthropic HTTP error: {e}") from e
        except ValueError as e:
            raise ProviderError("Unexpected response body from Anthropic.") from e

        if data.get("type") == "error":
            err = data.get("error") or {}
            raise ProviderError(f"Anthropic error: {err.get('message', 'unknown error')}")

        blocks = data.get("content")
        if not isinstance(blocks, list):
            raise ProviderError("Unexpected response type from Anthropic.")
        # only text blocks are part of the answer
        text = "".join(
            b.get("text", "") for b in blocks if isinstance(b, dict) and b.get("type") == "text"
        )

        usage = data.get("usage") or {}
        prompt_tokens = usage.get("input_tokens", 0)
        completion_tokens = usage.get("output_tokens", 0)
        return ChatCompletion(
            text=text,
            model=data.get("model") or self.model,
            finish_reason=data.get("stop_reason") or "",
            usage=Usage(
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=prompt_tokens + completion_tokens,
            ),
            rate_limit=rate_limit_from_headers(r.headers),
        )
