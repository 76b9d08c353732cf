import math
import re
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

# "6m0s", "1s", "20ms", "1h2m3.5s"
_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|h|m|s)")
_UNIT_SECONDS = {"h": 3600.0, "m": 60.0, "s": 1.0, "ms": 0.001}


def parse_reset_duration(value: Optional[str]) -> Optional[int]:
    if not value:
        return None
    parts = _DURATION_PART.findall(value)
    if not parts:
        return None
    seconds = sum(float(amount) * _UNIT_SECONDS[unit] for amount, unit in parts)
    return int(math.ceil(seconds))


def rate_limit_from_headers(headers: Mapping[str, str]) -> RateLimit:
    return RateLimit(
        requests_limit=int_header(headers, "x-ratelimit-limit-requests"),
        requests_remaining=int_header(headers, "x-ratelimit-remaining-requests"),
        tokens_limit=int_header(headers, "x-ratelimit-limit-tokens"),
        tokens_remaining=int_header(headers, "x-ratelimit-remaining-tokens"),
        reset_after_seconds=parse_reset_duration(headers.get("x-ratelimit-reset-requests")),
    )


class OpenAIClient:
    """OpenAI Chat Completions client."""

    def __init__(
        self,
        *,
        name: str = "openai",
        api_key: str = "",
        model: str = "",
        base_url: str = "",
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        timeout: Optional[httpx.Timeout] = None,
    ) -> None:
        self.name = name
        self.api_key = api_key or config.OPENAI_API_KEY
        self.model = model or config.OPENAI_MODEL
        self.base_url = (base_url or config.OPENAI_BASE_URL).rstrip("/")
        self.max_tokens = max_tokens if max_tokens is not None else config.MAX_TOKENS
        self.temperature = temperature if temperature is not None else config.TEMPERATURE
        self.timeout = timeout or default_timeout(config.REQUEST_TIMEOUT, config.CONNECT_TIMEOUT)

    def _payload(self, system_prompt: str, user_prompt: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }

    async def send(self, system_prompt: str, user_prompt: str) -> ChatCompletion:
        if not self.api_key:
            raise ProviderError("OpenAI API key is not configured.")
        headers = {"Authorization": f"Bearer {self.api_key}"}
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                r = await client.post(
                    f"{self.base_url}/chat/completions",
                    json=self._payload(system_prompt, user_prompt),
                    headers=headers,
                )
                r.raise_for_status()
                data = r.json()
        except httpx.HTTPError as e:
            raise ProviderError(f"OpenAI HTTP error: {e}") from e
        except ValueError as e:
            raise ProviderError("Unexpected response body from OpenAI.") from e

        err = data.get("error")
        if err:
            message = err.get("message") if isinstance(err, dict) else err
            raise ProviderError(f"OpenAI error: {message}")

        choices = data.get("choices") or []
        if not choices:
            raise ProviderError("OpenAI returned no choices.")
        choice = choices[0]
        text = (choice.get("message") or {}).get("content")
        if not isinstance(text, str):
            raise ProviderError("Unexpected response type from OpenAI.")

        usage = data.get("usage") or {}
        return ChatCompletion(
            text=text,
            model=data.get("model") or self.model,
            finish_reason=choice.get("finish_reason") or "",
            usage=Usage(
                prompt_tokens=usage.get("prompt_tokens", 0),
                completion_tokens=usage.get("completion_tokens", 0),
                total_tokens=usage.get("total_tokens", 0),
            ),
            rate_limit=rate_limit_from_headers(r.headers),
        )
