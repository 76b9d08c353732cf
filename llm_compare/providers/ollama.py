from typing import Any, Dict, Optional

import httpx

from llm_compare.core import config
from llm_compare.providers.base import (
    ChatCompletion,
    ProviderError,
    RateLimit,
    Usage,
    default_timeout,
)


class OllamaClient:
    """Local Ollama /api/chat client. Ollama reports no rate limits."""

    def __init__(
        self,
        *,
        name: str = "ollama",
        host: str = "",
        model: str = "",
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        timeout: Optional[httpx.Timeout] = None,
    ) -> None:
        self.name = name
        self.host = (host or config.OLLAMA_HOST).rstrip("/")
        self.model = model or config.OLLAMA_MODEL
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
            "stream": False,
            "options": {
                "num_predict": self.max_tokens,
                "temperature": self.temperature,
            },
        }

    async def send(self, system_prompt: str, user_prompt: str) -> ChatCompletion:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                r = await client.post(
                    f"{self.host}/api/chat", json=self._payload(system_prompt, user_prompt)
                )
                r.raise_for_status()
                data = r.json()
        except httpx.HTTPError as e:
            raise ProviderError(f"Ollama HTTP error: {e}") from e
        except ValueError as e:
            raise ProviderError("Unexpected response body from Ollama.") from e

        err = data.get("error")
        if isinstance(err, str) and err:
            raise ProviderError(f"Ollama error: {err}")
        reply = (data.get("message") or {}).get("content", "")
        if not isinstance(reply, str):
            raise ProviderError("Unexpected response type from Ollama.")

        prompt_tokens = data.get("prompt_eval_count", 0)
        completion_tokens = data.get("eval_count", 0)
        return ChatCompletion(
            text=reply,
            model=data.get("model") or self.model,
            finish_reason=data.get("done_reason") or "",
            usage=Usage(
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=prompt_tokens + completion_tokens,
            ),
            rate_limit=RateLimit(),
        )
