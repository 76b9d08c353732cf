# lets the comparison engine talk to any backend without knowing its wire protocol (openai/anthropic/ollama...)
# declares the provider contract (send(...)) that every client must implement

from dataclasses import dataclass, field
from typing import Mapping, Optional, Protocol

import httpx


class ProviderError(Exception):
    pass


@dataclass(frozen=True)
class Usage:
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


@dataclass(frozen=True)
class RateLimit:
    """Rate-limit counters as reported by the provider; None when not reported."""

    requests_limit: Optional[int] = None
    requests_remaining: Optional[int] = None
    tokens_limit: Optional[int] = None
    tokens_remaining: Optional[int] = None
    reset_after_seconds: Optional[int] = None


@dataclass(frozen=True)
class ChatCompletion:
    text: str
    model: str = ""
    finish_reason: str = ""
    usage: Usage = field(default_factory=Usage)
    rate_limit: Optional[RateLimit] = None


class ModelClient(Protocol):
    name: str

    async def send(self, system_prompt: str, user_prompt: str) -> ChatCompletion:
        """Send one system+user exchange and return the provider's completion.

        Raises ProviderError (or anything else) on failure.
        """
        ...


def default_timeout(total: float, connect: float) -> httpx.Timeout:
    return httpx.Timeout(total, connect=connect)


def int_header(headers: Mapping[str, str], name: str) -> Optional[int]:
    # headers the provider did not send stay unset
    raw = headers.get(name)
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return None
