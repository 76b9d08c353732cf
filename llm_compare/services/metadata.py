"""
Turns per-backend dispatch outcomes into ModelResults.

A dispatch either succeeds (completion + elapsed time) or fails (the exception).
Success -> provider text plus normalized metadata.
Failure -> "Error: <message>" and no metadata.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Union

from llm_compare.providers.base import ChatCompletion, RateLimit
from llm_compare.schemas.compare import ModelResult, RateLimitInfo, ResponseMetadata

ERROR_PREFIX = "Error: "


@dataclass(frozen=True)
class Success:
    completion: ChatCompletion
    elapsed_ms: int


@dataclass(frozen=True)
class Failure:
    error: BaseException


Outcome = Union[Success, Failure]


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_rate_limit(rate_limit: Optional[RateLimit]) -> RateLimitInfo:
    # providers that report nothing still get a (blank) rate limit block
    if rate_limit is None:
        return RateLimitInfo()
    return RateLimitInfo(
        requests_limit=rate_limit.requests_limit,
        requests_remaining=rate_limit.requests_remaining,
        tokens_limit=rate_limit.tokens_limit,
        tokens_remaining=rate_limit.tokens_remaining,
        reset_after=rate_limit.reset_after_seconds or 0,
    )


def build_metadata(completion: ChatCompletion, elapsed_ms: int) -> ResponseMetadata:
    usage = completion.usage
    return ResponseMetadata(
        model=completion.model or "",
        finish_reason=completion.finish_reason or "",
        prompt_tokens=usage.prompt_tokens or 0,
        generation_tokens=usage.completion_tokens or 0,
        total_tokens=usage.total_tokens or 0,
        response_time=max(0, elapsed_ms),
        timestamp=utc_timestamp(),
        rate_limit=build_rate_limit(completion.rate_limit),
    )


def success_result(backend_name: str, completion: ChatCompletion, elapsed_ms: int) -> ModelResult:
    return ModelResult(
        backend_name=backend_name,
        text=completion.text,
        metadata=build_metadata(completion, elapsed_ms),
    )


def error_result(backend_name: str, error: BaseException) -> ModelResult:
    return ModelResult(backend_name=backend_name, text=f"{ERROR_PREFIX}{error}")


def to_result(backend_name: str, outcome: Outcome) -> ModelResult:
    if isinstance(outcome, Success):
        return success_result(backend_name, outcome.completion, outcome.elapsed_ms)
    return error_result(backend_name, outcome.error)
