from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class CompareRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    prompt: str = Field(min_length=1)
    backends: List[str] = Field(alias="llms")


class RateLimitInfo(_CamelModel):
    requests_limit: Optional[int] = None
    requests_remaining: Optional[int] = None
    tokens_limit: Optional[int] = None
    tokens_remaining: Optional[int] = None
    reset_after: int = 0


class ResponseMetadata(_CamelModel):
    model: str
    finish_reason: str
    prompt_tokens: int = Field(ge=0)
    generation_tokens: int = Field(ge=0)
    total_tokens: int = Field(ge=0)
    response_time: int = Field(ge=0)  # milliseconds
    timestamp: str
    rate_limit: RateLimitInfo


class ModelResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    backend_name: str = Field(alias="llm")
    text: str = Field(alias="response")
    metadata: Optional[ResponseMetadata] = None

    @property
    def ok(self) -> bool:
        return self.metadata is not None


class CompareResponse(BaseModel):
    responses: List[ModelResult]


class ErrorResponse(BaseModel):
    timestamp: str
    status: int
    error: str
    message: str
    details: Optional[Dict[str, str]] = None
