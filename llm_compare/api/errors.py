# maps every failure that escapes a route onto one error body:
# {timestamp, status, error, message, details?}

import logging
from http import HTTPStatus
from typing import Any, Dict, Optional, Sequence

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from llm_compare.core.errors import ModelNotFoundError, UnsupportedMediaTypeError
from llm_compare.schemas.compare import ErrorResponse
from llm_compare.services.metadata import utc_timestamp

logger = logging.getLogger(__name__)


def error_response(
    status: int,
    error: str,
    message: str,
    details: Optional[Dict[str, str]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    body = ErrorResponse(
        timestamp=utc_timestamp(),
        status=status,
        error=error,
        message=message,
        details=details,
    )
    return JSONResponse(
        status_code=status,
        content=body.model_dump(exclude_none=True),
        headers=headers,
    )


def _field_name(loc: Sequence[Any]) -> str:
    # ("body", "llms") -> "llms", ("body",) -> "body"
    parts = [str(p) for p in loc[1:]] if len(loc) > 1 and loc[0] == "body" else [str(p) for p in loc]
    return ".".join(parts) or "body"


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if any(err.get("type") == "json_invalid" for err in errors):
        logger.error("JSON parse error: %s", errors)
        return error_response(400, "Malformed JSON", "Could not parse JSON request body")

    details: Dict[str, str] = {}
    for err in errors:
        details.setdefault(_field_name(err.get("loc", ())), err.get("msg", "invalid value"))
    logger.error("Validation error: %s", details)
    return error_response(400, "Validation Failed", "Invalid request parameters", details)


async def unsupported_media_type_handler(request: Request, exc: UnsupportedMediaTypeError) -> JSONResponse:
    logger.error("Unsupported media type: %s", exc)
    return error_response(415, "Unsupported Media Type", str(exc))


async def model_not_found_handler(request: Request, exc: ModelNotFoundError) -> JSONResponse:
    logger.error("Model not found: %s", exc)
    return error_response(404, "Model Not Found", str(exc))


async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    # pydantic ValidationError is a ValueError too, but it means our own models broke
    if isinstance(exc, ValidationError):
        return await unhandled_exception_handler(request, exc)
    logger.error("Illegal argument: %s", exc)
    return error_response(400, "Bad Request", str(exc))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    try:
        phrase = HTTPStatus(exc.status_code).phrase
    except ValueError:
        phrase = "Error"
    logger.warning("HTTP %s on %s: %s", exc.status_code, request.url.path, exc.detail)
    return error_response(
        exc.status_code,
        phrase,
        str(exc.detail),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unexpected error: %s", exc)
    return error_response(500, "Internal Server Error", "An unexpected error occurred")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(UnsupportedMediaTypeError, unsupported_media_type_handler)
    app.add_exception_handler(ModelNotFoundError, model_not_found_handler)
    app.add_exception_handler(ValidationError, unhandled_exception_handler)
    app.add_exception_handler(ValueError, value_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
