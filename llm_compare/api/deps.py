from email.message import Message

from fastapi import Request

from llm_compare.core.errors import UnsupportedMediaTypeError
from llm_compare.services.comparison import ComparisonService


def get_comparison_service(request: Request) -> ComparisonService:
    return request.app.state.comparison_service


def require_json(request: Request) -> None:
    # runs before body validation, so a text/plain body never reaches the schema
    content_type = request.headers.get("content-type")
    if content_type:
        message = Message()
        message["content-type"] = content_type
        subtype = message.get_content_subtype()
        if message.get_content_maintype() == "application" and (
            subtype == "json" or subtype.endswith("+json")
        ):
            return
    raise UnsupportedMediaTypeError(content_type)
