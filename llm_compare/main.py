# llm_compare/main.py
import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from llm_compare.core import config
from llm_compare.api.errors import register_exception_handlers
from llm_compare.api.routers.health import router as health_router
from llm_compare.api.routers.models import router as models_router
from llm_compare.api.routers.compare import router as compare_router
from llm_compare.providers.factory import build_registry
from llm_compare.providers.registry import ModelRegistry
from llm_compare.services.comparison import ComparisonService


def create_app(registry: Optional[ModelRegistry] = None) -> FastAPI:
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title="LLM Compare", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ALLOWED_ORIGINS,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        allow_credentials=True,
        max_age=3600,
    )

    # The registry is built once and only read afterwards; every request
    # reaches the service through Depends(get_comparison_service).
    registry = registry if registry is not None else build_registry()
    app.state.registry = registry
    app.state.comparison_service = ComparisonService(registry)

    register_exception_handlers(app)

    # Routers
    app.include_router(health_router)
    app.include_router(models_router)
    app.include_router(compare_router)

    return app


app = create_app()
