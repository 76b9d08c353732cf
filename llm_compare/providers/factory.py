import logging
from typing import Callable, Dict, Iterable, Optional

from llm_compare.core import config
from llm_compare.providers.anthropic import AnthropicClient
from llm_compare.providers.base import ModelClient, ProviderError
from llm_compare.providers.ollama import OllamaClient
from llm_compare.providers.openai import OpenAIClient
from llm_compare.providers.registry import ModelRegistry

logger = logging.getLogger(__name__)

ClientFactory = Callable[[], ModelClient]

PROVIDERS: Dict[str, ClientFactory] = {
    "openai": OpenAIClient,
    "anthropic": AnthropicClient,
    "ollama": OllamaClient,
}


def get_client(name: str) -> ModelClient:
    try:
        factory = PROVIDERS[name]
    except KeyError:
        raise ProviderError(f"Unknown provider: {name}") from None
    return factory()


def build_registry(backends: Optional[Iterable[str]] = None) -> ModelRegistry:
    names = list(config.LLM_BACKENDS if backends is None else backends)
    clients = {name: get_client(name) for name in names}
    logger.info("registered backends: %s", ", ".join(clients) or "<none>")
    return ModelRegistry(clients)
