import asyncio
import logging
import time
from typing import List

from llm_compare.core.errors import ModelNotFoundError
from llm_compare.providers.registry import ModelRegistry
from llm_compare.schemas.compare import CompareRequest, ModelResult
from llm_compare.services.metadata import Failure, Success, to_result

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are chatting with a serious person. Make sure your responses are accurate, "
    "up-to-date, and straight to the point unless the user asks you not to. "
    "False, wrong or poorly researched responses are not allowed here."
)


class ComparisonService:
    """Sends one prompt to several backends at once and collects every answer.

    Only unknown backend names fail the whole call; anything that goes wrong
    while talking to a single backend becomes that backend's error result.
    """

    def __init__(self, registry: ModelRegistry, *, system_prompt: str = SYSTEM_PROMPT) -> None:
        self.registry = registry
        self.system_prompt = system_prompt

    def available_models(self) -> frozenset[str]:
        return self.registry.names()

    def validate(self, backends: List[str]) -> None:
        invalid = self.registry.missing(backends)
        if invalid:
            raise ModelNotFoundError(invalid)

    async def compare(self, request: CompareRequest) -> List[ModelResult]:
        self.validate(request.backends)
        if not request.backends:
            return []

        # gather keeps request order regardless of completion order
        results = await asyncio.gather(
            *(self._dispatch(name, request.prompt) for name in request.backends)
        )
        failed = sum(1 for r in results if not r.ok)
        logger.info("compared %d backend(s), %d failed", len(results), failed)
        return list(results)

    async def _dispatch(self, backend_name: str, prompt: str) -> ModelResult:
        # metadata is normalized inside the try: a malformed completion only fails this backend
        try:
            client = self.registry.resolve(backend_name)
            start = time.perf_counter()
            completion = await client.send(self.system_prompt, prompt)
            elapsed_ms = int((time.perf_counter() - start) * 1000)
            result = to_result(backend_name, Success(completion, elapsed_ms))
        except Exception as e:
            logger.exception("backend %s failed: %s", backend_name, e)
            return to_result(backend_name, Failure(e))
        logger.info("backend %s answered in %d ms", backend_name, elapsed_ms)
        return result
