import logging

from fastapi import APIRouter, Depends

from llm_compare.api.deps import get_comparison_service, require_json
from llm_compare.schemas.compare import CompareRequest, CompareResponse
from llm_compare.services.comparison import ComparisonService

router = APIRouter(prefix="/api/llm", tags=["compare"])
logger = logging.getLogger(__name__)

@router.post(
    "/compare",
    response_model=CompareResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(require_json)],
)
async def compare(req: CompareRequest, service: ComparisonService = Depends(get_comparison_service)):
    logger.info("comparing %d backend(s): %s", len(req.backends), ", ".join(req.backends))
    # ModelNotFoundError is the only failure compare() raises; errors.py maps it to 404
    results = await service.compare(req)
    return CompareResponse(responses=results)
