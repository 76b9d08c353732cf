from typing import List

from fastapi import APIRouter, Depends

from llm_compare.api.deps import get_comparison_service
from llm_compare.services.comparison import ComparisonService

router = APIRouter(prefix="/api/llm", tags=["models"])

@router.get("/available", response_model=List[str])
def available_models(service: ComparisonService = Depends(get_comparison_service)) -> List[str]:
    # a set has no order; sort so clients get stable output
    return sorted(service.available_models())
