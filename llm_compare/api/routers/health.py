from fastapi import APIRouter, Response

router = APIRouter(prefix="/api/llm", tags=["meta"])

@router.get("/health")
def health() -> Response:
    return Response(status_code=200)
