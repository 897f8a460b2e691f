"""
Health check route for OCRS API Server.
"""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_class=PlainTextResponse,
    summary="Health Check",
    description="Liveness check. Does not depend on the inference engine.",
)
async def health_check() -> PlainTextResponse:
    return PlainTextResponse("OK")
