"""Health check endpoints."""

from fastapi import APIRouter, status
from pydantic import BaseModel

from consultorio.dependencies import Services

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str
    environment: str
    store_backend: str
    store: str


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check including the store",
)
async def health_check(services: Services) -> HealthResponse:
    """
    Report application and store status.

    Returns:
        ``degraded`` when the store does not answer
    """
    store_healthy = services.store.ping()
    return HealthResponse(
        status="healthy" if store_healthy else "degraded",
        version=services.settings.app_version,
        environment=services.settings.environment,
        store_backend=services.settings.store_backend,
        store="healthy" if store_healthy else "unhealthy",
    )


@router.get("/ping", status_code=status.HTTP_200_OK, summary="Simple ping")
async def ping() -> dict[str, str]:
    return {"message": "pong"}
