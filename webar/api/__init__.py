from fastapi import APIRouter

from webar import __version__
from webar.api.routers import assets, files, nearby, upload
from webar.schemas import HealthResponse


def create_api_router(prefix: str = "") -> APIRouter:
    router = APIRouter(prefix=prefix)
    router.include_router(assets.router)
    router.include_router(nearby.router)

    @router.get("/health", response_model=HealthResponse, summary="Liveness probe")
    async def health() -> HealthResponse:
        return HealthResponse(version=__version__)

    return router


def create_public_router() -> APIRouter:
    """Routes that live outside the API prefix."""
    router = APIRouter()
    router.include_router(upload.router)
    router.include_router(files.router)
    return router


__all__ = [
    "create_api_router",
    "create_public_router",
]
