"""Health API routes."""

from pydantic import BaseModel
from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ...app import IApplication
from ...models import HealthStatus


class HealthResponse(BaseModel):
    """Response model for health."""

    status: str
    code: int


def create_health_router(app: IApplication) -> APIRouter:
    """Create health router."""
    router = APIRouter(tags=["health"])

    @router.get("/health", response_model=HealthResponse)
    async def get_health() -> JSONResponse:
        """Liveness probe mirroring the event bus subscription."""
        code = app.get_health_status()
        body = HealthResponse(
            status="subscribed" if code is HealthStatus.AVAILABLE else "unsubscribed",
            code=int(code),
        )
        return JSONResponse(status_code=int(code), content=body.model_dump())

    return router
