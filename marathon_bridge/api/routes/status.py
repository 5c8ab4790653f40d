"""Status API routes."""

from pydantic import BaseModel
from fastapi import APIRouter, HTTPException

from ...app import IApplication


class StatusResponse(BaseModel):
    """Response model for bridge status."""

    marathon_url: str
    event_types: list[str]
    task_statuses: list[str]
    app_id_regexes: list[str]
    slack_channel: str
    health: int


def create_status_router(app: IApplication) -> APIRouter:
    """Create status router."""
    router = APIRouter(prefix="/api", tags=["status"])

    @router.get("/status", response_model=StatusResponse)
    async def get_status() -> dict:
        """Current configuration and health of the bridge."""
        try:
            settings = app.settings
        except RuntimeError as e:
            raise HTTPException(status_code=503, detail=str(e))

        return {
            "marathon_url": settings.marathon_base_url,
            "event_types": list(settings.event_types),
            "task_statuses": list(settings.task_statuses),
            "app_id_regexes": list(settings.app_id_regexes),
            "slack_channel": settings.slack_channel,
            "health": int(app.get_health_status()),
        }

    return router
