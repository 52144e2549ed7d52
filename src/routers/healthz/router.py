from fastapi import APIRouter, Request
from pydantic import BaseModel

router = APIRouter()


class HealthCheckResponse(BaseModel):
    status: str
    version: str = "0.1.0"
    reminder_scheduler_running: bool = False
    pending_host_notifications: int = 0


@router.get("/", response_model=HealthCheckResponse)
async def health_check(request: Request) -> HealthCheckResponse:
    """
    Health check endpoint to verify the API is running.
    Also reports on the background workers started with the app.
    """
    scheduler_loop = getattr(request.app.state, "reminder_loop", None)
    dispatcher = getattr(request.app.state, "host_notification_dispatcher", None)
    return HealthCheckResponse(
        status="healthy",
        reminder_scheduler_running=bool(scheduler_loop and scheduler_loop.running),
        pending_host_notifications=dispatcher.pending if dispatcher else 0,
    )
