from fastapi import APIRouter

from .features.broadcast.router import router as broadcast_router
from .features.send_invitation.router import router as send_invitation_router
from .features.send_reminder.router import router as send_reminder_router
from .features.update_reminders.router import router as update_reminders_router

router = APIRouter()

router.include_router(update_reminders_router)
router.include_router(send_invitation_router)
router.include_router(send_reminder_router)
router.include_router(broadcast_router)
