from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from pydantic import AliasChoices, BaseModel, Field

from src.hosts.dependencies import require_event_manager
from src.hosts.repository import HostEventModel, get_host_event_model
from src.hosts.urls import UPDATE_REMINDERS_URL
from src.reminders import schedule

router = APIRouter()


class ReminderSpecSubmit(BaseModel):
    type: Literal["day", "hour"]
    value: int


class UpdateRemindersSubmit(BaseModel):
    reminder_schedule: list[ReminderSpecSubmit] | None = Field(
        default=None,
        validation_alias=AliasChoices("reminder_schedule", "reminderSchedule"),
    )


class ReminderSpecResponse(BaseModel):
    type: str
    value: int
    description: str


class UpdateRemindersResponse(BaseModel):
    event_id: UUID
    title: str
    reminder_schedule: str | None
    reminders: list[ReminderSpecResponse]


@router.put(UPDATE_REMINDERS_URL, response_model=UpdateRemindersResponse)
@router.patch(UPDATE_REMINDERS_URL, response_model=UpdateRemindersResponse)
async def update_reminders(
    event_id: UUID,
    body: UpdateRemindersSubmit,
    _: UUID = Depends(require_event_manager),
    host_event_model: HostEventModel = Depends(get_host_event_model),
) -> UpdateRemindersResponse:
    """
    Replace an event's reminder schedule.
    An empty or null list clears it; the scheduler then falls back to 2 days before.
    """
    specs = [
        schedule.ReminderSpec(type=schedule.ReminderType(item.type), value=item.value)
        for item in body.reminder_schedule or []
    ]

    validation = schedule.validate(specs)
    if not validation.valid:
        raise HTTPException(
            status_code=400,
            detail={"code": "VALIDATION_ERROR", "message": validation.error},
        )

    event = await host_event_model.update_reminder_schedule(event_id, schedule.encode(specs))
    if not event:
        raise HTTPException(status_code=404, detail={"code": "NOT_FOUND", "message": "Event not found"})

    return UpdateRemindersResponse(
        event_id=event.uuid,
        title=event.title,
        reminder_schedule=event.reminder_schedule,
        reminders=[
            ReminderSpecResponse(
                type=spec.type.value,
                value=spec.value,
                description=schedule.format_reminder(spec),
            )
            for spec in schedule.decode(event.reminder_schedule)
        ],
    )
