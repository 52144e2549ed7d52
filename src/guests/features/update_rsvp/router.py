from fastapi import APIRouter, Depends, HTTPException
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from src.config.settings import settings
from src.guests.dtos import (
    GuestNotFoundError,
    GuestStatus,
    RSVPError,
    RSVPPatchDTO,
    RSVPValidationError,
)
from src.guests.features.update_rsvp.service import RSVPUpdateService
from src.guests.repository.write_models import SqlRSVPWriteModel
from src.guests.schemas import GuestResponse
from src.guests.urls import UPDATE_RSVP_URL
from src.notifications.container import get_notification_services

router = APIRouter()


class RSVPPatchSubmit(BaseModel):
    """Partial update; only the fields sent are changed."""

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = None
    phone: str | None = None
    status: GuestStatus | None = None
    additional_guests: list[str] | None = Field(
        default=None,
        validation_alias=AliasChoices("additional_guests", "additionalGuests"),
    )
    dietary_notes: str | None = Field(
        default=None,
        validation_alias=AliasChoices("dietary_notes", "dietaryNotes"),
    )

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            raise ValueError("Name is required")
        return value

    @field_validator("status")
    @classmethod
    def status_is_a_response(cls, value: GuestStatus | None) -> GuestStatus | None:
        if value == GuestStatus.PENDING:
            raise ValueError("Status must be ATTENDING, NOT_ATTENDING or MAYBE")
        return value

    def to_dto(self) -> RSVPPatchDTO:
        # fields the client left out stay UNSET on the DTO
        return RSVPPatchDTO(**{name: getattr(self, name) for name in self.model_fields_set})


class RSVPUpdateResponse(GuestResponse):
    pass


def get_rsvp_update_service() -> RSVPUpdateService:
    """Dependency to get the RSVP update service."""
    services = get_notification_services()
    return RSVPUpdateService(
        write_model=SqlRSVPWriteModel(),
        email_service=services.email_service,
        sms_service=services.sms_service,
        dispatcher=services.dispatcher,
        app_url=settings.app_url,
    )


@router.patch(UPDATE_RSVP_URL, response_model=RSVPUpdateResponse)
async def update_rsvp(
    token: str,
    rsvp_data: RSVPPatchSubmit,
    service: RSVPUpdateService = Depends(get_rsvp_update_service),
) -> RSVPUpdateResponse:
    """
    Submit or change a guest's RSVP.
    Host notifications are sent in the background after the response.
    """
    try:
        patch = rsvp_data.to_dto()
    except RSVPValidationError as e:
        raise HTTPException(status_code=422, detail={"code": e.code, "message": e.message})

    try:
        result = await service.update(token=token, patch=patch)
    except GuestNotFoundError as e:
        raise HTTPException(status_code=404, detail={"code": e.code, "message": e.message})
    except RSVPError as e:
        raise HTTPException(status_code=400, detail={"code": e.code, "message": e.message})

    return RSVPUpdateResponse(**GuestResponse.from_dto(result.guest).model_dump())
