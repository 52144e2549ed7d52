from fastapi import APIRouter, Depends, HTTPException

from src.guests.repository.read_models import RSVPReadModel, SqlRSVPReadModel
from src.guests.schemas import EventSummaryResponse, GuestResponse
from src.guests.urls import GET_RSVP_URL

router = APIRouter()


class RSVPInfoResponse(GuestResponse):
    event: EventSummaryResponse
    deadline_passed: bool


def get_rsvp_read_model() -> RSVPReadModel:
    """Dependency to get RSVP read model instance."""
    return SqlRSVPReadModel()


@router.get(GET_RSVP_URL, response_model=RSVPInfoResponse)
async def get_guest_info(
    token: str,
    read_model: RSVPReadModel = Depends(get_rsvp_read_model),
) -> RSVPInfoResponse:
    """
    Get the RSVP page for a token.
    `deadline_passed` tells the page to render read-only.
    """
    rsvp_info = await read_model.get_rsvp_info(token)

    if not rsvp_info:
        raise HTTPException(
            status_code=404,
            detail={"code": "NOT_FOUND", "message": "RSVP not found"},
        )

    return RSVPInfoResponse(
        **GuestResponse.from_dto(rsvp_info.guest).model_dump(),
        event=EventSummaryResponse.from_dto(rsvp_info.event),
        deadline_passed=rsvp_info.deadline_passed,
    )
