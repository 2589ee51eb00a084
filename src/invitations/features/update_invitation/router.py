from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from src.audit.writer import get_audit_writer
from src.cache import get_versioned_cache
from src.common.tenant import get_wedding_id
from src.invitations.dtos import (
    EventNotFoundError,
    GuestAlreadyInvitedError,
    GuestNotFoundError,
    InvitationEventNotFoundError,
    InvitationNotFoundError,
    InvitationStatus,
)
from src.invitations.features.update_invitation.write_model import (
    InvitationEventChanges,
    SqlUpdateInvitationWriteModel,
    UpdateInvitationWriteModel,
)
from src.invitations.repository.read_models import get_invitation_read_model
from src.invitations.schemas import EventDefRequest, InvitationResponse
from src.wedding_config.read_model import get_config_read_model

router = APIRouter()

UPDATE_INVITATION_URL = "/api/v1/admin/invitations/{invitation_id}"
UPDATE_INVITATION_EVENT_URL = "/api/v1/admin/invitation-events/{invitation_event_id}"


class UpdateInvitationRequest(BaseModel):
    guest_id: UUID | None = None
    events: list[EventDefRequest] | None = None


class UpdateInvitationEventRequest(BaseModel):
    status: InvitationStatus | None = None
    headcount: int | None = None
    dietary_restrictions: str | None = None
    dietary_information: str | None = None
    food_choice: str | None = None


def get_update_invitation_write_model() -> UpdateInvitationWriteModel:
    """Dependency to get update invitation write model instance."""
    return SqlUpdateInvitationWriteModel(
        config_read_model=get_config_read_model(),
        read_model=get_invitation_read_model(),
        cache=get_versioned_cache(),
        audit_writer=get_audit_writer(),
    )


@router.patch(UPDATE_INVITATION_URL, response_model=InvitationResponse)
async def update_invitation(
    invitation_id: UUID,
    request: UpdateInvitationRequest,
    wedding_id: UUID = Depends(get_wedding_id),
    write_model: UpdateInvitationWriteModel = Depends(get_update_invitation_write_model),
) -> InvitationResponse:
    """
    Reassign an invitation to another guest and/or replace its events.

    Replacing events rotates every event token, so previously sent event
    links stop working.
    """
    if request.guest_id is None and request.events is None:
        raise HTTPException(status_code=400, detail="Nothing to update")
    try:
        invitation = await write_model.update_invitation(
            wedding_id=wedding_id,
            invitation_id=invitation_id,
            guest_id=request.guest_id,
            events=[event.to_dto() for event in request.events] if request.events is not None else None,
        )
    except (InvitationNotFoundError, GuestNotFoundError, EventNotFoundError) as e:
        raise HTTPException(status_code=404, detail=str(e))
    except GuestAlreadyInvitedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return InvitationResponse.from_dto(invitation)


@router.patch(UPDATE_INVITATION_EVENT_URL, response_model=InvitationResponse)
async def update_invitation_event(
    invitation_event_id: UUID,
    request: UpdateInvitationEventRequest,
    wedding_id: UUID = Depends(get_wedding_id),
    write_model: UpdateInvitationWriteModel = Depends(get_update_invitation_write_model),
) -> InvitationResponse:
    try:
        invitation = await write_model.update_invitation_event(
            wedding_id=wedding_id,
            invitation_event_id=invitation_event_id,
            changes=InvitationEventChanges(**request.model_dump()),
        )
    except (InvitationEventNotFoundError, InvitationNotFoundError) as e:
        raise HTTPException(status_code=404, detail=str(e))
    return InvitationResponse.from_dto(invitation)
