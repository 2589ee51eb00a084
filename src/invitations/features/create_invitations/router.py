from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from src.audit.writer import get_audit_writer
from src.cache import get_versioned_cache
from src.common.tenant import get_wedding_id
from src.config.settings import settings
from src.invitations.dtos import CreateInvitationsResult, EventNotFoundError
from src.invitations.features.create_invitations.write_model import (
    CreateInvitationsWriteModel,
    SqlCreateInvitationsWriteModel,
)
from src.invitations.invite_codes import InviteCodeExhaustedError
from src.invitations.schemas import EventDefRequest
from src.wedding_config.read_model import get_config_read_model

router = APIRouter()

INVITATIONS_URL = "/api/v1/admin/invitations"


class CreateInvitationsRequest(BaseModel):
    guest_ids: list[UUID] = Field(min_length=1)
    events: list[EventDefRequest] = Field(min_length=1)


class CreatedInvitationResponse(BaseModel):
    invitation_id: UUID
    guest_id: UUID
    token: str
    invite_code: str
    headcounts: dict[UUID, int]


class CreateInvitationsResponse(BaseModel):
    created: int
    skipped: int
    skipped_guest_ids: list[UUID]
    invitations: list[CreatedInvitationResponse]

    @classmethod
    def from_result(cls, result: CreateInvitationsResult) -> "CreateInvitationsResponse":
        return cls(
            created=result.created,
            skipped=result.skipped,
            skipped_guest_ids=result.skipped_guest_ids,
            invitations=[
                CreatedInvitationResponse(
                    invitation_id=invitation.invitation_id,
                    guest_id=invitation.guest_id,
                    token=invitation.token,
                    invite_code=invitation.invite_code,
                    headcounts={event.event_id: event.headcount for event in invitation.events},
                )
                for invitation in result.invitations
            ],
        )


def get_create_invitations_write_model() -> CreateInvitationsWriteModel:
    """Dependency to get create invitations write model instance."""
    return SqlCreateInvitationsWriteModel(
        config_read_model=get_config_read_model(),
        cache=get_versioned_cache(),
        audit_writer=get_audit_writer(),
        max_invite_code_attempts=settings.INVITE_CODE_MAX_ATTEMPTS,
    )


@router.post(INVITATIONS_URL, response_model=CreateInvitationsResponse, status_code=201)
async def create_invitations(
    request: CreateInvitationsRequest,
    wedding_id: UUID = Depends(get_wedding_id),
    write_model: CreateInvitationsWriteModel = Depends(get_create_invitations_write_model),
) -> CreateInvitationsResponse:
    """
    Invite guests to events.

    Guests that already hold an invitation keep it; their rows for the given
    events are replaced. Headcounts are clamped to the wedding's party-size
    settings and each guest's total.
    """
    try:
        result = await write_model.create_invitations(
            wedding_id=wedding_id,
            guest_ids=request.guest_ids,
            events=[event.to_dto() for event in request.events],
        )
    except EventNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InviteCodeExhaustedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return CreateInvitationsResponse.from_result(result)
