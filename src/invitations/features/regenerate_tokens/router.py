from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from src.audit.writer import get_audit_writer
from src.cache import get_versioned_cache
from src.common.tenant import get_wedding_id
from src.invitations.dtos import InvitationEventNotFoundError, InvitationNotFoundError
from src.invitations.features.regenerate_tokens.write_model import (
    RegenerateTokensWriteModel,
    SqlRegenerateTokensWriteModel,
)

router = APIRouter()

REGENERATE_INVITE_TOKEN_URL = "/api/v1/admin/invitations/{invitation_id}/regenerate-token"
REGENERATE_EVENT_TOKEN_URL = "/api/v1/admin/invitation-events/{invitation_event_id}/regenerate-token"


class TokenResponse(BaseModel):
    token: str


def get_regenerate_tokens_write_model() -> RegenerateTokensWriteModel:
    """Dependency to get regenerate tokens write model instance."""
    return SqlRegenerateTokensWriteModel(cache=get_versioned_cache(), audit_writer=get_audit_writer())


@router.post(REGENERATE_INVITE_TOKEN_URL, response_model=TokenResponse)
async def regenerate_invite_token(
    invitation_id: UUID,
    wedding_id: UUID = Depends(get_wedding_id),
    write_model: RegenerateTokensWriteModel = Depends(get_regenerate_tokens_write_model),
) -> TokenResponse:
    """Issue a new invitation token. Links using the old token stop working at once."""
    try:
        token = await write_model.regenerate_invite_token(wedding_id, invitation_id)
    except InvitationNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return TokenResponse(token=token)


@router.post(REGENERATE_EVENT_TOKEN_URL, response_model=TokenResponse)
async def regenerate_event_token(
    invitation_event_id: UUID,
    wedding_id: UUID = Depends(get_wedding_id),
    write_model: RegenerateTokensWriteModel = Depends(get_regenerate_tokens_write_model),
) -> TokenResponse:
    try:
        token = await write_model.regenerate_event_token(wedding_id, invitation_event_id)
    except InvitationEventNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return TokenResponse(token=token)
