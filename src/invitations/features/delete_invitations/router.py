from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from src.audit.writer import get_audit_writer
from src.cache import get_versioned_cache
from src.common.tenant import get_wedding_id
from src.invitations.features.delete_invitations.write_model import (
    DeleteInvitationsWriteModel,
    SqlDeleteInvitationsWriteModel,
)

router = APIRouter()

DELETE_INVITATIONS_URL = "/api/v1/admin/invitations/delete"


class DeleteInvitationsRequest(BaseModel):
    invitation_ids: list[UUID] = Field(min_length=1)


class DeleteInvitationsResponse(BaseModel):
    deleted: int


def get_delete_invitations_write_model() -> DeleteInvitationsWriteModel:
    """Dependency to get delete invitations write model instance."""
    return SqlDeleteInvitationsWriteModel(cache=get_versioned_cache(), audit_writer=get_audit_writer())


@router.post(DELETE_INVITATIONS_URL, response_model=DeleteInvitationsResponse)
async def delete_invitations(
    request: DeleteInvitationsRequest,
    wedding_id: UUID = Depends(get_wedding_id),
    write_model: DeleteInvitationsWriteModel = Depends(get_delete_invitations_write_model),
) -> DeleteInvitationsResponse:
    deleted = await write_model.delete_invitations(wedding_id, request.invitation_ids)
    return DeleteInvitationsResponse(deleted=deleted)
