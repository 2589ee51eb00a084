from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from src.cache import get_versioned_cache
from src.common.tenant import get_wedding_id
from src.config.settings import settings
from src.invitations.dtos import InvitationListFilters, InvitationStatus
from src.invitations.features.list_invitations.query import (
    InvitationListQuery,
    InvitationListResponse,
)
from src.invitations.repository.read_models import get_invitation_read_model

router = APIRouter()

LIST_INVITATIONS_URL = "/api/v1/admin/invitations"


def get_invitation_list_query() -> InvitationListQuery:
    return InvitationListQuery(
        read_model=get_invitation_read_model(),
        cache=get_versioned_cache(),
        ttl_seconds=settings.CACHE_LIST_TTL_SECONDS,
    )


@router.get(LIST_INVITATIONS_URL, response_model=InvitationListResponse)
async def list_invitations(
    q: str | None = None,
    event_id: UUID | None = None,
    status: InvitationStatus | None = None,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
    sort: str = Query(default="created_at:desc", pattern=r"^[a-z_]+:(asc|desc)$"),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=10, ge=1, le=100),
    wedding_id: UUID = Depends(get_wedding_id),
    query: InvitationListQuery = Depends(get_invitation_list_query),
) -> InvitationListResponse:
    """
    List invitations with their guest, events and latest RSVP per event.

    Sort is ``field:direction`` with field one of created_at, guest_name,
    first_name or email.
    """
    filters = InvitationListFilters(
        q=q,
        event_id=event_id,
        status=status,
        date_from=date_from,
        date_to=date_to,
        sort=sort,
        page=page,
        page_size=page_size,
    )
    return await query.list_invitations(wedding_id, filters)
