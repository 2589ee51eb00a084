from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from src.cache.keys import invitations_list_key
from src.cache.versioned import VersionedCache
from src.invitations.dtos import InvitationListFilters, InvitationPage
from src.invitations.repository.read_models import InvitationReadModel
from src.invitations.schemas import InvitationResponse


class InvitationListResponse(BaseModel):
    invitations: list[InvitationResponse]
    total_count: int
    page: int
    page_size: int
    total_pages: int

    @classmethod
    def from_page(cls, page: InvitationPage) -> "InvitationListResponse":
        return cls(
            invitations=[InvitationResponse.from_dto(invitation) for invitation in page.invitations],
            total_count=page.total_count,
            page=page.page,
            page_size=page.page_size,
            total_pages=page.total_pages,
        )


EMPTY_LIST = InvitationListResponse(invitations=[], total_count=0, page=1, page_size=10, total_pages=0)


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


class InvitationListQuery:
    """Invitations list page, read through the versioned cache.

    Any write that bumps the namespace version makes the next call a miss.
    """

    def __init__(self, read_model: InvitationReadModel, cache: VersionedCache, ttl_seconds: int = 120):
        self.read_model = read_model
        self.cache = cache
        self.ttl_seconds = ttl_seconds

    async def list_invitations(self, wedding_id: UUID, filters: InvitationListFilters) -> InvitationListResponse:
        key = invitations_list_key(
            wedding_id,
            page=filters.page,
            page_size=filters.page_size,
            q=filters.q,
            event_id=filters.event_id,
            status=filters.status.value if filters.status else None,
            date_from=_iso(filters.date_from),
            date_to=_iso(filters.date_to),
            sort=filters.sort,
        )

        async def fetch() -> dict:
            page = await self.read_model.list_invitations(wedding_id, filters)
            return InvitationListResponse.from_page(page).model_dump(mode="json")

        data = await self.cache.cache_json(key, self.ttl_seconds, fetch)
        return InvitationListResponse.model_validate(data)
