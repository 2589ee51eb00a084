"""Admin landing page: several independent reads composed under time budgets."""

import asyncio
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from src.common.tenant import get_wedding_id
from src.common.timeouts import with_timeout
from src.config.settings import settings
from src.guests.features.backfill_invite_codes.router import get_backfill_write_model
from src.guests.features.backfill_invite_codes.write_model import BackfillInviteCodesWriteModel
from src.invitations.dtos import InvitationListFilters
from src.invitations.features.list_invitations.query import (
    EMPTY_LIST,
    InvitationListQuery,
    InvitationListResponse,
)
from src.invitations.features.list_invitations.router import get_invitation_list_query
from src.wedding_config.dtos import DEFAULT_CONFIG
from src.wedding_config.features.update_config.router import ConfigResponse
from src.wedding_config.read_model import ConfigReadModel, get_config_read_model

router = APIRouter()

DASHBOARD_URL = "/api/v1/admin/dashboard"


class DashboardResponse(BaseModel):
    config: ConfigResponse
    invitations: InvitationListResponse
    backfill_running: bool
    # sections that timed out or failed and show their fallback
    degraded: list[str]


@router.get(DASHBOARD_URL, response_model=DashboardResponse)
async def get_dashboard(
    wedding_id: UUID = Depends(get_wedding_id),
    config_read_model: ConfigReadModel = Depends(get_config_read_model),
    list_query: InvitationListQuery = Depends(get_invitation_list_query),
    backfill: BackfillInviteCodesWriteModel = Depends(get_backfill_write_model),
) -> DashboardResponse:
    config, invitations, backfill_running = await asyncio.gather(
        with_timeout(
            config_read_model.get_config(wedding_id),
            settings.DASHBOARD_FETCH_TIMEOUT_SECONDS,
            DEFAULT_CONFIG,
            "dashboard config",
        ),
        with_timeout(
            list_query.list_invitations(wedding_id, InvitationListFilters()),
            settings.DASHBOARD_LIST_TIMEOUT_SECONDS,
            EMPTY_LIST,
            "dashboard invitations",
        ),
        with_timeout(
            backfill.is_running(wedding_id),
            settings.DASHBOARD_FETCH_TIMEOUT_SECONDS,
            None,
            "dashboard backfill lock",
        ),
    )
    degraded = [
        name
        for name, value, fallback in (
            ("config", config, DEFAULT_CONFIG),
            ("invitations", invitations, EMPTY_LIST),
            ("backfill_running", backfill_running, None),
        )
        if value is fallback
    ]
    return DashboardResponse(
        config=ConfigResponse.from_config(config),
        invitations=invitations,
        backfill_running=bool(backfill_running),
        degraded=degraded,
    )
