import asyncio

from src.cache.tests.inmemory_backend import InMemoryCacheBackend
from src.cache.versioned import VersionedCache
from src.config.settings import settings
from src.dashboard.router import DASHBOARD_URL
from src.guests.features.backfill_invite_codes.router import get_backfill_write_model
from src.guests.features.backfill_invite_codes.tests.inmemory_write_model import InMemoryBackfillWriteModel
from src.invitations.dtos import InvitationPage
from src.invitations.features.list_invitations.query import InvitationListQuery
from src.invitations.features.list_invitations.router import get_invitation_list_query
from src.notifications.tests.inmemory_models import (
    WEDDING_ID,
    InMemoryInvitationReadModel,
    StaticConfigReadModel,
    make_invitation,
)
from src.wedding_config.dtos import ConfigValue
from src.wedding_config.read_model import get_config_read_model

HEADERS = {"X-Wedding-Id": str(WEDDING_ID)}


class ListingReadModel(InMemoryInvitationReadModel):
    async def list_invitations(self, wedding_id, filters):
        invitations = list(self.invitations.values())
        return InvitationPage(
            invitations=invitations,
            total_count=len(invitations),
            page=filters.page,
            page_size=filters.page_size,
            total_pages=1,
        )


class SlowConfigReadModel(StaticConfigReadModel):
    async def get_config(self, wedding_id):
        await asyncio.sleep(5)
        return self.config


def overrides(config_read_model, read_model, running=False):
    list_query = InvitationListQuery(read_model=read_model, cache=VersionedCache(InMemoryCacheBackend()))
    backfill = InMemoryBackfillWriteModel(running=running)
    return {
        get_config_read_model: lambda: config_read_model,
        get_invitation_list_query: lambda: list_query,
        get_backfill_write_model: lambda: backfill,
    }


async def test_dashboard(client_factory):
    config = StaticConfigReadModel(ConfigValue(plus_ones_enabled=True, max_party_size=4))

    async with client_factory(overrides(config, ListingReadModel(make_invitation()), running=True)) as client:
        response = await client.get(DASHBOARD_URL, headers=HEADERS)

    assert response.status_code == 200
    body = response.json()
    assert body["config"]["max_party_size"] == 4
    assert body["invitations"]["total_count"] == 1
    assert body["invitations"]["invitations"][0]["guest_name"] == "Carla Diaz"
    assert body["backfill_running"] is True
    assert body["degraded"] == []


async def test_slow_and_failing_sections_fall_back(client_factory, monkeypatch):
    monkeypatch.setattr(settings, "DASHBOARD_FETCH_TIMEOUT_SECONDS", 0.05)
    # the in-memory read model cannot list, so the invitations section fails
    failing_list = InMemoryInvitationReadModel(make_invitation())

    async with client_factory(overrides(SlowConfigReadModel(), failing_list)) as client:
        response = await client.get(DASHBOARD_URL, headers=HEADERS)

    assert response.status_code == 200
    body = response.json()
    assert body["config"]["max_party_size"] == 1
    assert body["invitations"]["invitations"] == []
    assert body["backfill_running"] is False
    assert body["degraded"] == ["config", "invitations"]
