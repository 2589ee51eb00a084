from uuid import uuid4

from src.audit.tests.inmemory_writer import InMemoryAuditWriter
from src.invitations.features.send_notifications.router import (
    RATE_LIMIT_URL,
    SEND_BULK_URL,
    SEND_INVITATION_URL,
)
from src.invitations.repository.read_models import get_invitation_read_model
from src.notifications.orchestrator import NotificationOrchestrator, get_notification_orchestrator
from src.notifications.rate_gate import RateGate, get_rate_gate
from src.notifications.tests.inmemory_models import (
    WEDDING_ID,
    InMemoryInvitationReadModel,
    InMemoryMailLogStore,
    RecordingEmailService,
    RecordingSmsService,
    RecordingWhatsAppService,
    StaticConfigReadModel,
    make_invitation,
    registration_for,
)
from src.wedding_config.dtos import ConfigValue
from src.wedding_config.read_model import get_config_read_model

HEADERS = {"X-Wedding-Id": str(WEDDING_ID)}


def overrides_for(*invitations, config: ConfigValue | None = None):
    config_read_model = StaticConfigReadModel(config)
    read_model = InMemoryInvitationReadModel(*invitations)
    mail_log = InMemoryMailLogStore()
    rate_gate = RateGate(mail_log, max_per_day=3)
    whatsapp = RecordingWhatsAppService()
    orchestrator = NotificationOrchestrator(
        config_read_model=config_read_model,
        read_model=read_model,
        email_service=RecordingEmailService(),
        sms_service=RecordingSmsService(),
        whatsapp_service=whatsapp,
        registration=registration_for(whatsapp),
        rate_gate=rate_gate,
        mail_log=mail_log,
        audit_writer=InMemoryAuditWriter(),
    )
    return {
        get_notification_orchestrator: lambda: orchestrator,
        get_invitation_read_model: lambda: read_model,
        get_rate_gate: lambda: rate_gate,
        get_config_read_model: lambda: config_read_model,
    }


async def test_send_invitation(client_factory):
    invitation = make_invitation()

    async with client_factory(overrides_for(invitation)) as client:
        response = await client.post(
            SEND_INVITATION_URL.format(invitation_id=invitation.uuid), json={}, headers=HEADERS
        )

    assert response.status_code == 200
    body = response.json()
    assert body["guest_name"] == "Carla Diaz"
    assert body["all_successful"] is True
    assert [r["channel"] for r in body["results"]] == ["email"]


async def test_send_unknown_invitation_is_404(client_factory):
    async with client_factory(overrides_for()) as client:
        response = await client.post(
            SEND_INVITATION_URL.format(invitation_id=uuid4()), json={}, headers=HEADERS
        )

    assert response.status_code == 404


async def test_fourth_send_is_429_and_rate_limit_reports_it(client_factory):
    invitation = make_invitation()
    url = SEND_INVITATION_URL.format(invitation_id=invitation.uuid)

    async with client_factory(overrides_for(invitation)) as client:
        statuses = [(await client.post(url, json={}, headers=HEADERS)).status_code for _ in range(4)]
        rate_limit = await client.get(RATE_LIMIT_URL.format(invitation_id=invitation.uuid), headers=HEADERS)

    assert statuses == [200, 200, 200, 429]
    assert rate_limit.json()["sent_today"] == 3
    assert rate_limit.json()["remaining"] == 0
    assert rate_limit.json()["can_send"] is False


async def test_rate_limit_reports_the_busiest_enabled_channel(client_factory):
    invitation = make_invitation()
    config = ConfigValue(notification_email_enabled=True, notification_whatsapp_enabled=True)
    send_url = SEND_INVITATION_URL.format(invitation_id=invitation.uuid)
    rate_limit_url = RATE_LIMIT_URL.format(invitation_id=invitation.uuid)

    async with client_factory(overrides_for(invitation, config=config)) as client:
        for _ in range(2):
            assert (await client.post(send_url, json={}, headers=HEADERS)).status_code == 200
        after_two = (await client.get(rate_limit_url, headers=HEADERS)).json()
        whatsapp = (await client.get(rate_limit_url, params={"channel": "whatsapp"}, headers=HEADERS)).json()
        third = await client.post(send_url, json={}, headers=HEADERS)
        after_three = (await client.get(rate_limit_url, headers=HEADERS)).json()

    # each send logs one email and one WhatsApp row, but the limit is per channel
    assert after_two["sent_today"] == 2
    assert after_two["remaining"] == 1
    assert after_two["can_send"] is True
    assert whatsapp["sent_today"] == 2
    assert third.status_code == 200
    assert third.json()["all_successful"] is True
    assert after_three["sent_today"] == 3
    assert after_three["can_send"] is False


async def test_bypass_requires_confirmation(client_factory):
    invitation = make_invitation()
    url = SEND_INVITATION_URL.format(invitation_id=invitation.uuid)

    async with client_factory(overrides_for(invitation)) as client:
        rejected = await client.post(url, json={"ignore_rate_limit": True}, headers=HEADERS)
        accepted = await client.post(
            url, json={"ignore_rate_limit": True, "confirm_bypass": True}, headers=HEADERS
        )

    assert rejected.status_code == 400
    assert accepted.status_code == 200


async def test_send_bulk(client_factory):
    invitation = make_invitation()

    async with client_factory(overrides_for(invitation)) as client:
        response = await client.post(
            SEND_BULK_URL,
            json={"invitation_ids": [str(invitation.uuid), str(uuid4())]},
            headers=HEADERS,
        )

    assert response.status_code == 200
    assert response.json()["total"] == 2
    assert response.json()["successful"] == 1
    assert response.json()["failed"] == 1
    missing = response.json()["results"][1]
    assert missing["results"] == []
    assert "not found" in missing["error"]
