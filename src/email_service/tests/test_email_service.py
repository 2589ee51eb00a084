"""Email rendering and the Resend adapter, with the HTTP layer mocked."""

import base64
import json
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import uuid4

import httpx

from src.email_service.base import ConfirmationParams, render_confirmation, render_invitation
from src.email_service.ics import build_ics, ics_attachment
from src.email_service.resend_service import ResendEmailService
from src.invitations.dtos import EventSummaryDTO
from src.notifications.dtos import NotificationParams

CEREMONY = EventSummaryDTO(
    uuid=uuid4(),
    name="Ceremony",
    starts_at=datetime(2026, 6, 20, 16, 0, tzinfo=UTC),
    venue="Old Mill",
    address="1 River Road",
)
DINNER = EventSummaryDTO(uuid=uuid4(), name="Dinner", starts_at=datetime(2026, 6, 20, 19, 0, tzinfo=UTC))

PARAMS = NotificationParams(
    guest_name="Carla Diaz",
    guest_first_name="Carla",
    couple_name="Ana & Ben",
    event_name="Ceremony",
    event_date="Saturday, June 20, 2026",
    event_time="16:00",
    venue="Old Mill",
    address="1 River Road",
    rsvp_url="https://ana-and-ben.example/rsvp?token=abc",
    invite_code="ABCD1234",
)


@dataclass
class FakeConfig:
    resend_api_key: str = "re_test"
    emails_from: str = "Ana & Ben <hello@ana-and-ben.example>"


def test_invitation_subject_names_single_event():
    subject, html_body, text_body = render_invitation(PARAMS, [CEREMONY])

    assert subject == "You're Invited, Carla - Ceremony"
    assert "Ana &amp; Ben" in html_body
    assert PARAMS.rsvp_url in html_body
    assert "ABCD1234" in text_body


def test_invitation_subject_counts_multiple_events():
    subject, _, _ = render_invitation(PARAMS, [CEREMONY, DINNER])

    assert subject == "You're Invited, Carla - 2 Events"


def test_confirmation_subjects():
    accepted = ConfirmationParams(guest_name="Carla", couple_name="Ana & Ben", accepted=True)
    declined = ConfirmationParams(guest_name="Carla", couple_name="Ana & Ben", accepted=False)

    assert render_confirmation(accepted, [CEREMONY])[0] == "RSVP Confirmed - Ana & Ben"
    assert render_confirmation(declined, [CEREMONY])[0] == "Thank you for your response - Ana & Ben"


def test_ics_has_one_all_day_event_per_dated_event():
    undated = EventSummaryDTO(uuid=uuid4(), name="After party")

    ics = build_ics([CEREMONY, undated], PARAMS.rsvp_url, "Ana & Ben")

    assert ics.count("BEGIN:VEVENT") == 1
    assert "DTSTART;VALUE=DATE:20260620" in ics
    assert "DTEND;VALUE=DATE:20260621" in ics
    assert "LOCATION:Old Mill\\, 1 River Road" in ics


def test_no_ics_without_dates():
    assert ics_attachment([EventSummaryDTO(uuid=uuid4(), name="TBD")], PARAMS.rsvp_url, "Ana & Ben") is None


async def test_resend_sends_payload_with_attachment():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"id": "email_123"})

    service = ResendEmailService(FakeConfig(), transport=httpx.MockTransport(handler))
    attachment = ics_attachment([CEREMONY], PARAMS.rsvp_url, "Ana & Ben")

    result = await service.send_invitation("carla@example.com", PARAMS, [CEREMONY], [attachment])

    assert result.success
    assert result.message_id == "email_123"
    assert requests[0].headers["Authorization"] == "Bearer re_test"
    body = json.loads(requests[0].content)
    assert body["to"] == ["carla@example.com"]
    assert body["attachments"][0]["filename"] == "event.ics"
    assert "BEGIN:VCALENDAR" in base64.b64decode(body["attachments"][0]["content"]).decode()


async def test_resend_error_becomes_failed_result():
    transport = httpx.MockTransport(lambda request: httpx.Response(422, json={"message": "invalid"}))
    service = ResendEmailService(FakeConfig(), transport=transport)

    result = await service.send_invitation("carla@example.com", PARAMS, [CEREMONY])

    assert not result.success
    assert result.error == "Resend API error: 422"


async def test_resend_network_error_becomes_failed_result():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    service = ResendEmailService(FakeConfig(), transport=httpx.MockTransport(handler))

    result = await service.send_invitation("carla@example.com", PARAMS, [CEREMONY])

    assert not result.success
    assert "connection refused" in result.error
