from uuid import uuid4

from src.invitations.dtos import (
    CreatedInvitationDTO,
    CreateInvitationsResult,
    EventDef,
    EventNotFoundError,
)
from src.invitations.features.create_invitations.router import (
    INVITATIONS_URL,
    get_create_invitations_write_model,
)
from src.invitations.features.create_invitations.write_model import CreateInvitationsWriteModel

WEDDING_ID = uuid4()
HEADERS = {"X-Wedding-Id": str(WEDDING_ID)}


class InMemoryCreateInvitationsWriteModel(CreateInvitationsWriteModel):
    def __init__(self, known_events=None):
        self.calls = []
        self.known_events = known_events

    async def create_invitations(self, wedding_id, guest_ids, events, user_id=None):
        self.calls.append((wedding_id, guest_ids, events))
        if self.known_events is not None and any(
            event.event_id not in self.known_events for event in events
        ):
            raise EventNotFoundError([event.event_id for event in events])
        invitations = [
            CreatedInvitationDTO(
                invitation_id=uuid4(),
                guest_id=guest_id,
                token="token",
                invite_code="ABCD1234",
                events=[EventDef(event.event_id, headcount=1) for event in events],
            )
            for guest_id in guest_ids
        ]
        return CreateInvitationsResult(
            invitations=invitations, created=len(invitations), skipped=0, skipped_guest_ids=[]
        )


async def test_create_invitations(client_factory):
    write_model = InMemoryCreateInvitationsWriteModel()
    guest_id, event_id = uuid4(), uuid4()
    overrides = {get_create_invitations_write_model: lambda: write_model}

    async with client_factory(overrides) as client:
        response = await client.post(
            INVITATIONS_URL,
            headers=HEADERS,
            json={"guest_ids": [str(guest_id)], "events": [{"event_id": str(event_id), "headcount": 4}]},
        )

    assert response.status_code == 201
    data = response.json()
    assert data["created"] == 1
    assert data["invitations"][0]["headcounts"] == {str(event_id): 1}
    wedding_id, _, events = write_model.calls[0]
    assert wedding_id == WEDDING_ID
    assert events == [EventDef(event_id, headcount=4)]


async def test_unknown_event_is_404(client_factory):
    write_model = InMemoryCreateInvitationsWriteModel(known_events=set())
    overrides = {get_create_invitations_write_model: lambda: write_model}

    async with client_factory(overrides) as client:
        response = await client.post(
            INVITATIONS_URL,
            headers=HEADERS,
            json={"guest_ids": [str(uuid4())], "events": [{"event_id": str(uuid4())}]},
        )

    assert response.status_code == 404
    assert response.json()["detail"] == "One or more events not found for this wedding"


async def test_requires_guests(client_factory):
    write_model = InMemoryCreateInvitationsWriteModel()
    overrides = {get_create_invitations_write_model: lambda: write_model}

    async with client_factory(overrides) as client:
        response = await client.post(
            INVITATIONS_URL, headers=HEADERS, json={"guest_ids": [], "events": []}
        )

    assert response.status_code == 422
