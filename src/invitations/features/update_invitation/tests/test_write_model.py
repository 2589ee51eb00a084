import pytest
from sqlalchemy import select

from src.audit.tests.inmemory_writer import InMemoryAuditWriter
from src.audit.writer import AuditAction
from src.cache.tests.inmemory_backend import InMemoryCacheBackend
from src.cache.versioned import VersionedCache
from src.invitations.dtos import (
    EventDef,
    GuestAlreadyInvitedError,
    GuestNotFoundError,
    InvitationEventNotFoundError,
    InvitationNotFoundError,
    InvitationStatus,
)
from src.invitations.features.update_invitation.write_model import (
    InvitationEventChanges,
    SqlUpdateInvitationWriteModel,
)
from src.invitations.repository.queries import get_or_create_invitation, insert_invitation_events
from src.invitations.repository.read_models import SqlInvitationReadModel
from src.invitations.tests.factories import make_event, make_guest, set_config
from src.models import InvitationEvent, Wedding
from src.wedding_config.read_model import SqlConfigReadModel


def make_write_model(db_session):
    audit = InMemoryAuditWriter()
    write_model = SqlUpdateInvitationWriteModel(
        config_read_model=SqlConfigReadModel(session_overwrite=db_session),
        read_model=SqlInvitationReadModel(session_overwrite=db_session),
        cache=VersionedCache(InMemoryCacheBackend()),
        audit_writer=audit,
        session_overwrite=db_session,
    )
    return write_model, audit


async def invite(db_session, wedding, guest, events):
    invitation, _ = await get_or_create_invitation(db_session, wedding.uuid, guest.uuid)
    await insert_invitation_events(db_session, wedding.uuid, invitation.uuid, events)
    return invitation


async def test_replacing_events_rotates_tokens(db_session, wedding):
    guest = await make_guest(db_session, wedding)
    ceremony = await make_event(db_session, wedding, "Ceremony")
    dinner = await make_event(db_session, wedding, "Dinner")
    invitation = await invite(db_session, wedding, guest, [EventDef(ceremony.uuid)])
    old_token = (await db_session.execute(select(InvitationEvent.event_token))).scalar_one()
    write_model, audit = make_write_model(db_session)

    result = await write_model.update_invitation(
        wedding.uuid, invitation.uuid, events=[EventDef(ceremony.uuid), EventDef(dinner.uuid)]
    )

    assert {event.event_id for event in result.events} == {ceremony.uuid, dinner.uuid}
    assert old_token not in {event.event_token for event in result.events}
    assert audit.last(AuditAction.INVITATION_UPDATE).details["events_replaced"] is True


async def test_reassigning_guest_reclamps_headcount(db_session, wedding):
    await set_config(db_session, wedding, plus_ones_enabled="true", max_party_size="6")
    big_family = await make_guest(db_session, wedding, total_guests=5)
    single = await make_guest(db_session, wedding, email="solo@example.com", total_guests=2)
    event = await make_event(db_session, wedding)
    invitation = await invite(db_session, wedding, big_family, [EventDef(event.uuid, headcount=5)])
    write_model, _ = make_write_model(db_session)

    result = await write_model.update_invitation(wedding.uuid, invitation.uuid, guest_id=single.uuid)

    assert result.guest.uuid == single.uuid
    assert result.events[0].headcount == 2


async def test_reassigning_to_invited_guest_conflicts(db_session, wedding):
    first = await make_guest(db_session, wedding)
    second = await make_guest(db_session, wedding, email="second@example.com")
    event = await make_event(db_session, wedding)
    invitation = await invite(db_session, wedding, first, [EventDef(event.uuid)])
    await invite(db_session, wedding, second, [EventDef(event.uuid)])
    write_model, _ = make_write_model(db_session)

    with pytest.raises(GuestAlreadyInvitedError):
        await write_model.update_invitation(wedding.uuid, invitation.uuid, guest_id=second.uuid)


async def test_reassigning_to_foreign_guest_is_not_found(db_session, wedding):
    other = Wedding(couple_name="Other couple")
    db_session.add(other)
    await db_session.flush()
    stranger = await make_guest(db_session, other, email="stranger@example.com")
    guest = await make_guest(db_session, wedding)
    event = await make_event(db_session, wedding)
    invitation = await invite(db_session, wedding, guest, [EventDef(event.uuid)])
    write_model, _ = make_write_model(db_session)

    with pytest.raises(GuestNotFoundError):
        await write_model.update_invitation(wedding.uuid, invitation.uuid, guest_id=stranger.uuid)


async def test_invitation_of_other_wedding_is_not_found(db_session, wedding):
    other = Wedding(couple_name="Other couple")
    db_session.add(other)
    await db_session.flush()
    guest = await make_guest(db_session, other)
    event = await make_event(db_session, other)
    invitation = await invite(db_session, other, guest, [EventDef(event.uuid)])
    write_model, _ = make_write_model(db_session)

    with pytest.raises(InvitationNotFoundError):
        await write_model.update_invitation(wedding.uuid, invitation.uuid, events=[])


async def test_event_edit_clears_dietary_unless_accepted(db_session, wedding):
    guest = await make_guest(db_session, wedding)
    event = await make_event(db_session, wedding)
    invitation = await invite(db_session, wedding, guest, [EventDef(event.uuid)])
    row = (await db_session.execute(select(InvitationEvent))).scalar_one()
    write_model, audit = make_write_model(db_session)

    accepted = await write_model.update_invitation_event(
        wedding.uuid,
        row.uuid,
        InvitationEventChanges(status=InvitationStatus.ACCEPTED, food_choice="fish"),
    )
    declined = await write_model.update_invitation_event(
        wedding.uuid, row.uuid, InvitationEventChanges(status=InvitationStatus.DECLINED)
    )

    assert accepted.events[0].food_choice == "fish"
    assert declined.uuid == invitation.uuid
    assert declined.events[0].status == InvitationStatus.DECLINED
    assert declined.events[0].food_choice is None
    assert audit.actions() == [AuditAction.INVITATION_EVENT_UPDATE] * 2


async def test_event_edit_reclamps_headcount(db_session, wedding):
    await set_config(db_session, wedding, plus_ones_enabled="true", max_party_size="3")
    guest = await make_guest(db_session, wedding, total_guests=4)
    event = await make_event(db_session, wedding)
    await invite(db_session, wedding, guest, [EventDef(event.uuid)])
    row = (await db_session.execute(select(InvitationEvent))).scalar_one()
    write_model, _ = make_write_model(db_session)

    result = await write_model.update_invitation_event(
        wedding.uuid, row.uuid, InvitationEventChanges(headcount=9)
    )

    assert result.events[0].headcount == 3


async def test_event_edit_unknown_row(db_session, wedding):
    write_model, _ = make_write_model(db_session)

    with pytest.raises(InvitationEventNotFoundError):
        await write_model.update_invitation_event(wedding.uuid, wedding.uuid, InvitationEventChanges())
