from sqlalchemy import func, select

from src.audit.tests.inmemory_writer import InMemoryAuditWriter
from src.audit.writer import AuditAction
from src.cache.tests.inmemory_backend import InMemoryCacheBackend
from src.cache.versioned import VersionedCache
from src.invitations.dtos import EventDef, RsvpResponse
from src.invitations.features.delete_invitations.write_model import SqlDeleteInvitationsWriteModel
from src.invitations.repository.queries import get_or_create_invitation, insert_invitation_events
from src.invitations.tests.factories import make_event, make_guest
from src.models import Invitation, InvitationEvent, RsvpRecord, Wedding


async def invite_with_history(db_session, wedding, guest, event):
    invitation, _ = await get_or_create_invitation(db_session, wedding.uuid, guest.uuid)
    [row] = await insert_invitation_events(db_session, wedding.uuid, invitation.uuid, [EventDef(event.uuid)])
    db_session.add(
        RsvpRecord(
            wedding_id=wedding.uuid,
            invitation_event_id=row.uuid,
            response=RsvpResponse.ACCEPTED,
            party_size=1,
        )
    )
    await db_session.flush()
    return invitation


async def count(db_session, model):
    return await db_session.scalar(select(func.count()).select_from(model))


async def test_deletes_children_first(db_session, wedding):
    guest = await make_guest(db_session, wedding)
    event = await make_event(db_session, wedding)
    invitation = await invite_with_history(db_session, wedding, guest, event)
    cache = VersionedCache(InMemoryCacheBackend())
    audit = InMemoryAuditWriter()
    write_model = SqlDeleteInvitationsWriteModel(cache, audit, session_overwrite=db_session)

    deleted = await write_model.delete_invitations(wedding.uuid, [invitation.uuid])

    assert deleted == 1
    assert await count(db_session, RsvpRecord) == 0
    assert await count(db_session, InvitationEvent) == 0
    assert await count(db_session, Invitation) == 0
    assert await cache.current_version() == "2"
    assert audit.last(AuditAction.INVITATION_DELETE).details["count"] == 1


async def test_ignores_other_weddings(db_session, wedding):
    other = Wedding(couple_name="Other couple")
    db_session.add(other)
    await db_session.flush()
    guest = await make_guest(db_session, other)
    event = await make_event(db_session, other)
    invitation = await invite_with_history(db_session, other, guest, event)
    audit = InMemoryAuditWriter()
    write_model = SqlDeleteInvitationsWriteModel(
        VersionedCache(InMemoryCacheBackend()), audit, session_overwrite=db_session
    )

    deleted = await write_model.delete_invitations(wedding.uuid, [invitation.uuid])

    assert deleted == 0
    assert await count(db_session, Invitation) == 1
    assert await count(db_session, RsvpRecord) == 1
    assert audit.entries == []
