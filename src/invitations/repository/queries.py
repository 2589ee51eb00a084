"""Tenant-scoped statements shared by the invitation write models."""

from collections.abc import Sequence
from uuid import UUID, uuid4

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.invitations.dtos import EventDef, EventNotFoundError, InvitationStatus
from src.models.event import Event
from src.models.guest import Guest
from src.models.invitation import Invitation, InvitationEvent


def new_token() -> str:
    return str(uuid4())


async def require_events(
    session: AsyncSession, wedding_id: UUID, event_ids: Sequence[UUID]
) -> dict[UUID, Event]:
    """Load the given events, raising if any is missing from this wedding."""
    wanted = set(event_ids)
    result = await session.execute(
        select(Event).where(Event.wedding_id == wedding_id, Event.uuid.in_(wanted))
    )
    events = {event.uuid: event for event in result.scalars()}
    missing = wanted - events.keys()
    if missing:
        raise EventNotFoundError(sorted(missing, key=str))
    return events


async def get_guest(session: AsyncSession, wedding_id: UUID, guest_id: UUID) -> Guest | None:
    result = await session.execute(
        select(Guest).where(Guest.uuid == guest_id, Guest.wedding_id == wedding_id)
    )
    return result.scalar_one_or_none()


async def get_guest_by_email(session: AsyncSession, wedding_id: UUID, email: str) -> Guest | None:
    result = await session.execute(
        select(Guest)
        .where(Guest.wedding_id == wedding_id, Guest.email == email.strip().lower())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def get_invitation(
    session: AsyncSession, wedding_id: UUID, invitation_id: UUID
) -> Invitation | None:
    result = await session.execute(
        select(Invitation).where(
            Invitation.uuid == invitation_id, Invitation.wedding_id == wedding_id
        )
    )
    return result.scalar_one_or_none()


async def get_invitation_for_guest(
    session: AsyncSession, wedding_id: UUID, guest_id: UUID
) -> Invitation | None:
    result = await session.execute(
        select(Invitation).where(
            Invitation.guest_id == guest_id, Invitation.wedding_id == wedding_id
        )
    )
    return result.scalar_one_or_none()


async def get_or_create_invitation(
    session: AsyncSession, wedding_id: UUID, guest_id: UUID
) -> tuple[Invitation, bool]:
    """Reuse the guest's invitation (one per guest) or create it with a fresh token."""
    invitation = await get_invitation_for_guest(session, wedding_id, guest_id)
    if invitation is not None:
        return invitation, False
    invitation = Invitation(wedding_id=wedding_id, guest_id=guest_id, token=new_token())
    session.add(invitation)
    await session.flush()
    return invitation, True


async def get_invitation_events(
    session: AsyncSession, wedding_id: UUID, invitation_id: UUID
) -> list[InvitationEvent]:
    result = await session.execute(
        select(InvitationEvent).where(
            InvitationEvent.invitation_id == invitation_id,
            InvitationEvent.wedding_id == wedding_id,
        )
    )
    return list(result.scalars())


async def insert_invitation_events(
    session: AsyncSession,
    wedding_id: UUID,
    invitation_id: UUID,
    events: Sequence[EventDef],
    replace_event_ids: Sequence[UUID] | None = None,
) -> list[InvitationEvent]:
    """Insert ``events`` with fresh event tokens.

    Existing rows for ``replace_event_ids`` (every row of the invitation when
    ``None``) are deleted first. ``events`` must already be headcount-validated.
    """
    stmt = delete(InvitationEvent).where(
        InvitationEvent.invitation_id == invitation_id,
        InvitationEvent.wedding_id == wedding_id,
    )
    if replace_event_ids is not None:
        stmt = stmt.where(InvitationEvent.event_id.in_(replace_event_ids))
    await session.execute(stmt)

    rows = [
        InvitationEvent(
            wedding_id=wedding_id,
            invitation_id=invitation_id,
            event_id=event.event_id,
            status=event.status,
            headcount=event.headcount,
            event_token=new_token(),
        )
        for event in events
    ]
    session.add_all(rows)
    await session.flush()
    return rows


def apply_status(invitation_event: InvitationEvent, status: InvitationStatus) -> None:
    invitation_event.status = status
    if status != InvitationStatus.ACCEPTED:
        invitation_event.clear_dietary()
