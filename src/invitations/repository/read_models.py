import math
from abc import ABC, abstractmethod
from collections.abc import Sequence
from functools import partial
from uuid import UUID

from sqlalchemy import and_, exists, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.database import async_session_manager
from src.invitations.dtos import (
    EventSummaryDTO,
    GuestSummaryDTO,
    InvitationDTO,
    InvitationEventDTO,
    InvitationListFilters,
    InvitationPage,
    InvitationStatus,
    RsvpRecordDTO,
    RsvpResponse,
    WeddingProfileDTO,
)
from src.models.event import Event
from src.models.guest import Guest
from src.models.invitation import Invitation, InvitationEvent, RsvpRecord
from src.models.wedding import Wedding

SORT_COLUMNS = {
    "created_at": Invitation.created_at,
    "guest_name": Guest.last_name,
    "first_name": Guest.first_name,
    "email": Guest.email,
}


class InvitationReadModel(ABC):
    """Loads invitations as explicit DTOs, always scoped to one wedding."""

    @abstractmethod
    async def get_invitation(
        self,
        wedding_id: UUID,
        invitation_id: UUID,
        event_ids: Sequence[UUID] | None = None,
    ) -> InvitationDTO | None:
        """Load an invitation with its guest and (optionally only the given) events."""
        raise NotImplementedError

    @abstractmethod
    async def get_by_invite_code(self, wedding_id: UUID, invite_code: str) -> InvitationDTO | None:
        raise NotImplementedError

    @abstractmethod
    async def get_by_token(self, wedding_id: UUID, token: str) -> InvitationDTO | None:
        raise NotImplementedError

    @abstractmethod
    async def get_wedding_profile(self, wedding_id: UUID) -> WeddingProfileDTO:
        raise NotImplementedError

    @abstractmethod
    async def list_invitations(self, wedding_id: UUID, filters: InvitationListFilters) -> InvitationPage:
        raise NotImplementedError


class SqlInvitationReadModel(InvitationReadModel):
    async_session_manager = staticmethod(partial(async_session_manager))

    def __init__(self, session_overwrite: AsyncSession | None = None) -> None:
        self.session_overwrite = session_overwrite

    async def get_invitation(
        self,
        wedding_id: UUID,
        invitation_id: UUID,
        event_ids: Sequence[UUID] | None = None,
    ) -> InvitationDTO | None:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            return await self._load_one(
                session, wedding_id, Invitation.uuid == invitation_id, event_ids=event_ids
            )

    async def get_by_invite_code(self, wedding_id: UUID, invite_code: str) -> InvitationDTO | None:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            return await self._load_one(session, wedding_id, Guest.invite_code == invite_code)

    async def get_by_token(self, wedding_id: UUID, token: str) -> InvitationDTO | None:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            return await self._load_one(session, wedding_id, Invitation.token == token)

    async def get_wedding_profile(self, wedding_id: UUID) -> WeddingProfileDTO:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            wedding = await session.get(Wedding, wedding_id)
        if wedding is None:
            return WeddingProfileDTO()
        return WeddingProfileDTO(couple_name=wedding.couple_name, website_url=wedding.website_url)

    async def list_invitations(self, wedding_id: UUID, filters: InvitationListFilters) -> InvitationPage:
        conditions = [Invitation.wedding_id == wedding_id]
        if filters.q:
            pattern = f"%{filters.q.strip().lower()}%"
            conditions.append(
                or_(
                    func.lower(Guest.first_name).like(pattern),
                    func.lower(Guest.last_name).like(pattern),
                    func.lower(Guest.email).like(pattern),
                    func.lower(Guest.invite_code).like(pattern),
                )
            )
        if filters.event_id or filters.status:
            event_conditions = [
                InvitationEvent.invitation_id == Invitation.uuid,
                InvitationEvent.wedding_id == wedding_id,
            ]
            if filters.event_id:
                event_conditions.append(InvitationEvent.event_id == filters.event_id)
            if filters.status:
                event_conditions.append(InvitationEvent.status == filters.status)
            conditions.append(exists().where(and_(*event_conditions)))
        if filters.date_from:
            conditions.append(Invitation.created_at >= filters.date_from)
        if filters.date_to:
            conditions.append(Invitation.created_at <= filters.date_to)

        page = max(filters.page, 1)
        page_size = max(filters.page_size, 1)

        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            total_count = await session.scalar(
                select(func.count(Invitation.uuid))
                .join(Guest, Guest.uuid == Invitation.guest_id)
                .where(*conditions)
            )
            result = await session.execute(
                select(Invitation, Guest)
                .join(Guest, Guest.uuid == Invitation.guest_id)
                .where(*conditions)
                .order_by(_sort_clause(filters.sort), Invitation.uuid)
                .offset((page - 1) * page_size)
                .limit(page_size)
            )
            rows = result.all()
            events_by_invitation = await self._load_events(
                session, wedding_id, [invitation.uuid for invitation, _ in rows]
            )

        invitations = [
            _to_invitation_dto(invitation, guest, events_by_invitation.get(invitation.uuid, []))
            for invitation, guest in rows
        ]
        total_count = total_count or 0
        return InvitationPage(
            invitations=invitations,
            total_count=total_count,
            page=page,
            page_size=page_size,
            total_pages=math.ceil(total_count / page_size) if total_count else 0,
        )

    async def _load_one(
        self,
        session: AsyncSession,
        wedding_id: UUID,
        criterion,
        event_ids: Sequence[UUID] | None = None,
    ) -> InvitationDTO | None:
        result = await session.execute(
            select(Invitation, Guest)
            .join(Guest, Guest.uuid == Invitation.guest_id)
            .where(
                Invitation.wedding_id == wedding_id,
                Guest.wedding_id == wedding_id,
                criterion,
            )
        )
        row = result.first()
        if row is None:
            return None
        invitation, guest = row
        events = await self._load_events(session, wedding_id, [invitation.uuid], event_ids=event_ids)
        return _to_invitation_dto(invitation, guest, events.get(invitation.uuid, []))

    @staticmethod
    async def _load_events(
        session: AsyncSession,
        wedding_id: UUID,
        invitation_ids: Sequence[UUID],
        event_ids: Sequence[UUID] | None = None,
    ) -> dict[UUID, list[InvitationEventDTO]]:
        if not invitation_ids:
            return {}
        query = (
            select(InvitationEvent, Event)
            .join(Event, Event.uuid == InvitationEvent.event_id)
            .where(
                InvitationEvent.wedding_id == wedding_id,
                Event.wedding_id == wedding_id,
                InvitationEvent.invitation_id.in_(invitation_ids),
            )
            .order_by(Event.starts_at, Event.name)
        )
        if event_ids is not None:
            query = query.where(InvitationEvent.event_id.in_(event_ids))
        rows = (await session.execute(query)).all()

        latest = await _load_latest_rsvps(session, wedding_id, [ie.uuid for ie, _ in rows])

        events: dict[UUID, list[InvitationEventDTO]] = {}
        for invitation_event, event in rows:
            events.setdefault(invitation_event.invitation_id, []).append(
                _to_invitation_event_dto(invitation_event, event, latest.get(invitation_event.uuid))
            )
        return events


async def _load_latest_rsvps(
    session: AsyncSession, wedding_id: UUID, invitation_event_ids: Sequence[UUID]
) -> dict[UUID, RsvpRecordDTO]:
    """Most recent history row per invitation event."""
    if not invitation_event_ids:
        return {}
    result = await session.execute(
        select(RsvpRecord)
        .where(
            RsvpRecord.wedding_id == wedding_id,
            RsvpRecord.invitation_event_id.in_(invitation_event_ids),
        )
        .order_by(RsvpRecord.submitted_at.desc())
    )
    latest: dict[UUID, RsvpRecordDTO] = {}
    for record in result.scalars():
        if record.invitation_event_id in latest:
            continue
        latest[record.invitation_event_id] = RsvpRecordDTO(
            uuid=record.uuid,
            response=RsvpResponse(record.response),
            party_size=record.party_size,
            message=record.message,
            submitted_at=record.submitted_at,
        )
    return latest


def _sort_clause(sort: str):
    field, _, direction = (sort or "created_at:desc").partition(":")
    column = SORT_COLUMNS.get(field, Invitation.created_at)
    return column.asc() if direction == "asc" else column.desc()


def _to_guest_dto(guest: Guest) -> GuestSummaryDTO:
    return GuestSummaryDTO(
        uuid=guest.uuid,
        first_name=guest.first_name,
        last_name=guest.last_name or "",
        email=guest.email,
        phone=guest.phone,
        total_guests=guest.total_guests,
        invite_code=guest.invite_code,
        is_vip=guest.is_vip,
    )


def _to_invitation_event_dto(
    invitation_event: InvitationEvent, event: Event, latest_rsvp: RsvpRecordDTO | None
) -> InvitationEventDTO:
    return InvitationEventDTO(
        uuid=invitation_event.uuid,
        event_id=invitation_event.event_id,
        status=InvitationStatus(invitation_event.status),
        headcount=invitation_event.headcount,
        event_token=invitation_event.event_token,
        event=EventSummaryDTO(
            uuid=event.uuid,
            name=event.name,
            starts_at=event.starts_at,
            venue=event.venue,
            address=event.address,
        ),
        dietary_restrictions=invitation_event.dietary_restrictions,
        dietary_information=invitation_event.dietary_information,
        food_choice=invitation_event.food_choice,
        latest_rsvp=latest_rsvp,
    )


def _to_invitation_dto(
    invitation: Invitation, guest: Guest, events: list[InvitationEventDTO]
) -> InvitationDTO:
    return InvitationDTO(
        uuid=invitation.uuid,
        wedding_id=invitation.wedding_id,
        token=invitation.token,
        guest=_to_guest_dto(guest),
        events=events,
        created_at=invitation.created_at,
    )


def get_invitation_read_model() -> InvitationReadModel:
    return SqlInvitationReadModel()
