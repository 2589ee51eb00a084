import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import partial
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.audit.writer import AuditAction, AuditWriter
from src.cache.versioned import VersionedCache
from src.common.best_effort import best_effort
from src.config.database import async_session_manager
from src.invitations.dtos import (
    EventDef,
    GuestAlreadyInvitedError,
    GuestNotFoundError,
    InvitationDTO,
    InvitationEventNotFoundError,
    InvitationNotFoundError,
    InvitationStatus,
)
from src.invitations.headcount import clamp_headcount, validate_headcount
from src.invitations.repository.queries import (
    apply_status,
    get_guest,
    get_invitation,
    get_invitation_events,
    get_invitation_for_guest,
    insert_invitation_events,
    require_events,
)
from src.invitations.repository.read_models import InvitationReadModel
from src.models.guest import Guest
from src.models.invitation import Invitation, InvitationEvent
from src.wedding_config.read_model import ConfigReadModel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InvitationEventChanges:
    """Admin edit of one invitation event. ``None`` leaves a field as it is."""

    status: InvitationStatus | None = None
    headcount: int | None = None
    dietary_restrictions: str | None = None
    dietary_information: str | None = None
    food_choice: str | None = None


class UpdateInvitationWriteModel(ABC):
    @abstractmethod
    async def update_invitation(
        self,
        wedding_id: UUID,
        invitation_id: UUID,
        guest_id: UUID | None = None,
        events: list[EventDef] | None = None,
        user_id: UUID | None = None,
    ) -> InvitationDTO:
        """Reassign the guest and/or replace the event set of an invitation.

        Replacing events deletes every existing row and inserts the new set
        with fresh event tokens.

        Raises:
            InvitationNotFoundError: if the invitation is not in the wedding
            GuestNotFoundError: if the new guest is not in the wedding
            GuestAlreadyInvitedError: if the new guest holds another invitation
            EventNotFoundError: if a new event is not in the wedding
        """
        raise NotImplementedError

    @abstractmethod
    async def update_invitation_event(
        self,
        wedding_id: UUID,
        invitation_event_id: UUID,
        changes: InvitationEventChanges,
        user_id: UUID | None = None,
    ) -> InvitationDTO:
        """Edit status, headcount or dietary details of a single invitation event.

        Raises:
            InvitationEventNotFoundError: if the row is not in the wedding
        """
        raise NotImplementedError


class SqlUpdateInvitationWriteModel(UpdateInvitationWriteModel):
    async_session_manager = staticmethod(partial(async_session_manager))

    def __init__(
        self,
        config_read_model: ConfigReadModel,
        read_model: InvitationReadModel,
        cache: VersionedCache,
        audit_writer: AuditWriter,
        session_overwrite: AsyncSession | None = None,
    ) -> None:
        self.config_read_model = config_read_model
        self.read_model = read_model
        self.cache = cache
        self.audit_writer = audit_writer
        self.session_overwrite = session_overwrite

    async def update_invitation(
        self,
        wedding_id: UUID,
        invitation_id: UUID,
        guest_id: UUID | None = None,
        events: list[EventDef] | None = None,
        user_id: UUID | None = None,
    ) -> InvitationDTO:
        config = await self.config_read_model.get_config(wedding_id)
        guest_changed = False

        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            invitation = await get_invitation(session, wedding_id, invitation_id)
            if invitation is None:
                raise InvitationNotFoundError(invitation_id)

            if guest_id is not None and guest_id != invitation.guest_id:
                guest = await get_guest(session, wedding_id, guest_id)
                if guest is None:
                    raise GuestNotFoundError(guest_id)
                if await get_invitation_for_guest(session, wedding_id, guest_id) is not None:
                    raise GuestAlreadyInvitedError(guest_id)
                invitation.guest_id = guest_id
                guest_changed = True
            else:
                guest = await get_guest(session, wedding_id, invitation.guest_id)

            guest_total = guest.total_guests if guest else None
            if events is not None:
                await require_events(session, wedding_id, [event.event_id for event in events])
                validated = validate_headcount(events, guest_total, config)
                await insert_invitation_events(session, wedding_id, invitation.uuid, validated)
            elif guest_changed:
                # stored headcounts were clamped against the previous guest
                for invitation_event in await get_invitation_events(session, wedding_id, invitation.uuid):
                    invitation_event.headcount = clamp_headcount(
                        invitation_event.headcount, config, guest_total
                    )
            await session.flush()

        await best_effort("cache bump", self.cache.bump_namespace_version())
        await self.audit_writer.log_action(
            AuditAction.INVITATION_UPDATE,
            {
                "invitation_id": invitation_id,
                "guest_changed": guest_changed,
                "events_replaced": events is not None,
                "event_count": len(events) if events is not None else None,
            },
            wedding_id=wedding_id,
            user_id=user_id,
        )
        logger.info(f"Updated invitation {invitation_id} in wedding {wedding_id}")
        return await self._reload(wedding_id, invitation_id)

    async def update_invitation_event(
        self,
        wedding_id: UUID,
        invitation_event_id: UUID,
        changes: InvitationEventChanges,
        user_id: UUID | None = None,
    ) -> InvitationDTO:
        config = await self.config_read_model.get_config(wedding_id)

        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            result = await session.execute(
                select(InvitationEvent, Guest.total_guests)
                .join(Invitation, Invitation.uuid == InvitationEvent.invitation_id)
                .join(Guest, Guest.uuid == Invitation.guest_id)
                .where(
                    InvitationEvent.uuid == invitation_event_id,
                    InvitationEvent.wedding_id == wedding_id,
                    Invitation.wedding_id == wedding_id,
                )
            )
            row = result.first()
            if row is None:
                raise InvitationEventNotFoundError(invitation_event_id)
            invitation_event, guest_total = row

            status = changes.status or InvitationStatus(invitation_event.status)
            if status == InvitationStatus.ACCEPTED:
                if changes.dietary_restrictions is not None:
                    invitation_event.dietary_restrictions = changes.dietary_restrictions
                if changes.dietary_information is not None:
                    invitation_event.dietary_information = changes.dietary_information
                if changes.food_choice is not None:
                    invitation_event.food_choice = changes.food_choice
            apply_status(invitation_event, status)
            # re-clamped even when only the status changes
            invitation_event.headcount = clamp_headcount(
                changes.headcount if changes.headcount is not None else invitation_event.headcount,
                config,
                guest_total,
            )
            invitation_id = invitation_event.invitation_id
            headcount = invitation_event.headcount
            await session.flush()

        await best_effort("cache bump", self.cache.bump_namespace_version())
        await self.audit_writer.log_action(
            AuditAction.INVITATION_EVENT_UPDATE,
            {
                "invitation_event_id": invitation_event_id,
                "status": status,
                "headcount": headcount,
            },
            wedding_id=wedding_id,
            user_id=user_id,
        )
        return await self._reload(wedding_id, invitation_id)

    async def _reload(self, wedding_id: UUID, invitation_id: UUID) -> InvitationDTO:
        invitation = await self.read_model.get_invitation(wedding_id, invitation_id)
        if invitation is None:
            raise InvitationNotFoundError(invitation_id)
        return invitation
