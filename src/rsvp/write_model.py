"""Persists a guest's RSVP across every event of their invitation."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import UTC, datetime
from functools import partial
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.cache.versioned import VersionedCache
from src.common.best_effort import best_effort
from src.config.database import async_session_manager
from src.invitations.dtos import InvitationNotFoundError, InvitationStatus, RsvpResponse
from src.invitations.headcount import clamp_headcount
from src.invitations.repository.queries import apply_status
from src.models.guest import Guest
from src.models.invitation import Invitation, InvitationEvent, RsvpRecord
from src.wedding_config.read_model import ConfigReadModel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RsvpChanges:
    response: RsvpResponse
    party_size: int | None = None
    goodwill_message: str | None = None
    dietary_restrictions: str | None = None
    dietary_information: str | None = None
    food_choice: str | None = None
    guest_details: list[dict] | None = None


@dataclass(frozen=True)
class RecordedRsvp:
    invitation_event_ids: list[UUID]
    headcount: int
    history_written: bool


class RsvpWriteModel(ABC):
    @abstractmethod
    async def record_response(
        self, wedding_id: UUID, invitation_id: UUID, changes: RsvpChanges
    ) -> RecordedRsvp:
        raise NotImplementedError


class SqlRsvpWriteModel(RsvpWriteModel):
    async_session_manager = staticmethod(partial(async_session_manager))

    def __init__(
        self,
        config_read_model: ConfigReadModel,
        cache: VersionedCache,
        session_overwrite: AsyncSession | None = None,
    ) -> None:
        self.config_read_model = config_read_model
        self.cache = cache
        self.session_overwrite = session_overwrite

    async def record_response(
        self, wedding_id: UUID, invitation_id: UUID, changes: RsvpChanges
    ) -> RecordedRsvp:
        """
        Apply one response to all of the invitation's events.

        Headcount is re-clamped against the live config and the guest's
        total. The history rows are written in a savepoint; losing them
        does not undo the status change.
        """
        config = await self.config_read_model.get_config(wedding_id)
        accepted = changes.response == RsvpResponse.ACCEPTED
        now = datetime.now(UTC)

        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            result = await session.execute(
                select(InvitationEvent, Guest.total_guests)
                .join(Invitation, Invitation.uuid == InvitationEvent.invitation_id)
                .join(Guest, Guest.uuid == Invitation.guest_id)
                .where(
                    Invitation.uuid == invitation_id,
                    Invitation.wedding_id == wedding_id,
                    InvitationEvent.wedding_id == wedding_id,
                )
            )
            rows = result.all()
            if not rows:
                raise InvitationNotFoundError(invitation_id)

            headcount = 1
            for invitation_event, total_guests in rows:
                requested = changes.party_size or invitation_event.headcount
                headcount = clamp_headcount(requested, config, total_guests)
                apply_status(invitation_event, InvitationStatus(changes.response.value))
                invitation_event.headcount = headcount
                invitation_event.responded_at = now
                invitation_event.goodwill_message = changes.goodwill_message
                if accepted:
                    invitation_event.dietary_restrictions = changes.dietary_restrictions
                    invitation_event.dietary_information = changes.dietary_information
                    invitation_event.food_choice = changes.food_choice
                    invitation_event.guest_details = changes.guest_details
            await session.flush()

            history = await best_effort(
                "rsvp history",
                self._append_history(session, wedding_id, [row[0] for row in rows], changes),
            )

        await best_effort("cache bump", self.cache.bump_namespace_version())
        return RecordedRsvp(
            invitation_event_ids=[invitation_event.uuid for invitation_event, _ in rows],
            headcount=headcount,
            history_written=history.ok,
        )

    @staticmethod
    async def _append_history(
        session: AsyncSession,
        wedding_id: UUID,
        invitation_events: list[InvitationEvent],
        changes: RsvpChanges,
    ) -> None:
        async with session.begin_nested():
            session.add_all(
                [
                    RsvpRecord(
                        wedding_id=wedding_id,
                        invitation_event_id=invitation_event.uuid,
                        response=changes.response,
                        party_size=invitation_event.headcount,
                        message=changes.goodwill_message,
                    )
                    for invitation_event in invitation_events
                ]
            )
