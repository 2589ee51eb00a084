"""Write model for creating invitations for a batch of guests."""

import logging
from abc import ABC, abstractmethod
from functools import partial
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.audit.writer import AuditAction, AuditWriter
from src.cache.versioned import VersionedCache
from src.common.best_effort import best_effort
from src.config.database import async_session_manager
from src.invitations.dtos import CreatedInvitationDTO, CreateInvitationsResult, EventDef
from src.invitations.headcount import validate_headcount
from src.invitations.invite_codes import (
    MAX_INVITE_CODE_ATTEMPTS,
    InviteCodeGenerator,
    ensure_invite_code,
    generate_invite_code,
)
from src.invitations.repository.queries import (
    get_guest,
    get_or_create_invitation,
    insert_invitation_events,
    require_events,
)
from src.wedding_config.read_model import ConfigReadModel

logger = logging.getLogger(__name__)


class CreateInvitationsWriteModel(ABC):
    @abstractmethod
    async def create_invitations(
        self,
        wedding_id: UUID,
        guest_ids: list[UUID],
        events: list[EventDef],
        user_id: UUID | None = None,
    ) -> CreateInvitationsResult:
        """Invite each guest to the given events.

        Guests that do not belong to the wedding are skipped and reported.
        Existing invitations are reused; their rows for the requested
        events are replaced.

        Raises:
            EventNotFoundError: if any event is missing from the wedding
        """
        raise NotImplementedError


class SqlCreateInvitationsWriteModel(CreateInvitationsWriteModel):
    async_session_manager = staticmethod(partial(async_session_manager))

    def __init__(
        self,
        config_read_model: ConfigReadModel,
        cache: VersionedCache,
        audit_writer: AuditWriter,
        session_overwrite: AsyncSession | None = None,
        invite_code_generator: InviteCodeGenerator = generate_invite_code,
        max_invite_code_attempts: int = MAX_INVITE_CODE_ATTEMPTS,
    ) -> None:
        self.config_read_model = config_read_model
        self.cache = cache
        self.audit_writer = audit_writer
        self.session_overwrite = session_overwrite
        self.invite_code_generator = invite_code_generator
        self.max_invite_code_attempts = max_invite_code_attempts

    async def create_invitations(
        self,
        wedding_id: UUID,
        guest_ids: list[UUID],
        events: list[EventDef],
        user_id: UUID | None = None,
    ) -> CreateInvitationsResult:
        config = await self.config_read_model.get_config(wedding_id)
        event_ids = [event.event_id for event in events]
        created: list[CreatedInvitationDTO] = []
        skipped_guest_ids: list[UUID] = []

        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            await require_events(session, wedding_id, event_ids)

            for guest_id in guest_ids:
                guest = await get_guest(session, wedding_id, guest_id)
                if guest is None:
                    logger.warning(f"Skipping guest {guest_id}: not found in wedding {wedding_id}")
                    skipped_guest_ids.append(guest_id)
                    continue

                validated = validate_headcount(events, guest.total_guests, config)
                invite_code = await ensure_invite_code(
                    session,
                    guest,
                    max_attempts=self.max_invite_code_attempts,
                    generator=self.invite_code_generator,
                )
                invitation, _ = await get_or_create_invitation(session, wedding_id, guest.uuid)
                await insert_invitation_events(
                    session, wedding_id, invitation.uuid, validated, replace_event_ids=event_ids
                )
                created.append(
                    CreatedInvitationDTO(
                        invitation_id=invitation.uuid,
                        guest_id=guest.uuid,
                        token=invitation.token,
                        invite_code=invite_code,
                        events=validated,
                    )
                )

        result = CreateInvitationsResult(
            invitations=created,
            created=len(created),
            skipped=len(skipped_guest_ids),
            skipped_guest_ids=skipped_guest_ids,
        )
        await best_effort("cache bump", self.cache.bump_namespace_version())
        await self.audit_writer.log_action(
            AuditAction.INVITATION_CREATE,
            {
                "guest_count": len(guest_ids),
                "event_count": len(events),
                "guest_ids": guest_ids,
                "created_count": result.created,
                "skipped_count": result.skipped,
            },
            wedding_id=wedding_id,
            user_id=user_id,
        )
        logger.info(
            f"Created {result.created} invitations for wedding {wedding_id} "
            f"({result.skipped} guests skipped)"
        )
        return result
