import logging
from abc import ABC, abstractmethod
from functools import partial
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.audit.writer import AuditAction, AuditWriter
from src.cache.versioned import VersionedCache
from src.common.best_effort import best_effort
from src.config.database import async_session_manager
from src.models.invitation import Invitation, InvitationEvent, RsvpRecord

logger = logging.getLogger(__name__)


class DeleteInvitationsWriteModel(ABC):
    @abstractmethod
    async def delete_invitations(
        self, wedding_id: UUID, invitation_ids: list[UUID], user_id: UUID | None = None
    ) -> int:
        """Delete invitations with their events and RSVP history.

        Ids outside the wedding are ignored. Returns the number of
        invitations deleted.
        """
        raise NotImplementedError


class SqlDeleteInvitationsWriteModel(DeleteInvitationsWriteModel):
    async_session_manager = staticmethod(partial(async_session_manager))

    def __init__(
        self,
        cache: VersionedCache,
        audit_writer: AuditWriter,
        session_overwrite: AsyncSession | None = None,
    ) -> None:
        self.cache = cache
        self.audit_writer = audit_writer
        self.session_overwrite = session_overwrite

    async def delete_invitations(
        self, wedding_id: UUID, invitation_ids: list[UUID], user_id: UUID | None = None
    ) -> int:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            result = await session.execute(
                select(Invitation.uuid).where(
                    Invitation.wedding_id == wedding_id, Invitation.uuid.in_(invitation_ids)
                )
            )
            owned_ids = list(result.scalars())
            if not owned_ids:
                return 0

            event_ids = select(InvitationEvent.uuid).where(
                InvitationEvent.wedding_id == wedding_id,
                InvitationEvent.invitation_id.in_(owned_ids),
            )
            try:
                async with session.begin_nested():
                    await session.execute(
                        delete(RsvpRecord)
                        .where(
                            RsvpRecord.wedding_id == wedding_id,
                            RsvpRecord.invitation_event_id.in_(event_ids),
                        )
                        .execution_options(synchronize_session=False)
                    )
            except Exception as e:
                # the parent rows go next, so leftover history is tolerated
                logger.warning(f"Could not delete RSVP history for invitations {owned_ids}: {e}")

            await session.execute(
                delete(InvitationEvent)
                .where(
                    InvitationEvent.wedding_id == wedding_id,
                    InvitationEvent.invitation_id.in_(owned_ids),
                )
                .execution_options(synchronize_session="fetch")
            )
            await session.execute(
                delete(Invitation)
                .where(Invitation.wedding_id == wedding_id, Invitation.uuid.in_(owned_ids))
                .execution_options(synchronize_session="fetch")
            )

        await best_effort("cache bump", self.cache.bump_namespace_version())
        await self.audit_writer.log_action(
            AuditAction.INVITATION_DELETE,
            {"invitation_ids": owned_ids, "count": len(owned_ids)},
            wedding_id=wedding_id,
            user_id=user_id,
        )
        logger.info(f"Deleted {len(owned_ids)} invitations from wedding {wedding_id}")
        return len(owned_ids)
