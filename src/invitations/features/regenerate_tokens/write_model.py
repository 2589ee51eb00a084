import logging
from abc import ABC, abstractmethod
from functools import partial
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from src.audit.writer import AuditAction, AuditWriter
from src.cache.versioned import VersionedCache
from src.common.best_effort import best_effort
from src.config.database import async_session_manager
from src.invitations.dtos import InvitationEventNotFoundError, InvitationNotFoundError
from src.invitations.repository.queries import new_token
from src.models.invitation import Invitation, InvitationEvent

logger = logging.getLogger(__name__)


class RegenerateTokensWriteModel(ABC):
    """Rotates bearer tokens. Old links stop working immediately."""

    @abstractmethod
    async def regenerate_invite_token(
        self, wedding_id: UUID, invitation_id: UUID, user_id: UUID | None = None
    ) -> str:
        raise NotImplementedError

    @abstractmethod
    async def regenerate_event_token(
        self, wedding_id: UUID, invitation_event_id: UUID, user_id: UUID | None = None
    ) -> str:
        raise NotImplementedError


class SqlRegenerateTokensWriteModel(RegenerateTokensWriteModel):
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

    async def regenerate_invite_token(
        self, wedding_id: UUID, invitation_id: UUID, user_id: UUID | None = None
    ) -> str:
        token = new_token()
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            result = await session.execute(
                update(Invitation)
                .where(Invitation.uuid == invitation_id, Invitation.wedding_id == wedding_id)
                .values(token=token)
                .execution_options(synchronize_session="evaluate")
            )
            if result.rowcount == 0:
                raise InvitationNotFoundError(invitation_id)

        await self._after_rotation(
            AuditAction.INVITE_TOKEN_REGEN,
            {"invitation_id": invitation_id, "new_token": token},
            wedding_id,
            user_id,
        )
        return token

    async def regenerate_event_token(
        self, wedding_id: UUID, invitation_event_id: UUID, user_id: UUID | None = None
    ) -> str:
        token = new_token()
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            result = await session.execute(
                update(InvitationEvent)
                .where(
                    InvitationEvent.uuid == invitation_event_id,
                    InvitationEvent.wedding_id == wedding_id,
                )
                .values(event_token=token)
                .execution_options(synchronize_session="evaluate")
            )
            if result.rowcount == 0:
                raise InvitationEventNotFoundError(invitation_event_id)

        await self._after_rotation(
            AuditAction.EVENT_TOKEN_REGEN,
            {"invitation_event_id": invitation_event_id, "new_token": token},
            wedding_id,
            user_id,
        )
        return token

    async def _after_rotation(self, action, details, wedding_id, user_id) -> None:
        # only the new token is logged, never the old one
        await best_effort("cache bump", self.cache.bump_namespace_version())
        await self.audit_writer.log_action(action, details, wedding_id=wedding_id, user_id=user_id)
        logger.info(f"{action.value} in wedding {wedding_id}")
