import logging
from abc import ABC, abstractmethod
from functools import partial
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.audit.writer import AuditAction, AuditWriter
from src.cache.versioned import VersionedCache
from src.common.best_effort import best_effort
from src.config.database import async_session_manager
from src.invitations.dtos import CsvImportResult, CsvInvitationRow, CsvRowError, EventDef
from src.invitations.headcount import clamp_headcount
from src.invitations.invite_codes import (
    MAX_INVITE_CODE_ATTEMPTS,
    InviteCodeGenerator,
    ensure_invite_code,
    generate_invite_code,
)
from src.invitations.repository.queries import (
    apply_status,
    get_guest_by_email,
    get_or_create_invitation,
    insert_invitation_events,
    new_token,
    require_events,
)
from src.models.guest import Guest
from src.models.invitation import InvitationEvent
from src.wedding_config.dtos import ConfigValue
from src.wedding_config.read_model import ConfigReadModel

logger = logging.getLogger(__name__)


class ImportInvitationsWriteModel(ABC):
    @abstractmethod
    async def import_invitations(
        self, wedding_id: UUID, rows: list[CsvInvitationRow | CsvRowError], user_id: UUID | None = None
    ) -> CsvImportResult:
        """Import one invitation event per row.

        Rows that already failed parsing are passed as ``CsvRowError`` and
        reported as is. A failing row never aborts the import.
        """
        raise NotImplementedError


class SqlImportInvitationsWriteModel(ImportInvitationsWriteModel):
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

    async def import_invitations(
        self, wedding_id: UUID, rows: list[CsvInvitationRow | CsvRowError], user_id: UUID | None = None
    ) -> CsvImportResult:
        config = await self.config_read_model.get_config(wedding_id)
        success = 0
        errors: list[CsvRowError] = []

        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            for number, row in enumerate(rows, start=1):
                if isinstance(row, CsvRowError):
                    errors.append(row)
                    continue
                try:
                    async with session.begin_nested():
                        await self._import_row(session, wedding_id, row, config)
                except Exception as e:
                    logger.warning(f"Invitation import row {number} failed: {e}")
                    errors.append(CsvRowError(row=number, error=str(e)))
                else:
                    success += 1

        await best_effort("cache bump", self.cache.bump_namespace_version())
        await self.audit_writer.log_action(
            AuditAction.INVITATION_CSV_IMPORT,
            {"total_rows": len(rows), "success_count": success, "error_count": len(errors)},
            wedding_id=wedding_id,
            user_id=user_id,
        )
        logger.info(f"Imported {success}/{len(rows)} invitation rows into wedding {wedding_id}")
        return CsvImportResult(success=success, errors=errors)

    async def _import_row(
        self, session: AsyncSession, wedding_id: UUID, row: CsvInvitationRow, config: ConfigValue
    ) -> None:
        await require_events(session, wedding_id, [row.event_id])

        guest = await get_guest_by_email(session, wedding_id, row.guest_email)
        if guest is None:
            guest = Guest(
                wedding_id=wedding_id,
                email=row.guest_email.strip().lower(),
                first_name=row.guest_first_name or "",
                last_name=row.guest_last_name or "",
            )
            session.add(guest)
            await session.flush()
        await ensure_invite_code(
            session,
            guest,
            max_attempts=self.max_invite_code_attempts,
            generator=self.invite_code_generator,
        )
        invitation, _ = await get_or_create_invitation(session, wedding_id, guest.uuid)
        headcount = clamp_headcount(row.headcount, config, guest.total_guests)

        result = await session.execute(
            select(InvitationEvent).where(
                InvitationEvent.invitation_id == invitation.uuid,
                InvitationEvent.event_id == row.event_id,
                InvitationEvent.wedding_id == wedding_id,
            )
        )
        existing = result.scalar_one_or_none()
        if existing is None:
            await insert_invitation_events(
                session,
                wedding_id,
                invitation.uuid,
                [EventDef(event_id=row.event_id, headcount=headcount, status=row.status)],
                replace_event_ids=[row.event_id],
            )
            return
        apply_status(existing, row.status)
        existing.headcount = headcount
        existing.event_token = new_token()
        await session.flush()
