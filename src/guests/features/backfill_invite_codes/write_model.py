import logging
from abc import ABC, abstractmethod
from functools import partial
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.audit.writer import AuditAction, AuditWriter
from src.cache.locks import DEFAULT_LOCK_TTL_SECONDS, LockManager
from src.cache.versioned import VersionedCache
from src.common.best_effort import best_effort
from src.config.database import async_session_manager
from src.guests.dtos import (
    BackfillAlreadyRunningError,
    BackfillOptions,
    BackfillResult,
    BackfillRow,
    BackfillRowStatus,
    backfill_lock_name,
)
from src.invitations.invite_codes import (
    InviteCodeExhaustedError,
    InviteCodeGenerator,
    assign_invite_code,
    generate_invite_code,
    generate_unique_invite_code,
)
from src.models.guest import Guest

logger = logging.getLogger(__name__)


class BackfillInviteCodesWriteModel(ABC):
    @abstractmethod
    async def backfill(
        self,
        wedding_id: UUID,
        options: BackfillOptions,
        user_id: UUID | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> BackfillResult:
        raise NotImplementedError

    @abstractmethod
    async def is_running(self, wedding_id: UUID) -> bool:
        raise NotImplementedError


class SqlBackfillInviteCodesWriteModel(BackfillInviteCodesWriteModel):
    async_session_manager = staticmethod(partial(async_session_manager))

    def __init__(
        self,
        lock_manager: LockManager,
        cache: VersionedCache,
        audit_writer: AuditWriter,
        lock_ttl_seconds: int = DEFAULT_LOCK_TTL_SECONDS,
        invite_code_generator: InviteCodeGenerator = generate_invite_code,
        session_overwrite: AsyncSession | None = None,
    ) -> None:
        self.lock_manager = lock_manager
        self.cache = cache
        self.audit_writer = audit_writer
        self.lock_ttl_seconds = lock_ttl_seconds
        self.invite_code_generator = invite_code_generator
        self.session_overwrite = session_overwrite

    async def is_running(self, wedding_id: UUID) -> bool:
        return await self.lock_manager.is_held(backfill_lock_name(wedding_id))

    async def backfill(
        self,
        wedding_id: UUID,
        options: BackfillOptions,
        user_id: UUID | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> BackfillResult:
        """
        Give up to ``batch_size`` code-less guests an invite code, oldest first.

        Only one run per wedding at a time. A dry run draws codes the same
        way but writes nothing and leaves the cache alone.
        """
        lock_name = backfill_lock_name(wedding_id)
        if not await self.lock_manager.acquire(lock_name, self.lock_ttl_seconds):
            raise BackfillAlreadyRunningError()

        try:
            result = BackfillResult(dry_run=options.dry_run)
            async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
                guests = await self._scan_missing_codes(session, wedding_id, options.batch_size)
                for guest_id, email in guests:
                    row = await self._backfill_guest(session, wedding_id, guest_id, email, options)
                    result.rows.append(row)
                    if row.status == BackfillRowStatus.SUCCESS:
                        result.updated += 1
                        if row.retries > 0:
                            result.conflicts_resolved += 1
                    else:
                        result.skipped += 1

            if not options.dry_run and result.updated > 0:
                await best_effort("cache bump", self.cache.bump_namespace_version())

            await self.audit_writer.log_action(
                AuditAction.INVITE_CODE_BACKFILL,
                {
                    "batch_size": options.batch_size,
                    "dry_run": options.dry_run,
                    "updated": result.updated,
                    "skipped": result.skipped,
                    "conflicts_resolved": result.conflicts_resolved,
                },
                wedding_id=wedding_id,
                user_id=user_id,
                ip_address=ip_address,
                user_agent=user_agent,
            )
            logger.info(f"{result.summary} (wedding {wedding_id}, dry_run={options.dry_run})")
            return result
        finally:
            await self.lock_manager.release(lock_name)

    @staticmethod
    async def _scan_missing_codes(
        session: AsyncSession, wedding_id: UUID, limit: int
    ) -> list[tuple[UUID, str | None]]:
        result = await session.execute(
            select(Guest.uuid, Guest.email)
            .where(Guest.wedding_id == wedding_id, Guest.invite_code.is_(None))
            .order_by(Guest.created_at, Guest.uuid)
            .limit(limit)
        )
        return [(guest_id, email) for guest_id, email in result.all()]

    async def _backfill_guest(
        self,
        session: AsyncSession,
        wedding_id: UUID,
        guest_id: UUID,
        email: str | None,
        options: BackfillOptions,
    ) -> BackfillRow:
        try:
            if options.dry_run:
                code, retries = await generate_unique_invite_code(
                    session, max_attempts=options.max_retries, generator=self.invite_code_generator
                )
            else:
                code, retries = await assign_invite_code(
                    session,
                    wedding_id,
                    guest_id,
                    max_attempts=options.max_retries,
                    generator=self.invite_code_generator,
                )
        except InviteCodeExhaustedError as e:
            logger.warning(f"Backfill gave up on guest {guest_id}: {e}")
            return BackfillRow(
                guest_id=guest_id,
                email=email,
                invite_code=None,
                retries=e.attempts,
                status=BackfillRowStatus.ERROR,
                error=str(e),
            )

        if code is None:
            return BackfillRow(
                guest_id=guest_id,
                email=email,
                invite_code=None,
                retries=retries,
                status=BackfillRowStatus.SKIPPED,
                error="Guest already has an invite code",
            )
        return BackfillRow(
            guest_id=guest_id,
            email=email,
            invite_code=code,
            retries=retries,
            status=BackfillRowStatus.SUCCESS,
        )
