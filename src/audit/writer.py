import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from functools import partial
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.common.best_effort import BestEffortResult, best_effort
from src.config.database import async_session_manager

logger = logging.getLogger(__name__)


class AuditAction(str, Enum):
    CONFIG_UPDATE = "config_update"
    CONFIG_RESET = "config_reset"
    INVITATION_CREATE = "invitation_create"
    INVITATION_UPDATE = "invitation_update"
    INVITATION_EVENT_UPDATE = "invitation_event_update"
    INVITATION_DELETE = "invitation_delete"
    INVITATION_CSV_IMPORT = "invitation_csv_import"
    INVITE_TOKEN_REGEN = "invite_token_regen"
    EVENT_TOKEN_REGEN = "event_token_regen"
    NOTIFICATION_SEND = "notification_send"
    RSVP_SUBMIT = "rsvp_submit"
    RSVP_DECLINE_MESSAGE = "rsvp_decline_message"
    RSVP_CONFIRMATION_SEND = "rsvp_confirmation_send"
    INVITE_CODE_BACKFILL = "invite_code_backfill"


@dataclass(frozen=True)
class AuditEntry:
    action: AuditAction
    details: dict[str, Any] = field(default_factory=dict)
    wedding_id: UUID | None = None
    user_id: UUID | None = None
    ip_address: str | None = None
    user_agent: str | None = None


class AuditWriter(ABC):
    """Append-only audit sink.

    ``log_action`` is fire-and-forget from the caller's point of view: a
    failing insert is logged and reported in the returned result, never
    raised.
    """

    async def log_action(
        self,
        action: AuditAction,
        details: dict[str, Any] | None = None,
        wedding_id: UUID | None = None,
        user_id: UUID | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> BestEffortResult[None]:
        entry = AuditEntry(
            action=action,
            details=details or {},
            wedding_id=wedding_id,
            user_id=user_id,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        return await best_effort(f"audit:{action.value}", self.write(entry))

    @abstractmethod
    async def write(self, entry: AuditEntry) -> None:
        raise NotImplementedError


class SqlAuditWriter(AuditWriter):
    """Writes audit rows in their own transaction, separate from the caller's."""

    async_session_manager = staticmethod(partial(async_session_manager))

    def __init__(self, session_overwrite: AsyncSession | None = None) -> None:
        self.session_overwrite = session_overwrite

    async def write(self, entry: AuditEntry) -> None:
        from src.models.logs import AuditLog

        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            session.add(
                AuditLog(
                    wedding_id=entry.wedding_id,
                    action=entry.action.value,
                    details=_json_safe(entry.details),
                    user_id=entry.user_id,
                    ip_address=entry.ip_address,
                    user_agent=entry.user_agent,
                )
            )
            await session.flush()


class NoOpAuditWriter(AuditWriter):
    async def write(self, entry: AuditEntry) -> None:
        pass


def _json_safe(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(k): _json_safe(v) for k, v in value.items()}
    if isinstance(value, list | tuple | set):
        return [_json_safe(v) for v in value]
    if isinstance(value, Enum):
        return value.value
    if value is None or isinstance(value, bool | int | float | str):
        return value
    return str(value)


def get_audit_writer() -> AuditWriter:
    return SqlAuditWriter()
