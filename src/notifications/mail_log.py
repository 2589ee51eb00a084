from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from functools import partial
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.database import async_session_manager
from src.models.logs import MailLog
from src.notifications.dtos import Channel


@dataclass(frozen=True)
class MailLogEntry:
    wedding_id: UUID
    token: str
    channel: Channel
    recipient: str | None
    success: bool
    message_id: str | None = None
    error: str | None = None


class MailLogStore(ABC):
    """Delivery attempts, one per dispatched channel call. Also the rate gate's source."""

    @abstractmethod
    async def record(self, entry: MailLogEntry) -> None:
        raise NotImplementedError

    @abstractmethod
    async def count_since(
        self, wedding_id: UUID, token: str, since: datetime, channel: Channel | None = None
    ) -> int:
        """Attempts for ``token`` with ``sent_at >= since``, successful or not."""
        raise NotImplementedError


class SqlMailLogStore(MailLogStore):
    async_session_manager = staticmethod(partial(async_session_manager))

    def __init__(self, session_overwrite: AsyncSession | None = None) -> None:
        self.session_overwrite = session_overwrite

    async def record(self, entry: MailLogEntry) -> None:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            session.add(
                MailLog(
                    wedding_id=entry.wedding_id,
                    token=entry.token,
                    channel=entry.channel,
                    recipient=entry.recipient,
                    success=entry.success,
                    message_id=entry.message_id,
                    error_message=entry.error,
                )
            )
            await session.flush()

    async def count_since(
        self, wedding_id: UUID, token: str, since: datetime, channel: Channel | None = None
    ) -> int:
        query = select(func.count(MailLog.uuid)).where(
            MailLog.wedding_id == wedding_id,
            MailLog.token == token,
            MailLog.sent_at >= since,
        )
        if channel is not None:
            query = query.where(MailLog.channel == channel)
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            return await session.scalar(query) or 0


def get_mail_log_store() -> MailLogStore:
    return SqlMailLogStore()
