"""Per-invitation daily send limit.

The window is the current UTC calendar day; every logged attempt counts,
whether or not the provider accepted it.
"""

from collections.abc import Callable, Iterable
from datetime import UTC, datetime, timedelta
from uuid import UUID

from src.config.settings import settings
from src.notifications.dtos import Channel, RateLimitExceededError, RateLimitStatus
from src.notifications.mail_log import MailLogStore, get_mail_log_store


def utc_now() -> datetime:
    return datetime.now(UTC)


def start_of_day(moment: datetime) -> datetime:
    return moment.astimezone(UTC).replace(hour=0, minute=0, second=0, microsecond=0)


class RateGate:
    def __init__(
        self,
        store: MailLogStore,
        max_per_day: int = 3,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.max_per_day = max_per_day
        self._clock = clock

    async def status(self, wedding_id: UUID, token: str, channel: Channel | None = None) -> RateLimitStatus:
        window_start = start_of_day(self._clock())
        sent_today = await self.store.count_since(wedding_id, token, window_start, channel=channel)
        return RateLimitStatus(
            token=token,
            sent_today=sent_today,
            max_per_day=self.max_per_day,
            window_ends_at=window_start + timedelta(days=1),
        )

    async def busiest_status(self, wedding_id: UUID, token: str, channels: Iterable[Channel]) -> RateLimitStatus:
        """Status of the channel closest to the limit.

        Sends are gated per channel, so a count across channels overstates
        usage. Without channels every row counts together.
        """
        statuses = [await self.status(wedding_id, token, channel) for channel in channels]
        if not statuses:
            return await self.status(wedding_id, token)
        return max(statuses, key=lambda status: status.sent_today)

    async def can_send(self, wedding_id: UUID, token: str, channel: Channel | None = None) -> bool:
        return (await self.status(wedding_id, token, channel)).can_send

    async def ensure_can_send(self, wedding_id: UUID, token: str, channel: Channel | None = None) -> None:
        if not await self.can_send(wedding_id, token, channel):
            raise RateLimitExceededError(token, self.max_per_day)


def get_rate_gate() -> RateGate:
    return RateGate(store=get_mail_log_store(), max_per_day=settings.RSVP_DAILY_SEND_LIMIT)
