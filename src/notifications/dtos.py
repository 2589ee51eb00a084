from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from uuid import UUID


class Channel(str, Enum):
    EMAIL = "email"
    SMS = "sms"
    WHATSAPP = "whatsapp"


PHONE_CHANNELS = (Channel.WHATSAPP, Channel.SMS)


class RateLimitExceededError(Exception):
    """Raised when an invitation already used up today's sends."""

    def __init__(self, token: str, max_per_day: int) -> None:
        self.token = token
        self.max_per_day = max_per_day
        super().__init__(
            f"This invitation has already been sent {max_per_day} times today. "
            "Please try again tomorrow."
        )


@dataclass(frozen=True)
class ChannelResult:
    channel: Channel
    success: bool
    message_id: str | None = None
    error: str | None = None
    skipped: bool = False
    skip_reason: str | None = None
    rate_limited: bool = False

    @classmethod
    def skip(cls, channel: Channel, reason: str) -> "ChannelResult":
        return cls(channel=channel, success=False, skipped=True, skip_reason=reason)

    @classmethod
    def failure(cls, channel: Channel, error: str) -> "ChannelResult":
        return cls(channel=channel, success=False, error=error)


@dataclass(frozen=True)
class OrchestrationResult:
    invitation_id: UUID
    guest_id: UUID | None
    guest_name: str
    results: list[ChannelResult] = field(default_factory=list)
    # set when the invitation could not be sent at all
    error: str | None = None

    @property
    def all_successful(self) -> bool:
        # a skip is not an error
        return self.error is None and all(result.success or result.skipped for result in self.results)

    @property
    def any_successful(self) -> bool:
        return any(result.success for result in self.results)


@dataclass(frozen=True)
class BulkNotificationResult:
    results: list[OrchestrationResult]

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def successful(self) -> int:
        return sum(1 for result in self.results if result.any_successful)

    @property
    def failed(self) -> int:
        return self.total - self.successful


@dataclass(frozen=True)
class RateLimitStatus:
    token: str
    sent_today: int
    max_per_day: int
    window_ends_at: datetime

    @property
    def remaining(self) -> int:
        return max(self.max_per_day - self.sent_today, 0)

    @property
    def can_send(self) -> bool:
        return self.sent_today < self.max_per_day


@dataclass(frozen=True)
class NotificationParams:
    """Merge variables shared by every channel's invitation message."""

    guest_name: str
    guest_first_name: str
    couple_name: str
    event_name: str
    event_date: str
    event_time: str
    venue: str
    address: str
    rsvp_url: str
    invite_code: str | None = None
    website_url: str | None = None
