from dataclasses import dataclass, field
from enum import Enum

from src.invitations.dtos import EventSummaryDTO, InvitationStatus, RsvpResponse

INVALID_INPUT_MESSAGE = "Please check your input and try again."
INVALID_CODE_MESSAGE = "Invalid invite code. Please check your invitation and try again."
SAVE_FAILED_MESSAGE = "Failed to save RSVP. Please try again."
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred. Please try again."
RSVP_DISABLED_MESSAGE = "RSVP is currently disabled by the administrators."

ACCEPTED_EMAIL_MESSAGE = "RSVP confirmed! Check your email for details and your digital pass."
ACCEPTED_PHONE_MESSAGE = "RSVP confirmed! We'll send your confirmation to your phone."
ACCEPTED_NO_CONTACT_MESSAGE = "RSVP confirmed! Keep this page; your digital pass is below."
DECLINED_MESSAGE = "Thank you for letting us know. We'll miss you!"


class RsvpFailure(str, Enum):
    INVALID_INPUT = "invalid_input"
    NOT_FOUND = "not_found"
    CLOSED = "closed"
    SAVE_FAILED = "save_failed"
    UNEXPECTED = "unexpected"


@dataclass(frozen=True)
class RsvpEventStatus:
    event: EventSummaryDTO
    status: InvitationStatus


@dataclass(frozen=True)
class RsvpResultDTO:
    status: RsvpResponse
    guest_name: str
    events: list[EventSummaryDTO]
    rsvp_url: str
    qr_image_url: str | None = None


@dataclass(frozen=True)
class RsvpOutcome:
    success: bool
    message: str
    result: RsvpResultDTO | None = None
    failure: RsvpFailure | None = None


@dataclass(frozen=True)
class RsvpStatusDTO:
    status: str
    guest_name: str
    events: list[RsvpEventStatus] = field(default_factory=list)
    qr_image_url: str | None = None


def overall_status(statuses: list[InvitationStatus]) -> str:
    """accepted if any event is; declined once nothing is pending; pending otherwise."""
    if InvitationStatus.ACCEPTED in statuses:
        return InvitationStatus.ACCEPTED.value
    if InvitationStatus.DECLINED in statuses and InvitationStatus.PENDING not in statuses:
        return InvitationStatus.DECLINED.value
    return InvitationStatus.PENDING.value
