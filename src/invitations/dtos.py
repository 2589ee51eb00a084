from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from uuid import UUID


class InvitationStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    WAITLIST = "waitlist"


class RsvpResponse(str, Enum):
    ACCEPTED = "accepted"
    DECLINED = "declined"


class InvitationNotFoundError(Exception):
    """Raised when an invitation does not exist within the wedding."""

    def __init__(self, invitation_id: UUID | str) -> None:
        self.invitation_id = invitation_id
        super().__init__(f"Invitation {invitation_id} not found")


class InvitationEventNotFoundError(Exception):
    def __init__(self, invitation_event_id: UUID) -> None:
        self.invitation_event_id = invitation_event_id
        super().__init__(f"Invitation event {invitation_event_id} not found")


class EventNotFoundError(Exception):
    """Raised when requested events are missing or belong to another wedding."""

    def __init__(self, event_ids: list[UUID]) -> None:
        self.event_ids = event_ids
        super().__init__("One or more events not found for this wedding")


class GuestNotFoundError(Exception):
    def __init__(self, guest_id: UUID) -> None:
        self.guest_id = guest_id
        super().__init__(f"Guest {guest_id} not found")


class GuestAlreadyInvitedError(Exception):
    """Raised when reassigning an invitation to a guest who already holds one."""

    def __init__(self, guest_id: UUID) -> None:
        self.guest_id = guest_id
        super().__init__(f"Guest {guest_id} already has an invitation")


class NoValidEventsError(Exception):
    def __init__(self, invitation_id: UUID) -> None:
        self.invitation_id = invitation_id
        super().__init__("No valid events found for invitation")


@dataclass(frozen=True)
class EventDef:
    """An event to attach to an invitation, as requested by an admin or import."""

    event_id: UUID
    headcount: int = 1
    status: InvitationStatus = InvitationStatus.PENDING


@dataclass(frozen=True)
class EventSummaryDTO:
    uuid: UUID
    name: str
    starts_at: datetime | None = None
    venue: str | None = None
    address: str | None = None


@dataclass(frozen=True)
class RsvpRecordDTO:
    uuid: UUID
    response: RsvpResponse
    party_size: int
    message: str | None
    submitted_at: datetime


@dataclass(frozen=True)
class InvitationEventDTO:
    uuid: UUID
    event_id: UUID
    status: InvitationStatus
    headcount: int
    event_token: str
    event: EventSummaryDTO | None = None
    dietary_restrictions: str | None = None
    dietary_information: str | None = None
    food_choice: str | None = None
    latest_rsvp: RsvpRecordDTO | None = None


@dataclass(frozen=True)
class GuestSummaryDTO:
    uuid: UUID
    first_name: str
    last_name: str
    email: str | None = None
    phone: str | None = None
    total_guests: int = 1
    invite_code: str | None = None
    is_vip: bool = False

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class InvitationDTO:
    uuid: UUID
    wedding_id: UUID
    token: str
    guest: GuestSummaryDTO
    events: list[InvitationEventDTO] = field(default_factory=list)
    created_at: datetime | None = None


@dataclass(frozen=True)
class WeddingProfileDTO:
    couple_name: str | None = None
    website_url: str | None = None


@dataclass(frozen=True)
class CreatedInvitationDTO:
    invitation_id: UUID
    guest_id: UUID
    token: str
    invite_code: str
    events: list[EventDef]


@dataclass(frozen=True)
class CreateInvitationsResult:
    invitations: list[CreatedInvitationDTO]
    created: int
    skipped: int
    skipped_guest_ids: list[UUID]


@dataclass(frozen=True)
class CsvInvitationRow:
    guest_email: str
    event_id: UUID
    headcount: int = 1
    status: InvitationStatus = InvitationStatus.PENDING
    guest_first_name: str | None = None
    guest_last_name: str | None = None


@dataclass(frozen=True)
class CsvRowError:
    row: int
    error: str


@dataclass(frozen=True)
class CsvImportResult:
    success: int
    errors: list[CsvRowError]


@dataclass(frozen=True)
class InvitationListFilters:
    q: str | None = None
    event_id: UUID | None = None
    status: InvitationStatus | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None
    sort: str = "created_at:desc"
    page: int = 1
    page_size: int = 10


@dataclass(frozen=True)
class InvitationPage:
    invitations: list[InvitationDTO]
    total_count: int
    page: int
    page_size: int
    total_pages: int
