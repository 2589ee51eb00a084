"""Response models shared by the invitation admin endpoints."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from src.invitations.dtos import EventDef, InvitationDTO, InvitationEventDTO, InvitationStatus


class EventDefRequest(BaseModel):
    event_id: UUID
    headcount: int = 1
    status: InvitationStatus = InvitationStatus.PENDING

    def to_dto(self) -> EventDef:
        return EventDef(event_id=self.event_id, headcount=self.headcount, status=self.status)


class LatestRsvpResponse(BaseModel):
    response: str
    party_size: int
    message: str | None = None
    submitted_at: datetime


class InvitationEventResponse(BaseModel):
    uuid: UUID
    event_id: UUID
    event_name: str | None = None
    starts_at: datetime | None = None
    status: InvitationStatus
    headcount: int
    event_token: str
    dietary_restrictions: str | None = None
    dietary_information: str | None = None
    food_choice: str | None = None
    latest_rsvp: LatestRsvpResponse | None = None

    @classmethod
    def from_dto(cls, dto: InvitationEventDTO) -> "InvitationEventResponse":
        latest = dto.latest_rsvp
        return cls(
            uuid=dto.uuid,
            event_id=dto.event_id,
            event_name=dto.event.name if dto.event else None,
            starts_at=dto.event.starts_at if dto.event else None,
            status=dto.status,
            headcount=dto.headcount,
            event_token=dto.event_token,
            dietary_restrictions=dto.dietary_restrictions,
            dietary_information=dto.dietary_information,
            food_choice=dto.food_choice,
            latest_rsvp=LatestRsvpResponse(
                response=latest.response.value,
                party_size=latest.party_size,
                message=latest.message,
                submitted_at=latest.submitted_at,
            )
            if latest
            else None,
        )


class InvitationResponse(BaseModel):
    uuid: UUID
    token: str
    guest_id: UUID
    guest_name: str
    guest_email: str | None = None
    guest_phone: str | None = None
    invite_code: str | None = None
    events: list[InvitationEventResponse] = Field(default_factory=list)
    created_at: datetime | None = None

    @classmethod
    def from_dto(cls, dto: InvitationDTO) -> "InvitationResponse":
        return cls(
            uuid=dto.uuid,
            token=dto.token,
            guest_id=dto.guest.uuid,
            guest_name=dto.guest.full_name,
            guest_email=dto.guest.email,
            guest_phone=dto.guest.phone,
            invite_code=dto.guest.invite_code,
            events=[InvitationEventResponse.from_dto(event) for event in dto.events],
            created_at=dto.created_at,
        )
