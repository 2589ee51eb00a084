from pydantic import BaseModel, EmailStr, Field, field_validator

from src.invitations.dtos import RsvpResponse
from src.notifications.dtos import Channel


class AdditionalGuest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    dietary_restrictions: str | None = Field(default=None, max_length=500)


class RsvpSubmission(BaseModel):
    """What the public RSVP form posts."""

    invite_code: str = Field(min_length=1, max_length=20)
    response: RsvpResponse
    party_size: int | None = Field(default=None, ge=1, le=20)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=20)
    preferred_channel: Channel | None = None
    goodwill_message: str | None = Field(default=None, max_length=500)
    dietary_restrictions: str | None = Field(default=None, max_length=500)
    dietary_information: str | None = Field(default=None, max_length=500)
    food_choice: str | None = Field(default=None, max_length=100)
    guests: list[AdditionalGuest] | None = Field(default=None, max_length=19)

    @field_validator("invite_code")
    @classmethod
    def normalise_invite_code(cls, value: str) -> str:
        return value.strip().upper()

    @field_validator("email", mode="before")
    @classmethod
    def email_length(cls, value):
        if isinstance(value, str) and len(value) > 100:
            raise ValueError("email must be at most 100 characters")
        return value

    @field_validator(
        "email",
        "phone",
        "goodwill_message",
        "dietary_restrictions",
        "dietary_information",
        "food_choice",
        mode="before",
    )
    @classmethod
    def blank_is_none(cls, value):
        # form fields arrive as "" when left empty
        if isinstance(value, str) and not value.strip():
            return None
        return value.strip() if isinstance(value, str) else value


class RsvpEventResponse(BaseModel):
    name: str
    starts_at: str | None = None
    venue: str | None = None
    address: str | None = None
    status: str | None = None


class RsvpResultResponse(BaseModel):
    status: RsvpResponse
    guest_name: str
    events: list[RsvpEventResponse]
    rsvp_url: str
    qr_image_url: str | None = None


class RsvpSubmitResponse(BaseModel):
    success: bool
    message: str
    result: RsvpResultResponse | None = None


class RsvpStatusResponse(BaseModel):
    status: str
    guest_name: str
    events: list[RsvpEventResponse]
    qr_image_url: str | None = None
