from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import JSON, DateTime, Enum, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from src.config.table_names import TableNames
from src.invitations.dtos import InvitationStatus, RsvpResponse
from src.models.base import Base, TenantScoped, TimeStamp


class Invitation(Base, TenantScoped, TimeStamp):
    __tablename__ = TableNames.INVITATIONS.value

    # unique: one invitation per guest
    guest_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{TableNames.GUESTS.value}.uuid", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    # Bearer credential for the public RSVP page, rotated by admins
    token: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)

    def __repr__(self) -> str:
        return f"<Invitation {self.uuid} guest={self.guest_id}>"


class InvitationEvent(Base, TenantScoped, TimeStamp):
    __tablename__ = TableNames.INVITATION_EVENTS.value
    __table_args__ = (
        UniqueConstraint("invitation_id", "event_id", name="uq_invitation_events_invitation_event"),
    )

    invitation_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{TableNames.INVITATIONS.value}.uuid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    event_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{TableNames.EVENTS.value}.uuid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    status: Mapped[str] = mapped_column(
        Enum(
            InvitationStatus,
            name="invitation_status_enum",
            values_callable=lambda x: [e.value for e in x],
        ),
        default=InvitationStatus.PENDING,
        nullable=False,
    )
    headcount: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    event_token: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)

    # Only populated while status is accepted
    dietary_restrictions: Mapped[str | None] = mapped_column(Text, nullable=True)
    dietary_information: Mapped[str | None] = mapped_column(Text, nullable=True)
    food_choice: Mapped[str | None] = mapped_column(String(100), nullable=True)
    guest_details: Mapped[list | None] = mapped_column(JSON, nullable=True)

    goodwill_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    responded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    def clear_dietary(self) -> None:
        self.dietary_restrictions = None
        self.dietary_information = None
        self.food_choice = None
        self.guest_details = None

    def __repr__(self) -> str:
        return f"<InvitationEvent {self.uuid} {self.status} x{self.headcount}>"


class RsvpRecord(Base, TenantScoped):
    """Append-only history row, one per submitted response per invitation event."""

    __tablename__ = TableNames.RSVPS.value

    invitation_event_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{TableNames.INVITATION_EVENTS.value}.uuid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    response: Mapped[str] = mapped_column(
        Enum(
            RsvpResponse,
            name="rsvp_response_enum",
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
    )
    party_size: Mapped[int] = mapped_column(Integer, nullable=False)
    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<RsvpRecord {self.response} x{self.party_size} at {self.submitted_at}>"
