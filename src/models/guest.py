from uuid import UUID

from sqlalchemy import Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.config.table_names import TableNames
from src.models.base import Base, TenantScoped, TimeStamp


class Guest(Base, TenantScoped, TimeStamp):
    __tablename__ = TableNames.GUESTS.value

    first_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    last_name: Mapped[str] = mapped_column(String(255), nullable=False, default="", index=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    is_vip: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Household cap, the guest included
    total_guests: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    # Human-readable RSVP code, generated lazily
    invite_code: Mapped[str | None] = mapped_column(
        String(20), nullable=True, unique=True, index=True
    )

    household_id: Mapped[UUID | None] = mapped_column(nullable=True, index=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self) -> str:
        return f"<Guest {self.full_name} ({self.invite_code or 'no code'})>"
