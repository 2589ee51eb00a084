from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from src.config.table_names import TableNames
from src.models.base import Base, TimeStamp


class Wedding(Base, TimeStamp):
    """A tenant. Every other table is scoped to one of these."""

    __tablename__ = TableNames.WEDDINGS.value

    couple_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    website_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    def __repr__(self) -> str:
        return f"<Wedding {self.couple_name or self.uuid}>"
