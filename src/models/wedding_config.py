from sqlalchemy import String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from src.config.table_names import TableNames
from src.models.base import Base, TenantScoped, TimeStamp


class WeddingConfigEntry(Base, TenantScoped, TimeStamp):
    """One raw key/value row of a wedding's configuration."""

    __tablename__ = TableNames.WEDDING_CONFIG.value
    __table_args__ = (UniqueConstraint("wedding_id", "key", name="uq_wedding_config_key"),)

    key: Mapped[str] = mapped_column(String(100), nullable=False)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)

    def __repr__(self) -> str:
        return f"<WeddingConfigEntry {self.key}={self.value!r}>"
