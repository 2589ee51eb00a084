from datetime import datetime
from uuid import UUID, uuid4

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, declarative_base, declared_attr, mapped_column
from sqlalchemy_utils import UUIDType

BaseModel = declarative_base(type_annotation_map={UUID: UUIDType(binary=False)})


class Base(BaseModel):
    __abstract__ = True

    uuid: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)


class TimeStamp(BaseModel):
    __abstract__ = True
    __mapper_args__ = {"eager_defaults": True}

    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        server_default=sa.func.current_timestamp(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        server_default=sa.func.current_timestamp(),
        onupdate=sa.func.current_timestamp(),
        nullable=False,
    )


class TenantScoped(BaseModel):
    """Mixin for tables owned by a single wedding (tenant)."""

    __abstract__ = True

    @declared_attr
    def wedding_id(cls) -> Mapped[UUID]:
        return mapped_column(
            UUIDType(binary=False),
            sa.ForeignKey("weddings.uuid", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )
