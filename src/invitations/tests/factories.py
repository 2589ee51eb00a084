"""Row builders for tests that run against the database."""

from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from src.models import Event, Guest, Wedding, WeddingConfigEntry


async def make_guest(
    session: AsyncSession,
    wedding: Wedding,
    first_name: str = "Carla",
    last_name: str = "Diaz",
    email: str | None = "carla@example.com",
    phone: str | None = None,
    total_guests: int = 1,
    invite_code: str | None = None,
) -> Guest:
    guest = Guest(
        wedding_id=wedding.uuid,
        first_name=first_name,
        last_name=last_name,
        email=email,
        phone=phone,
        total_guests=total_guests,
        invite_code=invite_code,
    )
    session.add(guest)
    await session.flush()
    return guest


async def make_event(
    session: AsyncSession,
    wedding: Wedding,
    name: str = "Ceremony",
    starts_at: datetime | None = None,
) -> Event:
    event = Event(
        wedding_id=wedding.uuid,
        name=name,
        starts_at=starts_at or datetime(2026, 6, 20, 16, 0, tzinfo=UTC),
        venue="Old Mill",
        address="1 River Road",
    )
    session.add(event)
    await session.flush()
    return event


async def set_config(session: AsyncSession, wedding: Wedding, **values: str) -> None:
    for key, value in values.items():
        session.add(WeddingConfigEntry(wedding_id=wedding.uuid, key=key, value=value))
    await session.flush()
