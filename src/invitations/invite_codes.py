import logging
import secrets
import string
from collections.abc import Callable
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.guest import Guest

logger = logging.getLogger(__name__)

INVITE_CODE_ALPHABET = string.ascii_uppercase + string.digits
INVITE_CODE_LENGTH = 8
MAX_INVITE_CODE_ATTEMPTS = 20

InviteCodeGenerator = Callable[[], str]


class InviteCodeExhaustedError(Exception):
    """Raised when no unique invite code could be found within the attempt budget."""

    def __init__(self, attempts: int) -> None:
        self.attempts = attempts
        super().__init__(f"Could not generate a unique invite code after {attempts} attempts")


def generate_invite_code() -> str:
    return "".join(secrets.choice(INVITE_CODE_ALPHABET) for _ in range(INVITE_CODE_LENGTH))


async def invite_code_exists(session: AsyncSession, code: str) -> bool:
    result = await session.execute(select(Guest.uuid).where(Guest.invite_code == code).limit(1))
    return result.first() is not None


async def generate_unique_invite_code(
    session: AsyncSession,
    max_attempts: int = MAX_INVITE_CODE_ATTEMPTS,
    generator: InviteCodeGenerator = generate_invite_code,
) -> tuple[str, int]:
    """Draw codes until one is unused. Returns the code and the number of collisions."""
    for attempt in range(max_attempts):
        code = generator()
        if not await invite_code_exists(session, code):
            return code, attempt
    raise InviteCodeExhaustedError(max_attempts)


async def assign_invite_code(
    session: AsyncSession,
    wedding_id: UUID,
    guest_id: UUID,
    max_attempts: int = MAX_INVITE_CODE_ATTEMPTS,
    generator: InviteCodeGenerator = generate_invite_code,
) -> tuple[str | None, int]:
    """Give a guest an invite code if it has none.

    The pre-check is racy, so the unique constraint is the real collision
    detector: a duplicate-key error rolls back to a savepoint and another
    code is drawn. Returns ``(code, retries)``; the code is ``None`` when the
    guest already had one (or disappeared) by the time of the update.
    """
    retries = 0
    while retries < max_attempts:
        code, collisions = await generate_unique_invite_code(
            session, max_attempts=max_attempts - retries, generator=generator
        )
        retries += collisions
        try:
            async with session.begin_nested():
                result = await session.execute(
                    update(Guest)
                    .where(
                        Guest.uuid == guest_id,
                        Guest.wedding_id == wedding_id,
                        Guest.invite_code.is_(None),
                    )
                    .values(invite_code=code)
                    .execution_options(synchronize_session="evaluate")
                )
        except IntegrityError:
            retries += 1
            logger.info(f"Invite code collision for guest {guest_id}, retrying")
            continue
        if result.rowcount == 0:
            return None, retries
        return code, retries
    raise InviteCodeExhaustedError(max_attempts)


async def ensure_invite_code(
    session: AsyncSession,
    guest: Guest,
    max_attempts: int = MAX_INVITE_CODE_ATTEMPTS,
    generator: InviteCodeGenerator = generate_invite_code,
) -> str:
    """Return the guest's invite code, generating one lazily."""
    if guest.invite_code:
        return guest.invite_code
    code, _ = await assign_invite_code(
        session, guest.wedding_id, guest.uuid, max_attempts=max_attempts, generator=generator
    )
    if code is None:
        # someone else assigned one concurrently
        await session.refresh(guest, attribute_names=["invite_code"])
        return guest.invite_code
    return code
