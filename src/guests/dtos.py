from dataclasses import dataclass, field
from enum import Enum
from uuid import UUID

BACKFILL_LOCK_PREFIX = "invite_code_backfill"


def backfill_lock_name(wedding_id: UUID) -> str:
    return f"{BACKFILL_LOCK_PREFIX}:{wedding_id}"


class BackfillAlreadyRunningError(Exception):
    """Raised when the backfill lock for a wedding is already held."""

    def __init__(self) -> None:
        super().__init__("Another backfill is currently running. Please try again in a few minutes.")


class BackfillRowStatus(str, Enum):
    SUCCESS = "success"
    SKIPPED = "skipped"
    ERROR = "error"


@dataclass(frozen=True)
class BackfillOptions:
    batch_size: int = 500
    max_retries: int = 5
    dry_run: bool = True


@dataclass(frozen=True)
class BackfillRow:
    guest_id: UUID
    email: str | None
    invite_code: str | None
    retries: int
    status: BackfillRowStatus
    error: str | None = None


@dataclass
class BackfillResult:
    dry_run: bool
    updated: int = 0
    skipped: int = 0
    conflicts_resolved: int = 0
    rows: list[BackfillRow] = field(default_factory=list)

    @property
    def summary(self) -> str:
        return (
            f"Backfill completed: {self.updated} codes generated, {self.skipped} skipped, "
            f"{self.conflicts_resolved} conflicts resolved."
        )
