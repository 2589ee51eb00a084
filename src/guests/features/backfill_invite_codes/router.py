import csv
import io
from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import Response
from pydantic import BaseModel, Field

from src.audit.writer import get_audit_writer
from src.cache import get_lock_manager, get_versioned_cache
from src.common.tenant import get_wedding_id
from src.config.settings import settings
from src.guests.dtos import BackfillAlreadyRunningError, BackfillOptions, BackfillResult
from src.guests.features.backfill_invite_codes.write_model import (
    BackfillInviteCodesWriteModel,
    SqlBackfillInviteCodesWriteModel,
)

router = APIRouter()

BACKFILL_URL = "/api/v1/admin/guests/backfill-invite-codes"
BACKFILL_LOCK_URL = "/api/v1/admin/guests/backfill-invite-codes/lock"

CSV_COLUMNS = ["guest_id", "email", "invite_code", "retries", "status", "error"]


class BackfillRequest(BaseModel):
    batch_size: int = Field(default=500, ge=50, le=5000)
    max_retries: int = Field(default=5, ge=1, le=10)
    dry_run: bool = True


class BackfillRowResponse(BaseModel):
    guest_id: UUID
    email: str | None
    invite_code: str | None
    retries: int
    status: str
    error: str | None = None


class BackfillResponse(BaseModel):
    dry_run: bool
    updated: int
    skipped: int
    conflicts_resolved: int
    message: str
    rows: list[BackfillRowResponse]


class BackfillLockResponse(BaseModel):
    running: bool


def get_backfill_write_model() -> BackfillInviteCodesWriteModel:
    """Dependency to get backfill invite codes write model instance."""
    return SqlBackfillInviteCodesWriteModel(
        lock_manager=get_lock_manager(),
        cache=get_versioned_cache(),
        audit_writer=get_audit_writer(),
        lock_ttl_seconds=settings.BACKFILL_LOCK_TTL_SECONDS,
    )


def rows_to_csv(result: BackfillResult) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(CSV_COLUMNS)
    for row in result.rows:
        writer.writerow(
            [row.guest_id, row.email or "", row.invite_code or "", row.retries, row.status.value, row.error or ""]
        )
    return buffer.getvalue()


def _to_response(result: BackfillResult) -> BackfillResponse:
    return BackfillResponse(
        dry_run=result.dry_run,
        updated=result.updated,
        skipped=result.skipped,
        conflicts_resolved=result.conflicts_resolved,
        message=result.summary,
        rows=[
            BackfillRowResponse(
                guest_id=row.guest_id,
                email=row.email,
                invite_code=row.invite_code,
                retries=row.retries,
                status=row.status.value,
                error=row.error,
            )
            for row in result.rows
        ],
    )


@router.post(BACKFILL_URL, response_model=BackfillResponse)
async def backfill_invite_codes(
    body: BackfillRequest,
    request: Request,
    format: Literal["json", "csv"] = "json",
    wedding_id: UUID = Depends(get_wedding_id),
    write_model: BackfillInviteCodesWriteModel = Depends(get_backfill_write_model),
):
    """Generate invite codes for guests that have none. Dry run by default."""
    try:
        result = await write_model.backfill(
            wedding_id,
            BackfillOptions(batch_size=body.batch_size, max_retries=body.max_retries, dry_run=body.dry_run),
            ip_address=request.client.host if request.client else None,
            user_agent=request.headers.get("user-agent"),
        )
    except BackfillAlreadyRunningError as e:
        raise HTTPException(status_code=409, detail=str(e))

    if format == "csv":
        return Response(
            content=rows_to_csv(result),
            media_type="text/csv",
            headers={"Content-Disposition": 'attachment; filename="invite-code-backfill.csv"'},
        )
    return _to_response(result)


@router.get(BACKFILL_LOCK_URL, response_model=BackfillLockResponse)
async def get_backfill_lock(
    wedding_id: UUID = Depends(get_wedding_id),
    write_model: BackfillInviteCodesWriteModel = Depends(get_backfill_write_model),
) -> BackfillLockResponse:
    return BackfillLockResponse(running=await write_model.is_running(wedding_id))
