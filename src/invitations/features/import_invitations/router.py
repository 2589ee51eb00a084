from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, ValidationError, field_validator

from src.audit.writer import get_audit_writer
from src.cache import get_versioned_cache
from src.common.tenant import get_wedding_id
from src.config.settings import settings
from src.invitations.dtos import CsvInvitationRow, CsvRowError, InvitationStatus
from src.invitations.features.import_invitations.write_model import (
    ImportInvitationsWriteModel,
    SqlImportInvitationsWriteModel,
)
from src.wedding_config.read_model import get_config_read_model

router = APIRouter()

IMPORT_INVITATIONS_URL = "/api/v1/admin/invitations/import"


class CsvRowModel(BaseModel):
    guest_email: str = Field(pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    guest_first_name: str | None = None
    guest_last_name: str | None = None
    event_id: UUID
    headcount: int = 1
    status: InvitationStatus = InvitationStatus.PENDING

    @field_validator("guest_first_name", "guest_last_name", "guest_email", mode="before")
    @classmethod
    def strip(cls, value):
        return value.strip() if isinstance(value, str) else value


class ImportInvitationsRequest(BaseModel):
    # rows as parsed from the spreadsheet, validated one by one
    rows: list[dict] = Field(min_length=1, max_length=5000)


class RowErrorResponse(BaseModel):
    row: int
    error: str


class ImportInvitationsResponse(BaseModel):
    success: int
    errors: list[RowErrorResponse]


def parse_rows(raw_rows: list[dict]) -> list[CsvInvitationRow | CsvRowError]:
    parsed: list[CsvInvitationRow | CsvRowError] = []
    for number, raw in enumerate(raw_rows, start=1):
        try:
            row = CsvRowModel.model_validate(raw)
        except ValidationError as e:
            fields = ", ".join(str(error["loc"][0]) for error in e.errors() if error["loc"])
            parsed.append(CsvRowError(row=number, error=f"Invalid value for: {fields}"))
            continue
        parsed.append(CsvInvitationRow(**row.model_dump()))
    return parsed


def get_import_invitations_write_model() -> ImportInvitationsWriteModel:
    """Dependency to get import invitations write model instance."""
    return SqlImportInvitationsWriteModel(
        config_read_model=get_config_read_model(),
        cache=get_versioned_cache(),
        audit_writer=get_audit_writer(),
        max_invite_code_attempts=settings.INVITE_CODE_MAX_ATTEMPTS,
    )


@router.post(IMPORT_INVITATIONS_URL, response_model=ImportInvitationsResponse)
async def import_invitations(
    request: ImportInvitationsRequest,
    wedding_id: UUID = Depends(get_wedding_id),
    write_model: ImportInvitationsWriteModel = Depends(get_import_invitations_write_model),
) -> ImportInvitationsResponse:
    """
    Import invitations from spreadsheet rows.

    Columns: guest_email, guest_first_name, guest_last_name, event_id,
    headcount, status. Unknown guests are created. Failing rows are
    reported with their 1-based row number and skipped.
    """
    result = await write_model.import_invitations(wedding_id, parse_rows(request.rows))
    return ImportInvitationsResponse(
        success=result.success,
        errors=[RowErrorResponse(row=error.row, error=error.error) for error in result.errors],
    )
