from uuid import uuid4

from src.invitations.dtos import CsvImportResult, CsvInvitationRow, CsvRowError
from src.invitations.features.import_invitations.router import (
    IMPORT_INVITATIONS_URL,
    get_import_invitations_write_model,
    parse_rows,
)
from src.invitations.features.import_invitations.write_model import ImportInvitationsWriteModel

HEADERS = {"X-Wedding-Id": str(uuid4())}


class InMemoryImportInvitationsWriteModel(ImportInvitationsWriteModel):
    def __init__(self):
        self.rows = []

    async def import_invitations(self, wedding_id, rows, user_id=None):
        self.rows = rows
        errors = [row for row in rows if isinstance(row, CsvRowError)]
        return CsvImportResult(success=len(rows) - len(errors), errors=errors)


def test_parse_rows_reports_bad_rows():
    event_id = uuid4()

    parsed = parse_rows(
        [
            {"guest_email": " ana@example.com ", "event_id": str(event_id), "headcount": "2"},
            {"guest_email": "not-an-email", "event_id": "nope"},
        ]
    )

    assert parsed[0] == CsvInvitationRow(guest_email="ana@example.com", event_id=event_id, headcount=2)
    assert parsed[1].row == 2
    assert "guest_email" in parsed[1].error
    assert "event_id" in parsed[1].error


async def test_import_endpoint(client_factory):
    write_model = InMemoryImportInvitationsWriteModel()
    overrides = {get_import_invitations_write_model: lambda: write_model}

    async with client_factory(overrides) as client:
        response = await client.post(
            IMPORT_INVITATIONS_URL,
            headers=HEADERS,
            json={"rows": [{"guest_email": "ana@example.com", "event_id": str(uuid4())}, {}]},
        )

    assert response.status_code == 200
    assert response.json()["success"] == 1
    assert response.json()["errors"][0]["row"] == 2
