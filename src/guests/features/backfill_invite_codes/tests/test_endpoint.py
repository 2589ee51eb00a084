import csv
import io
from uuid import uuid4

from src.guests.features.backfill_invite_codes.router import (
    BACKFILL_LOCK_URL,
    BACKFILL_URL,
    CSV_COLUMNS,
    get_backfill_write_model,
)
from src.guests.features.backfill_invite_codes.tests.inmemory_write_model import (
    GUEST_ID,
    InMemoryBackfillWriteModel,
)

HEADERS = {"X-Wedding-Id": str(uuid4())}


async def test_backfill_json(client_factory):
    write_model = InMemoryBackfillWriteModel()

    async with client_factory({get_backfill_write_model: lambda: write_model}) as client:
        response = await client.post(BACKFILL_URL, json={"batch_size": 100, "dry_run": False}, headers=HEADERS)

    assert response.status_code == 200
    body = response.json()
    assert body["updated"] == 1
    assert body["message"] == "Backfill completed: 1 codes generated, 1 skipped, 0 conflicts resolved."
    assert body["rows"][0] == {
        "guest_id": str(GUEST_ID),
        "email": "a@example.com",
        "invite_code": "AAAA0001",
        "retries": 0,
        "status": "success",
        "error": None,
    }
    assert write_model.calls[0].batch_size == 100
    assert write_model.calls[0].max_retries == 5


async def test_backfill_defaults_to_dry_run(client_factory):
    write_model = InMemoryBackfillWriteModel()

    async with client_factory({get_backfill_write_model: lambda: write_model}) as client:
        await client.post(BACKFILL_URL, json={}, headers=HEADERS)

    assert write_model.calls[0].dry_run is True


async def test_backfill_csv(client_factory):
    async with client_factory({get_backfill_write_model: lambda: InMemoryBackfillWriteModel()}) as client:
        response = await client.post(BACKFILL_URL, params={"format": "csv"}, json={}, headers=HEADERS)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    rows = list(csv.reader(io.StringIO(response.text)))
    assert rows[0] == CSV_COLUMNS
    assert rows[1] == [str(GUEST_ID), "a@example.com", "AAAA0001", "0", "success", ""]
    assert rows[2][-2:] == ["error", "gave up"]


async def test_backfill_bounds(client_factory):
    async with client_factory({get_backfill_write_model: lambda: InMemoryBackfillWriteModel()}) as client:
        too_small = await client.post(BACKFILL_URL, json={"batch_size": 10}, headers=HEADERS)
        too_many_retries = await client.post(BACKFILL_URL, json={"max_retries": 11}, headers=HEADERS)

    assert too_small.status_code == 422
    assert too_many_retries.status_code == 422


async def test_backfill_already_running(client_factory):
    write_model = InMemoryBackfillWriteModel(running=True)

    async with client_factory({get_backfill_write_model: lambda: write_model}) as client:
        response = await client.post(BACKFILL_URL, json={}, headers=HEADERS)
        lock = await client.get(BACKFILL_LOCK_URL, headers=HEADERS)

    assert response.status_code == 409
    assert "Another backfill is currently running" in response.json()["detail"]
    assert lock.json() == {"running": True}
