"""Deterministic logical cache keys.

Query parameters are normalised and sorted so the same query always maps to
the same key, whatever order or casing the caller used.
"""

from uuid import UUID

DEFAULT_SORT = "created_at:desc"


def _normalise(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value).strip()


def _list_key(prefix: str, params: dict) -> str:
    parts = [f"{k}={v}" for k, v in sorted(params.items()) if v != ""]
    return ":".join([prefix, *parts])


def guests_list_key(
    wedding_id: UUID,
    page: int | None = None,
    page_size: int | None = None,
    q: str | None = None,
    status: str | None = None,
    vip: bool | None = None,
    sort: str | None = None,
) -> str:
    return _list_key(
        "guests:list",
        {
            "wedding": _normalise(wedding_id),
            "page": _normalise(page or 1),
            "pageSize": _normalise(page_size or 10),
            "q": _normalise(q).lower(),
            "status": _normalise(status),
            "vip": _normalise(vip),
            "sort": _normalise(sort) or DEFAULT_SORT,
        },
    )


def invitations_list_key(
    wedding_id: UUID,
    page: int | None = None,
    page_size: int | None = None,
    q: str | None = None,
    event_id: UUID | None = None,
    status: str | None = None,
    date_from: str | None = None,
    date_to: str | None = None,
    sort: str | None = None,
) -> str:
    return _list_key(
        "invitations:list",
        {
            "wedding": _normalise(wedding_id),
            "page": _normalise(page or 1),
            "pageSize": _normalise(page_size or 10),
            "q": _normalise(q).lower(),
            "eventId": _normalise(event_id),
            "status": _normalise(status),
            "dateFrom": _normalise(date_from),
            "dateTo": _normalise(date_to),
            "sort": _normalise(sort) or DEFAULT_SORT,
        },
    )


def guest_detail_key(guest_id: UUID) -> str:
    return f"guests:detail:{guest_id}"


def guest_invitations_key(guest_id: UUID) -> str:
    return f"guests:invitations:{guest_id}"


def event_guests_key(event_id: UUID) -> str:
    return f"events:guests:{event_id}"


def household_guests_key(household_id: UUID) -> str:
    return f"households:guests:{household_id}"
