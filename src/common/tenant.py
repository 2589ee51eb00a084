from uuid import UUID

from fastapi import HTTPException, Request

from src.config.settings import settings

WEDDING_ID_HEADER = "x-wedding-id"
WEDDING_ID_COOKIE = "wedding_id"
WEDDING_ID_QUERY = "wedding_id"


def get_wedding_id(request: Request) -> UUID:
    """Resolve the tenant of the current request.

    Looks at the header set by the edge proxy, then the cookie, then the
    query string, then the configured single-tenant fallback.
    """
    raw = (
        request.headers.get(WEDDING_ID_HEADER)
        or request.cookies.get(WEDDING_ID_COOKIE)
        or request.query_params.get(WEDDING_ID_QUERY)
        or settings.default_wedding_id
    )
    if not raw:
        raise HTTPException(status_code=400, detail="Wedding ID is required")
    try:
        return UUID(raw)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid wedding ID")
