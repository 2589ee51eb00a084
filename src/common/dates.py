from datetime import datetime


def format_event_date(starts_at: datetime | None) -> str:
    """``Saturday, June 20, 2026``; empty when the event has no date yet."""
    if starts_at is None:
        return ""
    return f"{starts_at:%A, %B} {starts_at.day}, {starts_at.year}"


def format_event_time(starts_at: datetime | None) -> str:
    if starts_at is None:
        return "00:00"
    return f"{starts_at:%H:%M}"
