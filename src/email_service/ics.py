"""Calendar attachment for invitation emails."""

import base64
from datetime import UTC, date, datetime, timedelta

from src.email_service.base import EmailAttachment
from src.invitations.dtos import EventSummaryDTO

ICS_FILENAME = "event.ics"


def _escape(value: str) -> str:
    return (
        value.replace("\\", "\\\\").replace(";", "\\;").replace(",", "\\,").replace("\n", "\\n")
    )


def _day(starts_at: datetime | None) -> date | None:
    return starts_at.date() if starts_at else None


def build_ics(events: list[EventSummaryDTO], rsvp_url: str, couple_name: str) -> str:
    """One all-day VEVENT per dated event."""
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        "PRODID:-//Wedding Platform//Invitations//EN",
        "CALSCALE:GREGORIAN",
        "METHOD:PUBLISH",
    ]
    stamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%SZ")
    for event in events:
        day = _day(event.starts_at)
        if day is None:
            continue
        location = ", ".join(part for part in (event.venue, event.address) if part)
        lines += [
            "BEGIN:VEVENT",
            f"UID:{event.uuid}@wedding-platform",
            f"DTSTAMP:{stamp}",
            f"DTSTART;VALUE=DATE:{day:%Y%m%d}",
            f"DTEND;VALUE=DATE:{day + timedelta(days=1):%Y%m%d}",
            f"SUMMARY:{_escape(f'{event.name} - {couple_name}')}",
            f"LOCATION:{_escape(location)}",
            f"URL:{rsvp_url}",
            "END:VEVENT",
        ]
    lines.append("END:VCALENDAR")
    return "\r\n".join(lines) + "\r\n"


def ics_attachment(events: list[EventSummaryDTO], rsvp_url: str, couple_name: str) -> EmailAttachment | None:
    if not any(event.starts_at for event in events):
        return None
    content = build_ics(events, rsvp_url, couple_name)
    return EmailAttachment(
        filename=ICS_FILENAME,
        content=base64.b64encode(content.encode("utf-8")).decode("ascii"),
        content_type="text/calendar",
    )
