"""Whether a wedding currently accepts RSVPs."""

import logging
from datetime import date, datetime, time
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from src.rsvp.dtos import RSVP_DISABLED_MESSAGE
from src.wedding_config.dtos import DEFAULT_CONFIG, ConfigValue

logger = logging.getLogger(__name__)


def _zone(name: str | None) -> ZoneInfo:
    try:
        return ZoneInfo(name or DEFAULT_CONFIG.rsvp_cutoff_timezone)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown RSVP cutoff timezone {name!r}, using the default")
        return ZoneInfo(DEFAULT_CONFIG.rsvp_cutoff_timezone)


def cutoff_moment(config: ConfigValue) -> datetime | None:
    """End of the cutoff day in the wedding's timezone; the cutoff day itself is still open."""
    if not config.rsvp_cutoff_date:
        return None
    try:
        cutoff_day = date.fromisoformat(config.rsvp_cutoff_date)
    except ValueError:
        logger.warning(f"Ignoring malformed RSVP cutoff date {config.rsvp_cutoff_date!r}")
        return None
    return datetime.combine(cutoff_day, time.max, tzinfo=_zone(config.rsvp_cutoff_timezone))


def rsvp_closed_reason(config: ConfigValue, now: datetime) -> str | None:
    if not config.rsvp_enabled:
        return RSVP_DISABLED_MESSAGE
    cutoff = cutoff_moment(config)
    if cutoff is not None and now > cutoff:
        return f"RSVP deadline has passed. The cutoff was {cutoff:%B} {cutoff.day}, {cutoff.year}."
    return None
