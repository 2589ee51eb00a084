from datetime import UTC, datetime

import pytest

from src.rsvp.dtos import RSVP_DISABLED_MESSAGE
from src.rsvp.window import rsvp_closed_reason
from src.wedding_config.dtos import ConfigValue


def test_disabled():
    assert rsvp_closed_reason(ConfigValue(rsvp_enabled=False), datetime.now(UTC)) == RSVP_DISABLED_MESSAGE


def test_open_without_cutoff():
    assert rsvp_closed_reason(ConfigValue(), datetime.now(UTC)) is None


@pytest.mark.parametrize(
    "now, closed",
    [
        (datetime(2026, 9, 1, 12, 0, tzinfo=UTC), False),
        # 23:30 in New York on the cutoff day
        (datetime(2026, 9, 2, 3, 30, tzinfo=UTC), False),
        (datetime(2026, 9, 2, 4, 30, tzinfo=UTC), True),
    ],
)
def test_cutoff_day_is_inclusive_in_wedding_timezone(now, closed):
    config = ConfigValue(rsvp_cutoff_date="2026-09-01", rsvp_cutoff_timezone="America/New_York")

    reason = rsvp_closed_reason(config, now)

    assert (reason is not None) == closed
    if closed:
        assert reason == "RSVP deadline has passed. The cutoff was September 1, 2026."


def test_malformed_cutoff_is_ignored():
    config = ConfigValue(rsvp_cutoff_date="next friday")

    assert rsvp_closed_reason(config, datetime(2030, 1, 1, tzinfo=UTC)) is None


def test_unknown_timezone_falls_back_to_default():
    config = ConfigValue(rsvp_cutoff_date="2026-09-01", rsvp_cutoff_timezone="Mars/Olympus")

    assert rsvp_closed_reason(config, datetime(2026, 9, 3, tzinfo=UTC)) is not None
