from uuid import uuid4

import pytest

from src.invitations.dtos import EventDef, InvitationStatus
from src.invitations.headcount import clamp_headcount, effective_max_headcount, validate_headcount
from src.wedding_config.dtos import ConfigValue

PLUS_ONES = ConfigValue(plus_ones_enabled=True, max_party_size=3)
NO_PLUS_ONES = ConfigValue(plus_ones_enabled=False, max_party_size=8)


@pytest.mark.parametrize("requested", [-5, 0, 1, 2, 5, 10_000])
def test_forced_to_one_without_plus_ones(requested):
    assert clamp_headcount(requested, NO_PLUS_ONES, guest_total_guests=6) == 1


@pytest.mark.parametrize(
    ("requested", "guest_total", "expected"),
    [
        (10, 4, 3),
        (10, 2, 2),
        (2, None, 2),
        (None, 4, 1),
        (-3, 4, 1),
        (3, 3, 3),
    ],
)
def test_clamped_to_party_size_and_guest_cap(requested, guest_total, expected):
    assert clamp_headcount(requested, PLUS_ONES, guest_total) == expected


def test_effective_max_never_below_one():
    config = ConfigValue(plus_ones_enabled=True, max_party_size=0)

    assert effective_max_headcount(config, guest_total_guests=0) == 1


def test_validate_keeps_event_and_status():
    event_id = uuid4()
    events = [EventDef(event_id=event_id, headcount=9, status=InvitationStatus.ACCEPTED)]

    [validated] = validate_headcount(events, guest_total_guests=4, config=PLUS_ONES)

    assert validated == EventDef(event_id=event_id, headcount=3, status=InvitationStatus.ACCEPTED)


def test_validate_is_idempotent():
    events = [EventDef(event_id=uuid4(), headcount=h) for h in (-1, 0, 2, 3, 50)]

    once = validate_headcount(events, 4, PLUS_ONES)
    twice = validate_headcount(once, 4, PLUS_ONES)

    assert once == twice
    assert all(1 <= event.headcount <= 3 for event in once)
