"""Party-size invariant.

Every path that writes ``InvitationEvent.headcount`` runs the requested
value through here: invitation creation, admin edits, imports and RSVP
submissions. A previously stored headcount is never trusted.
"""

from collections.abc import Sequence
from dataclasses import replace

from src.invitations.dtos import EventDef
from src.wedding_config.dtos import ConfigValue


def effective_max_headcount(config: ConfigValue, guest_total_guests: int | None = None) -> int:
    if not config.plus_ones_enabled:
        return 1
    config_max = max(config.max_party_size or 1, 1)
    guest_cap = guest_total_guests or config_max
    return max(min(config_max, guest_cap), 1)


def clamp_headcount(
    headcount: int | None, config: ConfigValue, guest_total_guests: int | None = None
) -> int:
    maximum = effective_max_headcount(config, guest_total_guests)
    return max(1, min(headcount or 1, maximum))


def validate_headcount(
    events: Sequence[EventDef],
    guest_total_guests: int | None,
    config: ConfigValue,
) -> list[EventDef]:
    """Return ``events`` with each headcount clamped to what the wedding allows."""
    return [
        replace(event, headcount=clamp_headcount(event.headcount, config, guest_total_guests))
        for event in events
    ]
