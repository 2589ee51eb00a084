"""Conversion between stored string rows and :class:`ConfigValue`."""

import logging
from collections.abc import Mapping
from typing import Any

from src.wedding_config.dtos import (
    BOOLEAN_KEYS,
    DEFAULT_CONFIG,
    DEFAULT_TRUE_KEYS,
    INTEGER_KEYS,
    OPTIONAL_STRING_KEYS,
    UNDEFINED_SENTINEL,
    ConfigKey,
    ConfigValue,
)

logger = logging.getLogger(__name__)


def parse_bool(key: ConfigKey, raw: str | None) -> bool:
    if key in DEFAULT_TRUE_KEYS:
        return raw != "false"
    return raw == "true"


def parse_int(key: ConfigKey, raw: str | None) -> int:
    default = getattr(DEFAULT_CONFIG, key.value)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Unparseable value {raw!r} for {key.value}, using {default}")
        return default


def parse_optional_str(raw: str | None) -> str | None:
    if raw is None or raw == UNDEFINED_SENTINEL or raw == "":
        return None
    return raw


def parse_config_rows(rows: Mapping[str, str]) -> ConfigValue:
    """Resolve raw ``key -> value`` rows into a full config with defaults."""
    values: dict[str, Any] = {}
    for key in ConfigKey:
        raw = rows.get(key.value)
        if key in BOOLEAN_KEYS:
            values[key.value] = parse_bool(key, raw)
        elif key in INTEGER_KEYS:
            values[key.value] = parse_int(key, raw)
        elif key in OPTIONAL_STRING_KEYS:
            parsed = parse_optional_str(raw)
            if parsed is None and key == ConfigKey.RSVP_CUTOFF_TIMEZONE:
                parsed = DEFAULT_CONFIG.rsvp_cutoff_timezone
            values[key.value] = parsed
    return ConfigValue(**values)


def serialize_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


def config_to_rows(config: ConfigValue) -> dict[str, str]:
    """Rows that persist ``config``; unset optional strings are left out."""
    rows = {}
    for key, value in config.as_dict().items():
        if value is None:
            continue
        rows[key] = serialize_value(value)
    return rows
