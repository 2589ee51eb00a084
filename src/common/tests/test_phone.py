import pytest

from src.common.phone import format_phone_e164, is_valid_e164


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("+447911123456", "+447911123456"),
        ("(555) 123-4567", "+15551234567"),
        ("1 555 123 4567", "+15551234567"),
        ("555.123.4567", "+15551234567"),
    ],
)
def test_format_phone_e164(raw, expected):
    assert format_phone_e164(raw) == expected


def test_format_phone_uses_given_country_code():
    assert format_phone_e164("0612345678", country_code="+31") == "+310612345678"
    assert format_phone_e164("31612345678", country_code="+31") == "+31612345678"


@pytest.mark.parametrize("phone", ["", None, "5551234567", "+0123456", "+1 555 123", "+1234567890123456"])
def test_is_valid_e164_rejects(phone):
    assert not is_valid_e164(phone)
