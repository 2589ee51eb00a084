import re

E164_PATTERN = re.compile(r"^\+[1-9]\d{1,14}$")


def is_valid_e164(phone: str | None) -> bool:
    return bool(phone) and E164_PATTERN.match(phone) is not None


def format_phone_e164(phone: str, country_code: str = "+1") -> str:
    """Normalise a stored phone number to E.164.

    Numbers already in E.164 are returned unchanged. Otherwise all
    non-digits are stripped and the country code is prefixed unless the
    digits already start with it. The result still has to pass
    :func:`is_valid_e164` before it is handed to a provider.
    """
    phone = phone.strip()
    if is_valid_e164(phone):
        return phone

    digits = re.sub(r"\D", "", phone)
    country_digits = re.sub(r"\D", "", country_code)
    if country_digits and digits.startswith(country_digits):
        return f"+{digits}"
    return f"+{country_digits}{digits}"
