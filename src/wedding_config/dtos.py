from dataclasses import dataclass, fields
from enum import Enum


class ConfigKey(str, Enum):
    PLUS_ONES_ENABLED = "plus_ones_enabled"
    MAX_PARTY_SIZE = "max_party_size"
    ALLOW_GUEST_PLUS_ONES = "allow_guest_plus_ones"
    RSVP_ENABLED = "rsvp_enabled"
    RSVP_CUTOFF_DATE = "rsvp_cutoff_date"
    RSVP_CUTOFF_TIMEZONE = "rsvp_cutoff_timezone"
    ACCESS_CODE_ENABLED = "access_code_enabled"
    ACCESS_CODE_REQUIRED_SEATING = "access_code_required_seating"
    ACCESS_CODE_REQUIRED_SCHEDULE = "access_code_required_schedule"
    ACCESS_CODE_REQUIRED_EVENT_DETAILS = "access_code_required_event_details"
    FOOD_CHOICES_ENABLED = "food_choices_enabled"
    FOOD_CHOICES_REQUIRED = "food_choices_required"
    DRESS_CODE_MESSAGE = "dress_code_message"
    AGE_RESTRICTION_MESSAGE = "age_restriction_message"
    RSVP_FOOTER = "rsvp_footer"
    REGISTRY_EMPTY_MESSAGE = "registry_empty_message"
    NOTIFICATION_EMAIL_ENABLED = "notification_email_enabled"
    NOTIFICATION_WHATSAPP_ENABLED = "notification_whatsapp_enabled"
    NOTIFICATION_SMS_ENABLED = "notification_sms_enabled"


BOOLEAN_KEYS = frozenset(
    {
        ConfigKey.PLUS_ONES_ENABLED,
        ConfigKey.ALLOW_GUEST_PLUS_ONES,
        ConfigKey.RSVP_ENABLED,
        ConfigKey.ACCESS_CODE_ENABLED,
        ConfigKey.ACCESS_CODE_REQUIRED_SEATING,
        ConfigKey.ACCESS_CODE_REQUIRED_SCHEDULE,
        ConfigKey.ACCESS_CODE_REQUIRED_EVENT_DETAILS,
        ConfigKey.FOOD_CHOICES_ENABLED,
        ConfigKey.FOOD_CHOICES_REQUIRED,
        ConfigKey.NOTIFICATION_EMAIL_ENABLED,
        ConfigKey.NOTIFICATION_WHATSAPP_ENABLED,
        ConfigKey.NOTIFICATION_SMS_ENABLED,
    }
)

# Absent => true; only the literal "false" turns these off
DEFAULT_TRUE_KEYS = frozenset(
    {
        ConfigKey.RSVP_ENABLED,
        ConfigKey.ACCESS_CODE_ENABLED,
        ConfigKey.ACCESS_CODE_REQUIRED_SEATING,
        ConfigKey.ACCESS_CODE_REQUIRED_SCHEDULE,
        ConfigKey.ACCESS_CODE_REQUIRED_EVENT_DETAILS,
        ConfigKey.NOTIFICATION_EMAIL_ENABLED,
    }
)

INTEGER_KEYS = frozenset({ConfigKey.MAX_PARTY_SIZE})

OPTIONAL_STRING_KEYS = frozenset(
    {
        ConfigKey.RSVP_CUTOFF_DATE,
        ConfigKey.RSVP_CUTOFF_TIMEZONE,
        ConfigKey.DRESS_CODE_MESSAGE,
        ConfigKey.AGE_RESTRICTION_MESSAGE,
        ConfigKey.RSVP_FOOTER,
        ConfigKey.REGISTRY_EMPTY_MESSAGE,
    }
)

# Setting one of these to "" deletes the stored row
CLEARABLE_KEYS = OPTIONAL_STRING_KEYS

# Written by an upstream form serializer for unset fields
UNDEFINED_SENTINEL = "undefined"

MIN_PARTY_SIZE = 1
MAX_PARTY_SIZE_LIMIT = 20

CONFIG_DESCRIPTIONS: dict[ConfigKey, str] = {
    ConfigKey.PLUS_ONES_ENABLED: "Allow guests to bring additional people",
    ConfigKey.MAX_PARTY_SIZE: "Maximum party size per invitation, guest included",
    ConfigKey.ALLOW_GUEST_PLUS_ONES: "Let guests name their own plus-ones",
    ConfigKey.RSVP_ENABLED: "Accept RSVP submissions",
    ConfigKey.RSVP_CUTOFF_DATE: "Last day RSVPs are accepted (YYYY-MM-DD)",
    ConfigKey.RSVP_CUTOFF_TIMEZONE: "Timezone the cutoff date is evaluated in",
    ConfigKey.ACCESS_CODE_ENABLED: "Protect guest-only pages with the invite code",
    ConfigKey.ACCESS_CODE_REQUIRED_SEATING: "Require the invite code for seating",
    ConfigKey.ACCESS_CODE_REQUIRED_SCHEDULE: "Require the invite code for the schedule",
    ConfigKey.ACCESS_CODE_REQUIRED_EVENT_DETAILS: "Require the invite code for event details",
    ConfigKey.FOOD_CHOICES_ENABLED: "Ask accepting guests for a food choice",
    ConfigKey.FOOD_CHOICES_REQUIRED: "Make the food choice mandatory",
    ConfigKey.DRESS_CODE_MESSAGE: "Dress code shown on the RSVP page",
    ConfigKey.AGE_RESTRICTION_MESSAGE: "Age restriction notice",
    ConfigKey.RSVP_FOOTER: "Footer text of the RSVP page",
    ConfigKey.REGISTRY_EMPTY_MESSAGE: "Text shown when the registry is empty",
    ConfigKey.NOTIFICATION_EMAIL_ENABLED: "Send invitations by email",
    ConfigKey.NOTIFICATION_WHATSAPP_ENABLED: "Send invitations by WhatsApp",
    ConfigKey.NOTIFICATION_SMS_ENABLED: "Send invitations by SMS",
}


@dataclass(frozen=True)
class ConfigValue:
    """A wedding's resolved configuration. Every field has a documented default."""

    plus_ones_enabled: bool = False
    max_party_size: int = 1
    allow_guest_plus_ones: bool = False
    rsvp_enabled: bool = True
    rsvp_cutoff_date: str | None = None
    rsvp_cutoff_timezone: str = "America/New_York"
    access_code_enabled: bool = True
    access_code_required_seating: bool = True
    access_code_required_schedule: bool = True
    access_code_required_event_details: bool = True
    food_choices_enabled: bool = False
    food_choices_required: bool = False
    dress_code_message: str | None = None
    age_restriction_message: str | None = None
    rsvp_footer: str | None = None
    registry_empty_message: str | None = None
    notification_email_enabled: bool = True
    notification_whatsapp_enabled: bool = False
    notification_sms_enabled: bool = False

    def as_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}


DEFAULT_CONFIG = ConfigValue()
