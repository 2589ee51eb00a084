from enum import Enum


class TableNames(str, Enum):
    WEDDINGS = "weddings"
    GUESTS = "guests"
    EVENTS = "events"
    INVITATIONS = "invitations"
    INVITATION_EVENTS = "invitation_events"
    RSVPS = "rsvps_v2"
    WEDDING_CONFIG = "wedding_config"
    MAIL_LOGS = "mail_logs"
    AUDIT_LOGS = "audit_logs"
