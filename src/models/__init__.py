from .base import Base, BaseModel, TimeStamp
from .event import Event
from .guest import Guest
from .invitation import Invitation, InvitationEvent, RsvpRecord
from .logs import AuditLog, MailLog
from .wedding import Wedding
from .wedding_config import WeddingConfigEntry

__all__ = [
    "Base",
    "BaseModel",
    "TimeStamp",
    "Wedding",
    "Event",
    "Guest",
    "Invitation",
    "InvitationEvent",
    "RsvpRecord",
    "WeddingConfigEntry",
    "MailLog",
    "AuditLog",
]
