from src.config.settings import settings
from src.sms_service.base import SmsServiceBase
from src.sms_service.twilio_service import (
    TwilioSmsService,
    format_confirmation_sms,
    format_invitation_sms,
)


def get_sms_service() -> SmsServiceBase:
    return TwilioSmsService(config=settings)


__all__ = [
    "SmsServiceBase",
    "TwilioSmsService",
    "format_confirmation_sms",
    "format_invitation_sms",
    "get_sms_service",
]
