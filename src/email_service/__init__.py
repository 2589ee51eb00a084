from src.config.settings import settings
from src.email_service.base import ConfirmationParams, EmailAttachment, EmailServiceBase
from src.email_service.resend_service import ResendEmailService
from src.email_service.smtp_service import SMTPEmailService
from src.email_service.templates import EmailTemplates


def get_email_service() -> EmailServiceBase:
    if settings.resend_api_key:
        return ResendEmailService(config=settings)
    return SMTPEmailService()


__all__ = [
    "ConfirmationParams",
    "EmailAttachment",
    "EmailServiceBase",
    "EmailTemplates",
    "get_email_service",
]
