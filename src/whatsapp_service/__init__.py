from src.config.settings import settings
from src.whatsapp_service.meta_service import (
    MetaWhatsAppService,
    WhatsAppServiceBase,
    confirmation_template_params,
    invitation_template_params,
)


def get_whatsapp_service() -> WhatsAppServiceBase:
    return MetaWhatsAppService(config=settings)


__all__ = [
    "MetaWhatsAppService",
    "WhatsAppServiceBase",
    "confirmation_template_params",
    "get_whatsapp_service",
    "invitation_template_params",
]
