import logging

from src.cache.ttl_cache import TTLCache
from src.config.settings import settings
from src.whatsapp_service import WhatsAppServiceBase

logger = logging.getLogger(__name__)


class WhatsAppRegistrationChecker:
    """Approximates "is this number on WhatsApp".

    There is no registry lookup; a number counts as registered whenever the
    WhatsApp credentials are configured. Answers are cached per number.
    """

    def __init__(self, whatsapp: WhatsAppServiceBase, cache: TTLCache[bool]):
        self.whatsapp = whatsapp
        self.cache = cache

    async def is_registered(self, phone: str) -> bool:
        cached = self.cache.get(phone)
        if cached is not None:
            return cached
        registered = self.whatsapp.is_configured
        logger.debug(f"WhatsApp registration for {phone}: {registered}")
        self.cache.set(phone, registered)
        return registered


_registration_cache: TTLCache[bool] = TTLCache(settings.WHATSAPP_REGISTRATION_TTL_SECONDS)


def get_registration_checker(whatsapp: WhatsAppServiceBase) -> WhatsAppRegistrationChecker:
    return WhatsAppRegistrationChecker(whatsapp=whatsapp, cache=_registration_cache)
