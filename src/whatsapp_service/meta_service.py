"""WhatsApp Business Cloud API client.

Invitations go out as pre-approved templates; free-form text is only
delivered inside an open customer service window.
"""

import logging
from abc import ABC, abstractmethod
from typing import Protocol

import httpx

from src.common.delivery import DeliveryResult
from src.notifications.dtos import NotificationParams

logger = logging.getLogger(__name__)

WHATSAPP_API_VERSION = "v21.0"
WHATSAPP_API_URL = "https://graph.facebook.com/{version}/{phone_number_id}/messages"


class WhatsAppConfig(Protocol):
    whatsapp_access_token: str
    whatsapp_phone_number_id: str
    whatsapp_template_language: str


class WhatsAppServiceBase(ABC):
    @property
    @abstractmethod
    def is_configured(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    async def send_template(
        self, to: str, template_name: str, template_params: dict[str, str]
    ) -> DeliveryResult:
        raise NotImplementedError

    @abstractmethod
    async def send_text(self, to: str, body: str) -> DeliveryResult:
        raise NotImplementedError


class MetaWhatsAppService(WhatsAppServiceBase):
    def __init__(self, config: WhatsAppConfig, transport: httpx.AsyncBaseTransport | None = None):
        self._config = config
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self._config.whatsapp_access_token and self._config.whatsapp_phone_number_id)

    async def send_template(
        self, to: str, template_name: str, template_params: dict[str, str]
    ) -> DeliveryResult:
        template = {
            "name": template_name,
            "language": {"code": self._config.whatsapp_template_language or "en"},
        }
        if template_params:
            template["components"] = [
                {
                    "type": "body",
                    "parameters": [{"type": "text", "text": value} for value in template_params.values()],
                }
            ]
        return await self._post(
            {"messaging_product": "whatsapp", "to": to, "type": "template", "template": template}
        )

    async def send_text(self, to: str, body: str) -> DeliveryResult:
        return await self._post(
            {"messaging_product": "whatsapp", "to": to, "type": "text", "text": {"body": body}}
        )

    async def _post(self, payload: dict) -> DeliveryResult:
        if not self.is_configured:
            return DeliveryResult(success=False, error="WhatsApp API credentials not configured")

        url = WHATSAPP_API_URL.format(
            version=WHATSAPP_API_VERSION, phone_number_id=self._config.whatsapp_phone_number_id
        )
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(
                    url,
                    headers={
                        "Authorization": f"Bearer {self._config.whatsapp_access_token}",
                        "Content-Type": "application/json",
                    },
                    json=payload,
                )
        except httpx.HTTPError as e:
            logger.error(f"Failed to reach the WhatsApp API: {e}")
            return DeliveryResult(success=False, error=str(e))

        try:
            data = response.json()
        except ValueError:
            data = {}
        if response.is_error:
            logger.error(f"WhatsApp API error for {payload['to']}: {data}")
            error = (data.get("error") or {}).get("message")
            return DeliveryResult(success=False, error=error or f"WhatsApp API error: {response.status_code}")

        messages = data.get("messages") or [{}]
        return DeliveryResult(success=True, message_id=messages[0].get("id"))


def invitation_template_params(params: NotificationParams) -> dict[str, str]:
    """Body parameters, in the order the approved template declares them."""
    return {
        "guest_name": params.guest_first_name,
        "couple_name": params.couple_name,
        "event_name": params.event_name,
        "event_date": params.event_date,
        "event_time": params.event_time,
        "venue": params.venue,
        "rsvp_url": params.rsvp_url,
        "invite_code": params.invite_code or "",
    }


def confirmation_template_params(guest_first_name: str, couple_name: str, status: str) -> dict[str, str]:
    return {"guest_name": guest_first_name, "couple_name": couple_name, "status": status}
