import logging
from typing import Protocol

import httpx

from src.common.delivery import DeliveryResult
from src.email_service.base import EmailAttachment, EmailServiceBase

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"


class ResendEmailConfig(Protocol):
    resend_api_key: str
    emails_from: str


class ResendEmailService(EmailServiceBase):
    def __init__(
        self,
        config: ResendEmailConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._config = config
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self._config.resend_api_key)

    async def _send(
        self,
        to_address: str,
        subject: str,
        html_body: str,
        text_body: str,
        attachments: list[EmailAttachment] | None = None,
    ) -> DeliveryResult:
        payload = {
            "from": self._config.emails_from,
            "to": [to_address],
            "subject": subject,
            "html": html_body,
            "text": text_body,
        }
        if attachments:
            payload["attachments"] = [
                {
                    "filename": attachment.filename,
                    "content": attachment.content,
                    "content_type": attachment.content_type,
                }
                for attachment in attachments
            ]

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(
                    RESEND_API_URL,
                    headers={
                        "Authorization": f"Bearer {self._config.resend_api_key}",
                        "Content-Type": "application/json",
                    },
                    json=payload,
                )
                response.raise_for_status()
                return DeliveryResult(success=True, message_id=response.json().get("id"))
        except httpx.HTTPStatusError as e:
            logger.error(f"Resend rejected email to {to_address}: {e.response.status_code} {e.response.text}")
            return DeliveryResult(success=False, error=f"Resend API error: {e.response.status_code}")
        except httpx.HTTPError as e:
            logger.error(f"Failed to reach Resend: {e}")
            return DeliveryResult(success=False, error=str(e))
