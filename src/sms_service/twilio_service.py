import logging
from typing import Protocol

import httpx

from src.common.delivery import DeliveryResult
from src.notifications.dtos import NotificationParams
from src.sms_service.base import SmsServiceBase

logger = logging.getLogger(__name__)

TWILIO_API_URL = "https://api.twilio.com/2010-04-01/Accounts/{account_sid}/Messages.json"


class TwilioConfig(Protocol):
    twilio_account_sid: str
    twilio_auth_token: str
    twilio_phone_number: str
    twilio_messaging_service_sid: str


class TwilioSmsService(SmsServiceBase):
    def __init__(self, config: TwilioConfig, transport: httpx.AsyncBaseTransport | None = None):
        self._config = config
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(
            self._config.twilio_account_sid
            and self._config.twilio_auth_token
            and (self._config.twilio_phone_number or self._config.twilio_messaging_service_sid)
        )

    async def send_text(self, to: str, body: str) -> DeliveryResult:
        if not self._config.twilio_account_sid or not self._config.twilio_auth_token:
            return DeliveryResult(success=False, error="Twilio API credentials not configured")

        form = {"To": to, "Body": body}
        # a messaging service takes precedence over a single sender number
        if self._config.twilio_messaging_service_sid:
            form["MessagingServiceSid"] = self._config.twilio_messaging_service_sid
        elif self._config.twilio_phone_number:
            form["From"] = self._config.twilio_phone_number
        else:
            return DeliveryResult(success=False, error="Twilio sender not configured")

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(
                    TWILIO_API_URL.format(account_sid=self._config.twilio_account_sid),
                    auth=(self._config.twilio_account_sid, self._config.twilio_auth_token),
                    data=form,
                )
        except httpx.HTTPError as e:
            logger.error(f"Failed to reach Twilio: {e}")
            return DeliveryResult(success=False, error=str(e))

        data = _json_or_empty(response)
        if response.is_error:
            logger.error(f"Twilio rejected SMS to {to}: {data}")
            return DeliveryResult(
                success=False, error=data.get("message") or f"Twilio API error: {response.status_code}"
            )
        return DeliveryResult(success=True, message_id=data.get("sid"))


def _json_or_empty(response: httpx.Response) -> dict:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def format_invitation_sms(params: NotificationParams) -> str:
    lines = [
        f"Hi {params.guest_first_name}!",
        "",
        f"You're invited to {params.couple_name}'s {params.event_name}",
        f"{params.event_date} at {params.event_time}",
    ]
    if params.venue:
        lines.append(params.venue)
    lines += ["", f"RSVP: {params.rsvp_url}"]
    if params.invite_code:
        lines.append(f"Code: {params.invite_code}")
    return "\n".join(lines)


def format_confirmation_sms(guest_first_name: str, couple_name: str, accepted: bool) -> str:
    if accepted:
        return f"Hi {guest_first_name}! Your RSVP for {couple_name}'s wedding is confirmed. See you there!"
    return f"Hi {guest_first_name}, thank you for letting {couple_name} know you can't make it."
