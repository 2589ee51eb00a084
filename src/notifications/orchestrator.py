"""Multi-channel invitation delivery.

Email is sent independently of the phone channels. For a guest with a
phone number, at most one of WhatsApp and SMS is attempted: WhatsApp when
the number is registered there, SMS otherwise. A failure on one channel is
recorded in the result and never stops the others.
"""

import logging
from collections.abc import Awaitable, Callable, Iterable
from uuid import UUID

from src.audit.writer import AuditAction, AuditWriter, get_audit_writer
from src.common.best_effort import best_effort
from src.common.delivery import DeliveryResult
from src.common.phone import format_phone_e164, is_valid_e164
from src.config.settings import settings
from src.email_service import ConfirmationParams, EmailAttachment, EmailServiceBase, get_email_service
from src.email_service.ics import ics_attachment
from src.invitations.dtos import (
    EventSummaryDTO,
    InvitationDTO,
    InvitationNotFoundError,
    NoValidEventsError,
)
from src.invitations.repository.read_models import InvitationReadModel, get_invitation_read_model
from src.notifications.dtos import (
    PHONE_CHANNELS,
    BulkNotificationResult,
    Channel,
    ChannelResult,
    OrchestrationResult,
    RateLimitExceededError,
)
from src.notifications.mail_log import MailLogEntry, MailLogStore, get_mail_log_store
from src.notifications.messages import DEFAULT_COUPLE_NAME, build_notification_params
from src.notifications.rate_gate import RateGate, get_rate_gate
from src.notifications.registration import WhatsAppRegistrationChecker, get_registration_checker
from src.passes.digital_pass import DigitalPass
from src.sms_service import (
    SmsServiceBase,
    format_confirmation_sms,
    format_invitation_sms,
    get_sms_service,
)
from src.wedding_config.dtos import ConfigValue
from src.wedding_config.read_model import ConfigReadModel, get_config_read_model
from src.whatsapp_service import (
    WhatsAppServiceBase,
    confirmation_template_params,
    get_whatsapp_service,
    invitation_template_params,
)

logger = logging.getLogger(__name__)

NO_EMAIL = "Guest has no email address"
NO_PHONE = "Guest has no phone number"
NOT_ON_WHATSAPP = "Phone number is not registered on WhatsApp"

Send = Callable[[], Awaitable[DeliveryResult]]


def enabled_channels(config: ConfigValue) -> set[Channel]:
    channels = set()
    if config.notification_email_enabled:
        channels.add(Channel.EMAIL)
    if config.notification_whatsapp_enabled:
        channels.add(Channel.WHATSAPP)
    if config.notification_sms_enabled:
        channels.add(Channel.SMS)
    return channels


class NotificationOrchestrator:
    def __init__(
        self,
        config_read_model: ConfigReadModel,
        read_model: InvitationReadModel,
        email_service: EmailServiceBase,
        sms_service: SmsServiceBase,
        whatsapp_service: WhatsAppServiceBase,
        registration: WhatsAppRegistrationChecker,
        rate_gate: RateGate,
        mail_log: MailLogStore,
        audit_writer: AuditWriter,
        default_country_code: str = "+1",
        invitation_template: str = "wedding_invitation",
        confirmation_template: str = "rsvp_confirmation",
    ):
        self.config_read_model = config_read_model
        self.read_model = read_model
        self.email_service = email_service
        self.sms_service = sms_service
        self.whatsapp_service = whatsapp_service
        self.registration = registration
        self.rate_gate = rate_gate
        self.mail_log = mail_log
        self.audit_writer = audit_writer
        self.default_country_code = default_country_code
        self.invitation_template = invitation_template
        self.confirmation_template = confirmation_template

    async def send_invitation_notification(
        self,
        wedding_id: UUID,
        invitation_id: UUID,
        event_ids: list[UUID] | None = None,
        channels: Iterable[Channel] | None = None,
        ignore_rate_limit: bool = False,
        user_id: UUID | None = None,
    ) -> OrchestrationResult:
        """Send one invitation over every enabled channel.

        ``channels`` overrides the wedding's notification settings. Raises
        :class:`RateLimitExceededError` when every channel that would have
        been attempted is over today's limit.
        """
        if channels is None:
            config = await self.config_read_model.get_config(wedding_id)
            enabled = enabled_channels(config)
        else:
            enabled = set(channels)

        invitation = await self.read_model.get_invitation(wedding_id, invitation_id, event_ids=event_ids or None)
        if invitation is None:
            raise InvitationNotFoundError(invitation_id)
        events = events_of(invitation)
        if not events:
            raise NoValidEventsError(invitation_id)

        profile = await self.read_model.get_wedding_profile(wedding_id)
        params = build_notification_params(invitation, events, profile)
        guest = invitation.guest

        async def dispatch(channel: Channel, recipient: str, send: Send) -> ChannelResult:
            return await self._dispatch_logged(
                wedding_id, invitation.token, channel, recipient, send, ignore_rate_limit
            )

        results: list[ChannelResult] = []
        if Channel.EMAIL in enabled:
            if guest.email:
                attachment = ics_attachment(events, params.rsvp_url, params.couple_name)
                results.append(
                    await dispatch(
                        Channel.EMAIL,
                        guest.email,
                        lambda: self.email_service.send_invitation(
                            guest.email, params, events, [attachment] if attachment else None
                        ),
                    )
                )
            else:
                results.append(ChannelResult.skip(Channel.EMAIL, NO_EMAIL))

        phone_channels = [channel for channel in PHONE_CHANNELS if channel in enabled]
        if phone_channels:
            phone, phone_results = self._resolve_phone(guest.phone, phone_channels)
            results += phone_results
            if phone:
                channel = await self._pick_phone_channel(phone, enabled)
                if channel == Channel.WHATSAPP:
                    results.append(
                        await dispatch(
                            Channel.WHATSAPP,
                            phone,
                            lambda: self.whatsapp_service.send_template(
                                phone, self.invitation_template, invitation_template_params(params)
                            ),
                        )
                    )
                elif channel == Channel.SMS:
                    results.append(
                        await dispatch(
                            Channel.SMS, phone, lambda: self.sms_service.send_text(phone, format_invitation_sms(params))
                        )
                    )
                else:
                    results.append(ChannelResult.skip(Channel.WHATSAPP, NOT_ON_WHATSAPP))

        attempted = [result for result in results if not result.skipped]
        rate_limited = bool(attempted) and all(result.rate_limited for result in attempted)

        await self.audit_writer.log_action(
            AuditAction.NOTIFICATION_SEND,
            {
                "invitation_id": invitation.uuid,
                "event_count": len(events),
                "channels": [result.channel.value for result in results],
                "results": [
                    {"channel": result.channel.value, "success": result.success, "skipped": result.skipped}
                    for result in results
                ],
                "ignore_rate_limit": ignore_rate_limit,
                "rate_limited": rate_limited,
            },
            wedding_id=wedding_id,
            user_id=user_id,
        )
        if rate_limited:
            raise RateLimitExceededError(invitation.token, self.rate_gate.max_per_day)
        return OrchestrationResult(
            invitation_id=invitation.uuid,
            guest_id=guest.uuid,
            guest_name=guest.full_name,
            results=results,
        )

    async def send_bulk(
        self,
        wedding_id: UUID,
        invitation_ids: list[UUID],
        event_ids: list[UUID] | None = None,
        channels: Iterable[Channel] | None = None,
        ignore_rate_limit: bool = False,
        user_id: UUID | None = None,
    ) -> BulkNotificationResult:
        """Send invitations one after another; a failing invitation does not stop the batch."""
        channels = list(channels) if channels is not None else None
        results = []
        for invitation_id in invitation_ids:
            try:
                result = await self.send_invitation_notification(
                    wedding_id,
                    invitation_id,
                    event_ids=event_ids,
                    channels=channels,
                    ignore_rate_limit=ignore_rate_limit,
                    user_id=user_id,
                )
            except Exception as e:
                logger.warning(f"Sending invitation {invitation_id} failed: {e}")
                result = OrchestrationResult(
                    invitation_id=invitation_id,
                    guest_id=None,
                    guest_name="Unknown",
                    error=str(e),
                )
            results.append(result)
        return BulkNotificationResult(results=results)

    async def send_rsvp_confirmation(
        self,
        wedding_id: UUID,
        invitation: InvitationDTO,
        accepted: bool,
        preferred_channel: Channel | None = None,
        digital_pass: DigitalPass | None = None,
        email: str | None = None,
        phone: str | None = None,
    ) -> list[ChannelResult]:
        """Confirm an RSVP on one channel: email first, then the guest's preference, then phone fallback.

        Confirmations are neither rate limited nor counted against the daily limit.
        """
        profile = await self.read_model.get_wedding_profile(wedding_id)
        couple_name = profile.couple_name or DEFAULT_COUPLE_NAME
        guest = invitation.guest
        email = email or guest.email
        phone = phone or guest.phone
        events = events_of(invitation)

        if email:
            params = ConfirmationParams(
                guest_name=guest.first_name,
                couple_name=couple_name,
                accepted=accepted,
                invite_code=guest.invite_code,
                qr_image_url=digital_pass.qr_image_url if digital_pass else None,
            )
            results = [
                await self._attempt(
                    Channel.EMAIL,
                    lambda: self.email_service.send_rsvp_confirmation(
                        email, params, events, _pass_attachments(digital_pass) if accepted else None
                    ),
                )
            ]
        elif phone:
            results = await self._confirm_by_phone(phone, guest.first_name, couple_name, accepted, preferred_channel)
        else:
            results = []

        await self.audit_writer.log_action(
            AuditAction.RSVP_CONFIRMATION_SEND,
            {
                "invitation_id": invitation.uuid,
                "accepted": accepted,
                "results": [{"channel": result.channel.value, "success": result.success} for result in results],
            },
            wedding_id=wedding_id,
        )
        return results

    async def _confirm_by_phone(
        self,
        raw_phone: str,
        first_name: str,
        couple_name: str,
        accepted: bool,
        preferred_channel: Channel | None,
    ) -> list[ChannelResult]:
        channels = [preferred_channel] if preferred_channel in PHONE_CHANNELS else list(PHONE_CHANNELS)
        phone, failures = self._resolve_phone(raw_phone, channels[:1])
        if not phone:
            return failures

        registered = await self.registration.is_registered(phone)
        if registered and preferred_channel != Channel.SMS:
            status = "confirmed" if accepted else "declined"
            return [
                await self._attempt(
                    Channel.WHATSAPP,
                    lambda: self.whatsapp_service.send_template(
                        phone,
                        self.confirmation_template,
                        confirmation_template_params(first_name, couple_name, status),
                    ),
                )
            ]
        return [
            await self._attempt(
                Channel.SMS,
                lambda: self.sms_service.send_text(phone, format_confirmation_sms(first_name, couple_name, accepted)),
            )
        ]

    def _resolve_phone(
        self, raw_phone: str | None, channels: list[Channel]
    ) -> tuple[str | None, list[ChannelResult]]:
        """The E.164 number to send to, or the skip/failure result of each channel."""
        if not raw_phone:
            return None, [ChannelResult.skip(channel, NO_PHONE) for channel in channels]
        phone = format_phone_e164(raw_phone, self.default_country_code)
        if not is_valid_e164(phone):
            error = f"Invalid phone number: {raw_phone}"
            return None, [ChannelResult.failure(channel, error) for channel in channels]
        return phone, []

    async def _pick_phone_channel(self, phone: str, enabled: set[Channel]) -> Channel | None:
        whatsapp = Channel.WHATSAPP in enabled
        sms = Channel.SMS in enabled
        if whatsapp:
            if await self.registration.is_registered(phone):
                return Channel.WHATSAPP
            return Channel.SMS if sms else None
        return Channel.SMS if sms else None

    async def _dispatch_logged(
        self,
        wedding_id: UUID,
        token: str,
        channel: Channel,
        recipient: str,
        send: Send,
        ignore_rate_limit: bool,
    ) -> ChannelResult:
        if not ignore_rate_limit:
            try:
                allowed = await self.rate_gate.can_send(wedding_id, token, channel)
            except Exception as e:
                logger.exception(f"Rate limit check for {channel.value} failed")
                return ChannelResult.failure(channel, str(e))
            if not allowed:
                error = str(RateLimitExceededError(token, self.rate_gate.max_per_day))
                return ChannelResult(channel=channel, success=False, error=error, rate_limited=True)

        result = await self._attempt(channel, send)
        await best_effort(
            f"mail log {channel.value}",
            self.mail_log.record(
                MailLogEntry(
                    wedding_id=wedding_id,
                    token=token,
                    channel=channel,
                    recipient=recipient,
                    success=result.success,
                    message_id=result.message_id,
                    error=result.error,
                )
            ),
        )
        return result

    @staticmethod
    async def _attempt(channel: Channel, send: Send) -> ChannelResult:
        try:
            delivery = await send()
        except Exception as e:
            logger.exception(f"Sending via {channel.value} raised")
            return ChannelResult.failure(channel, str(e))
        if not delivery.success:
            logger.warning(f"Sending via {channel.value} failed: {delivery.error}")
        return ChannelResult(
            channel=channel,
            success=delivery.success,
            message_id=delivery.message_id,
            error=delivery.error,
        )


def _pass_attachments(digital_pass: DigitalPass | None) -> list[EmailAttachment] | None:
    if digital_pass is None:
        return None
    return [
        EmailAttachment(filename="wedding-pass.html", content=digital_pass.html_base64, content_type="text/html"),
        EmailAttachment(filename="qr-code.png", content=digital_pass.qr_base64, content_type="image/png"),
    ]


def events_of(invitation: InvitationDTO) -> list[EventSummaryDTO]:
    return [invitation_event.event for invitation_event in invitation.events if invitation_event.event]


def get_notification_orchestrator() -> NotificationOrchestrator:
    whatsapp_service = get_whatsapp_service()
    return NotificationOrchestrator(
        config_read_model=get_config_read_model(),
        read_model=get_invitation_read_model(),
        email_service=get_email_service(),
        sms_service=get_sms_service(),
        whatsapp_service=whatsapp_service,
        registration=get_registration_checker(whatsapp_service),
        rate_gate=get_rate_gate(),
        mail_log=get_mail_log_store(),
        audit_writer=get_audit_writer(),
        default_country_code=settings.default_country_code,
        invitation_template=settings.whatsapp_invitation_template,
        confirmation_template=settings.whatsapp_confirmation_template,
    )
