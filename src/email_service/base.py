import html
from abc import ABC, abstractmethod
from dataclasses import dataclass

from src.common.dates import format_event_date, format_event_time
from src.common.delivery import DeliveryResult
from src.email_service.templates import EmailTemplates
from src.invitations.dtos import EventSummaryDTO
from src.notifications.dtos import NotificationParams
from src.notifications.messages import event_label


@dataclass(frozen=True)
class EmailAttachment:
    filename: str
    content: str  # base64
    content_type: str


@dataclass(frozen=True)
class ConfirmationParams:
    guest_name: str
    couple_name: str
    accepted: bool
    invite_code: str | None = None
    qr_image_url: str | None = None


class EmailServiceBase(ABC):
    @property
    @abstractmethod
    def is_configured(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    async def _send(
        self,
        to_address: str,
        subject: str,
        html_body: str,
        text_body: str,
        attachments: list[EmailAttachment] | None = None,
    ) -> DeliveryResult:
        """Hand one message to the provider. Provider errors come back as a failed result."""
        raise NotImplementedError

    async def send_invitation(
        self,
        to_address: str,
        params: NotificationParams,
        events: list[EventSummaryDTO],
        attachments: list[EmailAttachment] | None = None,
    ) -> DeliveryResult:
        subject, html_body, text_body = render_invitation(params, events)
        return await self._send(
            to_address=to_address,
            subject=subject,
            html_body=html_body,
            text_body=text_body,
            attachments=attachments,
        )

    async def send_rsvp_confirmation(
        self,
        to_address: str,
        params: ConfirmationParams,
        events: list[EventSummaryDTO],
        attachments: list[EmailAttachment] | None = None,
    ) -> DeliveryResult:
        subject, html_body, text_body = render_confirmation(params, events)
        return await self._send(
            to_address=to_address,
            subject=subject,
            html_body=html_body,
            text_body=text_body,
            attachments=attachments,
        )


def _events_html(events: list[EventSummaryDTO]) -> str:
    return "".join(
        EmailTemplates.EVENT_HTML.format(
            event_name=html.escape(event.name),
            event_date=format_event_date(event.starts_at),
            event_time=format_event_time(event.starts_at),
            venue=html.escape(event.venue or ""),
            address=html.escape(event.address or ""),
        )
        for event in events
    )


def _events_text(events: list[EventSummaryDTO]) -> str:
    return "\n".join(
        EmailTemplates.EVENT_TEXT.format(
            event_name=event.name,
            event_date=format_event_date(event.starts_at),
            event_time=format_event_time(event.starts_at),
            venue=event.venue or "",
        )
        for event in events
    )


def render_invitation(params: NotificationParams, events: list[EventSummaryDTO]) -> tuple[str, str, str]:
    subject = EmailTemplates.INVITATION_SUBJECT.format(
        guest_first_name=params.guest_first_name, event_label=event_label(events)
    )
    invite_code_html = (
        EmailTemplates.INVITE_CODE_HTML.format(invite_code=html.escape(params.invite_code))
        if params.invite_code
        else ""
    )
    invite_code_text = f"Your invite code: {params.invite_code}\n" if params.invite_code else ""
    html_body = EmailTemplates.INVITATION_HTML.format(
        guest_name=html.escape(params.guest_name),
        couple_name=html.escape(params.couple_name),
        events_html=_events_html(events),
        rsvp_url=params.rsvp_url,
        invite_code_html=invite_code_html,
    )
    text_body = EmailTemplates.INVITATION_TEXT.format(
        guest_name=params.guest_name,
        couple_name=params.couple_name,
        events_text=_events_text(events),
        rsvp_url=params.rsvp_url,
        invite_code_text=invite_code_text,
    )
    return subject, html_body, text_body


def render_confirmation(params: ConfirmationParams, events: list[EventSummaryDTO]) -> tuple[str, str, str]:
    if params.accepted:
        subject = EmailTemplates.CONFIRMATION_SUBJECT_ACCEPTED.format(couple_name=params.couple_name)
        heading, body = EmailTemplates.ACCEPTED_HEADING, EmailTemplates.ACCEPTED_BODY
    else:
        subject = EmailTemplates.CONFIRMATION_SUBJECT_DECLINED.format(couple_name=params.couple_name)
        heading, body = EmailTemplates.DECLINED_HEADING, EmailTemplates.DECLINED_BODY
        events = []

    pass_html = ""
    if params.accepted and params.qr_image_url:
        pass_html = EmailTemplates.PASS_HTML.format(
            qr_image_url=params.qr_image_url, invite_code=html.escape(params.invite_code or "")
        )
    html_body = EmailTemplates.CONFIRMATION_HTML.format(
        heading=heading,
        guest_name=html.escape(params.guest_name),
        body=body,
        events_html=_events_html(events),
        pass_html=pass_html,
        couple_name=html.escape(params.couple_name),
    )
    text_body = EmailTemplates.CONFIRMATION_TEXT.format(
        guest_name=params.guest_name,
        body=body,
        events_text=_events_text(events),
        couple_name=params.couple_name,
    )
    return subject, html_body, text_body
