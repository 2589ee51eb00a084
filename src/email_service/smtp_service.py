import asyncio
import base64
import logging
import smtplib
import uuid
from email.mime.application import MIMEApplication
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from src.common.delivery import DeliveryResult
from src.config.settings import settings
from src.email_service.base import EmailAttachment, EmailServiceBase

logger = logging.getLogger(__name__)


class SMTPEmailService(EmailServiceBase):
    def __init__(self):
        self.host = settings.smtp_host
        self.port = settings.smtp_port
        self.username = settings.smtp_user
        self.password = settings.smtp_password
        self.from_address = settings.emails_from

    @property
    def is_configured(self) -> bool:
        return bool(self.host)

    def _create_message(
        self,
        to_address: str,
        subject: str,
        html_body: str,
        text_body: str,
        attachments: list[EmailAttachment] | None = None,
    ) -> MIMEMultipart:
        body = MIMEMultipart("alternative")
        body.attach(MIMEText(text_body, "plain"))
        body.attach(MIMEText(html_body, "html"))

        msg = MIMEMultipart("mixed")
        msg["Subject"] = subject
        msg["From"] = self.from_address
        msg["To"] = to_address
        msg["Message-ID"] = f"<{uuid.uuid4()}@{self.host or 'localhost'}>"
        msg.attach(body)

        for attachment in attachments or []:
            _, _, subtype = attachment.content_type.partition("/")
            part = MIMEApplication(base64.b64decode(attachment.content), _subtype=subtype or "octet-stream")
            part.add_header("Content-Disposition", "attachment", filename=attachment.filename)
            msg.attach(part)

        return msg

    def _deliver(self, msg: MIMEMultipart) -> None:
        with smtplib.SMTP(self.host, self.port) as server:
            if self.username and self.password:
                server.starttls()
                server.login(self.username, self.password)
            server.send_message(msg)

    async def _send(
        self,
        to_address: str,
        subject: str,
        html_body: str,
        text_body: str,
        attachments: list[EmailAttachment] | None = None,
    ) -> DeliveryResult:
        msg = self._create_message(to_address, subject, html_body, text_body, attachments)
        try:
            await asyncio.to_thread(self._deliver, msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"SMTP delivery to {to_address} failed: {e}")
            return DeliveryResult(success=False, error=str(e))
        return DeliveryResult(success=True, message_id=msg["Message-ID"])
