"""Digital access pass shown to guests who accepted.

The pass is a self-contained HTML page embedding a check-in QR code.
"""

import asyncio
import base64
import html
from abc import ABC, abstractmethod
from dataclasses import dataclass

from src.common.dates import format_event_date, format_event_time
from src.config.settings import settings
from src.invitations.dtos import EventSummaryDTO
from src.passes.qr import checkin_url, make_qr_png, png_data_url


@dataclass(frozen=True)
class DigitalPass:
    qr_image_url: str
    pass_html: str
    qr_png: bytes

    @property
    def qr_base64(self) -> str:
        return base64.b64encode(self.qr_png).decode("ascii")

    @property
    def html_base64(self) -> str:
        return base64.b64encode(self.pass_html.encode("utf-8")).decode("ascii")


class PassGeneratorBase(ABC):
    @abstractmethod
    async def generate(
        self,
        guest_name: str,
        invite_code: str | None,
        token: str,
        events: list[EventSummaryDTO],
    ) -> DigitalPass:
        raise NotImplementedError


class PassGenerator(PassGeneratorBase):
    def __init__(self, base_url: str):
        self.base_url = base_url

    async def generate(
        self,
        guest_name: str,
        invite_code: str | None,
        token: str,
        events: list[EventSummaryDTO],
    ) -> DigitalPass:
        # image encoding is CPU bound
        png = await asyncio.to_thread(make_qr_png, checkin_url(self.base_url, token), 8, 2)
        qr_image_url = png_data_url(png)
        return DigitalPass(
            qr_image_url=qr_image_url,
            pass_html=render_pass_html(guest_name, invite_code, events, qr_image_url),
            qr_png=png,
        )


def render_pass_html(
    guest_name: str, invite_code: str | None, events: list[EventSummaryDTO], qr_image_url: str
) -> str:
    rows = "\n".join(
        f"""
        <div class="event">
            <h3>{html.escape(event.name)}</h3>
            <p>{format_event_date(event.starts_at)} &middot; {format_event_time(event.starts_at)}</p>
            <p>{html.escape(event.venue or "")}</p>
            <p class="address">{html.escape(event.address or "")}</p>
        </div>"""
        for event in events
    )
    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Wedding Pass - {html.escape(guest_name)}</title>
    <style>
        body {{ font-family: Georgia, serif; background: #faf7f2; color: #333; }}
        .pass {{ max-width: 420px; margin: 24px auto; background: #fff; border-radius: 12px; padding: 24px; text-align: center; }}
        .code {{ font-family: monospace; font-size: 20px; letter-spacing: 3px; }}
        .event {{ border-top: 1px solid #eee; padding-top: 12px; }}
        .address {{ color: #888; font-size: 13px; }}
    </style>
</head>
<body>
    <div class="pass">
        <h1>{html.escape(guest_name)}</h1>
        <img src="{qr_image_url}" alt="Check-in QR code" width="200" height="200">
        <p class="code">{html.escape(invite_code or "")}</p>
        {rows}
        <p>Show this pass at the entrance.</p>
    </div>
</body>
</html>
"""


def get_pass_generator() -> PassGeneratorBase:
    return PassGenerator(base_url=settings.frontend_url)
