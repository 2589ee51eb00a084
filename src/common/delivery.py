from dataclasses import dataclass


@dataclass(frozen=True)
class DeliveryResult:
    """Outcome of one call to an email, SMS or WhatsApp provider."""

    success: bool
    message_id: str | None = None
    error: str | None = None
