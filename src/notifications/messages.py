from src.common.dates import format_event_date, format_event_time
from src.config.settings import settings
from src.invitations.dtos import EventSummaryDTO, InvitationDTO, WeddingProfileDTO
from src.notifications.dtos import NotificationParams

DEFAULT_COUPLE_NAME = "The Couple"


def event_label(events: list[EventSummaryDTO]) -> str:
    if len(events) == 1:
        return events[0].name
    return f"{len(events)} Events"


def rsvp_url(profile: WeddingProfileDTO, token: str) -> str:
    base_url = (profile.website_url or settings.frontend_url).rstrip("/")
    return f"{base_url}/rsvp?token={token}"


def build_notification_params(
    invitation: InvitationDTO, events: list[EventSummaryDTO], profile: WeddingProfileDTO
) -> NotificationParams:
    first = events[0] if events else None
    starts_at = first.starts_at if first else None
    return NotificationParams(
        guest_name=invitation.guest.full_name,
        guest_first_name=invitation.guest.first_name,
        couple_name=profile.couple_name or DEFAULT_COUPLE_NAME,
        event_name=event_label(events) if events else "",
        event_date=format_event_date(starts_at),
        event_time=format_event_time(starts_at),
        venue=(first.venue if first else None) or "",
        address=(first.address if first else None) or "",
        rsvp_url=rsvp_url(profile, invitation.token),
        invite_code=invitation.guest.invite_code,
        website_url=profile.website_url,
    )
