from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from src.common.tenant import get_wedding_id
from src.invitations.dtos import InvitationNotFoundError, NoValidEventsError
from src.invitations.repository.read_models import InvitationReadModel, get_invitation_read_model
from src.notifications.dtos import (
    BulkNotificationResult,
    Channel,
    ChannelResult,
    OrchestrationResult,
    RateLimitExceededError,
)
from src.notifications.orchestrator import NotificationOrchestrator, enabled_channels, get_notification_orchestrator
from src.notifications.rate_gate import RateGate, get_rate_gate
from src.wedding_config.read_model import ConfigReadModel, get_config_read_model

router = APIRouter()

SEND_INVITATION_URL = "/api/v1/admin/invitations/{invitation_id}/send"
SEND_BULK_URL = "/api/v1/admin/invitations/send-bulk"
RATE_LIMIT_URL = "/api/v1/admin/invitations/{invitation_id}/rate-limit"


class SendOptions(BaseModel):
    channels: list[Channel] | None = None
    ignore_rate_limit: bool = False
    confirm_bypass: bool = False


def require_bypass_confirmation(options: SendOptions) -> None:
    # bypassing the daily limit is an explicit admin decision
    if options.ignore_rate_limit and not options.confirm_bypass:
        raise HTTPException(status_code=400, detail="ignore_rate_limit requires confirm_bypass=true")


class SendInvitationRequest(SendOptions):
    event_ids: list[UUID] | None = None


class SendBulkRequest(SendOptions):
    invitation_ids: list[UUID] = Field(min_length=1)
    event_ids: list[UUID] | None = None


class ChannelResultResponse(BaseModel):
    channel: Channel
    success: bool
    message_id: str | None = None
    error: str | None = None
    skipped: bool = False
    skip_reason: str | None = None

    @classmethod
    def from_result(cls, result: ChannelResult) -> "ChannelResultResponse":
        return cls(
            channel=result.channel,
            success=result.success,
            message_id=result.message_id,
            error=result.error,
            skipped=result.skipped,
            skip_reason=result.skip_reason,
        )


class OrchestrationResponse(BaseModel):
    invitation_id: UUID
    guest_id: UUID | None
    guest_name: str
    results: list[ChannelResultResponse]
    error: str | None = None
    all_successful: bool
    any_successful: bool

    @classmethod
    def from_result(cls, result: OrchestrationResult) -> "OrchestrationResponse":
        return cls(
            invitation_id=result.invitation_id,
            guest_id=result.guest_id,
            guest_name=result.guest_name,
            results=[ChannelResultResponse.from_result(r) for r in result.results],
            error=result.error,
            all_successful=result.all_successful,
            any_successful=result.any_successful,
        )


class BulkResponse(BaseModel):
    total: int
    successful: int
    failed: int
    results: list[OrchestrationResponse]

    @classmethod
    def from_result(cls, result: BulkNotificationResult) -> "BulkResponse":
        return cls(
            total=result.total,
            successful=result.successful,
            failed=result.failed,
            results=[OrchestrationResponse.from_result(r) for r in result.results],
        )


class RateLimitResponse(BaseModel):
    sent_today: int
    max_per_day: int
    remaining: int
    can_send: bool
    window_ends_at: datetime


@router.post(SEND_INVITATION_URL, response_model=OrchestrationResponse)
async def send_invitation(
    invitation_id: UUID,
    request: SendInvitationRequest,
    wedding_id: UUID = Depends(get_wedding_id),
    orchestrator: NotificationOrchestrator = Depends(get_notification_orchestrator),
) -> OrchestrationResponse:
    """
    Send an invitation over the wedding's enabled channels.

    Email goes out on its own; WhatsApp and SMS share the guest's phone
    number and only one of them is used.
    """
    require_bypass_confirmation(request)
    try:
        result = await orchestrator.send_invitation_notification(
            wedding_id,
            invitation_id,
            event_ids=request.event_ids,
            channels=request.channels,
            ignore_rate_limit=request.ignore_rate_limit,
        )
    except (InvitationNotFoundError, NoValidEventsError) as e:
        raise HTTPException(status_code=404, detail=str(e))
    except RateLimitExceededError as e:
        raise HTTPException(status_code=429, detail=str(e))
    return OrchestrationResponse.from_result(result)


@router.post(SEND_BULK_URL, response_model=BulkResponse)
async def send_bulk(
    request: SendBulkRequest,
    wedding_id: UUID = Depends(get_wedding_id),
    orchestrator: NotificationOrchestrator = Depends(get_notification_orchestrator),
) -> BulkResponse:
    require_bypass_confirmation(request)
    result = await orchestrator.send_bulk(
        wedding_id,
        request.invitation_ids,
        event_ids=request.event_ids,
        channels=request.channels,
        ignore_rate_limit=request.ignore_rate_limit,
    )
    return BulkResponse.from_result(result)


@router.get(RATE_LIMIT_URL, response_model=RateLimitResponse)
async def get_rate_limit(
    invitation_id: UUID,
    channel: Channel | None = None,
    wedding_id: UUID = Depends(get_wedding_id),
    read_model: InvitationReadModel = Depends(get_invitation_read_model),
    rate_gate: RateGate = Depends(get_rate_gate),
    config_read_model: ConfigReadModel = Depends(get_config_read_model),
) -> RateLimitResponse:
    """Today's usage for one channel, or for the busiest enabled channel when none is given."""
    invitation = await read_model.get_invitation(wedding_id, invitation_id, event_ids=None)
    if invitation is None:
        raise HTTPException(status_code=404, detail=str(InvitationNotFoundError(invitation_id)))
    if channel is None:
        config = await config_read_model.get_config(wedding_id)
        status = await rate_gate.busiest_status(wedding_id, invitation.token, sorted(enabled_channels(config)))
    else:
        status = await rate_gate.status(wedding_id, invitation.token, channel)
    return RateLimitResponse(
        sent_today=status.sent_today,
        max_per_day=status.max_per_day,
        remaining=status.remaining,
        can_send=status.can_send,
        window_ends_at=status.window_ends_at,
    )
