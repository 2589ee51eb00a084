from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from src.audit.writer import get_audit_writer
from src.cache import get_versioned_cache
from src.common.tenant import get_wedding_id
from src.invitations.repository.read_models import get_invitation_read_model
from src.notifications.orchestrator import get_notification_orchestrator
from src.passes.digital_pass import get_pass_generator
from src.rsvp.dtos import RsvpFailure, RsvpOutcome, RsvpStatusDTO
from src.rsvp.schemas import (
    RsvpEventResponse,
    RsvpResultResponse,
    RsvpStatusResponse,
    RsvpSubmitResponse,
)
from src.rsvp.service import RsvpService
from src.rsvp.write_model import SqlRsvpWriteModel
from src.wedding_config.read_model import get_config_read_model

router = APIRouter()

RSVP_URL = "/api/v1/rsvp"
RSVP_STATUS_URL = "/api/v1/rsvp/{token}"

FAILURE_STATUS_CODES = {
    RsvpFailure.INVALID_INPUT: 400,
    RsvpFailure.NOT_FOUND: 404,
    RsvpFailure.CLOSED: 403,
    RsvpFailure.SAVE_FAILED: 500,
    RsvpFailure.UNEXPECTED: 500,
}


def get_rsvp_service() -> RsvpService:
    """Dependency to get the RSVP service instance."""
    config_read_model = get_config_read_model()
    return RsvpService(
        config_read_model=config_read_model,
        read_model=get_invitation_read_model(),
        write_model=SqlRsvpWriteModel(config_read_model=config_read_model, cache=get_versioned_cache()),
        orchestrator=get_notification_orchestrator(),
        pass_generator=get_pass_generator(),
        audit_writer=get_audit_writer(),
    )


def _client_ip(request: Request) -> str | None:
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.client.host if request.client else None


def _to_response(outcome: RsvpOutcome) -> RsvpSubmitResponse:
    result = None
    if outcome.result:
        result = RsvpResultResponse(
            status=outcome.result.status,
            guest_name=outcome.result.guest_name,
            events=[
                RsvpEventResponse(
                    name=event.name,
                    starts_at=event.starts_at.isoformat() if event.starts_at else None,
                    venue=event.venue,
                    address=event.address,
                )
                for event in outcome.result.events
            ],
            rsvp_url=outcome.result.rsvp_url,
            qr_image_url=outcome.result.qr_image_url,
        )
    return RsvpSubmitResponse(success=outcome.success, message=outcome.message, result=result)


@router.post(RSVP_URL, response_model=RsvpSubmitResponse)
async def submit_rsvp(
    request: Request,
    wedding_id: UUID = Depends(get_wedding_id),
    service: RsvpService = Depends(get_rsvp_service),
):
    """
    Submit a guest's response for every event on their invitation.

    The body is validated here rather than by FastAPI so a malformed form
    gets the same generic message as any other failure.
    """
    try:
        payload = await request.json()
    except ValueError:
        payload = None
    outcome = await service.submit_rsvp(
        wedding_id,
        payload,
        ip_address=_client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )
    response = _to_response(outcome)
    if outcome.success:
        return response
    return JSONResponse(status_code=FAILURE_STATUS_CODES[outcome.failure], content=response.model_dump(mode="json"))


def _to_status_response(status: RsvpStatusDTO) -> RsvpStatusResponse:
    return RsvpStatusResponse(
        status=status.status,
        guest_name=status.guest_name,
        events=[
            RsvpEventResponse(
                name=item.event.name,
                starts_at=item.event.starts_at.isoformat() if item.event.starts_at else None,
                venue=item.event.venue,
                address=item.event.address,
                status=item.status.value,
            )
            for item in status.events
        ],
        qr_image_url=status.qr_image_url,
    )


@router.get(RSVP_STATUS_URL, response_model=RsvpStatusResponse)
async def get_rsvp_status(
    token: str,
    wedding_id: UUID = Depends(get_wedding_id),
    service: RsvpService = Depends(get_rsvp_service),
) -> RsvpStatusResponse:
    status = await service.get_rsvp_status(wedding_id, token)
    if status is None:
        raise HTTPException(status_code=404, detail="Invitation not found")
    return _to_status_response(status)
