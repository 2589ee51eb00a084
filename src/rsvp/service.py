"""Public RSVP submission.

The guest-facing caller only ever sees one of a fixed set of messages;
validation details and the reason a code did not resolve stay server side.
"""

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from src.audit.writer import AuditAction, AuditWriter
from src.common.best_effort import best_effort
from src.invitations.dtos import InvitationDTO, InvitationNotFoundError, InvitationStatus, RsvpResponse
from src.invitations.repository.read_models import InvitationReadModel
from src.notifications.messages import rsvp_url
from src.notifications.orchestrator import NotificationOrchestrator, events_of
from src.passes.digital_pass import PassGeneratorBase
from src.rsvp.dtos import (
    ACCEPTED_EMAIL_MESSAGE,
    ACCEPTED_NO_CONTACT_MESSAGE,
    ACCEPTED_PHONE_MESSAGE,
    DECLINED_MESSAGE,
    INVALID_CODE_MESSAGE,
    INVALID_INPUT_MESSAGE,
    SAVE_FAILED_MESSAGE,
    UNEXPECTED_ERROR_MESSAGE,
    RsvpEventStatus,
    RsvpFailure,
    RsvpOutcome,
    RsvpResultDTO,
    RsvpStatusDTO,
    overall_status,
)
from src.rsvp.schemas import RsvpSubmission
from src.rsvp.window import rsvp_closed_reason
from src.rsvp.write_model import RsvpChanges, RsvpWriteModel
from src.wedding_config.read_model import ConfigReadModel

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(UTC)


class RsvpService:
    def __init__(
        self,
        config_read_model: ConfigReadModel,
        read_model: InvitationReadModel,
        write_model: RsvpWriteModel,
        orchestrator: NotificationOrchestrator,
        pass_generator: PassGeneratorBase,
        audit_writer: AuditWriter,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.config_read_model = config_read_model
        self.read_model = read_model
        self.write_model = write_model
        self.orchestrator = orchestrator
        self.pass_generator = pass_generator
        self.audit_writer = audit_writer
        self._clock = clock

    async def submit_rsvp(
        self,
        wedding_id: UUID,
        raw_input: Any,
        user_id: UUID | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> RsvpOutcome:
        try:
            return await self._submit(wedding_id, raw_input, user_id, ip_address, user_agent)
        except Exception:
            logger.exception("Unexpected error while submitting RSVP")
            return RsvpOutcome(success=False, message=UNEXPECTED_ERROR_MESSAGE, failure=RsvpFailure.UNEXPECTED)

    async def _submit(
        self,
        wedding_id: UUID,
        raw_input: Any,
        user_id: UUID | None,
        ip_address: str | None,
        user_agent: str | None,
    ) -> RsvpOutcome:
        try:
            submission = RsvpSubmission.model_validate(raw_input)
        except ValidationError as e:
            logger.info(f"Rejected RSVP input: {e.error_count()} validation errors")
            return RsvpOutcome(success=False, message=INVALID_INPUT_MESSAGE, failure=RsvpFailure.INVALID_INPUT)

        # lookups are tenant scoped, so a code from another wedding is simply not found
        invitation = await self.read_model.get_by_invite_code(wedding_id, submission.invite_code)
        if invitation is None or invitation.wedding_id != wedding_id:
            return RsvpOutcome(success=False, message=INVALID_CODE_MESSAGE, failure=RsvpFailure.NOT_FOUND)

        config = await self.config_read_model.get_config(wedding_id)
        closed_reason = rsvp_closed_reason(config, self._clock())
        if closed_reason:
            return RsvpOutcome(success=False, message=closed_reason, failure=RsvpFailure.CLOSED)

        try:
            await self.write_model.record_response(wedding_id, invitation.uuid, _changes_from(submission))
        except InvitationNotFoundError:
            return RsvpOutcome(success=False, message=INVALID_CODE_MESSAGE, failure=RsvpFailure.NOT_FOUND)
        except SQLAlchemyError:
            logger.exception(f"Failed to save RSVP for invitation {invitation.uuid}")
            return RsvpOutcome(success=False, message=SAVE_FAILED_MESSAGE, failure=RsvpFailure.SAVE_FAILED)

        await self.audit_writer.log_action(
            AuditAction.RSVP_SUBMIT,
            {
                "invitation_id": invitation.uuid,
                "response": submission.response.value,
                "event_count": len(invitation.events),
            },
            wedding_id=wedding_id,
            user_id=user_id,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        if submission.response == RsvpResponse.DECLINED and submission.goodwill_message:
            await self.audit_writer.log_action(
                AuditAction.RSVP_DECLINE_MESSAGE,
                {"invitation_id": invitation.uuid, "message": submission.goodwill_message},
                wedding_id=wedding_id,
                user_id=user_id,
                ip_address=ip_address,
                user_agent=user_agent,
            )

        accepted = submission.response == RsvpResponse.ACCEPTED
        events = events_of(invitation) if accepted else []

        digital_pass = None
        if accepted and events:
            generated = await best_effort(
                "digital pass",
                self.pass_generator.generate(
                    invitation.guest.full_name, invitation.guest.invite_code, invitation.token, events
                ),
            )
            digital_pass = generated.value

        await best_effort(
            "rsvp confirmation",
            self.orchestrator.send_rsvp_confirmation(
                wedding_id,
                invitation,
                accepted,
                preferred_channel=submission.preferred_channel,
                digital_pass=digital_pass,
                email=submission.email,
                phone=submission.phone,
            ),
        )

        profile = await self.read_model.get_wedding_profile(wedding_id)
        return RsvpOutcome(
            success=True,
            message=_success_message(submission, invitation),
            result=RsvpResultDTO(
                status=submission.response,
                guest_name=invitation.guest.full_name,
                events=events,
                rsvp_url=rsvp_url(profile, invitation.token),
                qr_image_url=digital_pass.qr_image_url if digital_pass else None,
            ),
        )

    async def get_rsvp_status(self, wedding_id: UUID, token: str) -> RsvpStatusDTO | None:
        invitation = await self.read_model.get_by_token(wedding_id, token)
        if invitation is None:
            return None
        statuses = [invitation_event.status for invitation_event in invitation.events]
        status = overall_status(statuses)

        qr_image_url = None
        accepted_events = [
            invitation_event.event
            for invitation_event in invitation.events
            if invitation_event.event and invitation_event.status == InvitationStatus.ACCEPTED
        ]
        if status == InvitationStatus.ACCEPTED.value and accepted_events:
            generated = await best_effort(
                "digital pass",
                self.pass_generator.generate(
                    invitation.guest.full_name, invitation.guest.invite_code, invitation.token, accepted_events
                ),
            )
            qr_image_url = generated.value.qr_image_url if generated.ok else None

        return RsvpStatusDTO(
            status=status,
            guest_name=invitation.guest.full_name,
            events=[
                RsvpEventStatus(event=invitation_event.event, status=invitation_event.status)
                for invitation_event in invitation.events
                if invitation_event.event
            ],
            qr_image_url=qr_image_url,
        )


def _changes_from(submission: RsvpSubmission) -> RsvpChanges:
    return RsvpChanges(
        response=submission.response,
        party_size=submission.party_size,
        goodwill_message=submission.goodwill_message,
        dietary_restrictions=submission.dietary_restrictions,
        dietary_information=submission.dietary_information,
        food_choice=submission.food_choice,
        guest_details=[guest.model_dump() for guest in submission.guests] if submission.guests else None,
    )


def _success_message(submission: RsvpSubmission, invitation: InvitationDTO) -> str:
    if submission.response == RsvpResponse.DECLINED:
        return DECLINED_MESSAGE
    if submission.email or invitation.guest.email:
        return ACCEPTED_EMAIL_MESSAGE
    if submission.phone or invitation.guest.phone:
        return ACCEPTED_PHONE_MESSAGE
    return ACCEPTED_NO_CONTACT_MESSAGE
