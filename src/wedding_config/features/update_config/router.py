from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from src.audit.writer import get_audit_writer
from src.cache import get_versioned_cache
from src.common.tenant import get_wedding_id
from src.wedding_config.dtos import MAX_PARTY_SIZE_LIMIT, MIN_PARTY_SIZE, ConfigValue
from src.wedding_config.features.update_config.write_model import (
    ConfigWriteModel,
    SqlConfigWriteModel,
)
from src.wedding_config.read_model import ConfigReadModel, get_config_read_model

router = APIRouter()

CONFIG_URL = "/api/v1/admin/config"
RESET_CONFIG_URL = "/api/v1/admin/config/reset"


class ConfigResponse(BaseModel):
    plus_ones_enabled: bool
    max_party_size: int
    allow_guest_plus_ones: bool
    rsvp_enabled: bool
    rsvp_cutoff_date: str | None
    rsvp_cutoff_timezone: str
    access_code_enabled: bool
    access_code_required_seating: bool
    access_code_required_schedule: bool
    access_code_required_event_details: bool
    food_choices_enabled: bool
    food_choices_required: bool
    dress_code_message: str | None
    age_restriction_message: str | None
    rsvp_footer: str | None
    registry_empty_message: str | None
    notification_email_enabled: bool
    notification_whatsapp_enabled: bool
    notification_sms_enabled: bool

    @classmethod
    def from_config(cls, config: ConfigValue) -> "ConfigResponse":
        return cls(**config.as_dict())


class ConfigUpdateRequest(BaseModel):
    """Partial update: omitted fields are left untouched."""

    plus_ones_enabled: bool | None = None
    max_party_size: int | None = Field(default=None, ge=MIN_PARTY_SIZE, le=MAX_PARTY_SIZE_LIMIT)
    allow_guest_plus_ones: bool | None = None
    rsvp_enabled: bool | None = None
    rsvp_cutoff_date: str | None = Field(default=None, pattern=r"^(\d{4}-\d{2}-\d{2})?$")
    rsvp_cutoff_timezone: str | None = Field(default=None, max_length=64)
    access_code_enabled: bool | None = None
    access_code_required_seating: bool | None = None
    access_code_required_schedule: bool | None = None
    access_code_required_event_details: bool | None = None
    food_choices_enabled: bool | None = None
    food_choices_required: bool | None = None
    dress_code_message: str | None = Field(default=None, max_length=500)
    age_restriction_message: str | None = Field(default=None, max_length=500)
    rsvp_footer: str | None = Field(default=None, max_length=1000)
    registry_empty_message: str | None = Field(default=None, max_length=500)
    notification_email_enabled: bool | None = None
    notification_whatsapp_enabled: bool | None = None
    notification_sms_enabled: bool | None = None


def get_config_write_model() -> ConfigWriteModel:
    """Dependency to get config write model instance."""
    return SqlConfigWriteModel(cache=get_versioned_cache(), audit_writer=get_audit_writer())


@router.get(CONFIG_URL, response_model=ConfigResponse)
async def get_config(
    wedding_id: UUID = Depends(get_wedding_id),
    read_model: ConfigReadModel = Depends(get_config_read_model),
) -> ConfigResponse:
    return ConfigResponse.from_config(await read_model.get_config(wedding_id))


@router.patch(CONFIG_URL, response_model=ConfigResponse)
async def update_config(
    request: ConfigUpdateRequest,
    wedding_id: UUID = Depends(get_wedding_id),
    write_model: ConfigWriteModel = Depends(get_config_write_model),
) -> ConfigResponse:
    """
    Update selected configuration keys.

    Send an empty string for an optional text setting to clear it.
    """
    updates = request.model_dump(exclude_unset=True)
    # null means "leave alone" for flags and numbers
    updates = {key: value for key, value in updates.items() if value is not None}
    if not updates:
        raise HTTPException(status_code=400, detail="No configuration keys to update")
    config = await write_model.update_config(wedding_id=wedding_id, updates=updates)
    return ConfigResponse.from_config(config)


@router.post(RESET_CONFIG_URL, response_model=ConfigResponse)
async def reset_config(
    wedding_id: UUID = Depends(get_wedding_id),
    write_model: ConfigWriteModel = Depends(get_config_write_model),
) -> ConfigResponse:
    return ConfigResponse.from_config(await write_model.reset_config(wedding_id=wedding_id))
