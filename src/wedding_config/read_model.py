from abc import ABC, abstractmethod
from functools import partial
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.database import async_session_manager
from src.models.wedding_config import WeddingConfigEntry
from src.wedding_config.dtos import DEFAULT_CONFIG, ConfigValue
from src.wedding_config.parsing import parse_config_rows


class ConfigReadModel(ABC):
    @abstractmethod
    async def get_config(self, wedding_id: UUID | None) -> ConfigValue:
        """Resolve a wedding's configuration.

        Never raises for a missing wedding: without an id the hard-coded
        defaults are returned. Not cached, so admin changes apply to the
        very next request.
        """
        raise NotImplementedError


class SqlConfigReadModel(ConfigReadModel):
    async_session_manager = staticmethod(partial(async_session_manager))

    def __init__(self, session_overwrite: AsyncSession | None = None) -> None:
        self.session_overwrite = session_overwrite

    async def get_config(self, wedding_id: UUID | None) -> ConfigValue:
        if wedding_id is None:
            return DEFAULT_CONFIG
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            rows = await self.get_raw_rows(session, wedding_id)
        return parse_config_rows(rows)

    @staticmethod
    async def get_raw_rows(session: AsyncSession, wedding_id: UUID) -> dict[str, str]:
        result = await session.execute(
            select(WeddingConfigEntry.key, WeddingConfigEntry.value).where(
                WeddingConfigEntry.wedding_id == wedding_id
            )
        )
        return {key: value for key, value in result.all()}


def get_config_read_model() -> ConfigReadModel:
    return SqlConfigReadModel()
