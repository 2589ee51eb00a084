import logging
from abc import ABC, abstractmethod
from functools import partial
from typing import Any
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.audit.writer import AuditAction, AuditWriter
from src.cache.versioned import VersionedCache
from src.common.best_effort import best_effort
from src.config.database import async_session_manager
from src.models.wedding_config import WeddingConfigEntry
from src.wedding_config.dtos import (
    CLEARABLE_KEYS,
    CONFIG_DESCRIPTIONS,
    DEFAULT_CONFIG,
    ConfigKey,
    ConfigValue,
)
from src.wedding_config.parsing import config_to_rows, parse_config_rows, serialize_value
from src.wedding_config.read_model import SqlConfigReadModel

logger = logging.getLogger(__name__)


class ConfigWriteModel(ABC):
    @abstractmethod
    async def update_config(
        self,
        wedding_id: UUID,
        updates: dict[str, Any],
        user_id: UUID | None = None,
    ) -> ConfigValue:
        """Apply a partial update and return the freshly re-read config.

        Only keys present in ``updates`` are touched. An empty string on a
        clearable key deletes its row.
        """
        raise NotImplementedError

    @abstractmethod
    async def reset_config(self, wedding_id: UUID, user_id: UUID | None = None) -> ConfigValue:
        """Replace every stored row with the defaults."""
        raise NotImplementedError


class SqlConfigWriteModel(ConfigWriteModel):
    async_session_manager = staticmethod(partial(async_session_manager))

    def __init__(
        self,
        cache: VersionedCache,
        audit_writer: AuditWriter,
        session_overwrite: AsyncSession | None = None,
    ) -> None:
        self.cache = cache
        self.audit_writer = audit_writer
        self.session_overwrite = session_overwrite

    async def update_config(
        self,
        wedding_id: UUID,
        updates: dict[str, Any],
        user_id: UUID | None = None,
    ) -> ConfigValue:
        keys = [ConfigKey(key) for key in updates]

        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            existing = await self._get_entries(session, wedding_id, keys)

            for key in keys:
                value = serialize_value(updates[key.value])
                entry = existing.get(key.value)
                if value == "" and key in CLEARABLE_KEYS:
                    if entry is not None:
                        await session.delete(entry)
                    continue
                if entry is None:
                    session.add(
                        WeddingConfigEntry(
                            wedding_id=wedding_id,
                            key=key.value,
                            value=value,
                            description=CONFIG_DESCRIPTIONS.get(key),
                        )
                    )
                else:
                    entry.value = value
            await session.flush()

            config = parse_config_rows(await SqlConfigReadModel.get_raw_rows(session, wedding_id))

        await best_effort("cache bump", self.cache.bump_namespace_version())
        await self.audit_writer.log_action(
            AuditAction.CONFIG_UPDATE,
            {"updates": updates, "updated_keys": [key.value for key in keys]},
            wedding_id=wedding_id,
            user_id=user_id,
        )
        logger.info(f"Updated config keys {[key.value for key in keys]} for wedding {wedding_id}")
        return config

    async def reset_config(self, wedding_id: UUID, user_id: UUID | None = None) -> ConfigValue:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            await session.execute(
                delete(WeddingConfigEntry).where(WeddingConfigEntry.wedding_id == wedding_id)
            )
            for key, value in config_to_rows(DEFAULT_CONFIG).items():
                session.add(
                    WeddingConfigEntry(
                        wedding_id=wedding_id,
                        key=key,
                        value=value,
                        description=CONFIG_DESCRIPTIONS.get(ConfigKey(key)),
                    )
                )
            await session.flush()

        await best_effort("cache bump", self.cache.bump_namespace_version())
        await self.audit_writer.log_action(
            AuditAction.CONFIG_RESET, {"reset_to_defaults": True}, wedding_id=wedding_id, user_id=user_id
        )
        logger.info(f"Reset config to defaults for wedding {wedding_id}")
        return DEFAULT_CONFIG

    @staticmethod
    async def _get_entries(
        session: AsyncSession, wedding_id: UUID, keys: list[ConfigKey]
    ) -> dict[str, WeddingConfigEntry]:
        result = await session.execute(
            select(WeddingConfigEntry).where(
                WeddingConfigEntry.wedding_id == wedding_id,
                WeddingConfigEntry.key.in_([key.value for key in keys]),
            )
        )
        return {entry.key: entry for entry in result.scalars()}
