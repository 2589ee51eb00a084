from sqlalchemy import select

from src.audit.tests.inmemory_writer import InMemoryAuditWriter
from src.audit.writer import AuditAction
from src.cache.tests.inmemory_backend import InMemoryCacheBackend
from src.cache.versioned import VersionedCache
from src.models.wedding_config import WeddingConfigEntry
from src.wedding_config.dtos import DEFAULT_CONFIG
from src.wedding_config.features.update_config.write_model import SqlConfigWriteModel
from src.wedding_config.read_model import SqlConfigReadModel


def make_write_model(db_session):
    cache = VersionedCache(InMemoryCacheBackend())
    audit = InMemoryAuditWriter()
    return SqlConfigWriteModel(cache=cache, audit_writer=audit, session_overwrite=db_session), cache, audit


async def test_update_touches_only_given_keys(db_session, wedding):
    write_model, cache, audit = make_write_model(db_session)

    await write_model.update_config(wedding.uuid, {"plus_ones_enabled": True, "max_party_size": 4})
    config = await write_model.update_config(wedding.uuid, {"max_party_size": 6})

    assert config.plus_ones_enabled is True
    assert config.max_party_size == 6
    assert await cache.current_version() == "3"
    entry = audit.last(AuditAction.CONFIG_UPDATE)
    assert entry.details == {"updates": {"max_party_size": 6}, "updated_keys": ["max_party_size"]}


async def test_update_is_visible_to_next_read(db_session, wedding):
    write_model, _, _ = make_write_model(db_session)
    read_model = SqlConfigReadModel(session_overwrite=db_session)

    await write_model.update_config(wedding.uuid, {"rsvp_enabled": False})

    assert (await read_model.get_config(wedding.uuid)).rsvp_enabled is False


async def test_empty_string_deletes_clearable_key(db_session, wedding):
    write_model, _, _ = make_write_model(db_session)

    await write_model.update_config(wedding.uuid, {"rsvp_cutoff_date": "2026-09-01"})
    config = await write_model.update_config(wedding.uuid, {"rsvp_cutoff_date": ""})

    assert config.rsvp_cutoff_date is None
    rows = await db_session.execute(
        select(WeddingConfigEntry).where(WeddingConfigEntry.key == "rsvp_cutoff_date")
    )
    assert rows.scalars().all() == []


async def test_stored_rows_carry_descriptions(db_session, wedding):
    write_model, _, _ = make_write_model(db_session)

    await write_model.update_config(wedding.uuid, {"notification_sms_enabled": True})

    entry = (await db_session.execute(select(WeddingConfigEntry))).scalar_one()
    assert entry.value == "true"
    assert entry.description == "Send invitations by SMS"


async def test_reset_restores_defaults(db_session, wedding):
    write_model, _, audit = make_write_model(db_session)
    read_model = SqlConfigReadModel(session_overwrite=db_session)
    await write_model.update_config(wedding.uuid, {"plus_ones_enabled": True, "rsvp_footer": "Bye"})

    result = await write_model.reset_config(wedding.uuid)

    assert result == DEFAULT_CONFIG
    assert await read_model.get_config(wedding.uuid) == DEFAULT_CONFIG
    assert AuditAction.CONFIG_RESET in audit.actions()


async def test_missing_wedding_resolves_to_defaults():
    assert await SqlConfigReadModel().get_config(None) == DEFAULT_CONFIG
