from datetime import UTC, datetime, timedelta

from src.invitations.tests.factories import make_guest
from src.models.invitation import Invitation
from src.models.logs import MailLog
from src.notifications.dtos import Channel
from src.notifications.mail_log import MailLogEntry, SqlMailLogStore
from src.notifications.rate_gate import RateGate, start_of_day
from src.notifications.tests.inmemory_models import WEDDING_ID, InMemoryMailLogStore, LoggedSend

NOW = datetime(2026, 6, 1, 15, 30, tzinfo=UTC)
TOKEN = "invitation-token"


def logged(sent_at: datetime, channel: Channel = Channel.EMAIL, token: str = TOKEN) -> LoggedSend:
    return LoggedSend(WEDDING_ID, token, channel, sent_at)


def gate(*rows: LoggedSend) -> RateGate:
    return RateGate(InMemoryMailLogStore(rows=list(rows)), max_per_day=3, clock=lambda: NOW)


async def test_three_sends_today_block_the_fourth():
    rate_gate = gate(*(logged(NOW - timedelta(hours=i)) for i in range(3)))

    assert not await rate_gate.can_send(WEDDING_ID, TOKEN)


async def test_yesterdays_sends_do_not_count():
    rate_gate = gate(
        logged(NOW - timedelta(hours=1)),
        logged(NOW - timedelta(hours=2)),
        logged(start_of_day(NOW) - timedelta(seconds=1)),
    )

    status = await rate_gate.status(WEDDING_ID, TOKEN)

    assert status.sent_today == 2
    assert status.remaining == 1
    assert status.can_send


async def test_other_tokens_and_channels():
    rate_gate = gate(*(logged(NOW, channel=Channel.SMS) for _ in range(3)), logged(NOW, token="other"))

    assert not await rate_gate.can_send(WEDDING_ID, TOKEN)
    assert await rate_gate.can_send(WEDDING_ID, TOKEN, Channel.EMAIL)
    assert not await rate_gate.can_send(WEDDING_ID, TOKEN, Channel.SMS)


async def test_busiest_status_reports_the_channel_closest_to_the_limit():
    rate_gate = gate(
        *(logged(NOW, channel=Channel.EMAIL) for _ in range(2)),
        logged(NOW, channel=Channel.WHATSAPP),
        *(logged(NOW, channel=Channel.SMS) for _ in range(3)),
    )

    status = await rate_gate.busiest_status(WEDDING_ID, TOKEN, [Channel.EMAIL, Channel.WHATSAPP])

    assert status.sent_today == 2
    assert status.can_send
    assert (await rate_gate.busiest_status(WEDDING_ID, TOKEN, [])).sent_today == 6


async def test_window_ends_at_next_utc_midnight():
    status = await gate().status(WEDDING_ID, TOKEN)

    assert status.window_ends_at == datetime(2026, 6, 2, tzinfo=UTC)
    assert status.remaining == 3


async def test_sql_store_counts_todays_rows_for_the_token(db_session, wedding):
    guest = await make_guest(db_session, wedding)
    db_session.add(Invitation(wedding_id=wedding.uuid, guest_id=guest.uuid, token=TOKEN))
    now = datetime.now(UTC)
    db_session.add_all(
        [
            MailLog(wedding_id=wedding.uuid, token=TOKEN, channel=Channel.EMAIL, sent_at=now - timedelta(days=1)),
            MailLog(wedding_id=wedding.uuid, token="someone-else", channel=Channel.EMAIL, sent_at=now),
        ]
    )
    await db_session.flush()
    store = SqlMailLogStore(session_overwrite=db_session)
    for _ in range(3):
        await store.record(
            MailLogEntry(wedding_id=wedding.uuid, token=TOKEN, channel=Channel.SMS, recipient="+15557654321", success=False)
        )

    rate_gate = RateGate(store, max_per_day=3)

    assert await store.count_since(wedding.uuid, TOKEN, start_of_day(now)) == 3
    assert not await rate_gate.can_send(wedding.uuid, TOKEN)
    assert await rate_gate.can_send(wedding.uuid, TOKEN, Channel.EMAIL)
