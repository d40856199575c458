from datetime import datetime
from unittest.mock import Mock

import pytest

from models import Cabin, NotificationSetting, Reservation, ReservationStatus, Ship
from services.memory_store import InMemoryReservationStore
from utils.background import BackgroundTaskRunner
from utils.date_utils import KST

SHIP_ID = "ship-1"
CABIN_ID = "cabin-1"


def at(hour, minute=0, day=15):
    """2025-01-{day} HH:MM (KST)"""
    return datetime(2025, 1, day, hour, minute, tzinfo=KST)


def make_reservation(reservation_id, start, end, status=ReservationStatus.CONFIRMED,
                     created_at=None, cabin_id=CABIN_ID, purpose="회의"):
    return Reservation(
        id=reservation_id,
        cabin_id=cabin_id,
        start_time=start,
        end_time=end,
        purpose=purpose,
        status=status,
        created_at=created_at or at(8),
    )


def slack_bot_setting(**overrides):
    values = dict(
        channel="slack",
        enabled=True,
        slack_bot_token="xoxb-test",
        slack_channel_id="C123",
    )
    values.update(overrides)
    return NotificationSetting(**values)


def slack_webhook_setting(**overrides):
    values = dict(channel="slack", enabled=True, webhook_url="https://hooks.slack.com/services/T/B/X")
    values.update(overrides)
    return NotificationSetting(**values)


def discord_setting(**overrides):
    values = dict(channel="discord", enabled=True, webhook_url="https://discord.com/api/webhooks/1/abc")
    values.update(overrides)
    return NotificationSetting(**values)


@pytest.fixture(autouse=True)
def no_site_url(monkeypatch):
    monkeypatch.delenv("SITE_URL", raising=False)


@pytest.fixture
def store():
    store = InMemoryReservationStore()
    store.add_ship(Ship(id=SHIP_ID, public_id="abc123", name="1호선"))
    store.add_cabin(Cabin(id=CABIN_ID, ship_id=SHIP_ID, name="회의실 A"))
    return store


@pytest.fixture
def runner():
    runner = BackgroundTaskRunner(max_workers=2)
    yield runner
    runner.shutdown(wait_for_tasks=True)


@pytest.fixture
def slack_client():
    client = Mock()
    client.chat_postMessage.return_value = {"ok": True, "ts": "1700000000.000100"}
    return client


@pytest.fixture
def slack_client_factory(slack_client):
    return Mock(return_value=slack_client)


@pytest.fixture
def slack_webhook():
    webhook = Mock()
    webhook.send.return_value = Mock(status_code=200, body="ok")
    return webhook


@pytest.fixture
def slack_webhook_factory(slack_webhook):
    return Mock(return_value=slack_webhook)


@pytest.fixture
def http_session():
    session = Mock()
    session.post.return_value = Mock(ok=True, status_code=204)
    return session
