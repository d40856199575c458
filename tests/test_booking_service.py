import threading
from unittest.mock import Mock

import pytest
from slack_sdk.errors import SlackApiError

from models import ChannelKind, ReservationStatus
from services.booking_service import BookingService
from services.notification_dispatcher import NotificationDispatcher
from services.slack_service import SlackMessageLifecycleManager
from utils.constants import ErrorMessages

from conftest import CABIN_ID, SHIP_ID, at, discord_setting, slack_bot_setting


@pytest.fixture
def dispatcher(store, slack_client_factory, slack_webhook_factory, http_session):
    return NotificationDispatcher(
        store=store,
        slack_client_factory=slack_client_factory,
        slack_webhook_factory=slack_webhook_factory,
        http_session=http_session,
    )


@pytest.fixture
def booking(store, runner, dispatcher, slack_client_factory):
    lifecycle = SlackMessageLifecycleManager(store, client_factory=slack_client_factory)
    return BookingService(store, runner, dispatcher=dispatcher, lifecycle=lifecycle)


class TestBook:

    def test_success_dispatches_to_all_channels(self, booking, store, runner, slack_client, http_session):
        store.add_notification_setting(SHIP_ID, slack_bot_setting())
        store.add_notification_setting(SHIP_ID, discord_setting())

        response = booking.book(CABIN_ID, at(10), at(11), "주간 회의", created_by="U1")
        assert runner.join(timeout=5)

        assert response.ok
        assert response.reservation.status is ReservationStatus.CONFIRMED
        slack_client.chat_postMessage.assert_called_once()
        http_session.post.assert_called_once()
        records = store.get_outbound_messages(response.reservation.id)
        assert [record.channel for record in records] == [ChannelKind.SLACK]

    def test_response_does_not_wait_for_notifications(self, store, runner):
        store.add_notification_setting(SHIP_ID, discord_setting())
        release = threading.Event()
        started = threading.Event()
        dispatcher = Mock()

        def slow_dispatch(*args, **kwargs):
            started.set()
            release.wait(timeout=5)

        dispatcher.dispatch.side_effect = slow_dispatch
        booking = BookingService(store, runner, dispatcher=dispatcher)

        response = booking.book(CABIN_ID, at(10), at(11), "회의")

        assert response.ok
        assert started.wait(timeout=5)
        assert not runner.join(timeout=0.05)
        release.set()
        assert runner.join(timeout=5)
        dispatcher.dispatch.assert_called_once()

    def test_notification_failure_does_not_change_result(self, booking, store, runner, slack_client):
        store.add_notification_setting(SHIP_ID, slack_bot_setting())
        slack_client.chat_postMessage.side_effect = SlackApiError("fail", {"ok": False, "error": "channel_not_found"})

        response = booking.book(CABIN_ID, at(10), at(11), "회의")
        assert runner.join(timeout=5)

        assert response.ok
        assert store.get_reservation(response.reservation.id).is_confirmed

    def test_dispatcher_crash_is_absorbed(self, store, runner):
        store.add_notification_setting(SHIP_ID, discord_setting())
        dispatcher = Mock()
        dispatcher.dispatch.side_effect = RuntimeError("boom")
        booking = BookingService(store, runner, dispatcher=dispatcher)

        response = booking.book(CABIN_ID, at(10), at(11), "회의")

        assert runner.join(timeout=5)
        assert response.ok

    def test_no_enabled_channel_skips_dispatch(self, store, runner):
        dispatcher = Mock()
        booking = BookingService(store, runner, dispatcher=dispatcher)

        booking.book(CABIN_ID, at(10), at(11), "회의")
        assert runner.join(timeout=5)

        dispatcher.dispatch.assert_not_called()

    def test_validation_failure_is_reported_without_dispatch(self, store):
        runner = Mock()
        booking = BookingService(store, runner)

        response = booking.book(CABIN_ID, at(11), at(10), "회의")

        assert not response.ok
        assert response.message == ErrorMessages.INVALID_TIME_RANGE
        runner.spawn.assert_not_called()

    def test_conflict_message_is_passed_through(self, booking, store, runner):
        booking.book(CABIN_ID, at(10), at(11), "회의")

        response = booking.book(CABIN_ID, at(10, 30), at(12), "겹침")

        assert not response.ok
        assert response.message == "해당 시간은 이미 다른 예약과 겹칩니다."

    def test_storage_failure_returns_generic_message(self, store):
        store.create_confirmed_reservation = Mock(side_effect=RuntimeError("db down"))
        booking = BookingService(store, Mock())

        response = booking.book(CABIN_ID, at(10), at(11), "회의")

        assert not response.ok
        assert response.message == ErrorMessages.RESERVATION_CREATE_FAILED

    def test_english_locale_link_label(self, store, runner):
        store.add_notification_setting(SHIP_ID, discord_setting())
        dispatcher = Mock()
        booking = BookingService(store, runner, dispatcher=dispatcher)

        booking.book(CABIN_ID, at(10), at(11), "회의", locale="en")
        assert runner.join(timeout=5)

        message_context = dispatcher.dispatch.call_args[0][1]
        assert message_context.locale == "en"
        assert message_context.link_label == "View status"
        assert message_context.room_name == "회의실 A"


class TestCancel:

    def test_cancel_retracts_slack_message(self, booking, store, runner, slack_client):
        store.add_notification_setting(SHIP_ID, slack_bot_setting())
        created = booking.book(CABIN_ID, at(10), at(11), "회의")
        assert runner.join(timeout=5)

        response = booking.cancel(created.reservation.id)
        assert runner.join(timeout=5)

        assert response.ok
        assert response.reservation.status is ReservationStatus.CANCELLED
        slack_client.chat_delete.assert_called_once_with(channel="C123", ts="1700000000.000100")

    def test_cancel_unknown_reservation(self, booking):
        response = booking.cancel("missing")

        assert not response.ok
        assert response.message == ErrorMessages.UNKNOWN_RESERVATION


class TestStoppedRunner:

    def test_book_and_cancel_succeed_after_runner_shutdown(self, booking, store, runner, slack_client):
        store.add_notification_setting(SHIP_ID, slack_bot_setting())
        runner.shutdown()

        created = booking.book(CABIN_ID, at(10), at(11), "회의")
        cancelled = booking.cancel(created.reservation.id)

        assert created.ok
        assert cancelled.ok
        assert cancelled.reservation.status is ReservationStatus.CANCELLED
        assert [r.id for r in store.list_reservations(CABIN_ID)] == [created.reservation.id]
        slack_client.chat_postMessage.assert_not_called()


class TestCabinStatus:

    def test_status_reflects_bookings(self, booking):
        booking.book(CABIN_ID, at(10), at(11), "회의")

        result = booking.get_cabin_status(CABIN_ID, now=at(10, 30))

        assert result.active.purpose == "회의"
