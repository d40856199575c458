import logging
from unittest.mock import Mock

import pytest
from slack_sdk.errors import SlackApiError

from exceptions import (
    ConflictError,
    NotificationConfigMissing,
    SlackNotificationError,
    StorageError,
    ValidationError,
)
from models import ChannelKind, NotificationOperation
from utils.constants import ErrorMessages
from utils.error_handler import ErrorHandler, handle_exceptions


class TestHandleNotificationError:

    @pytest.mark.parametrize("operation, reason", [
        (NotificationOperation.SEND, "send_error"),
        (NotificationOperation.UPDATE, "update_error"),
        (NotificationOperation.DELETE, "delete_error"),
        ("archive", "unknown"),
    ])
    def test_reason_by_operation(self, operation, reason):
        failure = ErrorHandler.handle_notification_error(ChannelKind.SLACK, operation, RuntimeError("x"))

        assert failure.reason == reason
        assert failure.success is False
        assert failure.channel == "slack"

    def test_missing_config_is_logged_at_info(self, caplog):
        error = NotificationConfigMissing("discord", "send")

        with caplog.at_level(logging.INFO):
            failure = ErrorHandler.handle_notification_error(ChannelKind.DISCORD, NotificationOperation.SEND, error)

        assert failure.reason == "no_config"
        assert all(record.levelno < logging.ERROR for record in caplog.records)

    def test_slack_error_code_is_logged(self, caplog):
        error = SlackApiError("fail", {"ok": False, "error": "channel_not_found"})

        with caplog.at_level(logging.ERROR):
            failure = ErrorHandler.handle_notification_error("slack", "send", error, context="reservation r1")

        assert failure.error is error
        assert "channel_not_found" in caplog.text
        assert "reservation r1" in caplog.text

    def test_wrapped_error_includes_original(self, caplog):
        original = ConnectionError("reset")
        error = SlackNotificationError("delete", "network", original)

        with caplog.at_level(logging.ERROR):
            ErrorHandler.handle_notification_error("slack", "delete", error)

        assert "reset" in caplog.text


class TestHandleSlackCommandError:

    def test_user_error_shows_message(self):
        send = Mock()

        ErrorHandler.handle_slack_command_error("U1", ConflictError("겹칩니다"), send)

        send.assert_called_once_with("U1", "겹칩니다")

    def test_storage_error(self):
        send = Mock()

        ErrorHandler.handle_slack_command_error("U1", StorageError("down"), send)

        assert send.call_args[0][1].startswith(ErrorMessages.STATUS_QUERY_FAILED)

    def test_send_failure_is_swallowed(self):
        send = Mock(side_effect=RuntimeError("slack down"))

        ErrorHandler.handle_slack_command_error("U1", ValueError("bad"), send)

        send.assert_called_once()


class TestHandleExceptions:

    def test_business_errors_propagate(self):
        @handle_exceptions()
        def fail():
            raise ValidationError("bad")

        with pytest.raises(ValidationError):
            fail()

    def test_unexpected_error_becomes_storage_error(self):
        @handle_exceptions(default_message="조회 실패")
        def fail():
            raise KeyError("id")

        with pytest.raises(StorageError, match="조회 실패"):
            fail()
