from unittest.mock import Mock

from models import BotCredential, ChannelKind, Disabled, NotificationConfig, WebhookOnly
from services.notification_config import NotificationConfigResolver

from conftest import CABIN_ID, SHIP_ID, discord_setting, slack_bot_setting, slack_webhook_setting


class TestResolve:

    def test_no_settings_is_all_disabled(self, store):
        config = NotificationConfigResolver(store).resolve(CABIN_ID)

        assert config == NotificationConfig.disabled()
        assert not config.has_enabled_channel

    def test_unknown_cabin_is_all_disabled(self, store):
        config = NotificationConfigResolver(store).resolve("missing")

        assert not config.has_enabled_channel

    def test_slack_bot_credentials(self, store):
        store.add_notification_setting(SHIP_ID, slack_bot_setting())

        config = NotificationConfigResolver(store).resolve(CABIN_ID)

        slack = config.get(ChannelKind.SLACK)
        assert isinstance(slack, BotCredential)
        assert slack.can_delete
        assert slack.channel_id == "C123"
        assert isinstance(config.get(ChannelKind.DISCORD), Disabled)

    def test_bot_credential_keeps_webhook_as_fallback(self, store):
        store.add_notification_setting(SHIP_ID, slack_bot_setting(webhook_url="https://hooks.slack.com/x"))

        slack = NotificationConfigResolver(store).resolve(CABIN_ID).get(ChannelKind.SLACK)

        assert slack.webhook_url == "https://hooks.slack.com/x"

    def test_slack_webhook_only_cannot_delete(self, store):
        store.add_notification_setting(SHIP_ID, slack_webhook_setting())

        slack = NotificationConfigResolver(store).resolve(CABIN_ID).get(ChannelKind.SLACK)

        assert isinstance(slack, WebhookOnly)
        assert not slack.can_delete

    def test_token_without_channel_falls_back_to_webhook(self, store):
        store.add_notification_setting(
            SHIP_ID,
            slack_bot_setting(slack_channel_id=None, webhook_url="https://hooks.slack.com/x"),
        )

        slack = NotificationConfigResolver(store).resolve(CABIN_ID).get(ChannelKind.SLACK)

        assert slack == WebhookOnly(url="https://hooks.slack.com/x")

    def test_incomplete_slack_setting_is_disabled(self, store):
        store.add_notification_setting(SHIP_ID, slack_bot_setting(slack_channel_id=None))

        config = NotificationConfigResolver(store).resolve(CABIN_ID)

        assert not config.get(ChannelKind.SLACK).enabled

    def test_disabled_row_is_ignored(self, store):
        store.add_notification_setting(SHIP_ID, discord_setting(enabled=False))

        config = NotificationConfigResolver(store).resolve(CABIN_ID)

        assert not config.get(ChannelKind.DISCORD).enabled

    def test_enabled_row_wins_over_disabled_duplicate(self, store):
        store.add_notification_setting(SHIP_ID, discord_setting(enabled=False))
        store.add_notification_setting(SHIP_ID, discord_setting())

        config = NotificationConfigResolver(store).resolve(CABIN_ID)

        assert isinstance(config.get(ChannelKind.DISCORD), WebhookOnly)

    def test_unknown_channel_is_skipped(self, store):
        store.add_notification_setting(SHIP_ID, discord_setting(channel="teams"))

        config = NotificationConfigResolver(store).resolve(CABIN_ID)

        assert not config.has_enabled_channel

    def test_lookup_failure_is_all_disabled(self):
        broken = Mock()
        broken.get_cabin.side_effect = RuntimeError("timeout")

        config = NotificationConfigResolver(broken).resolve(CABIN_ID)

        assert config == NotificationConfig.disabled()

    def test_settings_failure_is_all_disabled(self, store):
        store.get_notification_settings = Mock(side_effect=RuntimeError("timeout"))

        config = NotificationConfigResolver(store).resolve(CABIN_ID)

        assert not config.has_enabled_channel


class TestReservationContext:

    def test_context_uses_cabin_name(self, store):
        store.add_notification_setting(SHIP_ID, discord_setting())

        context = NotificationConfigResolver(store).get_reservation_context(CABIN_ID)

        assert context.room_name == "회의실 A"
        assert context.ship.public_id == "abc123"
        assert context.config.has_enabled_channel

    def test_unknown_cabin_has_no_context(self, store):
        assert NotificationConfigResolver(store).get_reservation_context("missing") is None

    def test_credentials_are_masked_in_repr(self):
        assert "xoxb" not in repr(BotCredential(token="xoxb-secret", channel_id="C1"))
