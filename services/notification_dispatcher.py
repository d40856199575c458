# services/notification_dispatcher.py
# 활성화된 모든 채널에 예약 알림을 서로 독립적으로 전송합니다.

from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Optional

import requests

from models.notification import (
    BotCredential,
    ChannelConfig,
    ChannelKind,
    NotificationConfig,
    NotificationOperation,
    NotificationState,
    OutboundMessageRecord,
    ReservationMessageContext,
    WebhookOnly,
)
from utils.error_handler import ErrorHandler
from utils.logger import LoggerMixin
from views.notification_view import build_discord_text, build_slack_text

from . import discord_service, slack_service
from .storage import ReservationStore


class NotificationDispatcher(LoggerMixin):
    """
    예약 알림 전송기

    채널마다 별도 스레드에서 전송하므로 한 채널의 실패나 지연이 다른 채널에
    영향을 주지 않습니다. 모든 실패는 ErrorHandler로 기록되고 흡수되며, 재시도하지
    않습니다. 봇 자격 증명으로 보낸 Slack 메시지는 나중에 삭제할 수 있도록
    예약 ID와 채널 종류를 키로 기록합니다.
    """

    def __init__(
        self,
        store: Optional[ReservationStore] = None,
        slack_client_factory: slack_service.SlackClientFactory = slack_service.default_client_factory,
        slack_webhook_factory: slack_service.WebhookClientFactory = slack_service.default_webhook_factory,
        http_session: Optional[requests.Session] = None,
        site_url: Optional[str] = None,
    ):
        """
        Args:
            store: 전송 메시지 기록을 저장할 저장소 (없으면 기록하지 않음)
            slack_client_factory: 봇 토큰으로 Slack WebClient를 만드는 함수
            slack_webhook_factory: URL로 Slack WebhookClient를 만드는 함수
            http_session: Discord 전송에 사용할 requests 세션
            site_url: 딥링크 기본 주소 (없으면 SITE_URL 환경변수)
        """
        self.store = store
        self.slack_client_factory = slack_client_factory
        self.slack_webhook_factory = slack_webhook_factory
        self.http_session = http_session
        self.site_url = site_url

    def dispatch(
        self,
        config: NotificationConfig,
        context: ReservationMessageContext,
        reservation_id: Optional[str] = None,
    ) -> Dict[ChannelKind, NotificationState]:
        """
        활성화된 모든 채널에 알림을 전송합니다. 예외를 던지지 않습니다.

        Returns:
            Dict[ChannelKind, NotificationState]: 채널별 최종 상태 (진단용)
        """
        channels = list(config.enabled_channels())
        if not channels:
            self.log_info("활성화된 알림 채널이 없어 전송하지 않습니다", reservation_id=reservation_id)
            return {}

        with ThreadPoolExecutor(max_workers=len(channels), thread_name_prefix="dispatch") as executor:
            futures = {
                kind: executor.submit(self._send_isolated, kind, channel_config, context, reservation_id)
                for kind, channel_config in channels
            }
            outcomes = {kind: future.result() for kind, future in futures.items()}

        self.log_info("알림 전송 완료",
                      reservation_id=reservation_id,
                      outcomes={kind.value: state.value for kind, state in outcomes.items()})
        return outcomes

    def _send_isolated(
        self,
        kind: ChannelKind,
        channel_config: ChannelConfig,
        context: ReservationMessageContext,
        reservation_id: Optional[str],
    ) -> NotificationState:
        try:
            if kind is ChannelKind.SLACK:
                self._send_slack(channel_config, context, reservation_id)
            elif kind is ChannelKind.DISCORD:
                self._send_discord(channel_config, context)
            else:
                raise ValueError(f"지원하지 않는 채널: {kind}")
        except Exception as e:
            ErrorHandler.handle_notification_error(kind, NotificationOperation.SEND, e,
                                                   context=f"reservation {reservation_id}")
            return NotificationState.SEND_FAILED
        return NotificationState.SENT

    def _send_slack(self, channel_config: ChannelConfig, context: ReservationMessageContext,
                    reservation_id: Optional[str]) -> None:
        text = build_slack_text(context, self.site_url)

        if isinstance(channel_config, WebhookOnly):
            slack_service.post_via_webhook(self.slack_webhook_factory(channel_config.url), text)
            self.log_info("Slack webhook 메시지 전송 성공", reservation_id=reservation_id)
            return

        if not isinstance(channel_config, BotCredential):
            raise ValueError(f"Slack 설정 형식을 알 수 없습니다: {type(channel_config).__name__}")

        client = self.slack_client_factory(channel_config.token)
        try:
            ts = slack_service.post_message(client, channel_config.channel_id, text)
        except Exception as e:
            if not channel_config.webhook_url:
                raise
            ErrorHandler.handle_notification_error(ChannelKind.SLACK, NotificationOperation.SEND, e,
                                                   context="bot send failed, falling back to webhook")
            slack_service.post_via_webhook(self.slack_webhook_factory(channel_config.webhook_url), text)
            self.log_info("Slack webhook 대체 전송 성공 (ts 없음)", reservation_id=reservation_id)
            return

        self.log_info("Slack API 메시지 전송 성공", reservation_id=reservation_id, ts=ts)
        if reservation_id and self.store is not None:
            self._record(OutboundMessageRecord(
                reservation_id=reservation_id,
                channel=ChannelKind.SLACK,
                message_id=ts,
                channel_id=channel_config.channel_id,
            ))

    def _send_discord(self, channel_config: ChannelConfig, context: ReservationMessageContext) -> None:
        if not isinstance(channel_config, WebhookOnly):
            raise ValueError(f"Discord는 웹훅 설정만 지원합니다: {type(channel_config).__name__}")
        discord_service.post_to_discord(
            channel_config.url,
            build_discord_text(context, self.site_url),
            session=self.http_session,
        )
        self.log_info("Discord webhook 메시지 전송 성공")

    def _record(self, record: OutboundMessageRecord) -> None:
        # 메시지는 이미 전송되었으므로 기록 실패는 전송 상태를 바꾸지 않습니다.
        try:
            self.store.save_outbound_message(record)
        except Exception as e:
            self.log_error(f"메시지 ts 저장 실패: {e}", reservation_id=record.reservation_id)
