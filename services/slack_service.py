# services/slack_service.py
# Slack API와 통신하는 알림 전송/수정/삭제 로직을 담당합니다.

from typing import Callable, Optional

from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError
from slack_sdk.webhook import WebhookClient

from config import AppConfig
from exceptions import SlackNotificationError
from models.notification import (
    BotCredential,
    ChannelKind,
    DeleteResult,
    NotificationOperation,
    RetractionSummary,
)
from utils.constants import NotificationReasons
from utils.error_handler import ErrorHandler
from utils.logger import LoggerMixin, get_logger

from .notification_config import NotificationConfigResolver
from .storage import ReservationStore

logger = get_logger(__name__)

SlackClientFactory = Callable[[str], WebClient]
WebhookClientFactory = Callable[[str], WebhookClient]


def default_client_factory(token: str) -> WebClient:
    return WebClient(token=token, timeout=int(AppConfig.HTTP_TIMEOUT))


def default_webhook_factory(url: str) -> WebhookClient:
    return WebhookClient(url=url, timeout=int(AppConfig.HTTP_TIMEOUT))


def post_message(client: WebClient, channel_id: str, text: str) -> str:
    """
    봇 토큰으로 채널에 메시지를 전송하고 메시지 ts를 반환합니다.

    Raises:
        SlackNotificationError: 전송 실패 또는 ts 없는 응답
    """
    try:
        response = client.chat_postMessage(channel=channel_id, text=text)
    except SlackApiError as e:
        error_code = e.response.get("error")
        if error_code == "channel_not_found":
            logger.error(f"채널을 찾을 수 없습니다. channel_id: {channel_id}")
        raise SlackNotificationError(NotificationOperation.SEND.value, str(error_code), e)

    ts = response.get("ts")
    if not ts:
        raise SlackNotificationError(NotificationOperation.SEND.value, "응답에 메시지 ts가 없습니다")
    return ts


def post_via_webhook(webhook: WebhookClient, text: str) -> None:
    """
    Incoming webhook으로 메시지를 전송합니다. 웹훅은 메시지 식별자를 돌려주지 않습니다.

    Raises:
        SlackNotificationError: HTTP 200이 아닌 응답
    """
    response = webhook.send(text=text)
    if response.status_code != 200:
        raise SlackNotificationError(
            NotificationOperation.SEND.value,
            f"Slack error {response.status_code}: {response.body}",
        )


def update_message(client: WebClient, channel_id: str, ts: str, text: str) -> None:
    try:
        client.chat_update(channel=channel_id, ts=ts, text=text)
    except SlackApiError as e:
        raise SlackNotificationError(NotificationOperation.UPDATE.value, str(e.response.get("error")), e)


def delete_message(client: WebClient, channel_id: str, ts: str) -> None:
    try:
        client.chat_delete(channel=channel_id, ts=ts)
    except SlackApiError as e:
        raise SlackNotificationError(NotificationOperation.DELETE.value, str(e.response.get("error")), e)


class SlackMessageLifecycleManager(LoggerMixin):
    """
    이미 전송된 Slack 메시지를 수정/삭제합니다.

    삭제 가능 여부는 설정된 자격 증명 종류(BotCredential)로만 결정됩니다.
    웹훅만 설정된 채널은 외부 호출 없이 no_slack_config를 반환합니다.
    """

    def __init__(
        self,
        store: ReservationStore,
        resolver: Optional[NotificationConfigResolver] = None,
        client_factory: SlackClientFactory = default_client_factory,
    ):
        self.store = store
        self.resolver = resolver or NotificationConfigResolver(store)
        self.client_factory = client_factory

    def _bot_credential(self, cabin_id: str) -> Optional[BotCredential]:
        slack_config = self.resolver.resolve(cabin_id).get(ChannelKind.SLACK)
        return slack_config if isinstance(slack_config, BotCredential) else None

    def delete_message(self, cabin_id: str, message_id: str, channel_id: Optional[str] = None) -> DeleteResult:
        """
        예약 알림 메시지를 삭제합니다.

        Args:
            cabin_id: 예약된 선실 ID (선박 설정 조회용)
            message_id: Slack 메시지 ts
            channel_id: 메시지가 전송된 채널 (없으면 현재 설정의 채널)

        Returns:
            DeleteResult: 성공 여부와 실패 사유(no_slack_config | error)
        """
        return self._apply(cabin_id, message_id, NotificationOperation.DELETE, channel_id=channel_id)

    def update_message(self, cabin_id: str, message_id: str, text: str,
                       channel_id: Optional[str] = None) -> DeleteResult:
        """예약 알림 메시지 본문을 수정합니다. 삭제와 같은 조건과 결과 형식을 따릅니다."""
        return self._apply(cabin_id, message_id, NotificationOperation.UPDATE, text=text, channel_id=channel_id)

    def retract_reservation(self, reservation_id: str) -> RetractionSummary:
        """예약에 대해 기록된 Slack 메시지를 모두 삭제하고, 삭제된 기록을 지웁니다."""
        summary = RetractionSummary(reservation_id=reservation_id)
        reservation = self.store.get_reservation(reservation_id)
        if reservation is None:
            self.log_warning("회수할 예약을 찾을 수 없습니다", reservation_id=reservation_id)
            return summary

        records = [r for r in self.store.get_outbound_messages(reservation_id) if r.channel is ChannelKind.SLACK]
        for record in records:
            result = self.delete_message(reservation.cabin_id, record.message_id, channel_id=record.channel_id)
            summary.results.append(result)
            if result.success:
                self.store.delete_outbound_message(reservation_id, record.channel)

        self.log_info(f"메시지 회수 완료: {summary.deleted_count}/{len(records)}",
                      reservation_id=reservation_id)
        return summary

    def _apply(self, cabin_id: str, message_id: str, operation: NotificationOperation,
               text: Optional[str] = None, channel_id: Optional[str] = None) -> DeleteResult:
        try:
            credential = self._bot_credential(cabin_id)
            if credential is None:
                self.log_info("Slack 봇 설정이 없어 메시지 작업을 건너뜁니다",
                              cabin_id=cabin_id, operation=operation.value)
                return DeleteResult(success=False, reason=NotificationReasons.NO_SLACK_CONFIG)

            client = self.client_factory(credential.token)
            target_channel = channel_id or credential.channel_id
            if operation is NotificationOperation.DELETE:
                delete_message(client, target_channel, message_id)
            else:
                update_message(client, target_channel, message_id, text or "")

            self.log_info(f"Slack 메시지 {operation.value} 성공", cabin_id=cabin_id, ts=message_id)
            return DeleteResult(success=True)
        except Exception as e:
            failure = ErrorHandler.handle_notification_error(
                ChannelKind.SLACK, operation, e, context="Reservation message " + operation.value
            )
            return DeleteResult(success=False, reason=NotificationReasons.ERROR, error=failure.error)
