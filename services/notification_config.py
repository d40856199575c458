# services/notification_config.py
# 선실이 속한 선박의 알림 채널 설정을 조회하고 구성합니다.

from typing import Dict, List, Optional

from models.notification import (
    DISABLED,
    BotCredential,
    ChannelConfig,
    ChannelKind,
    NotificationConfig,
    NotificationSetting,
    ReservationContext,
    WebhookOnly,
)
from models.reservation import Cabin, Ship
from utils.constants import NotificationTemplates
from utils.logger import LoggerMixin

from .storage import ReservationStore


class NotificationConfigResolver(LoggerMixin):
    """알림 설정 조회 및 구성 서비스"""

    def __init__(self, store: ReservationStore):
        self.store = store

    @staticmethod
    def _channel_config(kind: ChannelKind, setting: NotificationSetting) -> ChannelConfig:
        if not setting.enabled:
            return DISABLED
        if kind is ChannelKind.SLACK:
            # 봇 토큰과 채널 ID가 모두 있어야 봇 전송(및 삭제)이 가능합니다.
            if setting.slack_bot_token and setting.slack_channel_id:
                return BotCredential(
                    token=setting.slack_bot_token,
                    channel_id=setting.slack_channel_id,
                    webhook_url=setting.webhook_url or None,
                )
            if setting.webhook_url:
                return WebhookOnly(url=setting.webhook_url)
            return DISABLED
        if setting.webhook_url:
            return WebhookOnly(url=setting.webhook_url)
        return DISABLED

    def build_config(self, settings: List[NotificationSetting]) -> NotificationConfig:
        """저장소의 설정 행들을 NotificationConfig로 변환합니다."""
        mapping: Dict[ChannelKind, ChannelConfig] = {}
        for setting in settings:
            try:
                kind = ChannelKind(setting.channel)
            except ValueError:
                self.log_warning(f"알 수 없는 알림 채널: {setting.channel}")
                continue
            channel_config = self._channel_config(kind, setting)
            # 같은 채널 행이 여럿이면 활성화된 설정을 우선합니다.
            if kind not in mapping or (channel_config.enabled and not mapping[kind].enabled):
                mapping[kind] = channel_config
        return NotificationConfig.from_mapping(mapping)

    def resolve_for_ship(self, ship_id: str) -> NotificationConfig:
        try:
            settings = self.store.get_notification_settings(ship_id)
        except Exception as e:
            self.log_error(f"알림 설정 조회 실패: {e}", ship_id=ship_id)
            return NotificationConfig.disabled()
        return self.build_config(settings)

    def resolve(self, cabin_id: str) -> NotificationConfig:
        """
        선실 ID로 알림 설정을 구성합니다. 설정이 없거나 조회에 실패해도 예외 없이
        모든 채널이 비활성화된 설정을 반환합니다.
        """
        cabin = self._get_cabin(cabin_id)
        if cabin is None:
            return NotificationConfig.disabled()
        return self.resolve_for_ship(cabin.ship_id)

    def get_reservation_context(self, cabin_id: str) -> Optional[ReservationContext]:
        """예약 메시지 전송에 필요한 정보를 한 번에 조회합니다."""
        cabin = self._get_cabin(cabin_id)
        if cabin is None:
            return None
        ship = self._get_ship(cabin.ship_id)
        if ship is None:
            return None

        return ReservationContext(
            cabin=cabin,
            ship=ship,
            config=self.resolve_for_ship(ship.id),
            room_name=cabin.name or ship.name or NotificationTemplates.DEFAULT_ROOM_NAME,
        )

    def _get_cabin(self, cabin_id: str) -> Optional[Cabin]:
        try:
            cabin = self.store.get_cabin(cabin_id)
        except Exception as e:
            self.log_error(f"선실 조회 실패: {e}", cabin_id=cabin_id)
            return None
        if cabin is None:
            self.log_warning("선실 정보를 찾을 수 없습니다", cabin_id=cabin_id)
        return cabin

    def _get_ship(self, ship_id: str) -> Optional[Ship]:
        try:
            ship = self.store.get_ship(ship_id)
        except Exception as e:
            self.log_error(f"선박 조회 실패: {e}", ship_id=ship_id)
            return None
        if ship is None:
            self.log_warning("선박 정보를 찾을 수 없습니다", ship_id=ship_id)
        return ship
