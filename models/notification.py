# models/notification.py
# 알림 채널 설정과 메시지 관련 타입을 정의합니다.

from datetime import datetime
from typing import Dict, Iterator, List, Optional, Tuple, Union
from dataclasses import dataclass, field
from enum import Enum

from .reservation import Cabin, Ship


class ChannelKind(Enum):
    """지원하는 알림 채널 종류"""
    SLACK = "slack"
    DISCORD = "discord"


class NotificationOperation(Enum):
    SEND = "send"
    UPDATE = "update"
    DELETE = "delete"


class NotificationState(Enum):
    """예약 하나의 채널별 알림 상태"""
    CREATED = "created"
    PENDING = "pending"
    SENT = "sent"
    SEND_FAILED = "send_failed"
    DELETED = "deleted"
    DELETE_FAILED = "delete_failed"

    def can_transition_to(self, target: "NotificationState") -> bool:
        return target in _TRANSITIONS[self]

    @property
    def is_terminal(self) -> bool:
        return not _TRANSITIONS[self]


_TRANSITIONS = {
    NotificationState.CREATED: {NotificationState.PENDING},
    NotificationState.PENDING: {NotificationState.SENT, NotificationState.SEND_FAILED},
    NotificationState.SENT: {NotificationState.DELETED, NotificationState.DELETE_FAILED},
    NotificationState.SEND_FAILED: set(),
    NotificationState.DELETED: set(),
    NotificationState.DELETE_FAILED: set(),
}


# --- 채널 설정 변형 ---

@dataclass(frozen=True)
class Disabled:
    """비활성화된 채널"""
    can_delete = False

    @property
    def enabled(self) -> bool:
        return False


@dataclass(frozen=True)
class WebhookOnly:
    """웹훅 URL만 설정된 채널 (메시지 삭제 불가)"""
    url: str
    can_delete = False

    @property
    def enabled(self) -> bool:
        return True


@dataclass(frozen=True)
class BotCredential:
    """봇 토큰과 채널 ID가 설정된 채널 (메시지 삭제/수정 가능)

    webhook_url은 봇 전송이 실패했을 때 한 번만 쓰는 대체 경로입니다.
    """
    token: str
    channel_id: str
    webhook_url: Optional[str] = None
    can_delete = True

    @property
    def enabled(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"BotCredential(token='***', channel_id={self.channel_id!r})"


ChannelConfig = Union[Disabled, WebhookOnly, BotCredential]

DISABLED = Disabled()


@dataclass(frozen=True)
class NotificationConfig:
    """채널 종류별 설정 묶음. 없는 채널은 Disabled로 취급합니다."""
    channels: Tuple[Tuple[ChannelKind, ChannelConfig], ...] = ()

    @classmethod
    def from_mapping(cls, mapping: Dict[ChannelKind, ChannelConfig]) -> "NotificationConfig":
        return cls(tuple((kind, mapping.get(kind, DISABLED)) for kind in ChannelKind))

    @classmethod
    def disabled(cls) -> "NotificationConfig":
        return cls.from_mapping({})

    def get(self, kind: ChannelKind) -> ChannelConfig:
        for channel_kind, channel_config in self.channels:
            if channel_kind is kind:
                return channel_config
        return DISABLED

    def enabled_channels(self) -> Iterator[Tuple[ChannelKind, ChannelConfig]]:
        for kind in ChannelKind:
            channel_config = self.get(kind)
            if channel_config.enabled:
                yield kind, channel_config

    @property
    def has_enabled_channel(self) -> bool:
        return any(True for _ in self.enabled_channels())


@dataclass(frozen=True)
class NotificationSetting:
    """저장소에 저장된 선박별 알림 설정 행"""
    channel: str
    enabled: bool
    webhook_url: Optional[str] = None
    slack_bot_token: Optional[str] = None
    slack_channel_id: Optional[str] = None


@dataclass(frozen=True)
class ReservationMessageContext:
    """예약 알림 메시지를 만드는 데 필요한 값"""
    room_name: str
    start_time: datetime
    end_time: datetime
    purpose: str
    locale: str = "ko"
    ship_public_id: Optional[str] = None
    link_label: Optional[str] = None

    @property
    def start_iso(self) -> str:
        return self.start_time.isoformat()

    @property
    def end_iso(self) -> str:
        return self.end_time.isoformat()


@dataclass(frozen=True)
class ReservationContext:
    """예약 메시지 전송에 필요한 선실/선박/설정 정보"""
    cabin: Cabin
    ship: Ship
    config: NotificationConfig
    room_name: str


@dataclass(frozen=True)
class OutboundMessageRecord:
    """삭제를 위해 보관하는 전송 메시지 식별자"""
    reservation_id: str
    channel: ChannelKind
    message_id: str
    channel_id: Optional[str] = None


@dataclass
class NotificationFailure:
    """알림 작업 실패의 표준 결과"""
    reason: str
    error: Optional[BaseException] = None
    channel: Optional[str] = None
    operation: Optional[str] = None
    success: bool = False


@dataclass
class DeleteResult:
    """메시지 삭제/수정 요청 결과"""
    success: bool
    reason: Optional[str] = None
    error: Optional[BaseException] = None


@dataclass
class RetractionSummary:
    """예약 하나의 메시지 회수 결과"""
    reservation_id: str
    results: List[DeleteResult] = field(default_factory=list)

    @property
    def deleted_count(self) -> int:
        return sum(1 for result in self.results if result.success)
