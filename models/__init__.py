# models/__init__.py
# 데이터 모델과 타입 정의를 담당하는 패키지입니다.

from .reservation import (
    BookingResponse,
    Cabin,
    CabinStatus,
    CabinStatusResult,
    CabinWithStatus,
    Reservation,
    ReservationStatus,
    Ship,
    StorageResult,
)
from .notification import (
    BotCredential,
    ChannelKind,
    DeleteResult,
    Disabled,
    NotificationConfig,
    NotificationFailure,
    NotificationOperation,
    NotificationSetting,
    NotificationState,
    OutboundMessageRecord,
    ReservationContext,
    ReservationMessageContext,
    RetractionSummary,
    WebhookOnly,
)
from .slack_types import SlackBody

__all__ = [
    "BookingResponse",
    "BotCredential",
    "Cabin",
    "CabinStatus",
    "CabinStatusResult",
    "CabinWithStatus",
    "ChannelKind",
    "DeleteResult",
    "Disabled",
    "NotificationConfig",
    "NotificationFailure",
    "NotificationOperation",
    "NotificationSetting",
    "NotificationState",
    "OutboundMessageRecord",
    "Reservation",
    "ReservationContext",
    "ReservationMessageContext",
    "ReservationStatus",
    "RetractionSummary",
    "Ship",
    "SlackBody",
    "StorageResult",
    "WebhookOnly",
]
