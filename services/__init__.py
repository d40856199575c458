# services/__init__.py

from .storage import ReservationStore
from .memory_store import InMemoryReservationStore
from .notion_service import NotionReservationStore
from .availability import compute_status, add_status_to_cabins
from .reservation_service import ReservationService
from .notification_config import NotificationConfigResolver
from .notification_dispatcher import NotificationDispatcher
from .slack_service import SlackMessageLifecycleManager
from .booking_service import BookingService

# 명확한 인터페이스 노출
__all__ = [
    'ReservationStore',
    'InMemoryReservationStore',
    'NotionReservationStore',
    'compute_status',
    'add_status_to_cabins',
    'ReservationService',
    'NotificationConfigResolver',
    'NotificationDispatcher',
    'SlackMessageLifecycleManager',
    'BookingService',
]
