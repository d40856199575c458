# services/booking_service.py
# 예약 요청을 처리하고 응답 이후 알림 작업을 백그라운드로 실행합니다.

from datetime import datetime
from typing import Optional

from models.notification import ReservationMessageContext
from models.reservation import BookingResponse, CabinStatusResult, Reservation
from utils.background import BackgroundTaskRunner
from utils.constants import ErrorMessages
from utils.logger import LoggerMixin
from views.notification_view import default_link_label, resolve_locale
from exceptions import ValidationError, ConflictError, StorageError

from .availability import compute_status
from .notification_config import NotificationConfigResolver
from .notification_dispatcher import NotificationDispatcher
from .reservation_service import ReservationService
from .slack_service import SlackMessageLifecycleManager
from .storage import ReservationStore


class BookingService(LoggerMixin):
    """
    예약 요청 처리 서비스

    예약 결과는 검증과 저장소 결과로만 결정됩니다. 알림 전송/회수는 응답을 만든
    뒤 분리된 작업으로 실행되며, 그 결과는 호출자에게 전달되지 않습니다.
    """

    def __init__(
        self,
        store: ReservationStore,
        runner: BackgroundTaskRunner,
        dispatcher: Optional[NotificationDispatcher] = None,
        resolver: Optional[NotificationConfigResolver] = None,
        lifecycle: Optional[SlackMessageLifecycleManager] = None,
    ):
        self.store = store
        self.runner = runner
        self.reservations = ReservationService(store)
        self.resolver = resolver or NotificationConfigResolver(store)
        self.dispatcher = dispatcher or NotificationDispatcher(store)
        self.lifecycle = lifecycle or SlackMessageLifecycleManager(store, self.resolver)

    def book(
        self,
        cabin_id: str,
        start: datetime,
        end: datetime,
        purpose: str,
        locale: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> BookingResponse:
        """
        예약을 생성하고 즉시 응답합니다. 성공하면 알림 전송을 백그라운드로 넘깁니다.

        Returns:
            BookingResponse: ok=False이면 message에 사용자에게 보여줄 사유가 담깁니다.
        """
        try:
            reservation = self.reservations.create(cabin_id, start, end, purpose, created_by)
        except (ValidationError, ConflictError) as e:
            return BookingResponse(ok=False, message=str(e))
        except StorageError as e:
            self.log_error(f"예약 생성 실패: {e}", cabin_id=cabin_id)
            return BookingResponse(ok=False, message=ErrorMessages.RESERVATION_CREATE_FAILED)

        response = BookingResponse(ok=True, reservation=reservation)
        self.runner.spawn(self.notify_reservation, reservation, resolve_locale(locale),
                          task_name=f"notify:{reservation.id}")
        return response

    def cancel(self, reservation_id: str) -> BookingResponse:
        """예약을 취소하고, 전송된 Slack 메시지 회수를 백그라운드로 넘깁니다."""
        try:
            reservation = self.reservations.cancel(reservation_id)
        except ValidationError as e:
            return BookingResponse(ok=False, message=str(e))
        except StorageError as e:
            self.log_error(f"예약 취소 실패: {e}", reservation_id=reservation_id)
            return BookingResponse(ok=False, message=ErrorMessages.RESERVATION_CANCEL_FAILED)

        response = BookingResponse(ok=True, reservation=reservation)
        self.runner.spawn(self.lifecycle.retract_reservation, reservation.id,
                          task_name=f"retract:{reservation.id}")
        return response

    def notify_reservation(self, reservation: Reservation, locale: str) -> None:
        """예약 알림 백그라운드 작업 본문"""
        context = self.resolver.get_reservation_context(reservation.cabin_id)
        if context is None or not context.config.has_enabled_channel:
            self.log_info("전송할 알림 설정이 없습니다", reservation_id=reservation.id)
            return

        message_context = ReservationMessageContext(
            room_name=context.room_name,
            start_time=reservation.start_time,
            end_time=reservation.end_time,
            purpose=reservation.purpose,
            locale=locale,
            ship_public_id=context.ship.public_id,
            link_label=default_link_label(locale),
        )
        self.dispatcher.dispatch(context.config, message_context, reservation_id=reservation.id)

    def get_cabin_status(self, cabin_id: str, now: Optional[datetime] = None) -> CabinStatusResult:
        return compute_status(self.store.list_reservations(cabin_id), now)
