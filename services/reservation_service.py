# services/reservation_service.py
# 예약 생성/취소의 검증과 저장소 호출을 담당합니다.

from datetime import datetime
from typing import Optional

from models.reservation import Reservation, ReservationStatus
from utils.logger import LoggerMixin
from utils.error_handler import handle_exceptions
from utils.constants import ErrorMessages
from utils.date_utils import ensure_aware
from exceptions import ValidationError, ConflictError

from .storage import ReservationStore


class ReservationService(LoggerMixin):
    """
    예약 트랜잭션 게이트웨이

    겹침 판정은 저장소의 원자적 생성 호출 하나에 전적으로 맡깁니다. 이 클래스는
    락을 잡지 않고, 생성 전에 충돌을 미리 조회하지도 않으며, 재시도하지 않습니다.
    """

    def __init__(self, store: ReservationStore):
        """
        Args:
            store: 원자적 예약 생성을 제공하는 저장소
        """
        self.store = store

    @staticmethod
    def validate(start: datetime, end: datetime, purpose: Optional[str]) -> str:
        """
        예약 입력을 검증하고 공백을 제거한 목적 문자열을 반환합니다.

        Raises:
            ValidationError: 종료 시각이 시작 시각보다 늦지 않거나 목적이 비어 있는 경우
        """
        if not ensure_aware(end) > ensure_aware(start):
            raise ValidationError(ErrorMessages.INVALID_TIME_RANGE)
        cleaned = (purpose or "").strip()
        if not cleaned:
            raise ValidationError(ErrorMessages.EMPTY_PURPOSE)
        return cleaned

    @handle_exceptions(default_message="예약 생성에 실패했습니다")
    def create(
        self,
        cabin_id: str,
        start: datetime,
        end: datetime,
        purpose: str,
        created_by: Optional[str] = None,
    ) -> Reservation:
        """
        확정 예약을 생성합니다.

        Args:
            cabin_id: 선실 ID
            start: 시작 시각 (타임존이 없으면 기본 시간대)
            end: 종료 시각
            purpose: 예약 목적
            created_by: 예약자 ID

        Returns:
            Reservation: 생성된 예약

        Raises:
            ValidationError: 입력 검증 실패 시 (저장소 호출 없음)
            ConflictError: 저장소가 겹침/제약 위반으로 거부한 경우
            StorageError: 저장소 호출 자체가 실패한 경우
        """
        start, end = ensure_aware(start), ensure_aware(end)
        cleaned_purpose = self.validate(start, end, purpose)

        result = self.store.create_confirmed_reservation(cabin_id, start, end, cleaned_purpose, created_by)
        if result.error:
            raise ConflictError(result.error, cabin_id=cabin_id)

        reservation = result.reservation
        self.log_info("예약 생성 완료",
                      cabin_id=cabin_id,
                      reservation_id=reservation.id,
                      user_id=created_by)
        return reservation

    @handle_exceptions(default_message="예약 취소에 실패했습니다")
    def cancel(self, reservation_id: str) -> Reservation:
        """
        예약 상태를 취소로 바꿉니다. 이미 취소된 예약은 그대로 반환합니다.

        Raises:
            ValidationError: 예약이 없는 경우
        """
        reservation = self.store.get_reservation(reservation_id)
        if reservation is None:
            raise ValidationError(ErrorMessages.UNKNOWN_RESERVATION)
        if reservation.status is ReservationStatus.CANCELLED:
            return reservation

        updated = self.store.update_reservation_status(reservation_id, ReservationStatus.CANCELLED)
        if updated is None:
            raise ValidationError(ErrorMessages.UNKNOWN_RESERVATION)

        self.log_info("예약 취소 완료", reservation_id=reservation_id)
        return updated
