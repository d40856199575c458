# services/storage.py
# 예약 저장소 경계(계약)를 정의합니다.

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from models.notification import ChannelKind, NotificationSetting, OutboundMessageRecord
from models.reservation import Cabin, Reservation, ReservationStatus, Ship, StorageResult


class ReservationStore(ABC):
    """
    예약 서비스가 의존하는 저장소 계약입니다.

    create_confirmed_reservation은 "겹치지 않으면 생성"을 원자적으로 수행해야 합니다.
    같은 선실에 대해 동시에 겹치는 요청이 들어오면 정확히 하나만 성공합니다.
    겹침 판정은 반개구간 [start, end) 기준이므로 끝과 시작이 맞닿은 예약은 허용됩니다.
    """

    @abstractmethod
    def create_confirmed_reservation(
        self,
        cabin_id: str,
        start: datetime,
        end: datetime,
        purpose: str,
        created_by: Optional[str] = None,
    ) -> StorageResult:
        """겹치는 확정 예약이 없을 때만 확정 예약을 만듭니다. 거부 시 error를 채워 반환합니다."""

    @abstractmethod
    def get_cabin(self, cabin_id: str) -> Optional[Cabin]:
        ...

    @abstractmethod
    def get_ship(self, ship_id: str) -> Optional[Ship]:
        ...

    @abstractmethod
    def get_notification_settings(self, ship_id: str) -> List[NotificationSetting]:
        ...

    @abstractmethod
    def list_reservations(self, cabin_id: str) -> List[Reservation]:
        ...

    @abstractmethod
    def get_reservation(self, reservation_id: str) -> Optional[Reservation]:
        ...

    @abstractmethod
    def update_reservation_status(self, reservation_id: str, status: ReservationStatus) -> Optional[Reservation]:
        """상태만 변경합니다. 예약이 없으면 None."""

    @abstractmethod
    def save_outbound_message(self, record: OutboundMessageRecord) -> None:
        ...

    @abstractmethod
    def get_outbound_messages(self, reservation_id: str) -> List[OutboundMessageRecord]:
        ...

    @abstractmethod
    def delete_outbound_message(self, reservation_id: str, channel: ChannelKind) -> None:
        ...
