# services/memory_store.py
# 프로세스 메모리에 데이터를 보관하는 저장소 구현입니다 (테스트/로컬 실행용).

import threading
import uuid
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from models.notification import ChannelKind, NotificationSetting, OutboundMessageRecord
from models.reservation import Cabin, Reservation, ReservationStatus, Ship, StorageResult
from utils.date_utils import ensure_aware, now
from utils.logger import LoggerMixin

from .storage import ReservationStore

OVERLAP_MESSAGE = "해당 시간은 이미 다른 예약과 겹칩니다."
UNKNOWN_CABIN_MESSAGE = "선실을 찾을 수 없습니다."


class InMemoryReservationStore(ReservationStore, LoggerMixin):
    """단일 락으로 겹침 검사와 생성을 원자적으로 수행하는 저장소"""

    def __init__(self):
        self._lock = threading.Lock()
        self._ships: Dict[str, Ship] = {}
        self._cabins: Dict[str, Cabin] = {}
        self._settings: Dict[str, List[NotificationSetting]] = {}
        self._reservations: Dict[str, Reservation] = {}
        self._messages: Dict[Tuple[str, ChannelKind], OutboundMessageRecord] = {}

    # --- 데이터 등록 ---

    def add_ship(self, ship: Ship) -> Ship:
        self._ships[ship.id] = ship
        return ship

    def add_cabin(self, cabin: Cabin) -> Cabin:
        self._cabins[cabin.id] = cabin
        return cabin

    def add_notification_setting(self, ship_id: str, setting: NotificationSetting) -> None:
        self._settings.setdefault(ship_id, []).append(setting)

    def add_reservation(self, reservation: Reservation) -> Reservation:
        """검사 없이 예약을 넣습니다. 초기 데이터 구성용입니다."""
        self._reservations[reservation.id] = reservation
        return reservation

    # --- ReservationStore ---

    def create_confirmed_reservation(
        self,
        cabin_id: str,
        start: datetime,
        end: datetime,
        purpose: str,
        created_by: Optional[str] = None,
    ) -> StorageResult:
        start, end = ensure_aware(start), ensure_aware(end)
        with self._lock:
            if cabin_id not in self._cabins:
                return StorageResult(error=UNKNOWN_CABIN_MESSAGE)
            if not start < end:
                return StorageResult(error="종료 시간은 시작 시간보다 나중이어야 합니다.")

            for existing in self._reservations.values():
                if existing.cabin_id == cabin_id and existing.is_confirmed and existing.overlaps(start, end):
                    self.log_info("예약 겹침으로 생성 거부", cabin_id=cabin_id, conflict_id=existing.id)
                    return StorageResult(error=OVERLAP_MESSAGE)

            reservation = Reservation(
                id=str(uuid.uuid4()),
                cabin_id=cabin_id,
                start_time=start,
                end_time=end,
                purpose=purpose,
                status=ReservationStatus.CONFIRMED,
                created_by=created_by,
                created_at=now(),
            )
            self._reservations[reservation.id] = reservation

        self.log_info("예약 생성 성공", cabin_id=cabin_id, reservation_id=reservation.id)
        return StorageResult(reservation=reservation)

    def get_cabin(self, cabin_id: str) -> Optional[Cabin]:
        return self._cabins.get(cabin_id)

    def get_ship(self, ship_id: str) -> Optional[Ship]:
        return self._ships.get(ship_id)

    def get_notification_settings(self, ship_id: str) -> List[NotificationSetting]:
        return list(self._settings.get(ship_id, []))

    def list_reservations(self, cabin_id: str) -> List[Reservation]:
        with self._lock:
            return [r for r in self._reservations.values() if r.cabin_id == cabin_id]

    def get_reservation(self, reservation_id: str) -> Optional[Reservation]:
        return self._reservations.get(reservation_id)

    def update_reservation_status(self, reservation_id: str, status: ReservationStatus) -> Optional[Reservation]:
        with self._lock:
            reservation = self._reservations.get(reservation_id)
            if reservation is None:
                return None
            updated = reservation.with_status(status)
            self._reservations[reservation_id] = updated
            return updated

    def save_outbound_message(self, record: OutboundMessageRecord) -> None:
        with self._lock:
            self._messages[(record.reservation_id, record.channel)] = record

    def get_outbound_messages(self, reservation_id: str) -> List[OutboundMessageRecord]:
        with self._lock:
            return [record for (rid, _), record in self._messages.items() if rid == reservation_id]

    def delete_outbound_message(self, reservation_id: str, channel: ChannelKind) -> None:
        with self._lock:
            self._messages.pop((reservation_id, channel), None)
