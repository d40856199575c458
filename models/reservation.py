# models/reservation.py
# 선박/선실/예약 관련 데이터 모델과 타입을 정의합니다.

from datetime import datetime
from typing import Optional
from dataclasses import dataclass, replace
from enum import Enum


class ReservationStatus(Enum):
    """예약 상태를 나타내는 열거형"""
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class CabinStatus(Enum):
    """선실 사용 상태"""
    AVAILABLE = "available"
    IN_USE = "in_use"


@dataclass(frozen=True)
class Ship:
    """선실들을 소유하는 그룹(선박)"""
    id: str
    public_id: str
    name: str
    members_visible: bool = True


@dataclass(frozen=True)
class Cabin:
    """예약 가능한 자원(선실)"""
    id: str
    ship_id: str
    name: str
    public_id: Optional[str] = None


@dataclass(frozen=True)
class Reservation:
    """예약 정보를 담는 데이터 클래스

    시간 범위는 생성 후 바뀌지 않습니다. 변경은 취소 후 새 예약으로 처리합니다.
    """
    id: str
    cabin_id: str
    start_time: datetime
    end_time: datetime
    purpose: str
    status: ReservationStatus = ReservationStatus.CONFIRMED
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def is_confirmed(self) -> bool:
        return self.status is ReservationStatus.CONFIRMED

    def overlaps(self, start: datetime, end: datetime) -> bool:
        """반개구간 [start, end) 기준으로 겹치는지 확인합니다."""
        return self.start_time < end and start < self.end_time

    def with_status(self, status: ReservationStatus) -> "Reservation":
        return replace(self, status=status)


@dataclass(frozen=True)
class CabinStatusResult:
    """가용성 계산 결과"""
    status: CabinStatus
    active: Optional[Reservation] = None
    next: Optional[Reservation] = None


@dataclass(frozen=True)
class CabinWithStatus:
    """상태 정보가 추가된 선실"""
    cabin: Cabin
    current_status: CabinStatus
    current_reservation: Optional[Reservation] = None
    next_reservation: Optional[Reservation] = None


@dataclass
class StorageResult:
    """원자적 예약 생성 호출 결과 (error가 있으면 거부된 것)"""
    reservation: Optional[Reservation] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.reservation is not None


@dataclass
class BookingResponse:
    """예약 요청자에게 돌려주는 응답"""
    ok: bool
    reservation: Optional[Reservation] = None
    message: Optional[str] = None
