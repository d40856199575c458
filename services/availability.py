# services/availability.py
# 예약 목록으로부터 선실의 현재/다음 사용 상태를 계산합니다.

from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence

from models.reservation import (
    Cabin,
    CabinStatus,
    CabinStatusResult,
    CabinWithStatus,
    Reservation,
)
from utils.date_utils import ensure_aware, now as current_time


def _created_key(reservation: Reservation) -> tuple:
    # created_at이 없는 예약은 같은 조건에서 가장 뒤로 정렬합니다.
    if reservation.created_at is None:
        return (True, None)
    return (False, ensure_aware(reservation.created_at))


def compute_status(reservations: Iterable[Reservation], now: Optional[datetime] = None) -> CabinStatusResult:
    """
    현재 시각 기준으로 선실 상태를 계산합니다.

    - 확정(confirmed) 예약만 고려합니다.
    - 현재 예약: start <= now <= end (양 끝 포함). 한 예약이 끝나는 순간 다음 예약이
      시작하면 끝나는 예약을 현재 예약으로 봅니다.
    - 다음 예약: start > now 중 시작이 가장 빠른 예약, 같으면 먼저 생성된 예약.

    입력을 변경하지 않으며 같은 입력과 now에 대해 항상 같은 결과를 냅니다.

    Args:
        reservations: 해당 선실의 예약 목록
        now: 기준 시각 (없으면 현재 시각)

    Returns:
        CabinStatusResult: 상태, 현재 예약, 다음 예약
    """
    at = ensure_aware(now) if now is not None else current_time()
    confirmed = [r for r in reservations if r.is_confirmed]

    active_candidates = [
        r for r in confirmed
        if ensure_aware(r.start_time) <= at <= ensure_aware(r.end_time)
    ]
    active = min(
        active_candidates,
        key=lambda r: (ensure_aware(r.end_time), _created_key(r), r.id),
        default=None,
    )

    upcoming = [r for r in confirmed if ensure_aware(r.start_time) > at]
    next_reservation = min(
        upcoming,
        key=lambda r: (ensure_aware(r.start_time), _created_key(r), r.id),
        default=None,
    )

    return CabinStatusResult(
        status=CabinStatus.IN_USE if active else CabinStatus.AVAILABLE,
        active=active,
        next=next_reservation,
    )


def add_status_to_cabins(
    cabins: Sequence[Cabin],
    reservations_by_cabin_id: Dict[str, List[Reservation]],
    now: Optional[datetime] = None,
) -> List[CabinWithStatus]:
    """선실 목록 각각에 상태 정보를 붙입니다."""
    at = ensure_aware(now) if now is not None else current_time()
    result = []
    for cabin in cabins:
        status = compute_status(reservations_by_cabin_id.get(cabin.id, []), at)
        result.append(CabinWithStatus(
            cabin=cabin,
            current_status=status.status,
            current_reservation=status.active,
            next_reservation=status.next,
        ))
    return result
