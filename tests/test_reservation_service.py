import threading
from datetime import datetime
from unittest.mock import Mock

import pytest

from exceptions import ConflictError, StorageError, ValidationError
from models import Reservation, ReservationStatus, StorageResult
from services.memory_store import OVERLAP_MESSAGE
from services.reservation_service import ReservationService
from services.storage import ReservationStore
from utils.date_utils import KST

from conftest import CABIN_ID, at, make_reservation


@pytest.fixture
def mock_store():
    return Mock(spec=ReservationStore)


class TestCreate:

    def test_create_success(self, store):
        service = ReservationService(store)

        reservation = service.create(CABIN_ID, at(10), at(11), "  주간 회의  ", created_by="U1")

        assert reservation.cabin_id == CABIN_ID
        assert reservation.purpose == "주간 회의"
        assert reservation.status is ReservationStatus.CONFIRMED
        assert reservation.created_by == "U1"
        assert store.get_reservation(reservation.id) == reservation

    @pytest.mark.parametrize("start, end", [(at(11), at(10)), (at(10), at(10))])
    def test_invalid_time_range_never_reaches_storage(self, mock_store, start, end):
        service = ReservationService(mock_store)

        with pytest.raises(ValidationError):
            service.create(CABIN_ID, start, end, "회의")

        mock_store.create_confirmed_reservation.assert_not_called()

    @pytest.mark.parametrize("purpose", ["", "   ", "\n\t", None])
    def test_blank_purpose_never_reaches_storage(self, mock_store, purpose):
        service = ReservationService(mock_store)

        with pytest.raises(ValidationError):
            service.create(CABIN_ID, at(10), at(11), purpose)

        mock_store.create_confirmed_reservation.assert_not_called()

    def test_single_storage_call_with_trimmed_purpose(self, mock_store):
        created = make_reservation("r1", at(10), at(11))
        mock_store.create_confirmed_reservation.return_value = StorageResult(reservation=created)
        service = ReservationService(mock_store)

        result = service.create(CABIN_ID, at(10), at(11), " 회의 ", created_by="U1")

        assert result == created
        mock_store.create_confirmed_reservation.assert_called_once_with(CABIN_ID, at(10), at(11), "회의", "U1")
        mock_store.list_reservations.assert_not_called()

    def test_naive_datetimes_are_localised(self, mock_store):
        mock_store.create_confirmed_reservation.return_value = StorageResult(
            reservation=make_reservation("r1", at(10), at(11))
        )
        service = ReservationService(mock_store)

        service.create(CABIN_ID, datetime(2025, 1, 15, 10), datetime(2025, 1, 15, 11), "회의")

        args = mock_store.create_confirmed_reservation.call_args[0]
        assert args[1].tzinfo is KST
        assert args[2].tzinfo is KST

    def test_storage_rejection_becomes_conflict_with_storage_message(self, mock_store):
        mock_store.create_confirmed_reservation.return_value = StorageResult(error="exclusion constraint violated")
        service = ReservationService(mock_store)

        with pytest.raises(ConflictError) as exc_info:
            service.create(CABIN_ID, at(10), at(11), "회의")

        assert str(exc_info.value) == "exclusion constraint violated"
        assert mock_store.create_confirmed_reservation.call_count == 1

    def test_overlap_with_existing_reservation(self, store):
        service = ReservationService(store)
        service.create(CABIN_ID, at(10), at(11), "첫 회의")

        with pytest.raises(ConflictError, match=OVERLAP_MESSAGE):
            service.create(CABIN_ID, at(10, 30), at(11, 30), "겹치는 회의")

    def test_adjacent_reservations_are_allowed(self, store):
        service = ReservationService(store)
        service.create(CABIN_ID, at(10), at(11), "첫 회의")

        second = service.create(CABIN_ID, at(11), at(12), "다음 회의")

        assert second.start_time == at(11)

    def test_cancelled_reservation_does_not_block(self, store):
        service = ReservationService(store)
        first = service.create(CABIN_ID, at(10), at(11), "첫 회의")
        service.cancel(first.id)

        again = service.create(CABIN_ID, at(10), at(11), "다시 예약")

        assert again.id != first.id

    def test_unexpected_storage_failure_is_wrapped(self, mock_store):
        mock_store.create_confirmed_reservation.side_effect = RuntimeError("connection reset")
        service = ReservationService(mock_store)

        with pytest.raises(StorageError):
            service.create(CABIN_ID, at(10), at(11), "회의")

    def test_concurrent_overlapping_creates_yield_exactly_one_success(self, store):
        service = ReservationService(store)
        barrier = threading.Barrier(2)
        outcomes = []
        lock = threading.Lock()

        def attempt(start, end):
            barrier.wait()
            try:
                result = service.create(CABIN_ID, start, end, "동시 예약")
            except ConflictError as e:
                result = e
            with lock:
                outcomes.append(result)

        threads = [
            threading.Thread(target=attempt, args=(at(10), at(11))),
            threading.Thread(target=attempt, args=(at(10, 30), at(11, 30))),
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=5)

        successes = [o for o in outcomes if isinstance(o, Reservation)]
        conflicts = [o for o in outcomes if isinstance(o, ConflictError)]
        assert len(successes) == 1
        assert len(conflicts) == 1
        assert len(store.list_reservations(CABIN_ID)) == 1


class TestCancel:

    def test_cancel_changes_only_status(self, store):
        service = ReservationService(store)
        created = service.create(CABIN_ID, at(10), at(11), "회의")

        cancelled = service.cancel(created.id)

        assert cancelled.status is ReservationStatus.CANCELLED
        assert (cancelled.start_time, cancelled.end_time, cancelled.purpose) == (
            created.start_time, created.end_time, created.purpose
        )

    def test_cancel_twice_is_noop(self, store):
        service = ReservationService(store)
        created = service.create(CABIN_ID, at(10), at(11), "회의")
        service.cancel(created.id)

        assert service.cancel(created.id).status is ReservationStatus.CANCELLED

    def test_cancel_unknown_reservation(self, store):
        with pytest.raises(ValidationError):
            ReservationService(store).cancel("missing")
