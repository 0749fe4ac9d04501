"""
Unit tests for ReserveSeatsUseCase

Unit of work and repos are AsyncMocks, so these tests pin the transaction
flow itself:
1. Request validation before any storage access
2. Idempotency replay / conflict
3. Conditional trip write + booking insert, one commit
4. Retry on lost race, give up after the retry budget
5. Timeout before commit vs. ambiguous commit
"""

from datetime import date, time, timedelta
from decimal import Decimal
import time as clock
from typing import Any, Optional
from unittest.mock import AsyncMock, MagicMock

import anyio
import pytest

from src.platform.config.core_setting import Settings
from src.platform.exception.exceptions import (
    BookingValidationError,
    ConflictError,
    InvalidAmount,
    OptimisticLockError,
    ReservationConflict,
    ReservationTimeout,
    TripNotFound,
)
from src.service.booking.app.command.reserve_seats_use_case import ReserveSeatsUseCase
from src.service.booking.domain.entity.booking_entity import Booking
from src.service.shared_kernel.domain.enum.booking_status import BookingStatus
from src.service.trip.domain.entity.trip_entity import Trip
from test.shared.utils import make_passengers


def _make_trip() -> Trip:
    return Trip.create(
        origin='Taipei',
        destination='Tainan',
        service_date=date.today() + timedelta(days=2),
        departure_time=time(7, 45),
        price=Decimal('100'),
        total_seats=10,
    )


def _make_mock_uow(trip: Optional[Trip], existing: Optional[Booking] = None) -> AsyncMock:
    uow = AsyncMock()
    uow.__aenter__.return_value = uow
    uow.__aexit__.return_value = False
    uow.trip_command_repo.get_by_id = AsyncMock(return_value=trip)
    uow.trip_command_repo.update_if_version = AsyncMock(return_value=None)
    uow.booking_command_repo.get_by_idempotency_key = AsyncMock(return_value=existing)
    uow.booking_command_repo.create = AsyncMock(side_effect=lambda booking: booking)
    uow.booking_command_repo.get_by_id = AsyncMock(return_value=None)
    uow.commit = AsyncMock(return_value=None)
    return uow


class TestReserveSeatsUseCase:
    @pytest.fixture
    def trip(self) -> Trip:
        return _make_trip()

    @pytest.fixture
    def mock_uow(self, trip: Trip) -> AsyncMock:
        return _make_mock_uow(trip)

    @pytest.fixture
    def uow_factory(self, mock_uow: AsyncMock) -> MagicMock:
        return MagicMock(return_value=mock_uow)

    @pytest.fixture
    def use_case(self, uow_factory: MagicMock, settings: Settings) -> ReserveSeatsUseCase:
        return ReserveSeatsUseCase(uow_factory=uow_factory, config=settings)

    async def _reserve(self, use_case: ReserveSeatsUseCase, trip_id: str, **overrides: Any) -> Booking:
        kwargs: dict[str, Any] = {
            'user_id': 'user-1',
            'trip_id': trip_id,
            'seat_ids': ['3', '4'],
            'passengers': make_passengers(['3', '4']),
            'total_amount': Decimal('200'),
        }
        kwargs.update(overrides)
        return await use_case.reserve_seats(**kwargs)

    @pytest.mark.asyncio
    async def test_success_writes_trip_and_booking_in_one_commit(
        self, use_case: ReserveSeatsUseCase, mock_uow: AsyncMock, trip: Trip
    ) -> None:
        booking = await self._reserve(use_case, trip.id)

        assert booking.status == BookingStatus.PENDING
        assert booking.seat_ids == ['3', '4']
        mock_uow.commit.assert_awaited_once()

        update_kwargs = mock_uow.trip_command_repo.update_if_version.await_args.kwargs
        assert update_kwargs['expected_version'] == 0
        assert update_kwargs['trip'].available_seats == 8
        assert update_kwargs['trip'].version == 1
        mock_uow.booking_command_repo.create.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_malformed_request_never_touches_storage(
        self, use_case: ReserveSeatsUseCase, uow_factory: MagicMock, trip: Trip
    ) -> None:
        with pytest.raises(BookingValidationError):
            await self._reserve(use_case, trip.id, passengers=make_passengers(['3']))

        uow_factory.assert_not_called()

    @pytest.mark.asyncio
    async def test_wrong_amount_is_rejected_without_writes(
        self, use_case: ReserveSeatsUseCase, mock_uow: AsyncMock, trip: Trip
    ) -> None:
        with pytest.raises(InvalidAmount):
            await self._reserve(use_case, trip.id, total_amount=Decimal('150'))

        mock_uow.trip_command_repo.update_if_version.assert_not_awaited()
        mock_uow.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_amount_within_tolerance_is_accepted(
        self, use_case: ReserveSeatsUseCase, trip: Trip
    ) -> None:
        booking = await self._reserve(use_case, trip.id, total_amount=Decimal('200.01'))

        assert booking.total_amount == Decimal('200.01')

    @pytest.mark.asyncio
    async def test_unknown_trip(self, settings: Settings) -> None:
        uow = _make_mock_uow(trip=None)
        use_case = ReserveSeatsUseCase(uow_factory=MagicMock(return_value=uow), config=settings)

        with pytest.raises(TripNotFound):
            await self._reserve(use_case, 'missing-trip')

        uow.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_lost_race_is_retried(
        self, use_case: ReserveSeatsUseCase, mock_uow: AsyncMock, trip: Trip
    ) -> None:
        mock_uow.trip_command_repo.update_if_version.side_effect = [
            OptimisticLockError('version moved'),
            None,
        ]

        booking = await self._reserve(use_case, trip.id)

        assert booking.trip_id == trip.id
        assert mock_uow.trip_command_repo.update_if_version.await_count == 2
        mock_uow.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_conflict_at_commit_is_retried(
        self, use_case: ReserveSeatsUseCase, mock_uow: AsyncMock, trip: Trip
    ) -> None:
        mock_uow.commit.side_effect = [OptimisticLockError('version moved'), None]

        await self._reserve(use_case, trip.id)

        assert mock_uow.commit.await_count == 2

    @pytest.mark.asyncio
    async def test_gives_up_after_retry_budget(
        self, use_case: ReserveSeatsUseCase, mock_uow: AsyncMock, trip: Trip
    ) -> None:
        mock_uow.trip_command_repo.update_if_version.side_effect = OptimisticLockError('busy')

        with pytest.raises(ReservationConflict) as exc_info:
            await self._reserve(use_case, trip.id)

        assert exc_info.value.status_code == 409
        assert mock_uow.trip_command_repo.update_if_version.await_count == 3
        mock_uow.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_zero_retry_setting_still_makes_one_attempt(
        self, uow_factory: MagicMock, mock_uow: AsyncMock, settings: Settings, trip: Trip
    ) -> None:
        use_case = ReserveSeatsUseCase(
            uow_factory=uow_factory,
            config=settings.model_copy(update={'RESERVATION_MAX_RETRIES': 0}),
        )

        await self._reserve(use_case, trip.id)

        mock_uow.commit.assert_awaited_once()


class TestIdempotency:
    @pytest.mark.asyncio
    async def test_same_key_same_request_replays(self, settings: Settings) -> None:
        trip = _make_trip()
        existing = Booking.create(
            id='booking-1',
            user_id='user-1',
            trip_id=trip.id,
            seat_ids=['3', '4'],
            passengers=make_passengers(['3', '4']),
            total_amount=Decimal('200'),
            idempotency_key='key-1',
        )
        uow = _make_mock_uow(trip, existing=existing)
        use_case = ReserveSeatsUseCase(uow_factory=MagicMock(return_value=uow), config=settings)

        booking = await use_case.reserve_seats(
            user_id='user-1',
            trip_id=trip.id,
            seat_ids=['4', '3'],
            passengers=make_passengers(['3', '4']),
            total_amount=Decimal('200'),
            idempotency_key='key-1',
        )

        assert booking is existing
        uow.trip_command_repo.update_if_version.assert_not_awaited()
        uow.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_same_key_different_request_conflicts(self, settings: Settings) -> None:
        trip = _make_trip()
        existing = Booking.create(
            id='booking-1',
            user_id='user-1',
            trip_id=trip.id,
            seat_ids=['1'],
            passengers=make_passengers(['1']),
            total_amount=Decimal('100'),
            idempotency_key='key-1',
        )
        uow = _make_mock_uow(trip, existing=existing)
        use_case = ReserveSeatsUseCase(uow_factory=MagicMock(return_value=uow), config=settings)

        with pytest.raises(ConflictError):
            await use_case.reserve_seats(
                user_id='user-1',
                trip_id=trip.id,
                seat_ids=['3', '4'],
                passengers=make_passengers(['3', '4']),
                total_amount=Decimal('200'),
                idempotency_key='key-1',
            )

        uow.commit.assert_not_awaited()


class TestTimeouts:
    @pytest.mark.asyncio
    async def test_stalled_storage_times_out_before_commit(self, settings: Settings) -> None:
        trip = _make_trip()
        uow = _make_mock_uow(trip)

        async def stalled_get_by_id(**kwargs: Any) -> Trip:
            await anyio.sleep(5)
            return trip

        uow.trip_command_repo.get_by_id.side_effect = stalled_get_by_id
        use_case = ReserveSeatsUseCase(
            uow_factory=MagicMock(return_value=uow),
            config=settings.model_copy(update={'STORAGE_TIMEOUT_SECONDS': 0.05}),
        )

        with pytest.raises(ReservationTimeout) as exc_info:
            await use_case.reserve_seats(
                user_id='user-1',
                trip_id=trip.id,
                seat_ids=['3'],
                passengers=make_passengers(['3']),
                total_amount=Decimal('100'),
            )

        assert exc_info.value.status_code == 504
        uow.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_ambiguous_commit_that_landed_returns_booking(self, settings: Settings) -> None:
        trip = _make_trip()
        uow = _make_mock_uow(trip)
        uow.commit.side_effect = TimeoutError()
        committed = Booking.create(
            id='booking-landed',
            user_id='user-1',
            trip_id=trip.id,
            seat_ids=['3'],
            passengers=make_passengers(['3']),
            total_amount=Decimal('100'),
        )
        uow.booking_command_repo.get_by_id.return_value = committed
        use_case = ReserveSeatsUseCase(uow_factory=MagicMock(return_value=uow), config=settings)

        booking = await use_case.reserve_seats(
            user_id='user-1',
            trip_id=trip.id,
            seat_ids=['3'],
            passengers=make_passengers(['3']),
            total_amount=Decimal('100'),
        )

        assert booking is committed
        created = uow.booking_command_repo.create.await_args.kwargs['booking']
        uow.booking_command_repo.get_by_id.assert_awaited_once_with(booking_id=created.id)

    @pytest.mark.asyncio
    async def test_ambiguous_commit_that_did_not_land_times_out(self, settings: Settings) -> None:
        trip = _make_trip()
        uow = _make_mock_uow(trip)
        uow.commit.side_effect = TimeoutError()
        use_case = ReserveSeatsUseCase(uow_factory=MagicMock(return_value=uow), config=settings)

        with pytest.raises(ReservationTimeout):
            await use_case.reserve_seats(
                user_id='user-1',
                trip_id=trip.id,
                seat_ids=['3'],
                passengers=make_passengers(['3']),
                total_amount=Decimal('100'),
            )

    @pytest.mark.asyncio
    async def test_hung_commit_is_cut_off_and_resolved_by_booking_id(
        self, settings: Settings
    ) -> None:
        trip = _make_trip()
        uow = _make_mock_uow(trip)

        async def hung_commit() -> None:
            await anyio.sleep(5)

        uow.commit.side_effect = hung_commit
        uow.booking_command_repo.get_by_id.side_effect = lambda booking_id: Booking.create(
            id=booking_id,
            user_id='user-1',
            trip_id=trip.id,
            seat_ids=['3'],
            passengers=make_passengers(['3']),
            total_amount=Decimal('100'),
        )
        use_case = ReserveSeatsUseCase(
            uow_factory=MagicMock(return_value=uow),
            config=settings.model_copy(update={'STORAGE_TIMEOUT_SECONDS': 0.05}),
        )

        with anyio.fail_after(1):
            booking = await use_case.reserve_seats(
                user_id='user-1',
                trip_id=trip.id,
                seat_ids=['3'],
                passengers=make_passengers(['3']),
                total_amount=Decimal('100'),
            )

        created = uow.booking_command_repo.create.await_args.kwargs['booking']
        assert booking.id == created.id

    @pytest.mark.asyncio
    async def test_hung_commit_that_did_not_land_times_out(self, settings: Settings) -> None:
        trip = _make_trip()
        uow = _make_mock_uow(trip)

        async def hung_commit() -> None:
            await anyio.sleep(5)

        uow.commit.side_effect = hung_commit
        use_case = ReserveSeatsUseCase(
            uow_factory=MagicMock(return_value=uow),
            config=settings.model_copy(update={'STORAGE_TIMEOUT_SECONDS': 0.05}),
        )

        with anyio.fail_after(1), pytest.raises(ReservationTimeout):
            await use_case.reserve_seats(
                user_id='user-1',
                trip_id=trip.id,
                seat_ids=['3'],
                passengers=make_passengers(['3']),
                total_amount=Decimal('100'),
            )

    @pytest.mark.asyncio
    async def test_caller_giving_up_is_not_held_by_hung_commit(self, settings: Settings) -> None:
        trip = _make_trip()
        uow = _make_mock_uow(trip)

        async def hung_commit() -> None:
            await anyio.sleep(5)

        uow.commit.side_effect = hung_commit
        use_case = ReserveSeatsUseCase(
            uow_factory=MagicMock(return_value=uow),
            config=settings.model_copy(update={'STORAGE_TIMEOUT_SECONDS': 0.3}),
        )

        started = clock.perf_counter()
        with anyio.move_on_after(0.1):
            try:
                await use_case.reserve_seats(
                    user_id='user-1',
                    trip_id=trip.id,
                    seat_ids=['3'],
                    passengers=make_passengers(['3']),
                    total_amount=Decimal('100'),
                )
            except ReservationTimeout:
                pass

        assert clock.perf_counter() - started < 1


class TestAmountTypes:
    @pytest.mark.asyncio
    async def test_float_amount_is_treated_as_decimal(self, settings: Settings) -> None:
        trip = _make_trip()
        uow = _make_mock_uow(trip)
        use_case = ReserveSeatsUseCase(uow_factory=MagicMock(return_value=uow), config=settings)

        booking = await use_case.reserve_seats(
            user_id='user-1',
            trip_id=trip.id,
            seat_ids=['3', '4'],
            passengers=make_passengers(['3', '4']),
            total_amount=200.0,
        )

        assert booking.total_amount == Decimal('200')
        assert isinstance(booking.total_amount, Decimal)

    @pytest.mark.asyncio
    async def test_float_amount_mismatch_is_invalid_amount(self, settings: Settings) -> None:
        trip = _make_trip()
        uow = _make_mock_uow(trip)
        use_case = ReserveSeatsUseCase(uow_factory=MagicMock(return_value=uow), config=settings)

        with pytest.raises(InvalidAmount):
            await use_case.reserve_seats(
                user_id='user-1',
                trip_id=trip.id,
                seat_ids=['3'],
                passengers=make_passengers(['3']),
                total_amount=99.5,
            )

        uow.commit.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize('amount', ['abc', float('nan'), float('inf')])
    async def test_non_numeric_amount_never_touches_storage(
        self, settings: Settings, amount: Any
    ) -> None:
        uow_factory = MagicMock()
        use_case = ReserveSeatsUseCase(uow_factory=uow_factory, config=settings)

        with pytest.raises(InvalidAmount):
            await use_case.reserve_seats(
                user_id='user-1',
                trip_id='trip-1',
                seat_ids=['3'],
                passengers=make_passengers(['3']),
                total_amount=amount,
            )

        uow_factory.assert_not_called()
