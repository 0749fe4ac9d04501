"""
SQLAlchemy repositories + unit of work on sqlite (aiosqlite)

Same use cases as the in-memory tests, this time through real SQL: the
conditional UPDATE ... WHERE version = ?, the unique idempotency key and the
booking/trip join on the read side.
"""

from collections.abc import AsyncIterator
from datetime import date, time, timedelta
from decimal import Decimal
from pathlib import Path
from unittest.mock import patch

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.config.core_setting import Settings
from src.platform.database.db_setting import AsyncEngineManager, Database, create_db_and_tables
from src.platform.database.unit_of_work import SqlAlchemyUnitOfWork, UnitOfWorkFactory
from src.platform.exception.exceptions import OptimisticLockError, SeatUnavailable
from src.service.booking.app.command.cancel_booking_use_case import CancelBookingUseCase
from src.service.booking.app.command.reserve_seats_use_case import ReserveSeatsUseCase
from src.service.booking.driven_adapter.repo.booking_query_repo_impl import BookingQueryRepoImpl
from src.service.shared_kernel.domain.enum.booking_partition import BookingPartition
from src.service.shared_kernel.domain.enum.booking_status import BookingStatus
from src.service.shared_kernel.domain.enum.seat_status import SeatStatus
from src.service.trip.app.command.create_trip_use_case import CreateTripUseCase
from src.service.trip.app.dto.trip_query_dto import TripFilter, TripSortKey
from src.service.trip.domain.entity.trip_entity import Trip
from src.service.trip.driven_adapter.repo.trip_query_repo_impl import TripQueryRepoImpl
from test.constants import ANOTHER_BUYER_ID, BUYER_ID
from test.shared.utils import make_passengers


@pytest_asyncio.fixture
async def database(tmp_path: Path) -> AsyncIterator[Database]:
    engine_manager = AsyncEngineManager(url=f'sqlite+aiosqlite:///{tmp_path / "trip_booking.db"}')
    await create_db_and_tables(engine_manager.get_engine())
    db = Database(engine_manager=engine_manager)
    yield db
    await db.dispose()


@pytest.fixture
def sql_uow_factory(database: Database) -> UnitOfWorkFactory:
    return lambda: SqlAlchemyUnitOfWork(session_factory=database.session_maker)


@pytest.fixture
def trip_query_repo(database: Database) -> TripQueryRepoImpl:
    return TripQueryRepoImpl(session_factory=database.session)


@pytest.fixture
def booking_query_repo(database: Database) -> BookingQueryRepoImpl:
    return BookingQueryRepoImpl(session_factory=database.session)


@pytest.fixture
def create_trip_use_case(
    sql_uow_factory: UnitOfWorkFactory, trip_query_repo: TripQueryRepoImpl
) -> CreateTripUseCase:
    return CreateTripUseCase(uow_factory=sql_uow_factory, trip_query_repo=trip_query_repo)


@pytest.fixture
def reserve_use_case(sql_uow_factory: UnitOfWorkFactory, settings: Settings) -> ReserveSeatsUseCase:
    return ReserveSeatsUseCase(uow_factory=sql_uow_factory, config=settings)


async def _create_trip(use_case: CreateTripUseCase, **overrides) -> Trip:
    fields = {
        'origin': 'Taipei',
        'destination': 'Kaohsiung',
        'service_date': date.today() + timedelta(days=5),
        'departure_time': time(9, 0),
        'price': Decimal('100'),
        'total_seats': 4,
    }
    fields.update(overrides)
    return await use_case.create_trip(**fields)


class TestSqlReservation:
    @pytest.mark.asyncio
    async def test_reserve_persists_trip_and_booking(
        self,
        create_trip_use_case: CreateTripUseCase,
        reserve_use_case: ReserveSeatsUseCase,
        trip_query_repo: TripQueryRepoImpl,
        booking_query_repo: BookingQueryRepoImpl,
    ) -> None:
        trip = await _create_trip(create_trip_use_case)

        booking = await reserve_use_case.reserve_seats(
            user_id=BUYER_ID,
            trip_id=trip.id,
            seat_ids=['1', '2'],
            passengers=make_passengers(['1', '2']),
            total_amount=Decimal('200'),
        )

        stored_trip = await trip_query_repo.get_by_id(trip_id=trip.id)
        assert stored_trip is not None
        assert stored_trip.available_seats == 2
        assert stored_trip.version == 1
        assert stored_trip.seats is not None
        assert [s.id for s in stored_trip.seats if s.status == SeatStatus.BOOKED] == ['1', '2']

        detail = await booking_query_repo.get_detail(booking_id=booking.id)
        assert detail is not None
        assert detail.booking.seat_ids == ['1', '2']
        assert detail.booking.total_amount == Decimal('200')
        assert [p.seat_id for p in detail.booking.passengers] == ['1', '2']
        assert detail.trip is not None
        assert detail.trip.origin == 'Taipei'

    @pytest.mark.asyncio
    async def test_booked_seat_is_rejected(
        self,
        create_trip_use_case: CreateTripUseCase,
        reserve_use_case: ReserveSeatsUseCase,
        trip_query_repo: TripQueryRepoImpl,
    ) -> None:
        trip = await _create_trip(create_trip_use_case)
        await reserve_use_case.reserve_seats(
            user_id=BUYER_ID,
            trip_id=trip.id,
            seat_ids=['3'],
            passengers=make_passengers(['3']),
            total_amount=Decimal('100'),
        )

        with pytest.raises(SeatUnavailable):
            await reserve_use_case.reserve_seats(
                user_id=ANOTHER_BUYER_ID,
                trip_id=trip.id,
                seat_ids=['3'],
                passengers=make_passengers(['3']),
                total_amount=Decimal('100'),
            )

        stored_trip = await trip_query_repo.get_by_id(trip_id=trip.id)
        assert stored_trip is not None
        assert stored_trip.available_seats == 3

    @pytest.mark.asyncio
    async def test_stale_version_write_matches_nothing(
        self,
        create_trip_use_case: CreateTripUseCase,
        sql_uow_factory: UnitOfWorkFactory,
        trip_query_repo: TripQueryRepoImpl,
    ) -> None:
        trip = await _create_trip(create_trip_use_case)

        with pytest.raises(OptimisticLockError):
            async with sql_uow_factory() as uow:
                current = await uow.trip_command_repo.get_by_id(trip_id=trip.id)
                assert current is not None
                await uow.trip_command_repo.update_if_version(
                    trip=current.reserve(seat_ids=['1']), expected_version=current.version + 7
                )

        stored_trip = await trip_query_repo.get_by_id(trip_id=trip.id)
        assert stored_trip is not None
        assert stored_trip.available_seats == 4
        assert stored_trip.version == 0

    @pytest.mark.asyncio
    async def test_idempotent_replay(
        self,
        create_trip_use_case: CreateTripUseCase,
        reserve_use_case: ReserveSeatsUseCase,
        booking_query_repo: BookingQueryRepoImpl,
    ) -> None:
        trip = await _create_trip(create_trip_use_case)
        kwargs = {
            'user_id': BUYER_ID,
            'trip_id': trip.id,
            'seat_ids': ['4'],
            'passengers': make_passengers(['4']),
            'total_amount': Decimal('100'),
            'idempotency_key': 'checkout-1',
        }

        first = await reserve_use_case.reserve_seats(**kwargs)
        second = await reserve_use_case.reserve_seats(**kwargs)

        assert first.id == second.id
        bookings = await booking_query_repo.list_by_user(user_id=BUYER_ID, today=date.today())
        assert len(bookings) == 1

    @pytest.mark.asyncio
    async def test_cancel_releases_seats(
        self,
        create_trip_use_case: CreateTripUseCase,
        reserve_use_case: ReserveSeatsUseCase,
        sql_uow_factory: UnitOfWorkFactory,
        settings: Settings,
        trip_query_repo: TripQueryRepoImpl,
        booking_query_repo: BookingQueryRepoImpl,
    ) -> None:
        trip = await _create_trip(create_trip_use_case)
        booking = await reserve_use_case.reserve_seats(
            user_id=BUYER_ID,
            trip_id=trip.id,
            seat_ids=['1', '2'],
            passengers=make_passengers(['1', '2']),
            total_amount=Decimal('200'),
        )

        await CancelBookingUseCase(uow_factory=sql_uow_factory, config=settings).cancel_booking(
            user_id=BUYER_ID, booking_id=booking.id
        )

        stored_trip = await trip_query_repo.get_by_id(trip_id=trip.id)
        assert stored_trip is not None
        assert stored_trip.available_seats == 4
        assert stored_trip.version == 2
        cancelled = await booking_query_repo.list_by_user(
            user_id=BUYER_ID, partition=BookingPartition.CANCELLED, today=date.today()
        )
        assert [d.booking.id for d in cancelled] == [booking.id]
        assert cancelled[0].booking.status == BookingStatus.CANCELLED
        upcoming = await booking_query_repo.list_by_user(
            user_id=BUYER_ID, partition=BookingPartition.UPCOMING, today=date.today()
        )
        assert upcoming == []


class TestSqlTripQueries:
    @pytest.mark.asyncio
    async def test_stream_filters_and_sorts(
        self, create_trip_use_case: CreateTripUseCase, trip_query_repo: TripQueryRepoImpl
    ) -> None:
        cheap = await _create_trip(create_trip_use_case, price=Decimal('80'))
        pricey = await _create_trip(create_trip_use_case, price=Decimal('150'))
        await _create_trip(create_trip_use_case, destination='Tainan')
        await _create_trip(
            create_trip_use_case, service_date=date.today() - timedelta(days=2)
        )

        trips = [
            trip.id
            async for trip in trip_query_repo.stream_trips(
                trip_filter=TripFilter(
                    destination='Kaohsiung', sort=TripSortKey.PRICE_DESC
                ),
                not_before=date.today(),
            )
        ]

        assert trips[0] == pricey.id
        assert trips[-1] == cheap.id
        assert len(trips) == 3

    @pytest.mark.asyncio
    async def test_rating_sort_joins_company(
        self, create_trip_use_case: CreateTripUseCase, trip_query_repo: TripQueryRepoImpl
    ) -> None:
        best = await create_trip_use_case.create_company(name='Best', rating=Decimal('4.9'))
        plain = await create_trip_use_case.create_company(name='Plain', rating=Decimal('2.0'))
        no_company = await _create_trip(create_trip_use_case)
        plain_trip = await _create_trip(create_trip_use_case, company_id=plain.id)
        best_trip = await _create_trip(create_trip_use_case, company_id=best.id)

        trips = [
            trip.id
            async for trip in trip_query_repo.stream_trips(
                trip_filter=TripFilter(sort=TripSortKey.RATING_DESC)
            )
        ]

        assert trips == [best_trip.id, plain_trip.id, no_company.id]

    @pytest.mark.asyncio
    async def test_stream_reads_rows_through_a_cursor(
        self, create_trip_use_case: CreateTripUseCase, trip_query_repo: TripQueryRepoImpl
    ) -> None:
        cheapest = await _create_trip(create_trip_use_case, price=Decimal('60'))
        for price in ('90', '120', '150'):
            await _create_trip(create_trip_use_case, price=Decimal(price))

        with patch.object(
            AsyncSession, 'scalars', side_effect=AssertionError('search must not buffer all rows')
        ):
            stream = trip_query_repo.stream_trips(
                trip_filter=TripFilter(sort=TripSortKey.PRICE_ASC)
            )
            first = await stream.__anext__()
            await stream.aclose()

        assert first.id == cheapest.id
