from contextlib import asynccontextmanager
from datetime import date
from typing import AsyncContextManager, AsyncIterator, Callable, List, Optional

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.booking.app.dto.booking_detail_dto import BookingDetail, TripSummary
from src.service.booking.app.interface.i_booking_query_repo import IBookingQueryRepo
from src.service.booking.driven_adapter.model.booking_model import BookingModel
from src.service.booking.driven_adapter.repo.booking_mapper import booking_to_entity
from src.service.shared_kernel.domain.enum.booking_partition import BookingPartition
from src.service.shared_kernel.domain.enum.booking_status import BookingStatus
from src.service.trip.driven_adapter.model.trip_model import CompanyModel, TripModel


class BookingQueryRepoImpl(IBookingQueryRepo):
    def __init__(
        self, session_factory: Callable[..., AsyncContextManager[AsyncSession]] | None = None
    ):
        self.session_factory = session_factory
        self.session: AsyncSession | None = None

    @asynccontextmanager
    async def _get_session(self) -> AsyncIterator[AsyncSession]:
        if self.session is not None:
            yield self.session
        elif self.session_factory is not None:
            async with self.session_factory() as session:
                yield session
        else:
            raise RuntimeError('No session or session_factory available')

    @staticmethod
    def _detail_statement() -> Select:
        return (
            select(BookingModel, TripModel, CompanyModel.name)
            .outerjoin(TripModel, TripModel.id == BookingModel.trip_id)
            .outerjoin(CompanyModel, CompanyModel.id == TripModel.company_id)
        )

    @staticmethod
    def _to_detail(
        db_booking: BookingModel, db_trip: Optional[TripModel], company_name: Optional[str]
    ) -> BookingDetail:
        trip = None
        if db_trip is not None:
            trip = TripSummary(
                trip_id=db_trip.id,
                origin=db_trip.origin,
                destination=db_trip.destination,
                service_date=db_trip.service_date,
                departure_time=db_trip.departure_time,
                departure_terminal=db_trip.departure_terminal or '',
                company_name=company_name,
            )
        return BookingDetail(booking=booking_to_entity(db_booking), trip=trip)

    @Logger.io
    async def get_detail(self, *, booking_id: str) -> Optional[BookingDetail]:
        async with self._get_session() as session:
            result = await session.execute(
                self._detail_statement().where(BookingModel.id == booking_id)
            )
            row = result.first()
            return self._to_detail(*row) if row else None

    @Logger.io
    async def list_by_user(
        self,
        *,
        user_id: str,
        partition: Optional[BookingPartition] = None,
        today: date,
    ) -> List[BookingDetail]:
        stmt = self._detail_statement().where(BookingModel.user_id == user_id)
        cancelled = BookingStatus.CANCELLED.value
        match partition:
            case BookingPartition.UPCOMING:
                stmt = stmt.where(
                    BookingModel.status != cancelled, TripModel.service_date >= today
                )
            case BookingPartition.PAST:
                stmt = stmt.where(BookingModel.status != cancelled, TripModel.service_date < today)
            case BookingPartition.CANCELLED:
                stmt = stmt.where(BookingModel.status == cancelled)
        stmt = stmt.order_by(BookingModel.created_at.desc(), BookingModel.id.desc())

        async with self._get_session() as session:
            result = await session.execute(stmt)
            return [self._to_detail(*row) for row in result.all()]
