from contextlib import asynccontextmanager
from datetime import date
from typing import AsyncContextManager, AsyncIterator, Callable, Optional

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.trip.app.dto.trip_query_dto import TripFilter, TripSortKey
from src.service.trip.app.interface.i_trip_query_repo import ITripQueryRepo
from src.service.trip.domain.entity.trip_entity import Company, Trip
from src.service.trip.driven_adapter.model.trip_model import CompanyModel, TripModel
from src.service.trip.driven_adapter.repo.trip_mapper import company_to_entity, trip_to_entity


class TripQueryRepoImpl(ITripQueryRepo):
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
    def _build_statement(trip_filter: TripFilter, not_before: Optional[date]) -> Select:
        stmt = select(TripModel)
        if trip_filter.origin:
            stmt = stmt.where(TripModel.origin == trip_filter.origin)
        if trip_filter.destination:
            stmt = stmt.where(TripModel.destination == trip_filter.destination)
        if trip_filter.service_date:
            stmt = stmt.where(TripModel.service_date == trip_filter.service_date)
        if trip_filter.status:
            stmt = stmt.where(TripModel.status == trip_filter.status.value)
        if not_before is not None:
            stmt = stmt.where(TripModel.service_date >= not_before)

        departure = (TripModel.service_date, TripModel.departure_time)
        match trip_filter.sort:
            case TripSortKey.PRICE_ASC:
                order = (TripModel.price.asc(), *departure)
            case TripSortKey.PRICE_DESC:
                order = (TripModel.price.desc(), *departure)
            case TripSortKey.DEPARTURE_DESC:
                order = (TripModel.service_date.desc(), TripModel.departure_time.desc())
            case TripSortKey.RATING_DESC:
                stmt = stmt.outerjoin(CompanyModel, CompanyModel.id == TripModel.company_id)
                order = (CompanyModel.rating.desc().nulls_last(), *departure)
            case _:
                order = departure
        return stmt.order_by(*order, TripModel.id)

    @Logger.io
    async def stream_trips(
        self, *, trip_filter: TripFilter, not_before: Optional[date] = None
    ) -> AsyncIterator[Trip]:
        stmt = self._build_statement(trip_filter, not_before)
        async with self._get_session() as session:
            result = await session.stream_scalars(stmt)
            async for db_trip in result:
                yield trip_to_entity(db_trip)

    @Logger.io
    async def get_by_id(self, *, trip_id: str) -> Optional[Trip]:
        async with self._get_session() as session:
            db_trip = await session.get(TripModel, trip_id)
            return trip_to_entity(db_trip) if db_trip else None

    @Logger.io
    async def get_company(self, *, company_id: str) -> Optional[Company]:
        async with self._get_session() as session:
            db_company = await session.get(CompanyModel, company_id)
            return company_to_entity(db_company) if db_company else None
