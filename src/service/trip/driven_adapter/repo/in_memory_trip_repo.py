"""Trip repositories over InMemoryStore (STORAGE_BACKEND=memory and tests)."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, AsyncIterator, Optional

import anyio.lowlevel

from src.platform.database.in_memory_unit_of_work import InMemoryStore
from src.platform.exception.exceptions import OptimisticLockError
from src.platform.logging.loguru_io import Logger
from src.service.trip.app.dto.trip_query_dto import TripFilter, TripSortKey
from src.service.trip.app.interface.i_trip_command_repo import ITripCommandRepo
from src.service.trip.app.interface.i_trip_query_repo import ITripQueryRepo
from src.service.trip.domain.entity.trip_entity import Company, Trip


if TYPE_CHECKING:
    from src.platform.database.in_memory_unit_of_work import InMemoryUnitOfWork


class InMemoryTripQueryRepo(ITripQueryRepo):
    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    def _matches(self, trip: Trip, trip_filter: TripFilter, not_before: Optional[date]) -> bool:
        if trip_filter.origin and trip.origin != trip_filter.origin:
            return False
        if trip_filter.destination and trip.destination != trip_filter.destination:
            return False
        if trip_filter.service_date and trip.service_date != trip_filter.service_date:
            return False
        if trip_filter.status and trip.status != trip_filter.status:
            return False
        if not_before is not None and trip.service_date < not_before:
            return False
        return True

    def _sorted(self, trips: list[Trip], sort: TripSortKey) -> list[Trip]:
        def departure(trip: Trip) -> tuple:
            return (trip.service_date, trip.departure_time, trip.id or '')

        def rating(trip: Trip) -> Decimal:
            company = self.store.companies.get(trip.company_id or '')
            return company.rating if company else Decimal('-1')

        match sort:
            case TripSortKey.PRICE_ASC:
                return sorted(trips, key=lambda t: (t.price, departure(t)))
            case TripSortKey.PRICE_DESC:
                return sorted(trips, key=lambda t: (-t.price, departure(t)))
            case TripSortKey.DEPARTURE_DESC:
                return sorted(trips, key=departure, reverse=True)
            case TripSortKey.RATING_DESC:
                return sorted(trips, key=lambda t: (-rating(t), departure(t)))
            case _:
                return sorted(trips, key=departure)

    @Logger.io
    async def stream_trips(
        self, *, trip_filter: TripFilter, not_before: Optional[date] = None
    ) -> AsyncIterator[Trip]:
        matching = [
            trip
            for trip in self.store.trips.values()
            if self._matches(trip, trip_filter, not_before)
        ]
        for trip in self._sorted(matching, trip_filter.sort):
            await anyio.lowlevel.checkpoint()
            yield trip

    @Logger.io
    async def get_by_id(self, *, trip_id: str) -> Optional[Trip]:
        await anyio.lowlevel.checkpoint()
        return self.store.trips.get(trip_id)

    @Logger.io
    async def get_company(self, *, company_id: str) -> Optional[Company]:
        await anyio.lowlevel.checkpoint()
        return self.store.companies.get(company_id)


class InMemoryTripCommandRepo(ITripCommandRepo):
    def __init__(self, *, uow: InMemoryUnitOfWork) -> None:
        self.uow = uow

    @Logger.io
    async def get_by_id(self, *, trip_id: str) -> Optional[Trip]:
        await anyio.lowlevel.checkpoint()
        if trip_id in self.uow.staged_trips:
            return self.uow.staged_trips[trip_id][0]
        return self.uow.store.trips.get(trip_id)

    @Logger.io
    async def create(self, *, trip: Trip) -> Trip:
        await anyio.lowlevel.checkpoint()
        self.uow.staged_trips[trip.id] = (trip, None)
        return trip

    @Logger.io
    async def create_company(self, *, company: Company) -> Company:
        await anyio.lowlevel.checkpoint()
        self.uow.staged_companies[company.id] = company
        return company

    @Logger.io
    async def update_if_version(self, *, trip: Trip, expected_version: int) -> None:
        await anyio.lowlevel.checkpoint()
        current = self.uow.store.trips.get(trip.id)
        if current is None or current.version != expected_version:
            raise OptimisticLockError(f'Trip {trip.id} changed since version {expected_version}')
        self.uow.staged_trips[trip.id] = (trip, expected_version)
