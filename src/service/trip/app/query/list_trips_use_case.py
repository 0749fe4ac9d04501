from datetime import date
from typing import AsyncIterator, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.trip.app.dto.trip_query_dto import TripFilter
from src.service.trip.app.interface.i_trip_query_repo import ITripQueryRepo
from src.service.trip.domain.entity.trip_entity import Trip


class ListTripsUseCase:
    def __init__(self, *, trip_query_repo: ITripQueryRepo) -> None:
        self.trip_query_repo = trip_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        trip_query_repo: ITripQueryRepo = Depends(Provide[Container.trip_query_repo]),
    ) -> Self:
        return cls(trip_query_repo=trip_query_repo)

    @Logger.io
    async def list_trips(self, *, trip_filter: TripFilter) -> AsyncIterator[Trip]:
        """Search for bookable dates: trips dated before today never appear"""
        async for trip in self.trip_query_repo.stream_trips(
            trip_filter=trip_filter, not_before=date.today()
        ):
            yield trip

    @Logger.io
    async def list_trip_history(self, *, trip_filter: TripFilter) -> AsyncIterator[Trip]:
        async for trip in self.trip_query_repo.stream_trips(trip_filter=trip_filter):
            yield trip
