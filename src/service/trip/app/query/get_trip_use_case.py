from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import TripNotFound
from src.platform.logging.loguru_io import Logger
from src.service.trip.app.dto.trip_query_dto import TripDetail
from src.service.trip.app.interface.i_trip_query_repo import ITripQueryRepo
from src.service.trip.domain import seat_inventory


class GetTripUseCase:
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
    async def get_trip(self, *, trip_id: str) -> TripDetail:
        trip = await self.trip_query_repo.get_by_id(trip_id=trip_id)
        if trip is None:
            raise TripNotFound(trip_id)

        company = None
        if trip.company_id:
            company = await self.trip_query_repo.get_company(company_id=trip.company_id)

        return TripDetail(trip=trip, seats=seat_inventory.snapshot(trip), company=company)
