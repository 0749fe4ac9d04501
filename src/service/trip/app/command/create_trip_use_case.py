from datetime import date, time
from decimal import Decimal
from typing import List, Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.shared_kernel.domain.enum.trip_status import TripStatus
from src.service.trip.app.interface.i_trip_query_repo import ITripQueryRepo
from src.service.trip.domain.entity.trip_entity import Company, Trip


class CreateTripUseCase:
    """Operator-side scheduling of trips and registration of bus companies"""

    def __init__(
        self, *, uow_factory: UnitOfWorkFactory, trip_query_repo: ITripQueryRepo
    ) -> None:
        self.uow_factory = uow_factory
        self.trip_query_repo = trip_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.unit_of_work.provider]),
        trip_query_repo: ITripQueryRepo = Depends(Provide[Container.trip_query_repo]),
    ) -> Self:
        return cls(uow_factory=uow_factory, trip_query_repo=trip_query_repo)

    @Logger.io
    async def create_trip(
        self,
        *,
        origin: str,
        destination: str,
        service_date: date,
        departure_time: time,
        price: Decimal,
        total_seats: int,
        available_seats: Optional[int] = None,
        status: TripStatus = TripStatus.ACTIVE,
        arrival_time: Optional[time] = None,
        departure_terminal: str = '',
        bus_type: str = '',
        amenities: Optional[List[str]] = None,
        operator_id: Optional[str] = None,
        company_id: Optional[str] = None,
    ) -> Trip:
        if company_id and await self.trip_query_repo.get_company(company_id=company_id) is None:
            raise NotFoundError(f'Company {company_id} not found')

        trip = Trip.create(
            origin=origin,
            destination=destination,
            service_date=service_date,
            departure_time=departure_time,
            price=price,
            total_seats=total_seats,
            available_seats=available_seats,
            status=status,
            arrival_time=arrival_time,
            departure_terminal=departure_terminal,
            bus_type=bus_type,
            amenities=amenities,
            operator_id=operator_id,
            company_id=company_id,
        )
        async with self.uow_factory() as uow:
            await uow.trip_command_repo.create(trip=trip)
            await uow.commit()

        Logger.base.info(
            f'🚌 [CREATE-TRIP] {trip.id} {origin} -> {destination} on {service_date} with {total_seats} seats'
        )
        return trip

    @Logger.io
    async def create_company(
        self,
        *,
        name: str,
        logo_url: Optional[str] = None,
        image_url: Optional[str] = None,
        rating: Decimal = Decimal('0'),
        review_count: int = 0,
    ) -> Company:
        company = Company.create(
            name=name,
            logo_url=logo_url,
            image_url=image_url,
            rating=rating,
            review_count=review_count,
        )
        async with self.uow_factory() as uow:
            await uow.trip_command_repo.create_company(company=company)
            await uow.commit()
        return company
