from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.exception.exceptions import OptimisticLockError
from src.platform.logging.loguru_io import Logger
from src.service.trip.app.interface.i_trip_command_repo import ITripCommandRepo
from src.service.trip.domain.entity.trip_entity import Company, Trip
from src.service.trip.driven_adapter.model.trip_model import TripModel
from src.service.trip.driven_adapter.repo.trip_mapper import (
    company_to_model,
    seats_to_json,
    trip_to_entity,
    trip_to_model,
)


class TripCommandRepoImpl(ITripCommandRepo):
    """Bound to the session of a SqlAlchemyUnitOfWork"""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @Logger.io
    async def get_by_id(self, *, trip_id: str) -> Optional[Trip]:
        result = await self.session.execute(
            select(TripModel)
            .where(TripModel.id == trip_id)
            .execution_options(populate_existing=True)
        )
        db_trip = result.scalar_one_or_none()
        return trip_to_entity(db_trip) if db_trip else None

    @Logger.io
    async def create(self, *, trip: Trip) -> Trip:
        self.session.add(trip_to_model(trip))
        await self.session.flush()
        return trip

    @Logger.io
    async def create_company(self, *, company: Company) -> Company:
        self.session.add(company_to_model(company))
        await self.session.flush()
        return company

    @Logger.io
    async def update_if_version(self, *, trip: Trip, expected_version: int) -> None:
        result = await self.session.execute(
            update(TripModel)
            .where(TripModel.id == trip.id, TripModel.version == expected_version)
            .values(
                seats=seats_to_json(trip.seats),
                available_seats=trip.available_seats,
                status=trip.status.value,
                version=trip.version,
                updated_at=trip.updated_at,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise OptimisticLockError(
                f'Trip {trip.id} changed since version {expected_version}'
            )
