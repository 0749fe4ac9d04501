from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.core_setting import Settings
from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.exception.exceptions import ConflictError, OptimisticLockError, TripNotFound
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.service.shared_kernel.domain.enum.trip_status import TripStatus
from src.service.trip.domain.entity.trip_entity import Trip


class UpdateTripStatusUseCase:
    """
    Administrative status change (active -> cancelled | completed).

    Goes through the versioned write so it cannot overwrite a concurrent
    reservation's seat changes.
    """

    def __init__(self, *, uow_factory: UnitOfWorkFactory, config: Settings) -> None:
        self.uow_factory = uow_factory
        self.config = config

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.unit_of_work.provider]),
        config: Settings = Depends(Provide[Container.config_service]),
    ) -> Self:
        return cls(uow_factory=uow_factory, config=config)

    @Logger.io
    async def update_status(self, *, trip_id: str, status: TripStatus) -> Trip:
        max_attempts = max(1, self.config.RESERVATION_MAX_RETRIES)
        for attempt in range(1, max_attempts + 1):
            try:
                return await self._attempt(trip_id=trip_id, status=status)
            except OptimisticLockError as e:
                metrics.record_conflict(operation='update_trip_status')
                Logger.base.warning(
                    f'🔁 [TRIP-STATUS] Attempt {attempt}/{max_attempts} lost the race on trip {trip_id}: {e}'
                )
        raise ConflictError(f'Trip {trip_id} is busy, gave up after {max_attempts} attempts')

    async def _attempt(self, *, trip_id: str, status: TripStatus) -> Trip:
        async with self.uow_factory() as uow:
            trip = await uow.trip_command_repo.get_by_id(trip_id=trip_id)
            if trip is None:
                raise TripNotFound(trip_id)

            updated = trip.change_status(status=status)
            if updated is trip:
                return trip

            await uow.trip_command_repo.update_if_version(
                trip=updated, expected_version=trip.version
            )
            await uow.commit()

        Logger.base.info(f'🛑 [TRIP-STATUS] Trip {trip_id} is now {status}')
        return updated
