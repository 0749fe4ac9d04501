from typing import Self

import anyio
from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.core_setting import Settings
from src.platform.config.di import Container
from src.platform.exception.exceptions import (
    BookingNotFound,
    ConflictError,
    ForbiddenError,
    OptimisticLockError,
    ReservationTimeout,
    TripNotFound,
)
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.service.booking.domain.entity.booking_entity import Booking
from src.service.shared_kernel.domain.enum.booking_status import BookingStatus


class CancelBookingUseCase:
    """
    Cancel a booking and release its seats in one transaction.

    Mirror image of the reservation: seats go back to available, the counter
    grows by the number of seats, the trip version is bumped with a
    conditional write, and the booking moves to cancelled. Lost races retry
    with fresh state under the same budget as reservations.
    """

    def __init__(self, *, uow_factory: UnitOfWorkFactory, config: Settings) -> None:
        self.uow_factory = uow_factory
        self.config = config
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.unit_of_work.provider]),
        config: Settings = Depends(Provide[Container.config_service]),
    ) -> Self:
        return cls(uow_factory=uow_factory, config=config)

    @Logger.io
    async def cancel_booking(self, *, user_id: str, booking_id: str) -> Booking:
        """
        Raises:
            BookingNotFound: no such booking
            ForbiddenError: booking belongs to another user
            AlreadyCancelled: booking was cancelled before
            ConflictError: retry budget exhausted under contention
            ReservationTimeout: storage did not answer in time
        """
        with self.tracer.start_as_current_span(
            'use_case.cancel_booking',
            attributes={'booking.id': booking_id},
        ):
            max_attempts = max(1, self.config.RESERVATION_MAX_RETRIES)
            for attempt in range(1, max_attempts + 1):
                try:
                    booking = await self._attempt(user_id=user_id, booking_id=booking_id)
                except OptimisticLockError as e:
                    metrics.record_conflict(operation='cancel')
                    Logger.base.warning(
                        f'🔁 [CANCEL] Attempt {attempt}/{max_attempts} lost the race on booking {booking_id}: {e}'
                    )
                    continue

                metrics.record_status_change(
                    status=BookingStatus.CANCELLED, released_seats=len(booking.seat_ids)
                )
                Logger.base.info(
                    f'🚫 [CANCEL] Booking {booking_id} cancelled, released seats {booking.seat_ids}'
                )
                return booking

            raise ConflictError(
                f'Booking {booking_id} is busy, gave up after {max_attempts} attempts'
            )

    async def _attempt(self, *, user_id: str, booking_id: str) -> Booking:
        async with self.uow_factory() as uow:
            try:
                with anyio.fail_after(self.config.STORAGE_TIMEOUT_SECONDS):
                    booking = await uow.booking_command_repo.get_by_id(booking_id=booking_id)
                    if booking is None:
                        raise BookingNotFound(booking_id)
                    if booking.user_id != user_id:
                        raise ForbiddenError('Only the booking owner can cancel this booking')

                    cancelled = booking.cancel()

                    trip = await uow.trip_command_repo.get_by_id(trip_id=booking.trip_id)
                    if trip is None:
                        raise TripNotFound(booking.trip_id)
                    released_trip = trip.release(seat_ids=booking.seat_ids)

                    await uow.trip_command_repo.update_if_version(
                        trip=released_trip, expected_version=trip.version
                    )
                    await uow.booking_command_repo.update_if_status(
                        booking=cancelled,
                        expected_status=booking.status,
                        expected_payment_status=booking.payment_status,
                    )
            except TimeoutError as e:
                raise ReservationTimeout(
                    f'Cancellation of booking {booking_id} timed out before commit'
                ) from e

            try:
                with anyio.CancelScope(shield=True), anyio.fail_after(
                    self.config.STORAGE_TIMEOUT_SECONDS
                ):
                    await uow.commit()
            except TimeoutError:
                Logger.base.warning(
                    f'⏳ [CANCEL] Commit for booking {booking_id} timed out, checking outcome'
                )
            else:
                return cancelled

        return await self._resolve_ambiguous_commit(booking_id=booking_id)

    async def _resolve_ambiguous_commit(self, *, booking_id: str) -> Booking:
        try:
            with anyio.fail_after(self.config.STORAGE_TIMEOUT_SECONDS):
                async with self.uow_factory() as uow:
                    booking = await uow.booking_command_repo.get_by_id(booking_id=booking_id)
        except TimeoutError as e:
            raise ReservationTimeout(
                f'Outcome of cancelling booking {booking_id} unknown, storage not responding'
            ) from e

        if booking is None or booking.status != BookingStatus.CANCELLED:
            raise ReservationTimeout(f'Cancellation of booking {booking_id} was not committed in time')
        return booking
