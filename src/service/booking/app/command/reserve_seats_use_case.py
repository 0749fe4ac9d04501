from datetime import date
from decimal import Decimal
import time
from typing import List, Optional, Self

import anyio
from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace
import uuid_utils

from src.platform.config.core_setting import Settings
from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork, UnitOfWorkFactory
from src.platform.exception.exceptions import (
    ConflictError,
    CustomBaseError,
    InvalidAmount,
    OptimisticLockError,
    ReservationConflict,
    ReservationTimeout,
    TripNotFound,
)
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.service.booking.domain.entity.booking_entity import Booking, Passenger


class ReserveSeatsUseCase:
    """
    Reserve seats on a trip and create the booking, atomically.

    Flow (per attempt, one unit of work):
    1. Replay: an Idempotency-Key already used by this user returns its booking
    2. Load trip, check it is bookable and has enough seats
    3. Check the amount against price x seats + service fee
    4. Book the requested seats, decrement the counter, bump the version
    5. Conditional trip write (WHERE version = expected) + booking insert, one commit

    A lost race (conditional write matched nothing, or commit-time mismatch)
    retries from step 1 with fresh state, up to RESERVATION_MAX_RETRIES.
    Any failure leaves trip and booking stores untouched.
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
    async def reserve_seats(
        self,
        *,
        user_id: str,
        trip_id: str,
        seat_ids: List[str],
        passengers: List[Passenger],
        total_amount: Decimal | int | float,
        idempotency_key: Optional[str] = None,
    ) -> Booking:
        """
        Raises:
            BookingValidationError: malformed request, rejected before storage access
            InvalidAmount: amount not positive, or not matching the trip price
            TripNotFound / TripNotBookable / InsufficientAvailability / SeatUnavailable
            ConflictError: idempotency key reused for a different request
            ReservationConflict: retry budget exhausted under contention
            ReservationTimeout: storage did not answer in time
        """
        started = time.perf_counter()
        result = 'error'
        try:
            total_amount = Booking.to_amount(total_amount)
            Booking.validate_request(
                seat_ids=seat_ids,
                passengers=passengers,
                total_amount=total_amount,
                max_seats=self.config.MAX_SEATS_PER_BOOKING,
                require_contact=self.config.REQUIRE_PASSENGER_CONTACT,
            )

            with self.tracer.start_as_current_span(
                'use_case.reserve_seats',
                attributes={
                    'trip.id': trip_id,
                    'booking.seat_count': len(seat_ids),
                },
            ) as span:
                max_attempts = max(1, self.config.RESERVATION_MAX_RETRIES)
                for attempt in range(1, max_attempts + 1):
                    try:
                        booking, replayed = await self._attempt(
                            user_id=user_id,
                            trip_id=trip_id,
                            seat_ids=seat_ids,
                            passengers=passengers,
                            total_amount=total_amount,
                            idempotency_key=idempotency_key,
                        )
                    except OptimisticLockError as e:
                        metrics.record_conflict(operation='reserve')
                        Logger.base.warning(
                            f'🔁 [RESERVE] Attempt {attempt}/{max_attempts} lost the race on trip {trip_id}: {e}'
                        )
                        continue

                    span.set_attribute('booking.id', booking.id)
                    span.set_attribute('reservation.attempts', attempt)
                    result = 'replayed' if replayed else 'success'
                    Logger.base.info(
                        f'🎫 [RESERVE] Booking {booking.id} {"replayed" if replayed else "created"} '
                        f'for user {user_id}, trip {trip_id}, seats {booking.seat_ids}'
                    )
                    return booking

                result = 'conflict'
                raise ReservationConflict(trip_id, max_attempts)
        except ReservationTimeout:
            result = 'timeout'
            raise
        except CustomBaseError:
            if result == 'error':
                result = 'rejected'
            raise
        finally:
            metrics.record_seat_reservation(
                result=result,
                duration=time.perf_counter() - started,
                seat_count=len(seat_ids),
            )

    async def _attempt(
        self,
        *,
        user_id: str,
        trip_id: str,
        seat_ids: List[str],
        passengers: List[Passenger],
        total_amount: Decimal,
        idempotency_key: Optional[str],
    ) -> tuple[Booking, bool]:
        booking_id = str(uuid_utils.uuid7())

        async with self.uow_factory() as uow:
            try:
                with anyio.fail_after(self.config.STORAGE_TIMEOUT_SECONDS):
                    replay = await self._find_replay(
                        uow,
                        user_id=user_id,
                        trip_id=trip_id,
                        seat_ids=seat_ids,
                        idempotency_key=idempotency_key,
                    )
                    if replay is not None:
                        return replay, True

                    booking = await self._stage(
                        uow,
                        booking_id=booking_id,
                        user_id=user_id,
                        trip_id=trip_id,
                        seat_ids=seat_ids,
                        passengers=passengers,
                        total_amount=total_amount,
                        idempotency_key=idempotency_key,
                    )
            except TimeoutError as e:
                raise ReservationTimeout(
                    f'Reservation on trip {trip_id} timed out before commit'
                ) from e

            try:
                # Caller cancellation cannot interrupt the commit, only the storage deadline can
                with anyio.CancelScope(shield=True), anyio.fail_after(
                    self.config.STORAGE_TIMEOUT_SECONDS
                ):
                    await uow.commit()
            except TimeoutError:
                Logger.base.warning(
                    f'⏳ [RESERVE] Commit of booking {booking_id} timed out, checking outcome'
                )
            else:
                return booking, False

        return await self._resolve_ambiguous_commit(booking_id=booking_id), False

    async def _find_replay(
        self,
        uow: AbstractUnitOfWork,
        *,
        user_id: str,
        trip_id: str,
        seat_ids: List[str],
        idempotency_key: Optional[str],
    ) -> Optional[Booking]:
        if idempotency_key is None:
            return None
        existing = await uow.booking_command_repo.get_by_idempotency_key(
            user_id=user_id, idempotency_key=idempotency_key
        )
        if existing is None:
            return None
        if not existing.matches_request(trip_id=trip_id, seat_ids=seat_ids):
            raise ConflictError(
                f'Idempotency key {idempotency_key} was already used for a different booking'
            )
        return existing

    async def _stage(
        self,
        uow: AbstractUnitOfWork,
        *,
        booking_id: str,
        user_id: str,
        trip_id: str,
        seat_ids: List[str],
        passengers: List[Passenger],
        total_amount: Decimal,
        idempotency_key: Optional[str],
    ) -> Booking:
        trip = await uow.trip_command_repo.get_by_id(trip_id=trip_id)
        if trip is None:
            raise TripNotFound(trip_id)

        trip.validate_bookable(today=date.today())
        trip.validate_availability(seat_count=len(seat_ids))
        if self.config.ENFORCE_AMOUNT_MATCH:
            expected = trip.expected_amount(
                seat_count=len(seat_ids), service_fee=self.config.SERVICE_FEE
            )
            if abs(expected - total_amount) > self.config.AMOUNT_TOLERANCE:
                raise InvalidAmount(
                    f'Total amount {total_amount} does not match expected {expected}'
                )

        reserved_trip = trip.reserve(seat_ids=seat_ids)
        await uow.trip_command_repo.update_if_version(
            trip=reserved_trip, expected_version=trip.version
        )

        booking = Booking.create(
            id=booking_id,
            user_id=user_id,
            trip_id=trip_id,
            seat_ids=seat_ids,
            passengers=passengers,
            total_amount=total_amount,
            auto_confirm=self.config.AUTO_CONFIRM_BOOKINGS,
            idempotency_key=idempotency_key,
        )
        await uow.booking_command_repo.create(booking=booking)
        return booking

    async def _resolve_ambiguous_commit(self, *, booking_id: str) -> Booking:
        try:
            with anyio.fail_after(self.config.STORAGE_TIMEOUT_SECONDS):
                async with self.uow_factory() as uow:
                    booking = await uow.booking_command_repo.get_by_id(booking_id=booking_id)
        except TimeoutError as e:
            raise ReservationTimeout(
                f'Outcome of booking {booking_id} unknown, storage not responding'
            ) from e

        if booking is None:
            raise ReservationTimeout(f'Booking {booking_id} was not committed in time')
        return booking
