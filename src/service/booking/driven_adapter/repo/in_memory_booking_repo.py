"""Booking repositories over InMemoryStore (STORAGE_BACKEND=memory and tests)."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, List, Optional

import anyio.lowlevel

from src.platform.database.in_memory_unit_of_work import InMemoryStore
from src.platform.exception.exceptions import OptimisticLockError
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.dto.booking_detail_dto import BookingDetail, TripSummary
from src.service.booking.app.interface.i_booking_command_repo import IBookingCommandRepo
from src.service.booking.app.interface.i_booking_query_repo import IBookingQueryRepo
from src.service.booking.domain.entity.booking_entity import Booking
from src.service.shared_kernel.domain.enum.booking_partition import BookingPartition
from src.service.shared_kernel.domain.enum.booking_status import BookingStatus
from src.service.shared_kernel.domain.enum.payment_status import PaymentStatus


if TYPE_CHECKING:
    from src.platform.database.in_memory_unit_of_work import InMemoryUnitOfWork


class InMemoryBookingCommandRepo(IBookingCommandRepo):
    def __init__(self, *, uow: InMemoryUnitOfWork) -> None:
        self.uow = uow

    @Logger.io
    async def create(self, *, booking: Booking) -> Booking:
        await anyio.lowlevel.checkpoint()
        if booking.idempotency_key is not None and self.uow.store.find_booking_by_idempotency_key(
            user_id=booking.user_id, idempotency_key=booking.idempotency_key
        ):
            raise OptimisticLockError(
                f'Idempotency key {booking.idempotency_key} taken concurrently'
            )
        self.uow.staged_bookings[booking.id] = (booking, None)
        return booking

    @Logger.io
    async def get_by_id(self, *, booking_id: str) -> Optional[Booking]:
        await anyio.lowlevel.checkpoint()
        if booking_id in self.uow.staged_bookings:
            return self.uow.staged_bookings[booking_id][0]
        return self.uow.store.bookings.get(booking_id)

    @Logger.io
    async def get_by_idempotency_key(
        self, *, user_id: str, idempotency_key: str
    ) -> Optional[Booking]:
        await anyio.lowlevel.checkpoint()
        return self.uow.store.find_booking_by_idempotency_key(
            user_id=user_id, idempotency_key=idempotency_key
        )

    @Logger.io
    async def update_if_status(
        self,
        *,
        booking: Booking,
        expected_status: BookingStatus,
        expected_payment_status: PaymentStatus,
    ) -> Booking:
        await anyio.lowlevel.checkpoint()
        current = self.uow.store.bookings.get(booking.id)
        if current is None or (current.status, current.payment_status) != (
            expected_status,
            expected_payment_status,
        ):
            raise OptimisticLockError(f'Booking {booking.id} changed since it was read')
        self.uow.staged_bookings[booking.id] = (
            booking,
            (expected_status, expected_payment_status),
        )
        return booking


class InMemoryBookingQueryRepo(IBookingQueryRepo):
    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    def _to_detail(self, booking: Booking) -> BookingDetail:
        trip = self.store.trips.get(booking.trip_id)
        if trip is None:
            return BookingDetail(booking=booking)
        company = self.store.companies.get(trip.company_id or '')
        return BookingDetail(
            booking=booking,
            trip=TripSummary(
                trip_id=trip.id,
                origin=trip.origin,
                destination=trip.destination,
                service_date=trip.service_date,
                departure_time=trip.departure_time,
                departure_terminal=trip.departure_terminal,
                company_name=company.name if company else None,
            ),
        )

    @staticmethod
    def _in_partition(
        detail: BookingDetail, partition: Optional[BookingPartition], today: date
    ) -> bool:
        cancelled = detail.booking.status == BookingStatus.CANCELLED
        match partition:
            case BookingPartition.CANCELLED:
                return cancelled
            case BookingPartition.UPCOMING:
                return not cancelled and detail.trip is not None and detail.trip.service_date >= today
            case BookingPartition.PAST:
                return not cancelled and detail.trip is not None and detail.trip.service_date < today
            case _:
                return True

    @Logger.io
    async def get_detail(self, *, booking_id: str) -> Optional[BookingDetail]:
        await anyio.lowlevel.checkpoint()
        booking = self.store.bookings.get(booking_id)
        return self._to_detail(booking) if booking else None

    @Logger.io
    async def list_by_user(
        self,
        *,
        user_id: str,
        partition: Optional[BookingPartition] = None,
        today: date,
    ) -> List[BookingDetail]:
        await anyio.lowlevel.checkpoint()
        details = [
            self._to_detail(booking)
            for booking in self.store.bookings.values()
            if booking.user_id == user_id
        ]
        details = [d for d in details if self._in_partition(d, partition, today)]
        return sorted(
            details,
            key=lambda d: (d.booking.created_at, d.booking.id),
            reverse=True,
        )
