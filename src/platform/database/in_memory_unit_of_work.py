"""
In-memory storage backend

InMemoryStore holds committed state for the process. InMemoryUnitOfWork
stages writes and applies them under the store lock at commit, after
re-checking every staged trip version, so it gives the same all-or-nothing
and first-writer-wins behaviour as the SQL backend. Used by tests and by
STORAGE_BACKEND=memory local runs.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

import anyio
import anyio.lowlevel

from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import OptimisticLockError


if TYPE_CHECKING:
    from src.service.booking.domain.entity.booking_entity import Booking
    from src.service.trip.domain.entity.trip_entity import Company, Trip


class InMemoryStore:
    def __init__(self) -> None:
        self.trips: dict[str, Trip] = {}
        self.companies: dict[str, Company] = {}
        self.bookings: dict[str, Booking] = {}
        self.lock = anyio.Lock()

    def find_booking_by_idempotency_key(
        self, *, user_id: str, idempotency_key: str
    ) -> Optional[Booking]:
        for booking in self.bookings.values():
            if booking.user_id == user_id and booking.idempotency_key == idempotency_key:
                return booking
        return None


class InMemoryUnitOfWork(AbstractUnitOfWork):
    def __init__(self, store: InMemoryStore) -> None:
        self.store = store
        self._reset_staging()

    def _reset_staging(self) -> None:
        # trip id -> (trip, expected stored version or None for an insert)
        self.staged_trips: dict[str, tuple[Trip, Optional[int]]] = {}
        self.staged_companies: dict[str, Company] = {}
        # booking id -> (booking, expected (status, payment_status) or None for an insert)
        self.staged_bookings: dict[str, tuple[Booking, Optional[tuple[str, str]]]] = {}

    async def __aenter__(self) -> AbstractUnitOfWork:
        from src.service.booking.driven_adapter.repo.in_memory_booking_repo import (
            InMemoryBookingCommandRepo,
        )
        from src.service.trip.driven_adapter.repo.in_memory_trip_repo import (
            InMemoryTripCommandRepo,
        )

        self._reset_staging()
        self.trip_command_repo = InMemoryTripCommandRepo(uow=self)
        self.booking_command_repo = InMemoryBookingCommandRepo(uow=self)
        return await super().__aenter__()

    def _check_staged_versions(self) -> None:
        for trip_id, (_, expected_version) in self.staged_trips.items():
            if expected_version is None:
                continue
            current = self.store.trips.get(trip_id)
            if current is None or current.version != expected_version:
                raise OptimisticLockError(f'Trip {trip_id} changed since version {expected_version}')

        for booking_id, (booking, expected) in self.staged_bookings.items():
            if expected is None:
                if booking.idempotency_key is not None and self.store.find_booking_by_idempotency_key(
                    user_id=booking.user_id, idempotency_key=booking.idempotency_key
                ):
                    raise OptimisticLockError(
                        f'Idempotency key {booking.idempotency_key} taken concurrently'
                    )
                continue
            current_booking = self.store.bookings.get(booking_id)
            if current_booking is None or (
                current_booking.status,
                current_booking.payment_status,
            ) != expected:
                raise OptimisticLockError(f'Booking {booking_id} changed since it was read')

    async def _commit(self) -> None:
        async with self.store.lock:
            await anyio.lowlevel.checkpoint()
            self._check_staged_versions()
            for trip_id, (trip, _) in self.staged_trips.items():
                self.store.trips[trip_id] = trip
            self.store.companies.update(self.staged_companies)
            for booking_id, (booking, _) in self.staged_bookings.items():
                self.store.bookings[booking_id] = booking
        self._reset_staging()

    async def rollback(self) -> None:
        self._reset_staging()
