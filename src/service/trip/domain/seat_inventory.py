"""
Seat Inventory

Pure functions over a trip's seat list. Nothing here touches storage; the
reservation and cancellation use cases run these inside a unit of work and
persist the result.

Seat ids are sequential strings "1".."N". A trip that has never been booked
may carry no explicit seat list; its seats are then derived from the counters
(the first `total - available` seats are booked), so the same trip always
yields the same snapshot.
"""

from typing import TYPE_CHECKING, Iterable, Optional

import attrs

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import DomainError, SeatUnavailable
from src.service.shared_kernel.domain.enum.seat_status import SeatStatus


if TYPE_CHECKING:
    from src.service.trip.domain.entity.trip_entity import Trip


@attrs.frozen
class Seat:
    id: str
    status: SeatStatus = SeatStatus.AVAILABLE

    @property
    def is_available(self) -> bool:
        return self.status == SeatStatus.AVAILABLE


def materialize_seats(
    total_seats: Optional[int], available_seats: Optional[int]
) -> tuple[Seat, ...]:
    if total_seats is None or available_seats is None:
        total_seats = settings.DEFAULT_TOTAL_SEATS
        available_seats = total_seats

    booked_count = total_seats - available_seats
    return tuple(
        Seat(
            id=str(number),
            status=SeatStatus.BOOKED if number <= booked_count else SeatStatus.AVAILABLE,
        )
        for number in range(1, total_seats + 1)
    )


def snapshot(trip: 'Trip') -> tuple[Seat, ...]:
    if trip.seats is not None:
        return tuple(trip.seats)
    return materialize_seats(trip.total_seats, trip.available_seats)


def count_available(seats: Iterable[Seat]) -> int:
    return sum(1 for seat in seats if seat.is_available)


def book_seats(seats: Iterable[Seat], seat_ids: Iterable[str]) -> tuple[Seat, ...]:
    """
    Mark exactly `seat_ids` as booked.

    Raises:
        SeatUnavailable: first requested seat that is missing or already booked
    """
    by_id = {seat.id: seat for seat in seats}
    for seat_id in seat_ids:
        seat = by_id.get(seat_id)
        if seat is None or not seat.is_available:
            raise SeatUnavailable(seat_id)
        by_id[seat_id] = attrs.evolve(seat, status=SeatStatus.BOOKED)
    return tuple(by_id.values())


def release_seats(seats: Iterable[Seat], seat_ids: Iterable[str]) -> tuple[Seat, ...]:
    by_id = {seat.id: seat for seat in seats}
    for seat_id in seat_ids:
        seat = by_id.get(seat_id)
        if seat is None:
            raise DomainError(f'Seat {seat_id} does not exist on this trip')
        if seat.is_available:
            raise DomainError(f'Seat {seat_id} is not booked')
        by_id[seat_id] = attrs.evolve(seat, status=SeatStatus.AVAILABLE)
    return tuple(by_id.values())
