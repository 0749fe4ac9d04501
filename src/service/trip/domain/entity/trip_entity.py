from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import List, Optional, Sequence

import attrs
import uuid_utils

from src.platform.exception.exceptions import (
    DomainError,
    InsufficientAvailability,
    TripNotBookable,
)
from src.platform.logging.loguru_io import Logger
from src.service.shared_kernel.domain.enum.trip_status import TripStatus
from src.service.trip.domain import seat_inventory
from src.service.trip.domain.seat_inventory import Seat


def _validate_non_empty_string(instance: object, attribute: attrs.Attribute, value: str) -> None:
    if not value or not value.strip():
        raise ValueError(f'{type(instance).__name__} {attribute.name} cannot be empty')


def _validate_positive(instance: object, attribute: attrs.Attribute, value: int | Decimal) -> None:
    if value <= 0:
        raise ValueError(f'{type(instance).__name__} {attribute.name} must be positive')


def _to_seat_tuple(value: Optional[Sequence[Seat]]) -> Optional[tuple[Seat, ...]]:
    return None if value is None else tuple(value)


@attrs.define
class Company:
    name: str = attrs.field(validator=_validate_non_empty_string)
    logo_url: Optional[str] = None
    image_url: Optional[str] = None
    rating: Decimal = attrs.field(default=Decimal('0'), converter=Decimal)
    review_count: int = attrs.field(default=0)
    id: Optional[str] = None

    @rating.validator
    def _check_rating(self, attribute: attrs.Attribute, value: Decimal) -> None:
        if not Decimal('0') <= value <= Decimal('5'):
            raise ValueError('Company rating must be between 0 and 5')

    @review_count.validator
    def _check_review_count(self, attribute: attrs.Attribute, value: int) -> None:
        if value < 0:
            raise ValueError('Company review_count cannot be negative')

    @classmethod
    @Logger.io
    def create(
        cls,
        *,
        name: str,
        logo_url: Optional[str] = None,
        image_url: Optional[str] = None,
        rating: Decimal = Decimal('0'),
        review_count: int = 0,
    ) -> 'Company':
        return cls(
            id=str(uuid_utils.uuid7()),
            name=name,
            logo_url=logo_url,
            image_url=image_url,
            rating=rating,
            review_count=review_count,
        )


@attrs.define
class Trip:
    """
    A scheduled journey with a fixed date, price and seat capacity.

    `seats` stays None until the first reservation writes an explicit list;
    `version` increases on every seat mutation and guards concurrent writers.
    """

    origin: str = attrs.field(validator=_validate_non_empty_string)
    destination: str = attrs.field(validator=_validate_non_empty_string)
    service_date: date
    departure_time: time
    price: Decimal = attrs.field(converter=Decimal, validator=_validate_positive)
    total_seats: int = attrs.field(validator=_validate_positive)
    available_seats: int = attrs.field()
    status: TripStatus = TripStatus.ACTIVE
    arrival_time: Optional[time] = None
    departure_terminal: str = ''
    bus_type: str = ''
    amenities: List[str] = attrs.field(factory=list)
    operator_id: Optional[str] = None
    company_id: Optional[str] = None
    seats: Optional[tuple[Seat, ...]] = attrs.field(default=None, converter=_to_seat_tuple)
    version: int = 0
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @available_seats.validator
    def _check_available_seats(self, attribute: attrs.Attribute, value: int) -> None:
        if not 0 <= value <= self.total_seats:
            raise ValueError(
                f'available_seats must be between 0 and total_seats ({self.total_seats})'
            )

    @seats.validator
    def _check_seats(self, attribute: attrs.Attribute, value: Optional[tuple[Seat, ...]]) -> None:
        if value is None:
            return
        if len(value) != self.total_seats:
            raise ValueError('seat list length must equal total_seats')
        if seat_inventory.count_available(value) != self.available_seats:
            raise ValueError('available seats in seat list must equal available_seats')

    @classmethod
    @Logger.io
    def create(
        cls,
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
    ) -> 'Trip':
        now = datetime.now(timezone.utc)
        return cls(
            id=str(uuid_utils.uuid7()),
            origin=origin,
            destination=destination,
            service_date=service_date,
            departure_time=departure_time,
            price=price,
            total_seats=total_seats,
            available_seats=total_seats if available_seats is None else available_seats,
            status=status,
            arrival_time=arrival_time,
            departure_terminal=departure_terminal,
            bus_type=bus_type,
            amenities=list(amenities or []),
            operator_id=operator_id,
            company_id=company_id,
            created_at=now,
            updated_at=now,
        )

    def validate_bookable(self, *, today: date) -> None:
        if self.status != TripStatus.ACTIVE:
            raise TripNotBookable(f'Trip {self.id} is {self.status} and cannot be booked')
        if self.service_date < today:
            raise TripNotBookable(f'Trip {self.id} departed on {self.service_date}')

    def validate_availability(self, *, seat_count: int) -> None:
        if self.available_seats < seat_count:
            raise InsufficientAvailability(requested=seat_count, available=self.available_seats)

    def expected_amount(self, *, seat_count: int, service_fee: Decimal) -> Decimal:
        return self.price * seat_count + service_fee

    @Logger.io
    def reserve(self, *, seat_ids: Sequence[str]) -> 'Trip':
        """
        Book `seat_ids` and return the next version of this trip.

        Raises:
            InsufficientAvailability: counter is below the requested count
            SeatUnavailable: a requested seat is missing or already booked
        """
        self.validate_availability(seat_count=len(seat_ids))
        seats = seat_inventory.book_seats(seat_inventory.snapshot(self), seat_ids)
        return attrs.evolve(
            self,
            seats=seats,
            available_seats=self.available_seats - len(seat_ids),
            version=self.version + 1,
            updated_at=datetime.now(timezone.utc),
        )

    @Logger.io
    def release(self, *, seat_ids: Sequence[str]) -> 'Trip':
        seats = seat_inventory.release_seats(seat_inventory.snapshot(self), seat_ids)
        return attrs.evolve(
            self,
            seats=seats,
            available_seats=self.available_seats + len(seat_ids),
            version=self.version + 1,
            updated_at=datetime.now(timezone.utc),
        )

    @Logger.io
    def change_status(self, *, status: TripStatus) -> 'Trip':
        if status == self.status:
            return self
        if self.status != TripStatus.ACTIVE:
            raise DomainError(f'Trip {self.id} is already {self.status}')
        return attrs.evolve(
            self,
            status=status,
            version=self.version + 1,
            updated_at=datetime.now(timezone.utc),
        )
