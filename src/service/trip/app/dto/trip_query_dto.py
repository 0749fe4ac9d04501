"""Trip query DTOs."""

from datetime import date
from enum import StrEnum
from typing import Optional

import attrs

from src.service.shared_kernel.domain.enum.trip_status import TripStatus
from src.service.trip.domain.entity.trip_entity import Company, Trip
from src.service.trip.domain.seat_inventory import Seat


class TripSortKey(StrEnum):
    PRICE_ASC = 'price_asc'
    PRICE_DESC = 'price_desc'
    DEPARTURE_ASC = 'departure_asc'
    DEPARTURE_DESC = 'departure_desc'
    RATING_DESC = 'rating_desc'


@attrs.define(frozen=True)
class TripFilter:
    """Exact-match filter; None means no constraint on that field"""

    origin: Optional[str] = None
    destination: Optional[str] = None
    service_date: Optional[date] = None
    status: Optional[TripStatus] = None
    sort: TripSortKey = TripSortKey.DEPARTURE_ASC


@attrs.define(frozen=True)
class TripDetail:
    trip: Trip
    seats: tuple[Seat, ...]
    company: Optional[Company] = None
