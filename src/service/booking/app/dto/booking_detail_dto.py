"""Booking read models: a booking together with the trip it belongs to."""

from datetime import date, time
from typing import Optional

import attrs

from src.service.booking.domain.entity.booking_entity import Booking


@attrs.define(frozen=True)
class TripSummary:
    trip_id: str
    origin: str
    destination: str
    service_date: date
    departure_time: time
    departure_terminal: str = ''
    company_name: Optional[str] = None


@attrs.define(frozen=True)
class BookingDetail:
    booking: Booking
    trip: Optional[TripSummary] = None
