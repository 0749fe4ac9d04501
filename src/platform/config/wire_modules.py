"""
Wire Modules Configuration

Defines the modules that need dependency injection wiring.
Shared between production and test environments.
"""

from types import ModuleType

from src.service.booking.app.command import (
    cancel_booking_use_case,
    mock_payment_use_case,
    reserve_seats_use_case,
    update_booking_status_use_case,
)
from src.service.booking.app.query import get_booking_use_case, list_bookings_use_case
from src.service.trip.app.command import create_trip_use_case, update_trip_status_use_case
from src.service.trip.app.query import get_trip_use_case, list_trips_use_case


WIRE_MODULES: list[ModuleType] = [
    reserve_seats_use_case,
    cancel_booking_use_case,
    update_booking_status_use_case,
    mock_payment_use_case,
    get_booking_use_case,
    list_bookings_use_case,
    list_trips_use_case,
    get_trip_use_case,
    create_trip_use_case,
    update_trip_status_use_case,
]
