"""Booking Partition Enum"""

from enum import StrEnum


class BookingPartition(StrEnum):
    """Views of a user's bookings, relative to today"""

    UPCOMING = 'upcoming'
    PAST = 'past'
    CANCELLED = 'cancelled'
