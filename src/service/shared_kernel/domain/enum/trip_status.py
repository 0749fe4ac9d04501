"""Trip Status Enum"""

from enum import StrEnum


class TripStatus(StrEnum):
    ACTIVE = 'active'
    CANCELLED = 'cancelled'
    COMPLETED = 'completed'
