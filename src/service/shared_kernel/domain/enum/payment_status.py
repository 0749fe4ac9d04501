"""Payment Status Enum"""

from enum import StrEnum


class PaymentStatus(StrEnum):
    """Tracked independently of BookingStatus"""

    PENDING = 'pending'
    PAID = 'paid'
    CANCELLED = 'cancelled'
    REFUNDED = 'refunded'
