"""Shared Kernel Enums"""

from src.service.shared_kernel.domain.enum.booking_partition import BookingPartition
from src.service.shared_kernel.domain.enum.booking_status import BookingStatus
from src.service.shared_kernel.domain.enum.payment_status import PaymentStatus
from src.service.shared_kernel.domain.enum.seat_status import SeatStatus
from src.service.shared_kernel.domain.enum.trip_status import TripStatus

__all__ = ['BookingPartition', 'BookingStatus', 'PaymentStatus', 'SeatStatus', 'TripStatus']
