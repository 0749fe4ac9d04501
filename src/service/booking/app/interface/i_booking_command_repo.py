from abc import ABC, abstractmethod
from typing import Optional

from src.service.booking.domain.entity.booking_entity import Booking
from src.service.shared_kernel.domain.enum.booking_status import BookingStatus
from src.service.shared_kernel.domain.enum.payment_status import PaymentStatus


class IBookingCommandRepo(ABC):
    """
    Booking write side, bound to a unit of work.

    `create` is only called by the reservation use case, inside the same
    transaction that books the seats.
    """

    @abstractmethod
    async def create(self, *, booking: Booking) -> Booking:
        """
        Raises:
            OptimisticLockError: the (user_id, idempotency_key) pair was taken concurrently
        """
        pass

    @abstractmethod
    async def get_by_id(self, *, booking_id: str) -> Optional[Booking]:
        pass

    @abstractmethod
    async def get_by_idempotency_key(
        self, *, user_id: str, idempotency_key: str
    ) -> Optional[Booking]:
        pass

    @abstractmethod
    async def update_if_status(
        self,
        *,
        booking: Booking,
        expected_status: BookingStatus,
        expected_payment_status: PaymentStatus,
    ) -> Booking:
        """
        Persist status fields only if the stored ones are still the expected pair.

        Raises:
            OptimisticLockError: booking changed since it was read
        """
        pass
