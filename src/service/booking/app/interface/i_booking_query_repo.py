from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional

from src.service.booking.app.dto.booking_detail_dto import BookingDetail
from src.service.shared_kernel.domain.enum.booking_partition import BookingPartition


class IBookingQueryRepo(ABC):
    """Repository interface for booking read operations"""

    @abstractmethod
    async def get_detail(self, *, booking_id: str) -> Optional[BookingDetail]:
        pass

    @abstractmethod
    async def list_by_user(
        self,
        *,
        user_id: str,
        partition: Optional[BookingPartition] = None,
        today: date,
    ) -> List[BookingDetail]:
        """
        Newest first.

        upcoming: trip date >= today and booking not cancelled
        past: trip date < today and booking not cancelled
        cancelled: booking cancelled, regardless of trip date
        """
        pass
