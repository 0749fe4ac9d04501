from datetime import date
from typing import List, Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.dto.booking_detail_dto import BookingDetail
from src.service.booking.app.interface.i_booking_query_repo import IBookingQueryRepo
from src.service.shared_kernel.domain.enum.booking_partition import BookingPartition


class ListBookingsUseCase:
    def __init__(self, *, booking_query_repo: IBookingQueryRepo) -> None:
        self.booking_query_repo = booking_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        booking_query_repo: IBookingQueryRepo = Depends(Provide[Container.booking_query_repo]),
    ) -> Self:
        return cls(booking_query_repo=booking_query_repo)

    @Logger.io
    async def list_user_bookings(
        self, *, user_id: str, partition: Optional[BookingPartition] = None
    ) -> List[BookingDetail]:
        """Newest first; without a partition every booking of the user is returned"""
        return await self.booking_query_repo.list_by_user(
            user_id=user_id, partition=partition, today=date.today()
        )
