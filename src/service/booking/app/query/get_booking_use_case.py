from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import BookingNotFound, ForbiddenError
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.dto.booking_detail_dto import BookingDetail
from src.service.booking.app.interface.i_booking_query_repo import IBookingQueryRepo


class GetBookingUseCase:
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
    async def get_booking(self, *, user_id: str, booking_id: str) -> BookingDetail:
        detail = await self.booking_query_repo.get_detail(booking_id=booking_id)
        if detail is None:
            raise BookingNotFound(booking_id)
        if detail.booking.user_id != user_id:
            raise ForbiddenError('Only the booking owner can view this booking')
        return detail
