from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.exception.exceptions import OptimisticLockError
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_booking_command_repo import IBookingCommandRepo
from src.service.booking.domain.entity.booking_entity import Booking
from src.service.booking.driven_adapter.model.booking_model import BookingModel
from src.service.booking.driven_adapter.repo.booking_mapper import (
    booking_to_entity,
    booking_to_model,
)
from src.service.shared_kernel.domain.enum.booking_status import BookingStatus
from src.service.shared_kernel.domain.enum.payment_status import PaymentStatus


class BookingCommandRepoImpl(IBookingCommandRepo):
    """Bound to the session of a SqlAlchemyUnitOfWork"""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @Logger.io
    async def create(self, *, booking: Booking) -> Booking:
        self.session.add(booking_to_model(booking))
        try:
            await self.session.flush()
        except IntegrityError as e:
            if booking.idempotency_key is None:
                raise
            # Same (user_id, idempotency_key) committed by a concurrent request
            raise OptimisticLockError(
                f'Idempotency key {booking.idempotency_key} taken concurrently'
            ) from e
        return booking

    @Logger.io
    async def get_by_id(self, *, booking_id: str) -> Optional[Booking]:
        result = await self.session.execute(
            select(BookingModel)
            .where(BookingModel.id == booking_id)
            .execution_options(populate_existing=True)
        )
        db_booking = result.scalar_one_or_none()
        return booking_to_entity(db_booking) if db_booking else None

    @Logger.io
    async def get_by_idempotency_key(
        self, *, user_id: str, idempotency_key: str
    ) -> Optional[Booking]:
        result = await self.session.execute(
            select(BookingModel).where(
                BookingModel.user_id == user_id,
                BookingModel.idempotency_key == idempotency_key,
            )
        )
        db_booking = result.scalar_one_or_none()
        return booking_to_entity(db_booking) if db_booking else None

    @Logger.io
    async def update_if_status(
        self,
        *,
        booking: Booking,
        expected_status: BookingStatus,
        expected_payment_status: PaymentStatus,
    ) -> Booking:
        result = await self.session.execute(
            update(BookingModel)
            .where(
                BookingModel.id == booking.id,
                BookingModel.status == expected_status.value,
                BookingModel.payment_status == expected_payment_status.value,
            )
            .values(
                status=booking.status.value,
                payment_status=booking.payment_status.value,
                payment_id=booking.payment_id,
                updated_at=booking.updated_at,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise OptimisticLockError(f'Booking {booking.id} changed since it was read')
        return booking
