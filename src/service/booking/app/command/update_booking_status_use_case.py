from typing import Callable, Optional, Self

import anyio
from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.core_setting import Settings
from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.exception.exceptions import (
    BookingNotFound,
    ConflictError,
    DomainError,
    ForbiddenError,
    OptimisticLockError,
    ReservationTimeout,
)
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.service.booking.app.command.cancel_booking_use_case import CancelBookingUseCase
from src.service.booking.domain.entity.booking_entity import Booking
from src.service.shared_kernel.domain.enum.booking_status import BookingStatus
from src.service.shared_kernel.domain.enum.payment_status import PaymentStatus


BookingTransition = Callable[[Booking], Booking]


class UpdateBookingStatusUseCase:
    """
    Booking and payment status transitions.

    pending -> confirmed and payment pending -> paid are plain conditional
    writes on the booking row. Cancellation releases seats, so it is handed
    to CancelBookingUseCase.
    """

    def __init__(
        self,
        *,
        uow_factory: UnitOfWorkFactory,
        config: Settings,
        cancel_booking_use_case: CancelBookingUseCase,
    ) -> None:
        self.uow_factory = uow_factory
        self.config = config
        self.cancel_booking_use_case = cancel_booking_use_case

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.unit_of_work.provider]),
        config: Settings = Depends(Provide[Container.config_service]),
    ) -> Self:
        return cls(
            uow_factory=uow_factory,
            config=config,
            cancel_booking_use_case=CancelBookingUseCase(uow_factory=uow_factory, config=config),
        )

    @Logger.io
    async def update_status(
        self,
        *,
        user_id: str,
        booking_id: str,
        status: Optional[BookingStatus] = None,
        payment_status: Optional[PaymentStatus] = None,
    ) -> Booking:
        if status is None and payment_status is None:
            raise DomainError('Either status or payment_status must be provided')

        if status == BookingStatus.CANCELLED:
            if payment_status is not None:
                raise DomainError('Payment status is derived when cancelling')
            return await self.cancel_booking_use_case.cancel_booking(
                user_id=user_id, booking_id=booking_id
            )

        if status == BookingStatus.PENDING:
            raise DomainError('A booking cannot move back to pending')
        if payment_status is not None and payment_status != PaymentStatus.PAID:
            raise DomainError(f'Payment status cannot be set to {payment_status} directly')

        def transition(booking: Booking) -> Booking:
            if payment_status == PaymentStatus.PAID:
                booking = booking.mark_as_paid()
            if status == BookingStatus.CONFIRMED:
                booking = booking.confirm()
            return booking

        return await self.apply_transition(
            user_id=user_id,
            booking_id=booking_id,
            transition=transition,
            operation='update_status',
        )

    async def apply_transition(
        self,
        *,
        user_id: str,
        booking_id: str,
        transition: BookingTransition,
        operation: str,
    ) -> Booking:
        """Load, transition and conditionally write the booking, retrying lost races"""
        max_attempts = max(1, self.config.RESERVATION_MAX_RETRIES)
        for attempt in range(1, max_attempts + 1):
            try:
                booking = await self._attempt(
                    user_id=user_id, booking_id=booking_id, transition=transition
                )
            except OptimisticLockError as e:
                metrics.record_conflict(operation=operation)
                Logger.base.warning(
                    f'🔁 [{operation.upper()}] Attempt {attempt}/{max_attempts} lost the race on booking {booking_id}: {e}'
                )
                continue

            metrics.record_status_change(status=booking.status)
            Logger.base.info(
                f'📝 [{operation.upper()}] Booking {booking_id} is {booking.status}, payment {booking.payment_status}'
            )
            return booking

        raise ConflictError(f'Booking {booking_id} is busy, gave up after {max_attempts} attempts')

    async def _attempt(
        self, *, user_id: str, booking_id: str, transition: BookingTransition
    ) -> Booking:
        async with self.uow_factory() as uow:
            try:
                with anyio.fail_after(self.config.STORAGE_TIMEOUT_SECONDS):
                    booking = await uow.booking_command_repo.get_by_id(booking_id=booking_id)
                    if booking is None:
                        raise BookingNotFound(booking_id)
                    if booking.user_id != user_id:
                        raise ForbiddenError('Only the booking owner can update this booking')

                    updated = transition(booking)
                    if updated is booking:
                        return booking

                    await uow.booking_command_repo.update_if_status(
                        booking=updated,
                        expected_status=booking.status,
                        expected_payment_status=booking.payment_status,
                    )
            except TimeoutError as e:
                raise ReservationTimeout(f'Update of booking {booking_id} timed out') from e

            try:
                with anyio.CancelScope(shield=True), anyio.fail_after(
                    self.config.STORAGE_TIMEOUT_SECONDS
                ):
                    await uow.commit()
            except TimeoutError as e:
                raise ReservationTimeout(f'Outcome of updating booking {booking_id} unknown') from e
            return updated
