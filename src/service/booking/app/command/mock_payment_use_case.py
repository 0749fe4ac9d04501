import random
import string
from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.core_setting import Settings
from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.exception.exceptions import DomainError
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.command.cancel_booking_use_case import CancelBookingUseCase
from src.service.booking.app.command.update_booking_status_use_case import (
    UpdateBookingStatusUseCase,
)
from src.service.booking.domain.entity.booking_entity import Booking


class MockPaymentUseCase:
    """Stub payment gateway: always approves, marks payment paid and booking confirmed"""

    def __init__(self, *, update_booking_status_use_case: UpdateBookingStatusUseCase) -> None:
        self.update_booking_status_use_case = update_booking_status_use_case

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.unit_of_work.provider]),
        config: Settings = Depends(Provide[Container.config_service]),
    ) -> Self:
        return cls(
            update_booking_status_use_case=UpdateBookingStatusUseCase(
                uow_factory=uow_factory,
                config=config,
                cancel_booking_use_case=CancelBookingUseCase(
                    uow_factory=uow_factory, config=config
                ),
            )
        )

    @Logger.io
    async def pay_booking(self, *, user_id: str, booking_id: str, card_number: str) -> Booking:
        if not card_number:
            raise DomainError('Card number is required for payment')

        payment_id = (
            f'PAY_MOCK_{"".join(random.choices(string.ascii_uppercase + string.digits, k=8))}'
        )
        return await self.update_booking_status_use_case.apply_transition(
            user_id=user_id,
            booking_id=booking_id,
            transition=lambda booking: booking.mark_as_paid(payment_id=payment_id),
            operation='pay',
        )
