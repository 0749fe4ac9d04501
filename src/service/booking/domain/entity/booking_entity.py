from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import List, Optional, Sequence

import attrs

from src.platform.exception.exceptions import (
    AlreadyCancelled,
    BookingValidationError,
    DomainError,
    InvalidAmount,
)
from src.platform.logging.loguru_io import Logger
from src.service.shared_kernel.domain.enum.booking_status import BookingStatus
from src.service.shared_kernel.domain.enum.payment_status import PaymentStatus


@attrs.frozen
class Passenger:
    seat_id: str
    full_name: str
    phone: str
    email: Optional[str] = None
    id_number: Optional[str] = None

    @property
    def has_contact(self) -> bool:
        return bool((self.email or '').strip() or (self.id_number or '').strip())


@attrs.define
class Booking:
    id: str
    user_id: str
    trip_id: str
    seat_ids: List[str]
    passengers: List[Passenger]
    total_amount: Decimal = attrs.field(converter=Decimal)
    status: BookingStatus = BookingStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_id: Optional[str] = None
    idempotency_key: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @staticmethod
    @Logger.io
    def validate_request(
        *,
        seat_ids: Sequence[str],
        passengers: Sequence[Passenger],
        total_amount: Decimal,
        max_seats: int,
        require_contact: bool,
    ) -> None:
        """
        Reject malformed reservation requests before any storage access.

        Raises:
            BookingValidationError: seat list or passenger data is malformed
            InvalidAmount: total_amount is not positive
        """
        if not seat_ids:
            raise BookingValidationError('At least one seat must be selected')
        if len(set(seat_ids)) != len(seat_ids):
            raise BookingValidationError('Seat ids must be distinct')
        if len(seat_ids) > max_seats:
            raise BookingValidationError(f'Maximum {max_seats} seats per booking')
        if len(passengers) != len(seat_ids):
            raise BookingValidationError(
                f'Expected {len(seat_ids)} passengers, got {len(passengers)}'
            )
        if sorted(p.seat_id for p in passengers) != sorted(seat_ids):
            raise BookingValidationError('Each passenger must be assigned one of the selected seats')

        for passenger in passengers:
            if not passenger.full_name.strip():
                raise BookingValidationError(f'Passenger name is required for seat {passenger.seat_id}')
            if not passenger.phone.strip():
                raise BookingValidationError(f'Passenger phone is required for seat {passenger.seat_id}')
            if require_contact and not passenger.has_contact:
                raise BookingValidationError(
                    f'Passenger email or id number is required for seat {passenger.seat_id}'
                )

        if not total_amount.is_finite() or total_amount <= 0:
            raise InvalidAmount('Total amount must be positive')

    @staticmethod
    def to_amount(value: Decimal | int | float | str) -> Decimal:
        """Money is Decimal; floats go through str so 0.1 stays 0.1"""
        if isinstance(value, Decimal):
            return value
        if isinstance(value, bool):
            raise InvalidAmount(f'Total amount {value!r} is not a number')
        try:
            return Decimal(str(value))
        except InvalidOperation as e:
            raise InvalidAmount(f'Total amount {value!r} is not a number') from e

    @classmethod
    @Logger.io
    def create(
        cls,
        *,
        id: str,
        user_id: str,
        trip_id: str,
        seat_ids: Sequence[str],
        passengers: Sequence[Passenger],
        total_amount: Decimal,
        auto_confirm: bool = False,
        idempotency_key: Optional[str] = None,
    ) -> 'Booking':
        seat_order = {seat_id: index for index, seat_id in enumerate(seat_ids)}
        now = datetime.now(timezone.utc)
        return cls(
            id=id,
            user_id=user_id,
            trip_id=trip_id,
            seat_ids=list(seat_ids),
            passengers=sorted(passengers, key=lambda p: seat_order[p.seat_id]),
            total_amount=total_amount,
            status=BookingStatus.CONFIRMED if auto_confirm else BookingStatus.PENDING,
            payment_status=PaymentStatus.PENDING,
            idempotency_key=idempotency_key,
            created_at=now,
            updated_at=now,
        )

    def matches_request(self, *, trip_id: str, seat_ids: Sequence[str]) -> bool:
        return self.trip_id == trip_id and sorted(self.seat_ids) == sorted(seat_ids)

    @Logger.io
    def confirm(self) -> 'Booking':
        if self.status == BookingStatus.CONFIRMED:
            return self
        if self.status == BookingStatus.CANCELLED:
            raise DomainError('Cannot confirm cancelled booking')
        return attrs.evolve(
            self, status=BookingStatus.CONFIRMED, updated_at=datetime.now(timezone.utc)
        )

    @Logger.io
    def validate_can_be_paid(self) -> None:
        if self.status == BookingStatus.CANCELLED:
            raise DomainError('Cannot pay for cancelled booking')
        if self.payment_status == PaymentStatus.PAID:
            raise DomainError('Booking already paid')
        if self.payment_status != PaymentStatus.PENDING:
            raise DomainError(f'Booking payment is {self.payment_status}')

    @Logger.io
    def mark_as_paid(self, *, payment_id: Optional[str] = None) -> 'Booking':
        """Payment settles the booking: payment becomes paid and booking confirmed"""
        self.validate_can_be_paid()
        return attrs.evolve(
            self,
            status=BookingStatus.CONFIRMED,
            payment_status=PaymentStatus.PAID,
            payment_id=payment_id or self.payment_id,
            updated_at=datetime.now(timezone.utc),
        )

    @Logger.io
    def cancel(self) -> 'Booking':
        """
        Cancel booking. Seat release is the caller's job and must commit together with this.

        Raises:
            AlreadyCancelled: booking was cancelled before
        """
        if self.status == BookingStatus.CANCELLED:
            raise AlreadyCancelled(self.id)
        payment_status = (
            PaymentStatus.REFUNDED
            if self.payment_status == PaymentStatus.PAID
            else PaymentStatus.CANCELLED
        )
        return attrs.evolve(
            self,
            status=BookingStatus.CANCELLED,
            payment_status=payment_status,
            updated_at=datetime.now(timezone.utc),
        )
