from decimal import Decimal

import pytest

from src.platform.exception.exceptions import (
    AlreadyCancelled,
    BookingValidationError,
    DomainError,
    InvalidAmount,
)
from src.service.booking.domain.entity.booking_entity import Booking, Passenger
from src.service.shared_kernel.domain.enum.booking_status import BookingStatus
from src.service.shared_kernel.domain.enum.payment_status import PaymentStatus
from test.shared.utils import make_passengers


def _validate(
    seat_ids: list[str],
    passengers: list[Passenger] | None = None,
    total_amount: Decimal = Decimal('200'),
    require_contact: bool = True,
) -> None:
    Booking.validate_request(
        seat_ids=seat_ids,
        passengers=make_passengers(seat_ids) if passengers is None else passengers,
        total_amount=total_amount,
        max_seats=5,
        require_contact=require_contact,
    )


def _booking(**overrides) -> Booking:
    fields = {
        'id': 'booking-1',
        'user_id': 'user-1',
        'trip_id': 'trip-1',
        'seat_ids': ['3', '4'],
        'passengers': make_passengers(['3', '4']),
        'total_amount': Decimal('200'),
    }
    fields.update(overrides)
    return Booking.create(**fields)


class TestValidateRequest:
    def test_valid_request_passes(self) -> None:
        _validate(['3', '4'])

    def test_empty_seat_list(self) -> None:
        with pytest.raises(BookingValidationError):
            _validate([], passengers=[])

    def test_duplicate_seats(self) -> None:
        with pytest.raises(BookingValidationError):
            _validate(['3', '3'])

    def test_more_than_max_seats(self) -> None:
        with pytest.raises(BookingValidationError):
            _validate(['1', '2', '3', '4', '5', '6'])

    def test_passenger_count_must_match(self) -> None:
        with pytest.raises(BookingValidationError):
            _validate(['3', '4'], passengers=make_passengers(['3']))

    def test_passenger_on_unselected_seat(self) -> None:
        with pytest.raises(BookingValidationError):
            _validate(['3', '4'], passengers=make_passengers(['3', '5']))

    def test_blank_passenger_name(self) -> None:
        passengers = [Passenger(seat_id='3', full_name=' ', phone='0912', email='a@b.c')]

        with pytest.raises(BookingValidationError):
            _validate(['3'], passengers=passengers)

    def test_blank_passenger_phone(self) -> None:
        passengers = [Passenger(seat_id='3', full_name='Lin', phone='', email='a@b.c')]

        with pytest.raises(BookingValidationError):
            _validate(['3'], passengers=passengers)

    def test_contact_required(self) -> None:
        with pytest.raises(BookingValidationError):
            _validate(['3'], passengers=make_passengers(['3'], email=None))

    def test_id_number_counts_as_contact(self) -> None:
        passengers = [Passenger(seat_id='3', full_name='Lin', phone='0912', id_number='A123')]

        _validate(['3'], passengers=passengers)

    def test_contact_not_required_when_disabled(self) -> None:
        _validate(['3'], passengers=make_passengers(['3'], email=None), require_contact=False)

    @pytest.mark.parametrize('amount', [Decimal('0'), Decimal('-10')])
    def test_non_positive_amount(self, amount: Decimal) -> None:
        with pytest.raises(InvalidAmount):
            _validate(['3'], total_amount=amount)

    @pytest.mark.parametrize('amount', [Decimal('NaN'), Decimal('Infinity')])
    def test_non_finite_amount(self, amount: Decimal) -> None:
        with pytest.raises(InvalidAmount):
            _validate(['3'], total_amount=amount)


class TestToAmount:
    @pytest.mark.parametrize(
        'value, expected',
        [
            (100.5, Decimal('100.5')),
            (0.1, Decimal('0.1')),
            (200, Decimal('200')),
            ('150.25', Decimal('150.25')),
            (Decimal('99.99'), Decimal('99.99')),
        ],
    )
    def test_numbers_become_decimal(self, value, expected: Decimal) -> None:
        amount = Booking.to_amount(value)

        assert isinstance(amount, Decimal)
        assert amount == expected

    @pytest.mark.parametrize('value', ['abc', '', True])
    def test_non_numbers_are_rejected(self, value) -> None:
        with pytest.raises(InvalidAmount):
            Booking.to_amount(value)

    def test_float_amount_compares_with_decimal_price(self) -> None:
        assert abs(Decimal('200') - Booking.to_amount(200.0)) == Decimal('0')


class TestBookingCreate:
    def test_new_booking_is_pending(self) -> None:
        booking = _booking()

        assert booking.status == BookingStatus.PENDING
        assert booking.payment_status == PaymentStatus.PENDING
        assert booking.created_at is not None

    def test_auto_confirm(self) -> None:
        assert _booking(auto_confirm=True).status == BookingStatus.CONFIRMED

    def test_passengers_follow_seat_order(self) -> None:
        booking = _booking(seat_ids=['4', '3'], passengers=make_passengers(['3', '4']))

        assert [p.seat_id for p in booking.passengers] == ['4', '3']

    def test_matches_request_ignores_seat_order(self) -> None:
        booking = _booking()

        assert booking.matches_request(trip_id='trip-1', seat_ids=['4', '3'])
        assert not booking.matches_request(trip_id='trip-1', seat_ids=['3'])
        assert not booking.matches_request(trip_id='trip-2', seat_ids=['3', '4'])


class TestTransitions:
    def test_confirm_pending(self) -> None:
        assert _booking().confirm().status == BookingStatus.CONFIRMED

    def test_confirm_twice_is_a_no_op(self) -> None:
        confirmed = _booking().confirm()

        assert confirmed.confirm() is confirmed

    def test_confirm_cancelled(self) -> None:
        with pytest.raises(DomainError):
            _booking().cancel().confirm()

    def test_mark_as_paid_confirms(self) -> None:
        paid = _booking().mark_as_paid(payment_id='PAY_MOCK_ABC')

        assert paid.status == BookingStatus.CONFIRMED
        assert paid.payment_status == PaymentStatus.PAID
        assert paid.payment_id == 'PAY_MOCK_ABC'

    def test_pay_twice(self) -> None:
        with pytest.raises(DomainError):
            _booking().mark_as_paid().mark_as_paid()

    def test_pay_cancelled(self) -> None:
        with pytest.raises(DomainError):
            _booking().cancel().mark_as_paid()

    def test_cancel_unpaid(self) -> None:
        cancelled = _booking().cancel()

        assert cancelled.status == BookingStatus.CANCELLED
        assert cancelled.payment_status == PaymentStatus.CANCELLED

    def test_cancel_paid_is_refunded(self) -> None:
        cancelled = _booking().mark_as_paid().cancel()

        assert cancelled.payment_status == PaymentStatus.REFUNDED

    def test_cancel_twice(self) -> None:
        with pytest.raises(AlreadyCancelled):
            _booking().cancel().cancel()
