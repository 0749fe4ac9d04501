"""Conversions between booking ORM rows and domain entities."""

from src.service.booking.domain.entity.booking_entity import Booking, Passenger
from src.service.booking.driven_adapter.model.booking_model import BookingModel
from src.service.shared_kernel.domain.enum.booking_status import BookingStatus
from src.service.shared_kernel.domain.enum.payment_status import PaymentStatus


def passenger_to_json(passenger: Passenger) -> dict:
    return {
        'seat_id': passenger.seat_id,
        'full_name': passenger.full_name,
        'phone': passenger.phone,
        'email': passenger.email,
        'id_number': passenger.id_number,
    }


def booking_to_entity(db_booking: BookingModel) -> Booking:
    return Booking(
        id=db_booking.id,
        user_id=db_booking.user_id,
        trip_id=db_booking.trip_id,
        seat_ids=[str(seat_id) for seat_id in db_booking.seat_ids],
        passengers=[Passenger(**item) for item in db_booking.passengers],
        total_amount=db_booking.total_amount,
        status=BookingStatus(db_booking.status),
        payment_status=PaymentStatus(db_booking.payment_status),
        payment_id=db_booking.payment_id,
        idempotency_key=db_booking.idempotency_key,
        created_at=db_booking.created_at,
        updated_at=db_booking.updated_at,
    )


def booking_to_model(booking: Booking) -> BookingModel:
    return BookingModel(
        id=booking.id,
        user_id=booking.user_id,
        trip_id=booking.trip_id,
        seat_ids=list(booking.seat_ids),
        passengers=[passenger_to_json(p) for p in booking.passengers],
        total_amount=booking.total_amount,
        status=booking.status.value,
        payment_status=booking.payment_status.value,
        payment_id=booking.payment_id,
        idempotency_key=booking.idempotency_key,
        created_at=booking.created_at,
        updated_at=booking.updated_at,
    )
