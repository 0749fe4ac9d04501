from datetime import date, datetime, time
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from src.service.booking.app.dto.booking_detail_dto import BookingDetail, TripSummary
from src.service.booking.domain.entity.booking_entity import Booking, Passenger
from src.service.shared_kernel.domain.enum.booking_status import BookingStatus
from src.service.shared_kernel.domain.enum.payment_status import PaymentStatus


class PassengerSchema(BaseModel):
    seat_id: str
    full_name: str
    phone: str
    email: Optional[str] = None
    id_number: Optional[str] = None

    def to_entity(self) -> Passenger:
        return Passenger(
            seat_id=self.seat_id,
            full_name=self.full_name,
            phone=self.phone,
            email=self.email,
            id_number=self.id_number,
        )

    @classmethod
    def from_entity(cls, passenger: Passenger) -> 'PassengerSchema':
        return cls(
            seat_id=passenger.seat_id,
            full_name=passenger.full_name,
            phone=passenger.phone,
            email=passenger.email,
            id_number=passenger.id_number,
        )


class BookingCreateRequest(BaseModel):
    trip_id: str
    seat_ids: List[str]
    passengers: List[PassengerSchema]
    total_amount: Decimal

    model_config = {
        'json_schema_extra': {
            'example': {
                'trip_id': '01936d8f-5e73-7c4e-a9c5-123456789abc',
                'seat_ids': ['3', '4'],
                'passengers': [
                    {
                        'seat_id': '3',
                        'full_name': 'Lin Mei',
                        'phone': '0912345678',
                        'email': 'mei@example.com',
                    },
                    {
                        'seat_id': '4',
                        'full_name': 'Chen Wei',
                        'phone': '0987654321',
                        'id_number': 'A123456789',
                    },
                ],
                'total_amount': '1300.00',
            }
        }
    }


class BookingResponse(BaseModel):
    id: str
    user_id: str
    trip_id: str
    seat_ids: List[str]
    passengers: List[PassengerSchema]
    total_amount: Decimal
    status: BookingStatus
    payment_status: PaymentStatus
    payment_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, booking: Booking) -> 'BookingResponse':
        return cls(
            id=booking.id,
            user_id=booking.user_id,
            trip_id=booking.trip_id,
            seat_ids=list(booking.seat_ids),
            passengers=[PassengerSchema.from_entity(p) for p in booking.passengers],
            total_amount=booking.total_amount,
            status=booking.status,
            payment_status=booking.payment_status,
            payment_id=booking.payment_id,
            created_at=booking.created_at,
            updated_at=booking.updated_at,
        )


class TripSummaryResponse(BaseModel):
    trip_id: str
    origin: str
    destination: str
    service_date: date
    departure_time: time
    departure_terminal: str
    company_name: Optional[str] = None

    @classmethod
    def from_summary(cls, summary: TripSummary) -> 'TripSummaryResponse':
        return cls(
            trip_id=summary.trip_id,
            origin=summary.origin,
            destination=summary.destination,
            service_date=summary.service_date,
            departure_time=summary.departure_time,
            departure_terminal=summary.departure_terminal,
            company_name=summary.company_name,
        )


class BookingDetailResponse(BookingResponse):
    """Booking with the trip it belongs to; trip is null when the trip record is gone"""

    trip: Optional[TripSummaryResponse] = None

    @classmethod
    def from_detail(cls, detail: BookingDetail) -> 'BookingDetailResponse':
        return cls(
            **BookingResponse.from_entity(detail.booking).model_dump(),
            trip=TripSummaryResponse.from_summary(detail.trip) if detail.trip else None,
        )


class BookingStatusUpdateRequest(BaseModel):
    status: Optional[BookingStatus] = None
    payment_status: Optional[PaymentStatus] = None

    model_config = {'json_schema_extra': {'example': {'status': 'confirmed'}}}


class PaymentRequest(BaseModel):
    card_number: str = Field(min_length=1)

    model_config = {'json_schema_extra': {'example': {'card_number': '4111111111111111'}}}


class PaymentResponse(BaseModel):
    booking_id: str
    payment_id: Optional[str] = None
    status: BookingStatus
    payment_status: PaymentStatus

    model_config = {
        'json_schema_extra': {
            'example': {
                'booking_id': '01936d8f-5e73-7c4e-a9c5-123456789abc',
                'payment_id': 'PAY_MOCK_7QK2M9XA',
                'status': 'confirmed',
                'payment_status': 'paid',
            }
        }
    }


class CancelBookingResponse(BaseModel):
    id: str
    status: BookingStatus
    payment_status: PaymentStatus
    released_seat_ids: List[str]

    model_config = {
        'json_schema_extra': {
            'example': {
                'id': '01936d8f-5e73-7c4e-a9c5-123456789abc',
                'status': 'cancelled',
                'payment_status': 'cancelled',
                'released_seat_ids': ['3', '4'],
            }
        }
    }
