from datetime import date, datetime, time
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from src.service.shared_kernel.domain.enum.seat_status import SeatStatus
from src.service.shared_kernel.domain.enum.trip_status import TripStatus
from src.service.trip.app.dto.trip_query_dto import TripDetail
from src.service.trip.domain.entity.trip_entity import Company, Trip


class CompanyCreateRequest(BaseModel):
    name: str
    logo_url: Optional[str] = None
    image_url: Optional[str] = None
    rating: Decimal = Field(default=Decimal('0'), ge=0, le=5)
    review_count: int = Field(default=0, ge=0)

    model_config = {
        'json_schema_extra': {
            'example': {
                'name': 'Kuo-Kuang Motor',
                'logo_url': 'https://cdn.example.com/kuokuang/logo.png',
                'rating': '4.3',
                'review_count': 1280,
            }
        }
    }


class CompanyResponse(BaseModel):
    id: str
    name: str
    logo_url: Optional[str] = None
    image_url: Optional[str] = None
    rating: Decimal
    review_count: int

    @classmethod
    def from_entity(cls, company: Company) -> 'CompanyResponse':
        return cls(
            id=company.id or '',
            name=company.name,
            logo_url=company.logo_url,
            image_url=company.image_url,
            rating=company.rating,
            review_count=company.review_count,
        )


class TripCreateRequest(BaseModel):
    origin: str
    destination: str
    service_date: date
    departure_time: time
    arrival_time: Optional[time] = None
    price: Decimal = Field(gt=0)
    total_seats: int = Field(gt=0)
    available_seats: Optional[int] = Field(default=None, ge=0)
    departure_terminal: str = ''
    bus_type: str = ''
    amenities: List[str] = []
    operator_id: Optional[str] = None
    company_id: Optional[str] = None

    model_config = {
        'json_schema_extra': {
            'example': {
                'origin': 'Taipei',
                'destination': 'Kaohsiung',
                'service_date': '2026-12-24',
                'departure_time': '08:30:00',
                'arrival_time': '13:10:00',
                'price': '650.00',
                'total_seats': 40,
                'departure_terminal': 'Taipei Bus Station Gate 3',
                'bus_type': 'limousine',
                'amenities': ['wifi', 'usb'],
            }
        }
    }


class TripStatusUpdateRequest(BaseModel):
    status: TripStatus

    model_config = {'json_schema_extra': {'example': {'status': 'cancelled'}}}


class TripResponse(BaseModel):
    id: str
    origin: str
    destination: str
    service_date: date
    departure_time: time
    arrival_time: Optional[time] = None
    price: Decimal
    total_seats: int
    available_seats: int
    status: TripStatus
    departure_terminal: str
    bus_type: str
    amenities: List[str]
    operator_id: Optional[str] = None
    company_id: Optional[str] = None
    version: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, trip: Trip) -> 'TripResponse':
        return cls(
            id=trip.id or '',
            origin=trip.origin,
            destination=trip.destination,
            service_date=trip.service_date,
            departure_time=trip.departure_time,
            arrival_time=trip.arrival_time,
            price=trip.price,
            total_seats=trip.total_seats,
            available_seats=trip.available_seats,
            status=trip.status,
            departure_terminal=trip.departure_terminal,
            bus_type=trip.bus_type,
            amenities=list(trip.amenities),
            operator_id=trip.operator_id,
            company_id=trip.company_id,
            version=trip.version,
            created_at=trip.created_at,
            updated_at=trip.updated_at,
        )


class SeatResponse(BaseModel):
    id: str
    status: SeatStatus


class TripDetailResponse(TripResponse):
    """Trip with its full seat map; seats never booked are derived from the counters"""

    seats: List[SeatResponse]
    company: Optional[CompanyResponse] = None

    @classmethod
    def from_detail(cls, detail: TripDetail) -> 'TripDetailResponse':
        return cls(
            **TripResponse.from_entity(detail.trip).model_dump(),
            seats=[SeatResponse(id=seat.id, status=seat.status) for seat in detail.seats],
            company=CompanyResponse.from_entity(detail.company) if detail.company else None,
        )
