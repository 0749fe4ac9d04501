"""Conversions between trip ORM rows and domain entities."""

from typing import Optional

from src.service.shared_kernel.domain.enum.seat_status import SeatStatus
from src.service.shared_kernel.domain.enum.trip_status import TripStatus
from src.service.trip.domain.entity.trip_entity import Company, Trip
from src.service.trip.domain.seat_inventory import Seat
from src.service.trip.driven_adapter.model.trip_model import CompanyModel, TripModel


def seats_to_json(seats: Optional[tuple[Seat, ...]]) -> Optional[list[dict]]:
    if seats is None:
        return None
    return [{'id': seat.id, 'status': seat.status.value} for seat in seats]


def seats_from_json(data: Optional[list[dict]]) -> Optional[tuple[Seat, ...]]:
    if data is None:
        return None
    return tuple(Seat(id=str(item['id']), status=SeatStatus(item['status'])) for item in data)


def trip_to_entity(db_trip: TripModel) -> Trip:
    return Trip(
        id=db_trip.id,
        origin=db_trip.origin,
        destination=db_trip.destination,
        service_date=db_trip.service_date,
        departure_time=db_trip.departure_time,
        arrival_time=db_trip.arrival_time,
        price=db_trip.price,
        total_seats=db_trip.total_seats,
        available_seats=db_trip.available_seats,
        status=TripStatus(db_trip.status),
        departure_terminal=db_trip.departure_terminal or '',
        bus_type=db_trip.bus_type or '',
        amenities=list(db_trip.amenities or []),
        operator_id=db_trip.operator_id,
        company_id=db_trip.company_id,
        seats=seats_from_json(db_trip.seats),
        version=db_trip.version,
        created_at=db_trip.created_at,
        updated_at=db_trip.updated_at,
    )


def trip_to_model(trip: Trip) -> TripModel:
    return TripModel(
        id=trip.id,
        origin=trip.origin,
        destination=trip.destination,
        service_date=trip.service_date,
        departure_time=trip.departure_time,
        arrival_time=trip.arrival_time,
        price=trip.price,
        total_seats=trip.total_seats,
        available_seats=trip.available_seats,
        status=trip.status.value,
        departure_terminal=trip.departure_terminal,
        bus_type=trip.bus_type,
        amenities=list(trip.amenities),
        operator_id=trip.operator_id,
        company_id=trip.company_id,
        seats=seats_to_json(trip.seats),
        version=trip.version,
        created_at=trip.created_at,
        updated_at=trip.updated_at,
    )


def company_to_entity(db_company: CompanyModel) -> Company:
    return Company(
        id=db_company.id,
        name=db_company.name,
        logo_url=db_company.logo_url,
        image_url=db_company.image_url,
        rating=db_company.rating,
        review_count=db_company.review_count,
    )


def company_to_model(company: Company) -> CompanyModel:
    return CompanyModel(
        id=company.id,
        name=company.name,
        logo_url=company.logo_url,
        image_url=company.image_url,
        rating=company.rating,
        review_count=company.review_count,
    )
