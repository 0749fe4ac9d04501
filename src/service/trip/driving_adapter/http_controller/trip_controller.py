from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, status

from src.platform.logging.loguru_io import Logger
from src.service.shared_kernel.domain.enum.trip_status import TripStatus
from src.service.trip.app.command.create_trip_use_case import CreateTripUseCase
from src.service.trip.app.command.update_trip_status_use_case import UpdateTripStatusUseCase
from src.service.trip.app.dto.trip_query_dto import TripFilter, TripSortKey
from src.service.trip.app.query.get_trip_use_case import GetTripUseCase
from src.service.trip.app.query.list_trips_use_case import ListTripsUseCase
from src.service.trip.driving_adapter.schema.trip_schema import (
    CompanyCreateRequest,
    CompanyResponse,
    TripCreateRequest,
    TripDetailResponse,
    TripResponse,
    TripStatusUpdateRequest,
)


router = APIRouter()


@router.get('', status_code=status.HTTP_200_OK)
@Logger.io
async def list_trips(
    origin: Optional[str] = None,
    destination: Optional[str] = None,
    service_date: Optional[date] = None,
    trip_status: Optional[TripStatus] = None,
    sort: TripSortKey = TripSortKey.DEPARTURE_ASC,
    use_case: ListTripsUseCase = Depends(ListTripsUseCase.depends),
) -> List[TripResponse]:
    """Search trips from today on; past trips are only listed under /history"""
    trip_filter = TripFilter(
        origin=origin,
        destination=destination,
        service_date=service_date,
        status=trip_status,
        sort=sort,
    )
    return [
        TripResponse.from_entity(trip) async for trip in use_case.list_trips(trip_filter=trip_filter)
    ]


@router.get('/history', status_code=status.HTTP_200_OK)
@Logger.io
async def list_trip_history(
    origin: Optional[str] = None,
    destination: Optional[str] = None,
    service_date: Optional[date] = None,
    trip_status: Optional[TripStatus] = None,
    sort: TripSortKey = TripSortKey.DEPARTURE_DESC,
    use_case: ListTripsUseCase = Depends(ListTripsUseCase.depends),
) -> List[TripResponse]:
    trip_filter = TripFilter(
        origin=origin,
        destination=destination,
        service_date=service_date,
        status=trip_status,
        sort=sort,
    )
    return [
        TripResponse.from_entity(trip)
        async for trip in use_case.list_trip_history(trip_filter=trip_filter)
    ]


@router.get('/{trip_id}', status_code=status.HTTP_200_OK)
@Logger.io
async def get_trip(
    trip_id: str,
    use_case: GetTripUseCase = Depends(GetTripUseCase.depends),
) -> TripDetailResponse:
    detail = await use_case.get_trip(trip_id=trip_id)
    return TripDetailResponse.from_detail(detail)


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_trip(
    request: TripCreateRequest,
    use_case: CreateTripUseCase = Depends(CreateTripUseCase.depends),
) -> TripResponse:
    trip = await use_case.create_trip(
        origin=request.origin,
        destination=request.destination,
        service_date=request.service_date,
        departure_time=request.departure_time,
        arrival_time=request.arrival_time,
        price=request.price,
        total_seats=request.total_seats,
        available_seats=request.available_seats,
        departure_terminal=request.departure_terminal,
        bus_type=request.bus_type,
        amenities=request.amenities,
        operator_id=request.operator_id,
        company_id=request.company_id,
    )
    return TripResponse.from_entity(trip)


@router.post('/company', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_company(
    request: CompanyCreateRequest,
    use_case: CreateTripUseCase = Depends(CreateTripUseCase.depends),
) -> CompanyResponse:
    company = await use_case.create_company(
        name=request.name,
        logo_url=request.logo_url,
        image_url=request.image_url,
        rating=request.rating,
        review_count=request.review_count,
    )
    return CompanyResponse.from_entity(company)


@router.patch('/{trip_id}/status', status_code=status.HTTP_200_OK)
@Logger.io
async def update_trip_status(
    trip_id: str,
    request: TripStatusUpdateRequest,
    use_case: UpdateTripStatusUseCase = Depends(UpdateTripStatusUseCase.depends),
) -> TripResponse:
    trip = await use_case.update_status(trip_id=trip_id, status=request.status)
    return TripResponse.from_entity(trip)
