from typing import List, Optional

from fastapi import APIRouter, Depends, status
from opentelemetry import trace

from src.platform.auth.current_user import get_current_user_id, get_idempotency_key
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.command.cancel_booking_use_case import CancelBookingUseCase
from src.service.booking.app.command.mock_payment_use_case import MockPaymentUseCase
from src.service.booking.app.command.reserve_seats_use_case import ReserveSeatsUseCase
from src.service.booking.app.command.update_booking_status_use_case import (
    UpdateBookingStatusUseCase,
)
from src.service.booking.app.query.get_booking_use_case import GetBookingUseCase
from src.service.booking.app.query.list_bookings_use_case import ListBookingsUseCase
from src.service.booking.driving_adapter.schema.booking_schema import (
    BookingCreateRequest,
    BookingDetailResponse,
    BookingResponse,
    BookingStatusUpdateRequest,
    CancelBookingResponse,
    PaymentRequest,
    PaymentResponse,
)
from src.service.shared_kernel.domain.enum.booking_partition import BookingPartition


router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_booking(
    request: BookingCreateRequest,
    user_id: str = Depends(get_current_user_id),
    idempotency_key: Optional[str] = Depends(get_idempotency_key),
    use_case: ReserveSeatsUseCase = Depends(ReserveSeatsUseCase.depends),
) -> BookingResponse:
    with tracer.start_as_current_span('controller.create_booking') as span:
        span.set_attribute('trip_id', request.trip_id)
        span.set_attribute('user_id', user_id)

        booking = await use_case.reserve_seats(
            user_id=user_id,
            trip_id=request.trip_id,
            seat_ids=request.seat_ids,
            passengers=[p.to_entity() for p in request.passengers],
            total_amount=request.total_amount,
            idempotency_key=idempotency_key,
        )
        span.set_attribute('booking.id', booking.id)
        return BookingResponse.from_entity(booking)


@router.get('/my_booking', status_code=status.HTTP_200_OK)
@Logger.io
async def list_my_bookings(
    partition: Optional[BookingPartition] = None,
    user_id: str = Depends(get_current_user_id),
    use_case: ListBookingsUseCase = Depends(ListBookingsUseCase.depends),
) -> List[BookingDetailResponse]:
    details = await use_case.list_user_bookings(user_id=user_id, partition=partition)
    return [BookingDetailResponse.from_detail(detail) for detail in details]


@router.get('/{booking_id}', status_code=status.HTTP_200_OK)
@Logger.io
async def get_booking(
    booking_id: str,
    user_id: str = Depends(get_current_user_id),
    use_case: GetBookingUseCase = Depends(GetBookingUseCase.depends),
) -> BookingDetailResponse:
    detail = await use_case.get_booking(user_id=user_id, booking_id=booking_id)
    return BookingDetailResponse.from_detail(detail)


@router.patch('/{booking_id}', status_code=status.HTTP_200_OK)
@Logger.io
async def cancel_booking(
    booking_id: str,
    user_id: str = Depends(get_current_user_id),
    use_case: CancelBookingUseCase = Depends(CancelBookingUseCase.depends),
) -> CancelBookingResponse:
    booking = await use_case.cancel_booking(user_id=user_id, booking_id=booking_id)
    return CancelBookingResponse(
        id=booking.id,
        status=booking.status,
        payment_status=booking.payment_status,
        released_seat_ids=list(booking.seat_ids),
    )


@router.patch('/{booking_id}/status', status_code=status.HTTP_200_OK)
@Logger.io
async def update_booking_status(
    booking_id: str,
    request: BookingStatusUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    use_case: UpdateBookingStatusUseCase = Depends(UpdateBookingStatusUseCase.depends),
) -> BookingResponse:
    booking = await use_case.update_status(
        user_id=user_id,
        booking_id=booking_id,
        status=request.status,
        payment_status=request.payment_status,
    )
    return BookingResponse.from_entity(booking)


@router.post('/{booking_id}/pay', status_code=status.HTTP_200_OK)
@Logger.io
async def pay_booking(
    booking_id: str,
    request: PaymentRequest,
    user_id: str = Depends(get_current_user_id),
    use_case: MockPaymentUseCase = Depends(MockPaymentUseCase.depends),
) -> PaymentResponse:
    booking = await use_case.pay_booking(
        user_id=user_id, booking_id=booking_id, card_number=request.card_number
    )
    return PaymentResponse(
        booking_id=booking.id,
        payment_id=booking.payment_id,
        status=booking.status,
        payment_status=booking.payment_status,
    )
