from datetime import date, timedelta
from typing import Any, Optional

from fastapi.testclient import TestClient

from src.service.booking.domain.entity.booking_entity import Passenger
from test.constants import (
    BOOKING_BASE,
    DEFAULT_DESTINATION,
    DEFAULT_ORIGIN,
    DEFAULT_PRICE,
    DEFAULT_TOTAL_SEATS,
    TRIP_BASE,
)


def make_passengers(
    seat_ids: list[str], *, email: Optional[str] = 'rider@example.com'
) -> list[Passenger]:
    return [
        Passenger(
            seat_id=seat_id,
            full_name=f'Rider {seat_id}',
            phone='0912345678',
            email=email,
        )
        for seat_id in seat_ids
    ]


def passenger_payload(seat_ids: list[str]) -> list[dict]:
    return [
        {
            'seat_id': seat_id,
            'full_name': f'Rider {seat_id}',
            'phone': '0912345678',
            'email': 'rider@example.com',
        }
        for seat_id in seat_ids
    ]


def user_headers(user_id: str, *, idempotency_key: Optional[str] = None) -> dict[str, str]:
    headers = {'X-User-Id': user_id}
    if idempotency_key is not None:
        headers['Idempotency-Key'] = idempotency_key
    return headers


def assert_response_status(response, expected_status: int, message: str | None = None):
    response_text = getattr(response, 'text', getattr(response, 'content', 'N/A'))
    assert response.status_code == expected_status, (
        message or f'Expected {expected_status}, got {response.status_code}: {response_text}'
    )


def create_trip(client: TestClient, **overrides: Any) -> dict[str, Any]:
    trip_data: dict[str, Any] = {
        'origin': DEFAULT_ORIGIN,
        'destination': DEFAULT_DESTINATION,
        'service_date': (date.today() + timedelta(days=7)).isoformat(),
        'departure_time': '08:30:00',
        'price': str(DEFAULT_PRICE),
        'total_seats': DEFAULT_TOTAL_SEATS,
    }
    trip_data.update(overrides)
    response = client.post(TRIP_BASE, json=trip_data)
    assert_response_status(response, 201, 'Failed to create trip')
    return response.json()


def book_seats(
    client: TestClient,
    *,
    user_id: str,
    trip_id: str,
    seat_ids: list[str],
    total_amount: str | None = None,
    idempotency_key: Optional[str] = None,
):
    amount = total_amount if total_amount is not None else str(DEFAULT_PRICE * len(seat_ids))
    return client.post(
        BOOKING_BASE,
        json={
            'trip_id': trip_id,
            'seat_ids': seat_ids,
            'passengers': passenger_payload(seat_ids),
            'total_amount': amount,
        },
        headers=user_headers(user_id, idempotency_key=idempotency_key),
    )
