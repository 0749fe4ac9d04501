"""
Test Configuration and Fixtures

- Environment is set before any application import (settings read it at import time)
- In-memory storage backs every use case test; SQLAlchemy repos run on sqlite+aiosqlite
- Trips and companies are seeded straight into the store, bookings go through use cases

Architecture:
- Unit tests (test/**/unit/): mock the unit of work / repos with AsyncMock
- API tests (*_api_integration_test.py): TestClient over src.main.app, memory backend
- Integration tests (test/**/integration/): real use cases on a real backend
"""

# =============================================================================
# Environment setup MUST happen before any other imports
# =============================================================================
import os
from pathlib import Path


def _early_setup_test_environment() -> None:
    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['TEST_LOG_DIR'] = str(test_log_dir)

    os.environ['STORAGE_BACKEND'] = 'memory'
    os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///:memory:'
    os.environ['SERVICE_FEE'] = '0'
    os.environ['ENFORCE_AMOUNT_MATCH'] = 'true'
    os.environ['AUTO_CONFIRM_BOOKINGS'] = 'false'
    os.environ['REQUIRE_PASSENGER_CONTACT'] = 'true'
    os.environ['RESERVATION_MAX_RETRIES'] = '3'


_early_setup_test_environment()

from collections.abc import Callable, Generator  # noqa: E402
from datetime import date, time, timedelta  # noqa: E402
from decimal import Decimal  # noqa: E402
from typing import Any  # noqa: E402

from fastapi.testclient import TestClient  # noqa: E402
import pytest  # noqa: E402

from src.platform.config.core_setting import Settings  # noqa: E402
from src.platform.database.in_memory_unit_of_work import (  # noqa: E402
    InMemoryStore,
    InMemoryUnitOfWork,
)
from src.platform.database.unit_of_work import UnitOfWorkFactory  # noqa: E402
from src.service.shared_kernel.domain.enum.trip_status import TripStatus  # noqa: E402
from src.service.trip.domain.entity.trip_entity import Company, Trip  # noqa: E402
from test.constants import (  # noqa: E402
    DEFAULT_DESTINATION,
    DEFAULT_ORIGIN,
    DEFAULT_PRICE,
    DEFAULT_TOTAL_SEATS,
)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        STORAGE_BACKEND='memory',
        RESERVATION_MAX_RETRIES=3,
        STORAGE_TIMEOUT_SECONDS=5.0,
        MAX_SEATS_PER_BOOKING=5,
        SERVICE_FEE=Decimal('0'),
        AMOUNT_TOLERANCE=Decimal('0.01'),
        ENFORCE_AMOUNT_MATCH=True,
        AUTO_CONFIRM_BOOKINGS=False,
        REQUIRE_PASSENGER_CONTACT=True,
    )


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def uow_factory(store: InMemoryStore) -> UnitOfWorkFactory:
    return lambda: InMemoryUnitOfWork(store)


@pytest.fixture
def seed_trip(store: InMemoryStore) -> Callable[..., Trip]:
    """Put a trip straight into the store; defaults to an active trip a week from today"""

    def _seed(**overrides: Any) -> Trip:
        fields: dict[str, Any] = {
            'origin': DEFAULT_ORIGIN,
            'destination': DEFAULT_DESTINATION,
            'service_date': date.today() + timedelta(days=7),
            'departure_time': time(8, 30),
            'price': DEFAULT_PRICE,
            'total_seats': DEFAULT_TOTAL_SEATS,
            'status': TripStatus.ACTIVE,
        }
        fields.update(overrides)
        trip = Trip.create(**fields)
        store.trips[trip.id] = trip
        return trip

    return _seed


@pytest.fixture
def seed_company(store: InMemoryStore) -> Callable[..., Company]:
    def _seed(name: str = 'Kuo-Kuang Motor', rating: Decimal = Decimal('4.5')) -> Company:
        company = Company.create(name=name, rating=rating)
        store.companies[company.id] = company
        return company

    return _seed


@pytest.fixture(autouse=True)
def _reset_container() -> Generator[None, None, None]:
    """Each test gets fresh container singletons (in-memory store, settings)"""
    from src.platform.config.di import container

    yield
    container.reset_singletons()


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """HTTP client over the production app; entering it runs the lifespan (DI wiring)"""
    from src.main import app

    with TestClient(app) as test_client:
        yield test_client
