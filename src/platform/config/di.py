"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/examples/fastapi-sqlalchemy.html
"""

from dependency_injector import containers, providers

from src.platform.config.core_setting import Settings
from src.platform.database.db_setting import Database
from src.platform.database.in_memory_unit_of_work import InMemoryStore, InMemoryUnitOfWork
from src.platform.database.unit_of_work import SqlAlchemyUnitOfWork
from src.service.booking.driven_adapter.repo.booking_query_repo_impl import BookingQueryRepoImpl
from src.service.booking.driven_adapter.repo.in_memory_booking_repo import (
    InMemoryBookingQueryRepo,
)
from src.service.trip.driven_adapter.repo.in_memory_trip_repo import InMemoryTripQueryRepo
from src.service.trip.driven_adapter.repo.trip_query_repo_impl import TripQueryRepoImpl


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Singleton(Settings)

    # Storage backends (STORAGE_BACKEND selects one)
    database = providers.Singleton(Database)
    in_memory_store = providers.Singleton(InMemoryStore)

    # Unit of work: a new one per transaction attempt, inject `.provider` to get the factory
    unit_of_work = providers.Selector(
        config_service.provided.STORAGE_BACKEND,
        sqlalchemy=providers.Factory(
            SqlAlchemyUnitOfWork, session_factory=database.provided.session_maker
        ),
        memory=providers.Factory(InMemoryUnitOfWork, store=in_memory_store),
    )

    # Read repositories (stateless - use session_factory per call)
    trip_query_repo = providers.Selector(
        config_service.provided.STORAGE_BACKEND,
        sqlalchemy=providers.Singleton(TripQueryRepoImpl, session_factory=database.provided.session),
        memory=providers.Singleton(InMemoryTripQueryRepo, store=in_memory_store),
    )
    booking_query_repo = providers.Selector(
        config_service.provided.STORAGE_BACKEND,
        sqlalchemy=providers.Singleton(
            BookingQueryRepoImpl, session_factory=database.provided.session
        ),
        memory=providers.Singleton(InMemoryBookingQueryRepo, store=in_memory_store),
    )


container = Container()


def setup() -> None:
    container.config_service()


def cleanup() -> None:
    container.reset_singletons()
