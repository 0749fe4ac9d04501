"""
Unit of Work

One unit of work is one transaction: the trip write and the booking write
either commit together or not at all. Leaving the context without commit
rolls back. Use cases open a fresh unit of work per attempt through a
factory so a retried attempt never sees the previous attempt's state.
"""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING, Callable

import anyio
from sqlalchemy.ext.asyncio import AsyncSession


if TYPE_CHECKING:
    from src.service.booking.app.interface.i_booking_command_repo import IBookingCommandRepo
    from src.service.trip.app.interface.i_trip_command_repo import ITripCommandRepo


class AbstractUnitOfWork(abc.ABC):
    """
    Usage:
        async with uow_factory() as uow:
            trip = await uow.trip_command_repo.get_by_id(trip_id=...)
            await uow.trip_command_repo.update_if_version(trip=..., expected_version=...)
            await uow.booking_command_repo.create(booking=...)
            await uow.commit()
    """

    trip_command_repo: ITripCommandRepo
    booking_command_repo: IBookingCommandRepo

    async def __aenter__(self) -> AbstractUnitOfWork:
        return self

    async def __aexit__(self, *args) -> None:
        # Rollback must finish even when the caller is being cancelled
        with anyio.CancelScope(shield=True):
            await self.rollback()

    async def commit(self) -> None:
        await self._commit()

    @abc.abstractmethod
    async def _commit(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    async def rollback(self) -> None:
        raise NotImplementedError


UnitOfWorkFactory = Callable[[], AbstractUnitOfWork]


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    def __init__(self, session_factory: Callable[[], AsyncSession]) -> None:
        self.session_factory = session_factory

    async def __aenter__(self) -> AbstractUnitOfWork:
        from src.service.booking.driven_adapter.repo.booking_command_repo_impl import (
            BookingCommandRepoImpl,
        )
        from src.service.trip.driven_adapter.repo.trip_command_repo_impl import (
            TripCommandRepoImpl,
        )

        self.session = self.session_factory()
        self.trip_command_repo = TripCommandRepoImpl(self.session)
        self.booking_command_repo = BookingCommandRepoImpl(self.session)
        return await super().__aenter__()

    async def __aexit__(self, *args) -> None:
        try:
            await super().__aexit__(*args)
        finally:
            with anyio.CancelScope(shield=True):
                await self.session.close()

    async def _commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()
