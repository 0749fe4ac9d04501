from abc import ABC, abstractmethod
from typing import Optional

from src.service.trip.domain.entity.trip_entity import Company, Trip


class ITripCommandRepo(ABC):
    """
    Trip write side. Always used through a unit of work so that the trip
    write and the booking write commit together.
    """

    @abstractmethod
    async def get_by_id(self, *, trip_id: str) -> Optional[Trip]:
        """Read inside the current transaction"""
        pass

    @abstractmethod
    async def create(self, *, trip: Trip) -> Trip:
        pass

    @abstractmethod
    async def create_company(self, *, company: Company) -> Company:
        pass

    @abstractmethod
    async def update_if_version(self, *, trip: Trip, expected_version: int) -> None:
        """
        Conditional write: persist `trip` only if the stored version is still
        `expected_version`.

        Raises:
            OptimisticLockError: another writer got there first
        """
        pass
