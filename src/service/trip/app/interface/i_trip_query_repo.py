from abc import ABC, abstractmethod
from datetime import date
from typing import AsyncIterator, Optional

from src.service.trip.app.dto.trip_query_dto import TripFilter
from src.service.trip.domain.entity.trip_entity import Company, Trip


class ITripQueryRepo(ABC):
    """Repository interface for trip read operations"""

    @abstractmethod
    def stream_trips(
        self, *, trip_filter: TripFilter, not_before: Optional[date] = None
    ) -> AsyncIterator[Trip]:
        """
        Yield trips matching `trip_filter` in its sort order.

        Args:
            trip_filter: exact-match constraints and sort key
            not_before: when set, trips dated before this day are skipped
        """
        pass

    @abstractmethod
    async def get_by_id(self, *, trip_id: str) -> Optional[Trip]:
        pass

    @abstractmethod
    async def get_company(self, *, company_id: str) -> Optional[Company]:
        pass
