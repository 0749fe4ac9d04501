"""Application layer DTOs"""

from src.service.trip.app.dto.trip_query_dto import TripDetail, TripFilter, TripSortKey

__all__ = ['TripDetail', 'TripFilter', 'TripSortKey']
