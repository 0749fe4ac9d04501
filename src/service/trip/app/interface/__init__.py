"""Application layer interfaces (Ports)"""

from src.service.trip.app.interface.i_trip_command_repo import ITripCommandRepo
from src.service.trip.app.interface.i_trip_query_repo import ITripQueryRepo

__all__ = ['ITripCommandRepo', 'ITripQueryRepo']
