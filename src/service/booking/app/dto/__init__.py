"""Application layer DTOs"""

from src.service.booking.app.dto.booking_detail_dto import BookingDetail, TripSummary

__all__ = ['BookingDetail', 'TripSummary']
