class CustomBaseError(Exception):
    """Base class for all custom exceptions - controls logging behavior in @Logger.io"""

    def __init__(self, message: str, status_code: int) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class DomainError(CustomBaseError):
    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message, status_code)


class ForbiddenError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 403)


class NotFoundError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 404)


class ConflictError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 409)


class AuthenticationError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 401)


# ============================ Trip / Booking ============================


class TripNotFound(NotFoundError):
    def __init__(self, trip_id: str) -> None:
        self.trip_id = trip_id
        super().__init__(f'Trip {trip_id} not found')


class BookingNotFound(NotFoundError):
    def __init__(self, booking_id: str) -> None:
        self.booking_id = booking_id
        super().__init__(f'Booking {booking_id} not found')


class TripNotBookable(DomainError):
    pass


class BookingValidationError(DomainError):
    """Request rejected before any storage access"""


class InsufficientAvailability(DomainError):
    def __init__(self, *, requested: int, available: int) -> None:
        self.requested = requested
        self.available = available
        super().__init__(f'Only {available} seats available, {requested} requested')


class InvalidAmount(DomainError):
    pass


class AlreadyCancelled(DomainError):
    def __init__(self, booking_id: str) -> None:
        self.booking_id = booking_id
        super().__init__(f'Booking {booking_id} is already cancelled')


class SeatUnavailable(ConflictError):
    def __init__(self, seat_id: str) -> None:
        self.seat_id = seat_id
        super().__init__(f'Seat {seat_id} is not available')


class ReservationConflict(ConflictError):
    """Contention exhausted the retry budget; a plain retry may succeed"""

    def __init__(self, trip_id: str, attempts: int) -> None:
        self.trip_id = trip_id
        self.attempts = attempts
        super().__init__(f'Trip {trip_id} is busy, gave up after {attempts} attempts')


class ReservationTimeout(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 504)


class OptimisticLockError(Exception):
    """Conditional write lost the race; retried by the caller, never surfaced"""
