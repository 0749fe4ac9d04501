from prometheus_client import Counter, Histogram


class BookingMetrics:
    """Reservation transaction metrics, exposed on /metrics"""

    def __init__(self):
        self.seat_reservation_requests = Counter(
            'seat_reservation_requests_total',
            'Total seat reservation requests',
            ['result'],  # success/replayed/rejected/conflict/timeout/error
        )

        self.seat_reservation_duration = Histogram(
            'seat_reservation_duration_seconds',
            'Seat reservation processing time including retries',
            ['result'],
            buckets=[0.005, 0.01, 0.05, 0.1, 0.2, 0.5, 1.0, 2.0, 5.0, 10.0],
        )

        self.optimistic_lock_conflicts = Counter(
            'optimistic_lock_conflicts_total',
            'Attempts discarded because the trip or booking changed concurrently',
            ['operation'],  # reserve/cancel/update_status/pay
        )

        self.seats_booked = Counter('seats_booked_total', 'Seats moved to booked')

        self.seats_released = Counter('seats_released_total', 'Seats moved back to available')

        self.booking_status_changes = Counter(
            'booking_status_changes_total',
            'Booking status transitions',
            ['status'],
        )

    def record_seat_reservation(self, *, result: str, duration: float, seat_count: int = 0):
        self.seat_reservation_requests.labels(result=result).inc()
        self.seat_reservation_duration.labels(result=result).observe(duration)
        if result == 'success':
            self.seats_booked.inc(seat_count)

    def record_conflict(self, *, operation: str):
        self.optimistic_lock_conflicts.labels(operation=operation).inc()

    def record_status_change(self, *, status: str, released_seats: int = 0):
        self.booking_status_changes.labels(status=status).inc()
        if released_seats:
            self.seats_released.inc(released_seats)


# Global metrics instance
metrics = BookingMetrics()
