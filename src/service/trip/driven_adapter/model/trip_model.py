from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional

from sqlalchemy import JSON, CheckConstraint, Date, DateTime, Integer, Numeric, String, Time
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from src.platform.database.db_setting import Base


_JSON = JSON().with_variant(JSONB(), 'postgresql')


class CompanyModel(Base):
    __tablename__ = 'company'

    id: Mapped[str] = mapped_column(String(36), primary_key=True)  # UUID7
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    logo_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    rating: Mapped[Decimal] = mapped_column(Numeric(3, 2), nullable=False, default=0)
    review_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class TripModel(Base):
    __tablename__ = 'trip'
    __table_args__ = (
        CheckConstraint(
            'available_seats >= 0 AND available_seats <= total_seats',
            name='ck_trip_available_seats_range',
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)  # UUID7
    origin: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    destination: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    service_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    departure_time: Mapped[time] = mapped_column(Time, nullable=False)
    arrival_time: Mapped[Optional[time]] = mapped_column(Time, nullable=True)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    total_seats: Mapped[int] = mapped_column(Integer, nullable=False)
    available_seats: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default='active', index=True)
    departure_terminal: Mapped[str] = mapped_column(String(255), nullable=False, default='')
    bus_type: Mapped[str] = mapped_column(String(64), nullable=False, default='')
    amenities: Mapped[list] = mapped_column(_JSON, nullable=False, default=list)
    operator_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    company_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True, index=True)
    # [{"id": "1", "status": "booked"}, ...]; NULL until the first reservation
    seats: Mapped[Optional[list]] = mapped_column(_JSON, nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
