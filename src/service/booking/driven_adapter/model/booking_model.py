from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import JSON, DateTime, Numeric, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from src.platform.database.db_setting import Base


_JSON = JSON().with_variant(JSONB(), 'postgresql')


class BookingModel(Base):
    __tablename__ = 'booking'
    __table_args__ = (
        UniqueConstraint('user_id', 'idempotency_key', name='uq_booking_user_idempotency_key'),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)  # UUID7
    user_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    trip_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    seat_ids: Mapped[list] = mapped_column(_JSON, nullable=False)
    passengers: Mapped[list] = mapped_column(_JSON, nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default='pending')
    payment_status: Mapped[str] = mapped_column(String(20), nullable=False, default='pending')
    payment_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    idempotency_key: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
