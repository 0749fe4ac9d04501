"""init_trip_booking_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-18

Schema:
- company: Bus operators with rating and review count
- trip: Scheduled trips with seat counters, explicit seat list and version
- booking: Seat bookings with passengers, status and payment status

Note: trip.seats stays NULL until the first reservation on the trip; its
seats are then derived from total_seats / available_seats.
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB


# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_JSON = sa.JSON().with_variant(JSONB(), 'postgresql')


def upgrade() -> None:
    op.create_table(
        'company',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('logo_url', sa.String(length=1024), nullable=True),
        sa.Column('image_url', sa.String(length=1024), nullable=True),
        sa.Column('rating', sa.Numeric(3, 2), nullable=False),
        sa.Column('review_count', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'trip',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('origin', sa.String(length=255), nullable=False),
        sa.Column('destination', sa.String(length=255), nullable=False),
        sa.Column('service_date', sa.Date(), nullable=False),
        sa.Column('departure_time', sa.Time(), nullable=False),
        sa.Column('arrival_time', sa.Time(), nullable=True),
        sa.Column('price', sa.Numeric(12, 2), nullable=False),
        sa.Column('total_seats', sa.Integer(), nullable=False),
        sa.Column('available_seats', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('departure_terminal', sa.String(length=255), nullable=False),
        sa.Column('bus_type', sa.String(length=64), nullable=False),
        sa.Column('amenities', _JSON, nullable=False),
        sa.Column('operator_id', sa.String(length=64), nullable=True),
        sa.Column('company_id', sa.String(length=36), nullable=True),
        sa.Column('seats', _JSON, nullable=True),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column(
            'created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False
        ),
        sa.Column(
            'updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False
        ),
        sa.CheckConstraint(
            'available_seats >= 0 AND available_seats <= total_seats',
            name='ck_trip_available_seats_range',
        ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_trip_origin'), 'trip', ['origin'], unique=False)
    op.create_index(op.f('ix_trip_destination'), 'trip', ['destination'], unique=False)
    op.create_index(op.f('ix_trip_service_date'), 'trip', ['service_date'], unique=False)
    op.create_index(op.f('ix_trip_status'), 'trip', ['status'], unique=False)
    op.create_index(op.f('ix_trip_company_id'), 'trip', ['company_id'], unique=False)

    op.create_table(
        'booking',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=128), nullable=False),
        sa.Column('trip_id', sa.String(length=36), nullable=False),
        sa.Column('seat_ids', _JSON, nullable=False),
        sa.Column('passengers', _JSON, nullable=False),
        sa.Column('total_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('payment_status', sa.String(length=20), nullable=False),
        sa.Column('payment_id', sa.String(length=64), nullable=True),
        sa.Column('idempotency_key', sa.String(length=128), nullable=True),
        sa.Column(
            'created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False
        ),
        sa.Column(
            'updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False
        ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'idempotency_key', name='uq_booking_user_idempotency_key'),
    )
    op.create_index(op.f('ix_booking_user_id'), 'booking', ['user_id'], unique=False)
    op.create_index(op.f('ix_booking_trip_id'), 'booking', ['trip_id'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_booking_trip_id'), table_name='booking')
    op.drop_index(op.f('ix_booking_user_id'), table_name='booking')
    op.drop_table('booking')

    op.drop_index(op.f('ix_trip_company_id'), table_name='trip')
    op.drop_index(op.f('ix_trip_status'), table_name='trip')
    op.drop_index(op.f('ix_trip_service_date'), table_name='trip')
    op.drop_index(op.f('ix_trip_destination'), table_name='trip')
    op.drop_index(op.f('ix_trip_origin'), table_name='trip')
    op.drop_table('trip')

    op.drop_table('company')
