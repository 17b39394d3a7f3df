"""Create bookings table

Revision ID: 0001
Revises:
Create Date: 2025-10-18 09:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Upgrade database schema."""
    op.create_table('bookings',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('vehicle_id', sa.String(length=64), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('pickup_latitude', sa.Float(), nullable=False),
        sa.Column('pickup_longitude', sa.Float(), nullable=False),
        sa.Column('pickup_address', sa.Text(), nullable=False),
        sa.Column('dropoff_latitude', sa.Float(), nullable=True),
        sa.Column('dropoff_longitude', sa.Float(), nullable=True),
        sa.Column('dropoff_address', sa.Text(), nullable=True),
        sa.Column('distance', sa.Float(), nullable=True),
        sa.Column('duration', sa.Integer(), nullable=True),
        sa.Column('cost', sa.Float(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint(
            "status IN ('pending', 'confirmed', 'active', 'completed', 'cancelled')",
            name='ck_booking_status_valid'
        ),
        sa.CheckConstraint('length(pickup_address) > 0', name='ck_booking_pickup_address_not_empty'),
        sa.CheckConstraint(
            'pickup_latitude >= -90 AND pickup_latitude <= 90',
            name='ck_booking_pickup_latitude_range'
        ),
        sa.CheckConstraint(
            'pickup_longitude >= -180 AND pickup_longitude <= 180',
            name='ck_booking_pickup_longitude_range'
        ),
        sa.CheckConstraint(
            'dropoff_latitude IS NULL OR (dropoff_latitude >= -90 AND dropoff_latitude <= 90)',
            name='ck_booking_dropoff_latitude_range'
        ),
        sa.CheckConstraint(
            'dropoff_longitude IS NULL OR (dropoff_longitude >= -180 AND dropoff_longitude <= 180)',
            name='ck_booking_dropoff_longitude_range'
        ),
        sa.CheckConstraint(
            "status = 'completed' OR (end_time IS NULL AND distance IS NULL "
            "AND duration IS NULL AND cost IS NULL)",
            name='ck_booking_outcome_only_when_completed'
        ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_bookings_user_id'), 'bookings', ['user_id'], unique=False)
    op.create_index(op.f('ix_bookings_vehicle_id'), 'bookings', ['vehicle_id'], unique=False)
    op.create_index(op.f('ix_bookings_status'), 'bookings', ['status'], unique=False)
    op.create_index(op.f('ix_bookings_start_time'), 'bookings', ['start_time'], unique=False)
    op.create_index('ix_bookings_user_created', 'bookings', ['user_id', 'created_at'], unique=False)


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_index('ix_bookings_user_created', table_name='bookings')
    op.drop_index(op.f('ix_bookings_start_time'), table_name='bookings')
    op.drop_index(op.f('ix_bookings_status'), table_name='bookings')
    op.drop_index(op.f('ix_bookings_vehicle_id'), table_name='bookings')
    op.drop_index(op.f('ix_bookings_user_id'), table_name='bookings')
    op.drop_table('bookings')
