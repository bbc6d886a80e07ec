"""create bookings and archived_bookings tables

Revision ID: 3f1c9a7d2b10
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c9a7d2b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


BOOKING_STATUSES = ('Booked', 'Diagnosing', 'Repairing', 'Ready', 'Completed')


def _booking_columns():
    # Columns shared by the active and the archive table
    return [
        sa.Column('tracking_id', sa.String(length=12), nullable=False),
        sa.Column('customer_name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('device_type', sa.String(length=255), nullable=False),
        sa.Column('issue_description', sa.Text(), nullable=True),
        sa.Column('service_type', sa.String(length=50), nullable=False, server_default='Drop-off'),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('booking_date', sa.String(length=32), nullable=True),
        sa.Column('booking_time', sa.String(length=32), nullable=True),
        sa.Column('images', sa.Text(), nullable=False, server_default='[]'),
        sa.Column('status', sa.Enum(*BOOKING_STATUSES, name='booking_status', native_enum=False, create_constraint=True),
                  nullable=False, server_default='Booked'),
        sa.Column('created_at', sa.TIMESTAMP(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.TIMESTAMP(), nullable=True),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'bookings',
        sa.Column('id', sa.Integer(), primary_key=True),
        *_booking_columns(),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_bookings_id', 'bookings', ['id'])
    op.create_index('ix_bookings_tracking_id', 'bookings', ['tracking_id'], unique=True)
    op.create_index('ix_bookings_created_at', 'bookings', ['created_at'])

    op.create_table(
        'archived_bookings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('original_id', sa.Integer(), nullable=False),
        *_booking_columns(),
        sa.Column('archived_at', sa.TIMESTAMP(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_archived_bookings_id', 'archived_bookings', ['id'])
    op.create_index('ix_archived_bookings_original_id', 'archived_bookings', ['original_id'], unique=True)
    op.create_index('ix_archived_bookings_tracking_id', 'archived_bookings', ['tracking_id'])
    op.create_index('ix_archived_bookings_archived_at', 'archived_bookings', ['archived_at'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_archived_bookings_archived_at', table_name='archived_bookings')
    op.drop_index('ix_archived_bookings_tracking_id', table_name='archived_bookings')
    op.drop_index('ix_archived_bookings_original_id', table_name='archived_bookings')
    op.drop_index('ix_archived_bookings_id', table_name='archived_bookings')
    op.drop_table('archived_bookings')

    op.drop_index('ix_bookings_created_at', table_name='bookings')
    op.drop_index('ix_bookings_tracking_id', table_name='bookings')
    op.drop_index('ix_bookings_id', table_name='bookings')
    op.drop_table('bookings')
