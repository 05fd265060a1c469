"""create_medicine_reminder_tables

Revision ID: 3f1a9c2d7e10
Revises:
Create Date: 2026-10-17 09:30:12.418203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1a9c2d7e10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

user_role = sa.Enum('user', 'doctor', 'pharmacist', name='userrole')
dose_frequency = sa.Enum('daily', 'weekly', name='dosefrequency')
notification_type = sa.Enum(
    'appointment', 'order', 'general', 'reminder', 'alert',
    'medicine_reminder', 'low_stock_alert', 'expiry_alert',
    name='notificationtype',
)


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'medilinko_users',
        sa.Column('id', sa.String(length=50), nullable=False, comment='User ID (ULID)'),
        sa.Column('full_name', sa.String(length=200), nullable=False, comment='Full name'),
        sa.Column('email', sa.String(length=200), nullable=False, comment='Email address (unique, lower-case)'),
        sa.Column('phone', sa.String(length=20), nullable=True, comment='10-digit phone number'),
        sa.Column('role', user_role, nullable=False, comment='Role'),
        sa.Column('fcm_token', sa.String(length=500), nullable=True, comment='Primary push notification token'),
        sa.Column('created_at', sa.DateTime(), nullable=False, comment='Created at'),
        sa.Column('updated_at', sa.DateTime(), nullable=True, comment='Updated at'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_medilinko_users_id', 'medilinko_users', ['id'])
    op.create_index('ix_medilinko_users_email', 'medilinko_users', ['email'], unique=True)

    op.create_table(
        'medilinko_user_device_tokens',
        sa.Column('id', sa.String(length=50), nullable=False, comment='Record ID (ULID)'),
        sa.Column('user_id', sa.String(length=50), nullable=False, comment='User ID'),
        sa.Column('token', sa.String(length=500), nullable=False, comment='Push token'),
        sa.Column('device', sa.String(length=100), nullable=False, comment='Device label'),
        sa.Column('updated_at', sa.DateTime(), nullable=False, comment='Last registration time'),
        sa.ForeignKeyConstraint(['user_id'], ['medilinko_users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'token', name='uq_user_device_token'),
    )
    op.create_index('ix_medilinko_user_device_tokens_user_id', 'medilinko_user_device_tokens', ['user_id'])

    op.create_table(
        'medilinko_medicines',
        sa.Column('id', sa.String(length=50), nullable=False, comment='Medicine ID (ULID)'),
        sa.Column('user_id', sa.String(length=50), nullable=False, comment='Owning patient'),
        sa.Column('medicine_name', sa.String(length=200), nullable=False, comment='Medicine name'),
        sa.Column('dosage', sa.String(length=100), nullable=False, comment='Dosage label, e.g. 100mg'),
        sa.Column('start_date', sa.Date(), nullable=True, comment='First day of the course'),
        sa.Column('end_date', sa.Date(), nullable=True, comment='Last day of the course'),
        sa.Column('notes', sa.Text(), nullable=True, comment='Notes'),
        sa.Column('is_active', sa.Boolean(), nullable=False, comment='Soft delete flag'),
        sa.Column('created_at', sa.DateTime(), nullable=False, comment='Created at'),
        sa.Column('updated_at', sa.DateTime(), nullable=True, comment='Updated at'),
        sa.ForeignKeyConstraint(['user_id'], ['medilinko_users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_medilinko_medicines_id', 'medilinko_medicines', ['id'])
    op.create_index('ix_medilinko_medicines_user_id', 'medilinko_medicines', ['user_id'])
    op.create_index('ix_medilinko_medicines_is_active', 'medilinko_medicines', ['is_active'])

    op.create_table(
        'medilinko_medicine_doses',
        sa.Column('id', sa.String(length=50), nullable=False, comment='Dose ID (ULID)'),
        sa.Column('medicine_id', sa.String(length=50), nullable=False, comment='Medicine ID'),
        sa.Column('time', sa.String(length=20), nullable=False, comment="Time of day, '09:00' or '9:00 AM'"),
        sa.Column('instruction', sa.String(length=200), nullable=True, comment='e.g. After food'),
        sa.Column('frequency', dose_frequency, nullable=False, comment='daily | weekly'),
        sa.Column('days_of_week', sa.JSON(), nullable=False,
                  comment='Weekday numbers 0 (Sunday) - 6 (Saturday) for weekly doses'),
        sa.Column('created_at', sa.DateTime(), nullable=False, comment='Created at'),
        sa.ForeignKeyConstraint(['medicine_id'], ['medilinko_medicines.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_medilinko_medicine_doses_medicine_id', 'medilinko_medicine_doses', ['medicine_id'])

    op.create_table(
        'medilinko_medicine_taken_records',
        sa.Column('id', sa.String(length=50), nullable=False, comment='Record ID (ULID)'),
        sa.Column('medicine_id', sa.String(length=50), nullable=False, comment='Medicine ID'),
        sa.Column('date', sa.String(length=10), nullable=False, comment='Occurrence date YYYY-MM-DD'),
        sa.Column('time', sa.String(length=20), nullable=False, comment='Occurrence time of day'),
        sa.Column('taken_at', sa.DateTime(), nullable=False, comment='When it was marked'),
        sa.ForeignKeyConstraint(['medicine_id'], ['medilinko_medicines.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        'ix_medilinko_medicine_taken_records_medicine_id',
        'medilinko_medicine_taken_records',
        ['medicine_id'],
    )

    op.create_table(
        'medilinko_notifications',
        sa.Column('id', sa.String(length=50), nullable=False, comment='Notification ID (ULID)'),
        sa.Column('user_id', sa.String(length=50), nullable=False, comment='Recipient'),
        sa.Column('title', sa.String(length=200), nullable=False, comment='Title'),
        sa.Column('message', sa.Text(), nullable=False, comment='Body'),
        sa.Column('type', notification_type, nullable=False, comment='Notification type'),
        sa.Column('read', sa.Boolean(), nullable=False, comment='Read flag'),
        sa.Column('data', sa.JSON(), nullable=True, comment='Structured payload'),
        sa.Column('created_at', sa.DateTime(), nullable=False, comment='Created at'),
        sa.Column('updated_at', sa.DateTime(), nullable=True, comment='Updated at'),
        sa.ForeignKeyConstraint(['user_id'], ['medilinko_users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_medilinko_notifications_id', 'medilinko_notifications', ['id'])
    op.create_index('ix_medilinko_notifications_user_id', 'medilinko_notifications', ['user_id'])
    op.create_index(
        'ix_notifications_user_read_created',
        'medilinko_notifications',
        ['user_id', 'read', 'created_at'],
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_notifications_user_read_created', table_name='medilinko_notifications')
    op.drop_index('ix_medilinko_notifications_user_id', table_name='medilinko_notifications')
    op.drop_index('ix_medilinko_notifications_id', table_name='medilinko_notifications')
    op.drop_table('medilinko_notifications')
    op.drop_index('ix_medilinko_medicine_taken_records_medicine_id', table_name='medilinko_medicine_taken_records')
    op.drop_table('medilinko_medicine_taken_records')
    op.drop_index('ix_medilinko_medicine_doses_medicine_id', table_name='medilinko_medicine_doses')
    op.drop_table('medilinko_medicine_doses')
    op.drop_index('ix_medilinko_medicines_is_active', table_name='medilinko_medicines')
    op.drop_index('ix_medilinko_medicines_user_id', table_name='medilinko_medicines')
    op.drop_index('ix_medilinko_medicines_id', table_name='medilinko_medicines')
    op.drop_table('medilinko_medicines')
    op.drop_index('ix_medilinko_user_device_tokens_user_id', table_name='medilinko_user_device_tokens')
    op.drop_table('medilinko_user_device_tokens')
    op.drop_index('ix_medilinko_users_email', table_name='medilinko_users')
    op.drop_index('ix_medilinko_users_id', table_name='medilinko_users')
    op.drop_table('medilinko_users')
    notification_type.drop(op.get_bind(), checkfirst=True)
    dose_frequency.drop(op.get_bind(), checkfirst=True)
    user_role.drop(op.get_bind(), checkfirst=True)
