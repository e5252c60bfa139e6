"""Initial migration

Revision ID: 001
Revises: 
Create Date: 2025-09-18 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from tableside.config import settings

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create users table
    op.create_table(
        'users',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('email', sa.String(255), unique=True, nullable=False),
        sa.Column('full_name', sa.String(255)),
        sa.Column('role', sa.String(50), default='waiter'),
        sa.Column('is_active', sa.Boolean(), default=True),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
    )
    
    # Create area_options table
    area_options = op.create_table(
        'area_options',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('value', sa.String(50), unique=True, nullable=False),
        sa.Column('label', sa.String(100), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
    )
    
    # Create tables table
    op.create_table(
        'tables',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('number', sa.String(20), unique=True, nullable=False),
        sa.Column('capacity', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='available'),
        sa.Column('area', sa.String(50), nullable=False),
        sa.Column('location_description', sa.Text()),
        sa.Column('notes', sa.Text()),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
        sa.CheckConstraint('capacity > 0', name='ck_tables_capacity_positive'),
        sa.CheckConstraint(
            "status IN ('available', 'occupied', 'reserved', 'cleaning', 'out_of_order')",
            name='ck_tables_status',
        ),
    )
    op.create_index('ix_tables_status', 'tables', ['status'])
    op.create_index('ix_tables_area', 'tables', ['area'])
    
    # Create table_usage_history table
    op.create_table(
        'table_usage_history',
        sa.Column('usage_id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('table_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('tables.id', ondelete='CASCADE'), nullable=False),
        sa.Column('order_id', postgresql.UUID(as_uuid=True)),
        sa.Column('customer_name', sa.String(100)),
        sa.Column('customer_phone', sa.String(20)),
        sa.Column('guest_count', sa.Integer(), nullable=False),
        sa.Column('start_time', sa.DateTime(), nullable=False),
        sa.Column('end_time', sa.DateTime()),
        sa.Column('duration_minutes', sa.Integer()),
        sa.Column('total_order_amount', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('total_payment_amount', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('usage_type', sa.String(50)),
        sa.Column('notes', sa.Text()),
        sa.Column('waiter_assigned', sa.String(100)),
        sa.Column('order_placed_at', sa.DateTime()),
        sa.Column('food_served_at', sa.DateTime()),
        sa.Column('payment_completed_at', sa.DateTime()),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
    )
    op.create_index('ix_table_usage_history_table_id', 'table_usage_history', ['table_id'])
    op.create_index('ix_table_usage_history_start_time', 'table_usage_history', ['start_time'])
    op.create_index('ix_table_usage_history_end_time', 'table_usage_history', ['end_time'])
    op.create_index(
        'uq_usage_open_session_per_table',
        'table_usage_history',
        ['table_id'],
        unique=True,
        postgresql_where=sa.text('end_time IS NULL'),
    )
    
    # Create qr_codes table
    op.create_table(
        'qr_codes',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('table_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('tables.id', ondelete='CASCADE'), unique=True, nullable=False),
        sa.Column('token', sa.String(255), unique=True, nullable=False),
        sa.Column('qr_type', sa.String(50), default='table_ordering'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('expires_at', sa.DateTime()),
        sa.Column('scan_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_scanned_at', sa.DateTime()),
        sa.Column('generated_at', sa.DateTime(), default=sa.func.now()),
    )
    
    # Create audit_logs table
    op.create_table(
        'audit_logs',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('actor_id', postgresql.UUID(as_uuid=True)),
        sa.Column('actor_name', sa.String(255)),
        sa.Column('action', sa.String(100), nullable=False),
        sa.Column('resource_type', sa.String(50)),
        sa.Column('resource_id', sa.String(64)),
        sa.Column('data_json', postgresql.JSON()),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
    )
    op.create_index('ix_audit_logs_resource', 'audit_logs', ['resource_type', 'resource_id'])
    
    # Seed default areas (DEFAULT_AREAS setting)
    op.bulk_insert(
        area_options,
        [{'value': value, 'label': label} for value, label in settings.default_areas_list],
    )


def downgrade() -> None:
    op.drop_table('audit_logs')
    op.drop_table('qr_codes')
    op.drop_index('uq_usage_open_session_per_table', table_name='table_usage_history')
    op.drop_table('table_usage_history')
    op.drop_table('tables')
    op.drop_table('area_options')
    op.drop_table('users')
