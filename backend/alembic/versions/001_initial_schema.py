"""Initial schema

Revision ID: 001
Create Date: 2026-10-18
"""
from alembic import op
import sqlalchemy as sa

revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('name', sa.String(128)),
        sa.Column('email', sa.String(256)),
        sa.Column('phone', sa.String(32)),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
    )

    op.create_table(
        'trips',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.String(64), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('source', sa.String(256), nullable=False),
        sa.Column('destination', sa.String(256), nullable=False),
        sa.Column('source_lat', sa.Float()),
        sa.Column('source_lon', sa.Float()),
        sa.Column('destination_lat', sa.Float()),
        sa.Column('destination_lon', sa.Float()),
        sa.Column('travel_date', sa.String(10), nullable=False),
        sa.Column('travel_time', sa.String(5), nullable=False),
        sa.Column('transport_mode', sa.String(20), nullable=False),
        sa.Column('optimization_mode', sa.String(20), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='active'),
        sa.Column('route_data', sa.JSON()),
        sa.Column('route_geometry', sa.JSON()),
        sa.Column('match_radius', sa.Integer(), nullable=False, server_default='10'),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
        sa.CheckConstraint('match_radius BETWEEN 1 AND 100', name='ck_trips_match_radius'),
    )
    op.create_index('idx_trips_user_id', 'trips', ['user_id'])
    op.create_index('idx_trips_status', 'trips', ['status'])

    op.create_table(
        'trip_matches',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('trip_id', sa.Integer(), sa.ForeignKey('trips.id', ondelete='CASCADE'), nullable=False),
        sa.Column('matched_trip_id', sa.Integer(), sa.ForeignKey('trips.id', ondelete='CASCADE'), nullable=False),
        sa.Column('match_score', sa.Integer(), nullable=False),
        sa.Column('match_reasons', sa.Text()),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('idx_trip_matches_trip', 'trip_matches', ['trip_id', 'status'])
    op.create_index('idx_trip_matches_matched', 'trip_matches', ['matched_trip_id'])

    op.create_table(
        'groups',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(128), nullable=False),
        sa.Column('created_by', sa.String(64), sa.ForeignKey('users.id', ondelete='SET NULL')),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
    )

    op.create_table(
        'group_members',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('group_id', sa.Integer(), sa.ForeignKey('groups.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.String(64), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('joined_at', sa.DateTime(), server_default=sa.func.now()),
        sa.UniqueConstraint('group_id', 'user_id', name='uix_group_member'),
    )

    op.create_table(
        'messages',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('group_id', sa.Integer(), sa.ForeignKey('groups.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.String(64), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index('idx_messages_group_created', 'messages', ['group_id', 'created_at'])

    op.create_table(
        'emergency_contacts',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.String(64), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(128), nullable=False),
        sa.Column('phone', sa.String(32), nullable=False),
        sa.Column('email', sa.String(256), nullable=False),
        sa.Column('relationship', sa.String(64)),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
    )

    op.create_table(
        'emergency_alerts',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.String(64), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('trip_id', sa.Integer(), sa.ForeignKey('trips.id', ondelete='SET NULL')),
        sa.Column('alert_type', sa.String(32), nullable=False),
        sa.Column('location_lat', sa.Float()),
        sa.Column('location_lng', sa.Float()),
        sa.Column('location_name', sa.String(256)),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('sent_to', sa.JSON()),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index('idx_emergency_alerts_user', 'emergency_alerts', ['user_id', 'created_at'])


def downgrade():
    op.drop_table('emergency_alerts')
    op.drop_table('emergency_contacts')
    op.drop_table('messages')
    op.drop_table('group_members')
    op.drop_table('groups')
    op.drop_table('trip_matches')
    op.drop_table('trips')
    op.drop_table('users')
