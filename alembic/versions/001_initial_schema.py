"""Initial schema: users, clients, follow-ups, interactions, admin notifications, journeys

Revision ID: 001_initial_schema
Revises:
Create Date: 2025-01-12
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


ENUMS = {
    'accounttype': ('individual', 'corporate'),
    'userrole': ('user', 'admin', 'master_admin'),
    'accountstatus': ('trial', 'active', 'expired', 'cancelled'),
    'clientstatus': ('prospect', 'lead', 'active', 'client', 'inactive', 'archived'),
    'priority': ('low', 'medium', 'high', 'urgent'),
    'followupstatus': ('pending', 'completed', 'overdue'),
    'interactiontype': ('call', 'email', 'meeting', 'message', 'note'),
    'adminnotificationtype': (
        'user_registration', 'user_login', 'role_change', 'trial_expiring',
        'trial_expired', 'admin_action', 'system_alert',
    ),
    'notificationpriority': ('low', 'medium', 'high', 'critical'),
    'milestonetype': (
        'account_created', 'first_client_added', 'first_follow_up_scheduled',
        'first_interaction_logged', 'five_clients_milestone', 'ten_follow_ups_milestone',
        'first_export', 'trial_started', 'account_upgraded', 'profile_completed',
        'first_email_sent', 'advanced_reporting_used', 'twenty_clients_milestone',
        'fifty_interactions_milestone',
    ),
    'milestonecategory': ('getting_started', 'client_management', 'engagement', 'growth', 'advanced'),
    'journeystage': ('onboarding', 'exploring', 'active', 'power_user', 'expert'),
}


def enum(name):
    """Column type for an enum created up front (types are shared across tables)."""
    return postgresql.ENUM(*ENUMS[name], name=name, create_type=False)


def upgrade():
    """Create all tables."""
    bind = op.get_bind()
    for name, values in ENUMS.items():
        postgresql.ENUM(*values, name=name).create(bind, checkfirst=True)

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('hashed_password', sa.String(255), nullable=False),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('account_type', enum('accounttype'), nullable=False, server_default='individual'),
        sa.Column('company', sa.String(255)),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('user_role', enum('userrole'), nullable=False, server_default='user'),
        sa.Column('account_status', enum('accountstatus'), nullable=False, server_default='trial'),
        sa.Column('trial_ends_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('trial_email_sent', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_user_role', 'users', ['user_role'])
    op.create_index('ix_users_account_status', 'users', ['account_status'])
    op.create_index('ix_users_trial_ends_at', 'users', ['trial_ends_at'])
    op.create_index('idx_users_is_active', 'users', ['is_active'])

    op.create_table(
        'clients',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(50)),
        sa.Column('company', sa.String(255)),
        sa.Column('position', sa.String(255)),
        sa.Column('status', enum('clientstatus'), nullable=False, server_default='prospect'),
        sa.Column('priority', enum('priority'), nullable=False, server_default='medium'),
        sa.Column('category', sa.String(100)),
        sa.Column('source', sa.String(100)),
        sa.Column('tags', sa.JSON(), nullable=False, server_default='[]'),
        sa.Column('notes', sa.Text()),
        sa.Column('last_contact_date', sa.DateTime()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    for column in ('id', 'user_id', 'email', 'status', 'priority', 'created_at'):
        op.create_index(f'ix_clients_{column}', 'clients', [column])

    op.create_table(
        'follow_ups',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('client_id', sa.Integer(), sa.ForeignKey('clients.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('due_date', sa.DateTime(), nullable=False),
        sa.Column('status', enum('followupstatus'), nullable=False, server_default='pending'),
        sa.Column('priority', enum('priority'), nullable=False, server_default='medium'),
        sa.Column('completed_at', sa.DateTime()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    for column in ('id', 'user_id', 'client_id', 'due_date', 'status', 'priority', 'created_at'):
        op.create_index(f'ix_follow_ups_{column}', 'follow_ups', [column])

    op.create_table(
        'interactions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('client_id', sa.Integer(), sa.ForeignKey('clients.id', ondelete='CASCADE'), nullable=False),
        sa.Column('type', enum('interactiontype'), nullable=False),
        sa.Column('notes', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    for column in ('id', 'user_id', 'client_id', 'type', 'created_at'):
        op.create_index(f'ix_interactions_{column}', 'interactions', [column])

    op.create_table(
        'admin_notifications',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('type', enum('adminnotificationtype'), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('user_id', sa.Integer()),
        sa.Column('user_name', sa.String(255)),
        sa.Column('user_email', sa.String(255)),
        sa.Column('priority', enum('notificationpriority'), nullable=False, server_default='medium'),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('data', sa.JSON()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    for column in ('id', 'type', 'priority', 'is_read', 'created_at'):
        op.create_index(f'ix_admin_notifications_{column}', 'admin_notifications', [column])

    op.create_table(
        'user_journey_milestones',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('milestone_type', enum('milestonetype'), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('is_completed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('completed_at', sa.DateTime()),
        sa.Column('points', sa.Integer(), nullable=False, server_default='10'),
        sa.Column('category', enum('milestonecategory'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('user_id', 'milestone_type', name='unique_user_milestone'),
    )
    for column in ('id', 'user_id', 'milestone_type', 'is_completed', 'category'):
        op.create_index(f'ix_user_journey_milestones_{column}', 'user_journey_milestones', [column])

    op.create_table(
        'user_journey_progress',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('total_points', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('completed_milestones', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('current_level', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('journey_stage', enum('journeystage'), nullable=False, server_default='onboarding'),
        sa.Column('last_activity_at', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_user_journey_progress_id', 'user_journey_progress', ['id'])
    op.create_index('ix_user_journey_progress_user_id', 'user_journey_progress', ['user_id'], unique=True)
    op.create_index('ix_user_journey_progress_current_level', 'user_journey_progress', ['current_level'])
    op.create_index('ix_user_journey_progress_journey_stage', 'user_journey_progress', ['journey_stage'])


def downgrade():
    """Drop all tables and enum types."""
    for table in (
        'user_journey_progress',
        'user_journey_milestones',
        'admin_notifications',
        'interactions',
        'follow_ups',
        'clients',
        'users',
    ):
        op.drop_table(table)

    bind = op.get_bind()
    for name in ENUMS:
        postgresql.ENUM(name=name).drop(bind, checkfirst=True)
