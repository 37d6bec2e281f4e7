"""initial_schema

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None

HELD_CLAUSE = "status IN ('active', 'used')"

user_role = sa.Enum('student', 'organizer', 'admin', name='user_role')
organizer_status = sa.Enum('pending', 'approved', 'rejected', name='organizer_status')
event_category = sa.Enum(
    'academic', 'social', 'sports', 'cultural', 'career', 'volunteer', 'other', name='event_category'
)
ticket_type = sa.Enum('free', 'paid', name='ticket_type')
event_status = sa.Enum('draft', 'published', 'cancelled', 'completed', name='event_status')
ticket_status = sa.Enum('active', 'used', 'cancelled', 'expired', name='ticket_status')
return_reason = sa.Enum(
    'unable_to_attend', 'no_longer_interested', 'wrong_event', 'duplicate_ticket',
    'event_canceled', 'schedule_conflict', 'personal_reasons', 'other',
    name='return_reason'
)


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    op.create_table('organizations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('contact_email', sa.String(length=255), nullable=True),
        sa.Column('website', sa.String(length=500), nullable=True),
        sa.Column('logo', sa.String(length=500), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_by_id', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_organizations_id', 'organizations', ['id'])
    op.create_index('ix_organizations_name', 'organizations', ['name'], unique=True)

    op.create_table('users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('hashed_password', sa.String(length=255), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('role', user_role, nullable=False),
        sa.Column('organizer_status', organizer_status, nullable=True),
        sa.Column('organizer_notes', sa.Text(), nullable=True),
        sa.Column('student_id', sa.String(length=50), nullable=True),
        sa.Column('organization_id', sa.Integer(), nullable=True),
        sa.Column('is_approved', sa.Boolean(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('phone_number', sa.String(length=30), nullable=True),
        sa.Column('profile_picture', sa.String(length=500), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_role', 'users', ['role'])
    op.create_index('ix_users_organization_id', 'users', ['organization_id'])

    op.create_table('events',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('start_time', sa.String(length=10), nullable=False),
        sa.Column('end_time', sa.String(length=10), nullable=False),
        sa.Column('location', sa.String(length=255), nullable=False),
        sa.Column('category', event_category, nullable=False),
        sa.Column('ticket_type', ticket_type, nullable=False),
        sa.Column('ticket_price', sa.Float(), nullable=False),
        sa.Column('capacity', sa.Integer(), nullable=False),
        sa.Column('registrations', sa.Integer(), server_default='0', nullable=False),
        sa.Column('status', event_status, nullable=False),
        sa.Column('is_approved', sa.Boolean(), nullable=False),
        sa.Column('approval_reason', sa.Text(), nullable=True),
        sa.Column('tags', sa.JSON(), nullable=True),
        sa.Column('requirements', sa.Text(), nullable=True),
        sa.Column('contact_info', sa.String(length=255), nullable=True),
        sa.Column('image_url', sa.String(length=500), nullable=True),
        sa.Column('organization_id', sa.Integer(), nullable=True),
        sa.Column('created_by_id', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('registrations >= 0', name='ck_events_registrations_non_negative'),
        sa.CheckConstraint('capacity >= 1', name='ck_events_capacity_positive'),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id']),
        sa.ForeignKeyConstraint(['created_by_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_events_id', 'events', ['id'])
    op.create_index('ix_events_date', 'events', ['date'])
    op.create_index('ix_events_status', 'events', ['status'])
    op.create_index('ix_events_organization_id', 'events', ['organization_id'])
    op.create_index('ix_events_created_by_id', 'events', ['created_by_id'])

    op.create_table('tickets',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('ticket_id', sa.String(length=36), nullable=False),
        sa.Column('event_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('qr_code', sa.String(length=512), nullable=False),
        sa.Column('status', ticket_status, nullable=False),
        sa.Column('price', sa.Float(), nullable=False),
        sa.Column('used_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('used_by_id', sa.Integer(), nullable=True),
        sa.Column('return_reason', return_reason, nullable=True),
        sa.Column('return_comment', sa.Text(), nullable=True),
        sa.Column('returned_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['event_id'], ['events.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['used_by_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('qr_code')
    )
    op.create_index('ix_tickets_id', 'tickets', ['id'])
    op.create_index('ix_tickets_ticket_id', 'tickets', ['ticket_id'], unique=True)
    op.create_index('ix_tickets_status', 'tickets', ['status'])
    op.create_index('ix_tickets_event_user', 'tickets', ['event_id', 'user_id'])
    # One seat-holding ticket per (event, user)
    op.create_index(
        'uq_tickets_event_user_held', 'tickets', ['event_id', 'user_id'],
        unique=True,
        postgresql_where=sa.text(HELD_CLAUSE),
        sqlite_where=sa.text(HELD_CLAUSE),
    )

    op.create_table('saved_events',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('event_id', sa.Integer(), nullable=False),
        sa.Column('saved_at', sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['event_id'], ['events.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'event_id', name='uq_saved_events_user_event')
    )
    op.create_index('ix_saved_events_id', 'saved_events', ['id'])
    op.create_index('ix_saved_events_user_id', 'saved_events', ['user_id'])


def downgrade() -> None:
    op.drop_index('ix_saved_events_user_id', table_name='saved_events')
    op.drop_index('ix_saved_events_id', table_name='saved_events')
    op.drop_table('saved_events')

    op.drop_index('uq_tickets_event_user_held', table_name='tickets')
    op.drop_index('ix_tickets_event_user', table_name='tickets')
    op.drop_index('ix_tickets_status', table_name='tickets')
    op.drop_index('ix_tickets_ticket_id', table_name='tickets')
    op.drop_index('ix_tickets_id', table_name='tickets')
    op.drop_table('tickets')

    op.drop_index('ix_events_created_by_id', table_name='events')
    op.drop_index('ix_events_organization_id', table_name='events')
    op.drop_index('ix_events_status', table_name='events')
    op.drop_index('ix_events_date', table_name='events')
    op.drop_index('ix_events_id', table_name='events')
    op.drop_table('events')

    op.drop_index('ix_users_organization_id', table_name='users')
    op.drop_index('ix_users_role', table_name='users')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_index('ix_users_id', table_name='users')
    op.drop_table('users')

    op.drop_index('ix_organizations_name', table_name='organizations')
    op.drop_index('ix_organizations_id', table_name='organizations')
    op.drop_table('organizations')

    bind = op.get_bind()
    for enum in (return_reason, ticket_status, event_status, ticket_type, event_category,
                 organizer_status, user_role):
        enum.drop(bind, checkfirst=True)
