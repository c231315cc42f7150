"""initial_stackfit_schema

Revision ID: 3f1c9a2b7d10
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c9a2b7d10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

member_status = sa.Enum(
    'pending', 'pending_payment', 'active', 'inactive', 'expired',
    name='member_status_enum',
)
plan_status = sa.Enum('active', 'inactive', name='plan_status_enum')
pause_status = sa.Enum('approved', 'cancelled', name='pause_status_enum')
payment_method = sa.Enum(
    'cash', 'card', 'upi', 'bank_transfer', 'stripe', name='payment_method_enum'
)
payment_type = sa.Enum(
    'membership_fee', 'registration_fee', 'other', name='payment_type_enum'
)
payment_status = sa.Enum(
    'pending', 'completed', 'failed', name='payment_status_enum'
)
attendance_status = sa.Enum(
    'present', 'absent', 'late', name='attendance_status_enum'
)


def upgrade() -> None:
    """Upgrade schema - Create StackFit tables."""

    op.create_table(
        'admins',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id', name='pk_admins'),
    )
    op.create_index('ix_admins_email', 'admins', ['email'], unique=True)

    op.create_table(
        'role_permissions',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('role', sa.String(length=50), nullable=False),
        sa.Column('permission_name', sa.String(length=100), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_role_permissions'),
        sa.UniqueConstraint('role', 'permission_name', name='uq_role_permissions_role'),
    )
    op.create_index('ix_role_permissions_role', 'role_permissions', ['role'])

    op.create_table(
        'membership_plans',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('duration', sa.Integer(), nullable=False),
        sa.Column('price', sa.Float(), nullable=False),
        sa.Column('features', sa.JSON(), nullable=False),
        sa.Column('status', plan_status, nullable=False),
        sa.Column('created_by', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('duration >= 1', name='ck_membership_plans_duration_positive'),
        sa.CheckConstraint('price >= 0', name='ck_membership_plans_price_non_negative'),
        sa.PrimaryKeyConstraint('id', name='pk_membership_plans'),
        sa.UniqueConstraint('name', name='uq_membership_plans_name'),
    )

    op.create_table(
        'members',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('emergency_contact', sa.JSON(), nullable=True),
        sa.Column('age', sa.Integer(), nullable=True),
        sa.Column('gender', sa.String(length=20), nullable=True),
        sa.Column('date_of_birth', sa.Date(), nullable=True),
        sa.Column('medical_history', sa.Text(), nullable=True),
        sa.Column('password_hash', sa.String(length=255), nullable=True),
        sa.Column('membership_type', sa.Uuid(), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('status', member_status, nullable=False),
        sa.Column('is_paused', sa.Boolean(), nullable=False),
        sa.Column('current_pause_id', sa.Uuid(), nullable=True),
        sa.Column('last_notification_sent', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_by', sa.String(length=255), nullable=True),
        sa.Column('updated_by', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(
            ['membership_type'], ['membership_plans.id'],
            name='fk_members_membership_type_membership_plans',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_members'),
    )
    op.create_index('ix_members_email', 'members', ['email'], unique=True)
    op.create_index('ix_members_membership_type', 'members', ['membership_type'])
    op.create_index('ix_members_end_date', 'members', ['end_date'])

    op.create_table(
        'membership_pauses',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('member_id', sa.Uuid(), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('status', pause_status, nullable=False),
        sa.Column('original_end_date', sa.Date(), nullable=False),
        sa.Column('new_end_date', sa.Date(), nullable=False),
        sa.Column('created_by', sa.String(length=255), nullable=True),
        sa.Column('approved_by', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(
            ['member_id'], ['members.id'],
            name='fk_membership_pauses_member_id_members',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_membership_pauses'),
    )
    op.create_index('ix_membership_pauses_member_id', 'membership_pauses', ['member_id'])

    # members <-> membership_pauses reference each other
    with op.batch_alter_table('members') as batch_op:
        batch_op.create_foreign_key(
            'fk_members_current_pause', 'membership_pauses',
            ['current_pause_id'], ['id'],
        )

    op.create_table(
        'payments',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('member_id', sa.Uuid(), nullable=False),
        sa.Column('amount', sa.Float(), nullable=False),
        sa.Column('payment_date', sa.Date(), nullable=False),
        sa.Column('payment_method', payment_method, nullable=False),
        sa.Column('payment_type', payment_type, nullable=False),
        sa.Column('status', payment_status, nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('stripe_payment_id', sa.String(length=255), nullable=True),
        sa.Column('recorded_by', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('amount >= 0', name='ck_payments_amount_non_negative'),
        sa.ForeignKeyConstraint(
            ['member_id'], ['members.id'],
            name='fk_payments_member_id_members',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_payments'),
        sa.UniqueConstraint('stripe_payment_id', name='uq_payments_stripe_payment_id'),
    )
    op.create_index('ix_payments_member_id', 'payments', ['member_id'])
    op.create_index('ix_payments_payment_date', 'payments', ['payment_date'])

    op.create_table(
        'attendance',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('member_id', sa.Uuid(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('status', attendance_status, nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('marked_by', sa.String(length=255), nullable=True),
        sa.Column('updated_by', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(
            ['member_id'], ['members.id'],
            name='fk_attendance_member_id_members',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_attendance'),
        sa.UniqueConstraint('member_id', 'date', name='uq_attendance_member_date'),
    )
    op.create_index('ix_attendance_member_id', 'attendance', ['member_id'])
    op.create_index('ix_attendance_date', 'attendance', ['date'])


def downgrade() -> None:
    """Downgrade schema - Drop StackFit tables."""

    op.drop_index('ix_attendance_date', table_name='attendance')
    op.drop_index('ix_attendance_member_id', table_name='attendance')
    op.drop_table('attendance')

    op.drop_index('ix_payments_payment_date', table_name='payments')
    op.drop_index('ix_payments_member_id', table_name='payments')
    op.drop_table('payments')

    with op.batch_alter_table('members') as batch_op:
        batch_op.drop_constraint('fk_members_current_pause', type_='foreignkey')

    op.drop_index('ix_membership_pauses_member_id', table_name='membership_pauses')
    op.drop_table('membership_pauses')

    op.drop_index('ix_members_end_date', table_name='members')
    op.drop_index('ix_members_membership_type', table_name='members')
    op.drop_index('ix_members_email', table_name='members')
    op.drop_table('members')

    op.drop_table('membership_plans')

    op.drop_index('ix_role_permissions_role', table_name='role_permissions')
    op.drop_table('role_permissions')

    op.drop_index('ix_admins_email', table_name='admins')
    op.drop_table('admins')

    bind = op.get_bind()
    for enum_type in (
        attendance_status,
        payment_status,
        payment_type,
        payment_method,
        pause_status,
        plan_status,
        member_status,
    ):
        enum_type.drop(bind, checkfirst=True)
