"""Initial schema: users, credited_payments, referral_history, withdrawals

Revision ID: 20261019_000001
Revises: 
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20261019_000001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


MONEY = sa.DECIMAL(18, 8)
BIG_MONEY = sa.DECIMAL(36, 18)


def upgrade() -> None:
    # Users and their ledger
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('username', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('referral_code', sa.String(20), nullable=False),
        sa.Column('parent_id', sa.Integer(), nullable=True),
        sa.Column('referrals_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('balance', MONEY, nullable=False, server_default='0'),
        sa.Column('bonus_earned', MONEY, nullable=False, server_default='0'),
        sa.Column('daily_profit', MONEY, nullable=False, server_default='0'),
        sa.Column('withdrawn_total', MONEY, nullable=False, server_default='0'),
        sa.Column('level', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('rank', sa.String(32), nullable=False, server_default='Starter'),
        sa.Column('daily_profit_eligible', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('eligible_since', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_daily_bonus_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['parent_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('balance >= 0', name='check_user_balance_non_negative'),
        sa.CheckConstraint('bonus_earned >= 0', name='check_user_bonus_earned_non_negative'),
        sa.CheckConstraint('daily_profit >= 0', name='check_user_daily_profit_non_negative'),
        sa.CheckConstraint('level >= 0 AND level <= 10', name='check_user_level_range'),
        sa.CheckConstraint('parent_id IS NULL OR parent_id <> id', name='check_user_not_own_parent'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_referral_code', 'users', ['referral_code'], unique=True)
    op.create_index('ix_users_parent_id', 'users', ['parent_id'])

    # Credited transactions (at-most-once crediting)
    op.create_table(
        'credited_payments',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('tx_id', sa.String(66), nullable=False),
        sa.Column('amount', BIG_MONEY, nullable=False),
        sa.Column('from_address', sa.String(42), nullable=True),
        sa.Column('chain', sa.String(20), nullable=False, server_default='BSC'),
        sa.Column('credited_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('tx_id', name='uq_credited_payments_tx_id'),
    )
    op.create_index('ix_credited_payments_user_id', 'credited_payments', ['user_id'])

    # Commission and daily bonus history
    op.create_table(
        'referral_history',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('source_user_id', sa.Integer(), nullable=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('entry_type', sa.String(20), nullable=False, server_default='commission'),
        sa.Column('depth', sa.Integer(), nullable=True),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['source_user_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint("status IN ('paid', 'pending')", name='check_referral_history_status'),
        sa.CheckConstraint(
            "entry_type IN ('commission', 'daily_bonus')",
            name='check_referral_history_entry_type',
        ),
        sa.CheckConstraint('amount >= 0', name='check_referral_history_amount_non_negative'),
    )
    op.create_index('ix_referral_history_user_id', 'referral_history', ['user_id'])
    op.create_index('idx_referral_history_user_created', 'referral_history', ['user_id', 'created_at'])

    # Withdrawal requests
    op.create_table(
        'withdrawals',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('fee', MONEY, nullable=False, server_default='0'),
        sa.Column('net_amount', MONEY, nullable=False),
        sa.Column('currency', sa.String(20), nullable=False, server_default='USDT'),
        sa.Column('chain', sa.String(20), nullable=False, server_default='BEP20'),
        sa.Column('address', sa.String(255), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('tx_id', sa.String(255), nullable=True),
        sa.Column('note', sa.Text(), nullable=True),
        sa.Column('approved_by', sa.Integer(), nullable=True),
        sa.Column('approved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('amount > 0', name='check_withdrawal_amount_positive'),
        sa.CheckConstraint(
            "status IN ('pending', 'approved', 'rejected', 'paid', 'failed')",
            name='check_withdrawal_status',
        ),
    )
    op.create_index('ix_withdrawals_user_id', 'withdrawals', ['user_id'])
    op.create_index('ix_withdrawals_status', 'withdrawals', ['status'])


def downgrade() -> None:
    op.drop_index('ix_withdrawals_status', table_name='withdrawals')
    op.drop_index('ix_withdrawals_user_id', table_name='withdrawals')
    op.drop_table('withdrawals')

    op.drop_index('idx_referral_history_user_created', table_name='referral_history')
    op.drop_index('ix_referral_history_user_id', table_name='referral_history')
    op.drop_table('referral_history')

    op.drop_index('ix_credited_payments_user_id', table_name='credited_payments')
    op.drop_table('credited_payments')

    op.drop_index('ix_users_parent_id', table_name='users')
    op.drop_index('ix_users_referral_code', table_name='users')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
