"""Create affiliate ledger tables

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


MONEY = sa.DECIMAL(18, 2)


def upgrade() -> None:
    # Affiliates
    op.create_table(
        'affiliates',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('username', sa.String(50), nullable=False),
        sa.Column('full_name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('whatsapp', sa.String(50), nullable=True),
        sa.Column('external_identity_id', sa.String(128), nullable=False),
        sa.Column('bank_account_name', sa.String(255), nullable=True),
        sa.Column('bank_name', sa.String(255), nullable=True),
        sa.Column('bank_account_number', sa.String(50), nullable=True),
        sa.Column('total_referrals', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_earnings', MONEY, nullable=False, server_default='0'),
        sa.Column('status', sa.String(20), nullable=False, server_default='active'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('total_referrals >= 0', name='ck_affiliates_total_referrals_non_negative'),
        sa.CheckConstraint('total_earnings >= 0', name='ck_affiliates_total_earnings_non_negative'),
        sa.PrimaryKeyConstraint('id', name='pk_affiliates'),
    )
    op.create_index('ix_affiliates_username', 'affiliates', ['username'], unique=True)
    op.create_index('ix_affiliates_email', 'affiliates', ['email'], unique=True)
    op.create_index('ix_affiliates_external_identity_id', 'affiliates', ['external_identity_id'], unique=True)
    op.create_index('ix_affiliates_status', 'affiliates', ['status'])

    # Referrals
    op.create_table(
        'referrals',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('affiliate_id', sa.Integer(), nullable=False),
        sa.Column('affiliate_username', sa.String(50), nullable=False),
        sa.Column('transaction_ref', sa.String(255), nullable=False),
        sa.Column('referred_user_id', sa.String(128), nullable=False),
        sa.Column('referred_business_id', sa.String(128), nullable=False),
        sa.Column('referred_business_name', sa.String(255), nullable=False),
        sa.Column('referred_user_phone', sa.String(50), nullable=False, server_default=''),
        sa.Column('referred_user_whatsapp', sa.String(50), nullable=False, server_default=''),
        sa.Column('plan_type', sa.String(30), nullable=False),
        sa.Column('discount_amount', MONEY, nullable=False),
        sa.Column('commission_amount', MONEY, nullable=False),
        sa.Column('payment_status', sa.String(20), nullable=False, server_default='completed'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['affiliate_id'], ['affiliates.id'], ondelete='RESTRICT', name='fk_referrals_affiliate_id_affiliates'),
        sa.PrimaryKeyConstraint('id', name='pk_referrals'),
        sa.UniqueConstraint('transaction_ref', name='uq_referrals_transaction_ref'),
    )
    op.create_index('ix_referrals_affiliate_id', 'referrals', ['affiliate_id'])
    op.create_index('ix_referrals_referred_business_id', 'referrals', ['referred_business_id'])
    op.create_index('idx_referrals_affiliate_status', 'referrals', ['affiliate_id', 'payment_status'])
    op.create_index('idx_referrals_affiliate_created', 'referrals', ['affiliate_id', 'created_at'])

    # Payment claims (idempotency markers)
    op.create_table(
        'payment_claims',
        sa.Column('transaction_ref', sa.String(255), nullable=False),
        sa.Column('affiliate_id', sa.Integer(), nullable=False),
        sa.Column('claimed_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['affiliate_id'], ['affiliates.id'], ondelete='RESTRICT', name='fk_payment_claims_affiliate_id_affiliates'),
        sa.PrimaryKeyConstraint('transaction_ref', name='pk_payment_claims'),
    )
    op.create_index('ix_payment_claims_affiliate_id', 'payment_claims', ['affiliate_id'])

    # Withdrawal requests
    op.create_table(
        'withdrawal_requests',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('affiliate_id', sa.Integer(), nullable=False),
        sa.Column('affiliate_username', sa.String(50), nullable=False),
        sa.Column('affiliate_email', sa.String(255), nullable=False),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('bank_account_name', sa.String(255), nullable=False),
        sa.Column('bank_name', sa.String(255), nullable=False),
        sa.Column('bank_account_number', sa.String(50), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('requested_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('processed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('processed_by', sa.String(128), nullable=True),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('transaction_reference', sa.String(255), nullable=True),
        sa.CheckConstraint('amount > 0', name='ck_withdrawal_requests_withdrawal_amount_positive'),
        sa.ForeignKeyConstraint(['affiliate_id'], ['affiliates.id'], ondelete='RESTRICT', name='fk_withdrawal_requests_affiliate_id_affiliates'),
        sa.PrimaryKeyConstraint('id', name='pk_withdrawal_requests'),
    )
    op.create_index('ix_withdrawal_requests_affiliate_id', 'withdrawal_requests', ['affiliate_id'])
    op.create_index('idx_withdrawal_requests_status', 'withdrawal_requests', ['status', 'requested_at'])
    # At most one pending request per affiliate
    op.create_index(
        'uq_withdrawal_requests_one_pending',
        'withdrawal_requests',
        ['affiliate_id'],
        unique=True,
        postgresql_where=sa.text("status = 'pending'"),
    )

    # Coupons
    op.create_table(
        'coupons',
        sa.Column('code', sa.String(50), nullable=False),
        sa.Column('discount_kind', sa.String(20), nullable=False, server_default='per_plan'),
        sa.Column('fixed_amount', MONEY, nullable=True),
        sa.Column('plan_amounts', sa.JSON(), nullable=True),
        sa.Column('plan_type', sa.String(20), nullable=False, server_default='all'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('usage_limit', sa.Integer(), nullable=True),
        sa.Column('used_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('affiliate_id', sa.Integer(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['affiliate_id'], ['affiliates.id'], ondelete='SET NULL', name='fk_coupons_affiliate_id_affiliates'),
        sa.PrimaryKeyConstraint('code', name='pk_coupons'),
    )
    op.create_index('ix_coupons_affiliate_id', 'coupons', ['affiliate_id'])


def downgrade() -> None:
    op.drop_index('ix_coupons_affiliate_id', 'coupons')
    op.drop_table('coupons')

    op.drop_index('uq_withdrawal_requests_one_pending', 'withdrawal_requests')
    op.drop_index('idx_withdrawal_requests_status', 'withdrawal_requests')
    op.drop_index('ix_withdrawal_requests_affiliate_id', 'withdrawal_requests')
    op.drop_table('withdrawal_requests')

    op.drop_index('ix_payment_claims_affiliate_id', 'payment_claims')
    op.drop_table('payment_claims')

    op.drop_index('idx_referrals_affiliate_created', 'referrals')
    op.drop_index('idx_referrals_affiliate_status', 'referrals')
    op.drop_index('ix_referrals_referred_business_id', 'referrals')
    op.drop_index('ix_referrals_affiliate_id', 'referrals')
    op.drop_table('referrals')

    op.drop_index('ix_affiliates_status', 'affiliates')
    op.drop_index('ix_affiliates_external_identity_id', 'affiliates')
    op.drop_index('ix_affiliates_email', 'affiliates')
    op.drop_index('ix_affiliates_username', 'affiliates')
    op.drop_table('affiliates')
