"""create subscription tables

Revision ID: a1c3e5f7b9d2
Revises:
Create Date: 2026-10-16 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = 'a1c3e5f7b9d2'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create subscription_plans table
    op.create_table('subscription_plans',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('tier', sa.String(length=20), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('name_en', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('description_en', sa.Text(), nullable=True),
        sa.Column('monthly_price', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('yearly_price', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('lifetime_price', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('currency', sa.String(length=3), nullable=False, server_default='THB'),
        sa.Column('max_shops', sa.Integer(), nullable=True),
        sa.Column('max_queues_per_day', sa.Integer(), nullable=True),
        sa.Column('max_staff', sa.Integer(), nullable=True),
        sa.Column('data_retention_months', sa.Integer(), nullable=True),
        sa.Column('max_sms_per_month', sa.Integer(), nullable=True),
        sa.Column('max_promotions', sa.Integer(), nullable=True),
        sa.Column('max_free_poster_designs', sa.Integer(), nullable=True),
        sa.Column('has_advanced_reports', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('has_custom_qr_code', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('has_api_access', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('has_priority_support', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('has_custom_branding', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('has_analytics', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('has_promotion_features', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('features', sa.JSON(), nullable=False),
        sa.Column('features_en', sa.JSON(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_subscription_plans_id', 'subscription_plans', ['id'])
    op.create_index('ix_subscription_plans_tier', 'subscription_plans', ['tier'])
    op.create_index('ix_subscription_plans_is_active', 'subscription_plans', ['is_active'])

    # Create profile_subscriptions table
    op.create_table('profile_subscriptions',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('profile_id', sa.String(length=64), nullable=False),
        sa.Column('plan_id', sa.UUID(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='active'),
        sa.Column('billing_period', sa.String(length=20), nullable=False, server_default='monthly'),
        sa.Column('price_per_period', sa.Numeric(precision=10, scale=2), nullable=False, server_default='0'),
        sa.Column('currency', sa.String(length=3), nullable=False, server_default='THB'),
        sa.Column('auto_renew', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('start_date', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['plan_id'], ['subscription_plans.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_profile_subscriptions_id', 'profile_subscriptions', ['id'])
    op.create_index('ix_profile_subscriptions_profile_id', 'profile_subscriptions', ['profile_id'])
    op.create_index('ix_profile_subscriptions_plan_id', 'profile_subscriptions', ['plan_id'])
    op.create_index('ix_profile_subscriptions_status', 'profile_subscriptions', ['status'])

    # Create usage_records table
    op.create_table('usage_records',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('profile_id', sa.String(length=64), nullable=False),
        sa.Column('shop_id', sa.String(length=64), nullable=True),
        sa.Column('usage_type', sa.String(length=20), nullable=False),
        sa.Column('usage_count', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('usage_date', sa.Date(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_usage_records_profile_id', 'usage_records', ['profile_id'])
    op.create_index('ix_usage_records_shop_id', 'usage_records', ['shop_id'])
    op.create_index('ix_usage_records_profile_type_date', 'usage_records', ['profile_id', 'usage_type', 'usage_date'])

    # Create feature_access table
    op.create_table('feature_access',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('profile_id', sa.String(length=64), nullable=False),
        sa.Column('feature_type', sa.String(length=30), nullable=False),
        sa.Column('feature_id', sa.String(length=100), nullable=False),
        sa.Column('price', sa.Numeric(precision=10, scale=2), nullable=False, server_default='0'),
        sa.Column('currency', sa.String(length=3), nullable=False, server_default='THB'),
        sa.Column('granted_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_feature_access_id', 'feature_access', ['id'])
    op.create_index('ix_feature_access_profile_id', 'feature_access', ['profile_id'])
    op.create_index('ix_feature_access_lookup', 'feature_access', ['profile_id', 'feature_type', 'feature_id'])


def downgrade() -> None:
    op.drop_table('feature_access')
    op.drop_table('usage_records')
    op.drop_table('profile_subscriptions')
    op.drop_table('subscription_plans')
