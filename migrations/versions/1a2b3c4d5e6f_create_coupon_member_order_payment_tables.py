"""create coupon, member, order and payment tables

Revision ID: 1a2b3c4d5e6f
Revises:
Create Date: 2025-06-02 10:15:42.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '1a2b3c4d5e6f'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'coupons',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('code', sa.String(length=100), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('amount', sa.Float(), nullable=False),
        sa.Column('discount', sa.Float(), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('is_used', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('used_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('usage_count', sa.Integer(), nullable=True, server_default='0'),
        sa.Column('total_discount', sa.Float(), nullable=True, server_default='0'),
        sa.Column('category', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('amount >= 0', name='ck_coupons_amount_non_negative'),
        sa.CheckConstraint('discount >= 0 AND discount <= 100', name='ck_coupons_discount_range'),
    )
    op.create_index('ix_coupons_code', 'coupons', ['code'], unique=True)

    op.create_table(
        'members',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=True),
        sa.Column('company_name', sa.String(length=255), nullable=True),
        sa.Column('linkedin', sa.String(length=500), nullable=True),
        sa.Column('website', sa.String(length=500), nullable=True),
        sa.Column('city', sa.String(length=255), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('whatsapp', sa.String(length=15), nullable=False),
        sa.Column('coupon_code', sa.String(length=100), nullable=True),
        sa.Column('payment_amount', sa.Float(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_members_email', 'members', ['email'], unique=True)
    op.create_index('ix_members_whatsapp', 'members', ['whatsapp'], unique=True)

    op.create_table(
        'orders',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('user_id', sa.String(length=255), nullable=True),
        sa.Column('total_amount', sa.Float(), nullable=True),
        sa.Column('coupon_code', sa.String(length=100), nullable=True),
        sa.Column('discount_amount', sa.Float(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_orders_user_id', 'orders', ['user_id'], unique=False)

    op.create_table(
        'payments',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('method', sa.String(length=10), nullable=False),
        sa.Column('amount', sa.Float(), nullable=False),
        sa.Column('card', sa.JSON(), nullable=True),
        sa.Column('upi', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint("method IN ('card', 'upi')", name='ck_payments_method'),
    )


def downgrade() -> None:
    op.drop_table('payments')
    op.drop_index('ix_orders_user_id', table_name='orders')
    op.drop_table('orders')
    op.drop_index('ix_members_whatsapp', table_name='members')
    op.drop_index('ix_members_email', table_name='members')
    op.drop_table('members')
    op.drop_index('ix_coupons_code', table_name='coupons')
    op.drop_table('coupons')
