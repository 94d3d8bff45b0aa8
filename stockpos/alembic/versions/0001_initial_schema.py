"""Initial schema: users, catalog, sales, stock ledger, validations

Revision ID: 0001_initial
Revises: 
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# Revision identifiers used by Alembic
revision: str = '0001_initial'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('password_hash', sa.String(), nullable=False),
        sa.Column('role', sa.String(), nullable=False),
        sa.Column('first_name', sa.String(), nullable=True),
        sa.Column('last_name', sa.String(), nullable=True),
        sa.Column('status', sa.String(), nullable=False, server_default='active'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("role IN ('admin', 'stock_manager', 'cashier')", name='ck_users_role'),
        sa.CheckConstraint("status IN ('active', 'disabled')", name='ck_users_status'),
    )
    op.create_index(op.f('ix_users_id'), 'users', ['id'])
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)
    op.create_index(op.f('ix_users_status'), 'users', ['status'])

    op.create_table(
        'categories',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('status', sa.String(), nullable=False, server_default='active'),
        sa.Column('owner_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index(op.f('ix_categories_id'), 'categories', ['id'])
    op.create_index(op.f('ix_categories_name'), 'categories', ['name'])
    op.create_index(op.f('ix_categories_status'), 'categories', ['status'])

    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('buy_price', sa.Float(), sa.CheckConstraint('buy_price >= 0'), nullable=False, server_default='0'),
        sa.Column('sell_price', sa.Float(), sa.CheckConstraint('sell_price >= 0'), nullable=False),
        sa.Column('stock_quantity', sa.Integer(), sa.CheckConstraint('stock_quantity >= 0'), nullable=False, server_default='0'),
        sa.Column('min_stock', sa.Integer(), sa.CheckConstraint('min_stock >= 0'), nullable=False, server_default='0'),
        sa.Column('category_id', sa.Integer(), sa.ForeignKey('categories.id'), nullable=True),
        sa.Column('image_url', sa.String(), nullable=True),
        sa.Column('status', sa.String(), nullable=False, server_default='active'),
        sa.Column('owner_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index(op.f('ix_products_id'), 'products', ['id'])
    op.create_index(op.f('ix_products_name'), 'products', ['name'])
    op.create_index(op.f('ix_products_status'), 'products', ['status'])

    op.create_table(
        'sales',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('cashier_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('subtotal', sa.Float(), nullable=False),
        sa.Column('discount_percent', sa.Float(), nullable=False, server_default='0'),
        sa.Column('discount_amount', sa.Float(), nullable=False, server_default='0'),
        sa.Column('net_before_tax', sa.Float(), nullable=False),
        sa.Column('tax_percent', sa.Float(), nullable=False, server_default='0'),
        sa.Column('tax_amount', sa.Float(), nullable=False, server_default='0'),
        sa.Column('grand_total', sa.Float(), nullable=False),
        sa.Column('payment_method', sa.String(), nullable=False),
        sa.Column('status', sa.String(), nullable=False, server_default='valid'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index(op.f('ix_sales_id'), 'sales', ['id'])
    op.create_index(op.f('ix_sales_cashier_id'), 'sales', ['cashier_id'])
    op.create_index(op.f('ix_sales_status'), 'sales', ['status'])
    op.create_index(op.f('ix_sales_created_at'), 'sales', ['created_at'])

    op.create_table(
        'sale_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('sale_id', sa.Integer(), sa.ForeignKey('sales.id'), nullable=False),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('products.id'), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Float(), nullable=False),
        sa.Column('line_total', sa.Float(), nullable=False),
    )
    op.create_index(op.f('ix_sale_items_id'), 'sale_items', ['id'])
    op.create_index(op.f('ix_sale_items_sale_id'), 'sale_items', ['sale_id'])

    op.create_table(
        'stock_movements',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('products.id'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('type', sa.String(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('comment', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint('quantity > 0', name='ck_stock_movements_quantity'),
        sa.CheckConstraint("type IN ('in', 'out', 'return', 'loss')", name='ck_stock_movements_type'),
    )
    op.create_index(op.f('ix_stock_movements_id'), 'stock_movements', ['id'])
    op.create_index(op.f('ix_stock_movements_product_id'), 'stock_movements', ['product_id'])
    op.create_index(op.f('ix_stock_movements_type'), 'stock_movements', ['type'])
    op.create_index(op.f('ix_stock_movements_created_at'), 'stock_movements', ['created_at'])

    op.create_table(
        'validations',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('target_type', sa.String(20), nullable=False),
        sa.Column('target_id', sa.Integer(), nullable=False),
        sa.Column('action', sa.String(20), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('prior_status', sa.String(20), nullable=True),
        sa.Column('requested_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('requested_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('resolved_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('resolved_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(op.f('ix_validations_id'), 'validations', ['id'])
    op.create_index(op.f('ix_validations_target_type'), 'validations', ['target_type'])
    op.create_index(op.f('ix_validations_target_id'), 'validations', ['target_id'])
    op.create_index(op.f('ix_validations_status'), 'validations', ['status'])
    # At most one open request per target
    op.create_index(
        'uq_validations_open_target', 'validations', ['target_type', 'target_id'],
        unique=True,
        sqlite_where=sa.text("status = 'pending'"),
        postgresql_where=sa.text("status = 'pending'"),
    )

    op.create_table(
        'store_settings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('company_name', sa.String(), nullable=False),
        sa.Column('company_address', sa.String(), nullable=True),
        sa.Column('company_phone', sa.String(), nullable=True),
        sa.Column('company_email', sa.String(), nullable=True),
        sa.Column('currency', sa.String(3), nullable=False),
        sa.Column('currency_symbol', sa.String(5), nullable=False),
        sa.Column('default_tax_rate', sa.Float(), sa.CheckConstraint('default_tax_rate >= 0'), nullable=False),
        sa.Column('max_discount_percent', sa.Float(),
                  sa.CheckConstraint('max_discount_percent >= 0 AND max_discount_percent <= 100'), nullable=False),
        sa.Column('enable_stock_alerts', sa.Boolean(), nullable=False),
        sa.Column('low_stock_threshold', sa.Integer(), sa.CheckConstraint('low_stock_threshold >= 0'), nullable=False),
    )

    op.create_table(
        'logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('ts', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('action', sa.String(50)),
        sa.Column('resource', sa.String(50)),
        sa.Column('status', sa.String(20)),
        sa.Column('ip', sa.String(64), nullable=True),
        sa.Column('meta', sa.JSON(), nullable=True),
    )
    op.create_index(op.f('ix_logs_id'), 'logs', ['id'])
    op.create_index(op.f('ix_logs_ts'), 'logs', ['ts'])
    op.create_index(op.f('ix_logs_action'), 'logs', ['action'])
    op.create_index(op.f('ix_logs_resource'), 'logs', ['resource'])
    op.create_index(op.f('ix_logs_status'), 'logs', ['status'])
    op.create_index('ix_logs_user_ts', 'logs', ['user_id', 'ts'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('logs')
    op.drop_table('store_settings')
    op.drop_index('uq_validations_open_target', table_name='validations')
    op.drop_table('validations')
    op.drop_table('stock_movements')
    op.drop_table('sale_items')
    op.drop_table('sales')
    op.drop_table('products')
    op.drop_table('categories')
    op.drop_table('users')
