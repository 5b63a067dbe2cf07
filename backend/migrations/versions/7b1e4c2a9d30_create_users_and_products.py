"""create users and products

Revision ID: 7b1e4c2a9d30
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""
import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = '7b1e4c2a9d30'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=50), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=16), nullable=False),
        sa.Column('deposit', sa.Integer(), server_default='0', nullable=False),
        sa.Column('version', sa.Integer(), server_default='1', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.CheckConstraint('deposit >= 0', name=op.f('ck_users_deposit_non_negative')),
        sa.CheckConstraint("role IN ('buyer', 'seller')", name=op.f('ck_users_role_valid')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_users')),
        sa.UniqueConstraint('username', name='uq_users_username'),
    )
    op.create_index('ix_users_role', 'users', ['role'], unique=False)

    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('product_name', sa.String(length=120), nullable=False),
        sa.Column('cost', sa.Integer(), nullable=False),
        sa.Column('amount_available', sa.Integer(), server_default='0', nullable=False),
        sa.Column('seller_id', sa.Integer(), nullable=False),
        sa.Column('version', sa.Integer(), server_default='1', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.CheckConstraint('cost > 0', name=op.f('ck_products_cost_positive')),
        sa.CheckConstraint('amount_available >= 0', name=op.f('ck_products_amount_available_non_negative')),
        sa.ForeignKeyConstraint(['seller_id'], ['users.id'], name=op.f('fk_products_seller_id_users'), ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_products')),
        sa.UniqueConstraint('product_name', name='uq_products_product_name'),
    )
    op.create_index('ix_products_seller_id', 'products', ['seller_id'], unique=False)


def downgrade():
    op.drop_index('ix_products_seller_id', table_name='products')
    op.drop_table('products')
    op.drop_index('ix_users_role', table_name='users')
    op.drop_table('users')
