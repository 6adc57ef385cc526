"""Create users, communities, produce, orders, interests and tracking

Revision ID: initial_marketplace_schema
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = 'initial_marketplace_schema'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade():
    # users and communities reference each other; the owner FK is added once both exist
    op.create_table('users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('phone_number', sa.String(length=20), nullable=False),
        sa.Column('longitude', sa.Float(), nullable=False),
        sa.Column('latitude', sa.Float(), nullable=False),
        sa.Column('community_id', sa.Uuid(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("role IN ('Farmer', 'Admin', 'User')", name='users_role_check'),
        sa.CheckConstraint(
            "(role = 'User' AND community_id IS NOT NULL) OR (role != 'User' AND community_id IS NULL)",
            name='users_community_membership_check'
        ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_role', 'users', ['role'])
    op.create_index('ix_users_community_id', 'users', ['community_id'])
    op.create_index('ix_users_location', 'users', ['longitude', 'latitude'])

    op.create_table('communities',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('owner_user_id', sa.Uuid(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['owner_user_id'], ['users.id'], name='communities_owner_user_id_fkey', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('owner_user_id')
    )
    op.create_index('ix_communities_name', 'communities', ['name'], unique=True)

    with op.batch_alter_table('users') as batch_op:
        batch_op.create_foreign_key(
            'users_community_id_fkey', 'communities', ['community_id'], ['id'], ondelete='CASCADE'
        )

    op.create_table('produce',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('price', sa.Float(), nullable=False),
        sa.Column('unit', sa.String(length=50), nullable=False),
        sa.Column('image_url', sa.String(length=500), nullable=True),
        sa.Column('farmer_id', sa.Uuid(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('quantity >= 0', name='produce_quantity_check'),
        sa.CheckConstraint('price > 0', name='produce_price_check'),
        sa.ForeignKeyConstraint(['farmer_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_produce_farmer_id', 'produce', ['farmer_id'])

    op.create_table('orders',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('community_id', sa.Uuid(), nullable=False),
        sa.Column('produce_id', sa.Uuid(), nullable=False),
        sa.Column('farmer_id', sa.Uuid(), nullable=False),
        sa.Column('ordered_by', sa.Uuid(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), server_default='pending', nullable=False),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('pending', 'confirmed', 'shipped', 'delivered', 'cancelled')",
            name='orders_status_check'
        ),
        sa.ForeignKeyConstraint(['community_id'], ['communities.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['produce_id'], ['produce.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['farmer_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['ordered_by'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('community_id', 'produce_id', name='unique_order_per_community_produce')
    )
    op.create_index('ix_orders_produce_id', 'orders', ['produce_id'])
    op.create_index('ix_orders_farmer_id', 'orders', ['farmer_id'])

    op.create_table('interests',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('product_id', sa.Uuid(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('quantity > 0', name='interests_quantity_check'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['product_id'], ['produce.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_interests_product_id', 'interests', ['product_id'])
    op.create_index('ix_interests_user_product', 'interests', ['user_id', 'product_id'])

    op.create_table('tracking',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('order_id', sa.Uuid(), nullable=False),
        sa.Column('status', sa.String(length=20), server_default='pending', nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('order_id')
    )


def downgrade():
    op.drop_table('tracking')
    op.drop_table('interests')
    op.drop_table('orders')
    op.drop_table('produce')
    with op.batch_alter_table('users') as batch_op:
        batch_op.drop_constraint('users_community_id_fkey', type_='foreignkey')
    op.drop_table('communities')
    op.drop_table('users')
