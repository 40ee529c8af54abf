from alembic import op
import sqlalchemy as sa

revision = '0001_init'
down_revision = None
branch_labels = None
depends_on = None

ORDER_STATUS = sa.Enum('pending', 'confirmed', 'preparing', 'ready', 'completed', 'cancelled', name='order_status')
ORDER_PAYMENT_STATUS = sa.Enum('pending', 'paid', 'failed', 'refunded', name='payment_status')
QR_PAYMENT_STATUS = sa.Enum('pending', 'paid', 'failed', 'expired', name='qr_payment_status')

def upgrade():
    op.create_table(
        'categories',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('created_at', sa.DateTime, nullable=False)
    )
    op.create_table(
        'menu_items',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('category_id', sa.Integer, sa.ForeignKey('categories.id', name='fk_menu_items_category_id_categories'), nullable=False),
        sa.Column('image_url', sa.Text, nullable=True),
        sa.Column('is_available', sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime, nullable=False)
    )
    op.create_index('ix_menu_items_category_id', 'menu_items', ['category_id'])
    op.create_table(
        'cart_items',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('session_id', sa.String(255), nullable=False),
        sa.Column('menu_item_id', sa.Integer, sa.ForeignKey('menu_items.id', name='fk_cart_items_menu_item_id_menu_items'), nullable=False),
        sa.Column('quantity', sa.Integer, nullable=False),
        sa.Column('created_at', sa.DateTime, nullable=False),
        sa.UniqueConstraint('session_id', 'menu_item_id', name='uq_cart_items_session_menu_item')
    )
    op.create_index('ix_cart_items_session_id', 'cart_items', ['session_id'])
    op.create_table(
        'orders',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('customer_name', sa.String(200), nullable=False),
        sa.Column('customer_phone', sa.String(50), nullable=True),
        sa.Column('customer_email', sa.String(255), nullable=True),
        sa.Column('total_amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('status', ORDER_STATUS, nullable=False, server_default='pending'),
        sa.Column('payment_status', ORDER_PAYMENT_STATUS, nullable=False, server_default='pending'),
        sa.Column('payment_method', sa.String(100), nullable=True),
        sa.Column('payment_reference', sa.String(255), nullable=True),
        sa.Column('notes', sa.Text, nullable=True),
        sa.Column('created_at', sa.DateTime, nullable=False),
        sa.Column('updated_at', sa.DateTime, nullable=False)
    )
    op.create_table(
        'order_items',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('order_id', sa.Integer, sa.ForeignKey('orders.id', name='fk_order_items_order_id_orders', ondelete='CASCADE'), nullable=False),
        sa.Column('menu_item_id', sa.Integer, sa.ForeignKey('menu_items.id', name='fk_order_items_menu_item_id_menu_items', ondelete='RESTRICT'), nullable=False),
        sa.Column('quantity', sa.Integer, nullable=False),
        sa.Column('price_at_time', sa.Numeric(10, 2), nullable=False),
        sa.Column('created_at', sa.DateTime, nullable=False)
    )
    op.create_index('ix_order_items_order_id', 'order_items', ['order_id'])
    op.create_table(
        'payments',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('order_id', sa.Integer, sa.ForeignKey('orders.id', name='fk_payments_order_id_orders', ondelete='RESTRICT'), nullable=False),
        sa.Column('payment_gateway', sa.String(100), nullable=False),
        sa.Column('qr_code_data', sa.Text, nullable=False),
        sa.Column('qr_code_url', sa.Text, nullable=True),
        sa.Column('amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('status', QR_PAYMENT_STATUS, nullable=False, server_default='pending'),
        sa.Column('gateway_reference', sa.String(255), nullable=True),
        sa.Column('expires_at', sa.DateTime, nullable=True),
        sa.Column('paid_at', sa.DateTime, nullable=True),
        sa.Column('created_at', sa.DateTime, nullable=False),
        sa.Column('updated_at', sa.DateTime, nullable=False)
    )
    op.create_index('ix_payments_order_id', 'payments', ['order_id'])

def downgrade():
    op.drop_index('ix_payments_order_id', table_name='payments')
    op.drop_table('payments')
    op.drop_index('ix_order_items_order_id', table_name='order_items')
    op.drop_table('order_items')
    op.drop_table('orders')
    op.drop_index('ix_cart_items_session_id', table_name='cart_items')
    op.drop_table('cart_items')
    op.drop_index('ix_menu_items_category_id', table_name='menu_items')
    op.drop_table('menu_items')
    op.drop_table('categories')

    bind = op.get_bind()
    for enum_type in (QR_PAYMENT_STATUS, ORDER_PAYMENT_STATUS, ORDER_STATUS):
        enum_type.drop(bind, checkfirst=True)
