from sqlalchemy import delete
from sqlalchemy.orm import Session, contains_eager, selectinload, joinedload
from decimal import Decimal
from typing import Optional
from restaurant_ordering.domain.models import (
    CartItem,
    Order,
    OrderItem,
    OrderStatus,
    OrderPaymentStatus,
    ORDER_STATUS_TRANSITIONS,
    utcnow,
)
from restaurant_ordering.domain.errors import NotFound, EmptyCart, InvalidState
from restaurant_ordering.infrastructure.db import atomic
from shared.core import get_logger
from .schemas import OrderCreate

logger = get_logger(__name__)

CENT = Decimal("0.01")

class OrderService:
    def __init__(self, db: Session, status_policy: str = "permissive"):
        self.db = db
        self.status_policy = status_policy

    def _with_items(self):
        return self.db.query(Order).options(
            selectinload(Order.items).joinedload(OrderItem.menu_item)
        )

    def list(self):
        return self._with_items().order_by(Order.created_at, Order.id).all()

    def get(self, order_id: int) -> Optional[Order]:
        return self._with_items().filter(Order.id == order_id).first()

    def create(self, data: OrderCreate):
        """Turn the session's cart into an order.

        Order insert, item snapshot and cart deletion commit together or
        not at all. Cart rows are locked for the duration where the store
        supports it.
        """
        with atomic(self.db):
            cart_items = (
                self.db.query(CartItem)
                .join(CartItem.menu_item)
                .options(contains_eager(CartItem.menu_item))
                .filter(CartItem.session_id == data.session_id)
                .order_by(CartItem.id)
                .with_for_update(of=CartItem)
                .all()
            )
            if not cart_items:
                raise EmptyCart(f"Cart for session {data.session_id} is empty")

            total = sum(
                (ci.menu_item.price * ci.quantity for ci in cart_items), Decimal("0")
            ).quantize(CENT)

            now = utcnow()
            order = Order(
                customer_name=data.customer_name,
                customer_phone=data.customer_phone,
                customer_email=data.customer_email,
                notes=data.notes,
                total_amount=total,
                status=OrderStatus.PENDING,
                payment_status=OrderPaymentStatus.PENDING,
                created_at=now,
                updated_at=now,
            )
            for ci in cart_items:
                order.items.append(OrderItem(
                    menu_item=ci.menu_item,
                    quantity=ci.quantity,
                    # Snapshot: later menu price changes never reach this row
                    price_at_time=ci.menu_item.price,
                    created_at=now,
                ))
            self.db.add(order)
            self.db.flush()  # assign ids

            self.db.execute(
                delete(CartItem).where(CartItem.session_id == data.session_id)
            )

        logger.info(
            f"Order {order.id} created",
            extra={'extra_fields': {
                'order_id': order.id,
                'items': len(order.items),
                'total_amount': str(order.total_amount),
            }}
        )
        return self.get(order.id)

    def update_status(self, order_id: int, status: OrderStatus):
        order = self.db.query(Order).filter(Order.id == order_id).first()
        if not order:
            raise NotFound(f"Order with id {order_id} not found")

        status = OrderStatus(status)
        if self.status_policy == "strict" and status != order.status:
            if status not in ORDER_STATUS_TRANSITIONS[order.status]:
                raise InvalidState(
                    f"Cannot change order status from {order.status.value} to {status.value}"
                )

        with atomic(self.db):
            order.status = status
            order.updated_at = utcnow()
        self.db.refresh(order)
        return order
