from sqlalchemy import delete
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session, contains_eager
from decimal import Decimal
from restaurant_ordering.domain.models import CartItem, MenuItem, utcnow
from restaurant_ordering.domain.errors import NotFound, Unavailable
from restaurant_ordering.infrastructure.db import atomic
from .schemas import CartItemAdd

CENT = Decimal("0.01")

_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}

class CartService:
    def __init__(self, db: Session):
        self.db = db

    def list(self, session_id: str):
        """Cart rows for a session with live menu item details."""
        return (
            self.db.query(CartItem)
            .join(CartItem.menu_item)
            .options(contains_eager(CartItem.menu_item))
            .filter(CartItem.session_id == session_id)
            .order_by(CartItem.id)
            .all()
        )

    def summary(self, session_id: str) -> dict:
        items = self.list(session_id)
        subtotal = sum((i.menu_item.price * i.quantity for i in items), Decimal("0"))
        return {
            "session_id": session_id,
            "items": items,
            "item_count": sum(i.quantity for i in items),
            "subtotal": subtotal.quantize(CENT),
        }

    def add(self, data: CartItemAdd):
        menu_item = self.db.get(MenuItem, data.menu_item_id)
        if not menu_item:
            raise NotFound(f"Menu item with id {data.menu_item_id} not found")
        if not menu_item.is_available:
            raise Unavailable(f"Menu item with id {data.menu_item_id} is not available")

        with atomic(self.db):
            insert = _UPSERT_INSERTS.get(self.db.get_bind().dialect.name)
            if insert is None:
                item = self._merge_locked(data)
            else:
                item = self._upsert(insert, data)
        return item

    def _upsert(self, insert, data: CartItemAdd) -> CartItem:
        # Single statement merge: the unique (session_id, menu_item_id) constraint
        # turns a concurrent second add into a quantity increment on the same row.
        stmt = insert(CartItem).values(
            session_id=data.session_id,
            menu_item_id=data.menu_item_id,
            quantity=data.quantity,
            created_at=utcnow(),
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[CartItem.session_id, CartItem.menu_item_id],
            set_={"quantity": CartItem.quantity + stmt.excluded.quantity},
        )
        return self.db.scalars(
            stmt.returning(CartItem),
            execution_options={"populate_existing": True},
        ).one()

    def _merge_locked(self, data: CartItemAdd) -> CartItem:
        existing = (
            self.db.query(CartItem)
            .filter(
                CartItem.session_id == data.session_id,
                CartItem.menu_item_id == data.menu_item_id,
            )
            .with_for_update()
            .first()
        )
        if existing:
            existing.quantity += data.quantity
            return existing
        item = CartItem(
            session_id=data.session_id,
            menu_item_id=data.menu_item_id,
            quantity=data.quantity,
        )
        self.db.add(item)
        self.db.flush()
        return item

    def update(self, cart_item_id: int, quantity: int):
        item = self.db.get(CartItem, cart_item_id)
        if not item:
            raise NotFound(f"Cart item with id {cart_item_id} not found")
        with atomic(self.db):
            item.quantity = quantity
        self.db.refresh(item)
        return item

    def remove(self, cart_item_id: int) -> bool:
        with atomic(self.db):
            result = self.db.execute(delete(CartItem).where(CartItem.id == cart_item_id))
        return result.rowcount > 0

    def clear(self, session_id: str) -> bool:
        # Clearing an empty cart is still a success
        with atomic(self.db):
            self.db.execute(delete(CartItem).where(CartItem.session_id == session_id))
        return True
