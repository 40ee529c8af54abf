from sqlalchemy import or_
from sqlalchemy.orm import Session, contains_eager
from typing import Optional
from restaurant_ordering.domain.models import Category, MenuItem
from restaurant_ordering.domain.errors import NotFound
from restaurant_ordering.infrastructure.db import atomic
from shared.core import get_logger
from .schemas import CategoryCreate, MenuItemCreate, MenuItemUpdate, MenuFilter

logger = get_logger(__name__)

class CatalogService:
    def __init__(self, db: Session):
        self.db = db

    def list_categories(self):
        return self.db.query(Category).order_by(Category.id).all()

    def create_category(self, data: CategoryCreate):
        obj = Category(name=data.name, description=data.description)
        with atomic(self.db):
            self.db.add(obj)
        self.db.refresh(obj)
        return obj

    def get_menu_item(self, item_id: int) -> Optional[MenuItem]:
        return self.db.query(MenuItem).filter(MenuItem.id == item_id).first()

    def create_menu_item(self, data: MenuItemCreate):
        # An unknown category_id fails on the foreign key and surfaces as ConstraintViolation
        obj = MenuItem(**data.model_dump())
        with atomic(self.db):
            self.db.add(obj)
        self.db.refresh(obj)
        return obj

    def update_menu_item(self, item_id: int, data: MenuItemUpdate):
        item = self.get_menu_item(item_id)
        if not item:
            raise NotFound(f"Menu item with id {item_id} not found")

        changes = data.changes()
        with atomic(self.db):
            for field, value in changes.items():
                setattr(item, field, value)
        self.db.refresh(item)
        logger.info(
            f"Menu item {item_id} updated",
            extra={'extra_fields': {'menu_item_id': item_id, 'fields': sorted(changes)}}
        )
        return item

    def list_menu_items(self, filters: Optional[MenuFilter] = None):
        """List menu items joined with their category.

        Filters compose conjunctively. Without a filter object only
        available items are returned.
        """
        filters = filters or MenuFilter()
        query = (
            self.db.query(MenuItem)
            .join(MenuItem.category)
            .options(contains_eager(MenuItem.category))
        )

        if filters.category_id is not None:
            query = query.filter(MenuItem.category_id == filters.category_id)
        if filters.search:
            query = query.filter(or_(
                MenuItem.name.icontains(filters.search, autoescape=True),
                MenuItem.description.icontains(filters.search, autoescape=True),
            ))
        if filters.min_price is not None:
            query = query.filter(MenuItem.price >= filters.min_price)
        if filters.max_price is not None:
            query = query.filter(MenuItem.price <= filters.max_price)
        if filters.available_only:
            query = query.filter(MenuItem.is_available.is_(True))

        return query.order_by(MenuItem.id).all()
