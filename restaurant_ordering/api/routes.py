from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from decimal import Decimal
from typing import Optional
from restaurant_ordering.core_settings import get_settings
from restaurant_ordering.infrastructure.db import get_db
from restaurant_ordering.application.catalog_service import CatalogService
from restaurant_ordering.application.cart_service import CartService
from restaurant_ordering.application.order_service import OrderService
from restaurant_ordering.application.payment_service import PaymentService
from restaurant_ordering.application.gateway import PaymentGateway, build_gateway
from restaurant_ordering.application.schemas import (
    CategoryCreate,
    CategoryRead,
    MenuItemCreate,
    MenuItemUpdate,
    MenuItemRead,
    MenuItemWithCategory,
    MenuFilter,
    CartItemAdd,
    CartItemUpdate,
    CartItemRead,
    CartItemWithMenuItem,
    CartSummary,
    OrderCreate,
    OrderStatusUpdate,
    OrderRead,
    OrderWithItems,
    PaymentCreate,
    PaymentStatusUpdate,
    PaymentRead,
    PaymentWithOrder,
)

settings = get_settings()

def get_payment_gateway() -> PaymentGateway:
    return build_gateway(settings)

def get_order_service(db: Session = Depends(get_db)) -> OrderService:
    return OrderService(db, status_policy=settings.ORDER_STATUS_POLICY)

def get_payment_service(
    db: Session = Depends(get_db),
    gateway: PaymentGateway = Depends(get_payment_gateway),
) -> PaymentService:
    return PaymentService(
        db,
        gateway=gateway,
        expiry_minutes=settings.PAYMENT_EXPIRY_MINUTES,
        qr_base_url=settings.PAYMENT_QR_BASE_URL,
    )

# Catalog

categories_router = APIRouter(prefix="/categories", tags=["catalog"])

@categories_router.get("/", response_model=list[CategoryRead])
def list_categories(db: Session = Depends(get_db)):
    return CatalogService(db).list_categories()

@categories_router.post("/", response_model=CategoryRead, status_code=201)
def create_category(payload: CategoryCreate, db: Session = Depends(get_db)):
    return CatalogService(db).create_category(payload)

menu_router = APIRouter(prefix="/menu-items", tags=["catalog"])

@menu_router.get("/", response_model=list[MenuItemWithCategory])
def list_menu_items(
    db: Session = Depends(get_db),
    category_id: Optional[int] = Query(None, description="Only items of this category"),
    search: Optional[str] = Query(None, max_length=100, description="Case-insensitive match on name or description"),
    min_price: Optional[Decimal] = Query(None, ge=0),
    max_price: Optional[Decimal] = Query(None, gt=0),
    available_only: bool = Query(True),
):
    filters = MenuFilter(
        category_id=category_id,
        search=search,
        min_price=min_price,
        max_price=max_price,
        available_only=available_only,
    )
    return CatalogService(db).list_menu_items(filters)

@menu_router.post("/", response_model=MenuItemRead, status_code=201)
def create_menu_item(payload: MenuItemCreate, db: Session = Depends(get_db)):
    return CatalogService(db).create_menu_item(payload)

@menu_router.patch("/{item_id}", response_model=MenuItemRead)
def update_menu_item(item_id: int, payload: MenuItemUpdate, db: Session = Depends(get_db)):
    return CatalogService(db).update_menu_item(item_id, payload)

# Cart

cart_router = APIRouter(prefix="/cart", tags=["cart"])

@cart_router.post("/items", response_model=CartItemRead, status_code=201)
def add_to_cart(payload: CartItemAdd, db: Session = Depends(get_db)):
    return CartService(db).add(payload)

@cart_router.put("/items/{cart_item_id}", response_model=CartItemRead)
def update_cart_item(cart_item_id: int, payload: CartItemUpdate, db: Session = Depends(get_db)):
    return CartService(db).update(cart_item_id, payload.quantity)

@cart_router.delete("/items/{cart_item_id}", response_model=bool)
def remove_from_cart(cart_item_id: int, db: Session = Depends(get_db)):
    return CartService(db).remove(cart_item_id)

@cart_router.get("/{session_id}", response_model=list[CartItemWithMenuItem])
def get_cart(session_id: str, db: Session = Depends(get_db)):
    return CartService(db).list(session_id)

@cart_router.get("/{session_id}/summary", response_model=CartSummary)
def get_cart_summary(session_id: str, db: Session = Depends(get_db)):
    return CartService(db).summary(session_id)

@cart_router.delete("/{session_id}", response_model=bool)
def clear_cart(session_id: str, db: Session = Depends(get_db)):
    return CartService(db).clear(session_id)

# Orders

orders_router = APIRouter(prefix="/orders", tags=["orders"])

@orders_router.get("/", response_model=list[OrderWithItems])
def list_orders(service: OrderService = Depends(get_order_service)):
    """All orders, oldest first, each with its items."""
    return service.list()

@orders_router.get("/{order_id}", response_model=Optional[OrderWithItems])
def get_order(order_id: int, service: OrderService = Depends(get_order_service)):
    """Returns null rather than 404 for an unknown order."""
    return service.get(order_id)

@orders_router.post("/", response_model=OrderWithItems, status_code=201)
def create_order(payload: OrderCreate, service: OrderService = Depends(get_order_service)):
    return service.create(payload)

@orders_router.put("/{order_id}/status", response_model=OrderRead)
def update_order_status(order_id: int, payload: OrderStatusUpdate, service: OrderService = Depends(get_order_service)):
    return service.update_status(order_id, payload.status)

@orders_router.get("/{order_id}/payments", response_model=list[PaymentRead])
def list_order_payments(order_id: int, service: PaymentService = Depends(get_payment_service)):
    return service.list_for_order(order_id)

# Payments

payments_router = APIRouter(prefix="/payments", tags=["payments"])

@payments_router.post("/", response_model=PaymentRead, status_code=201)
def create_payment(payload: PaymentCreate, service: PaymentService = Depends(get_payment_service)):
    return service.create(payload)

@payments_router.get("/{payment_id}", response_model=Optional[PaymentWithOrder])
def get_payment(payment_id: int, service: PaymentService = Depends(get_payment_service)):
    return service.get(payment_id)

@payments_router.put("/{payment_id}/status", response_model=PaymentRead)
def update_payment_status(payment_id: int, payload: PaymentStatusUpdate, service: PaymentService = Depends(get_payment_service)):
    return service.update_status(payment_id, payload)

@payments_router.post("/{payment_id}/check", response_model=Optional[PaymentRead])
def check_payment_status(payment_id: int, service: PaymentService = Depends(get_payment_service)):
    """Poll the gateway for a pending payment; null for an unknown id."""
    return service.check_status(payment_id)

routers = [categories_router, menu_router, cart_router, orders_router, payments_router]
