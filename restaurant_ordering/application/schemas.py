from pydantic import BaseModel, EmailStr, Field, PlainSerializer, model_validator
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Optional
from restaurant_ordering.domain.models import OrderStatus, OrderPaymentStatus, PaymentStatus

# Money is Decimal internally and a two-decimal JSON number on the wire
Money = Annotated[Decimal, PlainSerializer(lambda v: float(v), return_type=float, when_used="json")]
PositiveMoney = Annotated[Decimal, Field(gt=0, max_digits=10, decimal_places=2)]

# Categories

class CategoryCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None

class CategoryRead(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    created_at: datetime
    class Config:
        from_attributes = True

# Menu items

class MenuItemCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    price: PositiveMoney
    category_id: int
    image_url: Optional[str] = None
    is_available: bool = True

class MenuItemUpdate(BaseModel):
    """Partial update; only fields present in the request are applied.

    ``model_fields_set`` tells an absent field apart from an explicit null,
    so ``{"description": null}`` clears the description while omitting it
    leaves it untouched.
    """
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    price: Optional[PositiveMoney] = None
    category_id: Optional[int] = None
    image_url: Optional[str] = None
    is_available: Optional[bool] = None

    @model_validator(mode="after")
    def _reject_null_required_fields(self):
        for field in ("name", "price", "category_id", "is_available"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)

class MenuFilter(BaseModel):
    category_id: Optional[int] = None
    search: Optional[str] = None
    min_price: Optional[Decimal] = Field(None, ge=0)
    max_price: Optional[Decimal] = Field(None, gt=0)
    available_only: bool = True

class MenuItemRead(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    price: Money
    category_id: int
    image_url: Optional[str] = None
    is_available: bool
    created_at: datetime
    class Config:
        from_attributes = True

class MenuItemWithCategory(MenuItemRead):
    category: CategoryRead

# Cart

class CartItemAdd(BaseModel):
    session_id: str = Field(min_length=1)
    menu_item_id: int
    quantity: int = Field(gt=0)

class CartItemUpdate(BaseModel):
    quantity: int = Field(gt=0)

class CartItemRead(BaseModel):
    id: int
    session_id: str
    menu_item_id: int
    quantity: int
    created_at: datetime
    class Config:
        from_attributes = True

class CartItemWithMenuItem(CartItemRead):
    menu_item: MenuItemRead

class CartSummary(BaseModel):
    session_id: str
    items: list[CartItemWithMenuItem]
    item_count: int
    subtotal: Money

# Orders

class OrderCreate(BaseModel):
    session_id: str = Field(min_length=1)
    customer_name: str = Field(min_length=1)
    customer_phone: Optional[str] = None
    customer_email: Optional[EmailStr] = None
    notes: Optional[str] = None

class OrderStatusUpdate(BaseModel):
    status: OrderStatus

class OrderRead(BaseModel):
    id: int
    customer_name: str
    customer_phone: Optional[str] = None
    customer_email: Optional[str] = None
    total_amount: Money
    status: OrderStatus
    payment_status: OrderPaymentStatus
    payment_method: Optional[str] = None
    payment_reference: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    class Config:
        from_attributes = True

class OrderItemRead(BaseModel):
    id: int
    order_id: int
    menu_item_id: int
    quantity: int
    price_at_time: Money
    created_at: datetime
    menu_item: MenuItemRead
    class Config:
        from_attributes = True

class OrderWithItems(OrderRead):
    items: list[OrderItemRead]

# Payments

class PaymentCreate(BaseModel):
    order_id: int
    payment_gateway: str = Field(min_length=1)
    amount: PositiveMoney

class PaymentStatusUpdate(BaseModel):
    status: PaymentStatus
    gateway_reference: Optional[str] = None
    paid_at: Optional[datetime] = None

class PaymentRead(BaseModel):
    id: int
    order_id: int
    payment_gateway: str
    qr_code_data: str
    qr_code_url: Optional[str] = None
    amount: Money
    status: PaymentStatus
    gateway_reference: Optional[str] = None
    expires_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    class Config:
        from_attributes = True

class PaymentWithOrder(PaymentRead):
    order: OrderRead
