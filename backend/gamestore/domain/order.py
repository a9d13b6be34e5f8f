"""
Order Domain Models

Represents storefront orders: the customer, where to deliver, what was
bought (prices frozen at checkout) and the money breakdown.
"""
from pydantic import BaseModel, Field, ConfigDict, EmailStr, field_validator
from typing import Optional, List
from datetime import datetime
from decimal import Decimal


ORDER_STATUSES = ["pending", "processing", "shipped", "delivered", "cancelled", "refunded"]
PAYMENT_METHODS = ["knet", "visa", "mastercard"]
PAYMENT_STATUSES = ["pending", "paid", "failed", "refunded"]


def format_document_number(prefix: str, year: int, sequence: int) -> str:
    """ORD-2025-0001 style numbers (sequence restarts every year)"""
    return f"{prefix}-{year}-{sequence:04d}"


class OrderCustomer(BaseModel):
    """Buyer contact data"""
    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    phone: str = Field(..., min_length=8, max_length=20)
    roblox_username: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class ShippingAddress(BaseModel):
    """Kuwait style address (area + block/building details)"""
    address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    area: str = Field(..., min_length=1)
    building: Optional[str] = None
    floor: Optional[str] = None
    apartment: Optional[str] = None
    notes: Optional[str] = None


class OrderItem(BaseModel):
    """
    Order line - a snapshot of the product at checkout time

    Fields:
        product_id: Catalog product ID
        title / title_en: Product titles when ordered
        price: Unit price charged (KWD)
        quantity: Units ordered
        image: Product image when ordered
        category: Product category
        is_digital: Whether this line needs shipping
    """
    product_id: int
    title: str
    title_en: Optional[str] = None
    price: Decimal = Field(..., ge=0)
    quantity: int = Field(..., ge=1)
    image: Optional[str] = None
    category: Optional[str] = None
    is_digital: bool = False

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


class Order(BaseModel):
    """
    Order domain model

    Money fields are KWD Decimals; total = subtotal + shipping_cost - discount,
    never below zero.
    """

    id: int
    order_number: str
    customer: OrderCustomer
    shipping_address: ShippingAddress
    items: List[OrderItem] = Field(default_factory=list)

    subtotal: Decimal = Field(Decimal("0"), ge=0)
    shipping_cost: Decimal = Field(Decimal("0"), ge=0)
    discount: Decimal = Field(Decimal("0"), ge=0)
    total: Decimal = Field(Decimal("0"), ge=0)

    status: str = "pending"
    payment_method: str = "knet"
    payment_status: str = "pending"
    promo_code: Optional[str] = None
    promo_discount: Decimal = Field(Decimal("0"), ge=0)
    is_digital_only: bool = False
    notes: Optional[str] = None

    delivered_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(
        from_attributes=True,
        json_encoders={
            Decimal: float,
            datetime: lambda v: v.isoformat()
        }
    )

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def to_dict(self) -> dict:
        """Convert to dictionary with Decimal to float conversion"""
        data = self.model_dump(mode="json")

        for field in ('subtotal', 'shipping_cost', 'discount', 'total', 'promo_discount'):
            data[field] = float(getattr(self, field))
        for item, raw in zip(data['items'], self.items):
            item['price'] = float(raw.price)

        data['item_count'] = self.item_count
        return data


class CheckoutItem(BaseModel):
    """Cart line sent by the client; prices are looked up server-side"""
    product_id: int
    quantity: int = Field(1, ge=1, le=99)


class CheckoutRequest(BaseModel):
    """Schema for placing an order"""
    customer: OrderCustomer
    shipping_address: ShippingAddress
    items: List[CheckoutItem] = Field(..., min_length=1)
    payment_method: str = "knet"
    promo_code: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=500)

    @field_validator("payment_method")
    @classmethod
    def check_payment_method(cls, v: str) -> str:
        if v not in PAYMENT_METHODS:
            raise ValueError(f"Payment method must be one of: {', '.join(PAYMENT_METHODS)}")
        return v


class OrderStatusUpdate(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def check_status(cls, v: str) -> str:
        if v not in ORDER_STATUSES:
            raise ValueError(f"Status must be one of: {', '.join(ORDER_STATUSES)}")
        return v


class PaymentStatusUpdate(BaseModel):
    payment_status: str

    @field_validator("payment_status")
    @classmethod
    def check_payment_status(cls, v: str) -> str:
        if v not in PAYMENT_STATUSES:
            raise ValueError(f"Payment status must be one of: {', '.join(PAYMENT_STATUSES)}")
        return v


class OrderNote(BaseModel):
    note: str = Field(..., min_length=1, max_length=1000)
