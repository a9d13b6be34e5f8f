"""
Cart pricing models

A quote is the server-side price breakdown of a cart: it is shown to the
customer before checkout and frozen into the order on checkout.
"""
from pydantic import BaseModel, Field
from typing import Optional, List
from decimal import Decimal

from gamestore.domain.order import CheckoutItem, OrderItem


class CartQuoteRequest(BaseModel):
    items: List[CheckoutItem] = Field(..., min_length=1)
    promo_code: Optional[str] = None
    email: Optional[str] = None


class CartQuote(BaseModel):
    """
    subtotal = sum(price * quantity)
    shipping_cost = flat rate when any line is physical
    total = max(0, subtotal + shipping_cost - discount)
    """
    items: List[OrderItem]
    subtotal: Decimal
    shipping_cost: Decimal
    discount: Decimal = Decimal("0")
    total: Decimal
    promo_code: Optional[str] = None
    is_digital_only: bool = False

    def to_dict(self) -> dict:
        return {
            "items": [
                {**item.model_dump(), "price": float(item.price), "line_total": float(item.line_total)}
                for item in self.items
            ],
            "subtotal": float(self.subtotal),
            "shipping_cost": float(self.shipping_cost),
            "discount": float(self.discount),
            "total": float(self.total),
            "promo_code": self.promo_code,
            "is_digital_only": self.is_digital_only,
        }
