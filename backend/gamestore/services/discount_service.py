"""
Discount codes and cart pricing

Cart totals are always computed here from catalog prices; the client only
sends product IDs and quantities.
"""
import logging
from decimal import Decimal
from typing import List, Optional

from gamestore.core.config import settings
from gamestore.core.exceptions import NotFoundError, DiscountCodeError
from gamestore.domain.cart import CartQuote
from gamestore.domain.discount import (
    DiscountCode, DiscountCodeCreate, DiscountCodeUpdate, DiscountValidation, normalize_code,
)
from gamestore.domain.order import CheckoutItem, OrderItem
from gamestore.repositories.discount_code_repository import DiscountCodeRepository
from gamestore.repositories.order_repository import OrderRepository
from gamestore.repositories.product_repository import ProductRepository

logger = logging.getLogger(__name__)

REASON_INVALID = "is invalid or inactive"
REASON_EXHAUSTED = "has reached its usage limit"
REASON_ALREADY_USED = "has already been used with this e-mail"


class DiscountService:
    """Discount code CRUD, validation and cart quotes"""

    def __init__(
        self,
        discount_repo: Optional[DiscountCodeRepository] = None,
        product_repo: Optional[ProductRepository] = None,
        order_repo: Optional[OrderRepository] = None
    ):
        self.discounts = discount_repo or DiscountCodeRepository()
        self.products = product_repo or ProductRepository()
        self.orders = order_repo or OrderRepository()

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def list_codes(self) -> List[DiscountCode]:
        return self.discounts.find_all()

    def get_code(self, discount_id: int) -> DiscountCode:
        discount = self.discounts.find_by_id(discount_id)
        if discount is None:
            raise NotFoundError("Discount code", discount_id)
        return discount

    def create_code(self, discount_in: DiscountCodeCreate) -> DiscountCode:
        discount = self.discounts.create(discount_in.model_dump())
        logger.info(f"Discount code created: {discount.code}")
        return discount

    def update_code(self, discount_id: int, discount_in: DiscountCodeUpdate) -> DiscountCode:
        changes = discount_in.model_dump(exclude_unset=True)

        # Re-check the percentage cap against the stored type/value
        if 'type' in changes or 'value' in changes:
            current = self.get_code(discount_id)
            new_type = changes.get('type') or current.type
            new_value = changes.get('value') or current.value
            if new_type == "percentage" and new_value > 100:
                raise ValueError("Percentage discount cannot exceed 100")

        discount = self.discounts.update(discount_id, changes)
        if discount is None:
            raise NotFoundError("Discount code", discount_id)
        return discount

    def delete_code(self, discount_id: int) -> None:
        if not self.discounts.delete(discount_id):
            raise NotFoundError("Discount code", discount_id)

    # ------------------------------------------------------------------
    # Validation / redemption
    # ------------------------------------------------------------------

    def validate(self, code: str, email: Optional[str] = None) -> DiscountValidation:
        """
        Check whether a code can be applied.

        Unknown or inactive codes are invalid, codes at their usage limit are
        exhausted, and one-per-customer codes are rejected when the e-mail
        already has an order with that code.
        """
        normalized = normalize_code(code)
        discount = self.discounts.find_by_code(normalized) if normalized else None

        if discount is None or not discount.is_active:
            return DiscountValidation(code=normalized, valid=False, reason=REASON_INVALID)

        if discount.is_exhausted:
            return DiscountValidation(code=normalized, valid=False, reason=REASON_EXHAUSTED)

        if discount.one_user_only and email and self.orders.has_used_code(email, normalized):
            return DiscountValidation(code=normalized, valid=False, reason=REASON_ALREADY_USED)

        return DiscountValidation(code=normalized, valid=True, discount=discount)

    def require_valid(self, code: str, email: Optional[str] = None) -> DiscountCode:
        result = self.validate(code, email)
        if not result.valid:
            raise DiscountCodeError(result.code, result.reason)
        return result.discount

    def redeem(self, code: str) -> None:
        """Record one use; fails when the code ran out since it was validated"""
        if not self.discounts.redeem(code):
            raise DiscountCodeError(normalize_code(code), REASON_EXHAUSTED)
        logger.info(f"Discount code redeemed: {normalize_code(code)}")

    # ------------------------------------------------------------------
    # Cart pricing
    # ------------------------------------------------------------------

    def price_items(self, items: List[CheckoutItem]) -> List[OrderItem]:
        """
        Turn cart lines into priced order lines using catalog data.

        Raises:
            NotFoundError: unknown product
            ValueError: product not active or not enough stock
        """
        # Merge duplicate lines for the same product
        quantities = {}
        for item in items:
            quantities[item.product_id] = quantities.get(item.product_id, 0) + item.quantity

        products = self.products.find_by_ids(list(quantities))
        lines = []
        for product_id, quantity in quantities.items():
            product = products.get(product_id)
            if product is None:
                raise NotFoundError("Product", product_id)
            if product.status != "active":
                raise ValueError(f"Product '{product.title_en}' is not available")
            if product.stock is not None and quantity > product.stock:
                raise ValueError(
                    f"Only {product.stock} unit(s) of '{product.title_en}' left in stock"
                )
            lines.append(OrderItem(
                product_id=product.id,
                title=product.title_ar,
                title_en=product.title_en,
                price=product.price,
                quantity=quantity,
                image=product.image,
                category=product.category,
                is_digital=product.is_digital,
            ))
        return lines

    def quote(
        self,
        items: List[CheckoutItem],
        promo_code: Optional[str] = None,
        email: Optional[str] = None
    ) -> CartQuote:
        """
        Price a cart.

        subtotal = sum(price * quantity); shipping is the flat rate when any
        line is physical; total = max(0, subtotal + shipping - discount).
        """
        lines = self.price_items(items)

        subtotal = sum((line.line_total for line in lines), Decimal("0"))
        digital_only = all(line.is_digital for line in lines)
        shipping = Decimal("0") if digital_only else Decimal(str(settings.SHIPPING_COST))

        discount_amount = Decimal("0")
        applied_code = None
        if promo_code and promo_code.strip():
            discount = self.require_valid(promo_code, email)
            discount_amount = discount.discount_for(subtotal)
            applied_code = discount.code

        total = max(Decimal("0"), subtotal + shipping - discount_amount)

        return CartQuote(
            items=lines,
            subtotal=subtotal,
            shipping_cost=shipping,
            discount=discount_amount,
            total=total,
            promo_code=applied_code,
            is_digital_only=digital_only,
        )


_service_instance: Optional[DiscountService] = None


def get_discount_service() -> DiscountService:
    global _service_instance
    if _service_instance is None:
        _service_instance = DiscountService()
    return _service_instance
