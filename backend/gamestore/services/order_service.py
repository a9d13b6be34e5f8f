"""
Order business logic: checkout and back-office order management
"""
import logging
from datetime import date, datetime
from typing import List, Optional, Tuple

from gamestore.core.exceptions import NotFoundError
from gamestore.domain.order import Order, CheckoutRequest, ORDER_STATUSES, PAYMENT_STATUSES
from gamestore.repositories.order_repository import OrderRepository
from gamestore.services.currency_service import format_price
from gamestore.services.discount_service import DiscountService, get_discount_service
from gamestore.services.notification_service import NotificationService, get_notification_service

logger = logging.getLogger(__name__)


class OrderService:
    """Checkout and order management"""

    def __init__(
        self,
        order_repo: Optional[OrderRepository] = None,
        discount_service: Optional[DiscountService] = None,
        notifications: Optional[NotificationService] = None
    ):
        self.orders = order_repo or OrderRepository()
        self.discounts = discount_service or get_discount_service()
        self.notifications = notifications or get_notification_service()

    async def checkout(self, request: CheckoutRequest) -> Order:
        """
        Place an order.

        Totals are recomputed from the catalog, the discount code is
        redeemed in the same transaction as the insert, and e-mails are sent
        afterwards without affecting the result.
        """
        quote = self.discounts.quote(request.items, request.promo_code, request.customer.email)

        data = {
            'customer': request.customer.model_dump(),
            'shipping_address': request.shipping_address.model_dump(),
            'items': [item.model_dump() for item in quote.items],
            'subtotal': quote.subtotal,
            'shipping_cost': quote.shipping_cost,
            'discount': quote.discount,
            'total': quote.total,
            'payment_method': request.payment_method,
            'promo_code': quote.promo_code,
            'promo_discount': quote.discount,
            'is_digital_only': quote.is_digital_only,
            'notes': request.notes,
        }

        order = self.orders.create(data, redeem_code=quote.promo_code)
        logger.info(f"Order created: {order.order_number} total={order.total} KWD")

        await self._notify(order)
        return order

    async def _notify(self, order: Order) -> None:
        total = format_price(order.total, "KWD")
        name = order.customer.full_name
        await self.notifications.send_order_notification(
            order.order_number, name, order.customer.email, total
        )
        await self.notifications.send_order_confirmation(
            order.order_number, name, order.customer.email, total
        )

    def get_order(self, order_id: int) -> Order:
        order = self.orders.find_by_id(order_id)
        if order is None:
            raise NotFoundError("Order", order_id)
        return order

    def get_by_number(self, order_number: str) -> Order:
        order = self.orders.find_by_number(order_number)
        if order is None:
            raise NotFoundError("Order", order_number)
        return order

    def search(
        self,
        query: Optional[str] = None,
        status: Optional[str] = None,
        payment_status: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: int = 50,
        offset: int = 0
    ) -> Tuple[List[Order], int]:
        if date_from and date_to and date_from > date_to:
            raise ValueError("date_from must be before date_to")
        return self.orders.find_all(
            search=query,
            status=status,
            payment_status=payment_status,
            date_from=date_from,
            date_to=date_to,
            limit=limit,
            offset=offset
        )

    def update_status(self, order_id: int, status: str) -> Order:
        if status not in ORDER_STATUSES:
            raise ValueError(f"Status must be one of: {', '.join(ORDER_STATUSES)}")
        order = self.orders.update_status(order_id, status)
        if order is None:
            raise NotFoundError("Order", order_id)
        logger.info(f"Order {order.order_number} status -> {status}")
        return order

    def update_payment_status(self, order_id: int, payment_status: str) -> Order:
        if payment_status not in PAYMENT_STATUSES:
            raise ValueError(f"Payment status must be one of: {', '.join(PAYMENT_STATUSES)}")
        order = self.orders.update_payment_status(order_id, payment_status)
        if order is None:
            raise NotFoundError("Order", order_id)
        return order

    def add_note(self, order_id: int, note: str, author: Optional[str] = None) -> Order:
        """Append a timestamped note ("[2025-01-31 14:05] admin@x: text")"""
        note = note.strip()
        if not note:
            raise ValueError("Note cannot be empty")
        stamp = datetime.now().strftime("%Y-%m-%d %H:%M")
        line = f"[{stamp}] {author}: {note}" if author else f"[{stamp}] {note}"

        order = self.orders.append_note(order_id, line)
        if order is None:
            raise NotFoundError("Order", order_id)
        return order

    def delete(self, order_id: int) -> None:
        if not self.orders.delete(order_id):
            raise NotFoundError("Order", order_id)
        logger.info(f"Order deleted: {order_id}")

    def stats(self) -> dict:
        return self.orders.get_stats()

    def recent(self, limit: int = 5) -> List[Order]:
        return self.orders.find_recent(limit)


_service_instance: Optional[OrderService] = None


def get_order_service() -> OrderService:
    global _service_instance
    if _service_instance is None:
        _service_instance = OrderService()
    return _service_instance
