"""
Back-office dashboard: one call that gathers catalog, order and inbox figures
"""
from typing import Optional, Dict, Any

from gamestore.services.catalog_service import CatalogService, get_catalog_service
from gamestore.services.message_service import MessageService, get_message_service
from gamestore.services.order_service import OrderService, get_order_service

RECENT_ORDERS = 5


class DashboardService:

    def __init__(
        self,
        catalog: Optional[CatalogService] = None,
        orders: Optional[OrderService] = None,
        messages: Optional[MessageService] = None
    ):
        self.catalog = catalog or get_catalog_service()
        self.orders = orders or get_order_service()
        self.messages = messages or get_message_service()

    def summary(self) -> Dict[str, Any]:
        product_stats = self.catalog.product_stats()
        order_stats = self.orders.stats()
        message_stats = self.messages.stats()

        return {
            'products': product_stats,
            'orders': order_stats,
            'messages': message_stats,
            'revenue': order_stats.get('total_revenue', 0.0),
            'unread_messages': message_stats.get('unread', 0),
            'low_stock': [
                {'id': p.id, 'sku': p.sku, 'title_en': p.title_en, 'stock': p.stock}
                for p in self.catalog.low_stock()
            ],
            'recent_orders': [o.to_dict() for o in self.orders.recent(RECENT_ORDERS)],
        }


_service_instance: Optional[DashboardService] = None


def get_dashboard_service() -> DashboardService:
    global _service_instance
    if _service_instance is None:
        _service_instance = DashboardService()
    return _service_instance
