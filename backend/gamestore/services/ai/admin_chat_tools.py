"""
Store data tools for the admin AI chat

Each tool answers one kind of back-office question from the catalog, order,
inbox and discount services and returns a JSON string for Claude:
1. get_store_overview - Dashboard figures plus discount code usage
2. search_products - Products by title, SKU or category
3. get_product_stats - Catalog counts by status and type
4. get_low_stock_products - Active products running out
5. search_orders - Orders by number, customer, status or date range
6. get_order_stats - Order counts per status and paid revenue
7. get_revenue - Paid revenue and average order value for a period
8. get_best_sellers - Products ranked by units sold
9. search_messages - Contact messages by text, status or priority
10. get_message_stats - Inbox counts
11. get_discount_codes - Codes with usage summary
12. export_data - Download link for a CSV export
"""
import json
import logging
from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional, Dict, Any, List

from gamestore.domain.discount import DiscountCode
from gamestore.domain.order import Order
from gamestore.services.catalog_service import get_catalog_service
from gamestore.services.dashboard_service import get_dashboard_service
from gamestore.services.discount_service import get_discount_service
from gamestore.services.message_service import get_message_service
from gamestore.services.order_service import get_order_service

logger = logging.getLogger(__name__)

MAX_ROWS = 20
ANALYSIS_LIMIT = 1000

# Orders that never turned into sales
NON_SALE_STATUSES = ("cancelled", "refunded")

EXPORT_ROUTES = {
    "products": "/api/v1/data/export/products",
    "orders": "/api/v1/data/export/orders",
    "messages": "/api/v1/data/export/messages",
    "discount-codes": "/api/v1/data/export/discount-codes",
}


def _dumps(data: Any) -> str:
    return json.dumps(data, ensure_ascii=False, default=str)


def _parse_date(value: Optional[str]) -> Optional[date]:
    return date.fromisoformat(value) if value else None


def _money(value: Decimal) -> float:
    return round(float(value), 3)


# ============================================================================
# ANALYSIS HELPERS
# ============================================================================

def summarize_discount_codes(codes: List[DiscountCode]) -> Dict[str, Any]:
    """
    Usage summary of discount codes.

    An active code whose used_count reached its usage_limit counts as
    exhausted, not available. Discount value is only estimated for fixed
    codes since percentage savings depend on each order.
    """
    by_type: Dict[str, int] = defaultdict(int)
    summary = {"total": len(codes), "active": 0, "inactive": 0, "available": 0, "exhausted": 0,
               "total_usage": 0, "fixed_discount_given": 0.0}

    for code in codes:
        by_type[code.type] += 1
        summary["total_usage"] += code.used_count
        if code.is_active:
            summary["active"] += 1
            summary["exhausted" if code.is_exhausted else "available"] += 1
        else:
            summary["inactive"] += 1
        if code.type == "fixed":
            summary["fixed_discount_given"] += float(code.value) * code.used_count

    most_used = sorted((c for c in codes if c.used_count > 0), key=lambda c: c.used_count, reverse=True)[:5]
    summary["by_type"] = dict(by_type)
    summary["most_used"] = [
        {"code": c.code, "used_count": c.used_count, "type": c.type, "value": float(c.value)}
        for c in most_used
    ]
    return summary


def rank_best_sellers(orders: List[Order], limit: int = 10) -> List[Dict[str, Any]]:
    """Units and revenue per product across orders, cancelled and refunded ones excluded"""
    sales: Dict[int, Dict[str, Any]] = {}
    for order in orders:
        if order.status in NON_SALE_STATUSES:
            continue
        for item in order.items:
            entry = sales.setdefault(item.product_id, {
                "product_id": item.product_id, "title": item.title, "title_en": item.title_en,
                "units": 0, "revenue": Decimal("0"),
            })
            entry["units"] += item.quantity
            entry["revenue"] += item.line_total

    ranked = sorted(sales.values(), key=lambda e: (-e["units"], e["product_id"]))[:limit]
    for entry in ranked:
        entry["revenue"] = _money(entry["revenue"])
    return ranked


def _product_row(product) -> Dict[str, Any]:
    return {
        "id": product.id, "sku": product.sku, "title_ar": product.title_ar, "title_en": product.title_en,
        "category": product.category, "price": float(product.price), "stock": product.stock,
        "status": product.status,
    }


def _order_row(order: Order) -> Dict[str, Any]:
    return {
        "order_number": order.order_number,
        "customer": f"{order.customer.first_name} {order.customer.last_name}",
        "email": order.customer.email,
        "total": float(order.total),
        "status": order.status,
        "payment_status": order.payment_status,
        "promo_code": order.promo_code,
        "items": order.item_count,
        "created_at": order.created_at,
    }


def _message_row(message) -> Dict[str, Any]:
    return {
        "message_number": message.message_number, "name": message.name, "email": message.email,
        "subject": message.subject, "category": message.category, "priority": message.priority,
        "status": message.status, "created_at": message.created_at,
    }


# ============================================================================
# TOOLS
# ============================================================================

def get_store_overview() -> str:
    summary = get_dashboard_service().summary()
    summary["discount_codes"] = summarize_discount_codes(get_discount_service().list_codes())
    return _dumps(summary)


def search_products(query: str = "", category: Optional[str] = None) -> str:
    """
    Search products by title or SKU, optionally within a category.

    An empty query lists the active catalog.
    """
    products = get_catalog_service().search(query, category=category)
    if not products:
        return _dumps({"message": f"No products found for '{query}'"})
    return _dumps({
        "count": len(products),
        "products": [_product_row(p) for p in products[:MAX_ROWS]],
        "truncated": len(products) > MAX_ROWS,
    })


def get_product_stats() -> str:
    return _dumps(get_catalog_service().product_stats())


def get_low_stock_products() -> str:
    products = get_catalog_service().low_stock()
    if not products:
        return _dumps({"message": "No products are low on stock"})
    return _dumps({"count": len(products), "products": [_product_row(p) for p in products]})


def search_orders(
    query: Optional[str] = None,
    status: Optional[str] = None,
    payment_status: Optional[str] = None,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
) -> str:
    orders, total = get_order_service().search(
        query=query, status=status, payment_status=payment_status,
        date_from=_parse_date(date_from), date_to=_parse_date(date_to),
        limit=MAX_ROWS, offset=0,
    )
    if not orders:
        return _dumps({"message": "No orders match these filters"})
    return _dumps({"total": total, "orders": [_order_row(o) for o in orders]})


def get_order_stats() -> str:
    return _dumps(get_order_service().stats())


def get_revenue(date_from: Optional[str] = None, date_to: Optional[str] = None, days: int = 30) -> str:
    """
    Paid revenue for a period.

    Without explicit dates the period is the last `days` days up to today.
    Only orders with payment_status 'paid' count as revenue.
    """
    end = _parse_date(date_to) or date.today()
    start = _parse_date(date_from) or end - timedelta(days=days)

    orders, _ = get_order_service().search(date_from=start, date_to=end, limit=ANALYSIS_LIMIT, offset=0)
    paid = [o for o in orders if o.payment_status == "paid"]
    revenue = sum((o.total for o in paid), Decimal("0"))
    discounts = sum((o.discount for o in paid), Decimal("0"))

    return _dumps({
        "date_from": start.isoformat(),
        "date_to": end.isoformat(),
        "orders": len(orders),
        "paid_orders": len(paid),
        "revenue": _money(revenue),
        "average_order_value": _money(revenue / len(paid)) if paid else 0.0,
        "discounts_given": _money(discounts),
        "currency": "KWD",
    })


def get_best_sellers(days: int = 30, limit: int = 10) -> str:
    start = date.today() - timedelta(days=days)
    orders, _ = get_order_service().search(date_from=start, limit=ANALYSIS_LIMIT, offset=0)
    ranked = rank_best_sellers(orders, limit=min(limit, MAX_ROWS))
    if not ranked:
        return _dumps({"message": f"No sales in the last {days} days"})
    return _dumps({"days": days, "orders_analyzed": len(orders), "best_sellers": ranked})


def search_messages(
    query: Optional[str] = None,
    status: Optional[str] = None,
    priority: Optional[str] = None,
    category: Optional[str] = None,
) -> str:
    messages, total = get_message_service().search(
        query=query, status=status, priority=priority, category=category, limit=MAX_ROWS, offset=0
    )
    if not messages:
        return _dumps({"message": "No messages match these filters"})
    return _dumps({"total": total, "messages": [_message_row(m) for m in messages]})


def get_message_stats() -> str:
    return _dumps(get_message_service().stats())


def get_discount_codes(state: str = "all") -> str:
    """
    Discount codes filtered by state: all, active, inactive, available,
    exhausted or unused.
    """
    filters = {
        "all": lambda c: True,
        "active": lambda c: c.is_active,
        "inactive": lambda c: not c.is_active,
        "available": lambda c: c.is_active and not c.is_exhausted,
        "exhausted": lambda c: c.is_exhausted,
        "unused": lambda c: c.used_count == 0,
    }
    if state not in filters:
        return _dumps({"error": f"Unknown state '{state}'. Use one of: {', '.join(filters)}"})

    codes = get_discount_service().list_codes()
    selected = [c for c in codes if filters[state](c)]
    return _dumps({
        "state": state,
        "summary": summarize_discount_codes(codes),
        "codes": [c.to_dict() for c in selected[:MAX_ROWS]],
        "matching": len(selected),
    })


def export_data(kind: str, status: Optional[str] = None) -> str:
    """
    Link to a CSV export; the admin UI downloads it with the admin's token.
    """
    if kind not in EXPORT_ROUTES:
        return _dumps({"error": f"Unknown export '{kind}'. Use one of: {', '.join(EXPORT_ROUTES)}"})

    url = EXPORT_ROUTES[kind]
    if status and kind in ("orders", "messages"):
        url = f"{url}?status={status}"
    return _dumps({"action": "export", "kind": kind, "url": url})


# ============================================================================
# TOOL REGISTRY
# ============================================================================

TOOL_FUNCTIONS = {
    "get_store_overview": get_store_overview,
    "search_products": search_products,
    "get_product_stats": get_product_stats,
    "get_low_stock_products": get_low_stock_products,
    "search_orders": search_orders,
    "get_order_stats": get_order_stats,
    "get_revenue": get_revenue,
    "get_best_sellers": get_best_sellers,
    "search_messages": search_messages,
    "get_message_stats": get_message_stats,
    "get_discount_codes": get_discount_codes,
    "export_data": export_data,
}


def execute_tool(tool_name: str, tool_input: Dict[str, Any]) -> str:
    """
    Run a tool by name.

    Failures come back as {"error": ...} JSON so Claude can explain them
    instead of the whole chat request failing.
    """
    if tool_name not in TOOL_FUNCTIONS:
        return _dumps({"error": f"Tool '{tool_name}' not found"})

    try:
        return TOOL_FUNCTIONS[tool_name](**tool_input)
    except TypeError as e:
        return _dumps({"error": f"Invalid parameters for {tool_name}: {str(e)}"})
    except Exception as e:
        logger.error(f"Chat tool {tool_name} failed: {e}", exc_info=True)
        return _dumps({"error": f"Error executing {tool_name}: {str(e)}"})
