"""
Order Repository - Data Access Layer for Orders

Orders store the customer, shipping address and line items as JSONB
snapshots taken at checkout.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional, Tuple, Dict, Any
import logging

from psycopg2.errors import UniqueViolation
from psycopg2.extras import Json

from gamestore.domain.order import Order, OrderCustomer, ShippingAddress, OrderItem, format_document_number
from gamestore.core.config import settings
from gamestore.core.database import get_db_connection_dict
from gamestore.core.exceptions import DiscountCodeError

logger = logging.getLogger(__name__)

ORDER_COLUMNS = """
    id, order_number, customer, shipping_address, items,
    subtotal, shipping_cost, discount, total,
    status, payment_method, payment_status, promo_code, promo_discount,
    is_digital_only, notes, delivered_at, created_at, updated_at
"""

# Attempts at picking a free order number when two checkouts race
NUMBER_ATTEMPTS = 3


def _json_safe_items(items: List[dict]) -> List[dict]:
    """Make line items JSON-safe (Decimal prices become strings to keep precision)"""
    safe = []
    for item in items:
        safe.append({k: (str(v) if isinstance(v, Decimal) else v) for k, v in item.items()})
    return safe


class OrderRepository:
    """
    Repository for Order data access

    All SQL queries for orders are centralized here.
    """

    @staticmethod
    def _map_row_to_order(row: dict) -> Order:
        return Order(
            id=row['id'],
            order_number=row['order_number'],
            customer=OrderCustomer(**row['customer']),
            shipping_address=ShippingAddress(**row['shipping_address']),
            items=[OrderItem(**item) for item in (row.get('items') or [])],
            subtotal=row['subtotal'],
            shipping_cost=row.get('shipping_cost') or Decimal("0"),
            discount=row.get('discount') or Decimal("0"),
            total=row['total'],
            status=row.get('status') or 'pending',
            payment_method=row.get('payment_method') or 'knet',
            payment_status=row.get('payment_status') or 'pending',
            promo_code=row.get('promo_code'),
            promo_discount=row.get('promo_discount') or Decimal("0"),
            is_digital_only=bool(row.get('is_digital_only')),
            notes=row.get('notes'),
            delivered_at=row.get('delivered_at'),
            created_at=row.get('created_at'),
            updated_at=row.get('updated_at')
        )

    @staticmethod
    def _next_number(cursor, year: int) -> str:
        """Next ORD-YYYY-NNNN number (highest sequence of the year + 1)"""
        prefix = settings.ORDER_NUMBER_PREFIX
        cursor.execute("""
            SELECT COALESCE(MAX(CAST(SPLIT_PART(order_number, '-', 3) AS INTEGER)), 0) as last_seq
            FROM orders
            WHERE order_number LIKE %s
        """, (f"{prefix}-{year}-%",))
        last_seq = cursor.fetchone()['last_seq']
        return format_document_number(prefix, year, last_seq + 1)

    def create(self, data: Dict[str, Any], redeem_code: Optional[str] = None) -> Order:
        """
        Insert an order with a freshly assigned order number.

        When redeem_code is given, the discount code usage is incremented in
        the same transaction; if the code ran out in the meantime nothing is
        written.

        Args:
            data: customer, shipping_address, items (dicts) and the money fields
            redeem_code: Normalized discount code to redeem

        Raises:
            DiscountCodeError: the code can no longer be redeemed
        """
        year = datetime.now().year

        for attempt in range(1, NUMBER_ATTEMPTS + 1):
            conn = get_db_connection_dict()
            cursor = conn.cursor()

            try:
                order_number = self._next_number(cursor, year)

                cursor.execute(f"""
                    INSERT INTO orders (
                        order_number, customer, shipping_address, items, customer_email,
                        subtotal, shipping_cost, discount, total,
                        status, payment_method, payment_status,
                        promo_code, promo_discount, is_digital_only, notes,
                        created_at, updated_at
                    )
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, NOW(), NOW())
                    RETURNING {ORDER_COLUMNS}
                """, (
                    order_number,
                    Json(data['customer']),
                    Json(data['shipping_address']),
                    Json(_json_safe_items(data['items'])),
                    data['customer']['email'].lower(),
                    data['subtotal'],
                    data['shipping_cost'],
                    data['discount'],
                    data['total'],
                    data.get('status', 'pending'),
                    data.get('payment_method', 'knet'),
                    data.get('payment_status', 'pending'),
                    data.get('promo_code'),
                    data.get('promo_discount', Decimal("0")),
                    data.get('is_digital_only', False),
                    data.get('notes'),
                ))
                row = cursor.fetchone()

                if redeem_code:
                    cursor.execute("""
                        UPDATE discount_codes
                        SET used_count = used_count + 1, updated_at = NOW()
                        WHERE UPPER(code) = %s AND is_active = true AND used_count < usage_limit
                        RETURNING id
                    """, (redeem_code,))
                    if cursor.fetchone() is None:
                        conn.rollback()
                        raise DiscountCodeError(redeem_code, "is no longer available")

                conn.commit()
                return self._map_row_to_order(row)

            except UniqueViolation:
                conn.rollback()
                logger.warning(f"Order number collision on attempt {attempt}/{NUMBER_ATTEMPTS}, retrying")
                if attempt == NUMBER_ATTEMPTS:
                    raise

            except Exception:
                conn.rollback()
                raise

            finally:
                cursor.close()
                conn.close()

    def find_by_id(self, order_id: int) -> Optional[Order]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"SELECT {ORDER_COLUMNS} FROM orders WHERE id = %s", (order_id,))
            row = cursor.fetchone()
            return self._map_row_to_order(row) if row else None

        finally:
            cursor.close()
            conn.close()

    def find_by_number(self, order_number: str) -> Optional[Order]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"SELECT {ORDER_COLUMNS} FROM orders WHERE order_number = %s", (order_number,))
            row = cursor.fetchone()
            return self._map_row_to_order(row) if row else None

        finally:
            cursor.close()
            conn.close()

    def find_all(
        self,
        search: Optional[str] = None,
        status: Optional[str] = None,
        payment_status: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: int = 50,
        offset: int = 0
    ) -> Tuple[List[Order], int]:
        """
        Find orders with filters, newest first

        Args:
            search: Matches order number, customer first/last name, email,
                phone and item titles (case-insensitive)
            status: Order status
            payment_status: Payment status
            date_from / date_to: Inclusive creation date range

        Returns:
            Tuple of (list of orders, total count)
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            conditions = []
            params: List[Any] = []

            if search:
                term = f"%{search.strip()}%"
                conditions.append("""(
                    order_number ILIKE %s
                    OR customer->>'first_name' ILIKE %s
                    OR customer->>'last_name' ILIKE %s
                    OR customer->>'email' ILIKE %s
                    OR customer->>'phone' ILIKE %s
                    OR EXISTS (
                        SELECT 1 FROM jsonb_array_elements(items) AS item
                        WHERE item->>'title' ILIKE %s OR item->>'title_en' ILIKE %s
                    )
                )""")
                params.extend([term] * 7)

            if status:
                conditions.append("status = %s")
                params.append(status)

            if payment_status:
                conditions.append("payment_status = %s")
                params.append(payment_status)

            if date_from:
                conditions.append("created_at::date >= %s")
                params.append(date_from)

            if date_to:
                conditions.append("created_at::date <= %s")
                params.append(date_to)

            where_clause = " AND ".join(conditions) if conditions else "1=1"

            cursor.execute(f"""
                SELECT COUNT(*) as total
                FROM orders
                WHERE {where_clause}
            """, params)
            total = cursor.fetchone()['total']

            cursor.execute(f"""
                SELECT {ORDER_COLUMNS}
                FROM orders
                WHERE {where_clause}
                ORDER BY created_at DESC, id DESC
                LIMIT %s OFFSET %s
            """, params + [limit, offset])

            orders = [self._map_row_to_order(row) for row in cursor.fetchall()]
            return orders, total

        finally:
            cursor.close()
            conn.close()

    def _update_returning(self, sql: str, params: tuple) -> Optional[Order]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(sql, params)
            row = cursor.fetchone()
            conn.commit()
            return self._map_row_to_order(row) if row else None

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def update_status(self, order_id: int, status: str) -> Optional[Order]:
        """Change order status; delivered orders get delivered_at stamped"""
        return self._update_returning(f"""
            UPDATE orders
            SET status = %s,
                delivered_at = CASE WHEN %s = 'delivered' THEN NOW() ELSE delivered_at END,
                updated_at = NOW()
            WHERE id = %s
            RETURNING {ORDER_COLUMNS}
        """, (status, status, order_id))

    def update_payment_status(self, order_id: int, payment_status: str) -> Optional[Order]:
        return self._update_returning(f"""
            UPDATE orders
            SET payment_status = %s, updated_at = NOW()
            WHERE id = %s
            RETURNING {ORDER_COLUMNS}
        """, (payment_status, order_id))

    def append_note(self, order_id: int, line: str) -> Optional[Order]:
        """Append a line to the order notes"""
        return self._update_returning(f"""
            UPDATE orders
            SET notes = CASE WHEN notes IS NULL OR notes = '' THEN %s ELSE notes || E'\\n' || %s END,
                updated_at = NOW()
            WHERE id = %s
            RETURNING {ORDER_COLUMNS}
        """, (line, line, order_id))

    def delete(self, order_id: int) -> bool:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("DELETE FROM orders WHERE id = %s RETURNING id", (order_id,))
            deleted = cursor.fetchone() is not None
            conn.commit()
            return deleted

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def has_used_code(self, email: str, code: str) -> bool:
        """Whether a customer e-mail already placed an order with this promo code"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT 1 FROM orders
                WHERE customer_email = %s AND UPPER(promo_code) = %s
                LIMIT 1
            """, (email.strip().lower(), code))
            return cursor.fetchone() is not None

        finally:
            cursor.close()
            conn.close()

    def get_stats(self) -> Dict[str, Any]:
        """
        Order statistics

        Returns:
            Dict with total, count per status, paid revenue and pending payments
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT
                    COUNT(*) as total,
                    COUNT(*) FILTER (WHERE status = 'pending') as pending,
                    COUNT(*) FILTER (WHERE status = 'processing') as processing,
                    COUNT(*) FILTER (WHERE status = 'shipped') as shipped,
                    COUNT(*) FILTER (WHERE status = 'delivered') as delivered,
                    COUNT(*) FILTER (WHERE status = 'cancelled') as cancelled,
                    COUNT(*) FILTER (WHERE status = 'refunded') as refunded,
                    COUNT(*) FILTER (WHERE payment_status = 'pending') as awaiting_payment,
                    COALESCE(SUM(total) FILTER (WHERE payment_status = 'paid'), 0) as total_revenue
                FROM orders
            """)
            stats = dict(cursor.fetchone())
            stats['total_revenue'] = float(stats['total_revenue'] or 0)
            return stats

        finally:
            cursor.close()
            conn.close()

    def find_recent(self, limit: int = 5) -> List[Order]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {ORDER_COLUMNS}
                FROM orders
                ORDER BY created_at DESC, id DESC
                LIMIT %s
            """, (limit,))
            return [self._map_row_to_order(row) for row in cursor.fetchall()]

        finally:
            cursor.close()
            conn.close()
