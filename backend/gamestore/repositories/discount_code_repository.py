"""
Discount Code Repository - Data Access Layer for discount codes

Codes are stored upper-case; lookups normalize the input the same way.
"""
from typing import List, Optional, Dict, Any

from psycopg2.errors import UniqueViolation

from gamestore.domain.discount import DiscountCode, normalize_code
from gamestore.core.database import get_db_connection_dict
from gamestore.core.exceptions import DuplicateError


DISCOUNT_COLUMNS = """
    id, code, type, value, usage_limit, used_count, one_user_only,
    is_active, created_at, updated_at
"""

WRITABLE_FIELDS = ['code', 'type', 'value', 'usage_limit', 'one_user_only', 'is_active']


class DiscountCodeRepository:
    """Repository for DiscountCode data access"""

    @staticmethod
    def _map_row_to_discount(row: dict) -> DiscountCode:
        return DiscountCode(
            id=row['id'],
            code=row['code'],
            type=row['type'],
            value=row['value'],
            usage_limit=row['usage_limit'],
            used_count=row.get('used_count') or 0,
            one_user_only=bool(row.get('one_user_only')),
            is_active=bool(row.get('is_active')),
            created_at=row.get('created_at'),
            updated_at=row.get('updated_at')
        )

    def find_all(self) -> List[DiscountCode]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"SELECT {DISCOUNT_COLUMNS} FROM discount_codes ORDER BY created_at DESC, id DESC")
            return [self._map_row_to_discount(row) for row in cursor.fetchall()]

        finally:
            cursor.close()
            conn.close()

    def find_by_id(self, discount_id: int) -> Optional[DiscountCode]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"SELECT {DISCOUNT_COLUMNS} FROM discount_codes WHERE id = %s", (discount_id,))
            row = cursor.fetchone()
            return self._map_row_to_discount(row) if row else None

        finally:
            cursor.close()
            conn.close()

    def find_by_code(self, code: str) -> Optional[DiscountCode]:
        """Case-insensitive lookup"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(
                f"SELECT {DISCOUNT_COLUMNS} FROM discount_codes WHERE UPPER(code) = %s",
                (normalize_code(code),)
            )
            row = cursor.fetchone()
            return self._map_row_to_discount(row) if row else None

        finally:
            cursor.close()
            conn.close()

    def create(self, data: Dict[str, Any]) -> DiscountCode:
        """
        Insert a code with used_count = 0.

        Raises:
            DuplicateError: the code already exists
        """
        fields = [f for f in WRITABLE_FIELDS if f in data]

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                INSERT INTO discount_codes ({", ".join(fields)}, used_count, created_at, updated_at)
                VALUES ({", ".join(["%s"] * len(fields))}, 0, NOW(), NOW())
                RETURNING {DISCOUNT_COLUMNS}
            """, [data[f] for f in fields])

            row = cursor.fetchone()
            conn.commit()
            return self._map_row_to_discount(row)

        except UniqueViolation:
            conn.rollback()
            raise DuplicateError(f"Discount code '{data.get('code')}' already exists")

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def update(self, discount_id: int, changes: Dict[str, Any]) -> Optional[DiscountCode]:
        fields = [f for f in WRITABLE_FIELDS if f in changes]
        if not fields:
            return self.find_by_id(discount_id)

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                UPDATE discount_codes
                SET {", ".join(f"{f} = %s" for f in fields)}, updated_at = NOW()
                WHERE id = %s
                RETURNING {DISCOUNT_COLUMNS}
            """, [changes[f] for f in fields] + [discount_id])

            row = cursor.fetchone()
            conn.commit()
            return self._map_row_to_discount(row) if row else None

        except UniqueViolation:
            conn.rollback()
            raise DuplicateError(f"Discount code '{changes.get('code')}' already exists")

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def delete(self, discount_id: int) -> bool:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("DELETE FROM discount_codes WHERE id = %s RETURNING id", (discount_id,))
            deleted = cursor.fetchone() is not None
            conn.commit()
            return deleted

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def redeem(self, code: str) -> bool:
        """
        Increment used_count if the code is active and below its limit.

        The check and the increment are a single UPDATE, so two concurrent
        redemptions cannot both take the last use.

        Returns:
            True when a use was recorded
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                UPDATE discount_codes
                SET used_count = used_count + 1, updated_at = NOW()
                WHERE UPPER(code) = %s AND is_active = true AND used_count < usage_limit
                RETURNING id
            """, (normalize_code(code),))

            redeemed = cursor.fetchone() is not None
            conn.commit()
            return redeemed

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()
