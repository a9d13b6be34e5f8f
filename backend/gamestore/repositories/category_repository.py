"""
Category Repository - Data Access Layer for navigation categories
"""
from typing import List, Optional, Dict, Any

from psycopg2.errors import UniqueViolation

from gamestore.domain.category import Category
from gamestore.core.database import get_db_connection_dict
from gamestore.core.exceptions import DuplicateError


CATEGORY_COLUMNS = """
    id, name, name_en, slug, description, description_en, color, icon,
    parent_id, sort_order, is_active, created_at, updated_at
"""

WRITABLE_FIELDS = [
    'name', 'name_en', 'slug', 'description', 'description_en', 'color', 'icon',
    'parent_id', 'sort_order', 'is_active',
]


class CategoryRepository:
    """Repository for Category data access"""

    @staticmethod
    def _map_row_to_category(row: dict) -> Category:
        return Category(
            id=row['id'],
            name=row['name'],
            name_en=row['name_en'],
            slug=row['slug'],
            description=row.get('description'),
            description_en=row.get('description_en'),
            color=row.get('color') or "#6366f1",
            icon=row.get('icon'),
            parent_id=row.get('parent_id'),
            sort_order=row.get('sort_order') or 0,
            is_active=bool(row.get('is_active', True)),
            created_at=row.get('created_at'),
            updated_at=row.get('updated_at')
        )

    def find_all(self, active_only: bool = False) -> List[Category]:
        """Flat list ordered by sort_order, then name"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            where_clause = "WHERE is_active = true" if active_only else ""
            cursor.execute(f"""
                SELECT {CATEGORY_COLUMNS}
                FROM categories
                {where_clause}
                ORDER BY sort_order, name
            """)
            return [self._map_row_to_category(row) for row in cursor.fetchall()]

        finally:
            cursor.close()
            conn.close()

    def find_by_id(self, category_id: int) -> Optional[Category]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"SELECT {CATEGORY_COLUMNS} FROM categories WHERE id = %s", (category_id,))
            row = cursor.fetchone()
            return self._map_row_to_category(row) if row else None

        finally:
            cursor.close()
            conn.close()

    def create(self, data: Dict[str, Any]) -> Category:
        """
        Insert a category.

        Raises:
            DuplicateError: slug already exists
        """
        fields = [f for f in WRITABLE_FIELDS if f in data]

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                INSERT INTO categories ({", ".join(fields)}, created_at, updated_at)
                VALUES ({", ".join(["%s"] * len(fields))}, NOW(), NOW())
                RETURNING {CATEGORY_COLUMNS}
            """, [data[f] for f in fields])

            row = cursor.fetchone()
            conn.commit()
            return self._map_row_to_category(row)

        except UniqueViolation:
            conn.rollback()
            raise DuplicateError(f"Category slug '{data.get('slug')}' already exists")

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def update(self, category_id: int, changes: Dict[str, Any]) -> Optional[Category]:
        fields = [f for f in WRITABLE_FIELDS if f in changes]
        if not fields:
            return self.find_by_id(category_id)

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                UPDATE categories
                SET {", ".join(f"{f} = %s" for f in fields)}, updated_at = NOW()
                WHERE id = %s
                RETURNING {CATEGORY_COLUMNS}
            """, [changes[f] for f in fields] + [category_id])

            row = cursor.fetchone()
            conn.commit()
            return self._map_row_to_category(row) if row else None

        except UniqueViolation:
            conn.rollback()
            raise DuplicateError(f"Category slug '{changes.get('slug')}' already exists")

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def delete(self, category_id: int) -> bool:
        """
        Delete a category.

        Its children move up to the deleted category's parent in the same
        transaction, so the tree never has dangling branches.
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("SELECT parent_id FROM categories WHERE id = %s", (category_id,))
            row = cursor.fetchone()
            if not row:
                return False

            cursor.execute("""
                UPDATE categories
                SET parent_id = %s, updated_at = NOW()
                WHERE parent_id = %s
            """, (row['parent_id'], category_id))

            cursor.execute("DELETE FROM categories WHERE id = %s", (category_id,))
            conn.commit()
            return True

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def toggle_active(self, category_id: int) -> Optional[Category]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                UPDATE categories
                SET is_active = NOT is_active, updated_at = NOW()
                WHERE id = %s
                RETURNING {CATEGORY_COLUMNS}
            """, (category_id,))

            row = cursor.fetchone()
            conn.commit()
            return self._map_row_to_category(row) if row else None

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()
