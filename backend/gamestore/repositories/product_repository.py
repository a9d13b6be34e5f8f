"""
Product Repository - Data Access Layer for Products

Handles all database queries for products and returns Product domain models.
"""
from typing import List, Optional, Tuple, Dict, Any

from psycopg2.errors import UniqueViolation

from gamestore.domain.product import Product, LOW_STOCK_THRESHOLD
from gamestore.core.database import get_db_connection_dict
from gamestore.core.exceptions import DuplicateError


PRODUCT_COLUMNS = """
    id, sku, title_ar, title_en, description_ar, description_en,
    price, original_price, image, images, category, categories, tags,
    is_new, is_limited, is_digital, stock, status, created_at, updated_at
"""

# Columns an admin may change through create/update
WRITABLE_FIELDS = [
    'sku', 'title_ar', 'title_en', 'description_ar', 'description_en',
    'price', 'original_price', 'image', 'images', 'category', 'categories', 'tags',
    'is_new', 'is_limited', 'is_digital', 'stock', 'status',
]


class ProductRepository:
    """
    Repository for Product data access

    All SQL queries for products are centralized here.
    Returns Product domain models, not raw dictionaries.
    """

    @staticmethod
    def _map_row_to_product(row: dict) -> Product:
        """Map a database row to the Product domain model (NULL arrays become empty lists)"""
        return Product(
            id=row['id'],
            sku=row['sku'],
            title_ar=row['title_ar'],
            title_en=row['title_en'],
            description_ar=row.get('description_ar'),
            description_en=row.get('description_en'),
            price=row['price'],
            original_price=row.get('original_price'),
            image=row.get('image'),
            images=row.get('images') or [],
            category=row['category'],
            categories=row.get('categories') or [],
            tags=row.get('tags') or [],
            is_new=bool(row.get('is_new')),
            is_limited=bool(row.get('is_limited')),
            is_digital=bool(row.get('is_digital')),
            stock=row.get('stock'),
            status=row.get('status') or 'active',
            created_at=row.get('created_at'),
            updated_at=row.get('updated_at')
        )

    def find_by_id(self, product_id: int) -> Optional[Product]:
        """
        Find product by ID

        Returns:
            Product or None if not found
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"SELECT {PRODUCT_COLUMNS} FROM products WHERE id = %s", (product_id,))

            row = cursor.fetchone()
            if not row:
                return None

            return self._map_row_to_product(row)

        finally:
            cursor.close()
            conn.close()

    def find_by_sku(self, sku: str) -> Optional[Product]:
        """Find product by SKU"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"SELECT {PRODUCT_COLUMNS} FROM products WHERE sku = %s", (sku,))

            row = cursor.fetchone()
            if not row:
                return None

            return self._map_row_to_product(row)

        finally:
            cursor.close()
            conn.close()

    def find_by_ids(self, product_ids: List[int]) -> Dict[int, Product]:
        """Fetch several products at once, keyed by ID (missing IDs are absent)"""
        if not product_ids:
            return {}

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(
                f"SELECT {PRODUCT_COLUMNS} FROM products WHERE id = ANY(%s)",
                (list(product_ids),)
            )
            products = [self._map_row_to_product(row) for row in cursor.fetchall()]
            return {p.id: p for p in products}

        finally:
            cursor.close()
            conn.close()

    def find_active(self, category: Optional[str] = None) -> List[Product]:
        """
        Storefront listing: active products, newest first.

        A category matches the primary category or any of the extra ones.
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            conditions = ["status = 'active'"]
            params: List[Any] = []

            if category:
                conditions.append("(category = %s OR %s = ANY(categories))")
                params.extend([category, category])

            cursor.execute(f"""
                SELECT {PRODUCT_COLUMNS}
                FROM products
                WHERE {" AND ".join(conditions)}
                ORDER BY created_at DESC, id DESC
            """, params)

            return [self._map_row_to_product(row) for row in cursor.fetchall()]

        finally:
            cursor.close()
            conn.close()

    def find_all(
        self,
        status: Optional[str] = None,
        category: Optional[str] = None,
        is_digital: Optional[bool] = None,
        search: Optional[str] = None,
        limit: int = 100,
        offset: int = 0
    ) -> Tuple[List[Product], int]:
        """
        Find products with filters (admin listing)

        Args:
            status: active, inactive or draft
            category: Primary or extra category
            is_digital: Digital / physical filter
            search: Search in titles, descriptions, SKU, tags and categories
            limit: Maximum results to return
            offset: Number of results to skip

        Returns:
            Tuple of (list of products, total count)
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            conditions = []
            params: List[Any] = []

            if status:
                conditions.append("status = %s")
                params.append(status)

            if category:
                conditions.append("(category = %s OR %s = ANY(categories))")
                params.extend([category, category])

            if is_digital is not None:
                conditions.append("is_digital = %s")
                params.append(is_digital)

            if search:
                clause, search_params = self._search_clause(search)
                conditions.append(clause)
                params.extend(search_params)

            where_clause = " AND ".join(conditions) if conditions else "1=1"

            cursor.execute(f"""
                SELECT COUNT(*) as total
                FROM products
                WHERE {where_clause}
            """, params)
            total = cursor.fetchone()['total']

            cursor.execute(f"""
                SELECT {PRODUCT_COLUMNS}
                FROM products
                WHERE {where_clause}
                ORDER BY created_at DESC, id DESC
                LIMIT %s OFFSET %s
            """, params + [limit, offset])

            products = [self._map_row_to_product(row) for row in cursor.fetchall()]
            return products, total

        finally:
            cursor.close()
            conn.close()

    @staticmethod
    def _search_clause(query: str) -> Tuple[str, List[str]]:
        term = f"%{query.strip()}%"
        clause = """(
            title_ar ILIKE %s OR title_en ILIKE %s
            OR description_ar ILIKE %s OR description_en ILIKE %s
            OR sku ILIKE %s
            OR array_to_string(tags, ' ') ILIKE %s
            OR array_to_string(categories, ' ') ILIKE %s
        )"""
        return clause, [term] * 7

    def search(self, query: str, category: Optional[str] = None, active_only: bool = True) -> List[Product]:
        """Case-insensitive search across titles, descriptions, SKU, tags and categories"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            clause, params = self._search_clause(query)
            conditions = [clause]

            if active_only:
                conditions.append("status = 'active'")

            if category:
                conditions.append("(category = %s OR %s = ANY(categories))")
                params.extend([category, category])

            cursor.execute(f"""
                SELECT {PRODUCT_COLUMNS}
                FROM products
                WHERE {" AND ".join(conditions)}
                ORDER BY created_at DESC, id DESC
            """, params)

            return [self._map_row_to_product(row) for row in cursor.fetchall()]

        finally:
            cursor.close()
            conn.close()

    def create(self, data: Dict[str, Any]) -> Product:
        """
        Insert a product.

        Raises:
            DuplicateError: SKU already exists
        """
        fields = [f for f in WRITABLE_FIELDS if f in data]
        placeholders = ", ".join(["%s"] * len(fields))

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                INSERT INTO products ({", ".join(fields)}, created_at, updated_at)
                VALUES ({placeholders}, NOW(), NOW())
                RETURNING {PRODUCT_COLUMNS}
            """, [data[f] for f in fields])

            row = cursor.fetchone()
            conn.commit()
            return self._map_row_to_product(row)

        except UniqueViolation:
            conn.rollback()
            raise DuplicateError(f"Product with SKU '{data.get('sku')}' already exists")

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def update(self, product_id: int, changes: Dict[str, Any]) -> Optional[Product]:
        """
        Apply a partial update.

        Returns:
            Updated Product or None if not found
        """
        fields = [f for f in WRITABLE_FIELDS if f in changes]
        if not fields:
            return self.find_by_id(product_id)

        set_clause = ", ".join(f"{f} = %s" for f in fields)

        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                UPDATE products
                SET {set_clause}, updated_at = NOW()
                WHERE id = %s
                RETURNING {PRODUCT_COLUMNS}
            """, [changes[f] for f in fields] + [product_id])

            row = cursor.fetchone()
            conn.commit()
            return self._map_row_to_product(row) if row else None

        except UniqueViolation:
            conn.rollback()
            raise DuplicateError(f"Product with SKU '{changes.get('sku')}' already exists")

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def set_status(self, product_id: int, status: str) -> Optional[Product]:
        return self.update(product_id, {'status': status})

    def update_images(self, product_id: int, images: List[str]) -> Optional[Product]:
        """Replace the gallery; the first image becomes the main image"""
        return self.update(product_id, {'images': images, 'image': images[0] if images else None})

    def delete(self, product_id: int) -> bool:
        """Hard delete. Orders keep their own snapshot of the product."""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("DELETE FROM products WHERE id = %s RETURNING id", (product_id,))
            deleted = cursor.fetchone() is not None
            conn.commit()
            return deleted

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()

    def find_low_stock(self, threshold: int = LOW_STOCK_THRESHOLD) -> List[Product]:
        """Active products with a stock count at or below threshold (out of stock first)"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {PRODUCT_COLUMNS}
                FROM products
                WHERE status = 'active' AND stock IS NOT NULL AND stock <= %s
                ORDER BY stock ASC, title_en
            """, (threshold,))

            return [self._map_row_to_product(row) for row in cursor.fetchall()]

        finally:
            cursor.close()
            conn.close()

    def get_stats(self) -> dict:
        """
        Get product statistics

        Returns:
            Dict with totals by status, counts by category and stock levels
        """
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT
                    COUNT(*) as total,
                    COUNT(*) FILTER (WHERE status = 'active') as active,
                    COUNT(*) FILTER (WHERE status = 'inactive') as inactive,
                    COUNT(*) FILTER (WHERE status = 'draft') as draft,
                    COUNT(*) FILTER (WHERE is_digital) as digital
                FROM products
            """)
            totals = dict(cursor.fetchone())

            cursor.execute("""
                SELECT category, COUNT(*) as count
                FROM products
                GROUP BY category
                ORDER BY count DESC
            """)
            by_category = cursor.fetchall()

            cursor.execute("""
                SELECT
                    COUNT(*) FILTER (WHERE stock <= 0) as out_of_stock,
                    COUNT(*) FILTER (WHERE stock > 0 AND stock <= %s) as low_stock,
                    COUNT(*) FILTER (WHERE stock > %s OR stock IS NULL) as in_stock
                FROM products
                WHERE status = 'active'
            """, (LOW_STOCK_THRESHOLD, LOW_STOCK_THRESHOLD))
            stock_levels = dict(cursor.fetchone())

            return {
                'totals': totals,
                'by_category': by_category,
                'stock_levels': stock_levels
            }

        finally:
            cursor.close()
            conn.close()
