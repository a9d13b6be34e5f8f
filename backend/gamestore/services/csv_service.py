"""
CSV export of back-office tables and CSV import of products.
"""
import io
import csv
import logging
from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal, InvalidOperation
from typing import List, Dict, Any, Optional, Iterable

import pandas as pd
import psycopg2

from gamestore.core.exceptions import DuplicateError
from gamestore.domain.product import PRODUCT_CATEGORIES, PRODUCT_STATUSES, validate_product_images
from gamestore.domain.order import Order
from gamestore.domain.message import Message
from gamestore.domain.discount import DiscountCode
from gamestore.domain.product import Product
from gamestore.repositories.product_repository import ProductRepository

logger = logging.getLogger(__name__)


PRODUCT_EXPORT_HEADERS = ['id', 'title', 'titleEn', 'category', 'price', 'originalPrice',
                          'stock', 'sku', 'status', 'isNew', 'isLimited']
ORDER_EXPORT_HEADERS = ['orderNumber', 'customerName', 'customerEmail', 'total',
                        'status', 'paymentStatus', 'createdAt']
MESSAGE_EXPORT_HEADERS = ['messageNumber', 'name', 'email', 'subject', 'category',
                          'priority', 'status', 'createdAt']
DISCOUNT_EXPORT_HEADERS = ['code', 'type', 'value', 'usageLimit', 'usedCount',
                           'oneUserOnly', 'isActive', 'createdAt']

IMPORT_HEADERS = ['title', 'titleEn', 'description', 'descriptionEn', 'price', 'originalPrice',
                  'category', 'sku', 'stock', 'isNew', 'isLimited', 'status', 'tags', 'images']

TEMPLATE_SAMPLE_ROW = [
    'اسم المنتج بالعربية',
    'Product Name in English',
    'وصف المنتج بالعربية مع تفاصيل كاملة عن المميزات والمواصفات',
    'Product description in English with full details about features and specifications',
    '29.990',
    '39.990',
    'playstation',
    'PROD-001',
    '100',
    'true',
    'false',
    'active',
    'gaming,action,ps5,exclusive',
    'https://example.com/image1.jpg,https://example.com/image2.jpg',
]


# ============================================================================
# EXPORT
# ============================================================================

def to_csv(headers: List[str], rows: Iterable[Dict[str, Any]]) -> str:
    """
    Render rows as CSV text.

    Values containing a comma, quote or newline are quoted and inner quotes
    doubled; None becomes an empty cell.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(headers)
    for row in rows:
        writer.writerow(['' if row.get(h) is None else row.get(h) for h in headers])
    return buffer.getvalue()


def export_filename(kind: str, today: Optional[date] = None) -> str:
    return f"{kind}_export_{(today or date.today()).isoformat()}.csv"


def _money(value) -> str:
    return f"{Decimal(str(value)):.3f}" if value is not None else ''


def _date(value: Optional[datetime]) -> str:
    return value.strftime("%m/%d/%Y") if value else ''


def _yes_no(value: bool) -> str:
    return 'Yes' if value else 'No'


def export_products(products: List[Product]) -> str:
    return to_csv(PRODUCT_EXPORT_HEADERS, (
        {
            'id': p.id,
            'title': p.title_ar,
            'titleEn': p.title_en,
            'category': p.category,
            'price': _money(p.price),
            'originalPrice': _money(p.original_price),
            'stock': p.stock if p.stock is not None else '',
            'sku': p.sku,
            'status': p.status,
            'isNew': _yes_no(p.is_new),
            'isLimited': _yes_no(p.is_limited),
        }
        for p in products
    ))


def export_orders(orders: List[Order]) -> str:
    return to_csv(ORDER_EXPORT_HEADERS, (
        {
            'orderNumber': o.order_number,
            'customerName': o.customer.full_name,
            'customerEmail': o.customer.email,
            'total': _money(o.total),
            'status': o.status,
            'paymentStatus': o.payment_status,
            'createdAt': _date(o.created_at),
        }
        for o in orders
    ))


def export_messages(messages: List[Message]) -> str:
    return to_csv(MESSAGE_EXPORT_HEADERS, (
        {
            'messageNumber': m.message_number,
            'name': m.name,
            'email': m.email,
            'subject': m.subject,
            'category': m.category,
            'priority': m.priority,
            'status': m.status,
            'createdAt': _date(m.created_at),
        }
        for m in messages
    ))


def export_discount_codes(codes: List[DiscountCode]) -> str:
    return to_csv(DISCOUNT_EXPORT_HEADERS, (
        {
            'code': c.code,
            'type': c.type,
            'value': f"{c.value.normalize():f}%" if c.type == 'percentage' else _money(c.value),
            'usageLimit': c.usage_limit,
            'usedCount': c.used_count,
            'oneUserOnly': _yes_no(c.one_user_only),
            'isActive': 'Active' if c.is_active else 'Inactive',
            'createdAt': _date(c.created_at),
        }
        for c in codes
    ))


def import_template() -> str:
    """Header row plus one sample product"""
    return to_csv(IMPORT_HEADERS, [dict(zip(IMPORT_HEADERS, TEMPLATE_SAMPLE_ROW))])


# ============================================================================
# IMPORT
# ============================================================================

@dataclass
class RowError:
    row: int
    sku: str
    errors: List[str]


@dataclass
class ImportResult:
    """Outcome of a product CSV import"""
    total_rows: int = 0
    created: List[str] = field(default_factory=list)
    updated: List[str] = field(default_factory=list)
    skipped: List[RowError] = field(default_factory=list)
    dry_run: bool = False

    def to_dict(self) -> dict:
        return {
            'total_rows': self.total_rows,
            'created': len(self.created),
            'updated': len(self.updated),
            'skipped': len(self.skipped),
            'created_skus': self.created,
            'updated_skus': self.updated,
            'errors': [{'row': e.row, 'sku': e.sku, 'errors': e.errors} for e in self.skipped],
            'dry_run': self.dry_run,
        }


def _split_list(value: str) -> List[str]:
    separator = '|' if '|' in value else ','
    return [part.strip() for part in value.split(separator) if part.strip()]


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ('true', '1', 'yes', 'y')


def validate_product_row(row: Dict[str, str]) -> List[str]:
    """Required field checks for one CSV row"""
    errors = []

    if not row.get('title', '').strip():
        errors.append('Title (Arabic) is required')

    if not row.get('titleEn', '').strip():
        errors.append('Title (English) is required')

    try:
        price = Decimal(row.get('price', '').strip())
        if not price.is_finite() or price <= 0:
            raise InvalidOperation
    except (InvalidOperation, ValueError):
        errors.append('Valid price is required')

    original_price = row.get('originalPrice', '').strip()
    if original_price:
        try:
            original = Decimal(original_price)
            if not original.is_finite() or original < 0:
                raise InvalidOperation
        except (InvalidOperation, ValueError):
            errors.append('Original price must be a non-negative number')

    if not row.get('sku', '').strip():
        errors.append('SKU is required')

    if row.get('category', '').strip() not in PRODUCT_CATEGORIES:
        errors.append(f"Category must be one of: {', '.join(PRODUCT_CATEGORIES)}")

    return errors


def row_to_product_data(row: Dict[str, str]) -> Dict[str, Any]:
    """Convert a validated CSV row into repository fields"""
    images = _split_list(row.get('images', ''))
    original_price = row.get('originalPrice', '').strip()
    stock = row.get('stock', '').strip()
    status = row.get('status', '').strip() or 'active'

    data = {
        'title_ar': row['title'].strip(),
        'title_en': row['titleEn'].strip(),
        'description_ar': row.get('description', '').strip() or None,
        'description_en': row.get('descriptionEn', '').strip() or None,
        'price': Decimal(row['price'].strip()),
        'original_price': Decimal(original_price) if original_price else None,
        'category': row['category'].strip(),
        'sku': row['sku'].strip(),
        'stock': int(float(stock)) if stock else None,
        'is_new': _parse_bool(row.get('isNew', '')),
        'is_limited': _parse_bool(row.get('isLimited', '')),
        'status': status if status in PRODUCT_STATUSES else 'active',
        'tags': _split_list(row.get('tags', '')),
        'images': images,
        'image': images[0] if images else None,
    }
    return data


class ProductImportService:
    """Creates or updates products (matched by SKU) from a CSV upload"""

    def __init__(self, product_repo: Optional[ProductRepository] = None):
        self.products = product_repo or ProductRepository()

    @staticmethod
    def read_rows(content: bytes) -> List[Dict[str, str]]:
        """
        Parse CSV bytes into row dicts.

        Raises:
            ValueError: unreadable file, no data rows or missing headers
        """
        try:
            df = pd.read_csv(io.BytesIO(content), dtype=str, keep_default_na=False, encoding='utf-8-sig')
        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
            raise ValueError(f"Could not read CSV file: {e}")

        df.columns = [str(c).strip() for c in df.columns]
        missing = [h for h in IMPORT_HEADERS if h not in df.columns]
        if missing:
            raise ValueError(f"Missing headers: {', '.join(missing)}")

        if df.empty:
            raise ValueError("File must contain headers and data rows")

        return df.to_dict(orient='records')

    def import_products(self, content: bytes, dry_run: bool = False) -> ImportResult:
        rows = self.read_rows(content)
        result = ImportResult(total_rows=len(rows), dry_run=dry_run)

        # Row numbers are 1-based and count the header line
        for index, row in enumerate(rows, start=2):
            sku = (row.get('sku') or '').strip()
            errors = validate_product_row(row)

            if not errors:
                try:
                    data = row_to_product_data(row)
                except (InvalidOperation, ValueError) as e:
                    errors = [f"Invalid value: {e}"]
                else:
                    if data['images']:
                        errors = validate_product_images(data['images'])

            if errors:
                logger.warning(f"Skipping CSV row {index} ({sku or 'no sku'}): {'; '.join(errors)}")
                result.skipped.append(RowError(row=index, sku=sku, errors=errors))
                continue

            try:
                existing = self.products.find_by_sku(sku)
                if dry_run:
                    (result.updated if existing else result.created).append(sku)
                    continue

                if existing:
                    self.products.update(existing.id, data)
                    result.updated.append(sku)
                else:
                    self.products.create(data)
                    result.created.append(sku)
            except (psycopg2.Error, DuplicateError) as e:
                # One bad row must not abort the rows after it
                logger.error(f"Could not save CSV row {index} ({sku}): {e}")
                result.skipped.append(RowError(row=index, sku=sku, errors=[f"Database error: {e}"]))

        logger.info(
            f"Product CSV import: {len(result.created)} created, {len(result.updated)} updated, "
            f"{len(result.skipped)} skipped (dry_run={dry_run})"
        )
        return result
