"""
Catalog business logic: products and navigation categories
"""
import logging
from typing import List, Optional, Tuple, Dict, Any

from gamestore.core.exceptions import NotFoundError
from gamestore.domain.product import (
    Product, ProductCreate, ProductUpdate, PRODUCT_STATUSES, validate_product_images,
)
from gamestore.domain.category import Category, CategoryCreate, CategoryUpdate, build_category_tree
from gamestore.repositories.product_repository import ProductRepository
from gamestore.repositories.category_repository import CategoryRepository

logger = logging.getLogger(__name__)


def _with_main_image(images: List[str], image: Optional[str]) -> List[str]:
    """Gallery whose first entry is the main image"""
    gallery = [img for img in (images or []) if img]
    if image:
        gallery = [image] + [img for img in gallery if img != image]
    return gallery


class CatalogService:
    """Products and categories"""

    def __init__(
        self,
        product_repo: Optional[ProductRepository] = None,
        category_repo: Optional[CategoryRepository] = None
    ):
        self.products = product_repo or ProductRepository()
        self.categories = category_repo or CategoryRepository()

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------

    def list_active(self, category: Optional[str] = None) -> List[Product]:
        return self.products.find_active(category=category)

    def list_products(self, **filters) -> Tuple[List[Product], int]:
        return self.products.find_all(**filters)

    def get_product(self, product_id: int) -> Product:
        product = self.products.find_by_id(product_id)
        if product is None:
            raise NotFoundError("Product", product_id)
        return product

    def search(self, query: str, category: Optional[str] = None) -> List[Product]:
        if not query or not query.strip():
            return self.list_active(category)
        return self.products.search(query, category=category)

    def create_product(self, product_in: ProductCreate) -> Product:
        data = product_in.model_dump()
        data['images'] = _with_main_image(data['images'], data['image'])

        errors = validate_product_images(data['images'])
        if errors:
            raise ValueError("; ".join(errors))

        product = self.products.create(data)
        logger.info(f"Product created: {product.id} ({product.sku})")
        return product

    def update_product(self, product_id: int, product_in: ProductUpdate) -> Product:
        changes: Dict[str, Any] = product_in.model_dump(exclude_unset=True)

        if changes.get('image'):
            current = self.get_product(product_id)
            changes['images'] = _with_main_image(current.images, changes['image'])
            errors = validate_product_images(changes['images'])
            if errors:
                raise ValueError("; ".join(errors))

        product = self.products.update(product_id, changes)
        if product is None:
            raise NotFoundError("Product", product_id)
        return product

    def set_status(self, product_id: int, status: str) -> Product:
        if status not in PRODUCT_STATUSES:
            raise ValueError(f"Status must be one of: {', '.join(PRODUCT_STATUSES)}")
        product = self.products.set_status(product_id, status)
        if product is None:
            raise NotFoundError("Product", product_id)
        return product

    def update_images(self, product_id: int, images: List[str]) -> Product:
        """Replace the gallery after validating it; images[0] becomes the main image"""
        errors = validate_product_images(images)
        if errors:
            raise ValueError("; ".join(errors))

        product = self.products.update_images(product_id, images)
        if product is None:
            raise NotFoundError("Product", product_id)
        return product

    def add_image(self, product_id: int, url: str) -> Product:
        """Append an uploaded image URL to the gallery"""
        product = self.get_product(product_id)
        images = list(product.images)
        if url not in images:
            images.append(url)
        return self.update_images(product_id, images)

    def delete_product(self, product_id: int) -> None:
        if not self.products.delete(product_id):
            raise NotFoundError("Product", product_id)
        logger.info(f"Product deleted: {product_id}")

    def product_stats(self) -> dict:
        return self.products.get_stats()

    def low_stock(self) -> List[Product]:
        return self.products.find_low_stock()

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    def list_categories(self, active_only: bool = False) -> List[Category]:
        return self.categories.find_all(active_only=active_only)

    def category_tree(self, active_only: bool = False) -> List[Category]:
        return build_category_tree(self.categories.find_all(active_only=active_only))

    def get_category(self, category_id: int) -> Category:
        category = self.categories.find_by_id(category_id)
        if category is None:
            raise NotFoundError("Category", category_id)
        return category

    def create_category(self, category_in: CategoryCreate) -> Category:
        if category_in.parent_id is not None:
            self.get_category(category_in.parent_id)
        category = self.categories.create(category_in.model_dump())
        logger.info(f"Category created: {category.slug}")
        return category

    def update_category(self, category_id: int, category_in: CategoryUpdate) -> Category:
        changes = category_in.model_dump(exclude_unset=True)

        parent_id = changes.get('parent_id')
        if parent_id is not None:
            self._check_parent(category_id, parent_id)

        category = self.categories.update(category_id, changes)
        if category is None:
            raise NotFoundError("Category", category_id)
        return category

    def _check_parent(self, category_id: int, parent_id: int) -> None:
        """Reject a parent that is the category itself or one of its descendants"""
        if parent_id == category_id:
            raise ValueError("A category cannot be its own parent")

        by_id = {c.id: c for c in self.categories.find_all()}
        if parent_id not in by_id:
            raise NotFoundError("Category", parent_id)

        node = by_id.get(parent_id)
        while node is not None and node.parent_id is not None:
            if node.parent_id == category_id:
                raise ValueError("A category cannot be moved under one of its own children")
            node = by_id.get(node.parent_id)

    def delete_category(self, category_id: int) -> None:
        if not self.categories.delete(category_id):
            raise NotFoundError("Category", category_id)
        logger.info(f"Category deleted: {category_id}")

    def toggle_category(self, category_id: int) -> Category:
        category = self.categories.toggle_active(category_id)
        if category is None:
            raise NotFoundError("Category", category_id)
        return category


_service_instance: Optional[CatalogService] = None


def get_catalog_service() -> CatalogService:
    global _service_instance
    if _service_instance is None:
        _service_instance = CatalogService()
    return _service_instance
