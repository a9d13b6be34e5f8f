"""
Unit tests for CatalogService
"""
import pytest
from decimal import Decimal
from unittest.mock import MagicMock

from gamestore.core.exceptions import NotFoundError
from gamestore.domain.category import Category, CategoryUpdate
from gamestore.domain.product import ProductCreate, ProductUpdate
from gamestore.services.catalog_service import CatalogService


def _category(id, parent_id=None, sort_order=0, name=None):
    return Category(
        id=id, name=name or f"c{id}", name_en=name or f"c{id}", slug=f"c-{id}",
        parent_id=parent_id, sort_order=sort_order
    )


@pytest.fixture
def product_repo():
    return MagicMock()


@pytest.fixture
def category_repo():
    return MagicMock()


@pytest.fixture
def service(product_repo, category_repo):
    return CatalogService(product_repo=product_repo, category_repo=category_repo)


@pytest.fixture
def product_in():
    return ProductCreate(
        title_ar="إله الحرب راغناروك",
        title_en="God of War Ragnarok PS5",
        description_ar="مغامرة ملحمية في عالم الأساطير",
        description_en="Epic adventure through the Norse realms",
        price="19.990",
        image="https://cdn.example.com/main.jpg",
        images=["https://cdn.example.com/side.jpg", "https://cdn.example.com/main.jpg"],
        category="playstation",
        sku="PS5-GOW-001",
        tags=[" action ", "ps5"],
    )


class TestProducts:

    def test_create_puts_main_image_first(self, service, product_repo, product_in, make_product):
        # Arrange
        product_repo.create.return_value = make_product()

        # Act
        service.create_product(product_in)

        # Assert
        data = product_repo.create.call_args[0][0]
        assert data['images'] == ["https://cdn.example.com/main.jpg", "https://cdn.example.com/side.jpg"]
        assert data['tags'] == ["action", "ps5"]

    def test_create_rejects_too_many_data_urls(self, service, product_repo, product_in):
        # Arrange
        data_url = "data:image/png;base64," + "A" * 20
        product_in = product_in.model_copy(update={'images': [data_url] * 3, 'image': "data:image/png;base64,BBBB"})

        # Act / Assert
        with pytest.raises(ValueError, match="At most 3"):
            service.create_product(product_in)
        product_repo.create.assert_not_called()

    def test_get_missing_product(self, service, product_repo):
        product_repo.find_by_id.return_value = None

        with pytest.raises(NotFoundError):
            service.get_product(404)

    def test_blank_search_lists_active(self, service, product_repo):
        service.search("   ", category="xbox")

        product_repo.find_active.assert_called_once_with(category="xbox")
        product_repo.search.assert_not_called()

    def test_update_main_image_reorders_gallery(self, service, product_repo, make_product):
        # Arrange
        product_repo.find_by_id.return_value = make_product(
            images=["https://cdn.example.com/a.jpg", "https://cdn.example.com/b.jpg"]
        )
        product_repo.update.return_value = make_product()

        # Act
        service.update_product(1, ProductUpdate(image="https://cdn.example.com/b.jpg"))

        # Assert
        changes = product_repo.update.call_args[0][1]
        assert changes['images'] == ["https://cdn.example.com/b.jpg", "https://cdn.example.com/a.jpg"]

    def test_set_status_validates(self, service, product_repo):
        with pytest.raises(ValueError, match="Status must be one of"):
            service.set_status(1, "archived")
        product_repo.set_status.assert_not_called()

    def test_update_images_requires_one(self, service):
        with pytest.raises(ValueError, match="At least one image"):
            service.update_images(1, [])

    def test_add_image_skips_duplicates(self, service, product_repo, make_product):
        # Arrange
        product_repo.find_by_id.return_value = make_product()
        product_repo.update_images.return_value = make_product()

        # Act
        service.add_image(1, "https://cdn.example.com/gow.jpg")

        # Assert
        product_repo.update_images.assert_called_once_with(1, ["https://cdn.example.com/gow.jpg"])


class TestProductUpdateValidation:

    def test_unknown_categories_rejected(self):
        with pytest.raises(ValueError, match="Unknown categories: steam"):
            ProductUpdate(categories=["preorders", "steam"])

    def test_empty_tag_list_rejected(self):
        with pytest.raises(ValueError, match="At least one tag is required"):
            ProductUpdate(tags=["  ", ""])

    def test_tags_are_stripped(self):
        assert ProductUpdate(tags=[" retro ", "snes"]).tags == ["retro", "snes"]

    def test_image_must_be_a_reference(self):
        with pytest.raises(ValueError, match="valid URL or data URL"):
            ProductUpdate(image="cover.png")

    def test_omitted_fields_stay_unset(self):
        update = ProductUpdate(price="12.500")

        assert update.categories is None
        assert update.tags is None
        assert update.model_dump(exclude_unset=True) == {"price": Decimal("12.500")}


class TestCategories:

    def test_tree_nests_and_sorts(self, service, category_repo):
        # Arrange
        category_repo.find_all.return_value = [
            _category(1, sort_order=2),
            _category(2, sort_order=1),
            _category(3, parent_id=1),
        ]

        # Act
        tree = service.category_tree()

        # Assert
        assert [c.id for c in tree] == [2, 1]
        assert [c.id for c in tree[1].children] == [3]

    def test_cannot_be_own_parent(self, service):
        with pytest.raises(ValueError, match="own parent"):
            service.update_category(1, CategoryUpdate(parent_id=1))

    def test_cannot_move_under_descendant(self, service, category_repo):
        # Arrange: 1 -> 2 -> 3
        category_repo.find_all.return_value = [
            _category(1), _category(2, parent_id=1), _category(3, parent_id=2),
        ]

        # Act / Assert
        with pytest.raises(ValueError, match="own children"):
            service.update_category(1, CategoryUpdate(parent_id=3))
        category_repo.update.assert_not_called()

    def test_unknown_parent(self, service, category_repo):
        category_repo.find_all.return_value = [_category(1)]

        with pytest.raises(NotFoundError):
            service.update_category(1, CategoryUpdate(parent_id=9))

    def test_delete_missing_category(self, service, category_repo):
        category_repo.delete.return_value = False

        with pytest.raises(NotFoundError):
            service.delete_category(9)
