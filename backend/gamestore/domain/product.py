"""
Product Domain Model

Represents a product sold in the gaming store (physical goods, digital
codes, guides and services). Titles and descriptions are bilingual:
Arabic is the storefront language, English is kept alongside.
"""
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional, List
from datetime import datetime
from decimal import Decimal


# Category identifiers accepted by the storefront filters and the CSV importer
PRODUCT_CATEGORIES = [
    "guide", "physical", "consultation", "tshirts", "playstation", "xbox",
    "nintendo", "pc", "mobile", "accessories", "giftcards", "preorders", "retro",
]

PRODUCT_STATUSES = ["active", "inactive", "draft"]

# Stock at or below this count (and above zero) is reported as low
LOW_STOCK_THRESHOLD = 5

MAX_DATA_URL_IMAGES = 3
MAX_DATA_URL_BYTES = 2 * 1024 * 1024


def savings_percentage(original_price, current_price) -> int:
    """Whole-number discount of current_price against original_price (0 when not on sale)"""
    if original_price is None or current_price is None:
        return 0
    original = Decimal(str(original_price))
    current = Decimal(str(current_price))
    if original <= current or original <= 0:
        return 0
    return int(round((original - current) / original * 100))


def is_image_reference(value: str) -> bool:
    return bool(value) and value.startswith(("data:", "http://", "https://"))


def validate_product_images(images: List[str]) -> List[str]:
    """
    Check an image list before it is stored on a product.

    Returns a list of error messages (empty when the list is acceptable).
    Data URLs are stored inline, so their count and estimated decoded
    size are bounded.
    """
    if not images:
        return ["At least one image is required"]

    errors = []
    data_urls = 0
    for index, image in enumerate(images):
        if not isinstance(image, str) or not is_image_reference(image):
            errors.append(f"Image {index + 1} must be an http(s) URL or a data URL")
            continue
        if image.startswith("data:"):
            data_urls += 1
            estimated_size = len(image) * 0.75
            if estimated_size >= MAX_DATA_URL_BYTES:
                errors.append(f"Image {index + 1} is larger than 2MB")

    if data_urls > MAX_DATA_URL_IMAGES:
        errors.append(f"At most {MAX_DATA_URL_IMAGES} embedded (data URL) images are allowed")

    return errors


class Product(BaseModel):
    """
    Product domain model - represents a product in the catalog

    Fields:
        id: Internal product ID (primary key)
        title_ar / title_en: Display titles
        description_ar / description_en: Long descriptions
        price: Current selling price in KWD
        original_price: Price before discount (optional)
        image: Main image (always the first entry of images)
        images: Full gallery
        category: Primary category
        categories: Extra categories the product is listed under
        is_new / is_limited: Storefront badges
        is_digital: Delivered electronically (no shipping charge)
        stock: Units on hand, None for unlimited digital goods
        sku: Stock Keeping Unit (unique)
        tags: Free-form search tags
        status: active, inactive or draft
    """

    id: int = Field(..., description="Internal product ID")
    title_ar: str = Field(..., description="Arabic title")
    title_en: str = Field(..., description="English title")
    description_ar: Optional[str] = Field(None, description="Arabic description")
    description_en: Optional[str] = Field(None, description="English description")

    price: Decimal = Field(..., description="Selling price (KWD)", ge=0)
    original_price: Optional[Decimal] = Field(None, description="Price before discount", ge=0)

    image: Optional[str] = Field(None, description="Main image URL")
    images: List[str] = Field(default_factory=list, description="Gallery image URLs")

    category: str = Field(..., description="Primary category")
    categories: List[str] = Field(default_factory=list, description="Additional categories")

    is_new: bool = Field(False, description="Show 'new' badge")
    is_limited: bool = Field(False, description="Show 'limited' badge")
    is_digital: bool = Field(False, description="Digital delivery")
    stock: Optional[int] = Field(None, description="Units in stock (None = unlimited)")

    sku: str = Field(..., description="Stock Keeping Unit")
    tags: List[str] = Field(default_factory=list, description="Search tags")
    status: str = Field("active", description="active, inactive or draft")

    created_at: Optional[datetime] = Field(None, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")

    model_config = ConfigDict(
        from_attributes=True,
        json_encoders={
            Decimal: float,
            datetime: lambda v: v.isoformat()
        }
    )

    @property
    def savings_percentage(self) -> int:
        return savings_percentage(self.original_price, self.price)

    @property
    def is_on_sale(self) -> bool:
        return self.savings_percentage > 0

    @property
    def is_out_of_stock(self) -> bool:
        """Digital goods without a stock count never run out"""
        return self.stock is not None and self.stock <= 0

    @property
    def is_low_stock(self) -> bool:
        return self.stock is not None and 0 < self.stock <= LOW_STOCK_THRESHOLD

    def in_category(self, category: str) -> bool:
        return self.category == category or category in (self.categories or [])

    def to_dict(self) -> dict:
        """Convert to dictionary with computed fields and floats instead of Decimals"""
        data = self.model_dump()

        data['savings_percentage'] = self.savings_percentage
        data['is_on_sale'] = self.is_on_sale
        data['is_low_stock'] = self.is_low_stock
        data['is_out_of_stock'] = self.is_out_of_stock

        for field in ('price', 'original_price'):
            if data.get(field) is not None:
                data[field] = float(data[field])

        return data


class ProductCreate(BaseModel):
    """Schema for creating a new product (admin form)"""
    title_ar: str = Field(..., min_length=3, max_length=100)
    title_en: str = Field(..., min_length=3, max_length=100)
    description_ar: str = Field(..., min_length=10, max_length=1000)
    description_en: str = Field(..., min_length=10, max_length=1000)
    price: Decimal = Field(..., ge=Decimal("0.01"), le=Decimal("9999.99"))
    original_price: Optional[Decimal] = Field(None, ge=0)
    image: str
    images: List[str] = Field(default_factory=list)
    category: str
    categories: List[str] = Field(default_factory=list)
    is_new: bool = False
    is_limited: bool = False
    is_digital: bool = False
    stock: Optional[int] = Field(None, ge=0)
    sku: str = Field(..., min_length=3, max_length=50)
    tags: List[str] = Field(..., min_length=1)
    status: str = "active"

    @field_validator("image")
    @classmethod
    def check_image(cls, v: str) -> str:
        if not is_image_reference(v):
            raise ValueError("Image must be a valid URL or data URL")
        return v

    @field_validator("category")
    @classmethod
    def check_category(cls, v: str) -> str:
        if v not in PRODUCT_CATEGORIES:
            raise ValueError(f"Category must be one of: {', '.join(PRODUCT_CATEGORIES)}")
        return v

    @field_validator("categories")
    @classmethod
    def check_categories(cls, v: List[str]) -> List[str]:
        unknown = [c for c in v if c not in PRODUCT_CATEGORIES]
        if unknown:
            raise ValueError(f"Unknown categories: {', '.join(unknown)}")
        return v

    @field_validator("status")
    @classmethod
    def check_status(cls, v: str) -> str:
        if v not in PRODUCT_STATUSES:
            raise ValueError(f"Status must be one of: {', '.join(PRODUCT_STATUSES)}")
        return v

    @field_validator("tags")
    @classmethod
    def strip_tags(cls, v: List[str]) -> List[str]:
        tags = [t.strip() for t in v if t and t.strip()]
        if not tags:
            raise ValueError("At least one tag is required")
        return tags


class ProductUpdate(BaseModel):
    """Schema for updating an existing product (partial)"""
    title_ar: Optional[str] = Field(None, min_length=3, max_length=100)
    title_en: Optional[str] = Field(None, min_length=3, max_length=100)
    description_ar: Optional[str] = Field(None, min_length=10, max_length=1000)
    description_en: Optional[str] = Field(None, min_length=10, max_length=1000)
    price: Optional[Decimal] = Field(None, ge=Decimal("0.01"), le=Decimal("9999.99"))
    original_price: Optional[Decimal] = Field(None, ge=0)
    image: Optional[str] = None
    category: Optional[str] = None
    categories: Optional[List[str]] = None
    is_new: Optional[bool] = None
    is_limited: Optional[bool] = None
    is_digital: Optional[bool] = None
    stock: Optional[int] = Field(None, ge=0)
    sku: Optional[str] = Field(None, min_length=3, max_length=50)
    tags: Optional[List[str]] = None
    status: Optional[str] = None

    @field_validator("category")
    @classmethod
    def check_category(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in PRODUCT_CATEGORIES:
            raise ValueError(f"Category must be one of: {', '.join(PRODUCT_CATEGORIES)}")
        return v

    @field_validator("image")
    @classmethod
    def check_image(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not is_image_reference(v):
            raise ValueError("Image must be a valid URL or data URL")
        return v

    @field_validator("categories")
    @classmethod
    def check_categories(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is None:
            return v
        unknown = [c for c in v if c not in PRODUCT_CATEGORIES]
        if unknown:
            raise ValueError(f"Unknown categories: {', '.join(unknown)}")
        return v

    @field_validator("tags")
    @classmethod
    def strip_tags(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        # None leaves tags unchanged; an explicit list must keep at least one
        if v is None:
            return v
        tags = [t.strip() for t in v if t and t.strip()]
        if not tags:
            raise ValueError("At least one tag is required")
        return tags

    @field_validator("status")
    @classmethod
    def check_status(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in PRODUCT_STATUSES:
            raise ValueError(f"Status must be one of: {', '.join(PRODUCT_STATUSES)}")
        return v


class ProductImagesUpdate(BaseModel):
    images: List[str]
