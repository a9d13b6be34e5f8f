"""
Category Domain Model

Admin-managed navigation categories. Categories form a tree through
parent_id; the storefront menu is the tree ordered by sort_order.
"""
import re
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional, List
from datetime import datetime

SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")


def _check_slug(v: Optional[str]) -> Optional[str]:
    if v is not None and not SLUG_PATTERN.match(v):
        raise ValueError("Slug may only contain lowercase letters, digits and hyphens")
    return v


class Category(BaseModel):
    """
    Category domain model

    Fields:
        id: Category ID
        name / name_en: Arabic and English labels
        slug: URL identifier (unique, lowercase letters, digits, hyphens)
        color: Badge color (hex)
        icon: Optional icon name
        parent_id: Parent category, None for top-level
        sort_order: Position among siblings
        is_active: Shown in the storefront menu
        children: Populated only when building the tree
    """

    id: int
    name: str
    name_en: str
    slug: str
    description: Optional[str] = None
    description_en: Optional[str] = None
    color: str = "#6366f1"
    icon: Optional[str] = None
    parent_id: Optional[int] = None
    sort_order: int = 0
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    children: List["Category"] = Field(default_factory=list)

    model_config = ConfigDict(
        from_attributes=True,
        json_encoders={datetime: lambda v: v.isoformat()}
    )

    def to_dict(self) -> dict:
        return self.model_dump()


class CategoryCreate(BaseModel):
    """Schema for creating a category"""
    name: str = Field(..., min_length=1, max_length=100)
    name_en: str = Field(..., min_length=1, max_length=100)
    slug: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    description_en: Optional[str] = None
    color: str = "#6366f1"
    icon: Optional[str] = None
    parent_id: Optional[int] = None
    sort_order: int = 0
    is_active: bool = True

    validate_slug = field_validator("slug")(_check_slug)


class CategoryUpdate(BaseModel):
    """Schema for updating a category (partial)"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    name_en: Optional[str] = Field(None, min_length=1, max_length=100)
    slug: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    description_en: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    parent_id: Optional[int] = None
    sort_order: Optional[int] = None
    is_active: Optional[bool] = None

    validate_slug = field_validator("slug")(_check_slug)


def build_category_tree(categories: List[Category]) -> List[Category]:
    """
    Nest a flat category list by parent_id.

    Siblings are ordered by sort_order then name. Categories whose parent
    is missing from the list are treated as roots.
    """
    nodes = {c.id: c.model_copy(update={"children": []}) for c in categories}
    roots: List[Category] = []

    for node in nodes.values():
        parent = nodes.get(node.parent_id) if node.parent_id is not None else None
        if parent is not None and parent.id != node.id:
            parent.children.append(node)
        else:
            roots.append(node)

    def _sort(items: List[Category]):
        items.sort(key=lambda c: (c.sort_order, c.name))
        for item in items:
            _sort(item.children)

    _sort(roots)
    return roots
