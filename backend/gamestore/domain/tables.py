"""
Database tables

SQLAlchemy declarations of the store schema. Repositories query these
tables with raw SQL; the declarations are used by init_schema() to create
them on a fresh database.
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, DECIMAL, ForeignKey, CheckConstraint
from sqlalchemy.dialects.postgresql import ARRAY, JSONB
from sqlalchemy.sql import func

from gamestore.core.database import Base


class ProductTable(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    sku = Column(String(50), nullable=False, unique=True, index=True)

    # Bilingual content
    title_ar = Column(String(100), nullable=False)
    title_en = Column(String(100), nullable=False)
    description_ar = Column(Text)
    description_en = Column(Text)

    # Pricing (KWD)
    price = Column(DECIMAL(10, 3), nullable=False)
    original_price = Column(DECIMAL(10, 3))

    image = Column(Text)
    images = Column(ARRAY(Text), server_default="{}")
    category = Column(String(50), nullable=False, index=True)
    categories = Column(ARRAY(String(50)), server_default="{}")
    tags = Column(ARRAY(String(100)), server_default="{}")

    is_new = Column(Boolean, default=False)
    is_limited = Column(Boolean, default=False)
    is_digital = Column(Boolean, default=False)
    stock = Column(Integer)
    status = Column(String(20), default="active", index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        CheckConstraint("price > 0", name="ck_products_price_positive"),
    )


class CategoryTable(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    name_en = Column(String(100), nullable=False)
    slug = Column(String(100), nullable=False, unique=True, index=True)
    description = Column(Text)
    description_en = Column(Text)
    color = Column(String(20), default="#6366f1")
    icon = Column(String(50))
    parent_id = Column(Integer, ForeignKey("categories.id", ondelete="SET NULL"), index=True)
    sort_order = Column(Integer, default=0)
    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class OrderTable(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    order_number = Column(String(20), nullable=False, unique=True, index=True)

    # Customer, address and lines as they were at checkout
    customer = Column(JSONB, nullable=False)
    shipping_address = Column(JSONB, nullable=False)
    items = Column(JSONB, nullable=False)
    customer_email = Column(String(255), index=True)

    # Amounts (KWD)
    subtotal = Column(DECIMAL(10, 3), nullable=False)
    shipping_cost = Column(DECIMAL(10, 3), default=0)
    discount = Column(DECIMAL(10, 3), default=0)
    total = Column(DECIMAL(10, 3), nullable=False)

    status = Column(String(20), default="pending", index=True)
    payment_method = Column(String(20), default="knet")
    payment_status = Column(String(20), default="pending", index=True)
    promo_code = Column(String(50), index=True)
    promo_discount = Column(DECIMAL(10, 3), default=0)
    is_digital_only = Column(Boolean, default=False)
    notes = Column(Text)

    delivered_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class MessageTable(Base):
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, index=True)
    message_number = Column(String(20), nullable=False, unique=True, index=True)
    name = Column(String(50), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(20))
    subject = Column(String(100), nullable=False)
    message = Column(Text, nullable=False)
    category = Column(String(20), default="general", index=True)
    priority = Column(String(10), default="medium", index=True)
    status = Column(String(20), default="unread", index=True)
    is_read = Column(Boolean, default=False)
    read_at = Column(DateTime(timezone=True))
    replied_at = Column(DateTime(timezone=True))
    resolved_at = Column(DateTime(timezone=True))
    admin_notes = Column(Text)
    reply = Column(Text)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class DiscountCodeTable(Base):
    __tablename__ = "discount_codes"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(50), nullable=False, unique=True, index=True)
    type = Column(String(20), nullable=False)
    value = Column(DECIMAL(10, 3), nullable=False)
    usage_limit = Column(Integer, nullable=False, default=1)
    used_count = Column(Integer, nullable=False, default=0)
    one_user_only = Column(Boolean, default=False)
    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        CheckConstraint("value > 0", name="ck_discount_value_positive"),
        CheckConstraint("used_count <= usage_limit", name="ck_discount_usage"),
    )


class UserTable(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(100))
    role = Column(String(20), default="user")
    is_active = Column(Boolean, default=True)
    last_login = Column(DateTime(timezone=True))

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
