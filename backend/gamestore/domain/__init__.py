"""
Domain Layer - Business Entities

Pydantic models for the store entities, shared by repositories,
services and routers.
"""
from gamestore.domain.product import Product, ProductCreate, ProductUpdate
from gamestore.domain.category import Category, CategoryCreate, CategoryUpdate
from gamestore.domain.order import Order, OrderItem, OrderCustomer, ShippingAddress, CheckoutRequest
from gamestore.domain.message import Message, MessageCreate
from gamestore.domain.discount import DiscountCode, DiscountCodeCreate, DiscountCodeUpdate
from gamestore.domain.currency import Currency
from gamestore.domain.cart import CartQuote, CartQuoteRequest
from gamestore.domain.description import (
    DescriptionRequest, QuickDescriptionRequest, BatchProduct, BatchDescriptionRequest, ArabicValidationRequest,
)

__all__ = [
    'Product', 'ProductCreate', 'ProductUpdate',
    'Category', 'CategoryCreate', 'CategoryUpdate',
    'Order', 'OrderItem', 'OrderCustomer', 'ShippingAddress', 'CheckoutRequest',
    'Message', 'MessageCreate',
    'DiscountCode', 'DiscountCodeCreate', 'DiscountCodeUpdate',
    'Currency',
    'CartQuote', 'CartQuoteRequest',
    'DescriptionRequest', 'QuickDescriptionRequest', 'BatchProduct', 'BatchDescriptionRequest',
    'ArabicValidationRequest',
]
