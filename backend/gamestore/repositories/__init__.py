"""
Repository Layer - Data Access

This layer handles all database queries and returns domain models.
Repositories abstract away SQL details from business logic.
"""
from gamestore.repositories.product_repository import ProductRepository
from gamestore.repositories.category_repository import CategoryRepository
from gamestore.repositories.order_repository import OrderRepository
from gamestore.repositories.message_repository import MessageRepository
from gamestore.repositories.discount_code_repository import DiscountCodeRepository
from gamestore.repositories.user_repository import UserRepository

__all__ = [
    'ProductRepository',
    'CategoryRepository',
    'OrderRepository',
    'MessageRepository',
    'DiscountCodeRepository',
    'UserRepository',
]
