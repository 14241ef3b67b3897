"""
Модели базы данных.

Импортирует все модели для корректной работы SQLAlchemy.
"""

from .base import Base, is_valid_object_id, new_object_id
from .cart import Cart, CartItem
from .category import Category
from .product import Product
from .product_image import ProductImage
from .product_tag import ProductTag
from .wishlist import WishlistItem

__all__ = [
    "Base",
    "Category",
    "Product",
    "ProductImage",
    "ProductTag",
    "WishlistItem",
    "Cart",
    "CartItem",
    "is_valid_object_id",
    "new_object_id",
]
