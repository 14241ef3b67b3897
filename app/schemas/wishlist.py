"""
Схемы избранного.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from app.schemas.common import CamelModel
from app.schemas.product import ProductImageOut


class WishlistProduct(CamelModel):
    id: str
    name: str
    slug: str
    price: float
    stock: int = 0
    is_active: bool = True
    images: List[ProductImageOut] = []


class WishlistItemOut(CamelModel):
    id: str
    user_id: str
    product_id: str
    product: Optional[WishlistProduct] = None
    created_at: Optional[datetime] = None


class WishlistAdd(CamelModel):
    product_id: Optional[str] = None


class WishlistBulkDelete(CamelModel):
    ids: List[str] = Field(default_factory=list)


class TopWishlistedProduct(CamelModel):
    product_id: str
    name: Optional[str] = None
    count: int


class WishlistStats(CamelModel):
    total_items: int
    unique_users: int
    unique_products: int
    top_products: List[TopWishlistedProduct]
