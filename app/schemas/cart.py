"""
Схемы корзины.
"""

from datetime import datetime
from typing import Any, List, Optional

from app.schemas.category import CategorySnapshot
from app.schemas.common import CamelModel
from app.schemas.product import ProductImageOut


class CartProduct(CamelModel):
    id: str
    name: str
    slug: str
    sku: str
    price: float
    compare_at_price: Optional[float] = None
    images: List[ProductImageOut] = []
    category: Optional[CategorySnapshot] = None
    stock: int = 0
    is_active: bool = True


class CartItemOut(CamelModel):
    product: CartProduct
    quantity: int
    added_at: Optional[datetime] = None


class CartOut(CamelModel):
    items: List[CartItemOut]
    count: int
    user_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CartItemAdd(CamelModel):
    product_id: Optional[str] = None
    quantity: Any = 1


class CartItemQuantity(CamelModel):
    quantity: Any = None
