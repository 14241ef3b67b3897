"""
Схемы товаров и их изображений.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from app.schemas.category import CategorySnapshot
from app.schemas.common import CamelModel


class ProductImageOut(CamelModel):
    """Схема изображения товара."""

    url: str
    public_id: Optional[str] = None
    alt_text: Optional[str] = None
    is_primary: bool = False
    order: int = 0
    format: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None


class ProductImageIn(CamelModel):
    """Изображение, загруженное заранее через /products/upload-images."""

    url: str = Field(..., min_length=1)
    public_id: Optional[str] = None
    alt_text: Optional[str] = None
    is_primary: bool = False
    order: Optional[int] = None
    format: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None


class ProductOut(CamelModel):
    """Схема для вывода товара с денормализованной категорией."""

    id: str
    name: str
    slug: str
    price: float
    compare_at_price: Optional[float] = None
    sku: str
    description: str = ""
    short_description: str = ""
    stock: int = 0
    tags: List[str] = []
    images: List[ProductImageOut] = []
    category_id: Optional[str] = None
    category: Optional[CategorySnapshot] = None
    is_active: bool = True
    is_featured: bool = False
    is_best_seller: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProductPage(CamelModel):
    """Страница результатов списка товаров."""

    products: List[ProductOut]
    total: int
    total_pages: int
    page: int
    limit: int


class ProductCreate(CamelModel):
    """
    Данные для создания товара.

    Обязательность name/price/sku проверяет сервис, чтобы вернуть
    понятное сообщение вместо ошибки схемы.
    """

    name: Optional[str] = None
    price: Optional[float] = None
    sku: Optional[str] = None
    compare_at_price: Optional[float] = None
    description: str = ""
    short_description: str = ""
    stock: int = 0
    tags: List[str] = []
    category_id: Optional[str] = None
    is_active: bool = True
    is_featured: bool = False
    is_best_seller: bool = False
    images: List[ProductImageIn] = []


class ProductUpdate(CamelModel):
    """Частичное обновление товара (учитываются только переданные поля)."""

    name: Optional[str] = None
    price: Optional[float] = None
    sku: Optional[str] = None
    compare_at_price: Optional[float] = None
    description: Optional[str] = None
    short_description: Optional[str] = None
    stock: Optional[int] = None
    tags: Optional[List[str]] = None
    category_id: Optional[str] = None
    is_active: Optional[bool] = None
    is_featured: Optional[bool] = None
    is_best_seller: Optional[bool] = None
    images: Optional[List[ProductImageIn]] = None


class ProductFilters(CamelModel):
    """Параметры списка товаров после разбора query-строки."""

    search: Optional[str] = None
    category_id: Optional[str] = None
    category_slug: Optional[str] = None
    is_active: Optional[bool] = None
    is_featured: Optional[bool] = None
    is_best_seller: Optional[bool] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    sort_by: str = "createdAt"
    sort_order: str = "desc"
    page: int = 1
    limit: int = 12
