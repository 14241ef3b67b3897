"""
Схемы категорий.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from app.schemas.common import CamelModel


class CategoryImageOut(CamelModel):
    url: str
    public_id: Optional[str] = None
    alt_text: Optional[str] = None


class CategoryOut(CamelModel):
    """Схема для вывода категории."""

    id: str
    name: str
    slug: str
    description: str = ""
    image: Optional[CategoryImageOut] = None
    parent_id: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CategorySnapshot(CamelModel):
    """Краткая информация о категории, встраиваемая в товар."""

    id: str
    name: str
    slug: str


class CategoryCreate(CamelModel):
    """Схема для создания категории."""

    name: Optional[str] = Field(None, description="Название категории")
    description: Optional[str] = Field(None, description="Описание")
    parent_id: Optional[str] = Field(None, description="ID родительской категории")
    is_active: bool = Field(True, description="Активна ли категория")


class CategoryUpdate(CamelModel):
    """Схема для частичного обновления категории (учитываются только переданные поля)."""

    name: Optional[str] = None
    description: Optional[str] = None
    parent_id: Optional[str] = None
    is_active: Optional[bool] = None
    remove_image: bool = False
