"""
Модель товара.
"""

from typing import List, Optional

from sqlalchemy import Boolean, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import OBJECT_ID_LENGTH, Base, ObjectIdMixin, TimestampMixin
from .product_tag import ProductTag


class Product(ObjectIdMixin, TimestampMixin, Base):
    """
    Модель товара.

    Attributes:
        id: Уникальный идентификатор товара
        name: Название товара
        slug: URL-friendly название (уникальное)
        price: Цена
        compare_at_price: Старая цена для отображения скидки
        sku: Артикул (уникальный)
        description: Полное описание
        short_description: Короткое описание для карточки
        stock: Остаток на складе
        tags: Теги товара (список строк без повторов, хранятся в tag_rows)
        category_id: ID категории товара
        is_active: Товар доступен в витрине
        is_featured: Рекомендуемый товар
        is_best_seller: Хит продаж
        category: Связь с категорией
        images: Связь с изображениями товара
        tag_rows: Связь со строками тегов
    """

    __tablename__ = "products"

    name: Mapped[str] = mapped_column(String(255))
    slug: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    price: Mapped[float] = mapped_column(Float)
    compare_at_price: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    sku: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    description: Mapped[str] = mapped_column(Text, default="")
    short_description: Mapped[str] = mapped_column(Text, default="")
    stock: Mapped[int] = mapped_column(Integer, default=0)

    category_id: Mapped[Optional[str]] = mapped_column(
        String(OBJECT_ID_LENGTH),
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    is_featured: Mapped[bool] = mapped_column(Boolean, default=False)
    is_best_seller: Mapped[bool] = mapped_column(Boolean, default=False)

    # Связи с другими моделями
    category: Mapped[Optional["Category"]] = relationship(
        back_populates="products", lazy="selectin"
    )
    images: Mapped[List["ProductImage"]] = relationship(
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="ProductImage.sort_order",
        lazy="selectin",
    )
    tag_rows: Mapped[List["ProductTag"]] = relationship(
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="ProductTag.position",
        lazy="selectin",
    )

    @property
    def tags(self) -> List[str]:
        return [row.value for row in self.tag_rows]

    @tags.setter
    def tags(self, values: List[str]) -> None:
        self.tag_rows = [ProductTag(value=value, position=index) for index, value in enumerate(values)]

    def __repr__(self) -> str:
        return f"<Product(id='{self.id}', name='{self.name}')>"
