"""
Модель категории товаров.
"""

from typing import List, Optional

from sqlalchemy import Boolean, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import OBJECT_ID_LENGTH, Base, ObjectIdMixin, TimestampMixin


class Category(ObjectIdMixin, TimestampMixin, Base):
    """
    Модель категории товаров.

    Attributes:
        id: Уникальный идентификатор категории
        name: Название категории (уникальное)
        slug: URL-friendly название, выводится из name
        description: Описание категории
        image_url: URL изображения во внешнем медиа-хранилище
        image_public_id: Ключ изображения для удаления из хранилища
        image_alt_text: Альтернативный текст изображения
        parent_id: ID родительской категории (NULL для корневых)
        is_active: Флаг активности
        products: Связь с товарами в этой категории
    """

    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    slug: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    description: Mapped[str] = mapped_column(Text, default="")

    # Изображение хранится во внешнем хранилище, здесь только ссылка
    image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    image_public_id: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    image_alt_text: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    parent_id: Mapped[Optional[str]] = mapped_column(
        String(OBJECT_ID_LENGTH),
        ForeignKey("categories.id", ondelete="RESTRICT"),
        nullable=True,
        index=True,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    # Товары при удалении категории остаются без категории
    products: Mapped[List["Product"]] = relationship(
        back_populates="category"
    )

    @property
    def image(self) -> Optional[dict]:
        if not self.image_url:
            return None
        return {
            "url": self.image_url,
            "public_id": self.image_public_id,
            "alt_text": self.image_alt_text,
        }

    def __repr__(self) -> str:
        return f"<Category(id='{self.id}', slug='{self.slug}')>"
