"""
Модель изображения товара.
"""

from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import OBJECT_ID_LENGTH, Base


class ProductImage(Base):
    """
    Ссылка на изображение товара во внешнем медиа-хранилище.

    Сами байты лежат в хранилище (или inline в url как data URI,
    если хранилище недоступно), здесь только ссылка и метаданные.

    Attributes:
        id: Уникальный идентификатор записи
        product_id: ID товара
        url: Публичный URL или data URI
        public_id: Ключ объекта в хранилище (для удаления)
        alt_text: Альтернативный текст для SEO
        is_primary: Флаг главного изображения
        sort_order: Порядок отображения
        format: Формат файла (jpeg/png/...)
        width: Ширина изображения в пикселях
        height: Высота изображения в пикселях
        product: Связь с товаром
    """

    __tablename__ = "product_images"

    __table_args__ = (
        Index("ix_product_images_product_id", "product_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_id: Mapped[str] = mapped_column(
        String(OBJECT_ID_LENGTH),
        ForeignKey("products.id", ondelete="CASCADE")
    )
    url: Mapped[str] = mapped_column(Text)
    public_id: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    alt_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_primary: Mapped[bool] = mapped_column(Boolean, default=False)
    sort_order: Mapped[int] = mapped_column(Integer, default=0)

    # Метаданные файла
    format: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)
    width: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    height: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # Связь с товаром
    product: Mapped["Product"] = relationship(back_populates="images")

    @property
    def order(self) -> int:
        return self.sort_order
