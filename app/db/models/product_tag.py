"""
Модель тега товара.
"""

from sqlalchemy import ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import OBJECT_ID_LENGTH, Base


class ProductTag(Base):
    """
    Тег товара, одна строка на значение.

    Поиск товаров по тегам идет по значениям этой таблицы.

    Attributes:
        id: Уникальный идентификатор записи
        product_id: ID товара
        value: Значение тега
        position: Порядок тега в списке товара
        product: Связь с товаром
    """

    __tablename__ = "product_tags"

    __table_args__ = (
        Index("ix_product_tags_product_id", "product_id"),
        Index("ix_product_tags_value", "value"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_id: Mapped[str] = mapped_column(
        String(OBJECT_ID_LENGTH),
        ForeignKey("products.id", ondelete="CASCADE")
    )
    value: Mapped[str] = mapped_column(String(255))
    position: Mapped[int] = mapped_column(Integer, default=0)

    product: Mapped["Product"] = relationship(back_populates="tag_rows")
