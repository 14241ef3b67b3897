"""
Модели корзины покупателя.
"""

from datetime import datetime
from typing import List

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import OBJECT_ID_LENGTH, Base, ObjectIdMixin, TimestampMixin


class Cart(ObjectIdMixin, TimestampMixin, Base):
    """
    Корзина пользователя (одна на пользователя).

    Attributes:
        id: Уникальный идентификатор корзины
        user_id: ID пользователя из внешнего слоя сессий
        items: Позиции корзины в порядке добавления
    """

    __tablename__ = "carts"

    user_id: Mapped[str] = mapped_column(String(64), unique=True, index=True)

    items: Mapped[List["CartItem"]] = relationship(
        back_populates="cart",
        cascade="all, delete-orphan",
        order_by="CartItem.id",
        lazy="selectin",
    )


class CartItem(Base):
    """Позиция корзины: товар и количество."""

    __tablename__ = "cart_items"

    __table_args__ = (
        UniqueConstraint("cart_id", "product_id", name="uq_cart_item_product"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    cart_id: Mapped[str] = mapped_column(
        String(OBJECT_ID_LENGTH), ForeignKey("carts.id", ondelete="CASCADE")
    )
    product_id: Mapped[str] = mapped_column(
        String(OBJECT_ID_LENGTH),
        ForeignKey("products.id", ondelete="CASCADE"),
        index=True,
    )
    quantity: Mapped[int] = mapped_column(Integer, default=1)
    added_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    cart: Mapped["Cart"] = relationship(back_populates="items")
    product: Mapped["Product"] = relationship(lazy="selectin")
