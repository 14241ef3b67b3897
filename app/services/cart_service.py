"""
Сервис корзины покупателя.
"""

import logging
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.exceptions import NotFound, ValidationFailed
from app.db.models import Cart, CartItem, Product, is_valid_object_id
from app.schemas.cart import CartOut

logger = logging.getLogger(__name__)


def _valid_quantity(quantity: Any) -> bool:
    return isinstance(quantity, int) and not isinstance(quantity, bool) and quantity >= 1


def serialize_cart(cart: Cart) -> dict:
    """Корзина для ответа; позиции без существующего товара пропускаются."""
    items = [item for item in cart.items if item.product is not None]
    return CartOut.model_validate(
        {
            "items": items,
            "count": len(items),
            "user_id": cart.user_id,
            "created_at": cart.created_at,
            "updated_at": cart.updated_at,
        }
    ).to_json()


class CartService:
    def __init__(self, db: Session):
        self.db = db

    def get_or_create(self, user_id: str) -> Cart:
        cart = self._find(user_id)
        if cart is None:
            cart = Cart(user_id=user_id, items=[])
            self.db.add(cart)
            self.db.commit()
            self.db.refresh(cart)
            logger.info("Cart created for user %s", user_id)
        return cart

    def add_item(self, user_id: str, product_id: Optional[str], quantity: Any = 1) -> Cart:
        """
        Добавить товар в корзину или увеличить количество существующей позиции.

        Raises:
            ValidationFailed: Неверный ID, количество, неактивный товар, нет остатка
            NotFound: Товар не найден
        """
        product = self._checked_product(product_id, quantity)
        if not product.is_active:
            raise ValidationFailed("Product is not available")

        cart = self.get_or_create(user_id)
        item = self._find_item(cart, product.id)
        if item:
            # Проверяется только запрошенное количество, как и для новой позиции
            item.quantity += quantity
        else:
            cart.items.append(CartItem(product_id=product.id, quantity=quantity))

        self.db.commit()
        self.db.refresh(cart)
        return cart

    def update_item(self, user_id: str, product_id: str, quantity: Any) -> Cart:
        self._checked_product(product_id, quantity)

        cart = self._find(user_id)
        if cart is None:
            raise NotFound("Cart not found")
        item = self._find_item(cart, product_id)
        if item is None:
            raise NotFound("Item not found in cart")

        item.quantity = quantity
        self.db.commit()
        self.db.refresh(cart)
        return cart

    def remove_item(self, user_id: str, product_id: str) -> None:
        if not product_id or not is_valid_object_id(product_id):
            raise ValidationFailed("Valid product ID is required")

        cart = self._find(user_id)
        if cart is None:
            raise NotFound("Cart not found")
        item = self._find_item(cart, product_id)
        if item is None:
            raise NotFound("Item not found in cart")

        cart.items.remove(item)
        self.db.commit()

    def clear(self, user_id: str) -> None:
        cart = self._find(user_id)
        if cart is None:
            raise NotFound("Cart not found")
        cart.items.clear()
        self.db.commit()
        logger.info("Cart cleared for user %s", user_id)

    # ---------------------------- вспомогательное ----------------------------

    def _find(self, user_id: str) -> Optional[Cart]:
        return self.db.scalar(select(Cart).where(Cart.user_id == user_id))

    @staticmethod
    def _find_item(cart: Cart, product_id: str) -> Optional[CartItem]:
        return next((item for item in cart.items if item.product_id == product_id), None)

    def _checked_product(self, product_id: Optional[str], quantity: Any) -> Product:
        if not product_id or not is_valid_object_id(product_id):
            raise ValidationFailed("Valid product ID is required")
        if not _valid_quantity(quantity):
            raise ValidationFailed("Quantity must be at least 1")

        product = self.db.get(Product, product_id)
        if product is None:
            raise NotFound("Product not found")
        if product.stock < quantity:
            raise ValidationFailed(f"Only {product.stock} items available in stock")
        return product
