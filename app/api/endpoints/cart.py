"""
API endpoints корзины текущего пользователя.
"""

from fastapi import APIRouter, Depends

from app.api.deps import get_cart_service, get_current_user_id
from app.schemas.cart import CartItemAdd, CartItemQuantity
from app.schemas.common import envelope
from app.services.cart_service import CartService, serialize_cart

router = APIRouter()


@router.get("", response_model=dict)
def get_cart(
    user_id: str = Depends(get_current_user_id),
    service: CartService = Depends(get_cart_service),
):
    """
    Получить корзину пользователя.

    Пустая корзина создается при первом обращении.
    """
    return envelope(data=serialize_cart(service.get_or_create(user_id)))


@router.post("", response_model=dict)
def add_to_cart(
    payload: CartItemAdd,
    user_id: str = Depends(get_current_user_id),
    service: CartService = Depends(get_cart_service),
):
    """
    Добавить товар в корзину.

    Raises:
        AppException: 400 при неверных данных или нехватке остатка, 404 если товара нет
    """
    cart = service.add_item(user_id, payload.product_id, payload.quantity)
    return envelope(data=serialize_cart(cart), message="Product added to cart")


@router.put("/{product_id}", response_model=dict)
def update_cart_item(
    product_id: str,
    payload: CartItemQuantity,
    user_id: str = Depends(get_current_user_id),
    service: CartService = Depends(get_cart_service),
):
    cart = service.update_item(user_id, product_id, payload.quantity)
    return envelope(data=serialize_cart(cart), message="Cart updated successfully")


@router.delete("/{product_id}", response_model=dict)
def remove_cart_item(
    product_id: str,
    user_id: str = Depends(get_current_user_id),
    service: CartService = Depends(get_cart_service),
):
    service.remove_item(user_id, product_id)
    return envelope(message="Item removed from cart")


@router.delete("", response_model=dict)
def clear_cart(
    user_id: str = Depends(get_current_user_id),
    service: CartService = Depends(get_cart_service),
):
    service.clear(user_id)
    return envelope(message="Cart cleared successfully")
