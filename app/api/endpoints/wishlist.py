"""
API endpoints избранного текущего пользователя.
"""

from fastapi import APIRouter, Depends, Response, status

from app.api.deps import get_current_user_id, get_wishlist_service
from app.schemas.common import envelope
from app.schemas.wishlist import WishlistAdd
from app.services.wishlist_service import WishlistService, serialize_wishlist_item

router = APIRouter()


@router.get("", response_model=dict)
def get_wishlist(
    user_id: str = Depends(get_current_user_id),
    service: WishlistService = Depends(get_wishlist_service),
):
    """Избранное пользователя со снимками товаров, новые первыми."""
    items = [serialize_wishlist_item(item) for item in service.items_for(user_id)]
    return envelope(data=items, count=len(items))


@router.post("", response_model=dict, status_code=status.HTTP_201_CREATED)
def add_to_wishlist(
    payload: WishlistAdd,
    response: Response,
    user_id: str = Depends(get_current_user_id),
    service: WishlistService = Depends(get_wishlist_service),
):
    """
    Добавить товар в избранное.

    Повторное добавление не создает дубликат и отвечает 200
    с уже существующей записью.
    """
    item, created = service.add(user_id, payload.product_id)
    if not created:
        response.status_code = status.HTTP_200_OK
        return envelope(data=serialize_wishlist_item(item), message="Product already in wishlist")
    return envelope(data=serialize_wishlist_item(item), message="Product added to wishlist")


@router.delete("/{product_id}", response_model=dict)
def remove_from_wishlist(
    product_id: str,
    user_id: str = Depends(get_current_user_id),
    service: WishlistService = Depends(get_wishlist_service),
):
    service.remove(user_id, product_id)
    return envelope(message="Product removed from wishlist")
