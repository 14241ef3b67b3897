"""
Административные endpoints избранного.

Просмотр всех записей, статистика и удаление записей.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_wishlist_service, parse_int
from app.schemas.common import envelope
from app.schemas.wishlist import WishlistBulkDelete
from app.services.wishlist_service import WishlistService

router = APIRouter()


@router.get("", response_model=dict)
def list_wishlists(
    page: Optional[str] = Query(None, description="Номер страницы"),
    limit: Optional[str] = Query(None, description="Размер страницы"),
    user_id: Optional[str] = Query(None, alias="userId", description="Фильтр по пользователю"),
    product_id: Optional[str] = Query(None, alias="productId", description="Фильтр по товару"),
    service: WishlistService = Depends(get_wishlist_service),
):
    """
    Все записи избранного с пагинацией.

    Returns:
        dict: {success, data: {items, total, totalPages, page, limit}}
    """
    items = service.list_all(
        parse_int(page, default=1), parse_int(limit, default=20), user_id, product_id
    )
    return envelope(data=items)


@router.get("/stats", response_model=dict)
def wishlist_stats(service: WishlistService = Depends(get_wishlist_service)):
    """Сводка: число записей, уникальных пользователей и товаров, топ-5 товаров."""
    return envelope(data=service.stats().to_json())


@router.delete("/bulk-delete", response_model=dict)
def bulk_delete_wishlists(
    payload: WishlistBulkDelete,
    service: WishlistService = Depends(get_wishlist_service),
):
    deleted = service.bulk_delete(payload.ids)
    return envelope(
        data={"deletedCount": deleted},
        message=f"{deleted} wishlist item(s) deleted successfully",
    )


@router.delete("/{item_id}", response_model=dict)
def delete_wishlist(item_id: str, service: WishlistService = Depends(get_wishlist_service)):
    service.delete(item_id)
    return envelope(message="Wishlist item deleted successfully")
