"""
Сервис избранного: пользовательские операции и админская статистика.
"""

import logging
from typing import List, Optional

from sqlalchemy import delete, desc, func, select
from sqlalchemy.orm import Session

from app.core.exceptions import NotFound, ValidationFailed
from app.db.models import Product, WishlistItem, is_valid_object_id
from app.schemas.pagination import PageMeta, normalize_limit, normalize_page
from app.schemas.wishlist import WishlistItemOut, WishlistStats

logger = logging.getLogger(__name__)

TOP_PRODUCTS_LIMIT = 5


def serialize_wishlist_item(item: WishlistItem) -> dict:
    return WishlistItemOut.model_validate(item).to_json()


class WishlistService:
    def __init__(self, db: Session):
        self.db = db

    # ---------------------------- пользователь ----------------------------

    def items_for(self, user_id: str) -> List[WishlistItem]:
        stmt = (
            select(WishlistItem)
            .where(WishlistItem.user_id == user_id)
            .order_by(desc(WishlistItem.created_at), desc(WishlistItem.id))
        )
        return list(self.db.scalars(stmt).all())

    def add(self, user_id: str, product_id: Optional[str]) -> tuple[WishlistItem, bool]:
        """
        Добавить товар в избранное.

        Returns:
            tuple[WishlistItem, bool]: Запись и флаг, была ли она создана сейчас
        """
        if not product_id or not is_valid_object_id(product_id):
            raise ValidationFailed("Valid product ID is required")
        if self.db.get(Product, product_id) is None:
            raise NotFound("Product not found")

        existing = self._find(user_id, product_id)
        if existing:
            return existing, False

        item = WishlistItem(user_id=user_id, product_id=product_id)
        self.db.add(item)
        self.db.commit()
        self.db.refresh(item)
        logger.info("Wishlist item added: user=%s product=%s", user_id, product_id)
        return item, True

    def remove(self, user_id: str, product_id: str) -> None:
        if not is_valid_object_id(product_id):
            raise ValidationFailed("Valid product ID is required")
        item = self._find(user_id, product_id)
        if not item:
            raise NotFound("Item not found in wishlist")
        self.db.delete(item)
        self.db.commit()

    def _find(self, user_id: str, product_id: str) -> Optional[WishlistItem]:
        return self.db.scalar(
            select(WishlistItem).where(
                WishlistItem.user_id == user_id, WishlistItem.product_id == product_id
            )
        )

    # ---------------------------- администрирование ----------------------------

    def list_all(
        self,
        page: int = 1,
        limit: int = 20,
        user_id: Optional[str] = None,
        product_id: Optional[str] = None,
    ) -> dict:
        """Все записи избранного, новые первыми, с фильтрами по пользователю и товару."""
        page = normalize_page(page)
        limit = normalize_limit(limit, default=20)

        conditions = []
        if user_id:
            conditions.append(WishlistItem.user_id == user_id)
        if product_id:
            conditions.append(WishlistItem.product_id == product_id)

        total = self.db.scalar(
            select(func.count()).select_from(WishlistItem).where(*conditions)
        ) or 0
        meta = PageMeta.create(page=page, limit=limit, total=total)

        items = self.db.scalars(
            select(WishlistItem)
            .where(*conditions)
            .order_by(desc(WishlistItem.created_at), desc(WishlistItem.id))
            .offset(meta.offset)
            .limit(limit)
        ).all()

        return {
            "items": [serialize_wishlist_item(item) for item in items],
            "total": meta.total,
            "totalPages": meta.total_pages,
            "page": meta.page,
            "limit": meta.limit,
        }

    def stats(self) -> WishlistStats:
        total_items = self.db.scalar(select(func.count()).select_from(WishlistItem)) or 0
        unique_users = self.db.scalar(
            select(func.count(func.distinct(WishlistItem.user_id)))
        ) or 0
        unique_products = self.db.scalar(
            select(func.count(func.distinct(WishlistItem.product_id)))
        ) or 0

        count_col = func.count(WishlistItem.id).label("count")
        rows = self.db.execute(
            select(WishlistItem.product_id, Product.name, count_col)
            .join(Product, Product.id == WishlistItem.product_id, isouter=True)
            .group_by(WishlistItem.product_id, Product.name)
            .order_by(desc(count_col), WishlistItem.product_id)
            .limit(TOP_PRODUCTS_LIMIT)
        ).all()

        return WishlistStats(
            total_items=total_items,
            unique_users=unique_users,
            unique_products=unique_products,
            top_products=[
                {"product_id": row.product_id, "name": row.name, "count": row.count}
                for row in rows
            ],
        )

    def delete(self, item_id: str) -> None:
        if not is_valid_object_id(item_id):
            raise ValidationFailed("Invalid wishlist item ID format")
        item = self.db.get(WishlistItem, item_id)
        if not item:
            raise NotFound("Wishlist item not found")
        self.db.delete(item)
        self.db.commit()
        logger.info("Wishlist item deleted by admin: %s", item_id)

    def bulk_delete(self, ids: List[str]) -> int:
        if not ids:
            raise ValidationFailed("No wishlist item IDs provided")
        invalid = [item_id for item_id in ids if not is_valid_object_id(item_id)]
        if invalid:
            raise ValidationFailed(f"Invalid wishlist item ID format: {', '.join(invalid)}")

        result = self.db.execute(delete(WishlistItem).where(WishlistItem.id.in_(ids)))
        self.db.commit()
        logger.info("Wishlist bulk delete: %d of %d item(s)", result.rowcount, len(ids))
        return result.rowcount
