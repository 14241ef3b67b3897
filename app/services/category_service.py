"""
Сервис категорий: выборки, создание, обновление, удаление и дерево.
"""

import logging
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.exceptions import AppException, ErrorType, NotFound, ValidationFailed
from app.db.models import Category, is_valid_object_id
from app.schemas.category import CategoryCreate, CategoryOut, CategoryUpdate
from app.services.category_tree import build_category_tree
from app.services.media_service import MediaError, MediaGateway, UploadedImage
from app.services.slugs import make_slug

logger = logging.getLogger(__name__)

CATEGORY_FOLDER = "categories"


def serialize_category(category: Category) -> dict:
    return CategoryOut.model_validate(category).to_json()


class CategoryService:
    """
    Операции над категориями.

    Args:
        db: Сессия базы данных
        media: Шлюз к медиа-хранилищу
    """

    def __init__(self, db: Session, media: MediaGateway):
        self.db = db
        self.media = media

    # ---------------------------- чтение ----------------------------

    def list(self, is_active: Optional[bool] = None) -> List[Category]:
        stmt = select(Category).order_by(Category.name)
        if is_active is not None:
            stmt = stmt.where(Category.is_active == is_active)
        return list(self.db.scalars(stmt).all())

    def tree(self) -> List[dict]:
        """Дерево активных категорий, отсортированных по имени."""
        active = [serialize_category(c) for c in self.list(is_active=True)]
        return build_category_tree(active)

    def get(self, category_id: str) -> Category:
        if not is_valid_object_id(category_id):
            raise ValidationFailed("Invalid category ID format")
        category = self.db.get(Category, category_id)
        if not category:
            raise NotFound("Category not found")
        return category

    def get_by_slug(self, slug: str) -> Category:
        category = self.db.scalar(select(Category).where(Category.slug == slug))
        if not category:
            raise NotFound("Category not found")
        return category

    # ---------------------------- запись ----------------------------

    def create(self, data: CategoryCreate, image: Optional[UploadedImage] = None) -> Category:
        """
        Создать категорию.

        Raises:
            ValidationFailed: Пустое или занятое имя, неверный родитель
            AppException: Не удалось загрузить изображение
        """
        name = (data.name or "").strip()
        if not name:
            raise ValidationFailed("Category name is required")
        slug = make_slug(name)
        if self._name_taken(name) or self._slug_taken(slug):
            raise ValidationFailed("Category with this name already exists")

        parent_id = self._resolve_parent(data.parent_id)

        category = Category(
            name=name,
            slug=slug,
            description=data.description or "",
            parent_id=parent_id,
            is_active=data.is_active,
        )

        if image is not None:
            self._attach_image(category, image, alt_text=name)

        self.db.add(category)
        self.db.commit()
        self.db.refresh(category)
        logger.info("Category created: %s (%s)", category.slug, category.id)
        return category

    def update(
        self,
        category_id: str,
        data: CategoryUpdate,
        image: Optional[UploadedImage] = None,
    ) -> Category:
        """
        Частично обновить категорию.

        Slug пересчитывается только при смене имени. Новое изображение
        заменяет старое, remove_image удаляет текущее.
        """
        category = self.get(category_id)
        fields = data.model_fields_set
        if image is not None:
            self.media.validate(image)

        if "name" in fields and data.name is not None:
            name = data.name.strip()
            if not name:
                raise ValidationFailed("Category name is required")
            if name != category.name:
                slug = make_slug(name)
                if self._name_taken(name, exclude_id=category.id) or self._slug_taken(
                    slug, exclude_id=category.id
                ):
                    raise ValidationFailed("Category with this name already exists")
                category.name = name
                category.slug = slug

        if "description" in fields and data.description is not None:
            category.description = data.description
        if "is_active" in fields and data.is_active is not None:
            category.is_active = data.is_active

        if "parent_id" in fields:
            parent_id = self._resolve_parent(data.parent_id)
            if parent_id == category.id:
                raise ValidationFailed("Category cannot be its own parent")
            category.parent_id = parent_id

        if image is not None:
            self.media.delete(category.image_public_id)
            self._attach_image(category, image, alt_text=category.name)
        elif data.remove_image:
            self.media.delete(category.image_public_id)
            category.image_url = None
            category.image_public_id = None
            category.image_alt_text = None

        self.db.commit()
        self.db.refresh(category)
        logger.info("Category updated: %s (%s)", category.slug, category.id)
        return category

    def delete(self, category_id: str) -> dict:
        """
        Удалить категорию без подкатегорий.

        Товары категории остаются без категории.
        """
        category = self.get(category_id)

        child_count = self.db.scalar(
            select(func.count()).select_from(Category).where(Category.parent_id == category.id)
        )
        if child_count:
            raise ValidationFailed(
                "Cannot delete category that has subcategories. "
                "Please delete subcategories first."
            )

        self.media.delete(category.image_public_id)

        result = {"id": category.id, "name": category.name}
        self.db.delete(category)
        self.db.commit()
        logger.info("Category deleted: %s", result["id"])
        return result

    # ---------------------------- вспомогательное ----------------------------

    def _name_taken(self, name: str, exclude_id: Optional[str] = None) -> bool:
        stmt = select(Category.id).where(Category.name == name)
        if exclude_id:
            stmt = stmt.where(Category.id != exclude_id)
        return self.db.scalar(stmt.limit(1)) is not None

    def _slug_taken(self, slug: str, exclude_id: Optional[str] = None) -> bool:
        """Имена, различающиеся только регистром или пунктуацией, дают один slug."""
        stmt = select(Category.id).where(Category.slug == slug)
        if exclude_id:
            stmt = stmt.where(Category.id != exclude_id)
        return self.db.scalar(stmt.limit(1)) is not None

    def _resolve_parent(self, parent_id: Optional[str]) -> Optional[str]:
        """Пустая ссылка означает корневую категорию, иначе родитель должен существовать."""
        if parent_id is None or not parent_id.strip():
            return None
        parent_id = parent_id.strip()
        if not is_valid_object_id(parent_id):
            raise ValidationFailed("Invalid parent category ID format")
        if self.db.get(Category, parent_id) is None:
            raise ValidationFailed("Parent category not found")
        return parent_id

    def _attach_image(self, category: Category, image: UploadedImage, alt_text: str) -> None:
        self.media.validate(image)
        try:
            uploaded = self.media.upload(image, CATEGORY_FOLDER)
        except MediaError as e:
            logger.error("Category image upload failed: %s", e)
            raise AppException(ErrorType.UPSTREAM, "Image upload failed") from e
        category.image_url = uploaded.url
        category.image_public_id = uploaded.public_id
        category.image_alt_text = alt_text
