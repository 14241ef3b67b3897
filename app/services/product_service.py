"""
Сервис товаров.

Содержит построение фильтров списка, CRUD операции и оркестрацию
загрузки изображений во внешнее хранилище с fallback на data URI.
"""

import logging
from typing import Iterable, List, Optional

from sqlalchemy import and_, asc, delete, desc, func, or_, select
from sqlalchemy.orm import Session

from app.core.exceptions import NotFound, ValidationFailed
from app.db.models import (
    CartItem,
    Category,
    Product,
    ProductImage,
    ProductTag,
    WishlistItem,
    is_valid_object_id,
)
from app.schemas.pagination import PageMeta, normalize_limit, normalize_page
from app.schemas.product import (
    ProductCreate,
    ProductFilters,
    ProductImageIn,
    ProductImageOut,
    ProductOut,
    ProductUpdate,
)
from app.services.media_service import MediaError, MediaGateway, UploadedImage
from app.services.slugs import make_slug

logger = logging.getLogger(__name__)

PRODUCT_FOLDER = "products"

# Поля, по которым разрешена сортировка (camelCase и snake_case)
SORT_COLUMNS = {
    "createdAt": Product.created_at,
    "created_at": Product.created_at,
    "updatedAt": Product.updated_at,
    "updated_at": Product.updated_at,
    "name": Product.name,
    "price": Product.price,
    "stock": Product.stock,
    "sku": Product.sku,
}


def serialize_product(product: Product) -> dict:
    return ProductOut.model_validate(product).to_json()


def normalize_tags(tags: Optional[Iterable[str]]) -> List[str]:
    """Теги без пустых значений и повторов, в порядке первого появления."""
    result: List[str] = []
    for tag in tags or []:
        tag = str(tag).strip()
        if tag and tag not in result:
            result.append(tag)
    return result


def ensure_single_primary(images: List[ProductImage]) -> None:
    """
    Оставить ровно одно главное изображение.

    Если отмечено несколько - главным остается первое отмеченное,
    если ни одного - первое в списке. Порядок перенумеровывается с нуля.
    """
    primary_seen = False
    for index, image in enumerate(images):
        image.sort_order = index
        if image.is_primary and not primary_seen:
            primary_seen = True
        else:
            image.is_primary = False
    if images and not primary_seen:
        images[0].is_primary = True


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class ProductService:
    """
    Операции над товарами.

    Args:
        db: Сессия базы данных
        media: Шлюз к медиа-хранилищу
    """

    def __init__(self, db: Session, media: MediaGateway):
        self.db = db
        self.media = media

    # ---------------------------- чтение ----------------------------

    def list(self, filters: ProductFilters) -> dict:
        """
        Получить страницу товаров с фильтрацией и сортировкой.

        Returns:
            dict: products, total, total_pages, page, limit
        """
        page = normalize_page(filters.page)
        limit = normalize_limit(filters.limit)

        conditions = self._build_conditions(filters)
        where_clause = and_(*conditions) if conditions else None

        # Подсчет общего количества (отдельно, без ORDER/LIMIT)
        count_stmt = select(func.count()).select_from(Product)
        if where_clause is not None:
            count_stmt = count_stmt.where(where_clause)
        total = self.db.scalar(count_stmt) or 0

        sort_column = SORT_COLUMNS.get(filters.sort_by, Product.created_at)
        direction = asc if filters.sort_order == "asc" else desc

        meta = PageMeta.create(page=page, limit=limit, total=total)
        stmt = select(Product)
        if where_clause is not None:
            stmt = stmt.where(where_clause)
        stmt = stmt.order_by(direction(sort_column), direction(Product.id))
        products = self.db.scalars(stmt.offset(meta.offset).limit(limit)).all()

        return {
            "products": list(products),
            "total": meta.total,
            "total_pages": meta.total_pages,
            "page": meta.page,
            "limit": meta.limit,
        }

    def _build_conditions(self, filters: ProductFilters) -> list:
        conditions = []

        if filters.search:
            pattern = f"%{_escape_like(filters.search)}%"
            conditions.append(
                or_(
                    Product.name.ilike(pattern, escape="\\"),
                    Product.sku.ilike(pattern, escape="\\"),
                    Product.description.ilike(pattern, escape="\\"),
                    Product.short_description.ilike(pattern, escape="\\"),
                    Product.tag_rows.any(ProductTag.value.ilike(pattern, escape="\\")),
                )
            )

        # Некорректный ID категории или неизвестный slug не ограничивают выборку
        category_id = None
        if filters.category_id and is_valid_object_id(filters.category_id):
            category_id = filters.category_id
        if filters.category_slug:
            slug_category_id = self.db.scalar(
                select(Category.id).where(Category.slug == filters.category_slug)
            )
            if slug_category_id:
                category_id = slug_category_id
        if category_id:
            conditions.append(Product.category_id == category_id)

        if filters.is_active is not None:
            conditions.append(Product.is_active == filters.is_active)
        if filters.is_featured is not None:
            conditions.append(Product.is_featured == filters.is_featured)
        if filters.is_best_seller is not None:
            conditions.append(Product.is_best_seller == filters.is_best_seller)

        if filters.min_price is not None:
            conditions.append(Product.price >= filters.min_price)
        if filters.max_price is not None:
            conditions.append(Product.price <= filters.max_price)

        return conditions

    def get(self, product_id: str) -> Product:
        if not is_valid_object_id(product_id):
            raise ValidationFailed("Invalid product ID format")
        product = self.db.get(Product, product_id)
        if not product:
            raise NotFound("Product not found")
        return product

    def get_by_slug(self, slug: str) -> Product:
        product = self.db.scalar(select(Product).where(Product.slug == slug))
        if not product:
            raise NotFound("Product not found")
        return product

    # ---------------------------- запись ----------------------------

    def create(self, data: ProductCreate, files: Optional[List[UploadedImage]] = None) -> Product:
        """
        Создать товар.

        Заранее загруженные изображения (data.images) идут первыми,
        за ними новые файлы. Ровно одно изображение становится главным.

        Raises:
            ValidationFailed: Нет обязательных полей, дубликат, неверная категория
        """
        files = files or []
        name = (data.name or "").strip()
        sku = (data.sku or "").strip()
        if not name or data.price is None or not sku:
            raise ValidationFailed("Name, price, and SKU are required fields")
        self._check_numbers(data.price, data.compare_at_price, data.stock)

        slug = self._slug_for(name)
        if self._slug_taken(slug):
            raise ValidationFailed("Product with this name already exists")
        if self._sku_taken(sku):
            raise ValidationFailed("Product with this SKU already exists")

        category_id = self._resolve_category(data.category_id)
        for file in files:
            self.media.validate(file)

        images = [self._image_from_input(img) for img in self._ordered_inputs(data.images)]
        images.extend(self.store_images(files))
        ensure_single_primary(images)

        product = Product(
            name=name,
            slug=slug,
            price=data.price,
            compare_at_price=data.compare_at_price,
            sku=sku,
            description=data.description or "",
            short_description=data.short_description or "",
            stock=data.stock or 0,
            tags=normalize_tags(data.tags),
            category_id=category_id,
            is_active=data.is_active,
            is_featured=data.is_featured,
            is_best_seller=data.is_best_seller,
            images=images,
        )
        self.db.add(product)
        self.db.commit()
        self.db.refresh(product)
        logger.info("Product created: %s (%s), %d image(s)", product.slug, product.id, len(images))
        return product

    def update(
        self,
        product_id: str,
        data: ProductUpdate,
        files: Optional[List[UploadedImage]] = None,
    ) -> Product:
        """
        Частично обновить товар.

        Новые файлы заменяют весь список изображений: старые объекты
        удаляются из хранилища best-effort. Список data.images без файлов
        тоже заменяет изображения целиком.
        """
        files = files or []
        product = self.get(product_id)
        fields = data.model_fields_set

        if "name" in fields and data.name is not None:
            name = data.name.strip()
            if not name:
                raise ValidationFailed("Product name cannot be empty")
            if name != product.name:
                slug = self._slug_for(name)
                if self._slug_taken(slug, exclude_id=product.id):
                    raise ValidationFailed("Product with this name already exists")
                product.name = name
                product.slug = slug

        if "sku" in fields and data.sku is not None:
            sku = data.sku.strip()
            if not sku:
                raise ValidationFailed("SKU cannot be empty")
            if sku != product.sku and self._sku_taken(sku, exclude_id=product.id):
                raise ValidationFailed("Product with this SKU already exists")
            product.sku = sku

        self._check_numbers(data.price, data.compare_at_price, data.stock)
        if "price" in fields and data.price is not None:
            product.price = data.price
        if "compare_at_price" in fields:
            product.compare_at_price = data.compare_at_price
        if "stock" in fields and data.stock is not None:
            product.stock = data.stock

        for field in ("description", "short_description", "is_active", "is_featured", "is_best_seller"):
            value = getattr(data, field)
            if field in fields and value is not None:
                setattr(product, field, value)
        if "tags" in fields and data.tags is not None:
            product.tags = normalize_tags(data.tags)

        if "category_id" in fields:
            product.category_id = self._resolve_category(data.category_id)

        if files:
            for file in files:
                self.media.validate(file)
            for image in product.images:
                self.media.delete(image.public_id)
            product.images = self.store_images(files)
        elif "images" in fields and data.images is not None:
            new_images = [self._image_from_input(img) for img in self._ordered_inputs(data.images)]
            kept = {img.public_id for img in new_images if img.public_id}
            for image in product.images:
                if image.public_id not in kept:
                    self.media.delete(image.public_id)
            product.images = new_images

        ensure_single_primary(product.images)
        self.db.commit()
        self.db.refresh(product)
        logger.info("Product updated: %s (%s)", product.slug, product.id)
        return product

    def delete(self, product_id: str) -> dict:
        """Удалить товар вместе с его изображениями, избранным и позициями корзин."""
        product = self.get(product_id)

        for image in product.images:
            self.media.delete(image.public_id)

        result = {"id": product.id, "name": product.name}
        self.db.execute(delete(WishlistItem).where(WishlistItem.product_id == product.id))
        self.db.execute(delete(CartItem).where(CartItem.product_id == product.id))
        self.db.delete(product)
        self.db.commit()
        logger.info("Product deleted: %s", result["id"])
        return result

    def upload_images(self, files: List[UploadedImage]) -> List[dict]:
        """
        Загрузить файлы без привязки к товару.

        Возвращает объекты изображений, которые клиент затем
        передает при создании или обновлении товара.
        """
        if not files:
            raise ValidationFailed("No files uploaded")
        for file in files:
            self.media.validate(file)
        images = self.store_images(files)
        return [ProductImageOut.model_validate(img).to_json() for img in images]

    # ---------------------------- изображения ----------------------------

    def store_images(self, files: List[UploadedImage]) -> List[ProductImage]:
        """
        Загрузить файлы по одному в хранилище.

        Если хранилище не настроено или загрузка не удалась,
        изображение встраивается в запись как base64 data URI.
        """
        images = []
        for index, file in enumerate(files):
            image = None
            if self.media.configured:
                try:
                    uploaded = self.media.upload(file, PRODUCT_FOLDER)
                    image = ProductImage(
                        url=uploaded.url,
                        public_id=uploaded.public_id,
                        format=uploaded.format,
                        width=uploaded.width,
                        height=uploaded.height,
                    )
                except MediaError as e:
                    logger.warning(
                        "Upload of %s failed, falling back to base64: %s", file.filename, e
                    )
            if image is None:
                image = ProductImage(
                    url=self.media.inline(file),
                    public_id=self.media.inline_key(index),
                )
            image.alt_text = file.filename
            image.is_primary = index == 0
            image.sort_order = index
            images.append(image)
        return images

    @staticmethod
    def _ordered_inputs(images: List[ProductImageIn]) -> List[ProductImageIn]:
        indexed = list(enumerate(images or []))
        indexed.sort(key=lambda pair: (pair[1].order if pair[1].order is not None else pair[0], pair[0]))
        return [img for _, img in indexed]

    @staticmethod
    def _image_from_input(image: ProductImageIn) -> ProductImage:
        return ProductImage(
            url=image.url,
            public_id=image.public_id,
            alt_text=image.alt_text,
            is_primary=image.is_primary,
            format=image.format,
            width=image.width,
            height=image.height,
        )

    # ---------------------------- вспомогательное ----------------------------

    @staticmethod
    def _slug_for(name: str) -> str:
        slug = make_slug(name)
        if not slug:
            raise ValidationFailed("Product name must contain letters or digits")
        return slug

    @staticmethod
    def _check_numbers(price: Optional[float], compare_at_price: Optional[float], stock: Optional[int]) -> None:
        if price is not None and price < 0:
            raise ValidationFailed("Price must be a non-negative number")
        if compare_at_price is not None and compare_at_price < 0:
            raise ValidationFailed("Compare-at price must be a non-negative number")
        if stock is not None and stock < 0:
            raise ValidationFailed("Stock cannot be negative")

    def _slug_taken(self, slug: str, exclude_id: Optional[str] = None) -> bool:
        stmt = select(Product.id).where(Product.slug == slug)
        if exclude_id:
            stmt = stmt.where(Product.id != exclude_id)
        return self.db.scalar(stmt.limit(1)) is not None

    def _sku_taken(self, sku: str, exclude_id: Optional[str] = None) -> bool:
        stmt = select(Product.id).where(Product.sku == sku)
        if exclude_id:
            stmt = stmt.where(Product.id != exclude_id)
        return self.db.scalar(stmt.limit(1)) is not None

    def _resolve_category(self, category_id: Optional[str]) -> Optional[str]:
        """Пустое значение снимает категорию, иначе она должна существовать."""
        if category_id is None or not category_id.strip():
            return None
        category_id = category_id.strip()
        if not is_valid_object_id(category_id):
            raise ValidationFailed("Invalid category ID format")
        if self.db.get(Category, category_id) is None:
            raise ValidationFailed("Category not found")
        return category_id
