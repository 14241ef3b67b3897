"""
API endpoints для работы с товарами.

Содержит CRUD операции для товаров с поддержкой фильтрации,
сортировки, пагинации и загрузки изображений.
"""

import json
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from pydantic import TypeAdapter, ValidationError
from starlette.datastructures import FormData

from app.api.deps import (
    get_form,
    get_json_body,
    get_product_service,
    parse_body,
    parse_bool,
    parse_float,
    parse_int,
    read_uploads,
)
from app.core.exceptions import ValidationFailed
from app.schemas.common import envelope
from app.schemas.product import (
    ProductCreate,
    ProductFilters,
    ProductImageIn,
    ProductPage,
    ProductUpdate,
)
from app.services.product_service import ProductService, serialize_product

router = APIRouter()

_images_adapter = TypeAdapter(List[ProductImageIn])


def _parse_tags(raw: Optional[str]) -> Optional[List[str]]:
    """Теги из формы: JSON-массив или строка через запятую."""
    if raw is None:
        return None
    raw = raw.strip()
    if raw.startswith("["):
        try:
            tags = json.loads(raw)
        except json.JSONDecodeError:
            raise ValidationFailed("Invalid tags format")
        if not isinstance(tags, list):
            raise ValidationFailed("Invalid tags format")
        return [str(tag) for tag in tags]
    return [tag for tag in raw.split(",")]


def _parse_images(raw: Optional[str]) -> Optional[List[ProductImageIn]]:
    """Заранее загруженные изображения из поля existingImages (JSON)."""
    if raw is None:
        return None
    try:
        return _images_adapter.validate_json(raw)
    except ValidationError:
        raise ValidationFailed("Invalid images format")


def _with_tag_list(body: dict) -> dict:
    """В JSON теги допускаются и строкой через запятую."""
    tags = body.get("tags")
    if isinstance(tags, str):
        return {**body, "tags": _parse_tags(tags)}
    return body


@router.get("", response_model=dict)
def list_products(
    search: Optional[str] = Query(None, description="Поиск по названию, SKU, описаниям и тегам"),
    category_id: Optional[str] = Query(None, alias="categoryId", description="Фильтр по ID категории"),
    category_slug: Optional[str] = Query(None, alias="categorySlug", description="Фильтр по slug категории"),
    is_active: Optional[str] = Query(None, alias="isActive"),
    is_featured: Optional[str] = Query(None, alias="isFeatured"),
    is_best_seller: Optional[str] = Query(None, alias="isBestSeller"),
    sort_by: str = Query("createdAt", alias="sortBy", description="Поле для сортировки"),
    sort_order: str = Query("desc", alias="sortOrder", description="asc или desc"),
    min_price: Optional[str] = Query(None, alias="minPrice", description="Минимальная цена"),
    max_price: Optional[str] = Query(None, alias="maxPrice", description="Максимальная цена"),
    page: Optional[str] = Query(None, description="Номер страницы"),
    limit: Optional[str] = Query(None, description="Размер страницы (не больше 100)"),
    service: ProductService = Depends(get_product_service),
):
    """
    Получить список товаров с фильтрацией, сортировкой и пагинацией.

    Поддерживает:
    - Поиск без учета регистра по названию, SKU, описаниям и тегам
    - Фильтр по категории (ID или slug), флагам и диапазону цен
    - Сортировку по createdAt, updatedAt, name, price, stock, sku

    Пустые и нечисловые minPrice/maxPrice игнорируются, page и limit
    в таком случае берутся по умолчанию.

    Returns:
        dict: {success, data: {products, total, totalPages, page, limit}}
    """
    filters = ProductFilters(
        search=search,
        category_id=category_id,
        category_slug=category_slug,
        is_active=parse_bool(is_active),
        is_featured=parse_bool(is_featured),
        is_best_seller=parse_bool(is_best_seller),
        sort_by=sort_by,
        sort_order=sort_order,
        min_price=parse_float(min_price),
        max_price=parse_float(max_price),
        page=parse_int(page, default=1),
        limit=parse_int(limit, default=12),
    )
    result = service.list(filters)
    return envelope(data=ProductPage.model_validate(result).to_json())


@router.get("/slug/{slug}", response_model=dict)
def get_product_by_slug(slug: str, service: ProductService = Depends(get_product_service)):
    """Получить товар по slug вместе со снимком категории."""
    return envelope(data=serialize_product(service.get_by_slug(slug)))


@router.get("/{product_id}", response_model=dict)
def get_product(product_id: str, service: ProductService = Depends(get_product_service)):
    """
    Получить товар по ID.

    Raises:
        AppException: 400 при неверном формате ID, 404 если товар не найден
    """
    return envelope(data=serialize_product(service.get(product_id)))


@router.post("/upload-images", response_model=dict)
def upload_images(
    images: Optional[List[UploadFile]] = File(None, description="Файлы изображений"),
    service: ProductService = Depends(get_product_service),
):
    """
    Загрузить изображения без привязки к товару.

    Возвращает объекты изображений для последующей передачи
    в existingImages при создании или обновлении товара.
    """
    uploaded = service.upload_images(read_uploads(images))
    return envelope(
        data=uploaded,
        message=f"{len(uploaded)} image(s) uploaded successfully",
    )


@router.post("", response_model=dict, status_code=status.HTTP_201_CREATED)
def create_product(
    name: Optional[str] = Form(None),
    price: Optional[float] = Form(None),
    sku: Optional[str] = Form(None),
    compare_at_price: Optional[float] = Form(None, alias="compareAtPrice"),
    description: Optional[str] = Form(None),
    short_description: Optional[str] = Form(None, alias="shortDescription"),
    stock: Optional[int] = Form(None),
    tags: Optional[str] = Form(None, description="JSON-массив или строка через запятую"),
    category_id: Optional[str] = Form(None, alias="categoryId"),
    is_active: Optional[bool] = Form(None, alias="isActive"),
    is_featured: Optional[bool] = Form(None, alias="isFeatured"),
    is_best_seller: Optional[bool] = Form(None, alias="isBestSeller"),
    existing_images: Optional[str] = Form(None, alias="existingImages", description="JSON изображений"),
    images: Optional[List[UploadFile]] = File(None, description="Файлы изображений"),
    body: Optional[dict] = Depends(get_json_body),
    service: ProductService = Depends(get_product_service),
):
    """
    Создать товар.

    Обязательны name, price и sku. Файлы загружаются во внешнее хранилище,
    при его недоступности встраиваются как base64 data URI.

    Без файлов товар можно создать JSON-телом, заранее загруженные
    изображения передаются в поле images.
    """
    if body is not None:
        product = service.create(parse_body(ProductCreate, _with_tag_list(body)))
        return envelope(data=serialize_product(product), message="Product created successfully")

    data = ProductCreate(
        name=name,
        price=price,
        sku=sku,
        compare_at_price=compare_at_price,
        description=description or "",
        short_description=short_description or "",
        stock=stock or 0,
        tags=_parse_tags(tags) or [],
        category_id=category_id,
        is_active=True if is_active is None else is_active,
        is_featured=bool(is_featured),
        is_best_seller=bool(is_best_seller),
        images=_parse_images(existing_images) or [],
    )
    product = service.create(data, read_uploads(images))
    return envelope(data=serialize_product(product), message="Product created successfully")


@router.put("/{product_id}", response_model=dict)
def update_product(
    product_id: str,
    name: Optional[str] = Form(None),
    price: Optional[float] = Form(None),
    sku: Optional[str] = Form(None),
    compare_at_price: Optional[float] = Form(None, alias="compareAtPrice"),
    description: Optional[str] = Form(None),
    short_description: Optional[str] = Form(None, alias="shortDescription"),
    stock: Optional[int] = Form(None),
    tags: Optional[str] = Form(None),
    category_id: Optional[str] = Form(None, alias="categoryId", description="Пусто - снять категорию"),
    is_active: Optional[bool] = Form(None, alias="isActive"),
    is_featured: Optional[bool] = Form(None, alias="isFeatured"),
    is_best_seller: Optional[bool] = Form(None, alias="isBestSeller"),
    existing_images: Optional[str] = Form(None, alias="existingImages"),
    images: Optional[List[UploadFile]] = File(None),
    form: FormData = Depends(get_form),
    body: Optional[dict] = Depends(get_json_body),
    service: ProductService = Depends(get_product_service),
):
    """
    Частично обновить товар.

    Новые файлы заменяют все изображения товара (старые удаляются
    из хранилища). existingImages без файлов заменяет список изображений.

    В JSON-теле учитываются только переданные ключи, null в categoryId
    или compareAtPrice очищает поле, images заменяет список изображений.
    """
    if body is not None:
        product = service.update(product_id, parse_body(ProductUpdate, _with_tag_list(body)))
        return envelope(data=serialize_product(product), message="Product updated successfully")

    provided = {
        key: value
        for key, value in (
            ("name", name),
            ("price", price),
            ("sku", sku),
            ("description", description),
            ("short_description", short_description),
            ("stock", stock),
            ("tags", _parse_tags(tags)),
            ("is_active", is_active),
            ("is_featured", is_featured),
            ("is_best_seller", is_best_seller),
            ("images", _parse_images(existing_images)),
        )
        if value is not None
    }
    # Пустое значение в форме очищает поле
    if "categoryId" in form:
        provided["category_id"] = category_id
    if "compareAtPrice" in form:
        provided["compare_at_price"] = compare_at_price

    product = service.update(product_id, ProductUpdate(**provided), read_uploads(images))
    return envelope(data=serialize_product(product), message="Product updated successfully")


@router.delete("/{product_id}", response_model=dict)
def delete_product(product_id: str, service: ProductService = Depends(get_product_service)):
    """Удалить товар вместе с изображениями во внешнем хранилище."""
    deleted = service.delete(product_id)
    return envelope(data=deleted, message="Product deleted successfully")
