"""
API endpoints для работы с категориями товаров.

Содержит список, дерево, получение по ID и slug, а также
создание, обновление и удаление категорий с изображением.
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from starlette.datastructures import FormData

from app.api.deps import (
    form_upload,
    get_category_service,
    get_form,
    get_json_body,
    parse_body,
    parse_bool,
    read_upload,
)
from app.schemas.category import CategoryCreate, CategoryUpdate
from app.schemas.common import envelope
from app.services.category_service import CategoryService, serialize_category

router = APIRouter()


@router.get("", response_model=dict)
def list_categories(
    is_active: Optional[str] = Query(None, alias="isActive", description="Фильтр по активности"),
    service: CategoryService = Depends(get_category_service),
):
    """
    Получить список категорий, отсортированный по имени.

    Args:
        is_active: true/false - фильтр по активности, иначе все категории
        service: Сервис категорий

    Returns:
        dict: {success, data: [Category], count}
    """
    categories = [serialize_category(c) for c in service.list(parse_bool(is_active))]
    return envelope(data=categories, count=len(categories))


@router.get("/tree", response_model=dict)
def get_category_tree(service: CategoryService = Depends(get_category_service)):
    """
    Получить дерево активных категорий.

    Returns:
        dict: {success, data: [CategoryNode], count} - count равен числу корней
    """
    tree = service.tree()
    return envelope(data=tree, count=len(tree))


@router.get("/slug/{slug}", response_model=dict)
def get_category_by_slug(slug: str, service: CategoryService = Depends(get_category_service)):
    """Получить категорию по slug."""
    return envelope(data=serialize_category(service.get_by_slug(slug)))


@router.get("/{category_id}", response_model=dict)
def get_category(category_id: str, service: CategoryService = Depends(get_category_service)):
    """
    Получить категорию по ID.

    Raises:
        AppException: 400 при неверном формате ID, 404 если категория не найдена
    """
    return envelope(data=serialize_category(service.get(category_id)))


@router.post("", response_model=dict, status_code=status.HTTP_201_CREATED)
def create_category(
    name: Optional[str] = Form(None, description="Название категории"),
    description: Optional[str] = Form(None, description="Описание"),
    parent_id: Optional[str] = Form(None, alias="parentId", description="ID родителя"),
    is_active: Optional[bool] = Form(None, alias="isActive", description="Активна ли категория"),
    image: Optional[UploadFile] = File(None, description="Изображение категории"),
    body: Optional[dict] = Depends(get_json_body),
    service: CategoryService = Depends(get_category_service),
):
    """
    Создать категорию.

    Slug выводится из названия. Изображение (если передано)
    загружается во внешнее хранилище.
    """
    if body is not None:
        category = service.create(parse_body(CategoryCreate, body))
        return envelope(data=serialize_category(category), message="Category created successfully")

    data = CategoryCreate(
        name=name,
        description=description,
        parent_id=parent_id,
        is_active=True if is_active is None else is_active,
    )
    upload = read_upload(image) if image is not None and image.filename else None
    category = service.create(data, upload)
    return envelope(data=serialize_category(category), message="Category created successfully")


@router.put("/{category_id}", response_model=dict)
def update_category(
    category_id: str,
    name: Optional[str] = Form(None, description="Название категории"),
    description: Optional[str] = Form(None, description="Описание"),
    parent_id: Optional[str] = Form(None, alias="parentId", description="ID родителя, пусто - корень"),
    is_active: Optional[bool] = Form(None, alias="isActive", description="Активна ли категория"),
    remove_image: bool = Form(False, alias="removeImage", description="Удалить изображение"),
    form: FormData = Depends(get_form),
    body: Optional[dict] = Depends(get_json_body),
    service: CategoryService = Depends(get_category_service),
):
    """
    Частично обновить категорию.

    Учитываются только переданные поля. Пустой parentId делает категорию
    корневой. Новый файл image заменяет изображение, пустое поле image
    или removeImage=true удаляют его.

    JSON-тело без файла: image: null или пустая строка удаляет изображение.
    """
    if body is not None:
        data = parse_body(CategoryUpdate, body)
        if "image" in body and not body["image"]:
            data.remove_image = True
        category = service.update(category_id, data)
        return envelope(data=serialize_category(category), message="Category updated successfully")

    provided = {
        key: value
        for key, value in (("name", name), ("description", description), ("is_active", is_active))
        if value is not None
    }
    if "parentId" in form:
        provided["parent_id"] = parent_id

    upload = form_upload(form, "image")
    provided["remove_image"] = remove_image or form.get("image") == ""

    category = service.update(category_id, CategoryUpdate(**provided), upload)
    return envelope(data=serialize_category(category), message="Category updated successfully")


@router.delete("/{category_id}", response_model=dict)
def delete_category(category_id: str, service: CategoryService = Depends(get_category_service)):
    """
    Удалить категорию.

    Raises:
        AppException: 400 если у категории есть подкатегории
    """
    deleted = service.delete(category_id)
    return envelope(data=deleted, message="Category deleted successfully")
