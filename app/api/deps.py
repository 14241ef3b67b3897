"""
Общие зависимости API: сервисы, медиа-шлюз, пользователь, разбор параметров.
"""

import math
from typing import List, Optional, Type, TypeVar

from fastapi import Depends, Header, Request, UploadFile
from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session
from starlette.datastructures import FormData, UploadFile as StarletteUploadFile

from app.core.exceptions import AppException, ErrorType, ValidationFailed
from app.db.database import get_db
from app.services.cart_service import CartService
from app.services.category_service import CategoryService
from app.services.media_service import MediaGateway, UploadedImage
from app.services.product_service import ProductService
from app.services.wishlist_service import WishlistService

USER_ID_HEADER = "X-User-Id"

ModelT = TypeVar("ModelT", bound=BaseModel)


def get_media_gateway(request: Request) -> MediaGateway:
    """Шлюз, созданный при старте приложения (см. startup_event в app.main)."""
    return request.app.state.media_gateway


def get_category_service(
    db: Session = Depends(get_db), media: MediaGateway = Depends(get_media_gateway)
) -> CategoryService:
    return CategoryService(db, media)


def get_product_service(
    db: Session = Depends(get_db), media: MediaGateway = Depends(get_media_gateway)
) -> ProductService:
    return ProductService(db, media)


def get_wishlist_service(db: Session = Depends(get_db)) -> WishlistService:
    return WishlistService(db)


def get_cart_service(db: Session = Depends(get_db)) -> CartService:
    return CartService(db)


def get_current_user_id(
    user_id: Optional[str] = Header(None, alias=USER_ID_HEADER)
) -> str:
    """
    ID пользователя, выставленный внешним слоем сессий.

    Raises:
        AppException: Заголовок отсутствует
    """
    if not user_id or not user_id.strip():
        raise AppException(ErrorType.UNAUTHORIZED, "Authentication required")
    return user_id.strip()


def parse_bool(value: Optional[str]) -> Optional[bool]:
    """true/1 и false/0 (без учета регистра), все остальное - None."""
    if value is None:
        return None
    lowered = value.strip().lower()
    if lowered in ("true", "1"):
        return True
    if lowered in ("false", "0"):
        return False
    return None


def parse_float(value: Optional[str]) -> Optional[float]:
    """Число из query-строки; пустое или нечисловое значение - None."""
    if value is None or not value.strip():
        return None
    try:
        number = float(value)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def parse_int(value: Optional[str], default: int) -> int:
    """Целое из query-строки; пустое или нечисловое значение дает default."""
    if value is None or not value.strip():
        return default
    try:
        return int(value.strip())
    except ValueError:
        return default


def read_upload(file: UploadFile) -> UploadedImage:
    """Прочитать файл из multipart в память."""
    return UploadedImage(
        filename=file.filename or "",
        content_type=file.content_type or "application/octet-stream",
        data=file.file.read(),
    )


def read_uploads(files: Optional[List[UploadFile]]) -> List[UploadedImage]:
    return [read_upload(f) for f in files or [] if f.filename]


async def get_form(request: Request) -> FormData:
    """
    Сырые поля multipart-формы.

    FastAPI превращает пустые строки формы в None, а для частичного
    обновления пустое значение означает "очистить поле".
    """
    return await request.form()


def form_upload(form: FormData, key: str) -> Optional[UploadedImage]:
    value = form.get(key)
    if isinstance(value, StarletteUploadFile) and value.filename:
        return read_upload(value)
    return None


async def get_json_body(request: Request) -> Optional[dict]:
    """
    Тело запроса application/json.

    Создание и обновление принимают как multipart-форму (когда есть файлы),
    так и JSON. Для формы возвращается None.

    Raises:
        ValidationFailed: Тело не является JSON-объектом
    """
    content_type = request.headers.get("content-type", "")
    if not content_type.split(";")[0].strip().lower().endswith("json"):
        return None
    try:
        body = await request.json()
    except ValueError:
        raise ValidationFailed("Invalid JSON body")
    if not isinstance(body, dict):
        raise ValidationFailed("Request body must be a JSON object")
    return body


def parse_body(schema: Type[ModelT], body: dict) -> ModelT:
    """
    Провалидировать JSON-тело схемой.

    Ошибка отдается как 400 в том же формате, что и ошибки параметров.
    """
    try:
        return schema.model_validate(body)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ()))
        raise ValidationFailed(f"{field}: {first.get('msg')}" if field else str(first.get("msg")))
