"""
Базовый класс для всех моделей SQLAlchemy.

Использует новый Declarative API SQLAlchemy 2.0. Идентификаторы -
24-символьные hex-строки, как у документов, которые видит клиент.
"""

import re
import uuid
from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

OBJECT_ID_LENGTH = 24
_OBJECT_ID_RE = re.compile(r"^[0-9a-f]{24}$")


def new_object_id() -> str:
    """Сгенерировать новый идентификатор записи."""
    return uuid.uuid4().hex[:OBJECT_ID_LENGTH]


def is_valid_object_id(value) -> bool:
    """Проверить формат идентификатора (24 hex-символа)."""
    return isinstance(value, str) and bool(_OBJECT_ID_RE.match(value))


class Base(DeclarativeBase):
    """
    Базовый класс для всех моделей.

    Наследуется от DeclarativeBase для использования нового API SQLAlchemy 2.0.
    """
    pass


class ObjectIdMixin:
    id: Mapped[str] = mapped_column(
        String(OBJECT_ID_LENGTH), primary_key=True, default=new_object_id
    )


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
