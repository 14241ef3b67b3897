"""
Схемы и хелперы для пагинации.
"""

import math

from pydantic import BaseModel

DEFAULT_LIMIT = 12
MAX_LIMIT = 100


def normalize_page(page: int) -> int:
    """Номер страницы не меньше 1."""
    return max(1, page)


def normalize_limit(limit: int, default: int = DEFAULT_LIMIT) -> int:
    """Неположительный лимит заменяется значением по умолчанию, большой обрезается."""
    if limit <= 0:
        return default
    return min(MAX_LIMIT, limit)


class PageMeta(BaseModel):
    """
    Метаданные пагинации.

    Attributes:
        page: Номер текущей страницы
        limit: Размер страницы
        total: Общее количество записей
        total_pages: Общее количество страниц
    """

    page: int
    limit: int
    total: int
    total_pages: int

    @classmethod
    def create(cls, page: int, limit: int, total: int) -> "PageMeta":
        """
        Создает экземпляр PageMeta с автоматическим расчетом total_pages.

        Args:
            page: Номер текущей страницы
            limit: Размер страницы
            total: Общее количество записей

        Returns:
            PageMeta: Экземпляр с рассчитанными метаданными
        """
        total_pages = math.ceil(total / limit) if limit else 0
        return cls(page=page, limit=limit, total=total, total_pages=total_pages)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit
