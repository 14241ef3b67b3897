"""
Общие элементы схем: базовая модель с camelCase и конверт ответа.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Базовая схема: поля в snake_case, на проводе - camelCase."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


def envelope(
    data: Any = None, message: Optional[str] = None, count: Optional[int] = None
) -> dict:
    """
    Ответ в общем формате {success, message?, data?, count?}.

    Args:
        data: Полезная нагрузка
        message: Человекочитаемое сообщение
        count: Количество элементов (для списков)
    """
    body: dict = {"success": True}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    if count is not None:
        body["count"] = count
    return body
