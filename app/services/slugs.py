"""
Генерация slug'ов для категорий и товаров.
"""

import re

from slugify import slugify

# Символы, которые удаляются целиком, а не заменяются разделителем
_REMOVE_CHARS = re.compile(r"[*+~.()'\"!:@]")


def make_slug(name: str) -> str:
    """
    Получить URL-safe slug из названия.

    Нижний регистр, транслитерация в ASCII, знаки препинания удаляются,
    пробелы превращаются в дефисы. Повторный вызов на slug возвращает его же.

    Example:
        >>> make_slug("Gold Rings")
        'gold-rings'
    """
    return slugify(_REMOVE_CHARS.sub("", name or ""), lowercase=True)
