#!/usr/bin/env python3
"""
Скрипт для инициализации базы данных каталога.

Использование:
    python init_db.py          # создать недостающие таблицы
    python init_db.py --reset  # удалить и пересоздать все таблицы
"""

import argparse
import sys
from pathlib import Path

# Добавляем путь к модулю app
sys.path.insert(0, str(Path(__file__).parent))

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from app.db.database import engine
from app.db.models import Base


def init_database(reset: bool = False) -> bool:
    """
    Создает все таблицы в базе данных.

    Args:
        reset: Удалить существующие таблицы перед созданием

    Returns:
        bool: True при успехе
    """
    print("🗄️ Инициализация базы данных...")

    try:
        if reset:
            Base.metadata.drop_all(bind=engine)
            print("🧹 Существующие таблицы удалены")

        Base.metadata.create_all(bind=engine)
        print("✅ Все таблицы созданы успешно!")

        tables = inspect(engine).get_table_names()
        print(f"📋 Таблиц в базе: {len(tables)}")
        for table in tables:
            print(f"  - {table}")

        return True

    except SQLAlchemyError as e:
        print(f"❌ Ошибка создания таблиц: {e}")
        return False


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Инициализация базы данных каталога")
    parser.add_argument("--reset", action="store_true", help="Пересоздать все таблицы")
    args = parser.parse_args()

    if not init_database(reset=args.reset):
        sys.exit(1)
