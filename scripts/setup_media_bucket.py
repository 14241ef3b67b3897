#!/usr/bin/env python3
"""
Подготовка бакета медиа-хранилища для изображений каталога.

Создает бакет (если его нет) и выставляет политику публичного чтения,
чтобы URL изображений открывались без подписи.
"""

import json
import sys
from pathlib import Path

# Добавляем путь к модулю app
sys.path.insert(0, str(Path(__file__).parent.parent))

from botocore.exceptions import BotoCoreError, ClientError

from app.core.config import settings
from app.services.media_service import MediaGateway


def public_read_policy(bucket_name: str) -> str:
    """Политика бакета: анонимное чтение объектов."""
    return json.dumps(
        {
            "Version": "2012-10-17",
            "Statement": [
                {
                    "Effect": "Allow",
                    "Principal": {"AWS": ["*"]},
                    "Action": ["s3:GetObject"],
                    "Resource": [f"arn:aws:s3:::{bucket_name}/*"],
                }
            ],
        }
    )


def setup_bucket(gateway: MediaGateway) -> bool:
    """
    Создает бакет и применяет политику публичного чтения.

    Args:
        gateway: Медиа-шлюз с настроенным клиентом

    Returns:
        bool: True при успехе
    """
    bucket_name = settings.S3_BUCKET_NAME
    s3 = gateway.client

    try:
        try:
            s3.head_bucket(Bucket=bucket_name)
            print(f"✅ Бакет '{bucket_name}' уже существует")
        except ClientError:
            s3.create_bucket(Bucket=bucket_name)
            print(f"✅ Бакет '{bucket_name}' создан")

        s3.put_bucket_policy(Bucket=bucket_name, Policy=public_read_policy(bucket_name))
        print("🔓 Политика публичного чтения применена")

        buckets = [b["Name"] for b in s3.list_buckets().get("Buckets", [])]
        print(f"📋 Доступные бакеты: {buckets}")
        return True

    except (ClientError, BotoCoreError) as e:
        print(f"❌ Ошибка настройки бакета: {e}")
        return False


def main():
    print("=== НАСТРОЙКА МЕДИА-ХРАНИЛИЩА ===")

    gateway = MediaGateway(settings)
    if not gateway.configured:
        print("❌ Не заданы S3_BUCKET_NAME, AWS_ACCESS_KEY_ID или AWS_SECRET_ACCESS_KEY")
        sys.exit(1)

    if not setup_bucket(gateway):
        sys.exit(1)


if __name__ == "__main__":
    main()
