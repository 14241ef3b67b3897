"""
Шлюз к внешнему медиа-хранилищу (S3 / MinIO).

Принимает байты изображения, ограничивает его размер, загружает
в bucket и возвращает нормализованный результат: публичный URL,
ключ для удаления, формат и размеры. Удаление всегда best-effort.
"""

import base64
import logging
import time
import uuid
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Optional, Tuple

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from PIL import Image, UnidentifiedImageError

from app.core.config import Settings
from app.core.exceptions import ValidationFailed

logger = logging.getLogger(__name__)

# Префикс ключа для изображений, встроенных прямо в запись как data URI
INLINE_KEY_PREFIX = "base64_"


class MediaError(Exception):
    """Ошибка загрузки в медиа-хранилище или обработки изображения."""


@dataclass
class UploadedImage:
    """Файл, пришедший в multipart-запросе."""

    filename: str
    content_type: str
    data: bytes


@dataclass
class MediaUpload:
    """Результат загрузки изображения в хранилище."""

    url: str
    public_id: str
    format: Optional[str]
    width: Optional[int]
    height: Optional[int]
    bytes: int


class MediaGateway:
    """
    Обертка над S3-совместимым хранилищем изображений.

    Создается один раз при старте приложения из Settings и передается
    сервисам через dependency.
    """

    def __init__(self, settings: Settings, client=None):
        self.bucket_name = settings.S3_BUCKET_NAME
        self.region = settings.AWS_REGION or "us-east-1"
        self.endpoint_url = settings.S3_ENDPOINT_URL or None
        self.public_base_url = settings.MEDIA_PUBLIC_BASE_URL.rstrip("/")
        self.root_folder = settings.MEDIA_ROOT_FOLDER.strip("/")
        self.max_width = settings.MEDIA_MAX_WIDTH
        self.max_size = settings.MAX_IMAGE_SIZE
        self.allowed_extensions = settings.allowed_image_extensions
        self.configured = settings.media_configured
        self._access_key = settings.AWS_ACCESS_KEY_ID
        self._secret_key = settings.AWS_SECRET_ACCESS_KEY
        self._client = client

    @property
    def client(self):
        """boto3 клиент, создается при первом обращении."""
        if self._client is None:
            config = Config(
                retries={"max_attempts": 3, "mode": "adaptive"},
                connect_timeout=10,
                read_timeout=30,
                s3={"addressing_style": "path"},
                signature_version="s3v4",
            )
            self._client = boto3.client(
                "s3",
                region_name=self.region,
                endpoint_url=self.endpoint_url,
                aws_access_key_id=self._access_key,
                aws_secret_access_key=self._secret_key,
                config=config,
            )
        return self._client

    # ---------------------------- валидация ----------------------------

    def validate(self, image: UploadedImage) -> None:
        """
        Проверить расширение и размер файла до любых обращений к хранилищу.

        Raises:
            ValidationFailed: Неподдерживаемый формат или слишком большой файл
        """
        ext = Path(image.filename or "").suffix.lower().lstrip(".")
        if ext not in self.allowed_extensions:
            raise ValidationFailed(
                f"Unsupported file format: {ext or 'unknown'}. "
                f"Supported: {', '.join(self.allowed_extensions)}"
            )
        if len(image.data) > self.max_size:
            raise ValidationFailed(
                f"File size exceeds maximum allowed size of {self.max_size} bytes"
            )

    # ---------------------------- обработка ----------------------------

    def transform(self, data: bytes) -> Tuple[bytes, str, int, int]:
        """
        Ограничить ширину изображения, сохранив пропорции.

        Изображения уже не шире лимита возвращаются как есть,
        увеличение не выполняется.

        Returns:
            Tuple[bytes, str, int, int]: (байты, формат, ширина, высота)

        Raises:
            MediaError: Файл не является изображением
        """
        try:
            with Image.open(BytesIO(data)) as img:
                fmt = img.format or "PNG"
                width, height = img.size
                if width <= self.max_width:
                    return data, fmt.lower(), width, height

                new_height = max(1, round(height * self.max_width / width))
                resized = img.resize((self.max_width, new_height), Image.Resampling.LANCZOS)
                if fmt == "JPEG" and resized.mode not in ("RGB", "L"):
                    resized = resized.convert("RGB")

                out = BytesIO()
                save_kwargs = {"quality": 85, "optimize": True} if fmt == "JPEG" else {}
                resized.save(out, fmt, **save_kwargs)
                return out.getvalue(), fmt.lower(), self.max_width, new_height
        except (UnidentifiedImageError, OSError) as e:
            raise MediaError(f"Cannot process image: {e}") from e

    def build_key(self, folder: str, fmt: str) -> str:
        """Уникальный ключ объекта: <root>/<folder>/<timestamp>_<random>.<ext>."""
        ext = "jpg" if fmt == "jpeg" else fmt
        name = f"{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}.{ext}"
        parts = [p for p in (self.root_folder, folder.strip("/"), name) if p]
        return "/".join(parts)

    def public_url(self, key: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url}/{key}"
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket_name}/{key}"
        return f"https://{self.bucket_name}.s3.{self.region}.amazonaws.com/{key}"

    # ---------------------------- хранилище ----------------------------

    def upload(self, image: UploadedImage, folder: str) -> MediaUpload:
        """
        Загрузить изображение в хранилище.

        Args:
            image: Загруженный файл
            folder: Папка внутри корневой (categories, products)

        Returns:
            MediaUpload: URL, ключ для удаления и метаданные

        Raises:
            MediaError: Хранилище не настроено, недоступно или файл не читается
        """
        if not self.configured:
            raise MediaError("Media storage is not configured")

        body, fmt, width, height = self.transform(image.data)
        key = self.build_key(folder, fmt)
        content_type = Image.MIME.get(fmt.upper()) or image.content_type

        try:
            self.client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=BytesIO(body),
                ContentType=content_type,
                ContentLength=len(body),
            )
        except (ClientError, BotoCoreError) as e:
            raise MediaError(f"Upload to bucket {self.bucket_name} failed: {e}") from e

        logger.info("Uploaded %s to %s (%d bytes)", image.filename, key, len(body))
        return MediaUpload(
            url=self.public_url(key),
            public_id=key,
            format=fmt,
            width=width,
            height=height,
            bytes=len(body),
        )

    def delete(self, public_id: Optional[str]) -> bool:
        """
        Удалить объект из хранилища (best-effort).

        Ошибки только логируются: неудачное удаление не должно
        блокировать операцию над владельцем изображения.

        Returns:
            bool: Был ли объект удален
        """
        if not public_id or public_id.startswith(INLINE_KEY_PREFIX):
            return False
        if not self.configured:
            logger.warning("Skipping delete of %s: media storage is not configured", public_id)
            return False
        try:
            self.client.delete_object(Bucket=self.bucket_name, Key=public_id)
            logger.info("Deleted %s from media storage", public_id)
            return True
        except (ClientError, BotoCoreError) as e:
            logger.error("Media delete failed for %s: %s", public_id, e)
            return False

    # ---------------------------- inline fallback ----------------------------

    @staticmethod
    def inline(image: UploadedImage) -> str:
        """Встроить изображение в запись как data URI."""
        encoded = base64.b64encode(image.data).decode("ascii")
        content_type = image.content_type or "application/octet-stream"
        return f"data:{content_type};base64,{encoded}"

    @staticmethod
    def inline_key(index: int) -> str:
        return f"{INLINE_KEY_PREFIX}{int(time.time() * 1000)}_{index}"
