import os
from io import BytesIO
from unittest.mock import MagicMock

# Тесты не должны трогать рабочую БД из .env
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient
from PIL import Image
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import Settings
from app.db.database import get_db
from app.db.models import Base
from app.main import app
from app.services.media_service import MediaGateway


def media_settings(**overrides) -> Settings:
    """Settings с настроенным хранилищем; параметры переопределяют значения."""
    values = {
        "S3_BUCKET_NAME": "test-bucket",
        "AWS_ACCESS_KEY_ID": "test-key",
        "AWS_SECRET_ACCESS_KEY": "test-secret",
        "S3_ENDPOINT_URL": "",
        "MEDIA_PUBLIC_BASE_URL": "https://cdn.test",
        "MEDIA_ROOT_FOLDER": "jewelry",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def engine():
    """Общая in-memory SQLite база на время одного теста."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def s3_client():
    """Мок boto3 клиента: загрузки и удаления проходят успешно."""
    return MagicMock()


@pytest.fixture
def media(s3_client):
    return MediaGateway(media_settings(), client=s3_client)


@pytest.fixture
def make_gateway(s3_client):
    """Фабрика шлюза с переопределенными настройками."""

    def _make(**overrides) -> MediaGateway:
        return MediaGateway(media_settings(**overrides), client=s3_client)

    return _make


@pytest.fixture
def offline_media(s3_client):
    """Шлюз без настроенного хранилища."""
    return MediaGateway(
        media_settings(S3_BUCKET_NAME="", AWS_ACCESS_KEY_ID="", AWS_SECRET_ACCESS_KEY=""),
        client=s3_client,
    )


@pytest.fixture
def client(session_factory, media):
    """TestClient с тестовой БД и замоканным медиа-хранилищем."""

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    original_gateway = app.state.media_gateway
    app.state.media_gateway = media

    yield TestClient(app, raise_server_exceptions=False)

    app.state.media_gateway = original_gateway
    app.dependency_overrides.clear()


@pytest.fixture
def make_image():
    """Фабрика байтов изображения заданного размера и формата."""

    def _make(width: int = 40, height: int = 20, fmt: str = "PNG") -> bytes:
        buffer = BytesIO()
        Image.new("RGB", (width, height), color=(200, 160, 40)).save(buffer, fmt)
        return buffer.getvalue()

    return _make


@pytest.fixture
def create_category(client):
    """Создать категорию через API и вернуть ее данные."""

    def _create(name: str, **fields) -> dict:
        response = client.post("/api/categories", data={"name": name, **fields})
        assert response.status_code == 201, response.json()
        return response.json()["data"]

    return _create


@pytest.fixture
def create_product(client):
    """Создать товар через API и вернуть его данные."""

    def _create(name: str, price: float = 100, sku: str = None, **fields) -> dict:
        data = {"name": name, "price": str(price), "sku": sku or name.upper().replace(" ", "-")}
        data.update(
            {
                key: str(value).lower() if isinstance(value, bool) else str(value)
                for key, value in fields.items()
            }
        )
        response = client.post("/api/products", data=data)
        assert response.status_code == 201, response.json()
        return response.json()["data"]

    return _create
