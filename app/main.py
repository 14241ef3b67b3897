"""
Главный модуль FastAPI приложения Jewelry Catalog API.

Содержит конфигурацию приложения, middleware, обработчики ошибок и роутеры.
Медиа-шлюз создается один раз при запуске и передается в сервисы через зависимости.
"""

import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.routers import api_router
from app.core.config import settings
from app.core.exceptions import (
    AppException,
    app_exception_handler,
    generic_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from app.db.database import engine
from app.db.models import Base
from app.services.media_service import MediaGateway

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

SERVICE_NAME = "Jewelry Catalog API"
SERVICE_VERSION = "1.0.0"

# Создание экземпляра FastAPI приложения
app = FastAPI(
    title=SERVICE_NAME,
    description="API каталога ювелирных изделий: категории, товары, изображения, избранное и корзина",
    version=SERVICE_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Шлюз доступен сразу, startup пересоздает его с актуальными настройками
app.state.media_gateway = MediaGateway(settings)

# Настройка CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Единый формат ошибок {success: false, message}
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)


@app.get("/healthz")
def healthz():
    """
    Health check endpoint для мониторинга состояния приложения.

    Returns:
        dict: Статус приложения, имя сервиса и версия
    """
    return {"status": "ok", "service": SERVICE_NAME, "version": SERVICE_VERSION}


# Подключение API роутеров
app.include_router(api_router, prefix=settings.API_PREFIX)


@app.on_event("startup")
def startup_event():
    """
    Событие запуска приложения.

    Создает недостающие таблицы и инициализирует медиа-шлюз.
    """
    Base.metadata.create_all(bind=engine)
    app.state.media_gateway = MediaGateway(settings)
    if app.state.media_gateway.configured:
        logger.info("Media host configured: bucket=%s", settings.S3_BUCKET_NAME)
    else:
        logger.warning("Media host is not configured, product images fall back to inline data URIs")
