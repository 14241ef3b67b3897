"""
Исключения приложения и их глобальные обработчики.

Сервисы поднимают AppException, обработчики превращают его
в ответ формата {"success": false, "message": ...}.
"""

import logging
from enum import Enum

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ErrorType(Enum):
    VALIDATION = "validation"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    UPSTREAM = "upstream"
    INTERNAL = "internal"


# Соответствие типов ошибок HTTP статусам
ERROR_STATUS_MAP = {
    ErrorType.VALIDATION: 400,
    ErrorType.UNAUTHORIZED: 401,
    ErrorType.NOT_FOUND: 404,
    ErrorType.UPSTREAM: 500,
    ErrorType.INTERNAL: 500,
}


class AppException(Exception):
    """Исключение, которое поднимают сервисы."""

    def __init__(self, error_type: ErrorType, message: str):
        self.error_type = error_type
        self.message = message
        super().__init__(message)

    @property
    def status_code(self) -> int:
        return ERROR_STATUS_MAP.get(self.error_type, 500)


class ValidationFailed(AppException):
    def __init__(self, message: str):
        super().__init__(ErrorType.VALIDATION, message)


class NotFound(AppException):
    def __init__(self, message: str):
        super().__init__(ErrorType.NOT_FOUND, message)


def error_body(message: str) -> dict:
    return {"success": False, "message": message}


async def app_exception_handler(_request: Request, exc: AppException) -> JSONResponse:
    """Глобальный обработчик AppException."""
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message))


async def http_exception_handler(
    _request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """HTTPException (в том числе 404/405 роутинга) в общем формате ответа."""
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(message),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Ошибки валидации параметров запроса отдаются как 400."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ())[1:])
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    else:
        message = "Invalid request"
    return JSONResponse(status_code=400, content=error_body(message))


async def generic_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    """Необработанные исключения: детали только в лог, клиенту общий 500."""
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(status_code=500, content=error_body("Internal server error"))
