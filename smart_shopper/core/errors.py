"""
Application exceptions and the handlers that turn them into the
`{success: false, timestamp, error: {code, message}}` envelope.
"""

import logging
from datetime import UTC, datetime

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from smart_shopper.core.config import settings

logger = logging.getLogger(__name__)


class ShopperError(Exception):
    """Base error carrying the HTTP status and the envelope error code"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "SERVER_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailed(ShopperError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "INVALID_REQUEST"


class NotFound(ShopperError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"


class UpstreamUnavailable(ShopperError):
    """LLM provider, vector store or database did not answer usefully"""

    status_code = status.HTTP_502_BAD_GATEWAY
    code = "UPSTREAM_ERROR"


def error_body(code: str, message: str) -> dict:
    return {
        "success": False,
        "timestamp": datetime.now(UTC).isoformat(),
        "error": {"code": code, "message": message},
    }


async def shopper_error_handler(request: Request, exc: ShopperError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.code, exc.message))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path", "form"))
    message = f"{field or 'request'}: {first.get('msg', 'invalid request')}"
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=error_body("INVALID_REQUEST", message))


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = "NOT_FOUND" if exc.status_code == status.HTTP_404_NOT_FOUND else "HTTP_ERROR"
    return JSONResponse(status_code=exc.status_code, content=error_body(code, str(exc.detail)))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    message = "Internal Server Error" if settings.is_production else str(exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("SERVER_ERROR", message),
    )


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ShopperError, shopper_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
