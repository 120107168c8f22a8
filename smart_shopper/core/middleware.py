import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("smart_shopper.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log one line per request with status and duration"""

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        status_code = 500
        try:
            response: Response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            duration_ms = int((time.perf_counter() - start) * 1000)
            ip = (request.client.host if request.client else None) or "-"
            logger.info(f"{ip} {request.method} {request.url.path} {status_code} {duration_ms}ms")
