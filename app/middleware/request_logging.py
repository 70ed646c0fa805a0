"""
Request logging middleware.
Assigns a request ID, measures processing time and warns about slow requests.
"""

from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp
import logging
import time
import uuid

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware that tags every request with an ID and logs its timing.
    Adds ``X-Request-ID`` and ``X-Processing-Time`` headers to responses.
    """

    def __init__(
        self,
        app: ASGIApp,
        slow_request_threshold: float = 2.0,
        enable_detailed_logging: bool = False
    ):
        super().__init__(app)
        self.slow_request_threshold = slow_request_threshold
        self.enable_detailed_logging = enable_detailed_logging

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """
        Process request through the logging middleware.

        Args:
            request: FastAPI request object
            call_next: Next middleware/handler in chain

        Returns:
            Response object with request ID and timing headers
        """
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]
        request.state.request_id = request_id
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as exc:
            processing_time = time.perf_counter() - start_time
            logger.error(
                f"Request error [{request_id}]: {type(exc).__name__} - {exc} "
                f"(processing_time: {processing_time:.3f}s)",
                extra={
                    "request_id": request_id,
                    "path": request.url.path,
                    "method": request.method,
                    "processing_time": processing_time,
                },
                exc_info=True
            )
            raise

        processing_time = time.perf_counter() - start_time
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Processing-Time"] = f"{processing_time:.3f}"

        log_message = (
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"[{request_id}] in {processing_time:.3f}s"
        )
        if processing_time > self.slow_request_threshold:
            logger.warning(f"Slow request: {log_message}")
        elif self.enable_detailed_logging:
            logger.info(log_message)
        else:
            logger.debug(log_message)

        return response
