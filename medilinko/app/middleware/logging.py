"""
Request logging middleware
"""
import logging
import time
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from medilinko.app.api.deps import USER_ID_HEADER

logger = logging.getLogger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs the start, outcome and duration of every request"""

    async def dispatch(self, request: Request, call_next):
        """
        Log the request

        Args:
            request: FastAPI request
            call_next: next middleware or route handler

        Returns:
            the response
        """
        start_time = time.time()

        client_host = request.client.host if request.client else "unknown"
        query_params = dict(request.query_params) if request.query_params else {}
        user_id = request.headers.get(USER_ID_HEADER) or "anonymous"

        logger.info(
            f"[HTTP start] {request.method} {request.url.path} - "
            f"client: {client_host} - user: {user_id} - "
            f"query: {query_params if query_params else 'none'}"
        )

        try:
            response = await call_next(request)
        except Exception as e:
            process_time = time.time() - start_time
            logger.error(
                f"[HTTP error] {request.method} {request.url.path} - "
                f"error: {str(e)} - "
                f"elapsed: {process_time:.3f}s",
                exc_info=True
            )
            raise

        process_time = time.time() - start_time
        logger.info(
            f"[HTTP done] {request.method} {request.url.path} - "
            f"status: {response.status_code} - "
            f"elapsed: {process_time:.3f}s"
        )

        return response
