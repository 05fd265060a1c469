"""
Global exception handlers
"""
import logging
from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from starlette.exceptions import HTTPException as StarletteHTTPException

from medilinko.app.config import settings

logger = logging.getLogger(__name__)


async def exception_handler(request: Request, exc: Exception):
    """
    Catch-all handler

    Args:
        request: FastAPI request
        exc: the exception

    Returns:
        JSON response
    """
    logger.error(f"Unhandled exception: {exc}", exc_info=True)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal server error",
            "detail": str(exc) if settings.DEBUG else "See server logs"
        }
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Request validation handler

    Args:
        request: FastAPI request
        exc: validation error

    Returns:
        JSON response
    """
    logger.warning(f"Request validation failed: {exc.errors()}")

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "Request validation failed",
            "detail": jsonable_encoder(exc.errors())
        }
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """
    HTTP exception handler

    Args:
        request: FastAPI request
        exc: HTTP exception

    Returns:
        JSON response
    """
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.detail
        }
    )
