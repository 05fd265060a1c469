"""
Database module
"""
from medilinko.infrastructure.database.base import Base, TABLE_PREFIX, generate_ulid
from medilinko.infrastructure.database.connection import (
    get_async_engine,
    get_session_factory,
    get_async_session,
)
from medilinko.infrastructure.database import models  # register all models

__all__ = [
    "Base",
    "TABLE_PREFIX",
    "generate_ulid",
    "get_async_engine",
    "get_session_factory",
    "get_async_session",
]
