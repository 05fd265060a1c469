"""
SQLAlchemy Base definition
"""
from ulid import ULID
from sqlalchemy.orm import declarative_base

Base = declarative_base()

TABLE_PREFIX = "medilinko_"


def generate_ulid() -> str:
    """
    Generate a ULID (Universally Unique Lexicographically Sortable Identifier)

    - 26 characters (Crockford Base32)
    - 48-bit millisecond timestamp + 80 random bits
    - lexicographic order equals creation order

    Returns:
        str: ULID string (26 characters)
    """
    return str(ULID())
