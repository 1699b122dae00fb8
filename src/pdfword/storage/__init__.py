"""Storage layer for the PDF to Word pipeline.

Provides the credential rotation store via SQLAlchemy (SQLite by default).
"""

from .database import (
    Base,
    create_store_engine,
    get_engine,
    get_session,
    init_db,
)
from .key_store import KeyRotationProvider, KeyStore, rotation_index
from .orm_models import ApiKeyORM, RotationORM
from .repositories import ApiKeyRepository

__all__ = [
    # Database
    "Base",
    "create_store_engine",
    "get_engine",
    "get_session",
    "init_db",
    # ORM Models
    "ApiKeyORM",
    "RotationORM",
    # Repositories
    "ApiKeyRepository",
    # Rotation
    "KeyRotationProvider",
    "KeyStore",
    "rotation_index",
]
