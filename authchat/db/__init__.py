from .base import Base, create_sqlite_session_pool
from .db import ChatDatabase
from .migrations import MIGRATIONS, apply_migrations

__all__ = (
    "MIGRATIONS",
    "Base",
    "ChatDatabase",
    "apply_migrations",
    "create_sqlite_session_pool",
)
