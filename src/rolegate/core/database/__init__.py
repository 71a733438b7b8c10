"""Database layer - session management, base models, and mixins."""

from rolegate.core.database.base import Base, CreatedAtMixin, TimestampMixin, UUIDMixin
from rolegate.core.database.session import (
    async_engine,
    async_session_factory,
    get_db,
)
from rolegate.core.database.transaction import atomic


__all__ = [
    "Base",
    "CreatedAtMixin",
    "TimestampMixin",
    "UUIDMixin",
    "async_engine",
    "async_session_factory",
    "atomic",
    "get_db",
]
