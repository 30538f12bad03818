"""Database package public API."""

from .admin_queries import AdminDatabase, new_id
from .migrations import apply_migrations
from .queries import OrderQuery, RequestQuery, UserQuery, UserUpdate

__all__ = [
    "AdminDatabase",
    "new_id",
    "apply_migrations",
    "OrderQuery",
    "RequestQuery",
    "UserQuery",
    "UserUpdate",
]
