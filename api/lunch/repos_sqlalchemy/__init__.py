"""SQLAlchemy-backed repositories."""

from .orders_repo_sql import SqlOrderStore

__all__ = ["SqlOrderStore"]
