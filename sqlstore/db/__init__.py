"""Database helpers (connection factory and declarative base export)."""

from .session import Base, Database

__all__ = ["Base", "Database"]
