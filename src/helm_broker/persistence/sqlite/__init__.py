"""SQLite persistence implementation."""

from .migrations import apply_migrations
from .registry import SQLiteInstanceRegistry

__all__ = ["SQLiteInstanceRegistry", "apply_migrations"]
