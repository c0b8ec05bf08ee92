"""Repository package for database access."""

from .catalog import SqliteCatalogRepository
from .content import SqliteContentRepository
from .manuals import SqliteManualRepository

__all__ = [
    "SqliteCatalogRepository",
    "SqliteContentRepository",
    "SqliteManualRepository",
]
