"""Repository factory to abstract DB backend (SQLite vs Postgres)."""
from __future__ import annotations

from typing import Any
import aiosqlite

from backend.db.repositories.catalog import SqliteCatalogRepository
from backend.db.repositories.content import SqliteContentRepository
from backend.db.repositories.manuals import SqliteManualRepository


def get_catalog_repository(db: Any):
    if isinstance(db, aiosqlite.Connection):
        return SqliteCatalogRepository(db)
    from backend.db.repositories.postgres.catalog import PostgresCatalogRepository
    return PostgresCatalogRepository(db)

def get_content_repository(db: Any):
    if isinstance(db, aiosqlite.Connection):
        return SqliteContentRepository(db)
    from backend.db.repositories.postgres.content import PostgresContentRepository
    return PostgresContentRepository(db)

def get_manual_repository(db: Any):
    if isinstance(db, aiosqlite.Connection):
        return SqliteManualRepository(db)
    from backend.db.repositories.postgres.manuals import PostgresManualRepository
    return PostgresManualRepository(db)
