"""Database schema creation and versioning.

All CREATE TABLE statements for the documentation catalogue.
Uses IF NOT EXISTS for idempotent runs.
"""
from __future__ import annotations

import logging

import aiosqlite

logger = logging.getLogger("docready.db")

SCHEMA_VERSION = 4

_TABLES = """
-- ── Schema version tracking ────────────────────────────────────────
CREATE TABLE IF NOT EXISTS schema_version (
    version   INTEGER NOT NULL,
    applied   TEXT NOT NULL DEFAULT (datetime('now'))
);

-- ── 1. Feature registry ────────────────────────────────────────────
CREATE TABLE IF NOT EXISTS application_modules (
    id           TEXT PRIMARY KEY,
    module_code  TEXT NOT NULL UNIQUE,
    module_name  TEXT NOT NULL,
    description  TEXT DEFAULT '',
    is_active    INTEGER DEFAULT 1
);

CREATE TABLE IF NOT EXISTS application_features (
    id                  TEXT PRIMARY KEY,
    feature_code        TEXT NOT NULL UNIQUE,
    feature_name        TEXT NOT NULL,
    description         TEXT DEFAULT '',
    route_path          TEXT DEFAULT '',
    module_id           TEXT NOT NULL REFERENCES application_modules(id),
    is_active           INTEGER DEFAULT 1,
    workflow_steps_json TEXT DEFAULT '{}',
    ui_elements_json    TEXT DEFAULT '{}'
);

CREATE INDEX IF NOT EXISTS idx_features_module ON application_features(module_id, is_active);

-- ── 2. Content status + generated artifacts ────────────────────────
CREATE TABLE IF NOT EXISTS enablement_content_status (
    id                    INTEGER PRIMARY KEY AUTOINCREMENT,
    feature_code          TEXT NOT NULL,
    module_code           TEXT DEFAULT '',
    documentation_status  TEXT DEFAULT 'not_started',
    workflow_status       TEXT DEFAULT '',
    updated_at            TEXT
);

CREATE INDEX IF NOT EXISTS idx_content_status_feature ON enablement_content_status(feature_code);

CREATE TABLE IF NOT EXISTS enablement_artifacts (
    artifact_id    TEXT PRIMARY KEY,
    feature_code   TEXT,
    artifact_type  TEXT NOT NULL,
    title          TEXT DEFAULT '',
    status         TEXT DEFAULT 'draft',
    updated_at     TEXT
);

CREATE INDEX IF NOT EXISTS idx_artifacts_feature ON enablement_artifacts(feature_code);

CREATE TABLE IF NOT EXISTS enablement_quickstart_templates (
    id           TEXT PRIMARY KEY,
    module_code  TEXT NOT NULL,
    status       TEXT DEFAULT 'draft'
);

-- ── 3. Manuals ─────────────────────────────────────────────────────
CREATE TABLE IF NOT EXISTS manual_definitions (
    id               TEXT PRIMARY KEY,
    manual_code      TEXT NOT NULL UNIQUE,
    manual_name      TEXT NOT NULL,
    current_version  TEXT DEFAULT '1.0'
);

-- Feature/module code arrays are free-text JSON, never foreign keys.
CREATE TABLE IF NOT EXISTS manual_sections (
    id                        TEXT PRIMARY KEY,
    manual_id                 TEXT NOT NULL REFERENCES manual_definitions(id),
    section_number            TEXT DEFAULT '',
    title                     TEXT DEFAULT '',
    source_feature_codes_json TEXT,
    source_module_codes_json  TEXT,
    content_json              TEXT,
    last_generated_at         TEXT
);

CREATE INDEX IF NOT EXISTS idx_manual_sections_manual ON manual_sections(manual_id, section_number);
"""


async def _column_exists(db: aiosqlite.Connection, table: str, column: str) -> bool:
    async with db.execute(f"PRAGMA table_info({table})") as cur:
        rows = await cur.fetchall()
    return any(row[1] == column for row in rows)


async def _ensure_column(db: aiosqlite.Connection, table: str, column: str, definition: str) -> None:
    if await _column_exists(db, table, column):
        return
    await db.execute(f"ALTER TABLE {table} ADD COLUMN {column} {definition}")


async def run_migrations(db: aiosqlite.Connection) -> None:
    """Create all tables. Idempotent."""
    try:
        async with db.execute("SELECT MAX(version) FROM schema_version") as cur:
            row = await cur.fetchone()
            current_version = row[0] if row and row[0] else 0
    except aiosqlite.OperationalError:
        current_version = 0

    if current_version >= SCHEMA_VERSION:
        logger.info(f"Schema is up to date (version {current_version})")
        return

    logger.info(f"Running migrations: {current_version} → {SCHEMA_VERSION}")

    await db.executescript(_TABLES)

    # v3 -> v4: quick-start templates carry a publication status.
    await _ensure_column(db, "enablement_quickstart_templates", "status", "TEXT DEFAULT 'draft'")

    await db.execute(
        "INSERT INTO schema_version (version) VALUES (?)",
        (SCHEMA_VERSION,),
    )
    await db.commit()
    logger.info(f"Migrations complete — schema version {SCHEMA_VERSION}")
