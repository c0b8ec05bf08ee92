"""PostgreSQL schema creation and versioning."""
from __future__ import annotations

import logging

import asyncpg

logger = logging.getLogger("docready.db")

SCHEMA_VERSION = 4

_TABLES = """
CREATE TABLE IF NOT EXISTS schema_version (
    version   INTEGER NOT NULL,
    applied   TIMESTAMPTZ NOT NULL DEFAULT now()
);

CREATE TABLE IF NOT EXISTS application_modules (
    id           TEXT PRIMARY KEY,
    module_code  TEXT NOT NULL UNIQUE,
    module_name  TEXT NOT NULL,
    description  TEXT DEFAULT '',
    is_active    BOOLEAN DEFAULT TRUE
);

CREATE TABLE IF NOT EXISTS application_features (
    id                  TEXT PRIMARY KEY,
    feature_code        TEXT NOT NULL UNIQUE,
    feature_name        TEXT NOT NULL,
    description         TEXT DEFAULT '',
    route_path          TEXT DEFAULT '',
    module_id           TEXT NOT NULL REFERENCES application_modules(id),
    is_active           BOOLEAN DEFAULT TRUE,
    workflow_steps_json TEXT DEFAULT '{}',
    ui_elements_json    TEXT DEFAULT '{}'
);

CREATE INDEX IF NOT EXISTS idx_features_module ON application_features(module_id, is_active);

CREATE TABLE IF NOT EXISTS enablement_content_status (
    id                    BIGSERIAL PRIMARY KEY,
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

CREATE TABLE IF NOT EXISTS manual_definitions (
    id               TEXT PRIMARY KEY,
    manual_code      TEXT NOT NULL UNIQUE,
    manual_name      TEXT NOT NULL,
    current_version  TEXT DEFAULT '1.0'
);

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


async def run_migrations(db: asyncpg.Pool) -> None:
    """Create all tables. Idempotent."""
    async with db.acquire() as conn:
        try:
            current_version = await conn.fetchval("SELECT MAX(version) FROM schema_version") or 0
        except asyncpg.UndefinedTableError:
            current_version = 0

        if current_version >= SCHEMA_VERSION:
            logger.info(f"Schema is up to date (version {current_version})")
            return

        logger.info(f"Running Postgres migrations: {current_version} → {SCHEMA_VERSION}")
        async with conn.transaction():
            await conn.execute(_TABLES)
            await conn.execute(
                "ALTER TABLE enablement_quickstart_templates ADD COLUMN IF NOT EXISTS status TEXT DEFAULT 'draft'"
            )
            await conn.execute("INSERT INTO schema_version (version) VALUES ($1)", SCHEMA_VERSION)
        logger.info(f"Migrations complete — schema version {SCHEMA_VERSION}")
