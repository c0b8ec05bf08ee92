"""PostgreSQL implementation of the feature registry repository."""
from __future__ import annotations

import json
from typing import Any

import asyncpg

from backend.db.repositories.catalog import feature_row

_FEATURE_SELECT = """
    SELECT f.id, f.feature_code, f.feature_name, f.description, f.route_path,
           f.module_id, f.is_active, f.workflow_steps_json, f.ui_elements_json,
           m.module_code, m.module_name, m.description AS module_description
    FROM application_features f
    JOIN application_modules m ON m.id = f.module_id
"""


class PostgresCatalogRepository:
    """PostgreSQL-backed feature registry reads."""

    def __init__(self, db: asyncpg.Pool):
        self.db = db

    async def list_active_features(self, module_code: str | None = None) -> list[dict]:
        query = _FEATURE_SELECT + " WHERE f.is_active"
        params: list[Any] = []
        if module_code:
            query += " AND m.module_code = $1"
            params.append(module_code)
        query += " ORDER BY m.module_code, f.feature_code"
        rows = await self.db.fetch(query, *params)
        return [feature_row(r) for r in rows]

    async def list_features_by_codes(self, feature_codes: list[str]) -> list[dict]:
        if not feature_codes:
            return []
        rows = await self.db.fetch(
            _FEATURE_SELECT + " WHERE f.feature_code = ANY($1::text[]) ORDER BY f.feature_code",
            list(feature_codes),
        )
        return [feature_row(r) for r in rows]

    async def get_feature(self, feature_code: str) -> dict | None:
        row = await self.db.fetchrow(_FEATURE_SELECT + " WHERE f.feature_code = $1", feature_code)
        return feature_row(row) if row else None

    async def list_active_modules(self) -> list[dict]:
        rows = await self.db.fetch(
            "SELECT * FROM application_modules WHERE is_active ORDER BY module_code"
        )
        return [dict(r) for r in rows]

    async def get_module(self, module_code: str) -> dict | None:
        row = await self.db.fetchrow(
            "SELECT * FROM application_modules WHERE module_code = $1", module_code
        )
        return dict(row) if row else None

    async def list_module_features(self, module_id: str) -> list[dict]:
        rows = await self.db.fetch(
            """SELECT feature_code, feature_name, description, route_path
               FROM application_features
               WHERE module_id = $1 AND is_active
               ORDER BY feature_code""",
            module_id,
        )
        return [dict(r) for r in rows]

    async def upsert_module(self, module_data: dict) -> None:
        await self.db.execute(
            """INSERT INTO application_modules (id, module_code, module_name, description, is_active)
               VALUES ($1, $2, $3, $4, $5)
               ON CONFLICT(id) DO UPDATE SET
                   module_code=EXCLUDED.module_code,
                   module_name=EXCLUDED.module_name,
                   description=EXCLUDED.description,
                   is_active=EXCLUDED.is_active
            """,
            module_data["id"],
            module_data["module_code"],
            module_data.get("module_name", ""),
            module_data.get("description", ""),
            bool(module_data.get("is_active", True)),
        )

    async def upsert_feature(self, feature_data: dict) -> None:
        await self.db.execute(
            """INSERT INTO application_features (
                   id, feature_code, feature_name, description, route_path,
                   module_id, is_active, workflow_steps_json, ui_elements_json
               ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9)
               ON CONFLICT(id) DO UPDATE SET
                   feature_code=EXCLUDED.feature_code,
                   feature_name=EXCLUDED.feature_name,
                   description=EXCLUDED.description,
                   route_path=EXCLUDED.route_path,
                   module_id=EXCLUDED.module_id,
                   is_active=EXCLUDED.is_active,
                   workflow_steps_json=EXCLUDED.workflow_steps_json,
                   ui_elements_json=EXCLUDED.ui_elements_json
            """,
            feature_data["id"],
            feature_data["feature_code"],
            feature_data.get("feature_name", ""),
            feature_data.get("description", ""),
            feature_data.get("route_path", ""),
            feature_data["module_id"],
            bool(feature_data.get("is_active", True)),
            json.dumps(feature_data.get("workflow_steps") or {}),
            json.dumps(feature_data.get("ui_elements") or {}),
        )
