"""SQLite implementation of the feature registry repository."""
from __future__ import annotations

import json
from typing import Any

import aiosqlite

_FEATURE_SELECT = """
    SELECT f.id, f.feature_code, f.feature_name, f.description, f.route_path,
           f.module_id, f.is_active, f.workflow_steps_json, f.ui_elements_json,
           m.module_code, m.module_name, m.description AS module_description
    FROM application_features f
    JOIN application_modules m ON m.id = f.module_id
"""


def _safe_json(raw: str | None) -> Any:
    if not raw:
        return {}
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        return {}


def feature_row(row: Any) -> dict:
    data = dict(row)
    data["is_active"] = bool(data.get("is_active"))
    data["workflow_steps"] = _safe_json(data.pop("workflow_steps_json", None))
    data["ui_elements"] = _safe_json(data.pop("ui_elements_json", None))
    return data


class SqliteCatalogRepository:
    """Read access to application modules and features (the feature registry)."""

    def __init__(self, db: aiosqlite.Connection):
        self.db = db

    async def list_active_features(self, module_code: str | None = None) -> list[dict]:
        query = _FEATURE_SELECT + " WHERE f.is_active = 1"
        params: list[Any] = []
        if module_code:
            query += " AND m.module_code = ?"
            params.append(module_code)
        query += " ORDER BY m.module_code, f.feature_code"
        async with self.db.execute(query, params) as cur:
            return [feature_row(r) for r in await cur.fetchall()]

    async def list_features_by_codes(self, feature_codes: list[str]) -> list[dict]:
        if not feature_codes:
            return []
        placeholders = ",".join("?" for _ in feature_codes)
        query = _FEATURE_SELECT + f" WHERE f.feature_code IN ({placeholders}) ORDER BY f.feature_code"
        async with self.db.execute(query, list(feature_codes)) as cur:
            return [feature_row(r) for r in await cur.fetchall()]

    async def get_feature(self, feature_code: str) -> dict | None:
        async with self.db.execute(
            _FEATURE_SELECT + " WHERE f.feature_code = ?", (feature_code,)
        ) as cur:
            row = await cur.fetchone()
            return feature_row(row) if row else None

    async def list_active_modules(self) -> list[dict]:
        async with self.db.execute(
            "SELECT * FROM application_modules WHERE is_active = 1 ORDER BY module_code"
        ) as cur:
            return [dict(r) for r in await cur.fetchall()]

    async def get_module(self, module_code: str) -> dict | None:
        async with self.db.execute(
            "SELECT * FROM application_modules WHERE module_code = ?", (module_code,)
        ) as cur:
            row = await cur.fetchone()
            return dict(row) if row else None

    async def list_module_features(self, module_id: str) -> list[dict]:
        async with self.db.execute(
            """SELECT feature_code, feature_name, description, route_path
               FROM application_features
               WHERE module_id = ? AND is_active = 1
               ORDER BY feature_code""",
            (module_id,),
        ) as cur:
            return [dict(r) for r in await cur.fetchall()]

    async def upsert_module(self, module_data: dict) -> None:
        await self.db.execute(
            """INSERT INTO application_modules (id, module_code, module_name, description, is_active)
               VALUES (?, ?, ?, ?, ?)
               ON CONFLICT(id) DO UPDATE SET
                   module_code=excluded.module_code,
                   module_name=excluded.module_name,
                   description=excluded.description,
                   is_active=excluded.is_active
            """,
            (
                module_data["id"],
                module_data["module_code"],
                module_data.get("module_name", ""),
                module_data.get("description", ""),
                1 if module_data.get("is_active", True) else 0,
            ),
        )
        await self.db.commit()

    async def upsert_feature(self, feature_data: dict) -> None:
        await self.db.execute(
            """INSERT INTO application_features (
                   id, feature_code, feature_name, description, route_path,
                   module_id, is_active, workflow_steps_json, ui_elements_json
               ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
               ON CONFLICT(id) DO UPDATE SET
                   feature_code=excluded.feature_code,
                   feature_name=excluded.feature_name,
                   description=excluded.description,
                   route_path=excluded.route_path,
                   module_id=excluded.module_id,
                   is_active=excluded.is_active,
                   workflow_steps_json=excluded.workflow_steps_json,
                   ui_elements_json=excluded.ui_elements_json
            """,
            (
                feature_data["id"],
                feature_data["feature_code"],
                feature_data.get("feature_name", ""),
                feature_data.get("description", ""),
                feature_data.get("route_path", ""),
                feature_data["module_id"],
                1 if feature_data.get("is_active", True) else 0,
                json.dumps(feature_data.get("workflow_steps") or {}),
                json.dumps(feature_data.get("ui_elements") or {}),
            ),
        )
        await self.db.commit()
