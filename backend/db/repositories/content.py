"""SQLite implementation of the content status / artifact repository."""
from __future__ import annotations

from datetime import datetime, timezone

import aiosqlite


class SqliteContentRepository:
    """Per-feature documentation status, generated artifacts and quick-start templates."""

    def __init__(self, db: aiosqlite.Connection):
        self.db = db

    async def list_content_status(self) -> list[dict]:
        # Oldest first so that a later row for the same feature code wins when indexed.
        async with self.db.execute(
            """SELECT feature_code, module_code, documentation_status, workflow_status, updated_at
               FROM enablement_content_status
               ORDER BY COALESCE(updated_at, ''), id"""
        ) as cur:
            return [dict(r) for r in await cur.fetchall()]

    async def get_content_status(self, feature_code: str) -> dict | None:
        async with self.db.execute(
            """SELECT * FROM enablement_content_status
               WHERE feature_code = ?
               ORDER BY COALESCE(updated_at, '') DESC, id DESC
               LIMIT 1""",
            (feature_code,),
        ) as cur:
            row = await cur.fetchone()
            return dict(row) if row else None

    async def list_artifacts(self) -> list[dict]:
        async with self.db.execute(
            "SELECT feature_code, artifact_type, status, updated_at FROM enablement_artifacts"
        ) as cur:
            return [dict(r) for r in await cur.fetchall()]

    async def list_feature_artifacts(self, feature_code: str, limit: int = 5) -> list[dict]:
        async with self.db.execute(
            """SELECT artifact_id, title, artifact_type, status
               FROM enablement_artifacts WHERE feature_code = ?
               ORDER BY artifact_id LIMIT ?""",
            (feature_code, limit),
        ) as cur:
            return [dict(r) for r in await cur.fetchall()]

    async def list_quickstart_module_codes(self) -> set[str]:
        async with self.db.execute(
            "SELECT module_code FROM enablement_quickstart_templates"
        ) as cur:
            return {r[0] for r in await cur.fetchall() if r[0]}

    async def add_content_status(self, status_data: dict) -> None:
        now = datetime.now(timezone.utc).isoformat()
        await self.db.execute(
            """INSERT INTO enablement_content_status
                   (feature_code, module_code, documentation_status, workflow_status, updated_at)
               VALUES (?, ?, ?, ?, ?)""",
            (
                status_data["feature_code"],
                status_data.get("module_code", ""),
                status_data.get("documentation_status", "not_started"),
                status_data.get("workflow_status", ""),
                status_data.get("updated_at", now),
            ),
        )
        await self.db.commit()

    async def upsert_artifact(self, artifact_data: dict) -> None:
        now = datetime.now(timezone.utc).isoformat()
        await self.db.execute(
            """INSERT INTO enablement_artifacts
                   (artifact_id, feature_code, artifact_type, title, status, updated_at)
               VALUES (?, ?, ?, ?, ?, ?)
               ON CONFLICT(artifact_id) DO UPDATE SET
                   feature_code=excluded.feature_code,
                   artifact_type=excluded.artifact_type,
                   title=excluded.title,
                   status=excluded.status,
                   updated_at=excluded.updated_at
            """,
            (
                artifact_data["artifact_id"],
                artifact_data.get("feature_code"),
                artifact_data["artifact_type"],
                artifact_data.get("title", ""),
                artifact_data.get("status", "draft"),
                artifact_data.get("updated_at", now),
            ),
        )
        await self.db.commit()

    async def list_quickstart_templates(self) -> list[dict]:
        async with self.db.execute(
            "SELECT id, module_code, status FROM enablement_quickstart_templates ORDER BY id"
        ) as cur:
            return [dict(r) for r in await cur.fetchall()]

    async def add_quickstart_template(self, template_id: str, module_code: str, status: str = "draft") -> None:
        await self.db.execute(
            "INSERT OR REPLACE INTO enablement_quickstart_templates (id, module_code, status) VALUES (?, ?, ?)",
            (template_id, module_code, status),
        )
        await self.db.commit()
