"""PostgreSQL implementation of the content status / artifact repository."""
from __future__ import annotations

from datetime import datetime, timezone

import asyncpg


class PostgresContentRepository:
    """PostgreSQL-backed content status, artifacts and quick-start templates."""

    def __init__(self, db: asyncpg.Pool):
        self.db = db

    async def list_content_status(self) -> list[dict]:
        rows = await self.db.fetch(
            """SELECT feature_code, module_code, documentation_status, workflow_status, updated_at
               FROM enablement_content_status
               ORDER BY COALESCE(updated_at, ''), id"""
        )
        return [dict(r) for r in rows]

    async def get_content_status(self, feature_code: str) -> dict | None:
        row = await self.db.fetchrow(
            """SELECT * FROM enablement_content_status
               WHERE feature_code = $1
               ORDER BY COALESCE(updated_at, '') DESC, id DESC
               LIMIT 1""",
            feature_code,
        )
        return dict(row) if row else None

    async def list_artifacts(self) -> list[dict]:
        rows = await self.db.fetch(
            "SELECT feature_code, artifact_type, status, updated_at FROM enablement_artifacts"
        )
        return [dict(r) for r in rows]

    async def list_feature_artifacts(self, feature_code: str, limit: int = 5) -> list[dict]:
        rows = await self.db.fetch(
            """SELECT artifact_id, title, artifact_type, status
               FROM enablement_artifacts WHERE feature_code = $1
               ORDER BY artifact_id LIMIT $2""",
            feature_code,
            limit,
        )
        return [dict(r) for r in rows]

    async def list_quickstart_module_codes(self) -> set[str]:
        rows = await self.db.fetch("SELECT module_code FROM enablement_quickstart_templates")
        return {r["module_code"] for r in rows if r["module_code"]}

    async def add_content_status(self, status_data: dict) -> None:
        now = datetime.now(timezone.utc).isoformat()
        await self.db.execute(
            """INSERT INTO enablement_content_status
                   (feature_code, module_code, documentation_status, workflow_status, updated_at)
               VALUES ($1, $2, $3, $4, $5)""",
            status_data["feature_code"],
            status_data.get("module_code", ""),
            status_data.get("documentation_status", "not_started"),
            status_data.get("workflow_status", ""),
            status_data.get("updated_at", now),
        )

    async def upsert_artifact(self, artifact_data: dict) -> None:
        now = datetime.now(timezone.utc).isoformat()
        await self.db.execute(
            """INSERT INTO enablement_artifacts
                   (artifact_id, feature_code, artifact_type, title, status, updated_at)
               VALUES ($1, $2, $3, $4, $5, $6)
               ON CONFLICT(artifact_id) DO UPDATE SET
                   feature_code=EXCLUDED.feature_code,
                   artifact_type=EXCLUDED.artifact_type,
                   title=EXCLUDED.title,
                   status=EXCLUDED.status,
                   updated_at=EXCLUDED.updated_at
            """,
            artifact_data["artifact_id"],
            artifact_data.get("feature_code"),
            artifact_data["artifact_type"],
            artifact_data.get("title", ""),
            artifact_data.get("status", "draft"),
            artifact_data.get("updated_at", now),
        )

    async def list_quickstart_templates(self) -> list[dict]:
        rows = await self.db.fetch(
            "SELECT id, module_code, status FROM enablement_quickstart_templates ORDER BY id"
        )
        return [dict(r) for r in rows]

    async def add_quickstart_template(self, template_id: str, module_code: str, status: str = "draft") -> None:
        await self.db.execute(
            """INSERT INTO enablement_quickstart_templates (id, module_code, status) VALUES ($1, $2, $3)
               ON CONFLICT(id) DO UPDATE SET module_code=EXCLUDED.module_code, status=EXCLUDED.status""",
            template_id,
            module_code,
            status,
        )
