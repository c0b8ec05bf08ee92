"""PostgreSQL implementation of the manual section repository."""
from __future__ import annotations

import json

import asyncpg

from backend.db.repositories.manuals import encode_code_list, section_row

_SECTION_SELECT = """
    SELECT s.id, s.manual_id, s.section_number, s.title,
           s.source_feature_codes_json, s.source_module_codes_json,
           s.content_json, s.last_generated_at,
           d.manual_code, d.manual_name, d.current_version
    FROM manual_sections s
    JOIN manual_definitions d ON d.id = s.manual_id
"""


class PostgresManualRepository:
    """PostgreSQL-backed manual definitions and sections."""

    def __init__(self, db: asyncpg.Pool):
        self.db = db

    async def list_sections(self) -> list[dict]:
        rows = await self.db.fetch(_SECTION_SELECT + " ORDER BY d.manual_code, s.section_number, s.id")
        return [section_row(r) for r in rows]

    async def get_section(self, section_id: str) -> dict | None:
        row = await self.db.fetchrow(_SECTION_SELECT + " WHERE s.id = $1", section_id)
        return section_row(row) if row else None

    async def upsert_manual(self, manual_data: dict) -> None:
        await self.db.execute(
            """INSERT INTO manual_definitions (id, manual_code, manual_name, current_version)
               VALUES ($1, $2, $3, $4)
               ON CONFLICT(id) DO UPDATE SET
                   manual_code=EXCLUDED.manual_code,
                   manual_name=EXCLUDED.manual_name,
                   current_version=EXCLUDED.current_version
            """,
            manual_data["id"],
            manual_data["manual_code"],
            manual_data.get("manual_name", ""),
            manual_data.get("current_version", "1.0"),
        )

    async def upsert_section(self, section_data: dict) -> None:
        content = section_data.get("content")
        await self.db.execute(
            """INSERT INTO manual_sections (
                   id, manual_id, section_number, title,
                   source_feature_codes_json, source_module_codes_json,
                   content_json, last_generated_at
               ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
               ON CONFLICT(id) DO UPDATE SET
                   manual_id=EXCLUDED.manual_id,
                   section_number=EXCLUDED.section_number,
                   title=EXCLUDED.title,
                   source_feature_codes_json=EXCLUDED.source_feature_codes_json,
                   source_module_codes_json=EXCLUDED.source_module_codes_json,
                   content_json=EXCLUDED.content_json,
                   last_generated_at=EXCLUDED.last_generated_at
            """,
            section_data["id"],
            section_data["manual_id"],
            section_data.get("section_number", ""),
            section_data.get("title", ""),
            encode_code_list(section_data.get("source_feature_codes")),
            encode_code_list(section_data.get("source_module_codes")),
            json.dumps(content) if content is not None else None,
            section_data.get("last_generated_at"),
        )
