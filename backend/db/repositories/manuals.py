"""SQLite implementation of the manual section repository."""
from __future__ import annotations

import json
from typing import Any

import aiosqlite

_SECTION_SELECT = """
    SELECT s.id, s.manual_id, s.section_number, s.title,
           s.source_feature_codes_json, s.source_module_codes_json,
           s.content_json, s.last_generated_at,
           d.manual_code, d.manual_name, d.current_version
    FROM manual_sections s
    JOIN manual_definitions d ON d.id = s.manual_id
"""


def decode_code_list(raw: Any) -> list[str] | None:
    """Decode a stored code array; NULL stays None so callers can tell "unset" from "empty"."""
    if raw is None:
        return None
    if isinstance(raw, (list, tuple)):
        return [str(item) for item in raw]
    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError):
        return []
    if not isinstance(parsed, list):
        return []
    return [str(item) for item in parsed if item is not None]


def encode_code_list(codes: list[str] | None) -> str | None:
    if codes is None:
        return None
    return json.dumps(list(codes))


def decode_content(raw: Any) -> Any:
    if raw is None or isinstance(raw, (dict, list)):
        return raw
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        return raw


def section_row(row: Any) -> dict:
    data = dict(row)
    data["source_feature_codes"] = decode_code_list(data.pop("source_feature_codes_json", None))
    data["source_module_codes"] = decode_code_list(data.pop("source_module_codes_json", None))
    data["content"] = decode_content(data.pop("content_json", None))
    return data


class SqliteManualRepository:
    """Manual definitions and their sections with free-text feature/module code arrays."""

    def __init__(self, db: aiosqlite.Connection):
        self.db = db

    async def list_sections(self) -> list[dict]:
        async with self.db.execute(
            _SECTION_SELECT + " ORDER BY d.manual_code, s.section_number, s.id"
        ) as cur:
            return [section_row(r) for r in await cur.fetchall()]

    async def get_section(self, section_id: str) -> dict | None:
        async with self.db.execute(_SECTION_SELECT + " WHERE s.id = ?", (section_id,)) as cur:
            row = await cur.fetchone()
            return section_row(row) if row else None

    async def upsert_manual(self, manual_data: dict) -> None:
        await self.db.execute(
            """INSERT INTO manual_definitions (id, manual_code, manual_name, current_version)
               VALUES (?, ?, ?, ?)
               ON CONFLICT(id) DO UPDATE SET
                   manual_code=excluded.manual_code,
                   manual_name=excluded.manual_name,
                   current_version=excluded.current_version
            """,
            (
                manual_data["id"],
                manual_data["manual_code"],
                manual_data.get("manual_name", ""),
                manual_data.get("current_version", "1.0"),
            ),
        )
        await self.db.commit()

    async def upsert_section(self, section_data: dict) -> None:
        content = section_data.get("content")
        await self.db.execute(
            """INSERT INTO manual_sections (
                   id, manual_id, section_number, title,
                   source_feature_codes_json, source_module_codes_json,
                   content_json, last_generated_at
               ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
               ON CONFLICT(id) DO UPDATE SET
                   manual_id=excluded.manual_id,
                   section_number=excluded.section_number,
                   title=excluded.title,
                   source_feature_codes_json=excluded.source_feature_codes_json,
                   source_module_codes_json=excluded.source_module_codes_json,
                   content_json=excluded.content_json,
                   last_generated_at=excluded.last_generated_at
            """,
            (
                section_data["id"],
                section_data["manual_id"],
                section_data.get("section_number", ""),
                section_data.get("title", ""),
                encode_code_list(section_data.get("source_feature_codes")),
                encode_code_list(section_data.get("source_module_codes")),
                json.dumps(content) if content is not None else None,
                section_data.get("last_generated_at"),
            ),
        )
        await self.db.commit()
