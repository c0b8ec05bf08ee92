"""Feature registry reader and content status aggregation."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from backend.db.factory import (
    get_catalog_repository,
    get_content_repository,
    get_manual_repository,
)


@dataclass
class ContentSnapshot:
    status_rows: list[dict[str, Any]] = field(default_factory=list)
    status_by_code: dict[str, dict[str, Any]] = field(default_factory=dict)
    artifact_types_by_code: dict[str, set[str]] = field(default_factory=dict)
    sections: list[dict[str, Any]] = field(default_factory=list)
    modules_with_sections: list[str] = field(default_factory=list)
    module_linked_section_count: int = 0

    @property
    def module_section_set(self) -> set[str]:
        return set(self.modules_with_sections)


def index_status_by_feature(rows: list[dict[str, Any]]) -> dict[str, dict[str, Any]]:
    """Keep one status row per feature code; the last row read wins."""
    indexed: dict[str, dict[str, Any]] = {}
    for row in rows:
        code = row.get("feature_code")
        if code:
            indexed[str(code)] = row
    return indexed


def fold_artifact_types(rows: list[dict[str, Any]]) -> dict[str, set[str]]:
    types_by_code: dict[str, set[str]] = {}
    for row in rows:
        code = row.get("feature_code")
        if not code:
            continue
        types_by_code.setdefault(str(code), set()).add(str(row.get("artifact_type") or ""))
    return types_by_code


def modules_with_manual_sections(sections: list[dict[str, Any]]) -> tuple[list[str], int]:
    """Module codes cited by any section, in first-seen order, plus the citing section count."""
    seen: dict[str, None] = {}
    linked_sections = 0
    for section in sections:
        codes = section.get("source_module_codes")
        if codes is None:
            continue
        linked_sections += 1
        for code in codes:
            if code:
                seen.setdefault(str(code), None)
    return list(seen), linked_sections


async def load_feature_registry(db: Any, module_code: str | None = None) -> list[dict[str, Any]]:
    """Every active feature joined with its module code and name.

    Read errors propagate; callers never receive a partial registry.
    """
    repo = get_catalog_repository(db)
    return await repo.list_active_features(module_code or None)


async def load_content_snapshot(db: Any) -> ContentSnapshot:
    content_repo = get_content_repository(db)
    manual_repo = get_manual_repository(db)

    status_rows = await content_repo.list_content_status()
    artifact_rows = await content_repo.list_artifacts()
    sections = await manual_repo.list_sections()
    module_codes, linked_count = modules_with_manual_sections(sections)

    return ContentSnapshot(
        status_rows=status_rows,
        status_by_code=index_status_by_feature(status_rows),
        artifact_types_by_code=fold_artifact_types(artifact_rows),
        sections=sections,
        modules_with_sections=module_codes,
        module_linked_section_count=linked_count,
    )
