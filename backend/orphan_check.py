"""Manual section <-> feature registry consistency checks."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from backend.models import HealthStatus, OrphanedReference, UnmappedSection


@dataclass
class ValidMapping:
    section_number: str
    feature_codes: list[str]


@dataclass
class ConsistencyResult:
    total_sections: int = 0
    orphaned: list[OrphanedReference] = field(default_factory=list)
    unmapped: list[UnmappedSection] = field(default_factory=list)
    valid_mappings: list[ValidMapping] = field(default_factory=list)

    @property
    def orphaned_count(self) -> int:
        return len(self.orphaned)

    @property
    def unmapped_count(self) -> int:
        return len(self.unmapped)


def section_feature_codes(section: dict[str, Any]) -> list[str] | None:
    codes = section.get("source_feature_codes")
    if codes is None:
        return None
    if not isinstance(codes, (list, tuple)):
        return []
    return [str(code) for code in codes if code is not None]


def check_sections(sections: list[dict[str, Any]], valid_codes: set[str]) -> ConsistencyResult:
    """Partition manual sections into orphaned, unmapped and cleanly mapped."""
    result = ConsistencyResult()
    for section in sections:
        codes = section_feature_codes(section)
        section_id = str(section.get("id") or "")
        section_number = str(section.get("section_number") or "")
        title = str(section.get("title") or "")
        manual_code = str(section.get("manual_code") or "")

        if codes is not None:
            result.total_sections += 1
        if not codes:
            result.unmapped.append(
                UnmappedSection(
                    section_id=section_id,
                    section_number=section_number,
                    title=title,
                    manual_code=manual_code,
                )
            )
            continue

        orphaned_codes = [code for code in codes if code not in valid_codes]
        known_codes = [code for code in codes if code in valid_codes]
        if not orphaned_codes:
            result.valid_mappings.append(ValidMapping(section_number=section_number, feature_codes=known_codes))
            continue

        result.orphaned.append(
            OrphanedReference(
                section_id=section_id,
                section_number=section_number,
                section_title=title,
                manual_code=manual_code,
                orphaned_codes=orphaned_codes,
                valid_codes=known_codes,
                severity="critical" if len(orphaned_codes) == len(codes) else "warning",
            )
        )
    return result


def health_score(orphaned_count: int, unmapped_count: int, valid_count: int) -> int:
    orphan_penalty = min(50, orphaned_count * 10)
    unmapped_penalty = min(30, unmapped_count * 2)
    valid_bonus = min(20, valid_count) if valid_count > 0 else 0
    return max(0, 100 - orphan_penalty - unmapped_penalty + valid_bonus)


def health_status(orphaned_count: int, unmapped_count: int) -> HealthStatus:
    if orphaned_count > 5:
        return "critical"
    if orphaned_count > 0 or unmapped_count > 10:
        return "warning"
    return "healthy"
