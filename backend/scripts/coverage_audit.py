#!/usr/bin/env python3
"""Audit documentation coverage and manual-section consistency.

Usage:
  python backend/scripts/coverage_audit.py
  python backend/scripts/coverage_audit.py --module HR_HUB
  python backend/scripts/coverage_audit.py --validate --json
"""
from __future__ import annotations

import argparse
import json
import sqlite3
from pathlib import Path
from typing import Any

from backend import config
from backend.coverage import compute_coverage
from backend.db.repositories.catalog import feature_row
from backend.db.repositories.manuals import section_row
from backend.orphan_check import check_sections, health_score, health_status
from backend.services.content_snapshot import (
    fold_artifact_types,
    index_status_by_feature,
    modules_with_manual_sections,
)


def _load_features(conn: sqlite3.Connection, module_code: str | None) -> list[dict[str, Any]]:
    query = """
        SELECT f.*, m.module_code, m.module_name
        FROM application_features f
        JOIN application_modules m ON m.id = f.module_id
        WHERE f.is_active = 1
    """
    params: list[Any] = []
    if module_code:
        query += " AND m.module_code = ?"
        params.append(module_code)
    query += " ORDER BY m.module_code, f.feature_code"
    return [feature_row(row) for row in conn.execute(query, params).fetchall()]


def _load_sections(conn: sqlite3.Connection) -> list[dict[str, Any]]:
    rows = conn.execute(
        """
        SELECT s.*, d.manual_code, d.manual_name, d.current_version
        FROM manual_sections s
        JOIN manual_definitions d ON d.id = s.manual_id
        ORDER BY d.manual_code, s.section_number, s.id
        """
    ).fetchall()
    return [section_row(row) for row in rows]


def _audit(conn: sqlite3.Connection, module_code: str | None) -> dict[str, Any]:
    features = _load_features(conn, module_code)
    status_rows = [
        dict(row)
        for row in conn.execute(
            "SELECT * FROM enablement_content_status ORDER BY COALESCE(updated_at, ''), id"
        ).fetchall()
    ]
    artifact_rows = [dict(row) for row in conn.execute("SELECT * FROM enablement_artifacts").fetchall()]
    sections = _load_sections(conn)
    module_codes, _ = modules_with_manual_sections(sections)

    report = compute_coverage(
        features,
        index_status_by_feature(status_rows),
        fold_artifact_types(artifact_rows),
        set(module_codes),
    )
    registry = _load_features(conn, None) if module_code else features
    consistency = check_sections(sections, {str(f["feature_code"]) for f in registry})
    return {
        "report": report,
        "consistency": consistency,
        "health_score": health_score(
            consistency.orphaned_count, consistency.unmapped_count, len(consistency.valid_mappings)
        ),
        "health_status": health_status(consistency.orphaned_count, consistency.unmapped_count),
    }


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("--db", default=config.DB_PATH)
    parser.add_argument("--module", default="")
    parser.add_argument("--validate", action="store_true", help="List orphaned and unmapped sections")
    parser.add_argument("--json", action="store_true")
    args = parser.parse_args()

    db_path = Path(args.db)
    if not db_path.exists():
        print(f"DB not found: {db_path}")
        return 1

    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    try:
        result = _audit(conn, args.module or None)
        report = result["report"]
        consistency = result["consistency"]

        if args.json:
            payload: dict[str, Any] = {
                "db": str(db_path),
                "module_filter": args.module or None,
                "analysis": report.model_dump(),
                "health_score": result["health_score"],
                "health_status": result["health_status"],
            }
            if args.validate:
                payload["orphanedDocumentation"] = [item.model_dump() for item in consistency.orphaned]
                payload["unmappedSections"] = [item.model_dump() for item in consistency.unmapped]
            print(json.dumps(payload, indent=2))
            return 0

        print(f"DB: {db_path}")
        if args.module:
            print(f"Module filter: {args.module}")
        print(f"Features: {report.totalFeatures}  documented: {report.documented}  coverage: {report.coveragePercentage}%")
        print(f"Readiness: {report.readinessScore}  health: {result['health_status']} ({result['health_score']})")
        print("")
        for code, coverage in sorted(report.moduleBreakdown.items()):
            print(f"  {code:<20} {coverage.documented:>4}/{coverage.total:<4} {coverage.percentage:>3}%  {coverage.moduleName}")
            if coverage.priorityFeatures:
                print(f"    priority={', '.join(coverage.priorityFeatures)}")
        if report.recommendations:
            print("")
            for line in report.recommendations:
                print(f"- {line}")
        if args.validate:
            print("")
            print(f"Orphaned sections: {consistency.orphaned_count}")
            for item in consistency.orphaned:
                print(f"  [{item.severity}] {item.manual_code} {item.section_number} {item.section_title}")
                print(f"    orphaned={', '.join(item.orphaned_codes)}")
            print(f"Unmapped sections: {consistency.unmapped_count}")
            for item in consistency.unmapped:
                print(f"  {item.manual_code} {item.section_number} {item.title}")
        return 0
    finally:
        conn.close()


if __name__ == "__main__":
    raise SystemExit(main())
