"""Documentation coverage calculator shared by the content agent API and CLI tooling."""
from __future__ import annotations

import math
from datetime import datetime
from typing import Any, Iterable, Mapping

from backend import config
from backend.date_utils import parse_timestamp, timestamp_text, utc_now, whole_days_between
from backend.models import CoverageReport, ModuleCoverage, StaleEntry

DOCUMENTED_DOC_STATUSES = {"complete", "in_progress"}
DOCUMENTED_WORKFLOW_STATUSES = {"published", "documentation"}

_UNKNOWN_MODULE_CODE = "unknown"
_UNKNOWN_MODULE_NAME = "Unknown"


def js_round(value: float) -> int:
    """Round half up, matching the dashboard's percentage arithmetic."""
    return int(math.floor(value + 0.5))


def percentage(part: int, whole: int) -> int:
    if whole <= 0:
        return 0
    return js_round(part / whole * 100)


def is_feature_documented(
    status: Mapping[str, Any] | None,
    artifact_types: Iterable[str] | None,
    module_has_manual_section: bool,
) -> bool:
    if status:
        if status.get("documentation_status") in DOCUMENTED_DOC_STATUSES:
            return True
        if status.get("workflow_status") in DOCUMENTED_WORKFLOW_STATUSES:
            return True
    if artifact_types:
        return True
    return module_has_manual_section


def build_recommendations(
    module_breakdown: Mapping[str, ModuleCoverage],
    stale_count: int,
    coverage_percentage: int,
) -> list[str]:
    recommendations: list[str] = []
    # Ties on percentage resolve by module code so the wording is stable.
    ordered = sorted(module_breakdown.items(), key=lambda item: (item[1].percentage, item[0]))
    if ordered and ordered[0][1].percentage < 50:
        weakest = ordered[0][1]
        recommendations.append(f"Focus on {weakest.moduleName} - only {weakest.percentage}% documented")
    if stale_count > 0:
        recommendations.append(f"{stale_count} features have stale documentation (90+ days old)")
    if coverage_percentage < 70:
        recommendations.append("Consider bulk generation for undocumented features")
    return recommendations


def readiness_score(coverage_percentage: int, stale_count: int, recommendation_count: int) -> int:
    stale_bonus = 20 if stale_count == 0 else max(0, 20 - stale_count * 2)
    recommendation_bonus = 20 if recommendation_count <= 1 else max(0, 20 - recommendation_count * 5)
    return min(100, js_round(coverage_percentage * 0.6 + stale_bonus + recommendation_bonus))


def compute_coverage(
    features: list[dict[str, Any]],
    status_by_code: Mapping[str, Mapping[str, Any]],
    artifact_types_by_code: Mapping[str, set[str]],
    modules_with_sections: set[str],
    now: datetime | None = None,
    *,
    stale_after_days: int | None = None,
    priority_limit: int | None = None,
    stale_limit: int | None = None,
) -> CoverageReport:
    """Classify every feature and roll the results up into a coverage report.

    ``features`` rows carry ``feature_code``, ``module_code`` and ``module_name``
    as returned by the registry reader. Iteration order decides which
    undocumented codes become a module's priority features and which stale
    entries are reported.
    """
    now = now or utc_now()
    stale_after = config.STALE_AFTER_DAYS if stale_after_days is None else stale_after_days
    max_priority = config.PRIORITY_FEATURE_LIMIT if priority_limit is None else priority_limit
    max_stale = config.STALE_REPORT_LIMIT if stale_limit is None else stale_limit

    module_breakdown: dict[str, ModuleCoverage] = {}
    stale_content: list[StaleEntry] = []

    for feature in features:
        feature_code = str(feature.get("feature_code") or "")
        module_code = str(feature.get("module_code") or _UNKNOWN_MODULE_CODE)
        module_name = str(feature.get("module_name") or _UNKNOWN_MODULE_NAME)

        coverage = module_breakdown.get(module_code)
        if coverage is None:
            coverage = ModuleCoverage(moduleName=module_name)
            module_breakdown[module_code] = coverage
        coverage.total += 1

        status = status_by_code.get(feature_code)
        documented = is_feature_documented(
            status,
            artifact_types_by_code.get(feature_code),
            module_code in modules_with_sections,
        )
        if not documented:
            coverage.gaps += 1
            if len(coverage.priorityFeatures) < max_priority:
                coverage.priorityFeatures.append(feature_code)
            continue

        coverage.documented += 1
        updated_raw = status.get("updated_at") if status else None
        updated_at = parse_timestamp(updated_raw)
        if updated_at is None:
            continue
        days_since = whole_days_between(updated_at, now)
        if days_since > stale_after:
            stale_content.append(
                StaleEntry(
                    feature_code=feature_code,
                    lastUpdated=timestamp_text(updated_raw),
                    daysSinceUpdate=days_since,
                )
            )

    for coverage in module_breakdown.values():
        coverage.percentage = percentage(coverage.documented, coverage.total)

    total_features = len(features)
    documented_total = sum(item.documented for item in module_breakdown.values())
    coverage_percentage = percentage(documented_total, total_features)
    recommendations = build_recommendations(module_breakdown, len(stale_content), coverage_percentage)

    return CoverageReport(
        totalFeatures=total_features,
        documented=documented_total,
        undocumented=total_features - documented_total,
        coveragePercentage=coverage_percentage,
        moduleBreakdown=module_breakdown,
        readinessScore=readiness_score(coverage_percentage, len(stale_content), len(recommendations)),
        recommendations=recommendations,
        staleContent=stale_content[:max_stale],
    )
