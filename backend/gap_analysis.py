"""Documentation gap analysis and next-action suggestions."""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Mapping

from backend import config
from backend.coverage import js_round
from backend.date_utils import parse_timestamp, utc_now
from backend.models import (
    CoverageAssessment,
    FeatureGap,
    GapLists,
    GapSummary,
    ModuleDocumentation,
    ModuleGap,
    NextAction,
    OrphanedReference,
    UndocumentedFeature,
)

KB_ARTICLE = "kb_article"
SOP = "sop"
PUBLISHED = "published"

BULK_BATCH_LIMIT = 20
BULK_MODULE_BATCH_LIMIT = 50
PUBLISHED_ARTICLE_TARGET = 50
PUBLISHED_QUICKSTART_TARGET = 10


def has_final_documentation(status: Mapping[str, Any] | None) -> bool:
    if not status:
        return False
    return status.get("documentation_status") == "complete" or status.get("workflow_status") == "published"


def find_gaps(
    features: list[dict[str, Any]],
    status_by_code: Mapping[str, Mapping[str, Any]],
    artifact_types_by_code: Mapping[str, set[str]],
    modules: list[dict[str, Any]],
    quickstart_modules: set[str],
    orphaned: list[OrphanedReference],
    *,
    limit: int | None = None,
) -> tuple[GapLists, GapSummary]:
    """Return truncated gap lists plus untruncated counts.

    A feature lacks documentation only when it has neither a final status
    nor any artifact; in-progress work does not close the gap here.
    """
    max_items = config.LIST_RESPONSE_LIMIT if limit is None else limit
    no_documentation: list[UndocumentedFeature] = []
    no_kb_article: list[FeatureGap] = []
    no_sop: list[FeatureGap] = []

    for feature in features:
        feature_code = str(feature.get("feature_code") or "")
        feature_name = str(feature.get("feature_name") or "")
        types = artifact_types_by_code.get(feature_code) or set()

        if not has_final_documentation(status_by_code.get(feature_code)) and not types:
            no_documentation.append(
                UndocumentedFeature(
                    feature_code=feature_code,
                    feature_name=feature_name,
                    module_code=str(feature.get("module_code") or ""),
                    module_name=str(feature.get("module_name") or ""),
                )
            )
        if KB_ARTICLE not in types:
            no_kb_article.append(FeatureGap(feature_code=feature_code, feature_name=feature_name))
        if SOP not in types:
            no_sop.append(FeatureGap(feature_code=feature_code, feature_name=feature_name))

    no_quickstart = [
        ModuleGap(module_code=str(module.get("module_code") or ""), module_name=str(module.get("module_name") or ""))
        for module in modules
        if module.get("module_code") not in quickstart_modules
    ]

    gaps = GapLists(
        noDocumentation=no_documentation[:max_items],
        noKBArticle=no_kb_article[:max_items],
        noQuickStart=no_quickstart,
        noSOP=no_sop[:max_items],
        orphanedDocumentation=orphaned[:max_items],
    )
    summary = GapSummary(
        undocumentedFeatures=len(no_documentation),
        missingKBArticles=len(no_kb_article),
        missingQuickStarts=len(no_quickstart),
        missingSOPs=len(no_sop),
        orphanedDocumentation=len(orphaned),
    )
    return gaps, summary


def count_final_documentation(status_rows: list[dict[str, Any]]) -> int:
    return sum(1 for row in status_rows if has_final_documentation(row))


def count_stale(
    status_rows: list[dict[str, Any]],
    now: datetime | None = None,
    *,
    stale_after_days: int | None = None,
) -> int:
    now = now or utc_now()
    threshold = timedelta(days=config.STALE_AFTER_DAYS if stale_after_days is None else stale_after_days)
    stale = 0
    for row in status_rows:
        updated_at = parse_timestamp(row.get("updated_at"))
        if updated_at is not None and now - updated_at > threshold:
            stale += 1
    return stale


def coverage_rate(total_features: int, documented: int) -> float:
    if total_features <= 0:
        return 0.0
    return documented / total_features * 100


def suggest_next_actions(total_features: int, documented: int, stale_count: int) -> list[NextAction]:
    rate = coverage_rate(total_features, documented)
    suggestions: list[NextAction] = []

    if rate < 30:
        suggestions.append(
            NextAction(
                action="bulk_generate",
                priority="high",
                title="Start Bulk Generation",
                description=(
                    f"Coverage is only {js_round(rate)}%. Run bulk generation to quickly create "
                    "documentation for undocumented features."
                ),
            )
        )
    elif rate < 70:
        suggestions.append(
            NextAction(
                action="identify_gaps",
                priority="medium",
                title="Review Gap Analysis",
                description="Identify and prioritize remaining undocumented features.",
            )
        )

    if stale_count > 0:
        suggestions.append(
            NextAction(
                action="refresh_stale",
                priority="high" if stale_count > 10 else "medium",
                title="Refresh Stale Content",
                description=(
                    f"{stale_count} items haven't been updated in 90+ days. "
                    "Consider regenerating or reviewing."
                ),
            )
        )

    suggestions.append(
        NextAction(
            action="generate_quickstart",
            priority="low",
            title="Create Quick Starts",
            description="Generate rapid setup guides for modules without quick starts.",
        )
    )
    return suggestions


def bulk_candidates(
    features: list[dict[str, Any]],
    status_codes: set[str],
    *,
    limit: int,
) -> tuple[list[UndocumentedFeature], int]:
    """Features with no content-status row at all, first ``limit`` of them plus the full count."""
    pending = [
        UndocumentedFeature(
            feature_code=str(feature.get("feature_code") or ""),
            feature_name=str(feature.get("feature_name") or ""),
            module_code=str(feature.get("module_code") or ""),
            module_name=str(feature.get("module_name") or ""),
        )
        for feature in features
        if feature.get("feature_code") not in status_codes
    ]
    return pending[:limit], len(pending)


def assess_coverage(
    features: list[dict[str, Any]],
    status_rows: list[dict[str, Any]],
    status_by_code: Mapping[str, Mapping[str, Any]],
    published_articles: int,
    published_quickstarts: int,
) -> CoverageAssessment:
    """Publication-weighted readiness: half coverage, a quarter each for KB and quick-start output."""
    breakdown: dict[str, ModuleDocumentation] = {}
    for feature in features:
        module = breakdown.setdefault(str(feature.get("module_code") or "unknown"), ModuleDocumentation())
        module.total += 1
        if has_final_documentation(status_by_code.get(str(feature.get("feature_code") or ""))):
            module.documented += 1
    for module in breakdown.values():
        module.percentage = js_round(module.documented / module.total * 100) if module.total else 0

    total_features = len(features)
    documented = count_final_documentation(status_rows)
    overall = js_round(coverage_rate(total_features, documented))
    readiness = js_round(
        overall * 0.5
        + min(published_articles / PUBLISHED_ARTICLE_TARGET, 1) * 25
        + min(published_quickstarts / PUBLISHED_QUICKSTART_TARGET, 1) * 25
    )
    return CoverageAssessment(
        totalFeatures=total_features,
        documented=documented,
        overallCoverage=overall,
        publishedArticles=published_articles,
        publishedQuickstarts=published_quickstarts,
        moduleBreakdown=breakdown,
        readinessScore=readiness,
    )
