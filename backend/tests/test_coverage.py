import unittest
from datetime import datetime, timedelta, timezone

from backend.coverage import (
    build_recommendations,
    compute_coverage,
    is_feature_documented,
    js_round,
    percentage,
    readiness_score,
)
from backend.models import ModuleCoverage

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _feature(code: str, module_code: str, module_name: str = "") -> dict:
    return {
        "feature_code": code,
        "feature_name": code.title(),
        "module_code": module_code,
        "module_name": module_name or module_code.title(),
    }


class CoverageMathTests(unittest.TestCase):
    def test_js_round_rounds_halves_up(self) -> None:
        self.assertEqual(js_round(2.5), 3)
        self.assertEqual(js_round(0.5), 1)
        self.assertEqual(js_round(66.66), 67)
        self.assertEqual(js_round(33.33), 33)

    def test_percentage_with_empty_denominator_is_zero(self) -> None:
        self.assertEqual(percentage(0, 0), 0)
        self.assertEqual(percentage(1, 8), 13)

    def test_readiness_score_is_capped_at_100(self) -> None:
        self.assertEqual(readiness_score(100, 0, 0), 100)
        self.assertEqual(readiness_score(100, 0, 1), 100)

    def test_readiness_score_bonuses_floor_at_zero(self) -> None:
        self.assertEqual(readiness_score(0, 15, 5), 0)
        self.assertEqual(readiness_score(50, 3, 2), 30 + 14 + 10)


class FeatureClassificationTests(unittest.TestCase):
    def test_each_signal_documents_a_feature_on_its_own(self) -> None:
        self.assertTrue(is_feature_documented({"documentation_status": "complete"}, None, False))
        self.assertTrue(is_feature_documented({"documentation_status": "in_progress"}, None, False))
        self.assertTrue(is_feature_documented({"workflow_status": "published"}, None, False))
        self.assertTrue(is_feature_documented({"workflow_status": "documentation"}, None, False))
        self.assertTrue(is_feature_documented(None, {"kb_article"}, False))
        self.assertTrue(is_feature_documented(None, None, True))

    def test_feature_without_any_signal_is_a_gap(self) -> None:
        self.assertFalse(is_feature_documented(None, None, False))
        self.assertFalse(is_feature_documented({"documentation_status": "not_started"}, set(), False))
        self.assertFalse(is_feature_documented({"workflow_status": "draft"}, None, False))


class ComputeCoverageTests(unittest.TestCase):
    def test_two_module_breakdown_and_weakest_module_recommendation(self) -> None:
        features = [
            _feature("X1", "X", "Module X"),
            _feature("X2", "X", "Module X"),
            _feature("X3", "X", "Module X"),
            _feature("X4", "X", "Module X"),
            _feature("Y1", "Y", "Module Y"),
            _feature("Y2", "Y", "Module Y"),
        ]
        statuses = {
            code: {"feature_code": code, "documentation_status": "complete", "updated_at": "2026-02-20T00:00:00Z"}
            for code in ("X1", "X2", "X3")
        }

        report = compute_coverage(features, statuses, {}, set(), NOW)

        self.assertEqual(report.moduleBreakdown["X"].percentage, 75)
        self.assertEqual(report.moduleBreakdown["Y"].percentage, 0)
        self.assertEqual(report.moduleBreakdown["X"].priorityFeatures, ["X4"])
        self.assertEqual(report.moduleBreakdown["Y"].priorityFeatures, ["Y1", "Y2"])
        self.assertEqual(report.coveragePercentage, 50)
        self.assertEqual(report.documented, 3)
        self.assertEqual(report.undocumented, 3)
        self.assertIn("Focus on Module Y - only 0% documented", report.recommendations)
        self.assertIn("Consider bulk generation for undocumented features", report.recommendations)
        self.assertEqual(report.readinessScore, 60)
        self.assertEqual(report.staleContent, [])

    def test_documented_plus_gaps_equals_total_per_module(self) -> None:
        features = [_feature(f"F{i}", "M" if i % 2 else "N") for i in range(9)]
        statuses = {"F1": {"workflow_status": "published"}, "F4": {"documentation_status": "in_progress"}}
        artifacts = {"F6": {"sop"}}

        report = compute_coverage(features, statuses, artifacts, set(), NOW)

        for coverage in report.moduleBreakdown.values():
            self.assertEqual(coverage.documented + coverage.gaps, coverage.total)
        self.assertEqual(sum(c.total for c in report.moduleBreakdown.values()), report.totalFeatures)
        self.assertEqual(report.documented, 3)

    def test_manual_section_on_module_documents_all_its_features(self) -> None:
        features = [_feature("A1", "A"), _feature("A2", "A"), _feature("B1", "B")]

        report = compute_coverage(features, {}, {}, {"A"}, NOW)

        self.assertEqual(report.moduleBreakdown["A"].documented, 2)
        self.assertEqual(report.moduleBreakdown["B"].documented, 0)

    def test_priority_features_are_capped(self) -> None:
        features = [_feature(f"P{i}", "P") for i in range(8)]

        report = compute_coverage(features, {}, {}, set(), NOW, priority_limit=5)

        self.assertEqual(report.moduleBreakdown["P"].gaps, 8)
        self.assertEqual(report.moduleBreakdown["P"].priorityFeatures, ["P0", "P1", "P2", "P3", "P4"])

    def test_missing_module_falls_back_to_unknown(self) -> None:
        report = compute_coverage([{"feature_code": "LOOSE"}], {}, {}, set(), NOW)

        self.assertIn("unknown", report.moduleBreakdown)
        self.assertEqual(report.moduleBreakdown["unknown"].moduleName, "Unknown")

    def test_stale_threshold_is_strictly_more_than_ninety_days(self) -> None:
        features = [_feature("OLD", "M"), _feature("EDGE", "M"), _feature("UNDATED", "M")]
        statuses = {
            "OLD": {"documentation_status": "complete", "updated_at": (NOW - timedelta(days=91)).isoformat()},
            "EDGE": {"documentation_status": "complete", "updated_at": (NOW - timedelta(days=90)).isoformat()},
            "UNDATED": {"documentation_status": "complete", "updated_at": None},
        }

        report = compute_coverage(features, statuses, {}, set(), NOW, stale_after_days=90)

        self.assertEqual([entry.feature_code for entry in report.staleContent], ["OLD"])
        self.assertEqual(report.staleContent[0].daysSinceUpdate, 91)
        self.assertIn("1 features have stale documentation (90+ days old)", report.recommendations)

    def test_undocumented_features_are_never_stale(self) -> None:
        features = [_feature("GAP", "M")]
        statuses = {"GAP": {"documentation_status": "not_started", "updated_at": "2020-01-01T00:00:00Z"}}

        report = compute_coverage(features, statuses, {}, set(), NOW)

        self.assertEqual(report.staleContent, [])

    def test_stale_list_is_truncated_but_bonus_uses_full_count(self) -> None:
        features = [_feature(f"S{i:02d}", "M") for i in range(12)]
        statuses = {
            f"S{i:02d}": {"documentation_status": "complete", "updated_at": "2025-01-01T00:00:00Z"}
            for i in range(12)
        }

        report = compute_coverage(features, statuses, {}, set(), NOW, stale_limit=10)

        self.assertEqual(len(report.staleContent), 10)
        self.assertIn("12 features have stale documentation (90+ days old)", report.recommendations)
        # 100 * 0.6 + max(0, 20 - 24) + 20 (single recommendation)
        self.assertEqual(report.readinessScore, 80)

    def test_empty_registry_reports_zero_coverage(self) -> None:
        report = compute_coverage([], {}, {}, set(), NOW)

        self.assertEqual(report.totalFeatures, 0)
        self.assertEqual(report.coveragePercentage, 0)
        self.assertEqual(report.moduleBreakdown, {})
        self.assertEqual(report.recommendations, ["Consider bulk generation for undocumented features"])
        self.assertEqual(report.readinessScore, 40)


class RecommendationTests(unittest.TestCase):
    def test_tied_weakest_modules_resolve_by_module_code(self) -> None:
        breakdown = {
            "ZETA": ModuleCoverage(moduleName="Zeta", total=2, gaps=2, percentage=0),
            "ALPHA": ModuleCoverage(moduleName="Alpha", total=3, gaps=3, percentage=0),
        }

        recommendations = build_recommendations(breakdown, 0, 0)

        self.assertEqual(recommendations[0], "Focus on Alpha - only 0% documented")

    def test_no_focus_message_when_weakest_module_is_half_covered(self) -> None:
        breakdown = {"M": ModuleCoverage(moduleName="M", total=2, documented=1, gaps=1, percentage=50)}

        self.assertEqual(build_recommendations(breakdown, 0, 80), [])


if __name__ == "__main__":
    unittest.main()
