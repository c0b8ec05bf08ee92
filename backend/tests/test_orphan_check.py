import unittest

from backend.orphan_check import check_sections, health_score, health_status, section_feature_codes


def _section(section_id: str, codes, number: str = "1.1") -> dict:
    return {
        "id": section_id,
        "section_number": number,
        "title": f"Section {section_id}",
        "manual_code": "ADMIN",
        "source_feature_codes": codes,
    }


class CheckSectionsTests(unittest.TestCase):
    def test_partially_valid_section_is_a_warning_orphan(self) -> None:
        result = check_sections([_section("s1", ["VALID_CODE", "GHOST_CODE"])], {"VALID_CODE"})

        self.assertEqual(result.orphaned_count, 1)
        orphan = result.orphaned[0]
        self.assertEqual(orphan.orphaned_codes, ["GHOST_CODE"])
        self.assertEqual(orphan.valid_codes, ["VALID_CODE"])
        self.assertEqual(orphan.severity, "warning")
        self.assertEqual(orphan.section_title, "Section s1")
        self.assertEqual(orphan.action_required, "Remove invalid codes or add features to registry")
        self.assertEqual(result.unmapped, [])

    def test_fully_invalid_section_is_critical(self) -> None:
        result = check_sections([_section("s1", ["GONE_1", "GONE_2"])], {"VALID_CODE"})

        self.assertEqual(result.orphaned[0].severity, "critical")
        self.assertEqual(result.orphaned[0].valid_codes, [])

    def test_empty_code_list_is_unmapped_only(self) -> None:
        result = check_sections([_section("s1", [])], {"VALID_CODE"})

        self.assertEqual(result.orphaned, [])
        self.assertEqual([item.section_id for item in result.unmapped], ["s1"])
        self.assertEqual(result.total_sections, 1)

    def test_null_code_list_is_unmapped_but_not_counted_as_linked(self) -> None:
        result = check_sections([_section("s1", None), _section("s2", ["VALID_CODE"])], {"VALID_CODE"})

        self.assertEqual(result.unmapped_count, 1)
        self.assertEqual(result.total_sections, 1)
        self.assertEqual(len(result.valid_mappings), 1)
        self.assertEqual(result.valid_mappings[0].feature_codes, ["VALID_CODE"])

    def test_sections_fall_into_exactly_one_bucket(self) -> None:
        sections = [
            _section("ok", ["A"]),
            _section("warn", ["A", "X"]),
            _section("crit", ["X"]),
            _section("empty", []),
            _section("null", None),
        ]

        result = check_sections(sections, {"A"})

        buckets = (
            [m.section_number for m in result.valid_mappings],
            [o.section_id for o in result.orphaned],
            [u.section_id for u in result.unmapped],
        )
        self.assertEqual(sum(len(bucket) for bucket in buckets), len(sections))
        self.assertEqual(buckets[1], ["warn", "crit"])
        self.assertEqual(buckets[2], ["empty", "null"])

    def test_section_feature_codes_tolerates_malformed_values(self) -> None:
        self.assertIsNone(section_feature_codes({}))
        self.assertEqual(section_feature_codes({"source_feature_codes": "A,B"}), [])
        self.assertEqual(section_feature_codes({"source_feature_codes": ["A", None]}), ["A"])


class HealthScoreTests(unittest.TestCase):
    def test_clean_catalogue_scores_above_100_with_valid_bonus(self) -> None:
        self.assertEqual(health_score(0, 0, 5), 105)
        self.assertEqual(health_score(0, 0, 40), 120)

    def test_penalties_are_capped_and_score_never_negative(self) -> None:
        self.assertEqual(health_score(3, 4, 0), 100 - 30 - 8)
        self.assertEqual(health_score(20, 100, 0), 20)
        self.assertEqual(health_score(6, 0, 0), 50)
        self.assertGreaterEqual(health_score(100, 100, 0), 0)

    def test_health_status_thresholds(self) -> None:
        self.assertEqual(health_status(0, 0), "healthy")
        self.assertEqual(health_status(0, 10), "healthy")
        self.assertEqual(health_status(0, 11), "warning")
        self.assertEqual(health_status(1, 0), "warning")
        self.assertEqual(health_status(5, 0), "warning")
        self.assertEqual(health_status(6, 0), "critical")


if __name__ == "__main__":
    unittest.main()
