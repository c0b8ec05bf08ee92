import io
import json
import sqlite3
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path
from unittest.mock import patch

from backend.db.sqlite_migrations import _TABLES
from backend.scripts import coverage_audit


def _seed(path: Path) -> None:
    conn = sqlite3.connect(str(path))
    try:
        conn.executescript(_TABLES)
        conn.executemany(
            "INSERT INTO application_modules (id, module_code, module_name) VALUES (?, ?, ?)",
            [("m-hr", "HR", "HR Hub"), ("m-pay", "PAY", "Payroll")],
        )
        conn.executemany(
            "INSERT INTO application_features (id, feature_code, feature_name, module_id) VALUES (?, ?, ?, ?)",
            [
                ("f1", "HR_LEAVE", "Leave", "m-hr"),
                ("f2", "HR_ABSENCE", "Absence", "m-hr"),
                ("f3", "PAY_RUN", "Pay Run", "m-pay"),
            ],
        )
        conn.execute(
            "INSERT INTO enablement_content_status (feature_code, documentation_status, updated_at) VALUES (?, ?, ?)",
            ("HR_LEAVE", "complete", "2099-01-01T00:00:00Z"),
        )
        conn.execute(
            "INSERT INTO manual_definitions (id, manual_code, manual_name) VALUES (?, ?, ?)",
            ("man-1", "ADMIN", "Administrator Manual"),
        )
        conn.executemany(
            "INSERT INTO manual_sections (id, manual_id, section_number, title, source_feature_codes_json) VALUES (?, ?, ?, ?, ?)",
            [
                ("s1", "man-1", "1.1", "Leave", '["HR_LEAVE", "HR_GHOST"]'),
                ("s2", "man-1", "1.2", "Intro", "[]"),
            ],
        )
        conn.commit()
    finally:
        conn.close()


class CoverageAuditTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.db_path = Path(self._tmp.name) / "docready.db"
        _seed(self.db_path)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _run(self, *args: str) -> tuple[int, str]:
        out = io.StringIO()
        with patch("sys.argv", ["coverage_audit.py", "--db", str(self.db_path), *args]), redirect_stdout(out):
            code = coverage_audit.main()
        return code, out.getvalue()

    def test_json_output_with_validation(self) -> None:
        code, output = self._run("--json", "--validate")

        self.assertEqual(code, 0)
        payload = json.loads(output)
        self.assertEqual(payload["analysis"]["totalFeatures"], 3)
        self.assertEqual(payload["analysis"]["documented"], 1)
        self.assertEqual(payload["analysis"]["coveragePercentage"], 33)
        self.assertEqual(payload["health_status"], "warning")
        self.assertEqual(payload["orphanedDocumentation"][0]["orphaned_codes"], ["HR_GHOST"])
        self.assertEqual([s["section_id"] for s in payload["unmappedSections"]], ["s2"])

    def test_module_filter_keeps_full_registry_for_orphans(self) -> None:
        code, output = self._run("--json", "--module", "PAY")

        payload = json.loads(output)
        self.assertEqual(code, 0)
        self.assertEqual(list(payload["analysis"]["moduleBreakdown"]), ["PAY"])
        self.assertEqual(payload["health_status"], "warning")

    def test_text_output_lists_modules(self) -> None:
        code, output = self._run("--validate")

        self.assertEqual(code, 0)
        self.assertIn("coverage: 33%", output)
        self.assertIn("HR Hub", output)
        self.assertIn("[warning] ADMIN 1.1 Leave", output)

    def test_missing_database_returns_error_code(self) -> None:
        self.db_path.unlink()

        code, output = self._run()

        self.assertEqual(code, 1)
        self.assertIn("DB not found", output)


if __name__ == "__main__":
    unittest.main()
