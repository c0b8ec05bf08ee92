import unittest

import aiosqlite

from backend.db.repositories.catalog import SqliteCatalogRepository
from backend.db.repositories.content import SqliteContentRepository
from backend.db.repositories.manuals import SqliteManualRepository, decode_code_list
from backend.db.sqlite_migrations import run_migrations


class CatalogRepositoryTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.db = await aiosqlite.connect(":memory:")
        self.db.row_factory = aiosqlite.Row
        await run_migrations(self.db)
        self.catalog = SqliteCatalogRepository(self.db)
        await self.catalog.upsert_module({"id": "m-pay", "module_code": "PAY", "module_name": "Payroll"})
        await self.catalog.upsert_module({"id": "m-hr", "module_code": "HR", "module_name": "HR Hub"})
        await self.catalog.upsert_feature(
            {
                "id": "f-2",
                "feature_code": "HR_LEAVE",
                "feature_name": "Leave Requests",
                "module_id": "m-hr",
                "workflow_steps": {"steps": ["submit", "approve"]},
            }
        )
        await self.catalog.upsert_feature({"id": "f-1", "feature_code": "HR_ABSENCE", "feature_name": "Absence", "module_id": "m-hr"})
        await self.catalog.upsert_feature({"id": "f-3", "feature_code": "PAY_RUN", "feature_name": "Pay Run", "module_id": "m-pay"})
        await self.catalog.upsert_feature(
            {"id": "f-4", "feature_code": "PAY_OLD", "feature_name": "Legacy", "module_id": "m-pay", "is_active": False}
        )

    async def asyncTearDown(self) -> None:
        await self.db.close()

    async def test_migrations_are_idempotent(self) -> None:
        await run_migrations(self.db)
        async with self.db.execute("SELECT COUNT(*) FROM schema_version") as cur:
            row = await cur.fetchone()
        self.assertEqual(row[0], 1)

    async def test_version_three_database_gains_quickstart_status(self) -> None:
        legacy = await aiosqlite.connect(":memory:")
        try:
            await legacy.executescript(
                """
                CREATE TABLE schema_version (version INTEGER NOT NULL, applied TEXT NOT NULL DEFAULT (datetime('now')));
                INSERT INTO schema_version (version) VALUES (3);
                CREATE TABLE enablement_quickstart_templates (id TEXT PRIMARY KEY, module_code TEXT NOT NULL);
                INSERT INTO enablement_quickstart_templates (id, module_code) VALUES ('qs-1', 'HR');
                """
            )
            legacy.row_factory = aiosqlite.Row

            await run_migrations(legacy)

            rows = await SqliteContentRepository(legacy).list_quickstart_templates()
            self.assertEqual(rows, [{"id": "qs-1", "module_code": "HR", "status": "draft"}])
        finally:
            await legacy.close()

    async def test_active_features_are_joined_and_ordered(self) -> None:
        rows = await self.catalog.list_active_features()

        self.assertEqual([r["feature_code"] for r in rows], ["HR_ABSENCE", "HR_LEAVE", "PAY_RUN"])
        self.assertEqual(rows[0]["module_code"], "HR")
        self.assertEqual(rows[0]["module_name"], "HR Hub")
        self.assertTrue(rows[0]["is_active"])
        self.assertEqual(rows[1]["workflow_steps"], {"steps": ["submit", "approve"]})

    async def test_active_features_filtered_by_module(self) -> None:
        rows = await self.catalog.list_active_features("PAY")

        self.assertEqual([r["feature_code"] for r in rows], ["PAY_RUN"])

    async def test_lookup_helpers(self) -> None:
        self.assertIsNone(await self.catalog.get_feature("MISSING"))
        feature = await self.catalog.get_feature("PAY_OLD")
        self.assertFalse(feature["is_active"])

        module = await self.catalog.get_module("HR")
        module_features = await self.catalog.list_module_features(module["id"])
        self.assertEqual([f["feature_code"] for f in module_features], ["HR_ABSENCE", "HR_LEAVE"])

        by_codes = await self.catalog.list_features_by_codes(["PAY_RUN", "GHOST"])
        self.assertEqual([f["feature_code"] for f in by_codes], ["PAY_RUN"])
        self.assertEqual(await self.catalog.list_features_by_codes([]), [])

        modules = await self.catalog.list_active_modules()
        self.assertEqual([m["module_code"] for m in modules], ["HR", "PAY"])


class ContentAndManualRepositoryTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.db = await aiosqlite.connect(":memory:")
        self.db.row_factory = aiosqlite.Row
        await run_migrations(self.db)
        self.content = SqliteContentRepository(self.db)
        self.manuals = SqliteManualRepository(self.db)

    async def asyncTearDown(self) -> None:
        await self.db.close()

    async def test_status_rows_are_returned_oldest_first(self) -> None:
        await self.content.add_content_status(
            {"feature_code": "HR_LEAVE", "documentation_status": "complete", "updated_at": "2026-02-01T00:00:00Z"}
        )
        await self.content.add_content_status(
            {"feature_code": "HR_LEAVE", "documentation_status": "in_progress", "updated_at": "2025-01-01T00:00:00Z"}
        )

        rows = await self.content.list_content_status()
        latest = await self.content.get_content_status("HR_LEAVE")

        self.assertEqual([r["documentation_status"] for r in rows], ["in_progress", "complete"])
        self.assertEqual(latest["documentation_status"], "complete")

    async def test_artifacts_and_quickstarts(self) -> None:
        await self.content.upsert_artifact({"artifact_id": "a1", "feature_code": "HR_LEAVE", "artifact_type": "kb_article"})
        await self.content.upsert_artifact({"artifact_id": "a1", "feature_code": "HR_LEAVE", "artifact_type": "sop"})
        await self.content.upsert_artifact({"artifact_id": "a2", "feature_code": None, "artifact_type": "sop"})
        await self.content.add_quickstart_template("qs-1", "HR")
        await self.content.add_quickstart_template("qs-2", "PAY", status="published")

        artifacts = await self.content.list_artifacts()
        self.assertEqual(len(artifacts), 2)
        feature_artifacts = await self.content.list_feature_artifacts("HR_LEAVE")
        self.assertEqual([a["artifact_type"] for a in feature_artifacts], ["sop"])
        self.assertEqual(await self.content.list_quickstart_module_codes(), {"HR", "PAY"})
        templates = await self.content.list_quickstart_templates()
        self.assertEqual([(t["id"], t["status"]) for t in templates], [("qs-1", "draft"), ("qs-2", "published")])

    async def test_section_code_arrays_keep_null_distinct_from_empty(self) -> None:
        await self.manuals.upsert_manual({"id": "man-1", "manual_code": "ADMIN", "manual_name": "Administrator Manual"})
        await self.manuals.upsert_section(
            {"id": "s1", "manual_id": "man-1", "section_number": "1.1", "source_feature_codes": ["HR_LEAVE"]}
        )
        await self.manuals.upsert_section(
            {"id": "s2", "manual_id": "man-1", "section_number": "1.2", "source_feature_codes": []}
        )
        await self.manuals.upsert_section({"id": "s3", "manual_id": "man-1", "section_number": "1.3"})

        sections = await self.manuals.list_sections()

        self.assertEqual([s["source_feature_codes"] for s in sections], [["HR_LEAVE"], [], None])
        self.assertEqual(sections[0]["manual_code"], "ADMIN")
        self.assertEqual(sections[0]["current_version"], "1.0")

    async def test_section_content_is_decoded(self) -> None:
        await self.manuals.upsert_manual({"id": "man-1", "manual_code": "ADMIN", "manual_name": "Administrator Manual"})
        await self.manuals.upsert_section(
            {"id": "s1", "manual_id": "man-1", "content": {"markdown": "# Leave"}, "last_generated_at": "2026-01-05"}
        )

        section = await self.manuals.get_section("s1")

        self.assertEqual(section["content"], {"markdown": "# Leave"})
        self.assertEqual(section["last_generated_at"], "2026-01-05")
        self.assertIsNone(await self.manuals.get_section("missing"))

    def test_decode_code_list_handles_bad_json(self) -> None:
        self.assertIsNone(decode_code_list(None))
        self.assertEqual(decode_code_list("not json"), [])
        self.assertEqual(decode_code_list('{"a": 1}'), [])
        self.assertEqual(decode_code_list('["A", null, "B"]'), ["A", "B"])


if __name__ == "__main__":
    unittest.main()
