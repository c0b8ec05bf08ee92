import unittest
from datetime import date, datetime, timedelta, timezone

from backend.date_utils import parse_timestamp, timestamp_text, whole_days_between


class DateUtilsTests(unittest.TestCase):
    def test_parse_timestamp_normalizes_to_utc(self) -> None:
        self.assertEqual(
            parse_timestamp("2026-01-10T08:00:00Z"),
            datetime(2026, 1, 10, 8, 0, tzinfo=timezone.utc),
        )
        self.assertEqual(
            parse_timestamp("2026-01-10T10:00:00+02:00"),
            datetime(2026, 1, 10, 8, 0, tzinfo=timezone.utc),
        )
        self.assertEqual(parse_timestamp("2026-01-10"), datetime(2026, 1, 10, tzinfo=timezone.utc))
        self.assertEqual(parse_timestamp(date(2026, 1, 10)), datetime(2026, 1, 10, tzinfo=timezone.utc))
        self.assertEqual(
            parse_timestamp(datetime(2026, 1, 10, 8, 0)),
            datetime(2026, 1, 10, 8, 0, tzinfo=timezone.utc),
        )

    def test_parse_timestamp_accepts_postgres_fractions_and_offsets(self) -> None:
        self.assertEqual(
            parse_timestamp("2026-01-10T08:00:00.12345+00:00"),
            datetime(2026, 1, 10, 8, 0, 0, 123450, tzinfo=timezone.utc),
        )
        self.assertEqual(
            parse_timestamp("2026-01-10 08:00:00.1234567Z"),
            datetime(2026, 1, 10, 8, 0, 0, 123456, tzinfo=timezone.utc),
        )
        self.assertEqual(
            parse_timestamp("2026-01-10 10:00:00.5+02"),
            datetime(2026, 1, 10, 8, 0, 0, 500000, tzinfo=timezone.utc),
        )

    def test_parse_timestamp_rejects_garbage(self) -> None:
        self.assertIsNone(parse_timestamp(None))
        self.assertIsNone(parse_timestamp(""))
        self.assertIsNone(parse_timestamp("yesterday"))
        self.assertIsNone(parse_timestamp("2026-13-45"))
        self.assertIsNone(parse_timestamp(12345))

    def test_whole_days_between_floors_partial_days(self) -> None:
        start = datetime(2026, 1, 1, tzinfo=timezone.utc)
        self.assertEqual(whole_days_between(start, start + timedelta(days=90, hours=23)), 90)
        self.assertEqual(whole_days_between(start, start + timedelta(days=91)), 91)
        self.assertEqual(whole_days_between(start, start), 0)

    def test_timestamp_text(self) -> None:
        self.assertEqual(timestamp_text(datetime(2026, 1, 10, 8, 0, tzinfo=timezone.utc)), "2026-01-10T08:00:00Z")
        self.assertEqual(timestamp_text("2026-01-10"), "2026-01-10")
        self.assertEqual(timestamp_text(None), "")


if __name__ == "__main__":
    unittest.main()
