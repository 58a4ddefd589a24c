"""Tests for timeline granularity and bucketing."""
import unittest
from datetime import date

from arrests.timebuckets import Granularity, bucket_sql, choose_granularity, truncate


class ChooseGranularityTest(unittest.TestCase):
    def test_boundaries(self) -> None:
        self.assertEqual(Granularity.DAY, choose_granularity(date(2024, 1, 1), date(2024, 1, 15)))
        self.assertEqual(Granularity.WEEK, choose_granularity(date(2024, 1, 1), date(2024, 3, 1)))
        self.assertEqual(Granularity.MONTH, choose_granularity(date(2023, 1, 1), date(2024, 6, 1)))

    def test_edges(self) -> None:
        self.assertEqual(Granularity.DAY, choose_granularity(date(2024, 1, 1), date(2024, 1, 31)))
        self.assertEqual(Granularity.WEEK, choose_granularity(date(2024, 1, 1), date(2024, 2, 1)))
        self.assertEqual(Granularity.WEEK, choose_granularity(date(2023, 1, 1), date(2024, 1, 1)))
        self.assertEqual(Granularity.MONTH, choose_granularity(date(2023, 1, 1), date(2024, 1, 2)))

    def test_open_ended_ranges_use_weeks(self) -> None:
        self.assertEqual(Granularity.WEEK, choose_granularity(None, None))
        self.assertEqual(Granularity.WEEK, choose_granularity(date(2024, 1, 1), None))
        self.assertEqual(Granularity.WEEK, choose_granularity(None, date(2024, 1, 1)))

    def test_inverted_range(self) -> None:
        self.assertEqual(Granularity.DAY, choose_granularity(date(2024, 3, 1), date(2024, 1, 1)))


class TruncateTest(unittest.TestCase):
    def test_day(self) -> None:
        self.assertEqual(date(2024, 1, 10), truncate(date(2024, 1, 10), Granularity.DAY))

    def test_week_starts_monday(self) -> None:
        # 2024-01-10 is a Wednesday
        self.assertEqual(date(2024, 1, 8), truncate(date(2024, 1, 10), Granularity.WEEK))
        self.assertEqual(date(2024, 1, 8), truncate(date(2024, 1, 8), Granularity.WEEK))
        self.assertEqual(date(2024, 1, 8), truncate(date(2024, 1, 14), Granularity.WEEK))
        self.assertEqual(date(2024, 1, 1), truncate(date(2024, 1, 1), Granularity.WEEK))
        # 2023-12-31 is a Sunday
        self.assertEqual(date(2023, 12, 25), truncate(date(2023, 12, 31), Granularity.WEEK))

    def test_month(self) -> None:
        self.assertEqual(date(2024, 2, 1), truncate(date(2024, 2, 29), Granularity.MONTH))

    def test_sql(self) -> None:
        self.assertEqual(
            "CAST(DATE_TRUNC('month', arrest_date) AS DATE)",
            bucket_sql("arrest_date", Granularity.MONTH),
        )
