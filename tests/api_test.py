"""Tests for the HTTP API."""
import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from fastapi.testclient import TestClient

from api.cache import ResponseCache
from api.main import app, cache
from tests.arrest_fixtures import SCENARIO, write_arrests


class ApiTest(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        path = write_arrests(Path(self._tmp.name) / "arrests.parquet", SCENARIO)
        self.env = patch.dict(os.environ, {"ARREST_LOG_SOURCE": str(path)})
        self.env.start()
        cache.clear()
        self.client = TestClient(app)

    def tearDown(self) -> None:
        self.env.stop()
        cache.clear()
        self._tmp.cleanup()

    def test_stats(self) -> None:
        resp = self.client.get("/arrests/stats", params={"town": "Natick"})
        self.assertEqual(200, resp.status_code)
        body = resp.json()
        self.assertEqual(2, body["stats"]["total"])
        self.assertEqual(30, body["stats"]["averageAge"])
        self.assertEqual([{"city": "NATICK", "count": 2}], body["topCities"])
        self.assertEqual([{"sex": "M", "count": 1}], body["sexBreakdown"])
        self.assertEqual(7, len(body["dayOfWeekData"]))

    def test_stats_with_unparsable_date(self) -> None:
        resp = self.client.get("/arrests/stats", params={"dateFrom": "not-a-date"})
        self.assertEqual(200, resp.status_code)
        self.assertEqual(3, resp.json()["stats"]["total"])

    def test_heatmap(self) -> None:
        resp = self.client.get("/arrests/heatmap", params={"dateTo": "2024-03-01"})
        self.assertEqual(200, resp.status_code)
        self.assertEqual({"cityCounts": [{"city": "NATICK", "count": 2}]}, resp.json())

    def test_arrests(self) -> None:
        resp = self.client.get("/arrests", params={"city": "natick, ma", "limit": 1, "page": 2})
        self.assertEqual(200, resp.status_code)
        body = resp.json()
        self.assertEqual(2, body["total"])
        self.assertEqual(2, body["totalPages"])
        self.assertEqual(1, body["pageSize"])
        self.assertEqual("2024-01-10", body["records"][0]["arrest_date"])

    def test_filters(self) -> None:
        resp = self.client.get("/filters")
        self.assertEqual(200, resp.status_code)
        self.assertEqual(["BOSTON", "NATICK"], resp.json()["towns"])

    def test_missing_configuration(self) -> None:
        with patch.dict(os.environ, {"ARREST_LOG_SOURCE": ""}):
            resp = self.client.get("/arrests/stats")
        self.assertEqual(500, resp.status_code)
        self.assertEqual("configuration", resp.json()["kind"])

    def test_missing_table(self) -> None:
        missing = str(Path(self._tmp.name) / "missing.parquet")
        with patch.dict(os.environ, {"ARREST_LOG_SOURCE": missing}):
            resp = self.client.get("/arrests")
        self.assertEqual(500, resp.status_code)
        self.assertEqual("not_found", resp.json()["kind"])
        self.assertEqual("Arrest table not found", resp.json()["error"])


class ResponseCacheTest(unittest.TestCase):
    def test_reuses_until_expired(self) -> None:
        now = [0.0]
        calls = []
        c = ResponseCache(ttl=10, clock=lambda: now[0])

        def compute():
            calls.append(1)
            return len(calls)

        self.assertEqual(1, c.get_or_compute("k", compute))
        now[0] = 9
        self.assertEqual(1, c.get_or_compute("k", compute))
        now[0] = 10
        self.assertEqual(2, c.get_or_compute("k", compute))

    def test_failures_are_not_cached(self) -> None:
        c = ResponseCache(ttl=10)

        def fail():
            raise ValueError("boom")

        with self.assertRaises(ValueError):
            c.get_or_compute("k", fail)
        self.assertEqual(3, c.get_or_compute("k", lambda: 3))

    def test_zero_ttl_disables(self) -> None:
        c = ResponseCache(ttl=10)
        values = iter([1, 2])
        self.assertEqual(1, c.get_or_compute("k", lambda: next(values), ttl=0))
        self.assertEqual(2, c.get_or_compute("k", lambda: next(values), ttl=0))

    def test_holds_at_most_max_entries(self) -> None:
        now = [0.0]
        c = ResponseCache(ttl=10, clock=lambda: now[0], max_entries=2)
        for i, key in enumerate(["a", "b", "c"]):
            now[0] = i
            c.get_or_compute(key, lambda: key)
        self.assertEqual(2, len(c))
        self.assertEqual("fresh", c.get_or_compute("a", lambda: "fresh"))
        self.assertEqual("c", c.get_or_compute("c", lambda: "recomputed"))

    def test_expired_entries_are_dropped_on_write(self) -> None:
        now = [0.0]
        c = ResponseCache(ttl=10, clock=lambda: now[0])
        c.get_or_compute("a", lambda: 1)
        now[0] = 11
        c.get_or_compute("b", lambda: 2)
        self.assertEqual(1, len(c))
