"""DuckDB access to the arrest_logs table, shared by the API, MCP server and dashboard."""

from __future__ import annotations

import glob
import logging
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, TypeVar

import duckdb

from arrests.cities import CITY_KEY_SQL
from arrests.config import Settings, load_settings
from arrests.errors import ArrestLogError, ResourceNotFoundError, TransientQueryError
from arrests.filters import ConditionSet

logger = logging.getLogger(__name__)

T = TypeVar("T")

RECORD_COLUMNS = (
    "arrest_id", "first_name", "last_name", "age", "sex", "race", "charges",
    "arrest_date", "arrest_time", "city_town", "street_line", "zip_code",
    "processing_time", "source_file",
)

# Storage types vary by export (dates as strings or DATE, ages as text);
# everything downstream sees one shape.
_RELATION = """
    SELECT
        CAST(arrest_id AS VARCHAR) AS arrest_id,
        first_name,
        last_name,
        TRY_CAST(age AS INTEGER) AS age,
        sex,
        race,
        charges,
        TRY_CAST(arrest_date AS DATE) AS arrest_date,
        CAST(arrest_time AS VARCHAR) AS arrest_time,
        city_town,
        street_line,
        CAST(zip_code AS VARCHAR) AS zip_code,
        CAST(processing_time AS VARCHAR) AS processing_time,
        source_file
    FROM '{path}'
"""


class ArrestSource:
    """Read-only query surface over one Parquet/CSV file (or glob).

    Each query opens its own connection so independent queries can run on
    separate threads.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = str(path)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> ArrestSource:
        settings = settings or load_settings()
        return cls(settings.source)

    def _check_exists(self) -> None:
        if any(c in self.path for c in "*?["):
            found = bool(glob.glob(self.path))
        else:
            found = Path(self.path).exists()
        if not found:
            raise ResourceNotFoundError(
                "Arrest table not found",
                f"No arrest_logs data at '{self.path}', or it is not readable",
            )

    def run(self, sql: str, params: dict[str, Any] | None = None) -> list[dict]:
        """Run ``sql`` with the ``arrests`` relation in scope."""
        self._check_exists()
        relation = _RELATION.format(path=self.path.replace("'", "''"))
        full = f"WITH arrests AS ({relation}) {sql}"
        logger.debug("query %s params=%s", " ".join(sql.split()), params)
        t0 = time.perf_counter()
        con = duckdb.connect()
        try:
            cur = con.execute(full, params or None)
            cols = [d[0] for d in cur.description]
            rows = [dict(zip(cols, r)) for r in cur.fetchall()]
        except (duckdb.CatalogException, duckdb.IOException) as e:
            raise ResourceNotFoundError("Arrest table not found", str(e)) from e
        except duckdb.Error as e:
            raise TransientQueryError("Arrest query failed", str(e)) from e
        finally:
            con.close()
        logger.debug("%d rows in %.3fs", len(rows), time.perf_counter() - t0)
        return rows

    def count(self, conditions: ConditionSet) -> int:
        rows = self.run(f"SELECT COUNT(*) AS total FROM arrests {conditions.where()}", conditions.params)
        return int(rows[0]["total"])

    def scan(
        self,
        conditions: ConditionSet,
        order_by: str,
        limit: int,
        offset: int = 0,
    ) -> list[dict]:
        return self.run(
            f"""
            SELECT {", ".join(RECORD_COLUMNS)}
            FROM arrests {conditions.where()}
            ORDER BY {order_by}
            LIMIT {int(limit)} OFFSET {int(offset)}
            """,
            conditions.params,
        )

    def select(self, columns_sql: str, conditions: ConditionSet) -> list[dict]:
        return self.run(f"SELECT {columns_sql} FROM arrests {conditions.where()}", conditions.params)

    def group_count(
        self,
        key_sql: str,
        conditions: ConditionSet,
        *,
        order_by: str = "count DESC, group_key",
        limit: int | None = None,
    ) -> list[dict]:
        """``[{group_key, count}]`` grouped by an arbitrary key expression."""
        tail = f"LIMIT {int(limit)}" if limit is not None else ""
        return self.run(
            f"""
            SELECT {key_sql} AS group_key, COUNT(*) AS count
            FROM arrests {conditions.where()}
            GROUP BY group_key
            ORDER BY {order_by}
            {tail}
            """,
            conditions.params,
        )


def gather(tasks: dict[str, Callable[[], T]], max_workers: int = 8) -> dict[str, T]:
    """Run independent query callables concurrently; all succeed or the first error raises."""
    results: dict[str, T] = {}
    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(tasks) or 1))) as pool:
        futures = {name: pool.submit(fn) for name, fn in tasks.items()}
        try:
            for name, fut in futures.items():
                results[name] = fut.result()
        except ArrestLogError:
            for fut in futures.values():
                fut.cancel()
            raise
    return results


# ── Filter options ────────────────────────────────────────────────────

def get_filter_options(source: ArrestSource) -> dict:
    """Canonical towns and the arrest date range present in the table."""
    tasks = {
        "towns": lambda: source.run(f"""
            SELECT DISTINCT {CITY_KEY_SQL} AS town
            FROM arrests
            WHERE NULLIF({CITY_KEY_SQL}, '') IS NOT NULL
            ORDER BY town
        """),
        "bounds": lambda: source.run(
            "SELECT MIN(arrest_date) AS min_date, MAX(arrest_date) AS max_date FROM arrests"
        ),
    }
    res = gather(tasks, max_workers=2)
    bounds = res["bounds"][0]
    return {
        "towns": [r["town"] for r in res["towns"]],
        "dateMin": bounds["min_date"].isoformat() if bounds["min_date"] else None,
        "dateMax": bounds["max_date"].isoformat() if bounds["max_date"] else None,
    }
