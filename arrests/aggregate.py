"""Aggregate bundle behind the stats page: every chart computed from one filter.

Each ``get_*`` function issues one independent query against the source
using the shared CompiledFilter; ``aggregate`` runs them concurrently and
assembles the response. Charge-based aggregates fetch the raw charges
field and reduce it here, since charges are a comma-delimited list.
"""

from __future__ import annotations

import logging
import time
from collections import Counter
from collections.abc import Iterable
from datetime import date, timedelta
from typing import Any

from arrests.charges import classify_charge, tokenize_charges
from arrests.cities import CITY_KEY_SQL
from arrests.filters import CompiledFilter, ConditionSet, Filter, compile_filter
from arrests.source import ArrestSource, gather
from arrests.timebuckets import Granularity, bucket_sql, choose_granularity, truncate

logger = logging.getLogger(__name__)

TOP_CITIES = 10
TOP_CHARGES = 20
# Charges kept per age range / race / sex value in the cross tabs.
TOP_CHARGES_PER_GROUP = 5

DAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")

# (exclusive upper bound, label); None closes the last range.
AGE_RANGES: tuple[tuple[int | None, str], ...] = (
    (18, "0-17"),
    (25, "18-24"),
    (35, "25-34"),
    (45, "35-44"),
    (55, "45-54"),
    (65, "55-64"),
    (None, "65+"),
)
AGE_LABELS = tuple(label for _, label in AGE_RANGES)


def _age_range_sql(column: str = "age") -> str:
    whens = " ".join(
        f"WHEN {column} < {upper} THEN '{label}'" for upper, label in AGE_RANGES if upper is not None
    )
    return f"CASE {whens} ELSE '{AGE_RANGES[-1][1]}' END"


# ── Pure reducers ────────────────────────────────────────────────────

def ranked(counts: Counter, key_name: str, limit: int | None = None) -> list[dict]:
    """Counter -> ``[{key_name: k, "count": n}]``, highest first, ties by key."""
    items = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
    if limit is not None:
        items = items[:limit]
    return [{key_name: k, "count": n} for k, n in items]


def count_charges(charge_fields: Iterable[str | None]) -> Counter:
    counts: Counter = Counter()
    for field in charge_fields:
        counts.update(tokenize_charges(field))
    return counts


def count_categories(charge_counts: Counter) -> Counter:
    categories: Counter = Counter()
    for charge, n in charge_counts.items():
        categories[classify_charge(charge)] += n
    return categories


def count_trends(rows: Iterable[tuple[date | None, str | None]], granularity: Granularity) -> Counter:
    """Counts keyed by (bucket start, category) over (arrest_date, charges) rows."""
    counts: Counter = Counter()
    for arrest_date, charges in rows:
        if arrest_date is None:
            continue
        bucket = truncate(arrest_date, granularity)
        for charge in tokenize_charges(charges):
            counts[(bucket, classify_charge(charge))] += 1
    return counts


def top_charges_by(
    rows: Iterable[tuple[str, str | None]],
    key_name: str,
    limit: int = TOP_CHARGES_PER_GROUP,
    order: Iterable[str] | None = None,
) -> list[dict]:
    """Top ``limit`` charges within each group value, flattened.

    Groups come out in ``order`` when given, otherwise sorted by value.
    """
    per_group: dict[str, Counter] = {}
    for value, charges in rows:
        per_group.setdefault(value, Counter()).update(tokenize_charges(charges))
    if order is None:
        keys = sorted(per_group)
    else:
        keys = [k for k in order if k in per_group]
    out: list[dict] = []
    for value in keys:
        for item in ranked(per_group[value], "charge", limit):
            out.append({key_name: value, **item})
    return out


# ── Queries ──────────────────────────────────────────────────────────

def get_counts(source: ArrestSource, compiled: CompiledFilter, today: date) -> dict:
    """Total plus last-7 / last-30-day counts relative to ``today``."""
    params = {
        **compiled.base.params,
        "week_start": today - timedelta(days=7),
        "month_start": today - timedelta(days=30),
    }
    row = source.run(
        f"""
        SELECT COUNT(*) AS total,
               COUNT(*) FILTER (WHERE arrest_date >= $week_start) AS this_week,
               COUNT(*) FILTER (WHERE arrest_date >= $month_start) AS this_month
        FROM arrests {compiled.base.where()}
        """,
        params,
    )[0]
    return {
        "total": int(row["total"]),
        "thisWeek": int(row["this_week"]),
        "thisMonth": int(row["this_month"]),
    }


def get_average_age(source: ArrestSource, compiled: CompiledFilter) -> float:
    row = source.select("AVG(age) AS average_age", compiled.age)[0]
    if row["average_age"] is None:
        return 0
    return float(row["average_age"])


def get_city_counts(source: ArrestSource, compiled: CompiledFilter, limit: int | None = None) -> list[dict]:
    rows = source.group_count(CITY_KEY_SQL, compiled.city, limit=limit)
    return [{"city": r["group_key"], "count": int(r["count"])} for r in rows]


def get_timeline(source: ArrestSource, compiled: CompiledFilter, granularity: Granularity) -> list[dict]:
    rows = source.group_count(
        bucket_sql("arrest_date", granularity), compiled.dated, order_by="group_key"
    )
    return [{"date": r["group_key"].isoformat(), "count": int(r["count"])} for r in rows]


def get_day_of_week(source: ArrestSource, compiled: CompiledFilter) -> list[dict]:
    # DAYOFWEEK: 0 = Sunday
    rows = source.group_count("DAYOFWEEK(arrest_date)", compiled.dated)
    counts = {int(r["group_key"]): int(r["count"]) for r in rows}
    return [{"day": name, "count": counts.get(i, 0)} for i, name in enumerate(DAY_NAMES)]


def get_age_distribution(source: ArrestSource, compiled: CompiledFilter) -> list[dict]:
    rows = source.group_count(_age_range_sql(), compiled.age)
    counts = {r["group_key"]: int(r["count"]) for r in rows}
    return [{"ageRange": label, "count": counts.get(label, 0)} for label in AGE_LABELS]


def _code_sql(column: str) -> str:
    # Sex and race codes group the way the quality conditions compare them.
    return f"UPPER(TRIM({column}))"


def get_breakdown(source: ArrestSource, conditions: ConditionSet, column: str) -> list[dict]:
    rows = source.group_count(_code_sql(column), conditions)
    return [{column: r["group_key"], "count": int(r["count"])} for r in rows]


def get_charge_rows(source: ArrestSource, conditions: ConditionSet, key_sql: str) -> list[tuple]:
    rows = source.select(f"{key_sql} AS group_key, charges", conditions)
    return [(r["group_key"], r["charges"]) for r in rows]


# ── Bundle ───────────────────────────────────────────────────────────

def aggregate(
    source: ArrestSource,
    f: Filter,
    *,
    today: date | None = None,
    max_workers: int = 8,
) -> dict[str, Any]:
    """Compute every stats-page aggregate for ``f``.

    Fails as a whole if any query fails; no partial bundles.
    """
    t0 = time.perf_counter()
    today = today or date.today()
    compiled = compile_filter(f)
    granularity = choose_granularity(f.date_from, f.date_to)

    tasks = {
        "counts": lambda: get_counts(source, compiled, today),
        "average_age": lambda: get_average_age(source, compiled),
        "cities": lambda: get_city_counts(source, compiled, TOP_CITIES),
        "timeline": lambda: get_timeline(source, compiled, granularity),
        "day_of_week": lambda: get_day_of_week(source, compiled),
        "ages": lambda: get_age_distribution(source, compiled),
        "sex": lambda: get_breakdown(source, compiled.sex, "sex"),
        "race": lambda: get_breakdown(source, compiled.race, "race"),
        "charges": lambda: get_charge_rows(source, compiled.base, "arrest_date"),
        "charges_by_age": lambda: get_charge_rows(source, compiled.age, _age_range_sql()),
        "charges_by_race": lambda: get_charge_rows(source, compiled.race, _code_sql("race")),
        "charges_by_sex": lambda: get_charge_rows(source, compiled.sex, _code_sql("sex")),
    }
    res = gather(tasks, max_workers=max_workers)

    charge_rows = res["charges"]
    charge_counts = count_charges(charges for _, charges in charge_rows)
    total_charges = sum(charge_counts.values())
    total = res["counts"]["total"]

    trends = count_trends(charge_rows, granularity)
    charge_trends = [
        {"date": bucket.isoformat(), "category": category, "count": n}
        for (bucket, category), n in sorted(trends.items(), key=lambda kv: (kv[0][0], -kv[1], kv[0][1]))
    ]

    bundle = {
        "stats": {
            **res["counts"],
            "totalCharges": total_charges,
            "averageAge": res["average_age"],
            "avgChargesPerArrest": round(total_charges / total, 1) if total else 0,
        },
        "topCities": res["cities"],
        "topCharges": ranked(charge_counts, "charge", TOP_CHARGES),
        "timelineData": res["timeline"],
        "granularity": granularity.value,
        "dayOfWeekData": res["day_of_week"],
        "ageDistribution": res["ages"],
        "sexBreakdown": res["sex"],
        "raceBreakdown": res["race"],
        "chargeCategories": ranked(count_categories(charge_counts), "category"),
        "chargeTrends": charge_trends,
        "chargesByAge": top_charges_by(res["charges_by_age"], "ageRange", order=AGE_LABELS),
        "chargesByRace": top_charges_by(res["charges_by_race"], "race"),
        "chargesBySex": top_charges_by(res["charges_by_sex"], "sex"),
    }
    logger.info(
        "aggregated %d arrests (%d charges) for %s in %.2fs",
        total, total_charges, f.cache_key(), time.perf_counter() - t0,
    )
    return bundle


def get_heatmap(source: ArrestSource, f: Filter) -> list[dict]:
    """Every canonical city with its arrest count, uncapped."""
    return get_city_counts(source, compile_filter(f))
