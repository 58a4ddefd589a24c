"""Timeline granularity chosen from the span of the requested date range."""

from __future__ import annotations

from datetime import date, timedelta
from enum import Enum


class Granularity(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


def choose_granularity(date_from: date | None, date_to: date | None) -> Granularity:
    """Day up to a month of data, week up to a year, month beyond.

    Open-ended ranges get weekly buckets.
    """
    if date_from is None or date_to is None:
        return Granularity.WEEK
    span = (date_to - date_from).days
    if span > 365:
        return Granularity.MONTH
    if span > 30:
        return Granularity.WEEK
    return Granularity.DAY


def truncate(d: date, granularity: Granularity) -> date:
    """Start of the bucket holding ``d``. Weeks start on Monday."""
    if granularity is Granularity.MONTH:
        return d.replace(day=1)
    if granularity is Granularity.WEEK:
        return d - timedelta(days=d.weekday())
    return d


def bucket_sql(column: str, granularity: Granularity) -> str:
    # DuckDB truncates weeks to the ISO Monday, matching truncate().
    return f"CAST(DATE_TRUNC('{granularity.value}', {column}) AS DATE)"
