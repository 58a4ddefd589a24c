"""Request filters and the SQL conditions every aggregate shares."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from arrests.cities import CITY_KEY_SQL, normalize_city
from arrests.errors import ValidationError

logger = logging.getLogger(__name__)

UNKNOWN = "U"


def parse_iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        raise ValidationError(f"Invalid date {value!r}", "Dates must be YYYY-MM-DD") from None


def _lenient_date(name: str, value: str | date | None) -> date | None:
    if value is None or isinstance(value, date):
        return value
    if not value.strip():
        return None
    try:
        return parse_iso_date(value)
    except ValidationError as e:
        logger.warning("Ignoring %s filter: %s", name, e.message)
        return None


@dataclass(frozen=True)
class Filter:
    """Optional town prefix and inclusive date bounds. None = unconstrained."""

    town: str | None = None
    date_from: date | None = None
    date_to: date | None = None

    @classmethod
    def from_params(
        cls,
        town: str | None = None,
        date_from: str | date | None = None,
        date_to: str | date | None = None,
    ) -> Filter:
        """Build a Filter from raw request values.

        Bad values never fail the request: an unparsable date or a town
        that normalizes to nothing is dropped as if it had not been sent.
        """
        if town is not None and not normalize_city(town):
            if town.strip():
                logger.warning("Ignoring town filter %r: empty after normalization", town)
            town = None
        return cls(
            town=town.strip() if town else None,
            date_from=_lenient_date("dateFrom", date_from),
            date_to=_lenient_date("dateTo", date_to),
        )

    def cache_key(self) -> str:
        return json.dumps(
            {
                "town": normalize_city(self.town) or None,
                "date_from": self.date_from.isoformat() if self.date_from else None,
                "date_to": self.date_to.isoformat() if self.date_to else None,
            },
            sort_keys=True,
        )


@dataclass(frozen=True)
class ConditionSet:
    clauses: tuple[str, ...] = ()
    params: dict[str, Any] = field(default_factory=dict)

    def extend(self, clause: str, **params: Any) -> ConditionSet:
        return ConditionSet(self.clauses + (clause,), {**self.params, **params})

    def where(self) -> str:
        if not self.clauses:
            return ""
        return "WHERE " + " AND ".join(self.clauses)


def _known(column: str) -> str:
    return f"NULLIF(TRIM({column}), '') IS NOT NULL AND UPPER(TRIM({column})) <> '{UNKNOWN}'"


@dataclass(frozen=True)
class CompiledFilter:
    """Base conditions plus per-dimension data-quality refinements.

    Every aggregate reads its conditions from here, so all parts of one
    response are computed over the same filtered set.
    """

    filter: Filter
    base: ConditionSet

    @property
    def dated(self) -> ConditionSet:
        return self.base.extend("arrest_date IS NOT NULL")

    @property
    def age(self) -> ConditionSet:
        return self.base.extend("age IS NOT NULL AND age > 0")

    @property
    def sex(self) -> ConditionSet:
        return self.base.extend(_known("sex"))

    @property
    def race(self) -> ConditionSet:
        return self.base.extend(_known("race"))

    @property
    def city(self) -> ConditionSet:
        return self.base.extend(f"NULLIF({CITY_KEY_SQL}, '') IS NOT NULL")


def compile_filter(f: Filter) -> CompiledFilter:
    base = ConditionSet()
    town = normalize_city(f.town)
    if town:
        base = base.extend(f"starts_with({CITY_KEY_SQL}, $town)", town=town)
    if f.date_from is not None:
        base = base.extend("arrest_date >= $date_from", date_from=f.date_from)
    if f.date_to is not None:
        # arrest_date is a DATE, so this covers the whole final day
        base = base.extend("arrest_date <= $date_to", date_to=f.date_to)
    return CompiledFilter(filter=f, base=base)
