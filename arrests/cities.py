"""Canonical city keys: "Natick", "NATICK" and "Natick, MA" group together."""

from __future__ import annotations

import re

_STATE_SUFFIX = re.compile(r"(?:\s*,\s*MA)+$")

# Same canonicalization as normalize_city(), evaluated inside DuckDB.
# DuckDB's TRIM only removes spaces, so tabs and newlines are stripped by regex.
CITY_KEY_SQL = (
    r"REGEXP_REPLACE(REGEXP_REPLACE(UPPER(city_town), '(\s*,\s*MA)*\s*$', ''), '^\s+', '')"
)


def normalize_city(raw: str | None) -> str:
    if not raw:
        return ""
    return _STATE_SUFFIX.sub("", raw.upper().strip()).strip()
