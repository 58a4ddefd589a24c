"""MCP server for Massachusetts arrest log data."""

from __future__ import annotations

from fastmcp import FastMCP

from arrests.aggregate import aggregate, get_heatmap
from arrests.config import load_settings
from arrests.filters import Filter
from arrests.listing import list_arrests
from arrests.source import ArrestSource, get_filter_options

mcp = FastMCP(
    "Massachusetts Arrest Log",
    instructions=(
        "Police arrest logs for Massachusetts towns and cities. Call "
        "get_filter_options first to see which towns and dates are available. "
        "Town filters match by prefix, case-insensitively, ignoring a trailing "
        "', MA'. Dates are YYYY-MM-DD and inclusive. Race codes: W White, "
        "B Black, H Hispanic, A Asian, N Native American, O Other."
    ),
)


def _source() -> ArrestSource:
    return ArrestSource.from_settings(load_settings())


@mcp.tool(name="get_filter_options")
def filter_options() -> dict:
    """Towns present in the data and the earliest/latest arrest date."""
    return get_filter_options(_source())


@mcp.tool()
def get_arrest_stats(
    town: str | None = None, date_from: str | None = None, date_to: str | None = None,
) -> dict:
    """Totals, top charges and cities, timeline, demographics, and charge categories."""
    settings = load_settings()
    return aggregate(
        ArrestSource.from_settings(settings),
        Filter.from_params(town, date_from, date_to),
        max_workers=settings.max_workers,
    )


@mcp.tool()
def get_city_counts(
    town: str | None = None, date_from: str | None = None, date_to: str | None = None,
) -> list[dict]:
    """Arrest count per city, highest first."""
    return get_heatmap(_source(), Filter.from_params(town, date_from, date_to))


@mcp.tool()
def search_arrests(
    page: int = 1, page_size: int = 25, search: str | None = None,
    town: str | None = None, date_from: str | None = None, date_to: str | None = None,
) -> dict:
    """Page through individual arrests, newest first. ``search`` matches names and charges."""
    return list_arrests(
        _source(), Filter.from_params(town, date_from, date_to), page, page_size, search,
    )


def main():
    mcp.run()


if __name__ == "__main__":
    main()
