"""Massachusetts Arrest Log Dashboard."""

from __future__ import annotations

from datetime import date

import pandas as pd
import plotly.express as px
import pydeck as pdk
import streamlit as st

from arrests.aggregate import aggregate, get_heatmap
from arrests.config import load_settings
from arrests.errors import ArrestLogError
from arrests.filters import Filter
from arrests.listing import list_arrests
from arrests.source import ArrestSource, get_filter_options

CHART_COLOR = "#83c9ff"
PAGE_SIZE = 25

RACE_LABELS = {
    "W": "White", "B": "Black", "H": "Hispanic",
    "A": "Asian", "N": "Native American", "O": "Other",
}
SEX_LABELS = {"M": "Male", "F": "Female"}

# Approximate town centroids for the heatmap; towns not listed are counted
# but not drawn.
TOWN_COORDS = {
    "BOSTON": (42.3601, -71.0589),
    "WORCESTER": (42.2626, -71.8023),
    "CAMBRIDGE": (42.3736, -71.1097),
    "SPRINGFIELD": (42.1015, -72.5898),
    "LOWELL": (42.6334, -71.3162),
    "NEW BEDFORD": (41.6362, -70.9342),
    "QUINCY": (42.2529, -71.0023),
    "NEWTON": (42.3370, -71.2092),
    "BROCKTON": (42.0834, -71.0184),
    "LYNN": (42.4668, -70.9495),
    "FRAMINGHAM": (42.2793, -71.4162),
    "WALTHAM": (42.3765, -71.2356),
    "MALDEN": (42.4251, -71.0662),
    "MEDFORD": (42.4184, -71.1062),
    "TAUNTON": (41.9001, -71.0898),
    "NATICK": (42.2834, -71.3495),
    "WELLESLEY": (42.2968, -71.2924),
    "NEEDHAM": (42.2809, -71.2378),
    "SHERBORN": (42.2390, -71.3698),
    "WAYLAND": (42.3626, -71.3614),
}

# ── Page config ────────────────────────────────────────────────────────
st.set_page_config(
    page_title="MA Arrest Log",
    page_icon="🚓",
    layout="wide",
)
st.title("Massachusetts Police Arrest Log")


# ── Helpers ────────────────────────────────────────────────────────────
def _source() -> ArrestSource:
    return ArrestSource.from_settings(load_settings())


def _fmt(n: int | float) -> str:
    if pd.isna(n):
        return "N/A"
    return f"{int(n):,}"


@st.cache_data(ttl=3600)
def _sidebar_options() -> dict:
    return get_filter_options(_source())


@st.cache_data(ttl=3600)
def _bundle(town: str | None, date_from: date | None, date_to: date | None) -> dict:
    return aggregate(_source(), Filter(town, date_from, date_to))


@st.cache_data(ttl=3600)
def _heatmap(town: str | None, date_from: date | None, date_to: date | None) -> list[dict]:
    return get_heatmap(_source(), Filter(town, date_from, date_to))


@st.cache_data(ttl=3600)
def _page(town: str | None, date_from: date | None, date_to: date | None, page: int, search: str) -> dict:
    return list_arrests(_source(), Filter(town, date_from, date_to), page, PAGE_SIZE, search or None)


def _bar(df: pd.DataFrame, x: str, y: str, x_title: str) -> None:
    fig = px.bar(df, x=x, y=y, orientation="h", color_discrete_sequence=[CHART_COLOR])
    fig.update_layout(yaxis=dict(autorange="reversed"), yaxis_title="", xaxis_title=x_title)
    st.plotly_chart(fig, use_container_width=True)


# ── Sidebar filters ───────────────────────────────────────────────────
try:
    options = _sidebar_options()
except ArrestLogError as e:
    st.error(f"{e.message}: {e.details}")
    st.stop()

st.sidebar.header("Filters")
town_choice = st.sidebar.selectbox("Town / City", ["All towns"] + options["towns"])
town = None if town_choice == "All towns" else town_choice

min_date = date.fromisoformat(options["dateMin"]) if options["dateMin"] else None
max_date = date.fromisoformat(options["dateMax"]) if options["dateMax"] else None
use_dates = st.sidebar.checkbox("Limit date range", value=False)
date_from = date_to = None
if use_dates and min_date and max_date:
    picked = st.sidebar.date_input(
        "Arrest date", value=(min_date, max_date), min_value=min_date, max_value=max_date,
    )
    if isinstance(picked, tuple) and len(picked) == 2:
        date_from, date_to = picked

try:
    bundle = _bundle(town, date_from, date_to)
except ArrestLogError as e:
    st.error(f"{e.message}: {e.details}")
    st.stop()

tab_overview, tab_map, tab_trends, tab_demo, tab_log = st.tabs([
    "Overview", "Map", "Trends", "Demographics", "Arrest Log",
])


# ═══════════════════════════════════════════════════════════════════════
# TAB 1: Overview
# ═══════════════════════════════════════════════════════════════════════
with tab_overview:
    stats = bundle["stats"]
    c1, c2, c3 = st.columns(3)
    c1.metric("Total Arrests", _fmt(stats["total"]))
    c2.metric("Last 7 Days", _fmt(stats["thisWeek"]))
    c3.metric("Last 30 Days", _fmt(stats["thisMonth"]))

    c4, c5, c6 = st.columns(3)
    c4.metric("Total Charges", _fmt(stats["totalCharges"]))
    c5.metric("Average Age", f"{stats['averageAge']:.1f}")
    c6.metric("Charges per Arrest", f"{stats['avgChargesPerArrest']:.1f}")

    col1, col2 = st.columns(2)
    with col1:
        st.subheader("Top Charges")
        charges = pd.DataFrame(bundle["topCharges"][:10])
        if not charges.empty:
            charges["charge"] = charges["charge"].str.slice(0, 35)
            _bar(charges, "count", "charge", "Arrests")
    with col2:
        st.subheader("Top Cities")
        cities = pd.DataFrame(bundle["topCities"])
        if not cities.empty:
            _bar(cities, "count", "city", "Arrests")

    st.subheader("Charge Categories")
    categories = pd.DataFrame(bundle["chargeCategories"])
    if not categories.empty:
        fig = px.bar(categories, x="category", y="count", color_discrete_sequence=[CHART_COLOR])
        fig.update_layout(xaxis_title="Category", yaxis_title="Charges")
        st.plotly_chart(fig, use_container_width=True)


# ═══════════════════════════════════════════════════════════════════════
# TAB 2: Map
# ═══════════════════════════════════════════════════════════════════════
with tab_map:
    st.subheader("Arrests by City")
    city_counts = pd.DataFrame(_heatmap(town, date_from, date_to))

    if not city_counts.empty:
        coords = city_counts["city"].map(TOWN_COORDS)
        located = city_counts[coords.notna()].copy()
        located["lat"] = coords[coords.notna()].map(lambda c: c[0])
        located["lng"] = coords[coords.notna()].map(lambda c: c[1])

        layer = pdk.Layer(
            "HeatmapLayer",
            data=located,
            get_position=["lng", "lat"],
            get_weight="count",
            radiusPixels=40,
            intensity=1,
            threshold=0.05,
            opacity=0.7,
        )
        view = pdk.ViewState(latitude=42.4, longitude=-71.4, zoom=8, pitch=0)
        st.pydeck_chart(pdk.Deck(
            layers=[layer], initial_view_state=view, map_style="light",
        ))
        missing = len(city_counts) - len(located)
        st.caption(f"{len(located):,} towns mapped, {missing:,} without coordinates")
        st.dataframe(city_counts, use_container_width=True, hide_index=True)
    else:
        st.info("No arrests for the selected filters.")


# ═══════════════════════════════════════════════════════════════════════
# TAB 3: Trends
# ═══════════════════════════════════════════════════════════════════════
with tab_trends:
    st.subheader(f"Arrests per {bundle['granularity']}")
    timeline = pd.DataFrame(bundle["timelineData"])
    if not timeline.empty:
        timeline["date"] = pd.to_datetime(timeline["date"])
        fig = px.line(timeline, x="date", y="count", labels={"date": "", "count": "Arrests"})
        st.plotly_chart(fig, use_container_width=True)

    col1, col2 = st.columns(2)
    with col1:
        st.subheader("Day of Week")
        dow = pd.DataFrame(bundle["dayOfWeekData"])
        fig = px.bar(dow, x="day", y="count", color_discrete_sequence=[CHART_COLOR])
        fig.update_layout(xaxis_title="", yaxis_title="Arrests")
        st.plotly_chart(fig, use_container_width=True)
    with col2:
        st.subheader("Charge Categories Over Time")
        trends = pd.DataFrame(bundle["chargeTrends"])
        if not trends.empty:
            trends["date"] = pd.to_datetime(trends["date"])
            fig = px.line(trends, x="date", y="count", color="category",
                          labels={"date": "", "count": "Charges"})
            st.plotly_chart(fig, use_container_width=True)


# ═══════════════════════════════════════════════════════════════════════
# TAB 4: Demographics
# ═══════════════════════════════════════════════════════════════════════
with tab_demo:
    col1, col2, col3 = st.columns(3)
    with col1:
        st.subheader("Age")
        ages = pd.DataFrame(bundle["ageDistribution"])
        fig = px.bar(ages, x="ageRange", y="count", color_discrete_sequence=[CHART_COLOR])
        fig.update_layout(xaxis_title="Age", yaxis_title="Arrests")
        st.plotly_chart(fig, use_container_width=True)
    with col2:
        st.subheader("Sex")
        sex = pd.DataFrame(bundle["sexBreakdown"])
        if not sex.empty:
            sex["label"] = sex["sex"].map(lambda s: SEX_LABELS.get(s, s))
            st.plotly_chart(px.pie(sex, names="label", values="count"), use_container_width=True)
    with col3:
        st.subheader("Race")
        race = pd.DataFrame(bundle["raceBreakdown"])
        if not race.empty:
            race["label"] = race["race"].map(lambda r: RACE_LABELS.get(r, r))
            st.plotly_chart(px.pie(race, names="label", values="count"), use_container_width=True)

    st.subheader("Top Charges by Group")
    for key, title, labels in [
        ("chargesByAge", "ageRange", None),
        ("chargesByRace", "race", RACE_LABELS),
        ("chargesBySex", "sex", SEX_LABELS),
    ]:
        detail = pd.DataFrame(bundle[key])
        if detail.empty:
            continue
        if labels:
            detail[title] = detail[title].map(lambda v: labels.get(v, v))
        fig = px.bar(detail, x="count", y="charge", color=title, orientation="h", barmode="group")
        fig.update_layout(yaxis=dict(autorange="reversed"), yaxis_title="", xaxis_title="Charges")
        st.plotly_chart(fig, use_container_width=True)


# ═══════════════════════════════════════════════════════════════════════
# TAB 5: Arrest Log
# ═══════════════════════════════════════════════════════════════════════
with tab_log:
    search = st.text_input("Search names and charges", "")
    page_no = st.number_input("Page", min_value=1, value=1, step=1)
    result = _page(town, date_from, date_to, int(page_no), search.strip())
    st.caption(
        f"{_fmt(result['total'])} arrests, page {result['page']} of {max(result['totalPages'], 1)}"
    )
    records = pd.DataFrame(result["records"])
    if not records.empty:
        st.dataframe(
            records[["arrest_date", "arrest_time", "first_name", "last_name", "age",
                     "sex", "race", "charges", "city_town", "street_line"]],
            use_container_width=True, hide_index=True,
        )
    else:
        st.info("No arrests on this page.")
