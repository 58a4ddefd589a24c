"""Pydantic response models for the API."""

from __future__ import annotations

from pydantic import BaseModel


class FilterOptions(BaseModel):
    towns: list[str]
    dateMin: str | None = None
    dateMax: str | None = None


class ArrestRecord(BaseModel):
    arrest_id: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    age: int | None = None
    sex: str | None = None
    race: str | None = None
    charges: str | None = None
    arrest_date: str | None = None
    arrest_time: str | None = None
    city_town: str | None = None
    street_line: str | None = None
    zip_code: str | None = None
    processing_time: str | None = None
    source_file: str | None = None


class ArrestPage(BaseModel):
    records: list[ArrestRecord]
    total: int
    page: int
    pageSize: int
    totalPages: int


class Stats(BaseModel):
    total: int
    thisWeek: int
    thisMonth: int
    totalCharges: int
    averageAge: float
    avgChargesPerArrest: float


class CityCount(BaseModel):
    city: str
    count: int


class ChargeCount(BaseModel):
    charge: str
    count: int


class TimelinePoint(BaseModel):
    date: str
    count: int


class DayCount(BaseModel):
    day: str
    count: int


class AgeRangeCount(BaseModel):
    ageRange: str
    count: int


class SexCount(BaseModel):
    sex: str
    count: int


class RaceCount(BaseModel):
    race: str
    count: int


class CategoryCount(BaseModel):
    category: str
    count: int


class ChargeTrend(BaseModel):
    date: str
    category: str
    count: int


class AgeCharge(BaseModel):
    ageRange: str
    charge: str
    count: int


class RaceCharge(BaseModel):
    race: str
    charge: str
    count: int


class SexCharge(BaseModel):
    sex: str
    charge: str
    count: int


class AggregateBundle(BaseModel):
    stats: Stats
    topCities: list[CityCount]
    topCharges: list[ChargeCount]
    timelineData: list[TimelinePoint]
    granularity: str
    dayOfWeekData: list[DayCount]
    ageDistribution: list[AgeRangeCount]
    sexBreakdown: list[SexCount]
    raceBreakdown: list[RaceCount]
    chargeCategories: list[CategoryCount]
    chargeTrends: list[ChargeTrend]
    chargesByAge: list[AgeCharge]
    chargesByRace: list[RaceCharge]
    chargesBySex: list[SexCharge]


class HeatmapResponse(BaseModel):
    cityCounts: list[CityCount]


class ErrorResponse(BaseModel):
    error: str
    kind: str
    details: str
