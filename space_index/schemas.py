from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

RawValue = bool | int | float | str | None


class RawCountryMetrics(BaseModel):
    model_config = ConfigDict(frozen=True)

    country_id: str
    name: str = ""
    region: str = "Unknown"
    metrics: dict[str, RawValue] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _default_name(cls, data):
        if isinstance(data, dict) and not data.get("name"):
            data = {**data, "name": data.get("country_id", "")}
        return data


class MetricContribution(BaseModel):
    metric: str
    label: str
    raw_value: RawValue = None
    unit: str | None = None
    sub_score: float
    weight: float
    contribution: float


class CategoryScore(BaseModel):
    category: str
    label: str
    score: float
    weight: float
    weighted_score: float
    rank: int | None = None
    metrics: list[MetricContribution] = Field(default_factory=list)


class SCIBreakdown(BaseModel):
    country_id: str
    country_name: str
    region: str
    overall_score: float
    tier: str
    global_rank: int | None = None
    regional_rank: int | None = None
    category_scores: list[CategoryScore]
    trend: str
    previous_score: float | None = None
    score_change: float | None = None
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    calc_version: str

    def category_score(self, category: str) -> float:
        """Score for one category, 0 when the breakdown does not carry it."""
        for cs in self.category_scores:
            if cs.category == category:
                return cs.score
        return 0.0


class GlobalStatistics(BaseModel):
    total_countries: int
    average_score: float
    median_score: float
    top_score: float
    bottom_score: float
    countries_with_launch_capability: int
    countries_with_human_spaceflight: int


class SCIRankings(BaseModel):
    rankings: list[SCIBreakdown]
    statistics: GlobalStatistics
    calc_version: str
    generated_at: datetime


class CountryGap(BaseModel):
    country_id: str
    country_name: str
    score: float
    gap: float


class CategoryGap(BaseModel):
    category: str
    leader_id: str
    leader_name: str
    leader_score: float
    gaps: list[CountryGap]


class SCIComparison(BaseModel):
    countries: list[SCIBreakdown]
    category_gaps: list[CategoryGap]
    overall_leader_id: str
    overall_leader_name: str
    overall_leader_score: float
    overall_gaps: list[CountryGap]
