from __future__ import annotations

import pytest

from space_index.schemas import CategoryScore, RawCountryMetrics, SCIBreakdown
from space_index.score.tables import CategoryWeight, TierThreshold, parse_tables

REFERENCE_TIERS = [
    {"tier": "Superpower", "min_score": 80},
    {"tier": "Major Power", "min_score": 60},
    {"tier": "Emerging Power", "min_score": 35},
    {"tier": "Developing", "min_score": 15},
    {"tier": "Nascent", "min_score": 0},
]

# One category, one linear metric: overall score == the "score" metric.
SINGLE_METRIC_CONFIG = {
    "version": "test_single",
    "categories": [
        {
            "category": "capability",
            "label": "Capability",
            "weight": 1.0,
            "metrics": [{"metric": "score", "kind": "linear", "max_value": 100, "weight": 1.0}],
        }
    ],
    "tiers": REFERENCE_TIERS,
}

TWO_CATEGORY_CONFIG = {
    "version": "test_two",
    "categories": [
        {
            "category": "alpha",
            "label": "Alpha",
            "weight": 0.5,
            "metrics": [{"metric": "a", "kind": "linear", "max_value": 100, "weight": 1.0}],
        },
        {
            "category": "beta",
            "label": "Beta",
            "weight": 0.5,
            "metrics": [{"metric": "b", "kind": "linear", "max_value": 100, "weight": 1.0}],
        },
    ],
    "tiers": REFERENCE_TIERS,
}

REFERENCE_WEIGHTS = [
    CategoryWeight("launch_capability", "Launch Capability", 0.20),
    CategoryWeight("human_spaceflight", "Human Spaceflight", 0.20),
    CategoryWeight("propulsion_technology", "Propulsion Technology", 0.15),
    CategoryWeight("deep_space_exploration", "Deep Space Exploration", 0.15),
    CategoryWeight("satellite_infrastructure", "Satellite Infrastructure", 0.15),
    CategoryWeight("ground_infrastructure", "Ground Infrastructure", 0.10),
    CategoryWeight("technological_independence", "Technological Independence", 0.05),
]


@pytest.fixture
def single_tables():
    return parse_tables(SINGLE_METRIC_CONFIG)


@pytest.fixture
def two_tables():
    return parse_tables(TWO_CATEGORY_CONFIG)


@pytest.fixture
def reference_tiers():
    return [TierThreshold(t["tier"], float(t["min_score"])) for t in REFERENCE_TIERS]


def make_country(country_id: str, score: float | None, region: str = "Asia", **metrics) -> RawCountryMetrics:
    return RawCountryMetrics(
        country_id=country_id,
        name=f"Country {country_id}",
        region=region,
        metrics={"score": score, **metrics},
    )


def category_scores(scores: dict[str, float]) -> list[CategoryScore]:
    return [
        CategoryScore(category=cat, label=cat, score=s, weight=0.0, weighted_score=0.0)
        for cat, s in scores.items()
    ]


def make_breakdown(country_id: str, overall: float, scores: dict[str, float]) -> SCIBreakdown:
    return SCIBreakdown(
        country_id=country_id,
        country_name=f"Country {country_id}",
        region="Asia",
        overall_score=overall,
        tier="Major Power",
        category_scores=category_scores(scores),
        trend="unknown",
        calc_version="sci_v1",
    )
