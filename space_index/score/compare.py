"""Multi-country comparison and gap analysis."""
from __future__ import annotations

from typing import Sequence

from space_index.schemas import CategoryGap, CountryGap, SCIBreakdown, SCIComparison
from space_index.score.errors import ScoringValidationError
from space_index.score.ranking import ordering_key


def _leader(scored: list[tuple[SCIBreakdown, float]]) -> tuple[SCIBreakdown, float]:
    return min(scored, key=lambda item: ordering_key(item[0].country_id, item[1]))


def _gaps(
    scored: list[tuple[SCIBreakdown, float]],
    leader_score: float,
) -> list[CountryGap]:
    # The leader is listed too, with a gap of 0.
    return [
        CountryGap(
            country_id=b.country_id,
            country_name=b.country_name,
            score=score,
            gap=round(max(0.0, leader_score - score), 2),
        )
        for b, score in scored
    ]


def compare_countries(breakdowns: Sequence[SCIBreakdown]) -> SCIComparison:
    """Per-category leaders and each country's gap to them.

    Needs at least two breakdowns with distinct country ids. Categories are
    taken in the order they first appear; a country missing a category
    scores 0 there.
    """
    breakdowns = list(breakdowns)
    if len(breakdowns) < 2:
        raise ScoringValidationError(
            f"Comparison needs at least 2 countries, got {len(breakdowns)}"
        )
    ids = [b.country_id for b in breakdowns]
    if len(set(ids)) != len(ids):
        raise ScoringValidationError("Comparison contains the same country more than once")

    categories: list[str] = []
    for b in breakdowns:
        for cs in b.category_scores:
            if cs.category not in categories:
                categories.append(cs.category)

    category_gaps: list[CategoryGap] = []
    for category in categories:
        scored = [(b, b.category_score(category)) for b in breakdowns]
        leader, leader_score = _leader(scored)
        category_gaps.append(CategoryGap(
            category=category,
            leader_id=leader.country_id,
            leader_name=leader.country_name,
            leader_score=leader_score,
            gaps=_gaps(scored, leader_score),
        ))

    overall = [(b, b.overall_score) for b in breakdowns]
    overall_leader, overall_score = _leader(overall)

    return SCIComparison(
        countries=breakdowns,
        category_gaps=category_gaps,
        overall_leader_id=overall_leader.country_id,
        overall_leader_name=overall_leader.country_name,
        overall_leader_score=overall_score,
        overall_gaps=_gaps(overall, overall_score),
    )
