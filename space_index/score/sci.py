"""Deterministic Space Capability Index scoring engine."""
from __future__ import annotations

import logging
import math
import statistics
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Callable, Mapping, Sequence

from space_index.config import get_settings
from space_index.schemas import (
    CategoryScore,
    GlobalStatistics,
    RawCountryMetrics,
    SCIBreakdown,
    SCIRankings,
)
from space_index.score.analysis import classify_trend, detect_strengths_weaknesses
from space_index.score.errors import ConfigurationError, ScoringValidationError
from space_index.score.normalize import aggregate_category, clamp, coerce_raw_value
from space_index.score.ranking import assign_ranks, ordering_key, rank_scores
from space_index.score.tables import (
    CategoryWeight,
    MetricRule,
    TierThreshold,
    get_metric_rules,
    rules_by_category,
    validate_tiers,
    validate_weights,
)
from space_index.score.versions import (
    HUMAN_SPACEFLIGHT_FLAG,
    LAUNCH_CAPABLE_FLAG,
    SCI_CALC_VERSION,
)

logger = logging.getLogger(__name__)


def composite_score(
    category_scores: Sequence[CategoryScore],
    weights: Sequence[CategoryWeight],
) -> float:
    """Weighted sum of category scores, clamped to [0, 100].

    A weighted category missing from ``category_scores`` counts as 0.
    """
    validate_weights(weights)
    by_category = {cs.category: cs.score for cs in category_scores}
    overall = math.fsum(
        clamp(by_category.get(w.category, 0.0)) * w.weight for w in weights
    )
    return round(clamp(overall), 2)


def classify_tier(score: float, tiers: Sequence[TierThreshold]) -> str:
    """First tier (descending table) whose minimum is <= score."""
    score = clamp(score)
    for threshold in tiers:
        if score >= threshold.min_score:
            return threshold.tier
    raise ConfigurationError(f"No tier covers score {score}; the tier table needs a 0-minimum floor")


def compute_breakdown(
    country: RawCountryMetrics,
    weights: Sequence[CategoryWeight],
    tiers: Sequence[TierThreshold],
    prior_score: float | None = None,
    *,
    rules: Sequence[MetricRule] | None = None,
    trend_dead_zone: float | None = None,
    strength_margin: float | None = None,
) -> SCIBreakdown:
    """Score one country. Rank fields stay None outside a batch."""
    settings = get_settings()
    if rules is None:
        rules = get_metric_rules()
    if trend_dead_zone is None:
        trend_dead_zone = settings.trend_dead_zone
    if strength_margin is None:
        strength_margin = settings.strength_margin
    validate_weights(weights)
    validate_tiers(tiers)
    if prior_score is not None and not math.isfinite(prior_score):
        raise ScoringValidationError(
            f"Prior score for {country.country_id} is not a finite number: {prior_score}"
        )

    grouped = rules_by_category(rules)
    category_scores = [
        aggregate_category(country, w, grouped.get(w.category, []))
        for w in weights
    ]

    overall = composite_score(category_scores, weights)
    strengths, weaknesses = detect_strengths_weaknesses(category_scores, strength_margin)

    score_change = None
    if prior_score is not None:
        score_change = round(overall - prior_score, 2)

    return SCIBreakdown(
        country_id=country.country_id,
        country_name=country.name,
        region=country.region,
        overall_score=overall,
        tier=classify_tier(overall, tiers),
        category_scores=category_scores,
        trend=classify_trend(overall, prior_score, trend_dead_zone),
        previous_score=prior_score,
        score_change=score_change,
        strengths=strengths,
        weaknesses=weaknesses,
        calc_version=SCI_CALC_VERSION,
    )


def compute_statistics(
    breakdowns: Sequence[SCIBreakdown],
    countries: Sequence[RawCountryMetrics],
) -> GlobalStatistics:
    scores = [b.overall_score for b in breakdowns]
    launch_capable = sum(
        1 for c in countries if coerce_raw_value(c.metrics.get(LAUNCH_CAPABLE_FLAG))
    )
    human_capable = sum(
        1 for c in countries if coerce_raw_value(c.metrics.get(HUMAN_SPACEFLIGHT_FLAG))
    )

    if not scores:
        return GlobalStatistics(
            total_countries=0,
            average_score=0.0,
            median_score=0.0,
            top_score=0.0,
            bottom_score=0.0,
            countries_with_launch_capability=launch_capable,
            countries_with_human_spaceflight=human_capable,
        )

    return GlobalStatistics(
        total_countries=len(scores),
        average_score=round(statistics.fmean(scores), 2),
        median_score=round(statistics.median(scores), 2),
        top_score=max(scores),
        bottom_score=min(scores),
        countries_with_launch_capability=launch_capable,
        countries_with_human_spaceflight=human_capable,
    )


def _rank_categories(breakdowns: list[SCIBreakdown]) -> dict[tuple[str, str], int]:
    """Within-batch rank of every (country_id, category) score."""
    per_category: dict[str, list[tuple[str, float]]] = {}
    for b in breakdowns:
        for cs in b.category_scores:
            per_category.setdefault(cs.category, []).append((b.country_id, cs.score))

    ranks: dict[tuple[str, str], int] = {}
    for category, entries in per_category.items():
        for country_id, rank in rank_scores(entries).items():
            ranks[(country_id, category)] = rank
    return ranks


def compute_rankings(
    countries: Sequence[RawCountryMetrics],
    weights: Sequence[CategoryWeight],
    tiers: Sequence[TierThreshold],
    prior_scores: Mapping[str, float] | None = None,
    *,
    rules: Sequence[MetricRule] | None = None,
    max_workers: int | None = None,
    log_fn: Callable[[str], None] | None = None,
) -> SCIRankings:
    """Score a whole batch and rank it.

    Must be called with every country at once: ranks only mean something
    relative to the batch they were computed in.
    """
    if log_fn is None:
        log_fn = logger.debug
    if rules is None:
        rules = get_metric_rules()
    if max_workers is None:
        max_workers = get_settings().scoring_max_workers
    prior_scores = prior_scores or {}

    validate_weights(weights)
    validate_tiers(tiers)

    seen: set[str] = set()
    for c in countries:
        if c.country_id in seen:
            raise ScoringValidationError(f"Duplicate country id in batch: {c.country_id}")
        seen.add(c.country_id)

    def _score(country: RawCountryMetrics) -> SCIBreakdown:
        return compute_breakdown(
            country, weights, tiers, prior_scores.get(country.country_id), rules=rules,
        )

    log_fn(f"Scoring {len(countries)} countries...")
    if max_workers > 1 and len(countries) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            breakdowns = list(pool.map(_score, countries))
    else:
        breakdowns = [_score(c) for c in countries]

    # Ranking is a barrier: it needs the complete batch.
    ranks = assign_ranks((b.country_id, b.overall_score, b.region) for b in breakdowns)
    category_ranks = _rank_categories(breakdowns)

    ranked: list[SCIBreakdown] = []
    for b in breakdowns:
        global_rank, regional_rank = ranks[b.country_id]
        category_scores = [
            cs.model_copy(update={"rank": category_ranks[(b.country_id, cs.category)]})
            for cs in b.category_scores
        ]
        ranked.append(b.model_copy(update={
            "global_rank": global_rank,
            "regional_rank": regional_rank,
            "category_scores": category_scores,
        }))
        log_fn(
            f"  {b.country_id}: overall={b.overall_score:.1f} tier={b.tier} "
            f"rank={global_rank} ({b.region} #{regional_rank}) trend={b.trend}"
        )

    ranked.sort(key=lambda b: b.global_rank)

    return SCIRankings(
        rankings=ranked,
        statistics=compute_statistics(ranked, countries),
        calc_version=SCI_CALC_VERSION,
        generated_at=datetime.now(tz=timezone.utc),
    )


def rank_by_category(
    breakdowns: Sequence[SCIBreakdown],
    category: str,
) -> list[SCIBreakdown]:
    """Order breakdowns by one category's score, same tie-break as global rank."""
    known = {cs.category for b in breakdowns for cs in b.category_scores}
    if breakdowns and category not in known:
        raise ScoringValidationError(f"Unknown category: {category}")
    return sorted(
        breakdowns,
        key=lambda b: ordering_key(b.country_id, b.category_score(category)),
    )
