"""Space Capability Index API endpoints."""
from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from space_index.api.deps import get_breakdown_cache, get_scoring_tables
from space_index.cache import BreakdownCache, data_version
from space_index.display import describe_tiers, describe_weights, get_display
from space_index.schemas import RawCountryMetrics, SCIBreakdown, SCIComparison, SCIRankings
from space_index.score.compare import compare_countries
from space_index.score.errors import ScoringValidationError
from space_index.score.sci import compute_breakdown, compute_rankings, rank_by_category
from space_index.score.tables import ScoringTables

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/sci", tags=["sci"])

FiniteScore = Annotated[float, Field(allow_inf_nan=False)]


class BreakdownRequest(BaseModel):
    country: RawCountryMetrics
    prior_score: FiniteScore | None = None


class RankingsRequest(BaseModel):
    countries: list[RawCountryMetrics]
    prior_scores: dict[str, FiniteScore] = Field(default_factory=dict)


class CompareRequest(BaseModel):
    breakdowns: list[SCIBreakdown]


@router.get("/weights")
async def list_weights(tables: ScoringTables = Depends(get_scoring_tables)):
    """Category weights with their display metadata."""
    return describe_weights(tables.weights, get_display())


@router.get("/tiers")
async def list_tiers(tables: ScoringTables = Depends(get_scoring_tables)):
    """Tier thresholds, highest first."""
    return describe_tiers(tables.tiers, get_display())


@router.post("/breakdown", response_model=SCIBreakdown)
async def breakdown(
    body: BreakdownRequest,
    tables: ScoringTables = Depends(get_scoring_tables),
    cache: BreakdownCache = Depends(get_breakdown_cache),
):
    """Score a single country. Rank fields are null outside a batch."""
    version = data_version(body.country, body.prior_score)
    cached = cache.get(body.country.country_id, version)
    if cached is not None:
        return cached

    try:
        result = compute_breakdown(
            body.country, tables.weights, tables.tiers, body.prior_score, rules=tables.rules,
        )
    except ScoringValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    cache.put(body.country.country_id, version, result)
    return result


@router.post("/rankings", response_model=SCIRankings)
async def rankings(
    body: RankingsRequest,
    tables: ScoringTables = Depends(get_scoring_tables),
):
    """Score and rank a full batch of countries."""
    try:
        return compute_rankings(
            body.countries, tables.weights, tables.tiers, body.prior_scores,
            rules=tables.rules, log_fn=logger.debug,
        )
    except ScoringValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.post("/rankings/{category}", response_model=list[SCIBreakdown])
async def rankings_by_category(
    category: str,
    body: RankingsRequest,
    tables: ScoringTables = Depends(get_scoring_tables),
):
    """Rank a batch, then order it by one category's score."""
    if category not in {w.category for w in tables.weights}:
        raise HTTPException(status_code=404, detail=f"Category '{category}' not found")
    try:
        result = compute_rankings(
            body.countries, tables.weights, tables.tiers, body.prior_scores,
            rules=tables.rules, log_fn=logger.debug,
        )
        return rank_by_category(result.rankings, category)
    except ScoringValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.post("/compare", response_model=SCIComparison)
async def compare(body: CompareRequest):
    """Gap analysis across two or more already-computed breakdowns."""
    try:
        return compare_countries(body.breakdowns)
    except ScoringValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
