"""Trend and strength/weakness detection for a single country."""
from __future__ import annotations

from space_index.schemas import CategoryScore
from space_index.score.versions import (
    TREND_DECLINING,
    TREND_IMPROVING,
    TREND_STABLE,
    TREND_UNKNOWN,
)


def classify_trend(current: float, previous: float | None, dead_zone: float = 1.0) -> str:
    """Label the move from ``previous`` to ``current``.

    Changes inside (-dead_zone, +dead_zone) are "stable" so small revisions
    don't flap between labels.
    """
    if previous is None:
        return TREND_UNKNOWN
    delta = round(current - previous, 6)
    if delta >= dead_zone:
        return TREND_IMPROVING
    if delta <= -dead_zone:
        return TREND_DECLINING
    return TREND_STABLE


def detect_strengths_weaknesses(
    category_scores: list[CategoryScore],
    margin: float = 10.0,
) -> tuple[list[str], list[str]]:
    """Categories at least ``margin`` points above/below the country's own mean.

    Strengths come strongest first, weaknesses weakest first.
    """
    if not category_scores:
        return [], []

    mean = sum(cs.score for cs in category_scores) / len(category_scores)

    strengths = [cs for cs in category_scores if round(cs.score - mean, 6) >= margin]
    weaknesses = [cs for cs in category_scores if round(mean - cs.score, 6) >= margin]

    strengths.sort(key=lambda cs: -cs.score)
    weaknesses.sort(key=lambda cs: cs.score)
    return [cs.category for cs in strengths], [cs.category for cs in weaknesses]
