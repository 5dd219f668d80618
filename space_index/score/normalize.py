"""Metric normalization and per-category aggregation."""
from __future__ import annotations

import logging
import math
import re

from space_index.schemas import CategoryScore, MetricContribution, RawCountryMetrics, RawValue
from space_index.score.tables import CategoryWeight, MetricRule

logger = logging.getLogger(__name__)

_SUFFIXES = {"k": 1e3, "m": 1e6, "b": 1e9, "bn": 1e9, "t": 1e12}
_AMOUNT_RE = re.compile(r"^(-?\d+(?:\.\d+)?)\s*([a-z]{0,2})$")


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    """Clamp into [low, high]; NaN collapses to ``low``."""
    if math.isnan(value):
        return low
    return max(low, min(high, value))


def coerce_raw_value(value: RawValue) -> float | None:
    """Turn a raw metric into a float, or None when it is missing.

    Accepts numbers, booleans and currency-like strings such as
    ``"$25.4B"``, ``"1,200"`` or ``"USD 3M"``.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        v = float(value)
        return v if math.isfinite(v) else None

    text = str(value).strip().lower()
    for token in ("usd", "us$", "$", ",", "_"):
        text = text.replace(token, "")
    text = text.strip()
    if text in ("", "none", "null", "n/a", "na"):
        return None
    if text in ("true", "yes"):
        return 1.0
    if text in ("false", "no"):
        return 0.0

    match = _AMOUNT_RE.match(text)
    if match is None or match.group(2) not in ("", *_SUFFIXES):
        logger.warning("Unparseable metric value %r treated as missing", value)
        return None
    amount = float(match.group(1))
    if match.group(2):
        amount *= _SUFFIXES[match.group(2)]
    return amount


# ---------------------------------------------------------------------------
# Normalization variants
# ---------------------------------------------------------------------------

def _linear(value: float, rule: MetricRule) -> float:
    return value / rule.max_value * 100


def _boolean(value: float, rule: MetricRule) -> float:
    return 100.0 if value > 0 else 0.0


def _logarithmic(value: float, rule: MetricRule) -> float:
    if value <= 0:
        return 0.0
    return math.log10(value + 1) / math.log10(rule.max_value + 1) * 100


def _inverse(value: float, rule: MetricRule) -> float:
    # Non-positive means not reported; a zero cost is not a perfect score.
    if value <= 0:
        return 0.0
    return (1 - value / rule.max_value) * 100


_NORMALIZERS = {
    "linear": _linear,
    "boolean": _boolean,
    "logarithmic": _logarithmic,
    "inverse": _inverse,
}


def normalize_metric(value: RawValue, rule: MetricRule) -> float:
    """Map one raw metric to a 0-100 sub-score. Missing values score 0."""
    numeric = coerce_raw_value(value)
    if numeric is None:
        return 0.0
    try:
        normalizer = _NORMALIZERS[rule.kind]
    except KeyError:
        raise ValueError(f"Unknown normalization kind: {rule.kind}") from None
    return clamp(normalizer(numeric, rule))


def aggregate_category(
    country: RawCountryMetrics,
    category: CategoryWeight,
    rules: list[MetricRule],
) -> CategoryScore:
    """Weighted sum of a country's sub-scores for one category.

    A category with no rules scores 0. A falsy gate metric zeroes the whole
    category while still reporting the raw values.
    """
    gated_off = False
    if category.gate is not None:
        gate_value = coerce_raw_value(country.metrics.get(category.gate))
        gated_off = not gate_value

    contributions: list[MetricContribution] = []
    total = 0.0
    for rule in rules:
        raw = country.metrics.get(rule.metric)
        sub_score = 0.0 if gated_off else normalize_metric(raw, rule)
        contribution = sub_score * rule.weight
        total += contribution
        contributions.append(MetricContribution(
            metric=rule.metric,
            label=rule.label or rule.metric,
            raw_value=raw,
            unit=rule.unit,
            sub_score=round(sub_score, 2),
            weight=rule.weight,
            contribution=round(contribution, 2),
        ))

    score = round(clamp(total), 2)
    return CategoryScore(
        category=category.category,
        label=category.label,
        score=score,
        weight=category.weight,
        weighted_score=round(score * category.weight, 2),
        metrics=contributions,
    )
