"""Static scoring tables: category weights, metric rules and tier thresholds.

The tables are loaded once from a versioned JSON file and validated before
any score is produced. Presentation metadata (icons, colours) is kept out of
these structures; see ``space_index.display``.
"""
from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from space_index.config import get_settings
from space_index.score.errors import ConfigurationError

logger = logging.getLogger(__name__)

RULE_KINDS = ("linear", "boolean", "logarithmic", "inverse")


@dataclass(frozen=True)
class CategoryWeight:
    category: str
    label: str
    weight: float
    gate: str | None = None


@dataclass(frozen=True)
class MetricRule:
    """How one raw metric feeds one category.

    ``kind`` tags the normalization variant; ``max_value`` is the reference
    maximum for the scaled kinds and is ignored by ``boolean``.
    """
    category: str
    metric: str
    kind: str
    weight: float
    max_value: float | None = None
    label: str = ""
    unit: str | None = None


@dataclass(frozen=True)
class TierThreshold:
    tier: str
    min_score: float


@dataclass(frozen=True)
class ScoringTables:
    version: str
    weights: tuple[CategoryWeight, ...]
    rules: tuple[MetricRule, ...]
    tiers: tuple[TierThreshold, ...]


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def validate_weights(weights, tolerance: float | None = None) -> None:
    """Reject a category weight table that does not sum to 1.0."""
    if tolerance is None:
        tolerance = get_settings().weight_tolerance
    if not weights:
        raise ConfigurationError("Category weight table is empty")

    seen: set[str] = set()
    for w in weights:
        if w.category in seen:
            raise ConfigurationError(f"Duplicate category '{w.category}' in weight table")
        seen.add(w.category)
        if not math.isfinite(w.weight) or w.weight < 0:
            raise ConfigurationError(f"Category '{w.category}' has invalid weight {w.weight!r}")

    total = math.fsum(w.weight for w in weights)
    if abs(total - 1.0) > tolerance:
        raise ConfigurationError(f"Category weights sum to {total:.9f}, expected 1.0")


def validate_rules(rules, weights, tolerance: float | None = None) -> None:
    """Check every rule is well formed and local weights sum to 1.0 per category."""
    if tolerance is None:
        tolerance = get_settings().weight_tolerance
    categories = {w.category for w in weights}
    per_category: dict[str, list[MetricRule]] = {}

    for rule in rules:
        if rule.category not in categories:
            raise ConfigurationError(
                f"Metric '{rule.metric}' references unknown category '{rule.category}'"
            )
        if rule.kind not in RULE_KINDS:
            raise ConfigurationError(f"Metric '{rule.metric}' has unknown rule kind '{rule.kind}'")
        if rule.kind != "boolean" and (rule.max_value is None or rule.max_value <= 0):
            raise ConfigurationError(
                f"Metric '{rule.metric}' ({rule.kind}) needs a positive max_value"
            )
        if not math.isfinite(rule.weight) or rule.weight < 0:
            raise ConfigurationError(f"Metric '{rule.metric}' has invalid weight {rule.weight!r}")
        per_category.setdefault(rule.category, []).append(rule)

    for category, cat_rules in per_category.items():
        names = [r.metric for r in cat_rules]
        if len(names) != len(set(names)):
            raise ConfigurationError(f"Duplicate metric in category '{category}'")
        total = math.fsum(r.weight for r in cat_rules)
        if abs(total - 1.0) > tolerance:
            raise ConfigurationError(
                f"Metric weights for '{category}' sum to {total:.9f}, expected 1.0"
            )

    for w in weights:
        if w.gate is not None and w.gate not in {r.metric for r in per_category.get(w.category, [])}:
            raise ConfigurationError(
                f"Gate metric '{w.gate}' is not a metric of category '{w.category}'"
            )


def validate_tiers(tiers) -> None:
    """The tier table must be strictly descending and end at a 0 floor."""
    if not tiers:
        raise ConfigurationError("Tier table is empty")

    previous = None
    for t in tiers:
        if not 0 <= t.min_score <= 100:
            raise ConfigurationError(f"Tier '{t.tier}' minimum {t.min_score} is outside [0, 100]")
        if previous is not None and t.min_score >= previous:
            raise ConfigurationError("Tier table must be ordered by strictly descending min_score")
        previous = t.min_score

    if tiers[-1].min_score != 0:
        raise ConfigurationError("Tier table has no 0-minimum floor tier")


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

def parse_tables(config: dict) -> ScoringTables:
    """Build and validate scoring tables from a parsed config document."""
    try:
        weights: list[CategoryWeight] = []
        rules: list[MetricRule] = []
        for cat in config["categories"]:
            weights.append(CategoryWeight(
                category=cat["category"],
                label=cat.get("label", cat["category"]),
                weight=float(cat["weight"]),
                gate=cat.get("gate"),
            ))
            for m in cat.get("metrics", []):
                max_value = m.get("max_value")
                rules.append(MetricRule(
                    category=cat["category"],
                    metric=m["metric"],
                    kind=m["kind"],
                    weight=float(m["weight"]),
                    max_value=float(max_value) if max_value is not None else None,
                    label=m.get("label", m["metric"]),
                    unit=m.get("unit"),
                ))
        tiers = [
            TierThreshold(tier=t["tier"], min_score=float(t["min_score"]))
            for t in config["tiers"]
        ]
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigurationError(f"Malformed scoring config: {e!r}") from e

    validate_weights(weights)
    validate_rules(rules, weights)
    validate_tiers(tiers)

    return ScoringTables(
        version=config.get("version", "unversioned"),
        weights=tuple(weights),
        rules=tuple(rules),
        tiers=tuple(tiers),
    )


def load_tables(path: Path | None = None) -> ScoringTables:
    """Load the scoring config file."""
    if path is None:
        path = get_settings().sci_config_path
    tables = parse_tables(json.loads(Path(path).read_text()))
    logger.info(
        "Loaded scoring tables %s: %d categories, %d metric rules, %d tiers",
        tables.version, len(tables.weights), len(tables.rules), len(tables.tiers),
    )
    return tables


@lru_cache
def get_tables() -> ScoringTables:
    return load_tables()


def get_category_weights() -> tuple[CategoryWeight, ...]:
    return get_tables().weights


def get_metric_rules() -> tuple[MetricRule, ...]:
    return get_tables().rules


def get_tier_thresholds() -> tuple[TierThreshold, ...]:
    return get_tables().tiers


def rules_by_category(rules) -> dict[str, list[MetricRule]]:
    grouped: dict[str, list[MetricRule]] = {}
    for rule in rules:
        grouped.setdefault(rule.category, []).append(rule)
    return grouped
