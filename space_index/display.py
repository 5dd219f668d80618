"""Presentation metadata for categories and tiers.

Kept apart from the scoring tables: the engine never reads this, only the
API layer when it serves the tables to clients.
"""
from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path

from space_index.config import get_settings
from space_index.score.tables import CategoryWeight, TierThreshold


def load_display(path: Path | None = None) -> dict:
    if path is None:
        path = get_settings().display_config_path
    return json.loads(Path(path).read_text())


@lru_cache
def get_display() -> dict:
    return load_display()


def describe_weights(weights: tuple[CategoryWeight, ...], display: dict) -> list[dict]:
    """Category weights merged with their display metadata."""
    meta = display.get("categories", {})
    items = []
    for w in weights:
        extra = meta.get(w.category, {})
        items.append({
            "category": w.category,
            "label": extra.get("label", w.label),
            "weight": w.weight,
            "icon": extra.get("icon"),
            "color": extra.get("color"),
            "description": extra.get("description"),
        })
    return items


def describe_tiers(tiers: tuple[TierThreshold, ...], display: dict) -> list[dict]:
    meta = display.get("tiers", {})
    return [
        {
            "tier": t.tier,
            "min_score": t.min_score,
            "color": meta.get(t.tier, {}).get("color"),
            "description": meta.get(t.tier, {}).get("description"),
        }
        for t in tiers
    ]
