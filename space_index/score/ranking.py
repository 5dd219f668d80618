"""Deterministic ranking: score descending, then country id ascending."""
from __future__ import annotations

from typing import Iterable


def ordering_key(country_id: str, score: float) -> tuple[float, str]:
    """Sort key giving a total order: higher score first, then earlier id."""
    return (-score, country_id)


def rank_scores(entries: Iterable[tuple[str, float]]) -> dict[str, int]:
    """Assign 1-based ranks to (country_id, score) pairs.

    Ties are broken by country id so every rank 1..N is used exactly once.
    """
    ordered = sorted(entries, key=lambda e: ordering_key(e[0], e[1]))
    ranks: dict[str, int] = {}
    for position, (country_id, _) in enumerate(ordered, 1):
        if country_id in ranks:
            raise ValueError(f"Duplicate country id in ranking: {country_id}")
        ranks[country_id] = position
    return ranks


def assign_ranks(
    entries: Iterable[tuple[str, float, str]],
) -> dict[str, tuple[int, int]]:
    """Global and regional rank for (country_id, score, region) triples.

    Returns {country_id: (global_rank, regional_rank)}. Regional ranks are
    re-numbered 1..M inside each region using the same ordering.
    """
    entries = list(entries)
    global_ranks = rank_scores((cid, score) for cid, score, _ in entries)

    by_region: dict[str, list[tuple[str, float]]] = {}
    for cid, score, region in entries:
        by_region.setdefault(region, []).append((cid, score))

    result: dict[str, tuple[int, int]] = {}
    for region_entries in by_region.values():
        regional = rank_scores(region_entries)
        for cid, regional_rank in regional.items():
            result[cid] = (global_ranks[cid], regional_rank)
    return result
