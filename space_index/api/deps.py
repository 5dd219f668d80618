from __future__ import annotations

from functools import lru_cache

from space_index.cache import BreakdownCache
from space_index.config import get_settings
from space_index.score.tables import ScoringTables, get_tables


def get_scoring_tables() -> ScoringTables:
    """FastAPI dependency for the process-wide scoring tables."""
    return get_tables()


@lru_cache
def get_breakdown_cache() -> BreakdownCache:
    return BreakdownCache(max_entries=get_settings().breakdown_cache_size)
