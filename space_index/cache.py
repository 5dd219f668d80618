"""Breakdown cache owned by the API layer.

Keyed by (country id, input-data version). The version is a digest of the
raw metrics, the prior score and the calc version, so any change to the
inputs misses the cache instead of serving a stale breakdown.
"""
from __future__ import annotations

import hashlib
import json
import threading
from collections import OrderedDict

from space_index.schemas import RawCountryMetrics, SCIBreakdown
from space_index.score.versions import SCI_CALC_VERSION


def data_version(country: RawCountryMetrics, prior_score: float | None = None) -> str:
    """Stable SHA-256 digest of everything a single breakdown depends on."""
    payload = {
        "calc_version": SCI_CALC_VERSION,
        "country": country.model_dump(mode="json"),
        "prior_score": prior_score,
    }
    blob = json.dumps(payload, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(blob.encode()).hexdigest()


class BreakdownCache:
    """Thread-safe LRU of computed breakdowns."""

    def __init__(self, max_entries: int = 1024) -> None:
        self._lock = threading.Lock()
        self._entries: OrderedDict[tuple[str, str], SCIBreakdown] = OrderedDict()
        self._max_entries = max_entries
        self.hits = 0
        self.misses = 0

    def get(self, country_id: str, version: str) -> SCIBreakdown | None:
        key = (country_id, version)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return None
            self._entries.move_to_end(key)
            self.hits += 1
            return entry

    def put(self, country_id: str, version: str, breakdown: SCIBreakdown) -> None:
        key = (country_id, version)
        with self._lock:
            self._entries[key] = breakdown
            self._entries.move_to_end(key)
            while len(self._entries) > self._max_entries:
                self._entries.popitem(last=False)

    def invalidate(self, country_id: str) -> int:
        """Drop every cached version for a country. Returns entries removed."""
        with self._lock:
            stale = [k for k in self._entries if k[0] == country_id]
            for k in stale:
                del self._entries[k]
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
