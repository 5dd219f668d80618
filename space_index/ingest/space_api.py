"""Raw country metrics from the upstream space-program REST API or a file."""
from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Callable

import httpx

from space_index.schemas import RawCountryMetrics

logger = logging.getLogger(__name__)

# Upstream field names whose snake_case form differs from the metric name
_FIELD_RENAMES: dict[str, str] = {
    "maxPayloadLeo": "max_payload_leo_kg",
    "maxIsp": "max_isp_s",
    "maxChamberPressure": "max_chamber_pressure_bar",
    "maxProbeDistanceAU": "max_probe_distance_au",
    "hasGNSS": "has_gnss",
    "costPerKgToLeoUsd": "cost_per_kg_leo_usd",
}

# Identity fields, not metrics
_RECORD_FIELDS = {"id", "name", "isoCode", "region", "flagUrl", "spaceAgencyName",
                  "spaceAgencyAcronym", "spaceAgencyLogo", "capabilityScores",
                  "overallCapabilityScore"}

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")


def to_metric_name(field: str) -> str:
    if field in _FIELD_RENAMES:
        return _FIELD_RENAMES[field]
    return _CAMEL_RE.sub("_", field).lower()


def record_to_metrics(record: dict) -> RawCountryMetrics:
    """Map one upstream country record onto the engine's input shape.

    Nested or non-scalar fields are dropped; the engine only scores scalars.
    """
    country_id = record.get("isoCode") or str(record["id"])
    metrics = {}
    for key, value in record.items():
        if key in _RECORD_FIELDS:
            continue
        if value is None or isinstance(value, (bool, int, float, str)):
            metrics[to_metric_name(key)] = value
    return RawCountryMetrics(
        country_id=country_id,
        name=record.get("name") or country_id,
        region=record.get("region") or "Unknown",
        metrics=metrics,
    )


async def fetch_country_records(
    client: httpx.AsyncClient,
    base_url: str,
    timeout: float = 30.0,
) -> list[dict]:
    """GET /countries, accepting a bare list or a paginated {"content": [...]}."""
    resp = await client.get(f"{base_url}/countries", params={"unpaged": "true"}, timeout=timeout)
    resp.raise_for_status()
    data = resp.json()

    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        return data.get("content") or []
    return []


async def fetch_country_metrics(
    base_url: str,
    timeout: float = 30.0,
    log_fn: Callable[[str], None] | None = None,
) -> list[RawCountryMetrics]:
    """Fetch every country from the upstream API as engine input records."""
    if log_fn is None:
        log_fn = logger.info

    async with httpx.AsyncClient() as client:
        log_fn(f"Fetching countries from {base_url}...")
        records = await fetch_country_records(client, base_url, timeout)

    countries: list[RawCountryMetrics] = []
    for record in records:
        if not record.get("isoCode") and record.get("id") is None:
            log_fn(f"  WARN: skipping country record without id: {record.get('name')!r}")
            continue
        countries.append(record_to_metrics(record))
    log_fn(f"  {len(countries)} countries fetched")
    return countries


def load_metrics_file(path: Path) -> list[RawCountryMetrics]:
    """Read engine input records from a JSON file.

    Accepts a bare list or a document with a "countries" list.
    """
    data = json.loads(Path(path).read_text())
    if isinstance(data, dict):
        data = data.get("countries", [])
    return [RawCountryMetrics.model_validate(item) for item in data]


def load_prior_scores(path: Path) -> dict[str, float]:
    """Read {country_id: previous overall score} from a JSON file."""
    data = json.loads(Path(path).read_text())
    return {str(k): float(v) for k, v in data.items() if v is not None}
