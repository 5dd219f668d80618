"""Tests for ingest: mocked HTTP responses and temp files."""
from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from space_index.ingest.space_api import (
    fetch_country_metrics,
    fetch_country_records,
    load_metrics_file,
    load_prior_scores,
    record_to_metrics,
    to_metric_name,
)

_RECORD = {
    "id": 1,
    "name": "United States",
    "isoCode": "USA",
    "region": "North America",
    "spaceAgencyName": "NASA",
    "humanSpaceflightCapable": True,
    "activeAstronauts": 41,
    "maxPayloadLeo": 140000,
    "hasGNSS": True,
    "annualBudgetUsd": "$25.4B",
    "capabilityScores": [{"category": "LAUNCH_CAPABILITY", "score": 99}],
    "launchSites": None,
}


def _mock_client(payload) -> AsyncMock:
    mock_resp = MagicMock()
    mock_resp.json.return_value = payload
    mock_resp.raise_for_status = MagicMock()

    mock_client = AsyncMock()
    mock_client.get.return_value = mock_resp
    return mock_client


# ---------------------------------------------------------------------------
# Record mapping
# ---------------------------------------------------------------------------

class TestRecordMapping:
    @pytest.mark.parametrize("field,metric", [
        ("activeAstronauts", "active_astronauts"),
        ("humanSpaceflightCapable", "human_spaceflight_capable"),
        ("maxPayloadLeo", "max_payload_leo_kg"),
        ("hasGNSS", "has_gnss"),
        ("launchSites", "launch_sites"),
    ])
    def test_metric_names(self, field, metric):
        assert to_metric_name(field) == metric

    def test_record_to_metrics(self):
        c = record_to_metrics(_RECORD)
        assert c.country_id == "USA"
        assert c.name == "United States"
        assert c.region == "North America"
        assert c.metrics["active_astronauts"] == 41
        assert c.metrics["max_payload_leo_kg"] == 140000
        assert c.metrics["annual_budget_usd"] == "$25.4B"
        assert c.metrics["launch_sites"] is None
        # identity and nested fields are not metrics
        assert "space_agency_name" not in c.metrics
        assert "capability_scores" not in c.metrics

    def test_falls_back_to_numeric_id(self):
        c = record_to_metrics({"id": 7, "activeSatellites": 3})
        assert c.country_id == "7"
        assert c.name == "7"
        assert c.region == "Unknown"


# ---------------------------------------------------------------------------
# Upstream API
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_fetch_country_records_bare_list():
    client = _mock_client([_RECORD])
    records = await fetch_country_records(client, "http://api")
    assert records == [_RECORD]
    client.get.assert_awaited_once()
    assert client.get.call_args.args[0] == "http://api/countries"


@pytest.mark.asyncio
async def test_fetch_country_records_paginated():
    client = _mock_client({"content": [_RECORD], "totalElements": 1})
    assert await fetch_country_records(client, "http://api") == [_RECORD]


@pytest.mark.asyncio
async def test_fetch_country_records_unexpected_payload():
    client = _mock_client("nope")
    assert await fetch_country_records(client, "http://api") == []


@pytest.mark.asyncio
async def test_fetch_country_metrics_skips_records_without_id():
    client = _mock_client([_RECORD, {"name": "Nowhere"}])
    client.__aenter__.return_value = client
    logs: list[str] = []

    with patch("space_index.ingest.space_api.httpx.AsyncClient", return_value=client):
        countries = await fetch_country_metrics("http://api", log_fn=logs.append)

    assert [c.country_id for c in countries] == ["USA"]
    assert any("skipping" in line for line in logs)


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------

class TestFiles:
    def test_load_metrics_document(self, tmp_path):
        path = tmp_path / "m.json"
        path.write_text(json.dumps({"countries": [
            {"country_id": "NZL", "region": "Oceania", "metrics": {"launch_sites": 1}},
        ]}))
        [c] = load_metrics_file(path)
        assert c.country_id == "NZL"
        assert c.name == "NZL"
        assert c.metrics == {"launch_sites": 1}

    def test_load_metrics_bare_list(self, tmp_path):
        path = tmp_path / "m.json"
        path.write_text(json.dumps([{"country_id": "A"}, {"country_id": "B"}]))
        assert [c.country_id for c in load_metrics_file(path)] == ["A", "B"]

    def test_load_prior_scores(self, tmp_path):
        path = tmp_path / "p.json"
        path.write_text(json.dumps({"USA": 98.1, "CHN": 70, "XXX": None}))
        assert load_prior_scores(path) == {"USA": 98.1, "CHN": 70.0}

    def test_bundled_sample_loads(self):
        from space_index.config import get_settings
        countries = load_metrics_file(get_settings().sample_countries_path)
        assert len(countries) == 13
        assert len({c.country_id for c in countries}) == 13
