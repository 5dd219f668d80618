"""End-to-end check of the SCI API against a running server.

Usage: python -m scripts.e2e_rankings

Requires:
  - Backend running (space-index serve, or uvicorn space_index.main:app)

Steps:
  1. GET /health
  2. GET /v1/sci/weights and /v1/sci/tiers, verify the tables
  3. POST /v1/sci/rankings with the bundled sample countries
  4. POST /v1/sci/compare with the top two breakdowns
  5. Print summary table
"""
from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import httpx

BASE = os.environ.get("E2E_BASE_URL", "http://localhost:8000")
SAMPLE = Path(__file__).resolve().parents[1] / "config" / "sample_countries_v1.json"


def main():
    client = httpx.Client(base_url=BASE, timeout=30)

    print("=== Step 1: Health ===")
    r = client.get("/health")
    if r.status_code != 200:
        print(f"  Server not healthy: {r.status_code} {r.text}")
        sys.exit(1)
    print(f"  {r.json()}")

    print("\n=== Step 2: Tables ===")
    weights = client.get("/v1/sci/weights").json()
    tiers = client.get("/v1/sci/tiers").json()
    total = sum(w["weight"] for w in weights)
    assert abs(total - 1.0) < 1e-6, f"Weights sum to {total}"
    assert tiers[-1]["min_score"] == 0, "Tier table has no 0 floor"
    print(f"  {len(weights)} categories, {len(tiers)} tiers")

    print("\n=== Step 3: Rankings ===")
    countries = json.loads(SAMPLE.read_text())["countries"]
    r = client.post("/v1/sci/rankings", json={"countries": countries})
    assert r.status_code == 200, f"Rankings failed: {r.status_code} {r.text}"
    result = r.json()
    rankings = result["rankings"]
    assert len(rankings) == len(countries)
    assert sorted(b["global_rank"] for b in rankings) == list(range(1, len(countries) + 1))

    print(f"  {'Rank':<5} {'Country':<24} {'SCI':>6} {'Tier':<15} {'Region rank':>11}")
    print(f"  {'-'*5} {'-'*24} {'-'*6} {'-'*15} {'-'*11}")
    for b in rankings:
        print(
            f"  #{b['global_rank']:<4} {b['country_name']:<24} {b['overall_score']:>6.1f} "
            f"{b['tier']:<15} {b['regional_rank']:>11}"
        )
        assert 0 <= b["overall_score"] <= 100
        for cs in b["category_scores"]:
            assert 0 <= cs["score"] <= 100, f"{b['country_id']} {cs['category']}={cs['score']}"

    stats = result["statistics"]
    print(f"\n  mean={stats['average_score']} median={stats['median_score']} "
          f"top={stats['top_score']} bottom={stats['bottom_score']}")

    print("\n=== Step 4: Compare top two ===")
    r = client.post("/v1/sci/compare", json={"breakdowns": rankings[:2]})
    assert r.status_code == 200, f"Compare failed: {r.status_code} {r.text}"
    comparison = r.json()
    assert comparison["overall_leader_id"] == rankings[0]["country_id"]
    for cg in comparison["category_gaps"]:
        assert all(g["gap"] >= 0 for g in cg["gaps"])
        print(f"  {cg['category']:<28} leader {cg['leader_id']} ({cg['leader_score']:.1f})")

    r = client.post("/v1/sci/compare", json={"breakdowns": rankings[:1]})
    assert r.status_code == 422, "Single-country comparison should be rejected"

    print("\n=== E2E PASSED ===")


if __name__ == "__main__":
    main()
