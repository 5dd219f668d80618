"""CLI for the Space Capability Index."""
from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import httpx
import typer

from space_index.config import get_settings
from space_index.ingest.space_api import fetch_country_metrics, load_metrics_file, load_prior_scores
from space_index.schemas import SCIBreakdown
from space_index.score.compare import compare_countries
from space_index.score.errors import ScoringError
from space_index.score.sci import compute_rankings, rank_by_category
from space_index.score.tables import get_tables

app_cli = typer.Typer(name="space-index", help="Space Capability Index CLI")


@app_cli.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log per-country progress")):
    level = logging.DEBUG if verbose else get_settings().log_level
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def _rank(metrics_file: Optional[Path], prior_file: Optional[Path]):
    tables = get_tables()
    countries = load_metrics_file(metrics_file or get_settings().sample_countries_path)
    prior = load_prior_scores(prior_file) if prior_file else {}
    return compute_rankings(countries, tables.weights, tables.tiers, prior, rules=tables.rules)


def _print_table(breakdowns: list[SCIBreakdown], category: str | None = None) -> None:
    header = f"{'#':>3}  {'ID':<5} {'Country':<24} {'Region':<15} {'SCI':>6}  {'Tier':<15} {'Trend':<10}"
    if category:
        header += f" {category}"
    typer.echo(header)
    typer.echo("-" * len(header))
    for b in breakdowns:
        line = (
            f"{b.global_rank or '-':>3}  {b.country_id:<5} {b.country_name[:24]:<24} "
            f"{b.region[:15]:<15} {b.overall_score:>6.1f}  {b.tier:<15} {b.trend:<10}"
        )
        if category:
            line += f" {b.category_score(category):.1f}"
        typer.echo(line)


@app_cli.command()
def rank(
    metrics_file: Optional[Path] = typer.Option(None, "--file", "-f", help="Metrics JSON; defaults to the bundled sample"),
    prior_file: Optional[Path] = typer.Option(None, "--prior", help="JSON of {country_id: previous score}"),
    region: Optional[str] = typer.Option(None, help="Only show one region"),
    category: Optional[str] = typer.Option(None, help="Order by one category's score"),
    as_json: bool = typer.Option(False, "--json", help="Print the full rankings as JSON"),
):
    """Score and rank every country in a metrics file."""
    try:
        result = _rank(metrics_file, prior_file)
        rows = result.rankings
        if category:
            rows = rank_by_category(rows, category)
    except ScoringError as e:
        typer.echo(f"ERROR: {e}", err=True)
        raise typer.Exit(1)

    if region:
        rows = [b for b in rows if b.region == region]

    if as_json:
        typer.echo(json.dumps(
            {**result.model_dump(mode="json"), "rankings": [b.model_dump(mode="json") for b in rows]},
            indent=2,
        ))
        return

    _print_table(rows, category)
    s = result.statistics
    typer.echo(
        f"\n{s.total_countries} countries  mean={s.average_score:.1f}  median={s.median_score:.1f}  "
        f"top={s.top_score:.1f}  bottom={s.bottom_score:.1f}  "
        f"launch-capable={s.countries_with_launch_capability}  "
        f"human-spaceflight={s.countries_with_human_spaceflight}"
    )


@app_cli.command()
def compare(
    country_ids: list[str] = typer.Argument(..., help="Two or more country ids"),
    metrics_file: Optional[Path] = typer.Option(None, "--file", "-f"),
    prior_file: Optional[Path] = typer.Option(None, "--prior"),
):
    """Gap analysis between countries of one ranking batch."""
    try:
        result = _rank(metrics_file, prior_file)
        by_id = {b.country_id: b for b in result.rankings}
        missing = [cid for cid in country_ids if cid not in by_id]
        if missing:
            typer.echo(f"Unknown country id(s): {', '.join(missing)}", err=True)
            raise typer.Exit(1)
        comparison = compare_countries([by_id[cid] for cid in country_ids])
    except ScoringError as e:
        typer.echo(f"ERROR: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"Overall leader: {comparison.overall_leader_name} ({comparison.overall_leader_score:.1f})")
    for g in comparison.overall_gaps:
        if g.country_id != comparison.overall_leader_id:
            typer.echo(f"  {g.country_name}: -{g.gap:.1f}")
    typer.echo("")
    for cg in comparison.category_gaps:
        gaps = ", ".join(
            f"{g.country_id} -{g.gap:.1f}" for g in cg.gaps if g.country_id != cg.leader_id
        )
        typer.echo(f"{cg.category:<28} leader {cg.leader_id} {cg.leader_score:>5.1f}  {gaps}")


@app_cli.command()
def tables():
    """Print the configured category weights and tier thresholds."""
    try:
        t = get_tables()
    except ScoringError as e:
        typer.echo(f"ERROR: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"Scoring tables {t.version}\n")
    for w in t.weights:
        gate = f"  (requires {w.gate})" if w.gate else ""
        typer.echo(f"{w.weight:>5.2f}  {w.label}{gate}")
        for r in t.rules:
            if r.category == w.category:
                ref = f" max={r.max_value:g}" if r.max_value is not None else ""
                typer.echo(f"         {r.weight:>4.2f}  {r.metric:<28} {r.kind}{ref}")
    typer.echo("")
    for tier in t.tiers:
        typer.echo(f">= {tier.min_score:>5.1f}  {tier.tier}")


@app_cli.command()
def fetch(
    out: Path = typer.Argument(..., help="Where to write the metrics JSON"),
    url: Optional[str] = typer.Option(None, help="Upstream API base URL"),
):
    """Fetch raw country metrics from the upstream API into a file."""
    settings = get_settings()
    try:
        countries = asyncio.run(fetch_country_metrics(
            url or settings.data_api_url,
            timeout=settings.data_api_timeout,
            log_fn=typer.echo,
        ))
    except httpx.HTTPError as e:
        typer.echo(f"ERROR: upstream request failed: {e}", err=True)
        raise typer.Exit(1)
    out.write_text(json.dumps(
        {"countries": [c.model_dump(mode="json") for c in countries]}, indent=2,
    ))
    typer.echo(f"Wrote {len(countries)} countries to {out}")


@app_cli.command()
def serve(
    host: str = "0.0.0.0",
    port: int = 8000,
    reload: bool = False,
):
    """Start the API server."""
    import uvicorn
    uvicorn.run("space_index.main:app", host=host, port=port, reload=reload)
