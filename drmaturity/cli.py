"""
cli.py
------
Command-line interface for the drmaturity SDK.

Entry point: ``drmaturity``

Commands
--------
* ``score``     — compute asset, service, dimension and overall scores.
* ``progress``  — show assessment completion per dimension.
* ``complete``  — build an assessment snapshot and archive it.
* ``history``   — list archived snapshots for a site.
* ``export``    — write an archived snapshot (or the site summary) to CSV.

``score``, ``progress`` and ``complete`` read a YAML catalog and an observation
sheet CSV; ``--settings`` points at an optional formula settings YAML file.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Optional, Tuple

import click

from drmaturity import __version__
from drmaturity.archive.comparison import compare_snapshots
from drmaturity.archive.export import export_filename, snapshot_to_frame, summary_frame
from drmaturity.archive.snapshot import AssessmentSnapshot, SnapshotBuilder
from drmaturity.archive.store import LocalSnapshotStore
from drmaturity.connectors.csv import ObservationCSVConnector
from drmaturity.core.catalog import Catalog, load_catalog
from drmaturity.core.config import (
    DEFAULT_FORMULA_SETTINGS,
    ConfigurationError,
    FormulaSettings,
    load_formula_settings,
)
from drmaturity.core.observations import ObservationError, ObservationSet
from drmaturity.scoring.aggregation import AggregationEngine
from drmaturity.scoring.levels import band_for_score, label_for_score
from drmaturity.scoring.progress import ProgressTracker


# ---------------------------------------------------------------------------
# Helpers: rendering
# ---------------------------------------------------------------------------

_BAND_COLOURS = {
    "excellent": "green",
    "good": "cyan",
    "fair": "yellow",
    "weak": "magenta",
    "poor": "red",
}


def _score_bar(score: float, width: int = 30) -> str:
    """Render a simple ASCII bar for a 0–5 score."""
    filled = max(0, min(width, int(round((score / 5) * width))))
    bar = "█" * filled + "░" * (width - filled)
    return f"[{bar}] {score:.1f}/5.0"


def _percent_bar(percent: float, width: int = 30) -> str:
    filled = max(0, min(width, int(round((percent / 100) * width))))
    bar = "█" * filled + "░" * (width - filled)
    return f"[{bar}] {percent:.1f}%"


def _score_label(score: float) -> str:
    """Return a coloured level label for a score, or 'Not Rated'."""
    if score <= 0:
        return click.style("Not Rated", fg="bright_black")
    colour = _BAND_COLOURS[band_for_score(score)]
    return click.style(f"{score:.1f}  {label_for_score(score)}", fg=colour)


def _heading(title: str, divider: str) -> None:
    click.echo(f"\n{divider}")
    click.echo(click.style(f"  {title}", bold=True, fg="bright_white"))
    click.echo(divider)


def _fail(message: str) -> None:
    click.echo(click.style(f"\n✗  {message}", fg="red"), err=True)
    sys.exit(1)


# ---------------------------------------------------------------------------
# Helpers: loading
# ---------------------------------------------------------------------------

def _load_inputs(
    catalog_path: str,
    observations_path: str,
    settings_path: Optional[str],
) -> Tuple[Catalog, ObservationSet, FormulaSettings, dict]:
    """Load catalog, observations and settings, exiting with 1 on error."""
    try:
        catalog = load_catalog(catalog_path)
        settings = (
            load_formula_settings(settings_path) if settings_path else DEFAULT_FORMULA_SETTINGS
        )
        connector = ObservationCSVConnector(observations_path)
        connector.connect()
        header = connector.read_header()
        observations = connector.load_observations(catalog)
    except (ConfigurationError, ObservationError, FileNotFoundError, ValueError) as exc:
        _fail(f"Could not load assessment inputs: {exc}")
    return catalog, observations, settings, header


def _resolve_site(catalog: Catalog, site_id: Optional[int], header: dict):
    site_id = site_id if site_id is not None else header.get("site_id")
    if site_id is None:
        raise click.UsageError("--site is required when the sheet has no SiteId row.")
    try:
        return catalog.site(site_id)
    except KeyError:
        _fail(f"Site {site_id} is not in the catalog.")


_input_arguments = [
    click.argument("catalog_path", type=click.Path(exists=True, dir_okay=False)),
    click.argument("observations_path", type=click.Path(exists=True, dir_okay=False)),
    click.option("--site", "site_id", type=int, default=None,
                 help="Site id (defaults to the sheet's SiteId row)."),
    click.option("--service", "service_id", type=int, default=None,
                 help="Restrict the assets in scope to one service."),
    click.option("--settings", "settings_path",
                 type=click.Path(exists=True, dir_okay=False), default=None,
                 help="Formula settings YAML file."),
    click.option("--output", "output_format",
                 type=click.Choice(["pretty", "json"], case_sensitive=False),
                 default="pretty", show_default=True,
                 help="Output format: pretty (default) or json."),
]


def _with_inputs(func):
    for decorator in reversed(_input_arguments):
        func = decorator(func)
    return func


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------

@click.group()
@click.version_option(version=__version__, prog_name="drmaturity")
def cli():
    """drmaturity — disaster-recovery maturity assessment toolkit."""


# ---------------------------------------------------------------------------
# score
# ---------------------------------------------------------------------------

@cli.command()
@_with_inputs
def score(catalog_path, observations_path, site_id, service_id, settings_path, output_format):
    """
    Compute maturity scores for the assets of a site.

    \b
    CATALOG_PATH       YAML reference catalog (dimensions, assets, services, sites).
    OBSERVATIONS_PATH  Observation sheet CSV.
    """
    catalog, observations, settings, header = _load_inputs(
        catalog_path, observations_path, settings_path
    )
    site = _resolve_site(catalog, site_id, header)
    assets = catalog.assets_for_site(site.id, service_id=service_id)
    engine = AggregationEngine(catalog, settings)

    try:
        overall = engine.overall_score(assets, observations)
        dimensions = engine.dimension_averages(assets, observations)
        asset_scores = {a.id: engine.asset_score(a.id, observations) for a in assets}
        service_scores = {
            s.id: engine.service_score(s.id, site.id, observations) for s in catalog.services
        }
    except ConfigurationError as exc:
        _fail(f"Configuration error: {exc}")

    if output_format == "json":
        click.echo(json.dumps({
            "site_id": site.id,
            "overall_score": round(overall, 2),
            "dimensions": {str(k): round(v, 2) for k, v in dimensions.items()},
            "assets": {str(k): round(v, 2) for k, v in asset_scores.items()},
            "services": {str(k): round(v, 2) for k, v in service_scores.items() if v > 0},
        }, indent=2))
        return

    divider = click.style("─" * 60, fg="bright_black")
    _heading("DR MATURITY SCORES", divider)
    click.echo(f"  Site      : {site.name}")
    click.echo(f"  Assets    : {len(assets)}")
    click.echo(f"  Overall   : {click.style(_score_bar(overall), bold=True)}")

    _heading("DIMENSIONS", divider)
    for dimension in catalog.dimensions:
        click.echo(f"  {dimension.name:<28} {_score_label(dimensions[dimension.id])}")

    _heading("ASSETS", divider)
    for asset in assets:
        click.echo(f"  {asset.name:<28} {_score_label(asset_scores[asset.id])}")

    scored_services = [s for s in catalog.services if service_scores[s.id] > 0]
    if scored_services:
        _heading("SERVICES", divider)
        for service in scored_services:
            click.echo(f"  {service.name:<28} {_score_label(service_scores[service.id])}")
    click.echo(f"\n{divider}\n")


# ---------------------------------------------------------------------------
# progress
# ---------------------------------------------------------------------------

@cli.command()
@_with_inputs
def progress(catalog_path, observations_path, site_id, service_id, settings_path, output_format):
    """Show how much of the assessment has been scored."""
    catalog, observations, settings, header = _load_inputs(
        catalog_path, observations_path, settings_path
    )
    site = _resolve_site(catalog, site_id, header)
    assets = catalog.assets_for_site(site.id, service_id=service_id)

    try:
        result = ProgressTracker(catalog, settings).progress(assets, observations)
    except ConfigurationError as exc:
        _fail(f"Configuration error: {exc}")

    if output_format == "json":
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    divider = click.style("─" * 60, fg="bright_black")
    _heading("ASSESSMENT PROGRESS", divider)
    click.echo(f"  Site      : {site.name}")
    click.echo(f"  Overall   : {click.style(_percent_bar(result.overall_percent), bold=True)}")

    _heading("DIMENSIONS", divider)
    for dim in result.per_dimension:
        click.echo(
            f"  {dim.name:<24} {dim.completed_fraction:>6.0%}  "
            f"({dim.completed_parameters}/{dim.total_parameters})  {_score_label(dim.score)}"
        )
    click.echo(f"\n{divider}\n")


# ---------------------------------------------------------------------------
# complete
# ---------------------------------------------------------------------------

@cli.command()
@_with_inputs
@click.option("--auditor", type=str, default=None,
              help="Auditor name (defaults to the sheet's Auditor row).")
@click.option("--store", "store_root", type=click.Path(file_okay=False), default=None,
              help="Snapshot archive directory (default ~/.drmaturity/snapshots).")
def complete(
    catalog_path, observations_path, site_id, service_id, settings_path, output_format,
    auditor, store_root,
):
    """Complete the assessment: build a snapshot and archive it."""
    catalog, observations, settings, header = _load_inputs(
        catalog_path, observations_path, settings_path
    )
    site = _resolve_site(catalog, site_id, header)
    auditor = auditor or header.get("auditor")
    if not auditor or not auditor.strip():
        raise click.UsageError("An auditor is required to complete an assessment.")

    store = LocalSnapshotStore(Path(store_root) if store_root else None)
    previous = store.load_latest(site.id)

    assets = catalog.assets_for_site(site.id, service_id=service_id)
    try:
        snapshot = SnapshotBuilder(catalog, settings).build(
            site, auditor.strip(), assets, observations
        )
        store_path = store.save(snapshot)
    except (ConfigurationError, ValueError) as exc:
        _fail(f"Could not complete assessment: {exc}")

    if output_format == "json":
        click.echo(snapshot.to_json())
        return

    divider = click.style("─" * 60, fg="bright_black")
    _heading("ASSESSMENT COMPLETED", divider)
    click.echo(f"  Site      : {site.name}")
    click.echo(f"  Auditor   : {snapshot.auditor}")
    click.echo(f"  Date      : {snapshot.assessed_on}")
    click.echo(f"  Overall   : {_score_label(snapshot.overall_value)}")
    click.echo(f"  Snapshot  : {click.style(snapshot.snapshot_id, fg='cyan')}")
    click.echo(f"  Archived → {click.style(str(store_path), fg='cyan')}")

    if previous is not None:
        _print_comparison(compare_snapshots(snapshot, previous), divider)
    click.echo(f"\n{divider}\n")


def _print_comparison(report: dict, divider: str) -> None:
    _heading("CHANGE SINCE LAST ASSESSMENT", divider)
    delta = report["score_delta"]
    colour = "green" if delta >= 0 else "red"
    sign = "+" if delta >= 0 else ""
    click.echo(f"  Previous  : {report['previous_score']:.1f}")
    click.echo(f"  Current   : {report['current_score']:.1f}")
    click.echo(
        f"  Delta     : {click.style(f'{sign}{delta:.1f}', fg=colour, bold=True)}"
        f"  ({report['change'].upper()})"
    )


# ---------------------------------------------------------------------------
# history
# ---------------------------------------------------------------------------

@cli.command()
@click.option("--site", "site_id", type=int, required=True, help="Site id.")
@click.option("--store", "store_root", type=click.Path(file_okay=False), default=None,
              help="Snapshot archive directory.")
@click.option("--output", "output_format",
              type=click.Choice(["pretty", "json"], case_sensitive=False),
              default="pretty", show_default=True)
def history(site_id, store_root, output_format):
    """List archived assessments for a site, newest first."""
    store = LocalSnapshotStore(Path(store_root) if store_root else None)
    snapshots = store.load_all(site_id)

    if output_format == "json":
        click.echo(summary_frame(snapshots).to_json(orient="records", indent=2))
        return

    divider = click.style("─" * 60, fg="bright_black")
    _heading("ASSESSMENT HISTORY", divider)
    if not snapshots:
        click.echo("  No assessments archived for this site.")
    for i, snapshot in enumerate(reversed(snapshots), start=1):
        click.echo(
            f"  [{i:>2}]  {click.style(snapshot.date.strftime('%Y-%m-%d %H:%M UTC'), fg='cyan')}"
            f"  score={click.style(snapshot.overall_score, fg='green', bold=True)}"
            f"  by={snapshot.auditor}"
            f"  id={click.style(snapshot.snapshot_id, fg='bright_black')}"
        )
    click.echo(divider)


# ---------------------------------------------------------------------------
# export
# ---------------------------------------------------------------------------

@cli.command()
@click.option("--site", "site_id", type=int, required=True, help="Site id.")
@click.option("--snapshot", "snapshot_id", type=str, default=None,
              help="Snapshot id (defaults to the latest).")
@click.option("--summary", is_flag=True, default=False,
              help="Export one summary row per archived snapshot instead of detail rows.")
@click.option("--store", "store_root", type=click.Path(file_okay=False), default=None,
              help="Snapshot archive directory.")
@click.option("--out", "out_path", type=click.Path(dir_okay=False), default=None,
              help="Destination CSV (defaults to assessment-<site>-<date>.csv).")
def export(site_id, snapshot_id, summary, store_root, out_path):
    """Export archived assessments to CSV."""
    store = LocalSnapshotStore(Path(store_root) if store_root else None)

    if summary:
        snapshots = store.load_all(site_id)
        if not snapshots:
            _fail(f"No assessments archived for site {site_id}.")
        frame = summary_frame(snapshots)
        destination = Path(out_path or f"assessments-site-{site_id}.csv")
    else:
        snapshot: Optional[AssessmentSnapshot] = (
            store.get(site_id, snapshot_id) if snapshot_id else store.load_latest(site_id)
        )
        if snapshot is None:
            _fail(f"No archived assessment found for site {site_id}.")
        frame = snapshot_to_frame(snapshot)
        destination = Path(out_path or export_filename(snapshot))

    frame.to_csv(destination, index=False)
    click.echo(
        f"📄  Exported {len(frame)} row(s) → {click.style(str(destination), fg='cyan')}"
    )
