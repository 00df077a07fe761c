# src/modpurger/cli_formatters.py
"""CLI output for purge targets and run summaries.

Console output is for operators; JSON output is one document on stdout
for orchestrators. Logs go to stderr in both cases.
"""

from __future__ import annotations

import json
from typing import Any

import typer

from modpurger.contracts.models import PurgeTarget
from modpurger.contracts.results import PurgeSummary, TargetReport
from modpurger.core.retention.purge import format_size


def echo_targets(targets: list[PurgeTarget]) -> None:
    """List resolved targets, oldest first."""
    typer.echo(f"About to purge {len(targets)} module cache(s):")
    for target in targets:
        typer.echo(f"  {target}  youngest file {target.retention_boundary.isoformat()}")


def _report_line(report: TargetReport) -> str:
    target = report.target
    counters = report.counters
    location = f"gs://{target.bucket}/{target.prefix}"
    if report.dry_run:
        return f"  {location}: would delete {report.candidates} of {counters.considered} file(s)"
    if report.declined:
        return f"  {location}: declined ({report.candidates} file(s) kept)"
    skipped = f", {counters.skipped} skipped" if counters.skipped else ""
    return (
        f"  {location}: deleted {counters.deleted} file(s){skipped}, "
        f"{format_size(counters.bytes_reclaimed)} reclaimed in {report.duration_seconds:.2f}s"
    )


def echo_console_summary(summary: PurgeSummary, *, dry_run: bool) -> None:
    """Print the per-target lines and the run total."""
    for report in summary.reports:
        typer.echo(_report_line(report))
        if report.dry_run:
            for key in report.sample_keys:
                typer.echo(f"    {key}")
            if report.candidates > len(report.sample_keys):
                typer.echo(f"    ... and {report.candidates - len(report.sample_keys)} more")

    totals = summary.totals
    if dry_run:
        typer.echo(f"Dry run: {summary.candidates} file(s) would be purged.")
        return
    typer.echo(
        f"Purged {totals.deleted} file(s), {format_size(totals.bytes_reclaimed)} reclaimed "
        f"in {summary.duration_seconds:.2f}s."
    )
    if totals.skipped:
        typer.echo(f"  Skipped after retry: {totals.skipped}")


def summary_to_dict(summary: PurgeSummary, *, dry_run: bool) -> dict[str, Any]:
    return {
        "dry_run": dry_run,
        "duration_seconds": round(summary.duration_seconds, 3),
        "totals": {**summary.totals.as_dict(), "candidates": summary.candidates},
        "targets": [
            {
                "bucket": report.target.bucket,
                "network": report.target.scope,
                "subfolder": report.target.sub_path,
                "retention_boundary": report.target.retention_boundary.isoformat(),
                "candidates": report.candidates,
                "declined": report.declined,
                "sample_keys": report.sample_keys if dry_run else [],
                **report.counters.as_dict(),
            }
            for report in summary.reports
        ],
    }


def echo_json_summary(summary: PurgeSummary, *, dry_run: bool) -> None:
    typer.echo(json.dumps(summary_to_dict(summary, dry_run=dry_run)))
