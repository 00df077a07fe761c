# src/modpurger/cli.py
"""modpurger Command Line Interface.

Entry point for the modpurger CLI tool.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import TYPE_CHECKING, Literal

import typer
from pydantic import ValidationError

from modpurger import __version__
from modpurger.cli_formatters import echo_console_summary, echo_json_summary, echo_targets
from modpurger.contracts import (
    ArtifactKind,
    ClassificationError,
    ConfigurationError,
    Decision,
    PurgeError,
    PurgeSummary,
    PurgeTarget,
)
from modpurger.core.config import PurgerSettings, expand_env_vars, load_settings
from modpurger.core.datastore.keys import classify
from modpurger.core.retention import (
    AgeCriteria,
    BlockWindow,
    ConfirmationGate,
    ObjectFilter,
    PurgeManager,
    SafetyValidator,
    SubfolderCriteria,
)

if TYPE_CHECKING:
    from modpurger.contracts import ObjectStore

__all__ = ["app"]

app = typer.Typer(
    name="modpurger",
    help="modpurger: retention enforcement for substreams module caches.",
    no_args_is_help=True,
)

_DECISION_ANSWERS: dict[str, Decision] = {
    "y": Decision.YES,
    "yes": Decision.YES,
    "n": Decision.NO,
    "no": Decision.NO,
    "a": Decision.YES_TO_ALL,
    "all": Decision.YES_TO_ALL,
}

_DATETIME_FORMATS = ["%Y-%m-%dT%H:%M:%S%z", "%Y-%m-%dT%H:%M:%S", "%Y-%m-%d"]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"modpurger version {__version__}")
        raise typer.Exit()


def _load_dotenv(env_file: Path | None = None) -> bool:
    """Load environment variables from .env file.

    Args:
        env_file: Explicit path to .env file. If None, searches for .env
                 in current directory and parent directories.

    Returns:
        True if .env was found and loaded, False otherwise.

    Raises:
        typer.Exit: If explicit env_file path doesn't exist.
    """
    from dotenv import load_dotenv

    if env_file is not None:
        if not env_file.exists():
            typer.secho(
                f"Error: .env file not found: {env_file}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(1)
        return load_dotenv(env_file, override=False)

    return load_dotenv(override=False)  # Don't override existing env vars


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    no_dotenv: bool = typer.Option(
        False,
        "--no-dotenv",
        help="Skip loading .env file.",
    ),
    env_file: Path | None = typer.Option(
        None,
        "--env-file",
        help="Path to .env file (skips automatic search).",
        exists=False,  # We handle existence check ourselves for better error message
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose/debug logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output structured JSON logs (for machine processing).",
    ),
) -> None:
    """modpurger: retention enforcement for substreams module caches."""
    from modpurger.core.logging import configure_logging

    log_level = "DEBUG" if verbose else "INFO"
    configure_logging(json_output=json_logs, level=log_level)

    if not no_dotenv:
        _load_dotenv(env_file=env_file)
    elif env_file is not None:
        typer.secho(
            "Warning: --env-file ignored because --no-dotenv is set.",
            fg=typer.colors.YELLOW,
            err=True,
        )


def _load_config(settings: Path | None) -> PurgerSettings:
    """Load settings from an explicit path, ./settings.yaml, or defaults."""
    settings_path = settings.expanduser() if settings is not None else Path("settings.yaml")
    if settings is None and not settings_path.exists():
        return PurgerSettings()
    try:
        config = load_settings(settings_path)
    except FileNotFoundError:
        typer.echo(f"Error: Settings file not found: {settings_path}", err=True)
        raise typer.Exit(1) from None
    except ValidationError as e:
        typer.echo("Configuration errors:", err=True)
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            typer.echo(f"  - {loc}: {error['msg']}", err=True)
        raise typer.Exit(1) from None
    if settings is None:
        typer.echo(f"Using settings from {settings_path}", err=True)
    return config


def _create_object_store(config: PurgerSettings, billing_project: str | None) -> ObjectStore:
    """Create the bucket storage backend."""
    from modpurger.core.storage.gcs import GCSObjectStore

    return GCSObjectStore(
        project=config.storage.project,
        billing_project=billing_project or config.storage.billing_project,
        request_timeout_seconds=config.storage.request_timeout_seconds,
    )


def _prompt_decision(prompt: str) -> Decision:
    """Ask the operator yes / no / all for one target."""
    while True:
        answer = typer.prompt(f"{prompt} [y]es/[n]o/[a]ll", default="n").strip().lower()
        if answer in _DECISION_ANSWERS:
            return _DECISION_ANSWERS[answer]
        typer.echo("Please answer y, n or a.", err=True)


def _build_manager(
    config: PurgerSettings,
    *,
    billing_project: str | None,
    workers: int | None,
    yes: bool,
    object_filter: ObjectFilter | None = None,
) -> PurgeManager:
    from modpurger.core.pooling import DeletionPool
    from modpurger.core.storage import ObjectLister

    try:
        store = _create_object_store(config, billing_project)
    except Exception as e:
        typer.echo(f"Error creating storage client: {e}", err=True)
        raise typer.Exit(1) from None

    return PurgeManager(
        store,
        lister=ObjectLister(store, timeout_seconds=config.storage.list_timeout_seconds),
        pool=DeletionPool(config.pool.to_pool_config(workers=workers)),
        validator=SafetyValidator(config.retention.partial_suffix),
        gate=ConfirmationGate.always_yes() if yes else ConfirmationGate(_prompt_decision),
        object_filter=object_filter,
        list_limit=config.storage.list_limit,
    )


def _execute(
    manager: PurgeManager,
    targets: list[PurgeTarget],
    *,
    dry_run: bool,
    output_format: Literal["console", "json"],
) -> PurgeSummary:
    """Run the purge and print the summary. Fatal purge errors exit 1."""
    try:
        summary = manager.purge(targets, dry_run=dry_run)
    except PurgeError as e:
        typer.echo(f"Error: {e}", err=True)
        typer.echo("Purge aborted.", err=True)
        raise typer.Exit(1) from None

    if output_format == "json":
        echo_json_summary(summary, dry_run=dry_run)
    else:
        echo_console_summary(summary, dry_run=dry_run)
    return summary


@app.command()
def purge(
    settings: Path | None = typer.Option(
        None,
        "--settings",
        "-s",
        help="Path to settings YAML file (default: ./settings.yaml if present).",
    ),
    database: str | None = typer.Option(
        None,
        "--database",
        "-d",
        help="Metadata database DSN; ${VAR} references are expanded (default: from settings).",
    ),
    network: str | None = typer.Option(
        None,
        "--network",
        "-n",
        help="Network whose stale module caches are purged.",
    ),
    subfolder: str | None = typer.Option(
        None,
        "--subfolder",
        help="Purge this literal subfolder instead of every stale module of the network.",
    ),
    single: bool = typer.Option(
        False,
        "--single",
        help="With --subfolder, purge only the oldest matching module.",
    ),
    max_age_days: int | None = typer.Option(
        None,
        "--max-age-days",
        "-r",
        help="Purge modules whose youngest file is older than this (default: from config or 30).",
    ),
    billing_project: str | None = typer.Option(
        None,
        "--billing-project",
        help="Project billed for requester-pays buckets.",
    ),
    workers: int | None = typer.Option(
        None,
        "--workers",
        "-w",
        min=1,
        help="Concurrent delete workers (default: from config or 250).",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Show what would be deleted without deleting.",
    ),
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Skip confirmation prompts.",
    ),
    output_format: Literal["console", "json"] = typer.Option(
        "console",
        "--format",
        "-f",
        help="Output format: 'console' (human-readable) or 'json' (structured JSON).",
    ),
) -> None:
    """Purge module caches whose files are all older than the retention period.

    Retention boundaries come from the metadata database. Listed files newer
    than a module's boundary abort the run before anything is deleted.

    Examples:

        # See what would be deleted
        modpurger purge --network eth-mainnet --dry-run

        # Delete one stale subfolder without prompting
        modpurger purge --subfolder substreams-states/v4/efb6f81b/states --yes
    """
    from modpurger.contracts import ResolutionError
    from modpurger.core.datastore import MetadataDB
    from modpurger.core.retention import CandidateResolver

    if not network and not subfolder:
        typer.echo("Error: Specify --network or --subfolder.", err=True)
        raise typer.Exit(1)
    if single and not subfolder:
        typer.echo("Error: --single requires --subfolder.", err=True)
        raise typer.Exit(1)

    config = _load_config(settings)
    db_url = expand_env_vars(database) if database else config.database.url
    effective_max_age_days = max_age_days if max_age_days is not None else config.retention.max_age_days
    max_age = timedelta(days=effective_max_age_days)

    try:
        criteria: AgeCriteria | SubfolderCriteria
        if subfolder:
            criteria = SubfolderCriteria(sub_path=subfolder, max_age=max_age, scope=network, single=single)
        else:
            assert network is not None
            criteria = AgeCriteria(scope=network, max_age=max_age)
    except ConfigurationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    try:
        db = MetadataDB.from_url(db_url, echo=config.database.echo)
    except Exception as e:
        typer.echo(f"Error connecting to database: {e}", err=True)
        raise typer.Exit(1) from None

    try:
        targets = CandidateResolver(db, marker_filetype=config.retention.marker_filetype).resolve(criteria)
    except ResolutionError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None
    finally:
        db.close()

    if not targets:
        typer.echo(f"No module caches older than {effective_max_age_days} days found.")
        typer.echo("Purged 0 file(s), 0 B reclaimed.")
        return

    if output_format == "console":
        echo_targets(targets)

    manager = _build_manager(config, billing_project=billing_project, workers=workers, yes=yes)
    _execute(manager, targets, dry_run=dry_run, output_format=output_format)


@app.command()
def poison(
    bucket: str = typer.Option(..., "--bucket", "-b", help="Bucket holding the module cache."),
    network: str = typer.Option(..., "--network", "-n", help="Network of the module cache."),
    subfolder: str = typer.Option(..., "--subfolder", help="Subfolder of the module cache under the network."),
    start_block: int = typer.Option(..., "--start-block", min=0, help="First poisoned block (inclusive)."),
    end_block: int | None = typer.Option(
        None,
        "--end-block",
        help="End of the poisoned window (exclusive). Open-ended when omitted.",
    ),
    kind: list[ArtifactKind] | None = typer.Option(
        None,
        "--kind",
        "-k",
        case_sensitive=False,
        help="Artifact kind to purge (repeatable, default: all kinds).",
    ),
    exclude_after: datetime | None = typer.Option(
        None,
        "--exclude-after",
        formats=_DATETIME_FORMATS,
        help="Leave files created after this instant (UTC unless an offset is given). Default: now.",
    ),
    settings: Path | None = typer.Option(
        None,
        "--settings",
        "-s",
        help="Path to settings YAML file (default: ./settings.yaml if present).",
    ),
    billing_project: str | None = typer.Option(None, "--billing-project", help="Project billed for requester-pays buckets."),
    workers: int | None = typer.Option(None, "--workers", "-w", min=1, help="Concurrent delete workers."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would be deleted without deleting."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompts."),
    output_format: Literal["console", "json"] = typer.Option(
        "console",
        "--format",
        "-f",
        help="Output format: 'console' (human-readable) or 'json' (structured JSON).",
    ),
) -> None:
    """Purge module cache files that cover a poisoned block window.

    Selects files by the block range encoded in their names, regardless of
    age. Files whose names cannot be decoded are never deleted.

    Examples:

        # Outputs and states touching blocks 17,000,000 to 17,001,000
        modpurger poison -b my-bucket -n eth-mainnet --subfolder substreams-states/v5/3ec7 \\
            --start-block 17000000 --end-block 17001000 -k output -k state --dry-run
    """
    if exclude_after is None:
        exclude_after = datetime.now(UTC)
    elif exclude_after.tzinfo is None:
        exclude_after = exclude_after.replace(tzinfo=UTC)

    try:
        window = BlockWindow(start=start_block, end=end_block)
    except ConfigurationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    object_filter = ObjectFilter(
        kinds=frozenset(kind) if kind else None,
        window=window,
        exclude_after=exclude_after,
    )
    # Without metadata, the cutoff doubles as the retention boundary: files
    # newer than it are filtered before the consistency check sees them.
    target = PurgeTarget(bucket=bucket, scope=network, sub_path=subfolder, retention_boundary=exclude_after)

    config = _load_config(settings)
    manager = _build_manager(
        config,
        billing_project=billing_project,
        workers=workers,
        yes=yes,
        object_filter=object_filter,
    )
    _execute(manager, [target], dry_run=dry_run, output_format=output_format)


@app.command("classify")
def classify_keys(
    keys: list[str] = typer.Argument(..., help="Object keys or filenames to decode."),
) -> None:
    """Decode block range and artifact kind from module cache filenames."""
    failed = False
    for key in keys:
        try:
            classification = classify(key)
        except ClassificationError as e:
            typer.echo(f"{key}: error: {e.reason}")
            failed = True
            continue
        typer.echo(f"{key}: {classification.kind.value} {classification.range_low}-{classification.range_high}")
    if failed:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
