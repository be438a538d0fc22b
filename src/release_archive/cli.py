"""
Release Archive CLI - Command-line interface.

Archive release reports into versioned snapshots and query the archive
from the terminal.
"""

import json
import logging
from enum import Enum
from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.markup import escape

from release_archive.archive import ArchiveReader, ReleaseArchiver
from release_archive.archive.reporter import (
    render_archive_markdown,
    render_find_markdown,
    render_presets_markdown,
)
from release_archive.archive.storage import ARCHIVE_DIR_NAME
from release_archive.config import (
    log_level_from_env,
    resolve_archive_config,
    resolve_artifacts_dir,
)
from release_archive.core.exceptions import ReleaseArchiveError

app = typer.Typer(
    name="release-archive",
    help="Release Archive - versioned snapshots of release reports",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)


class OutputFormat(str, Enum):
    """Output format of command results."""

    MD = "md"
    JSON = "json"


def _fail(error: ReleaseArchiveError, output_format: OutputFormat) -> NoReturn:
    if output_format is OutputFormat.JSON:
        typer.echo(json.dumps({"ok": False, "error": error.to_dict()}, indent=2))
    err_console.print(
        f"[red]Error ({error.code}):[/red] {escape(str(error))}", soft_wrap=True
    )
    raise typer.Exit(1)


def _split_names(value: Optional[str]) -> list[str]:
    if not value:
        return []
    return [name.strip() for name in value.split(",") if name.strip()]


@app.callback()
def main_callback():
    """Release Archive - versioned snapshots of release reports."""
    logging.basicConfig(
        level=log_level_from_env(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@app.command()
def archive(
    root: Optional[Path] = typer.Option(None, "--root", help="Project root (default: cwd)"),
    version: Optional[str] = typer.Option(
        None, "--version", "-v", help="Version to archive, or 'current'"
    ),
    tag: Optional[str] = typer.Option(None, "--tag", help="Release tag (default: v<version>)"),
    artifacts_dir: Optional[str] = typer.Option(
        None, "--artifacts-dir", help="Artifacts directory relative to root"
    ),
    snapshot_id: Optional[str] = typer.Option(
        None, "--snapshot-id", help="Snapshot id (default: UTC YYYYMMDD_HHMMSS)"
    ),
    retention_days: Optional[int] = typer.Option(
        None, "--retention-days", help="Prune snapshots older than this many days"
    ),
    max_snapshots_per_version: Optional[int] = typer.Option(
        None, "--max-snapshots-per-version", help="Snapshots kept per version"
    ),
    output_format: OutputFormat = typer.Option(
        OutputFormat.MD, "--format", "-f", help="Output format"
    ),
    lock: bool = typer.Option(
        False, "--lock", help="Hold an advisory lock on the version while archiving"
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Report snapshots retention would prune without removing them"
    ),
):
    """Copy release reports into a new snapshot and refresh the indexes."""
    try:
        config = resolve_archive_config(
            root=root,
            version=version,
            tag=tag,
            artifacts_dir=artifacts_dir,
            snapshot_id=snapshot_id,
            retention_days=retention_days,
            max_snapshots_per_version=max_snapshots_per_version,
        )
        result = ReleaseArchiver(config).run(lock=lock, dry_run=dry_run)
    except ReleaseArchiveError as e:
        _fail(e, output_format)

    if output_format is OutputFormat.JSON:
        typer.echo(result.to_json(), nl=False)
    else:
        typer.echo(render_archive_markdown(result), nl=False)

    if not result.ok:
        raise typer.Exit(1)


@app.command()
def find(
    root: Optional[Path] = typer.Option(None, "--root", help="Project root (default: cwd)"),
    artifacts_dir: Optional[str] = typer.Option(
        None, "--artifacts-dir", help="Artifacts directory relative to root"
    ),
    version: Optional[str] = typer.Option(None, "--version", "-v", help="Version to resolve"),
    snapshot_id: Optional[str] = typer.Option(
        None, "--snapshot-id", help="Snapshot to summarize (requires --version)"
    ),
    limit: int = typer.Option(20, "--limit", "-n", help="Maximum entries to list"),
    require_files: Optional[str] = typer.Option(
        None, "--require-files", help="Comma-separated files the snapshot must contain"
    ),
    require_preset: Optional[str] = typer.Option(
        None, "--require-preset", help="Built-in required-files preset"
    ),
    list_require_presets: bool = typer.Option(
        False, "--list-require-presets", help="List built-in required-files presets"
    ),
    output_format: OutputFormat = typer.Option(
        OutputFormat.MD, "--format", "-f", help="Output format"
    ),
):
    """Query archived versions, latest snapshots, or a snapshot manifest."""
    project_root = (root or Path.cwd()).resolve()
    archive_root = resolve_artifacts_dir(project_root, artifacts_dir) / ARCHIVE_DIR_NAME
    reader = ArchiveReader(archive_root)

    if list_require_presets:
        presets = reader.list_presets()
        if output_format is OutputFormat.JSON:
            typer.echo(presets.to_json(), nl=False)
        else:
            typer.echo(render_presets_markdown(presets), nl=False)
        return

    try:
        result = reader.find(
            version=version,
            snapshot_id=snapshot_id,
            limit=limit,
            required_files=_split_names(require_files),
            required_preset=require_preset,
        )
    except ReleaseArchiveError as e:
        _fail(e, output_format)

    if output_format is OutputFormat.JSON:
        typer.echo(result.to_json(), nl=False)
    else:
        typer.echo(render_find_markdown(result), nl=False)

    if not result.ok:
        raise typer.Exit(1)


@app.command()
def version():
    """Show Release Archive version."""
    from release_archive import __version__

    console.print(f"Release Archive v{__version__}")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
