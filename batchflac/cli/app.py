"""
Defines the command-line interface for the application using Typer.
"""

import logging
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from batchflac import __version__
from batchflac.core.conversion_manager import ConversionManager
from batchflac.core.job_builder import JobBuilder, find_output_collisions
from batchflac.exceptions import BatchFailedError, BatchFlacError, ConfigurationError
from batchflac.media.encoder import SubprocessEncoder
from batchflac.models.config import ConversionConfig, FailurePolicy
from batchflac.models.job import Failure, Job
from batchflac.storage.manifest import read_manifest

from .formatters import (
    format_error_with_suggestions,
    print_config,
    print_failures,
    print_plan_table,
    print_summary_panel,
)
from .progress_manager import ProgressManager

console = Console()
err_console = Console(stderr=True)

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("batchflac")

app = typer.Typer(
    name="batchflac",
    help=(
        "Convert the tracks listed in a CSV manifest to tagged FLAC files using"
        " ffmpeg. Use 'batchflac <command> --help' for more info."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)


def _load_config(options: dict) -> ConversionConfig:
    """Validates CLI options into a config, dropping options that were not given."""
    try:
        return ConversionConfig(
            **{key: value for key, value in options.items() if value is not None}
        )
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigurationError(f"Invalid options: {problems}") from e


def _set_log_level(verbose: int) -> None:
    log.setLevel("DEBUG" if verbose >= 2 else "INFO")


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
):
    """Batch FLAC converter"""
    if version:
        console.print(f"[bold]batchflac[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command()
def convert(
    manifest: Path = typer.Argument(  # noqa: B008
        ..., help="CSV file containing columns: file, disc, track, title, artist."
    ),
    output_dir: Path = typer.Argument(  # noqa: B008
        ..., help="Directory to write output files (created if missing)."
    ),
    # --- Input Options ---
    cover: Path | None = typer.Option(  # noqa: B008
        None, "-c", "--cover", help="Cover art file (jpg or png image)."
    ),
    input_dir: Path | None = typer.Option(  # noqa: B008
        None, "-d", "--input-dir", help="Directory that input files are located in."
    ),
    # --- Album Metadata ---
    album_title: str | None = typer.Option(
        None, "-t", "--album-title", help="Album title written to every track."
    ),
    album_artist: str | None = typer.Option(
        None,
        "-a",
        "--album-artist",
        help="Album artist; also used for rows without an artist.",
    ),
    date: str | None = typer.Option(
        None, "-y", "--date", help="Release date or year written to every track."
    ),
    # --- Execution Options ---
    jobs: int | None = typer.Option(
        None,
        "-j",
        "--jobs",
        help="Number of simultaneous conversions (default: all CPUs).",
    ),
    fail_fast: bool = typer.Option(
        True,
        "--fail-fast/--keep-going",
        help="Stop starting new tracks after the first failure, or convert them all.",
    ),
    timeout: float | None = typer.Option(
        None, "--timeout", help="Give up on a track after this many seconds."
    ),
    encoder: str | None = typer.Option(
        None, "--encoder", help="Encoder executable to run (default: ffmpeg)."
    ),
    # --- Schema Options ---
    require_artist: bool = typer.Option(
        False,
        "--require-artist",
        help="Every row must name its artist; --album-artist is not used as fallback.",
    ),
    allow_duplicates: bool = typer.Option(
        False,
        "--allow-duplicates",
        help="Allow several rows to write the same output file.",
    ),
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Print each ffmpeg command before running it (-vv for debug logs).",
    ),
):
    """Convert every track listed in MANIFEST to FLAC under OUTPUT_DIR."""
    _set_log_level(verbose)
    try:
        config = _load_config(
            {
                "output_dir": output_dir,
                "input_dir": input_dir,
                "cover": cover,
                "album_title": album_title,
                "album_artist": album_artist,
                "date": date,
                "workers": jobs,
                "verbose": verbose > 0,
                "failure_policy": (
                    FailurePolicy.FAIL_FAST if fail_fast else FailurePolicy.CONTINUE
                ),
                "encoder": encoder,
                "job_timeout": timeout,
                "require_track_artist": require_artist,
                "allow_duplicate_outputs": allow_duplicates,
            }
        )
        records = read_manifest(manifest)
        if config.verbose:
            print_config(config, console)

        with ProgressManager(console, enabled=console.is_terminal) as progress:
            manager = ConversionManager(config, SubprocessEncoder(), listener=progress)
            progress.initialize_session(len(records))
            result = manager.execute(records)

        if result.total:
            print_summary_panel(manager.stats, console)
        result.raise_for_failures()

    except BatchFailedError as e:
        print_failures(e.failures, err_console)
        err_console.print(f"[bold red]Error:[/] {escape(str(e))}")
        raise typer.Exit(code=1) from e
    except BatchFlacError as e:
        err_console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e


@app.command()
def validate(
    manifest: Path = typer.Argument(  # noqa: B008
        ..., help="CSV file containing columns: file, disc, track, title, artist."
    ),
    output_dir: Path = typer.Argument(  # noqa: B008
        ..., help="Directory the output files would be written to."
    ),
    input_dir: Path | None = typer.Option(  # noqa: B008
        None, "-d", "--input-dir", help="Directory that input files are located in."
    ),
    album_artist: str | None = typer.Option(
        None,
        "-a",
        "--album-artist",
        help="Album artist; also used for rows without an artist.",
    ),
    require_artist: bool = typer.Option(
        False, "--require-artist", help="Every row must name its artist."
    ),
    allow_duplicates: bool = typer.Option(
        False, "--allow-duplicates", help="Do not report colliding output files."
    ),
):
    """Check a manifest and show the file each track would be written to."""
    try:
        config = _load_config(
            {
                "output_dir": output_dir,
                "input_dir": input_dir,
                "album_artist": album_artist,
                "require_track_artist": require_artist,
                "allow_duplicate_outputs": allow_duplicates,
            }
        )
        records = read_manifest(manifest)
    except BatchFlacError as e:
        err_console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e

    entries = JobBuilder(config).plan(records)
    collisions = (
        {}
        if config.allow_duplicate_outputs
        else find_output_collisions(e for e in entries if isinstance(e, Job))
    )
    print_plan_table(entries, collisions, console)

    failed = sum(1 for e in entries if isinstance(e, Failure))
    if failed or collisions:
        err_console.print(
            f"[red]✗ {failed} row(s) cannot be converted, "
            f"{len(collisions)} output file(s) collide.[/red]"
        )
        raise typer.Exit(code=1)
    console.print(f"[green]✓ All {len(entries)} tracks are ready to convert.[/green]")


@app.command()
def diagnose(
    encoder: str = typer.Option(
        "ffmpeg", "--encoder", help="Encoder executable to check."
    ),
):
    """Check that the encoder can be found and run."""
    console.print("\n[bold cyan]Running diagnostics...[/bold cyan]\n")
    runner = SubprocessEncoder()

    location = runner.locate(encoder)
    if not location:
        console.print(
            f"[red]✗ '{escape(encoder)}' was not found on PATH.[/] "
            "Install ffmpeg or pass --encoder."
        )
        raise typer.Exit(code=1)
    console.print(f"[green]✓[/] Encoder found at: [dim]{escape(location)}[/dim]")

    version_line = runner.version(location)
    if not version_line:
        console.print(f"[red]✗ '{escape(location)}' could not be run.[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]✓[/] {escape(version_line)}")
    console.print("\n[bold green]✓ All checks passed![/bold green]\n")
