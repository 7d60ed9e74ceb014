"""
Functions for formatting and displaying data in the console using Rich.
"""

from collections.abc import Sequence

from rich import box
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from batchflac.models.config import ConversionConfig
from batchflac.models.job import Failure, Job
from batchflac.models.stats import ConversionStats
from batchflac.utils.formatting import decode_output, format_command, format_duration


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "ManifestError": [
            "• The manifest must be a CSV file with a header row.",
            "• Required columns: file, title. Optional: disc, track, artist.",
            "• disc and track must be whole numbers or left blank.",
        ],
        "OutputDirectoryError": [
            "• Check that OUTPUT_DIR is not an existing file.",
            "• Make sure you have write permission for its parent directory.",
        ],
        "MissingArtistError": [
            "• Fill in the 'artist' column for every row,",
            "  or pass --album-artist to use one artist for the whole album.",
        ],
        "DuplicateOutputError": [
            "• Give the colliding rows distinct disc/track numbers or titles.",
            "• Pass --allow-duplicates to let later tracks overwrite earlier ones.",
        ],
        "SpawnError": [
            "• Make sure ffmpeg is installed and on your PATH.",
            "• Run `batchflac diagnose` to check the encoder.",
        ],
        "ConfigurationError": [
            "• Check the values passed on the command line.",
            "• Run `batchflac convert --help` for the list of options.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    suggestion_text = Text("\n".join(suggestions))

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(suggestion_text)

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def format_failure_panel(failure: Failure) -> Panel:
    """
    Formats the full diagnostics of a failed job: enough to re-run the
    failing command by hand.
    """
    details = Table.grid(padding=(0, 2))
    details.add_column(style="bold cyan", justify="right")
    details.add_column()
    details.add_row("Source:", Text(str(failure.source)))
    details.add_row("Output:", Text(str(failure.output_path or "-")))
    details.add_row(
        "Error:", Text(f"{type(failure.error).__name__}: {failure.error}", style="red")
    )
    if failure.returncode is not None:
        details.add_row("Exit status:", str(failure.returncode))
    if failure.argv:
        details.add_row("Command:", Text(format_command(failure.argv), style="dim"))

    sections = [details]
    if failure.argv:
        for label, data in (
            ("standard output", failure.stdout),
            ("standard error", failure.stderr),
        ):
            sections.append(Text(f"\n{label}:", style="bold yellow"))
            sections.append(Text(decode_output(data) or "(empty)"))

    return Panel(
        Group(*sections),
        title=f"[bold red]✗ Track {failure.index + 1} failed[/bold red]",
        border_style="red",
        expand=False,
    )


def print_failures(failures: Sequence[Failure], console: Console) -> None:
    for failure in failures:
        console.print(format_failure_panel(failure))


def print_plan_table(
    entries: Sequence[Job | Failure],
    collisions: dict[str, list[int]],
    console: Console | None = None,
):
    """Displays the planned output file of each manifest row."""
    console = console or Console()
    colliding = {index for indices in collisions.values() for index in indices}

    table = Table(title="Planned Conversions", box=box.ROUNDED)
    table.add_column("#", style="dim", justify="right")
    table.add_column("Source", style="cyan")
    table.add_column("Output")
    table.add_column("Status")

    for entry in entries:
        if isinstance(entry, Failure):
            table.add_row(
                str(entry.index + 1),
                Text(str(entry.source)),
                "-",
                Text(str(entry.error), style="red"),
            )
            continue
        status = (
            Text("duplicate output", style="yellow")
            if entry.index in colliding
            else Text("ok", style="green")
        )
        table.add_row(
            str(entry.index + 1),
            Text(str(entry.source)),
            Text(entry.output_path.name),
            status,
        )

    console.print(table)


def print_config(config: ConversionConfig, console: Console | None = None):
    """Displays a summary of the settings of a run."""
    console = console or Console()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()

    table.add_row("Output Directory:", Text(str(config.output_dir), style="dim"))
    table.add_row("Input Directory:", Text(str(config.input_dir or "-"), style="dim"))
    table.add_row("Cover Art:", Text(str(config.cover or "-"), style="dim"))
    table.add_row("Album:", Text(config.album_title or "-"))
    table.add_row("Album Artist:", Text(config.album_artist or "-"))
    table.add_row("Date:", Text(config.date or "-"))
    table.add_row("Workers:", str(config.workers or "all CPUs"))
    table.add_row("On Failure:", config.failure_policy.value)

    console.print(
        Panel(table, title="[bold cyan]Conversion Settings[/bold cyan]", border_style="cyan")
    )


def print_summary_panel(stats: ConversionStats, console: Console | None = None):
    """Displays the final summary of a conversion run."""
    console = console or Console()
    duration_s = stats.elapsed

    stats_table = Table(show_header=False, box=None, padding=(0, 2))
    stats_table.add_column(style="bold cyan", justify="right", width=20)
    stats_table.add_column(style="white", justify="left")

    stats_table.add_row(
        "✓ Converted:", f"[bold green]{stats.jobs_converted}[/bold green]"
    )
    if stats.jobs_failed > 0:
        stats_table.add_row("✗ Failed:", f"[bold red]{stats.jobs_failed}[/bold red]")
    if stats.jobs_not_started > 0:
        stats_table.add_row(
            "○ Not Started:", f"[yellow]{stats.jobs_not_started}[/yellow]"
        )

    stats_table.add_row("", "")  # Spacer
    stats_table.add_row("Time Elapsed:", f"[blue]{format_duration(duration_s)}[/blue]")
    if stats.workers:
        stats_table.add_row(
            "Peak Concurrent:",
            f"[green]{stats.peak_concurrent}[/green] of {stats.workers} workers",
        )
    if stats.jobs_converted > 0 and duration_s > 0:
        tracks_per_minute = (stats.jobs_converted / duration_s) * 60
        stats_table.add_row(
            "Throughput:", f"[cyan]{tracks_per_minute:.1f} tracks/min[/cyan]"
        )

    if stats.jobs_failed or stats.jobs_not_started:
        title = "⚠ [bold]Conversion Finished With Errors[/bold]"
        border_color = "red"
    else:
        title = "🎵 [bold]Conversion Complete![/bold]"
        border_color = "green"

    console.print()
    console.print(
        Panel(
            stats_table,
            title=title,
            border_style=border_color,
            box=box.DOUBLE,
            expand=False,
            padding=(1, 2),
        )
    )
