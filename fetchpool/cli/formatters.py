"""
Functions for formatting and displaying data in the console using Rich.
"""

from pathlib import Path
from typing import Any

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from fetchpool.models.config import RunConfig
from fetchpool.models.stats import RunStats
from fetchpool.utils.formatting import (
    format_duration,
    format_size,
    format_worker_counts,
)


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "ConfigurationError": [
            "• Check the values in your configuration file.",
            "• Run `fetchpool --show-config` to see the settings in effect.",
            "• Run `fetchpool init --force` to restore the defaults.",
        ],
        "InputFileError": [
            "• The batch file must be JSON shaped like {\"urls\": [\"...\"]}.",
            "• Make sure every entry is a non-empty string.",
            "• Run `fetchpool validate <FILE>` to check it without downloading.",
        ],
        "FetchError": [
            "• The source location may be unreachable or returned an error status.",
            "• Check your internet connection.",
            "• Use --keep-going to download the remaining jobs anyway.",
        ],
        "WriteError": [
            "• Check that the output directory exists and is writable.",
            "• Check the free disk space.",
        ],
        "BatchFailedError": [
            "• Some jobs failed; the other outputs were written.",
            "• Run the command with -vv for detailed logs.",
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


def print_config(config_path: Path, config_data: dict[str, Any]):
    """Displays the current configuration."""
    console = Console()
    content = ""
    for key, value in config_data.items():
        content += f"{key} = {value}\n"

    console.print(
        Panel(
            content.strip(),
            title=f"Configuration ([dim]{config_path}[/dim])",
            border_style="cyan",
        )
    )


def print_validation_table(config: RunConfig, job_count: int | None = None):
    """Displays a summary of the current settings."""
    console = Console()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()

    table.add_row("Workers:", str(config.max_workers))
    table.add_row(
        "Error Mode:",
        "[red]Fail fast[/red]" if config.fail_fast else "[yellow]Keep going[/yellow]",
    )
    table.add_row("Output Dir:", f"[dim]{config.output_dir}[/dim]")
    table.add_row("Output Names:", f"[dim]<id>.{config.extension}[/dim]")
    if config.input_file:
        table.add_row("Batch File:", f"[dim]{config.input_file}[/dim]")
    if job_count is not None:
        table.add_row("Jobs:", f"[green]{job_count}[/green]")

    console.print(
        Panel(
            table,
            title="[bold green]✓ Validated Settings[/bold green]",
            border_style="green",
        )
    )


def print_summary_panel(stats: RunStats, worker_count: int):
    """Displays the final summary of a batch run."""
    console = Console()
    duration_s = stats.duration_s

    stats_table = Table(show_header=False, box=None, padding=(0, 2))
    stats_table.add_column(style="bold cyan", justify="right", width=20)
    stats_table.add_column(style="white", justify="left")

    stats_table.add_row(
        "✓ Completed:", f"[bold green]{stats.jobs_completed}[/bold green]"
    )
    if stats.jobs_failed > 0:
        stats_table.add_row("✗ Failed:", f"[bold red]{stats.jobs_failed}[/bold red]")

    if stats.jobs_crashed > 0:
        stats_table.add_row(
            "⚡ Crashed:", f"[bold red]{stats.jobs_crashed}[/bold red]"
        )

    not_run = stats.jobs_total - stats.jobs_processed
    if not_run > 0:
        stats_table.add_row("○ Not Run:", f"[yellow]{not_run}[/yellow]")

    stats_table.add_row("", "")  # Spacer
    stats_table.add_row("Total Size:", f"[cyan]{format_size(stats.bytes_written)}[/cyan]")

    avg_speed = stats.bytes_written / duration_s if duration_s > 0 else 0
    stats_table.add_row(
        "Avg. Speed:", f"[magenta]{format_size(int(avg_speed))}/s[/magenta]"
    )
    stats_table.add_row("Time Elapsed:", f"[blue]{format_duration(duration_s)}[/blue]")

    stats_table.add_row("", "")  # Spacer
    stats_table.add_row("Workers:", f"[green]{worker_count}[/green]")
    stats_table.add_row(
        "Jobs per Worker:", f"[dim]{format_worker_counts(stats.jobs_per_worker)}[/dim]"
    )

    if stats.jobs_completed > 0 and duration_s > 0:
        jobs_per_minute = (stats.jobs_completed / duration_s) * 60
        stats_table.add_row(
            "Throughput:", f"[cyan]{jobs_per_minute:.1f} jobs/min[/cyan]"
        )

    if stats.jobs_failed > 0 or stats.jobs_crashed > 0:
        title = "⚠ [bold]Run Finished With Errors[/bold]"
        border_color = "red"
    else:
        title = "✓ [bold]Run Complete![/bold]"
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
    console.print()
