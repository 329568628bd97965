"""
Defines the command-line interface for the application using Typer.
"""

import logging
import os
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from fetchpool import __version__
from fetchpool.core.pool import Pool
from fetchpool.exceptions import FetchPoolError
from fetchpool.media.fetcher import HttpFetcher
from fetchpool.models.config import RunConfig
from fetchpool.models.job import ErrorMode
from fetchpool.storage.batch_file import load_batch_file
from fetchpool.storage.config_manager import ConfigManager
from fetchpool.storage.sink import OutputSink
from fetchpool.utils.path import create_dir, resolve_output_dir

from .formatters import (
    format_error_with_suggestions,
    print_config,
    print_summary_panel,
    print_validation_table,
)

console = Console()

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
log = logging.getLogger("fetchpool")

app = typer.Typer(
    name="fetchpool",
    help=(
        "Download a batch of URLs with a fixed pool of concurrent workers. Use"
        " 'fetchpool <command> --help' for more info."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "fetchpool"


CONFIG_DIR = get_config_dir()
CONFIG_FILE = CONFIG_DIR / "config.ini"


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
    show_config: bool = typer.Option(
        False, "--show-config", help="Display the current configuration."
    ),
):
    """fetchpool - concurrent batch downloader"""
    if version:
        console.print(f"[bold]fetchpool[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    log_level = "INFO"
    if verbose >= 2:
        log_level = "DEBUG"
    logging.getLogger("fetchpool").setLevel(log_level)

    if show_config:
        if not CONFIG_FILE.is_file():
            console.print(
                "[red]✗ Config file not found.[/] Run [cyan]fetchpool init[/cyan]"
                " first."
            )
            raise typer.Exit(code=1)
        try:
            config_data = ConfigManager(CONFIG_FILE).read_settings()
        except FetchPoolError as e:
            console.print(f"[red]✗ {e}[/red]")
            raise typer.Exit(code=1) from e
        print_config(CONFIG_FILE, config_data)
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command()
def init(
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing configuration file."
    ),
):
    """Write a configuration file with the default settings."""
    if (
        CONFIG_FILE.exists()
        and not force
        and not typer.confirm("Configuration file already exists. Overwrite it?")
    ):
        raise typer.Abort()

    try:
        ConfigManager(CONFIG_FILE).save_new_config()
    except FetchPoolError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1) from e
    console.print(f"[bold green]✓ Configuration saved to '{CONFIG_FILE}'[/bold green]")


def _load_run_config(cli_options: dict) -> RunConfig:
    config_manager = ConfigManager(CONFIG_FILE)
    return config_manager.load_config(cli_options)


@app.command(name="download")
def download_command(
    input_file: Path = typer.Argument(  # noqa: B008
        ...,
        help='JSON batch file of the form {"urls": ["...", "..."]}.',
        metavar="INPUT_FILE",
    ),
    workers: int | None = typer.Option(
        None,
        "-w",
        "--workers",
        help="Number of concurrent workers (default 3, override default in config).",
    ),
    output_dir: str | None = typer.Option(
        None,
        "-o",
        "--output-dir",
        help="Existing directory to write '<id>.<ext>' outputs into (default .data).",
    ),
    extension: str | None = typer.Option(
        None, "-e", "--ext", help="Extension of the output files (default jpg)."
    ),
    keep_going: bool | None = typer.Option(
        None,
        "--keep-going/--fail-fast",
        help="Keep downloading after a failed job instead of stopping the run.",
    ),
    mkdir: bool = typer.Option(
        False, "--mkdir", help="Create the output directory if it does not exist."
    ),
):
    """Download every URL in a batch file."""
    cli_options = {
        key: value
        for key, value in {
            "input_file": str(input_file),
            "max_workers": workers,
            "output_dir": output_dir,
            "extension": extension,
            "create_output_dir": mkdir,
        }.items()
        if value is not None
    }
    if keep_going is not None:
        cli_options["error_mode"] = (
            ErrorMode.CONTINUE if keep_going else ErrorMode.FAIL_FAST
        )

    try:
        config = _load_run_config(cli_options)
        batch = load_batch_file(input_file)
    except FetchPoolError as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e

    target_dir = resolve_output_dir(config.output_dir)
    if config.create_output_dir:
        create_dir(target_dir)

    max_workers = config.max_workers
    pool = Pool.build(
        max_workers,
        OutputSink(target_dir, config.extension),
        fetcher_factory=lambda: HttpFetcher(limit_per_host=max_workers),
        error_mode=config.error_mode,
    )
    pool.load_jobs(batch.urls)

    console.print(
        f"[bold cyan]Starting batch of {len(batch.urls)} jobs with "
        f"{max_workers} workers...[/bold cyan]"
    )
    try:
        pool.start()
    except FetchPoolError as e:
        print_summary_panel(pool.stats, len(pool.workers))
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e

    print_summary_panel(pool.stats, len(pool.workers))


@app.command()
def validate(
    input_file: Path = typer.Argument(  # noqa: B008
        ..., help="JSON batch file to check.", metavar="INPUT_FILE"
    ),
):
    """Validate the configuration and a batch file without downloading."""
    try:
        config = _load_run_config({"input_file": str(input_file)})
        batch = load_batch_file(input_file)
    except FetchPoolError as e:
        console.print(f"[red]✗ Validation failed: {e}[/red]")
        raise typer.Exit(code=1) from e
    print_validation_table(config, job_count=len(batch.urls))
