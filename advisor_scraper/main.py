import asyncio
import logging
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .config import load_config
from .core import AdvisorScraper
from .errors import ConfigError, InvalidZipCodeError
from .merge import MERGE_KEYS, merge_records
from .sink import write_results
from .zipcodes import normalize_zip_codes, read_zip_file


app = typer.Typer(help="Collect financial advisor contacts from brokerage 'find an advisor' directories")
console = Console()


@app.command()
def run(
    zip_code: Optional[str] = typer.Argument(None, help="5-digit zip code to search around"),
    zip_file: Optional[str] = typer.Option(
        None,
        "--file",
        "-f",
        help="Path to a file with one zip code per line"
    ),
    config_file: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to JSON file overriding source settings"
    ),
    output_dir: Optional[str] = typer.Option(
        None,
        "--output-dir",
        "-o",
        help="Directory for the json/ and csv/ result folders"
    ),
    headed: bool = typer.Option(False, "--headed", help="Show the browser window"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Scrape every enabled source for one zip code or a list of them."""

    _setup_logging(verbose)

    try:
        config = load_config(config_file)
    except ConfigError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    if headed:
        config = config.model_copy(update={"headless": False})

    try:
        zip_codes = _collect_zip_codes(zip_code, zip_file)
    except (InvalidZipCodeError, OSError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    if not zip_codes:
        console.print("[red]Error: no zip codes given[/red]")
        raise typer.Exit(1)

    console.print(f"[cyan]Sources:[/cyan] {', '.join(config.enabled_sources) or 'none'}")
    console.print(f"[cyan]Zip codes:[/cyan] {', '.join(zip_codes)}")

    scraper = AdvisorScraper(config=config)
    records = asyncio.run(scraper.run_many(zip_codes, progress=len(zip_codes) > 1))
    merged = merge_records(records, key=MERGE_KEYS[config.merge_key])

    console.print(f"\n[green]Found {len(records)} advisors, {len(merged)} after removing duplicates[/green]")

    json_path, csv_path = write_results(merged, output_dir or config.output_dir)
    console.print(f"[green]Saved to {json_path}[/green]")
    console.print(f"[green]Saved to {csv_path}[/green]")


@app.command()
def sources(
    config_file: Optional[str] = typer.Option(None, "--config", "-c"),
):
    """List the registered sources and their settings."""

    try:
        config = load_config(config_file)
    except ConfigError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    table = Table(title="Sources")
    table.add_column("Source")
    table.add_column("Enabled")
    table.add_column("Concurrency", justify="right")
    table.add_column("Retries", justify="right")
    table.add_column("Timeout (ms)", justify="right")
    for key, settings in config.sources.items():
        table.add_row(
            key,
            "yes" if settings.enabled else "no",
            str(settings.concurrency_limit),
            str(settings.max_retries),
            str(settings.timeout_ms),
        )
    console.print(table)


def _collect_zip_codes(zip_code: Optional[str], zip_file: Optional[str]) -> List[str]:
    """Zip codes from the argument, the file, or an interactive prompt."""
    entries: List[str] = []
    if zip_code:
        entries.append(zip_code)
    if zip_file:
        entries.extend(read_zip_file(zip_file))
    if not zip_code and not zip_file:
        entries.append(typer.prompt("Enter zip code"))
    return normalize_zip_codes(entries)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
        force=True,
    )
    # httpx logs every request at INFO.
    for name in ("httpx", "httpcore", "asyncio"):
        logging.getLogger(name).setLevel(logging.WARNING)


if __name__ == "__main__":
    app()
