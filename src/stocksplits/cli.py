"""Command-line interface for the stock splits dataset."""

from datetime import date
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from stocksplits.errors import StockSplitsError

if TYPE_CHECKING:
    from stocksplits.config.settings import StockSplitsConfig

app = typer.Typer(
    name="stocksplits",
    help="Validate the stock split dataset and build its lookup index.",
    no_args_is_help=True,
)

console = Console()

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="Path to configuration YAML file.",
        exists=True,
        dir_okay=False,
    ),
]
DataDirOption = Annotated[
    Path | None,
    typer.Option(
        "--data-dir",
        "-d",
        help="Directory of year files (overrides the config).",
        file_okay=False,
    ),
]


def _setup(config: Path | None, data_dir: Path | None) -> "StockSplitsConfig":
    """Load configuration, apply CLI overrides and configure logging."""
    from stocksplits.config.loader import load_config
    from stocksplits.utils.logging import configure_logging

    try:
        settings = load_config(config)
    except StockSplitsError as e:
        console.print(f"[red]Error: {escape(e.message)}[/red]")
        raise typer.Exit(code=1) from e

    if data_dir is not None:
        settings = settings.model_copy(
            update={"data": settings.data.model_copy(update={"data_dir": data_dir})}
        )

    configure_logging(settings.logging.level, settings.logging.json_output)
    return settings


@app.command()
def validate(
    config: ConfigOption = None,
    data_dir: DataDirOption = None,
    skip_index: Annotated[
        bool,
        typer.Option("--skip-index", help="Do not validate the index file."),
    ] = False,
) -> None:
    """Validate year files and the index against schemas and integrity rules."""
    from stocksplits.pipeline import run_validation
    from stocksplits.validation import ConsoleReporter

    settings = _setup(config, data_dir)
    console.print(f"[blue]Validating stock split data in {settings.data_dir}[/blue]")

    try:
        report = run_validation(settings, include_index=not skip_index)
    except (OSError, StockSplitsError) as e:
        console.print(f"[red]Validation could not run: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e

    ConsoleReporter(console).print_report(report, index_expected=not skip_index)

    if report.has_errors:
        raise typer.Exit(code=1)


@app.command("build-index")
def build_index(
    config: ConfigOption = None,
    data_dir: DataDirOption = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Build even if year files have findings."),
    ] = False,
    build_date: Annotated[
        str | None,
        typer.Option("--date", help="Build date stamped into the index (YYYY-MM-DD)."),
    ] = None,
) -> None:
    """Build the lookup index from all year files."""
    from stocksplits.pipeline import run_build
    from stocksplits.validation import ConsoleReporter, IntegrityReport

    settings = _setup(config, data_dir)

    stamp: date | None = None
    if build_date is not None:
        try:
            stamp = date.fromisoformat(build_date)
        except ValueError as e:
            console.print(f"[red]Error: invalid --date {escape(build_date)}[/red]")
            raise typer.Exit(code=1) from e

    console.print(f"[blue]Building index from {settings.data_dir}[/blue]")

    try:
        outcome = run_build(settings, force=force, build_date=stamp)
    except (OSError, StockSplitsError) as e:
        console.print(f"[red]Index build failed: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e

    reporter = ConsoleReporter(console)
    if outcome.build is None:
        reporter.print_report(outcome.integrity, index_expected=False)
        console.print("[red]Fix the findings above or pass --force.[/red]")
        raise typer.Exit(code=1)

    if outcome.index_report is not None and not outcome.index_report.valid:
        reporter.print_report(
            IntegrityReport(index=outcome.index_report), index_expected=False
        )
        console.print("[red]Built index is invalid; previous index left in place.[/red]")
        raise typer.Exit(code=1)

    index = outcome.build.index
    table = Table(title=f"Generated {settings.data.index_filename}")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Total splits", str(index.total_splits))
    table.add_row("Symbols", str(len(index.by_symbol)))
    table.add_row("ISINs", str(len(index.by_isin)))
    if index.years:
        table.add_row(
            "Years", f"{len(index.years)} ({index.years[0]}-{index.years[-1]})"
        )
    else:
        table.add_row("Years", "0")
    if outcome.build.files_skipped:
        table.add_row("Skipped files", ", ".join(outcome.build.files_skipped))
    if outcome.build.entries_skipped:
        table.add_row("Skipped entries", str(len(outcome.build.entries_skipped)))
    if outcome.build.isin_conflicts:
        table.add_row("ISIN conflicts", str(len(outcome.build.isin_conflicts)))
    console.print(table)

    console.print(f"\n[green]Saved to: {outcome.written}[/green]")


@app.command()
def ingest(
    candidates: Annotated[
        Path,
        typer.Option(
            "--candidates",
            help="JSON file with fetched split records (list or API response).",
            exists=True,
            dir_okay=False,
        ),
    ],
    config: ConfigOption = None,
    data_dir: DataDirOption = None,
) -> None:
    """Merge fetched split records into the year files."""
    from stocksplits.ingest import load_candidates, merge_candidates

    settings = _setup(config, data_dir)

    try:
        records = load_candidates(candidates)
        result = merge_candidates(settings, records)
    except (OSError, StockSplitsError) as e:
        console.print(f"[red]Ingest failed: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e

    console.print(f"Found {result.received} candidate splits")
    if not result.added:
        console.print("[yellow]No new splits to add[/yellow]")
        return

    for year, entries in result.added.items():
        for entry in entries:
            console.print(f"  Added: {entry.symbol} {entry.date} {entry.ratio}")
        console.print(f"[green]Updated {year:04d}.json[/green]")

    console.print(
        f"\n[blue]{result.added_count} new splits added. "
        "Review and update company names before committing.[/blue]"
    )


@app.command()
def version() -> None:
    """Show version information."""
    from stocksplits import __version__

    console.print(f"stocksplits version {__version__}")


if __name__ == "__main__":
    app()
