"""rsid-lookup: resolve genomic variants to rsIDs from a reference SNP database."""

import asyncio
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

from . import __version__
from .config import LookupConfig, load_config
from .exceptions import ConfigError, SchemaError, StoreQueryError
from .io import read_variant_table, write_result_table
from .lookup import lookup_rsids
from .store import open_store


def version_callback(value: bool) -> None:
    if value:
        print(__version__)
        raise typer.Exit()


app = typer.Typer(
    name="rsid-lookup", help="Look up rsIDs for genomic variants in a reference SNP database"
)
console = Console()
err_console = Console(stderr=True)


@app.callback()
def main_callback(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version", callback=version_callback, is_eager=True, help="Show version and exit"
        ),
    ] = None,
) -> None:
    pass


def setup_logging(verbose: bool, quiet: bool, log_file: Path | None = None) -> None:
    """Configure logging based on verbosity flags."""
    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )
    logging.getLogger("rsid_lookup").setLevel(level)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
            )
        )
        logging.getLogger("rsid_lookup").addHandler(file_handler)


def _build_config(
    config_file: Path | None,
    overrides: dict,
) -> LookupConfig:
    if config_file:
        return load_config(config_file, overrides)
    return LookupConfig(**{k: v for k, v in overrides.items() if v is not None})


@app.command()
def lookup(
    input_path: Path = typer.Argument(..., help="Variant table (.tsv, .csv, optionally .gz)"),
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Write matches to this TSV file")
    ] = None,
    db_path: Annotated[
        str | None,
        typer.Option("--db", "-d", help="SQLite reference file or postgresql:// URL"),
    ] = None,
    table_name: Annotated[
        str | None, typer.Option("--table", "-t", help="Reference table name")
    ] = None,
    batch_size: Annotated[
        int | None, typer.Option("--batch", "-b", help="Variants per query")
    ] = None,
    workers: Annotated[
        int | None, typer.Option("--workers", "-w", help="Concurrent batch queries")
    ] = None,
    timeout: Annotated[
        float | None, typer.Option("--timeout", help="Per-batch query timeout in seconds")
    ] = None,
    chr_col: Annotated[str | None, typer.Option("--chr-col", help="Chromosome column")] = None,
    pos_col: Annotated[str | None, typer.Option("--pos-col", help="Position column")] = None,
    a1_col: Annotated[str | None, typer.Option("--a1-col", help="Allele 1 column")] = None,
    a2_col: Annotated[str | None, typer.Option("--a2-col", help="Allele 2 column")] = None,
    config_file: Annotated[
        Path | None, typer.Option("--config", "-c", help="TOML configuration file")
    ] = None,
    log_file: Annotated[Path | None, typer.Option("--log", help="Write log to file")] = None,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-error output"),
    progress: bool = typer.Option(True, "--progress/--no-progress", help="Show progress bar"),
) -> None:
    """Look up rsIDs for every variant in a table.

    Both allele orientations (A1/A2 and A2/A1) are matched. Output columns are
    chromosome, rsID, position, allele1, allele2.
    """
    setup_logging(verbose, quiet, log_file)

    # Matches go to stdout when no output file is given; keep status off it.
    status = console if output else err_console

    if not input_path.exists():
        status.print(f"[red]Error: Input file not found: {input_path}[/red]")
        raise typer.Exit(1)

    overrides = {
        "db_path": db_path,
        "table_name": table_name,
        "batch_size": batch_size,
        "workers": workers,
        "timeout": timeout,
        "chr_col": chr_col,
        "pos_col": pos_col,
        "a1_col": a1_col,
        "a2_col": a2_col,
    }

    try:
        config = _build_config(config_file, overrides)
        table = read_variant_table(input_path)

        if not quiet:
            status.print(f"Looking up {len(table):,} variants in {config.db_path}...")

        if progress and not quiet:
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                BarColumn(),
                TaskProgressColumn(),
                console=status,
            ) as progress_bar:
                task = progress_bar.add_task("Querying batches...", total=None)

                def update_progress(done: int, total: int, matches: int) -> None:
                    progress_bar.update(
                        task,
                        completed=done,
                        total=total,
                        description=f"Batch {done}/{total}: {matches:,} matches",
                    )

                config.progress_callback = update_progress
                result = asyncio.run(lookup_rsids(table, config))
        else:
            result = asyncio.run(lookup_rsids(table, config))

    except SchemaError as e:
        status.print(f"[red]Input Error: {e}[/red]")
        raise typer.Exit(1) from None
    except ConfigError as e:
        status.print(f"[red]Configuration Error: {e}[/red]")
        raise typer.Exit(1) from None

    if output:
        write_result_table(result, output)

    if not quiet:
        status.print(f"[green]✓[/green] Matched {len(result):,} SNPs")
        status.print(f"  Batches: {result.batches_total:,}")
        if result.failed_batches:
            status.print(f"  [yellow]Failed batches: {len(result.failed_batches)}[/yellow]")
            for error in result.failed_batches:
                status.print(f"    {error}")
        if result.row_warnings:
            status.print(f"  [yellow]Dropped rows: {len(result.row_warnings)}[/yellow]")
        if output:
            status.print(f"  Output: {output}")

    if not output:
        print("\t".join(result.columns))
        for row in result.to_tuples():
            print("\t".join(str(value) for value in row))


@app.command()
def check(
    db_path: Annotated[
        str | None,
        typer.Option("--db", "-d", help="SQLite reference file or postgresql:// URL"),
    ] = None,
    table_name: Annotated[str, typer.Option("--table", "-t", help="Reference table name")] = "snp",
) -> None:
    """Check that the reference database opens and holds the reference table."""
    try:
        config = LookupConfig(table_name=table_name, **({"db_path": db_path} if db_path else {}))
    except ConfigError as e:
        console.print(f"[red]Configuration Error: {e}[/red]")
        raise typer.Exit(1) from None

    async def run_check() -> int | None:
        async with open_store(config.db_path) as store:
            if not await store.table_exists(config.table_name):
                return None
            return await store.count_rows(config.table_name)

    try:
        count = asyncio.run(run_check())
    except (ConfigError, StoreQueryError) as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(1) from None

    if count is None:
        console.print(f"[red]✗[/red] Table '{config.table_name}' not found in {config.db_path}")
        raise typer.Exit(1)

    console.print(f"[green]✓[/green] {config.db_path}")
    console.print(f"  Table '{config.table_name}': {count:,} SNPs")
