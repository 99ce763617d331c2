"""CLI main entry point for IVB transit lookups."""

import logging
import sys
from collections.abc import Callable
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import TypeVar

import click
from rich.console import Console
from rich.logging import RichHandler
from tenacity import Retrying, retry_if_exception, stop_after_attempt, wait_exponential

from .. import __version__
from ..client import TransitClient
from ..core import (
    CacheFreshness,
    FetchError,
    ParseError,
    StationNotFoundError,
    ValidationError,
)
from ..core.models import Departure, Station
from ..core.scraper import DEFAULT_ROWS, STATION_LIST_URL
from .formatters import (
    format_departures_json,
    format_departures_table,
    format_stations_json,
    format_stations_table,
)

logger = logging.getLogger(__name__)

console = Console()
error_console = Console(stderr=True)

DEFAULT_CACHE_FILE = Path.home() / ".ivb.cache"

EXIT_ERROR = 1
EXIT_STATION_NOT_FOUND = 3

RETRY_WAIT = wait_exponential(multiplier=1, min=1, max=10)

T = TypeVar("T")


@dataclass
class CliState:
    """Settings and lazily created client shared by all commands."""

    cache_file: Path | None
    timeout: int
    retries: int
    cache_loaded: bool = False
    refresh_requested: bool = False
    _client: TransitClient | None = field(default=None, repr=False)

    @property
    def client(self) -> TransitClient:
        if self._client is None:
            self._client = TransitClient(timeout=self.timeout)
            self.cache_loaded = self._load_cache()
        return self._client

    def _load_cache(self) -> bool:
        if self.cache_file is None or self._client is None:
            return False
        try:
            self._client.load_cache(self.cache_file)
            return True
        except FileNotFoundError:
            logger.info(f"No cache file at {self.cache_file}, starting cold")
            return False
        except OSError as e:
            error_console.print(f"[yellow]Error reading cache file:[/yellow] {e}")
            return False

    def close(self) -> None:
        """Persist the station cache if it changed, then release the client."""
        if self._client is None:
            return
        try:
            if self.cache_file is not None and self._should_save():
                self._client.save_cache(self.cache_file)
        except (FetchError, OSError) as e:
            error_console.print(f"[red]Error writing cache file:[/red] {e}")
        finally:
            self._client.close()

    def _should_save(self) -> bool:
        if self._client is None:
            return False
        if not (self.refresh_requested or not self.cache_loaded):
            return False
        return self._client.cache.freshness is CacheFreshness.FRESH


def _is_transient(exc: BaseException) -> bool:
    return isinstance(exc, FetchError) and not isinstance(exc, ParseError)


def call_with_retries(func: Callable[[], T], attempts: int) -> T:
    """Call func, retrying transport failures up to attempts times in total."""
    retryer = Retrying(
        stop=stop_after_attempt(attempts),
        wait=RETRY_WAIT,
        retry=retry_if_exception(_is_transient),
        reraise=True,
        before_sleep=lambda retry_state: logger.warning(
            f"Attempt {retry_state.attempt_number} failed, retrying: "
            f"{retry_state.outcome.exception() if retry_state.outcome else ''}"
        ),
    )
    return retryer(func)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_path=False)],
        force=True,
    )


def _report_fetch_error(e: FetchError) -> None:
    if isinstance(e, ParseError):
        error_console.print(f"[red]Unexpected page structure:[/red] {e}")
    else:
        error_console.print(f"[red]Fetch error:[/red] {e}")


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--cache-file",
    "-c",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar="IVB_CACHE_FILE",
    default=DEFAULT_CACHE_FILE,
    show_default=True,
    help="Station cache file",
)
@click.option("--no-cache", is_flag=True, help="Neither read nor write the cache file")
@click.option(
    "--timeout", "-t", default=30, envvar="IVB_TIMEOUT", help="Request timeout in seconds"
)
@click.option(
    "--retries",
    "-r",
    type=click.IntRange(min=1),
    default=1,
    envvar="IVB_RETRIES",
    help="Attempts per network request",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.pass_context
def cli(
    ctx: click.Context,
    cache_file: Path,
    no_cache: bool,
    timeout: int,
    retries: int,
    verbose: bool,
) -> None:
    """IVB Transit - Innsbruck stations and real-time departures."""
    _configure_logging(verbose)
    state = CliState(
        cache_file=None if no_cache else cache_file,
        timeout=timeout,
        retries=retries,
    )
    ctx.obj = state
    ctx.call_on_close(state.close)


@cli.command()
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format",
)
@click.pass_obj
def stations(state: CliState, output_format: str) -> None:
    """List all available stations.

    Examples:
        ivb stations
        ivb stations --format json
    """
    try:
        with console.status("[bold green]Loading stations..."):
            result = call_with_retries(state.client.list_stations, state.retries)
    except FetchError as e:
        _report_fetch_error(e)
        sys.exit(EXIT_ERROR)

    if output_format == "json":
        click.echo(format_stations_json(result))
    else:
        format_stations_table(result)


@cli.command()
@click.argument("names", nargs=-1, required=True)
@click.option(
    "--rows",
    "-n",
    type=click.IntRange(min=1),
    default=DEFAULT_ROWS,
    show_default=True,
    help="Number of departures per station",
)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format",
)
@click.pass_obj
def departures(
    state: CliState, names: tuple[str, ...], rows: int, output_format: str
) -> None:
    """Show the next departures for one or more stations.

    Examples:
        ivb departures Hauptbahnhof
        ivb departures "Maria-Theresien-Straße" --rows 4
        ivb departures Hauptbahnhof Marktplatz --format json
    """
    client = state.client
    results: list[tuple[Station, list[Departure]]] = []
    missing = False

    try:
        for name in names:
            try:
                station = call_with_retries(
                    partial(client.require_station, name), state.retries
                )
            except StationNotFoundError as e:
                missing = True
                error_console.print(f"[red]Error - {e}[/red]")
                suggestions = client.suggest_stations(name)
                if suggestions:
                    hint = ", ".join(s.name for s in suggestions)
                    error_console.print(f"[yellow]Did you mean:[/yellow] {hint}")
                continue

            with console.status(f"[bold green]Fetching departures for {station.name}..."):
                board = call_with_retries(
                    partial(client.departures, station, rows=rows), state.retries
                )
            results.append((station, board))
    except ValidationError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        sys.exit(EXIT_ERROR)
    except FetchError as e:
        _report_fetch_error(e)
        sys.exit(EXIT_ERROR)

    if output_format == "json":
        click.echo(format_departures_json(results))
    else:
        for station, board in results:
            format_departures_table(station, board)

    if missing:
        sys.exit(EXIT_STATION_NOT_FOUND)


@cli.command()
@click.pass_obj
def refresh(state: CliState) -> None:
    """Refetch the station list and update the cache file."""
    client = state.client
    state.refresh_requested = True

    try:
        with console.status("[bold green]Refreshing stations in the background..."):
            result = call_with_retries(
                lambda: client.refresh_in_background().await_result(), state.retries
            )
    except FetchError as e:
        _report_fetch_error(e)
        sys.exit(EXIT_ERROR)

    console.print(f"[green]✓ Refreshed {len(result)} stations[/green]")


@cli.group()
def config() -> None:
    """Configuration management."""
    pass


@config.command("show")
@click.pass_obj
def show_config(state: CliState) -> None:
    """Show current configuration."""
    console.print("[bold]Current Configuration:[/bold]")
    console.print(f"• Cache file: {state.cache_file or 'disabled'}")
    console.print(f"• Request timeout: {state.timeout} seconds")
    console.print(f"• Attempts per request: {state.retries}")
    console.print(f"• Station list: {STATION_LIST_URL}")


if __name__ == "__main__":
    cli()
