"""Output formatters for CLI display."""

import json

from rich.console import Console
from rich.table import Table

from ..core.models import Departure, Station

console = Console()


def format_stations_table(stations: list[Station]) -> None:
    """Display stations as a rich table."""
    if not stations:
        console.print("No stations found.")
        return

    table = Table(
        title=f"Stations ({len(stations)})",
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("Name", style="cyan", no_wrap=True)

    for station in stations:
        table.add_row(station.name)

    console.print(table)


def format_departures_table(station: Station, departures: list[Departure]) -> None:
    """Display the departures of one station as a rich table."""
    if not departures:
        console.print(f"No departures found for {station.name}.")
        return

    table = Table(
        title=f"Departures: {station.name}",
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("Line", style="yellow", no_wrap=True)
    table.add_column("Direction", style="cyan")
    table.add_column("Time", style="green", no_wrap=True)

    for departure in departures:
        table.add_row(departure.line, departure.direction, departure.time)

    console.print(table)


def format_stations_json(stations: list[Station]) -> str:
    """Format stations as JSON."""
    return json.dumps(
        [station.model_dump() for station in stations], ensure_ascii=False, indent=2
    )


def format_departures_json(results: list[tuple[Station, list[Departure]]]) -> str:
    """Format the departures of one or more stations as JSON."""
    data = [
        {
            "station": station.name,
            "departures": [departure.model_dump() for departure in departures],
        }
        for station, departures in results
    ]
    return json.dumps(data, ensure_ascii=False, indent=2)
