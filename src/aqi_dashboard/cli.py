from __future__ import annotations

import logging
import sys
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from .classification import classify_index
from .config import DashboardConfig
from .load_state import LoadController, LoadPhase
from .view_model import ViewModel, assemble
from .waqi import WAQIClient

logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)s | %(message)s")
app = typer.Typer(add_completion=False)
console = Console()


def _strip_ipykernel_args(argv: list[str]) -> list[str]:
    out = [argv[0]]
    i = 1
    while i < len(argv):
        a = argv[i]
        if a in ("-f", "--f"):
            i += 2
            continue
        if a.startswith("--f="):
            i += 1
            continue
        out.append(a)
        i += 1
    return out


def _print_view_model(vm: ViewModel) -> None:
    summary = Table(title=f"Air Quality: {vm.location.name}")
    summary.add_column("Key", style="cyan")
    summary.add_column("Value", style="green")
    summary.add_row("AQI", str(vm.aqi))
    summary.add_row("Status", f"{vm.status.label} ({vm.status.description})")
    summary.add_row("Scale position", f"{vm.scale_position:.1f}%")
    summary.add_row("Dominant pollutant", vm.dominant_label)
    summary.add_row("Last updated", vm.observed_label)
    if vm.station_idx is not None:
        summary.add_row("Station ID", str(vm.station_idx))
    console.print(summary)

    readings = Table(title="Readings")
    readings.add_column("Metric", style="cyan")
    readings.add_column("Value", justify="right")
    readings.add_column("Gauge", justify="right")
    readings.add_column("Dominant")
    for card in vm.pollutant_cards + vm.weather_cards:
        readings.add_row(
            card.name,
            f"{card.value:g} {card.unit}".strip(),
            f"{card.gauge_percent:.0f}%" if card.gauge_percent is not None else "",
            "*" if card.is_dominant else "",
        )
    console.print(readings)

    for series in vm.forecast:
        table = Table(title=f"Forecast: {series.name}")
        table.add_column("Day", style="cyan")
        table.add_column("Min", justify="right")
        table.add_column("Avg", justify="right")
        table.add_column("Max", justify="right")
        for p in series.points:
            table.add_row(f"{p.weekday} {p.day}", f"{p.min:g}", f"{p.avg:g}", f"{p.max:g}")
        if series.is_empty:
            table.add_row("(no forecast)", "", "", "")
        console.print(table)

    for source in vm.sources:
        console.print(f"[dim]Source:[/dim] {source.name} {source.url}")


@app.command()
def fetch(
    station: str = "here",
    token: Optional[str] = typer.Option(None, envvar="WAQI_TOKEN", help="WAQI access token"),
    series: List[str] = typer.Option(["pm25", "pm10"], help="Forecast series to show"),
    timeout: int = 30,
):
    """Fetch the feed once and print the dashboard view model."""
    cfg = DashboardConfig(station=station, request_timeout=timeout, forecast_series=tuple(series))

    try:
        client = WAQIClient(cfg, token=token)
    except EnvironmentError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=2)

    controller = LoadController()
    state = controller.run(client.fetch_snapshot)

    if state.phase is LoadPhase.FAILED or state.snapshot is None:
        console.print(f"[red]{state.message}[/red]")
        raise typer.Exit(code=1)

    _print_view_model(assemble(state.snapshot, config=cfg))


@app.command()
def classify(aqi: float):
    """Print the status tier for an AQI value."""
    status = classify_index(aqi)
    console.print(f"{aqi:g}: [bold]{status.label}[/bold] - {status.description}")


if __name__ == "__main__":
    sys.argv = _strip_ipykernel_args(sys.argv)
    sys.exit(app(standalone_mode=False))
