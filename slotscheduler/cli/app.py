"""
Main CLI application using Typer.
"""

import logging
from datetime import timedelta
from pathlib import Path
from typing import Annotated, Optional

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..adapters.busy_file_loader import BusyFileLoader
from ..config import AppConfig, get_default_config_path
from ..domain.availability import to_busy_intervals
from ..domain.exceptions import SchedulingError
from ..domain.slot_calculator import SlotCalculator
from ..domain.timezones import from_epoch_ms
from ..services.slot_finder import SlotFinderService

app = typer.Typer(
    name="slotscheduler",
    help="Find available booking slots from busy times and weekly availability",
    add_completion=False
)

console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load_config(config_file: Optional[Path]) -> AppConfig:
    config_path = config_file or get_default_config_path()
    return AppConfig.load_from_yaml(config_path)


def _parse_date(value: str, tz: str, label: str):
    try:
        return pendulum.from_format(value, "YYYY-MM-DD", tz=tz)
    except ValueError as e:
        raise typer.BadParameter(f"Invalid {label} date '{value}': {e}")


@app.command()
def find(
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")] = None,
    start: Annotated[Optional[str], typer.Option("--start", help="Start date (YYYY-MM-DD), defaults to today")] = None,
    end: Annotated[Optional[str], typer.Option("--end", help="End date (YYYY-MM-DD, inclusive), defaults to start + 7 days")] = None,
    duration: Annotated[Optional[int], typer.Option("--duration", "-d", help="Slot duration in minutes")] = None,
    split: Annotated[Optional[int], typer.Option("--split", help="Minutes between slot starts")] = None,
    offset: Annotated[Optional[int], typer.Option("--offset", help="Align slot starts to this offset in minutes")] = None,
    padding: Annotated[Optional[int], typer.Option("--padding", help="Minutes of padding around busy times")] = None,
    max_overlaps: Annotated[Optional[int], typer.Option("--max-overlaps", "-k", help="Busy periods allowed to overlap a slot")] = None,
    busy_file: Annotated[Optional[Path], typer.Option("--busy-file", help="JSON file with busy times")] = None,
    earliest: Annotated[Optional[str], typer.Option("--earliest", help="Earliest local start time (HH:mm)")] = None,
    latest: Annotated[Optional[str], typer.Option("--latest", help="Latest local start time (HH:mm, exclusive)")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging")] = False,
):
    """
    Find available slots.

    Examples:

        slotscheduler find

        slotscheduler find --start 2024-01-15 --end 2024-01-19 --duration 60

        slotscheduler find --busy-file busy.json --padding 10 --max-overlaps 1
    """
    _configure_logging(verbose)

    try:
        config = _load_config(config_file)
        tz = config.timezone

        overrides = {
            "duration_minutes": duration,
            "split_minutes": split,
            "offset_minutes": offset,
            "padding_minutes": padding,
            "max_overlaps": max_overlaps,
            "earliest_time": earliest,
            "latest_time": latest,
        }
        defaults = config.defaults.model_copy(
            update={key: value for key, value in overrides.items() if value is not None}
        )
        options = defaults.to_options(tz)

        start_date = _parse_date(start, tz, "start") if start else pendulum.now(tz).start_of("day")
        if end:
            end_date = _parse_date(end, tz, "end").add(days=1).start_of("day")
        else:
            end_date = start_date.add(days=7)

        source_path = busy_file or config.busy_file
        busy_source = BusyFileLoader(source_path) if source_path else None

        service = SlotFinderService(
            slot_calculator=SlotCalculator(availability=config.get_availability(), timezone=tz),
            busy_source=busy_source,
            busy_times=config.busy_intervals(),
        )

        console.print("[bold cyan]Search:[/bold cyan]")
        console.print(f"   Period: {start_date.format('DD.MM.YYYY HH:mm')} - {end_date.format('DD.MM.YYYY HH:mm')} ({tz})")
        console.print(f"   Duration: {options.slot_duration} min, split: {options.slot_split or options.slot_duration} min")
        console.print()

        slots = service.find_slots(start_date=start_date, end_date=end_date, options=options)

        if not slots:
            console.print(
                "[yellow]No available slots found.[/yellow]\n"
                "Try a longer period or a shorter duration."
            )
            return

        table = Table(title=f"{len(slots)} available slot(s)", show_header=True, header_style="bold cyan")
        table.add_column("Slot", style="bold")
        table.add_column("UTC", style="dim")

        for slot in slots:
            table.add_row(
                slot.format_display(tz),
                f"{slot.start.format('YYYY-MM-DD HH:mm')} - {slot.end.format('HH:mm')}",
            )

        console.print(table)

    except (FileNotFoundError, SchedulingError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def week(
    date: Annotated[Optional[str], typer.Argument(help="Any date in the week (YYYY-MM-DD), defaults to today")] = None,
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging")] = False,
):
    """
    Show the busy time implied by the weekly availability for one UTC week.
    """
    _configure_logging(verbose)

    try:
        config = _load_config(config_file)
        availability = config.get_availability()

        if availability is None:
            console.print("[yellow]No availability configured.[/yellow]")
            return

        day = _parse_date(date, "UTC", "week") if date else pendulum.now("UTC")
        monday = day.date() - timedelta(days=day.weekday())
        busy = to_busy_intervals(availability, monday, config.timezone)

        table = Table(
            title=f"Busy time, week of {monday.isoformat()} ({config.timezone})",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("Start (UTC)", style="bold yellow")
        table.add_column("End (UTC)", style="dim")

        for interval in busy:
            table.add_row(
                from_epoch_ms(interval.start).format("ddd YYYY-MM-DD HH:mm"),
                from_epoch_ms(interval.end).format("ddd YYYY-MM-DD HH:mm:ss.SSS"),
            )

        console.print()
        console.print(table)
        console.print()

    except (FileNotFoundError, SchedulingError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]slotscheduler[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
