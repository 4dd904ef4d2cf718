"""
Main CLI application using Typer.
"""

import logging
from pathlib import Path
from typing import Annotated, Optional

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from ..adapters.sql_repository import SqlAppointmentRepository
from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import AppointmentConflict, SchedulingError
from ..domain.models import Appointment
from ..services.booking import AppointmentStatus, BookingService

app = typer.Typer(
    name="clinicslots",
    help="Book clinic appointments without double-booking doctors",
    add_completion=False
)

console = Console()

EXIT_ERROR = 1
EXIT_CONFLICT = 2

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")
]


def _load_config(config_file: Optional[Path]) -> AppConfig:
    """Load an explicit config file, or the default one when it exists."""
    try:
        if config_file is not None:
            return AppConfig.load_from_yaml(config_file)
        return AppConfig.load_or_default(get_default_config_path())
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(EXIT_ERROR)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)]
    )


def _build_service(config: AppConfig) -> BookingService:
    _configure_logging(config.log_level)

    try:
        repository = SqlAppointmentRepository(database_url=config.database_url)
    except SchedulingError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(EXIT_ERROR)

    return BookingService(repository=repository, working_hours=config.build_working_hours())


def _fail(error: SchedulingError) -> None:
    """Print a scheduling error and exit; conflicts get their own exit code."""
    if isinstance(error, AppointmentConflict):
        console.print(f"[bold red]Conflict:[/bold red] {escape(str(error))}")
        for conflict in error.conflicts:
            console.print(f"  - {escape(str(conflict))}")
        raise typer.Exit(EXIT_CONFLICT)

    console.print(f"[bold red]Error:[/bold red] {escape(str(error))}")
    raise typer.Exit(EXIT_ERROR)


@app.command()
def slots(
    doctor: Annotated[str, typer.Argument(help="Doctor identifier")],
    date: Annotated[Optional[str], typer.Argument(help="Date (YYYY-MM-DD). Defaults to today.")] = None,
    show_all: Annotated[bool, typer.Option("--all", help="Show booked slots as well.")] = False,
    config_file: ConfigOption = None,
):
    """
    Show the bookable slots of a doctor on one day.

    Examples:

        clinicslots slots dr-silva 2024-11-25
        clinicslots slots dr-silva --all
    """
    service = _build_service(_load_config(config_file))
    day = date or pendulum.now().to_date_string()

    try:
        table_rows = service.slot_table(doctor, day)
    except SchedulingError as e:
        _fail(e)

    visible = table_rows if show_all else [slot for slot in table_rows if slot.available]

    if not visible:
        console.print(f"[yellow]No free slots for {doctor} on {day}.[/yellow]")
        return

    table = Table(
        title=f"Slots for {doctor} on {day}",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Start", style="bold")
    table.add_column("Interval", style="dim")
    table.add_column("State")

    for slot in visible:
        state = "[green]free[/green]" if slot.available else "[red]booked[/red]"
        table.add_row(slot.start_time, str(slot.interval), state)

    console.print(table)


@app.command()
def book(
    doctor: Annotated[str, typer.Argument(help="Doctor identifier")],
    date: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
    start: Annotated[str, typer.Argument(help="Start time (HH:mm)")],
    duration: Annotated[Optional[int], typer.Option("--duration", "-d", help="Duration in minutes")] = None,
    patient: Annotated[Optional[str], typer.Option("--patient", "-p", help="Patient identifier")] = None,
    config_file: ConfigOption = None,
):
    """
    Book an appointment if the doctor is free.
    """
    config = _load_config(config_file)
    service = _build_service(config)
    length = duration if duration is not None else config.working_hours.default_duration_minutes

    try:
        candidate = Appointment(
            doctor_id=doctor,
            date=date,
            start_time=start,
            duration=length,
            patient_id=patient
        )
        stored = service.book(candidate)
    except SchedulingError as e:
        _fail(e)

    console.print(f"[green]✓ Booked[/green] {stored}")
    console.print(f"  id: {stored.id}")


@app.command()
def confirm(
    appointment_id: Annotated[str, typer.Argument(help="Appointment id")],
    config_file: ConfigOption = None,
):
    """
    Confirm a pending appointment.
    """
    service = _build_service(_load_config(config_file))

    try:
        confirmed = service.confirm(appointment_id)
    except SchedulingError as e:
        _fail(e)

    console.print(f"[green]✓ Confirmed[/green] {confirmed}")


@app.command()
def cancel(
    appointment_id: Annotated[str, typer.Argument(help="Appointment id")],
    config_file: ConfigOption = None,
):
    """
    Cancel (remove) an appointment.
    """
    service = _build_service(_load_config(config_file))

    try:
        service.cancel(appointment_id)
    except SchedulingError as e:
        _fail(e)

    console.print(f"[green]✓ Cancelled[/green] {appointment_id}")


@app.command("list")
def list_appointments(
    date: Annotated[Optional[str], typer.Option("--date", help="Only this date (YYYY-MM-DD)")] = None,
    status: Annotated[Optional[AppointmentStatus], typer.Option("--status", help="Only this status")] = None,
    config_file: ConfigOption = None,
):
    """
    List booked appointments.
    """
    service = _build_service(_load_config(config_file))

    try:
        appointments = service.list_appointments(date=date, status=status)
    except SchedulingError as e:
        _fail(e)

    if not appointments:
        console.print("[yellow]No appointments found.[/yellow]")
        return

    table = Table(
        title="Appointments",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Date", style="bold", no_wrap=True)
    table.add_column("Time", no_wrap=True)
    table.add_column("Doctor", style="bold yellow", no_wrap=True)
    table.add_column("Patient")
    table.add_column("Status", no_wrap=True)
    table.add_column("Id", style="dim", overflow="fold")

    for appointment in appointments:
        table.add_row(
            appointment.date,
            str(appointment.interval),
            appointment.doctor_id,
            appointment.patient_id or "-",
            appointment.status or "-",
            appointment.id or "-"
        )

    console.print(table)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]clinicslots[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
