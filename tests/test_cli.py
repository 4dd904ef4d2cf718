"""
Tests for the Typer command-line interface.
"""

import pytest
from typer.testing import CliRunner

from clinicslots.adapters.sql_repository import SqlAppointmentRepository
from clinicslots.cli.app import EXIT_CONFLICT, app

runner = CliRunner()

DATE = "2024-11-25"


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'cli.db'}"


@pytest.fixture
def config_file(tmp_path, database_url):
    path = tmp_path / "config.yaml"
    path.write_text(
        f"database_url: '{database_url}'\n"
        "log_level: WARNING\n",
        encoding="utf-8",
    )
    return path


def _invoke(*args):
    return runner.invoke(app, list(args))


def test_slots_on_empty_day(config_file):
    result = _invoke("slots", "dr-1", DATE, "--config", str(config_file))

    assert result.exit_code == 0
    assert "08:00" in result.output
    assert "16:40" in result.output


def test_book_then_slot_is_gone(config_file, database_url):
    result = _invoke("book", "dr-1", DATE, "09:00", "--patient", "p-1", "--config", str(config_file))

    assert result.exit_code == 0
    assert "Booked" in result.output

    stored = SqlAppointmentRepository(database_url=database_url).find_by_doctor_and_date("dr-1", DATE)
    assert [a.start_time for a in stored] == ["09:00"]
    assert stored[0].status == "pending"

    result = _invoke("slots", "dr-1", DATE, "--config", str(config_file))
    assert "09:00 - 09:20" not in result.output
    assert "08:40 - 09:00" in result.output
    assert "09:20 - 09:40" in result.output


def test_conflicting_booking_exits_with_conflict_code(config_file):
    _invoke("book", "dr-1", DATE, "09:00", "--config", str(config_file))

    result = _invoke("book", "dr-1", DATE, "09:10", "--config", str(config_file))

    assert result.exit_code == EXIT_CONFLICT
    assert "Conflict" in result.output


def test_malformed_time_exits_with_error(config_file):
    result = _invoke("book", "dr-1", DATE, "9h00", "--config", str(config_file))

    assert result.exit_code == 1
    assert "Invalid time" in result.output


def test_outside_working_hours_exits_with_error(config_file):
    result = _invoke("book", "dr-1", DATE, "16:50", "--config", str(config_file))

    assert result.exit_code == 1
    assert "outside working hours" in result.output


def test_confirm_and_list(config_file, database_url):
    _invoke("book", "dr-1", DATE, "10:00", "--config", str(config_file))
    appointment_id = SqlAppointmentRepository(database_url=database_url).list()[0].id

    result = _invoke("confirm", appointment_id, "--config", str(config_file))
    assert result.exit_code == 0

    result = _invoke("list", "--status", "confirmed", "--config", str(config_file))
    assert result.exit_code == 0
    assert "confirmed" in result.output

    result = _invoke("list", "--status", "pending", "--config", str(config_file))
    assert "No appointments found" in result.output


def test_cancel_unknown_appointment(config_file):
    result = _invoke("cancel", "missing", "--config", str(config_file))

    assert result.exit_code == 1
    assert "not found" in result.output


def test_invalid_database_url_exits_with_error(tmp_path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text("database_url: 'not a url'\n", encoding="utf-8")

    result = _invoke("slots", "dr-1", DATE, "--config", str(config_path))

    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert "Invalid database URL" in result.output


def test_missing_config_file(tmp_path):
    result = _invoke("slots", "dr-1", DATE, "--config", str(tmp_path / "nope.yaml"))

    assert result.exit_code == 1
    assert "Config file not found" in result.output


def test_version():
    result = _invoke("version")

    assert result.exit_code == 0
    assert "clinicslots" in result.output


def test_slots_all_shows_booked(config_file):
    _invoke("book", "dr-1", DATE, "09:00", "--config", str(config_file))

    result = _invoke("slots", "dr-1", DATE, "--all", "--config", str(config_file))

    assert result.exit_code == 0
    assert "booked" in result.output
    assert "09:00 - 09:20" in result.output
