"""
Application services for booking appointments and querying availability.

The service fetches existing appointments through a repository adapter and
delegates overlap detection and slot enumeration to the pure domain core.
This keeps the CLI thin and improves testability by allowing the storage
dependency to be swapped via a simple protocol.

The conflict check here is a read followed by a write. Two bookings racing
for the same slot are only kept apart by the repository's ``add``, which
must enforce uniqueness itself (unique index or locked re-check).
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import List, Optional, Protocol

import pendulum

from ..domain.conflict_checker import find_conflicts
from ..domain.exceptions import (
    AppointmentConflict,
    AppointmentNotFound,
    InvalidDate,
    InvalidStatus,
    OutsideWorkingHours,
)
from ..domain.models import Appointment, Slot, WorkingHours
from ..domain.slot_calculator import SlotCalculator

logger = logging.getLogger(__name__)

DATE_FORMAT = "YYYY-MM-DD"


class AppointmentStatus(str, Enum):
    """Lifecycle states chosen by this integration layer."""
    PENDING = "pending"
    CONFIRMED = "confirmed"


class AppointmentRepositoryProtocol(Protocol):
    """Protocol describing the storage behaviour needed by the service."""

    def find_by_doctor_and_date(self, doctor_id: str, date: str) -> List[Appointment]:
        """Return all appointments for one doctor on one date."""

    def add(self, appointment: Appointment) -> Appointment:
        """Persist a new appointment and return it with its id assigned."""

    def get(self, appointment_id: str) -> Optional[Appointment]:
        """Return one appointment or None."""

    def list(self, date: Optional[str] = None, status: Optional[str] = None) -> List[Appointment]:
        """Return appointments filtered by date and/or status."""

    def update_status(self, appointment_id: str, status: str) -> Optional[Appointment]:
        """Change the status of an appointment; None when it does not exist."""

    def delete(self, appointment_id: str) -> bool:
        """Remove an appointment; False when it does not exist."""


def normalize_date(value: str) -> str:
    """
    Validate a ``YYYY-MM-DD`` date string and return it in canonical form.

    Raises:
        InvalidDate: If the value is not a real calendar date
    """
    try:
        return pendulum.from_format(str(value).strip(), DATE_FORMAT).to_date_string()
    except ValueError as exc:
        raise InvalidDate(f"Invalid date '{value}': expected {DATE_FORMAT}") from exc


def parse_status(value: AppointmentStatus | str) -> AppointmentStatus:
    """
    Resolve a status value to an AppointmentStatus.

    Raises:
        InvalidStatus: If the value is not a known status
    """
    try:
        return AppointmentStatus(value)
    except ValueError as exc:
        known = ", ".join(s.value for s in AppointmentStatus)
        raise InvalidStatus(f"Unknown status {value!r}: expected one of {known}") from exc


class BookingService:
    """
    Orchestrates appointment retrieval, conflict checks and persistence.
    """

    def __init__(
        self,
        repository: AppointmentRepositoryProtocol,
        working_hours: WorkingHours | None = None,
    ) -> None:
        self._repository = repository
        self._working_hours = working_hours or WorkingHours()
        self._slot_calculator = SlotCalculator(working_hours=self._working_hours)

    def book(self, candidate: Appointment) -> Appointment:
        """
        Check a candidate against working hours and existing bookings, then store it.

        Raises:
            InvalidDate: If the candidate's date is malformed
            OutsideWorkingHours: If the appointment does not fit the working day
            AppointmentConflict: If it overlaps an existing appointment
        """
        candidate = candidate.with_changes(
            date=normalize_date(candidate.date),
            status=AppointmentStatus.PENDING.value,
        )

        self.ensure_within_working_hours(candidate)

        existing = self._repository.find_by_doctor_and_date(candidate.doctor_id, candidate.date)
        conflicts = find_conflicts(candidate, existing)
        if conflicts:
            logger.warning(
                "Rejected booking for doctor %s on %s at %s: %d conflicting appointment(s)",
                candidate.doctor_id, candidate.date, candidate.start_time, len(conflicts),
            )
            raise AppointmentConflict(
                f"Doctor {candidate.doctor_id} already has an appointment overlapping "
                f"{candidate.interval} on {candidate.date}",
                conflicts=conflicts,
            )

        stored = self._repository.add(candidate)
        logger.info(
            "Booked appointment %s for doctor %s on %s at %s (%d min)",
            stored.id, stored.doctor_id, stored.date, stored.start_time, stored.duration,
        )
        return stored

    def ensure_within_working_hours(self, candidate: Appointment) -> None:
        """Raise OutsideWorkingHours when the candidate spills outside the working day."""
        if not self._working_hours.contains(candidate.interval):
            raise OutsideWorkingHours(
                f"Appointment {candidate.interval} is outside working hours {self._working_hours}"
            )

    def available_slots(self, doctor_id: str, date: str) -> List[str]:
        """Free slot start times for a doctor and date, computed from fresh data."""
        date = normalize_date(date)
        existing = self._repository.find_by_doctor_and_date(doctor_id, date)
        logger.debug("Loaded %d appointment(s) for doctor %s on %s", len(existing), doctor_id, date)
        return self._slot_calculator.available_slots(doctor_id, date, existing)

    def slot_table(self, doctor_id: str, date: str) -> List[Slot]:
        """Every slot of the day for a doctor, flagged free or booked."""
        date = normalize_date(date)
        existing = self._repository.find_by_doctor_and_date(doctor_id, date)
        return self._slot_calculator.slot_table(doctor_id, date, existing)

    def confirm(self, appointment_id: str) -> Appointment:
        """Move an appointment from pending to confirmed."""
        updated = self._repository.update_status(appointment_id, AppointmentStatus.CONFIRMED.value)
        if updated is None:
            raise AppointmentNotFound(f"Appointment not found: {appointment_id}")

        logger.info("Confirmed appointment %s", appointment_id)
        return updated

    def cancel(self, appointment_id: str) -> None:
        """Remove an appointment from the schedule."""
        if not self._repository.delete(appointment_id):
            raise AppointmentNotFound(f"Appointment not found: {appointment_id}")

        logger.info("Cancelled appointment %s", appointment_id)

    def list_appointments(
        self,
        date: Optional[str] = None,
        status: AppointmentStatus | str | None = None,
    ) -> List[Appointment]:
        """Appointments filtered by date and/or status, ordered by date and start time."""
        if date is not None:
            date = normalize_date(date)
        if status is not None:
            status = parse_status(status).value

        appointments = self._repository.list(date=date, status=status)
        return sorted(appointments, key=lambda a: (a.date, a.interval.start, a.doctor_id))
