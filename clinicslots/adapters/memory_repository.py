"""
In-process appointment repository, optionally seeded from a JSON file.
"""

import json
import logging
import threading
import uuid
from pathlib import Path
from typing import Dict, List, Optional

from ..domain.conflict_checker import find_conflicts
from ..domain.exceptions import AppointmentConflict, RepositoryError
from ..domain.models import DEFAULT_DURATION_MINUTES, Appointment

logger = logging.getLogger(__name__)


class InMemoryAppointmentRepository:
    """
    Keeps appointments in a dict guarded by a lock.

    ``add`` repeats the overlap check while holding the lock, so two callers
    that both passed the service-level check cannot both store an
    overlapping appointment.
    """

    def __init__(self, appointments: Optional[List[Appointment]] = None):
        self._lock = threading.Lock()
        self._appointments: Dict[str, Appointment] = {}

        for appointment in appointments or []:
            appointment_id = appointment.id or uuid.uuid4().hex
            self._appointments[appointment_id] = appointment.with_changes(id=appointment_id)

    @classmethod
    def from_json(cls, data_file: Path) -> "InMemoryAppointmentRepository":
        """
        Load seed appointments from a JSON list of objects.

        Each entry needs ``doctor_id``, ``date`` and ``start_time``;
        ``duration``, ``id``, ``patient_id`` and ``status`` are optional.
        Entries that fail validation are skipped with a warning.
        """
        try:
            with open(data_file, "r", encoding="utf-8") as f:
                raw_entries = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise RepositoryError(f"Cannot load appointments from {data_file}: {exc}") from exc

        if not isinstance(raw_entries, list):
            raise RepositoryError(f"Seed file {data_file} must contain a JSON list")

        appointments: List[Appointment] = []
        for entry in raw_entries:
            try:
                appointments.append(_appointment_from_dict(entry))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping invalid seed appointment %r: %s", entry, exc)

        return cls(appointments)

    def find_by_doctor_and_date(self, doctor_id: str, date: str) -> List[Appointment]:
        with self._lock:
            return [
                a for a in self._appointments.values()
                if a.doctor_id == doctor_id and a.date == date
            ]

    def add(self, appointment: Appointment) -> Appointment:
        with self._lock:
            if appointment.id is not None and appointment.id in self._appointments:
                raise RepositoryError(f"Appointment id already exists: {appointment.id}")

            conflicts = find_conflicts(appointment, self._appointments.values())
            if conflicts:
                raise AppointmentConflict(
                    f"Doctor {appointment.doctor_id} was booked concurrently for "
                    f"{appointment.interval} on {appointment.date}",
                    conflicts=conflicts,
                )

            stored = appointment.with_changes(id=appointment.id or uuid.uuid4().hex)
            self._appointments[stored.id] = stored
            return stored

    def get(self, appointment_id: str) -> Optional[Appointment]:
        with self._lock:
            return self._appointments.get(appointment_id)

    def list(self, date: Optional[str] = None, status: Optional[str] = None) -> List[Appointment]:
        with self._lock:
            return [
                a for a in self._appointments.values()
                if (date is None or a.date == date)
                and (status is None or a.status == status)
            ]

    def update_status(self, appointment_id: str, status: str) -> Optional[Appointment]:
        with self._lock:
            current = self._appointments.get(appointment_id)
            if current is None:
                return None

            updated = current.with_changes(status=status)
            self._appointments[appointment_id] = updated
            return updated

    def delete(self, appointment_id: str) -> bool:
        with self._lock:
            return self._appointments.pop(appointment_id, None) is not None


def _appointment_from_dict(entry: dict) -> Appointment:
    return Appointment(
        doctor_id=str(entry["doctor_id"]),
        date=entry["date"],
        start_time=entry["start_time"],
        duration=entry.get("duration", DEFAULT_DURATION_MINUTES),
        id=entry.get("id"),
        patient_id=entry.get("patient_id"),
        status=entry.get("status"),
    )
