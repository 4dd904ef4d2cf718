"""
Core business logic for calculating bookable appointment slots.

Pure domain logic without any external dependencies (no database, no I/O).
"""

from typing import Iterable, List

from .conflict_checker import has_conflict
from .models import Appointment, Slot, WorkingHours, format_time


class SlotCalculator:
    """
    Calculates which slots of a doctor's day are still free.

    Algorithm:
    1. Keep only the existing appointments for the requested doctor and date
    2. Walk the slot grid from opening time in ``granularity`` steps
    3. Treat each slot as a candidate appointment and run the conflict check
    4. Keep the slot iff nothing overlaps it

    Runs in O(slots x existing). The grid is small (27 slots for the default
    day) so nothing is cached; every call sees the appointments it is given.
    """

    def __init__(self, working_hours: WorkingHours | None = None):
        self.working_hours = working_hours or WorkingHours()

    def available_slots(
        self,
        doctor_id: str,
        date: str,
        existing: Iterable[Appointment]
    ) -> List[str]:
        """
        Return the free slot start times as ascending ``HH:mm`` strings.

        Args:
            doctor_id: Doctor whose day is enumerated
            date: Calendar date (YYYY-MM-DD)
            existing: Appointments already booked; other doctors/dates are ignored

        Returns:
            Ordered list of start times, empty when the day is fully booked
        """
        return [
            slot.start_time
            for slot in self.slot_table(doctor_id, date, existing)
            if slot.available
        ]

    def slot_table(
        self,
        doctor_id: str,
        date: str,
        existing: Iterable[Appointment]
    ) -> List[Slot]:
        """Return every slot of the day, flagged free or booked."""
        booked = self._bookings_for(doctor_id, date, existing)
        granularity = self.working_hours.granularity

        slots: List[Slot] = []
        for start in self.working_hours.slot_starts():
            candidate = Appointment(
                doctor_id=doctor_id,
                date=date,
                start_time=format_time(start),
                duration=granularity
            )
            slots.append(
                Slot(start=start, duration=granularity, available=not has_conflict(candidate, booked))
            )

        return slots

    @staticmethod
    def _bookings_for(
        doctor_id: str,
        date: str,
        existing: Iterable[Appointment]
    ) -> List[Appointment]:
        return [
            appointment for appointment in existing
            if appointment.doctor_id == doctor_id and appointment.date == date
        ]


def available_slots(
    doctor_id: str,
    date: str,
    existing: Iterable[Appointment],
    working_hours: WorkingHours | None = None
) -> List[str]:
    """Free slot start times for one doctor and date under the given policy."""
    return SlotCalculator(working_hours=working_hours).available_slots(doctor_id, date, existing)
