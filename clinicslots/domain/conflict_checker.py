"""
Pairwise overlap detection between a candidate appointment and the
appointments already booked for the same doctor and date.

Working-hours policy is deliberately absent here: whether a candidate fits
the clinic's day is checked separately by the caller.
"""

from typing import Iterable, List

from .models import Appointment


def find_conflicts(candidate: Appointment, existing: Iterable[Appointment]) -> List[Appointment]:
    """
    Return every existing appointment that overlaps the candidate.

    Appointments for other doctors or other dates are ignored. There is no
    identity-based exclusion: a stored copy of the candidate itself counts
    as a conflict.
    """
    candidate_interval = candidate.interval

    return [
        appointment for appointment in existing
        if candidate.is_same_schedule(appointment)
        and candidate_interval.overlaps(appointment.interval)
    ]


def has_conflict(candidate: Appointment, existing: Iterable[Appointment]) -> bool:
    """Check if the candidate overlaps any existing appointment (O(n))."""
    candidate_interval = candidate.interval

    for appointment in existing:
        if not candidate.is_same_schedule(appointment):
            continue
        if candidate_interval.overlaps(appointment.interval):
            return True

    return False
