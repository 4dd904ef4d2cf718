"""
Domain layer - Pure business logic without external dependencies.
"""

from .conflict_checker import find_conflicts, has_conflict
from .exceptions import InvalidDuration, InvalidTimeFormat, SchedulingError
from .models import (
    Appointment,
    Interval,
    Slot,
    WorkingHours,
    format_time,
    overlaps,
    parse_time,
)
from .slot_calculator import SlotCalculator, available_slots

__all__ = [
    "Appointment",
    "Interval",
    "Slot",
    "WorkingHours",
    "SlotCalculator",
    "available_slots",
    "find_conflicts",
    "has_conflict",
    "format_time",
    "overlaps",
    "parse_time",
    "InvalidDuration",
    "InvalidTimeFormat",
    "SchedulingError",
]
