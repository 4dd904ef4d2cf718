"""
Domain models for appointment intervals, working hours and slots.

Times of day are expressed as minutes from midnight. Every interval is
half-open: it contains its start minute but not its end minute, so an
appointment ending at 09:20 does not collide with one starting at 09:20.
"""

import re
from dataclasses import dataclass, replace
from typing import Iterator, Optional

from .exceptions import InvalidDuration, InvalidTimeFormat

MINUTES_PER_DAY = 24 * 60

DAY_START_MINUTES = 8 * 60    # 08:00
DAY_END_MINUTES = 17 * 60     # 17:00
SLOT_GRANULARITY_MINUTES = 20
DEFAULT_DURATION_MINUTES = 20

_TIME_PATTERN = re.compile(r"^([0-9]{1,2}):([0-9]{2})$")


def parse_time(text: str) -> int:
    """
    Convert an ``HH:mm`` string to minutes from midnight.

    Raises:
        InvalidTimeFormat: If the text is not a valid time of day
    """
    if not isinstance(text, str):
        raise InvalidTimeFormat(f"Time must be a string in HH:mm format, got {text!r}")

    match = _TIME_PATTERN.match(text.strip())
    if not match:
        raise InvalidTimeFormat(f"Invalid time '{text}': expected HH:mm")

    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise InvalidTimeFormat(f"Invalid time '{text}': hour or minute out of range")

    return hours * 60 + minutes


def format_time(minutes: int) -> str:
    """Format minutes from midnight as a zero-padded ``HH:mm`` string."""
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise InvalidTimeFormat(f"Minute offset {minutes} is outside a single day")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def _validate_duration(duration: int) -> None:
    if isinstance(duration, bool) or not isinstance(duration, int):
        raise InvalidDuration(f"Duration must be an integer number of minutes, got {duration!r}")
    if duration <= 0:
        raise InvalidDuration(f"Duration must be greater than zero, got {duration}")


@dataclass(frozen=True)
class Interval:
    """
    An immutable half-open interval ``[start, start + duration)`` in minutes.

    Invariant: duration is strictly positive.
    """
    start: int
    duration: int

    def __post_init__(self):
        _validate_duration(self.duration)

    @classmethod
    def from_time(cls, start_time: str, duration: int) -> "Interval":
        """Build an interval from an ``HH:mm`` start and a duration."""
        return cls(start=parse_time(start_time), duration=duration)

    @property
    def end(self) -> int:
        return self.start + self.duration

    def overlaps(self, other: "Interval") -> bool:
        """Check if this interval shares at least one instant with another."""
        return self.start < other.end and other.start < self.end

    def __str__(self) -> str:
        end = self.end % MINUTES_PER_DAY
        return f"{format_time(self.start)} - {format_time(end)}"


def overlaps(a: Interval, b: Interval) -> bool:
    """Half-open overlap test; commutative, adjacent intervals do not overlap."""
    return a.overlaps(b)


@dataclass(frozen=True)
class Appointment:
    """
    An appointment as seen by the scheduling core.

    ``id``, ``patient_id`` and ``status`` belong to the storage layer and are
    carried along untouched; conflict detection only looks at the doctor,
    the date, the start time and the duration.
    """
    doctor_id: str
    date: str
    start_time: str
    duration: int = DEFAULT_DURATION_MINUTES
    id: Optional[str] = None
    patient_id: Optional[str] = None
    status: Optional[str] = None

    def __post_init__(self):
        # Normalise "9:00" to "09:00" so stored keys compare equal
        object.__setattr__(self, "start_time", format_time(parse_time(self.start_time)))
        _validate_duration(self.duration)

    @property
    def interval(self) -> Interval:
        return Interval(start=parse_time(self.start_time), duration=self.duration)

    def is_same_schedule(self, other: "Appointment") -> bool:
        """True when both appointments belong to the same doctor and date."""
        return self.doctor_id == other.doctor_id and self.date == other.date

    def with_changes(self, **changes) -> "Appointment":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    def __str__(self) -> str:
        return f"{self.date} {self.interval} (doctor {self.doctor_id})"


@dataclass(frozen=True)
class WorkingHours:
    """
    The daily window in which appointments may be booked.
    """
    start_minutes: int = DAY_START_MINUTES
    end_minutes: int = DAY_END_MINUTES
    granularity: int = SLOT_GRANULARITY_MINUTES

    def __post_init__(self):
        if not 0 <= self.start_minutes < self.end_minutes <= MINUTES_PER_DAY:
            raise ValueError(
                f"Working hours must open before they close within one day, "
                f"got {self.start_minutes}-{self.end_minutes}"
            )
        if self.granularity <= 0:
            raise ValueError(f"Slot granularity must be positive, got {self.granularity}")

    @classmethod
    def from_times(
        cls,
        start: str,
        end: str,
        granularity: int = SLOT_GRANULARITY_MINUTES
    ) -> "WorkingHours":
        """Build working hours from ``HH:mm`` strings."""
        return cls(
            start_minutes=parse_time(start),
            end_minutes=parse_time(end),
            granularity=granularity
        )

    def contains(self, interval: Interval) -> bool:
        """Check if an interval lies completely inside the working day."""
        return self.start_minutes <= interval.start and interval.end <= self.end_minutes

    def slot_starts(self) -> Iterator[int]:
        """Yield the start minute of every slot that fits before closing."""
        return iter(range(self.start_minutes, self.end_minutes - self.granularity + 1, self.granularity))

    def __str__(self) -> str:
        return f"{format_time(self.start_minutes)} - {format_time(self.end_minutes % MINUTES_PER_DAY)}"


@dataclass(frozen=True)
class Slot:
    """
    One cell of a doctor's daily slot grid, either free or occupied.
    """
    start: int
    duration: int
    available: bool

    @property
    def start_time(self) -> str:
        return format_time(self.start)

    @property
    def interval(self) -> Interval:
        return Interval(start=self.start, duration=self.duration)

    def format_display(self) -> str:
        """Format: HH:MM - HH:MM (free|booked)"""
        state = "free" if self.available else "booked"
        return f"{self.interval} ({state})"
