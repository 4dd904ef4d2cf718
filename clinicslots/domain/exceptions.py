"""
Domain-specific exception hierarchy for the clinic scheduling application.
"""


class SchedulingError(Exception):
    """Base class for all application-level errors."""


class InvalidTimeFormat(SchedulingError, ValueError):
    """Raised when a time string cannot be parsed as HH:mm."""


class InvalidDuration(SchedulingError, ValueError):
    """Raised when an appointment duration is zero or negative."""


class InvalidDate(SchedulingError, ValueError):
    """Raised when a calendar date is not a valid YYYY-MM-DD string."""


class OutsideWorkingHours(SchedulingError):
    """Raised when a requested appointment does not fit the working day."""


class AppointmentConflict(SchedulingError):
    """Raised when a candidate appointment overlaps an existing one."""

    def __init__(self, message: str, conflicts=()):
        super().__init__(message)
        self.conflicts = list(conflicts)


class AppointmentNotFound(SchedulingError):
    """Raised when an appointment id does not exist in the store."""


class RepositoryError(SchedulingError):
    """Raised when appointment data cannot be read or written."""


class InvalidStatus(SchedulingError, ValueError):
    """Raised when an appointment status is not one of the known values."""
