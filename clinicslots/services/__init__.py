"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .booking import AppointmentRepositoryProtocol, AppointmentStatus, BookingService

__all__ = ["AppointmentRepositoryProtocol", "AppointmentStatus", "BookingService"]
