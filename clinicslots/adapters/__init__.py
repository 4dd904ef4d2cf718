"""
Adapters layer - Appointment storage implementations.
"""

from .memory_repository import InMemoryAppointmentRepository
from .sql_repository import SqlAppointmentRepository

__all__ = ["InMemoryAppointmentRepository", "SqlAppointmentRepository"]
