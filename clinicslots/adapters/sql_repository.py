"""
SQLAlchemy-backed appointment repository.

Rows are mapped to immutable ``Appointment`` records at the boundary, so the
ORM objects never leave this module.
"""

import logging
import uuid
from contextlib import contextmanager
from typing import Iterator, List, Optional

from sqlalchemy import Column, DateTime, Integer, String, UniqueConstraint, create_engine, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import ArgumentError, IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.sql import func

from ..domain.conflict_checker import find_conflicts
from ..domain.exceptions import AppointmentConflict, RepositoryError
from ..domain.models import DEFAULT_DURATION_MINUTES, Appointment

logger = logging.getLogger(__name__)

Base = declarative_base()


class AppointmentRow(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        # Backstop for two writers inserting the same doctor/date/start
        UniqueConstraint("doctor_id", "date", "start_time", name="uq_appointments_doctor_slot"),
    )

    id = Column(String(32), primary_key=True)
    doctor_id = Column(String(64), nullable=False, index=True)
    patient_id = Column(String(64), nullable=True)
    date = Column(String(10), nullable=False, index=True)
    start_time = Column(String(5), nullable=False)
    duration = Column(Integer, nullable=False, default=DEFAULT_DURATION_MINUTES)
    status = Column(String(20), nullable=True, index=True)
    created_at = Column(DateTime, server_default=func.now())

    def to_domain(self) -> Appointment:
        return Appointment(
            id=self.id,
            doctor_id=self.doctor_id,
            patient_id=self.patient_id,
            date=self.date,
            start_time=self.start_time,
            duration=self.duration,
            status=self.status,
        )

    def __repr__(self):
        return f"<AppointmentRow(id={self.id}, doctor_id={self.doctor_id}, date='{self.date}', start='{self.start_time}')>"


class SqlAppointmentRepository:
    """
    Appointment storage in any SQLAlchemy-supported database.

    ``add`` re-checks overlaps inside the insert transaction and relies on the
    unique constraint when another writer stores the same start time first.
    """

    def __init__(self, database_url: str | None = None, engine: Engine | None = None):
        if engine is None and not database_url:
            raise ValueError("Either database_url or engine must be provided")

        try:
            if engine is None:
                engine = create_engine(database_url)
            Base.metadata.create_all(bind=engine)
        except (ArgumentError, ImportError) as exc:
            raise RepositoryError(f"Invalid database URL {database_url!r}: {exc}") from exc
        except SQLAlchemyError as exc:
            raise RepositoryError(f"Cannot initialise appointment tables: {exc}") from exc

        self.engine = engine
        self._session_factory = sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)

    @contextmanager
    def _session(self) -> Iterator[Session]:
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except IntegrityError:
            session.rollback()
            raise
        except SQLAlchemyError as exc:
            session.rollback()
            raise RepositoryError(f"Database operation failed: {exc}") from exc
        finally:
            session.close()

    def find_by_doctor_and_date(self, doctor_id: str, date: str) -> List[Appointment]:
        with self._session() as session:
            rows = session.scalars(
                select(AppointmentRow)
                .where(AppointmentRow.doctor_id == doctor_id)
                .where(AppointmentRow.date == date)
                .order_by(AppointmentRow.start_time)
            ).all()
            return [row.to_domain() for row in rows]

    def add(self, appointment: Appointment) -> Appointment:
        appointment_id = appointment.id or uuid.uuid4().hex

        try:
            with self._session() as session:
                rows = session.scalars(
                    select(AppointmentRow)
                    .where(AppointmentRow.doctor_id == appointment.doctor_id)
                    .where(AppointmentRow.date == appointment.date)
                    .with_for_update()
                ).all()
                if session.get(AppointmentRow, appointment_id) is not None:
                    raise RepositoryError(f"Appointment id already exists: {appointment_id}")

                conflicts = find_conflicts(appointment, [row.to_domain() for row in rows])
                if conflicts:
                    raise AppointmentConflict(
                        f"Doctor {appointment.doctor_id} was booked concurrently for "
                        f"{appointment.interval} on {appointment.date}",
                        conflicts=conflicts,
                    )

                session.add(
                    AppointmentRow(
                        id=appointment_id,
                        doctor_id=appointment.doctor_id,
                        patient_id=appointment.patient_id,
                        date=appointment.date,
                        start_time=appointment.start_time,
                        duration=appointment.duration,
                        status=appointment.status,
                    )
                )
        except IntegrityError as exc:
            if _is_duplicate_id(exc):
                raise RepositoryError(f"Appointment id already exists: {appointment_id}") from exc

            logger.warning("Unique slot constraint rejected appointment for doctor %s", appointment.doctor_id)
            raise AppointmentConflict(
                f"Doctor {appointment.doctor_id} already has an appointment at "
                f"{appointment.start_time} on {appointment.date}"
            ) from exc

        return appointment.with_changes(id=appointment_id)

    def get(self, appointment_id: str) -> Optional[Appointment]:
        with self._session() as session:
            row = session.get(AppointmentRow, appointment_id)
            return row.to_domain() if row else None

    def list(self, date: Optional[str] = None, status: Optional[str] = None) -> List[Appointment]:
        query = select(AppointmentRow)
        if date is not None:
            query = query.where(AppointmentRow.date == date)
        if status is not None:
            query = query.where(AppointmentRow.status == status)

        with self._session() as session:
            rows = session.scalars(query.order_by(AppointmentRow.date, AppointmentRow.start_time)).all()
            return [row.to_domain() for row in rows]

    def update_status(self, appointment_id: str, status: str) -> Optional[Appointment]:
        with self._session() as session:
            row = session.get(AppointmentRow, appointment_id)
            if row is None:
                return None
            row.status = status
            return row.to_domain()

    def delete(self, appointment_id: str) -> bool:
        with self._session() as session:
            row = session.get(AppointmentRow, appointment_id)
            if row is None:
                return False
            session.delete(row)
            return True


def _is_duplicate_id(exc: IntegrityError) -> bool:
    """True when the primary key, not the slot constraint, was violated."""
    message = str(exc.orig)
    # SQLite names the column, PostgreSQL names the primary key constraint
    return "appointments.id" in message or "appointments_pkey" in message
