"""
Scheduling SQLAlchemy Models

Database models for scheduling domain persistence.
"""

from typing import Any

from sqlalchemy import (
    DDL,
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Time,
    event,
)
from sqlalchemy.orm import relationship

from clinic_scheduling.database.base import Base, TimestampMixin
from clinic_scheduling.domains.scheduling.domain.value_objects.appointment_status import (
    ACTIVE_STATUSES,
    AppointmentStatus,
)


class DoctorModel(Base, TimestampMixin):
    """SQLAlchemy model for Doctor entity."""

    __tablename__ = "doctors"

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String(200), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    specialty_id = Column(Integer, nullable=True, index=True)

    # Relationships
    contracts = relationship("DoctorContractModel", back_populates="doctor")
    schedule_slots = relationship("DoctorScheduleSlotModel", back_populates="doctor")
    appointments = relationship("AppointmentModel", back_populates="doctor")

    def __repr__(self) -> str:
        return f"<Doctor(id={self.id}, name='{self.full_name}')>"


class DoctorContractModel(Base, TimestampMixin):
    """SQLAlchemy model for a doctor's contract (end_date NULL = open-ended)."""

    __tablename__ = "doctor_contracts"

    id = Column(Integer, primary_key=True, index=True)
    doctor_id = Column(Integer, ForeignKey("doctors.id"), nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    contract_type = Column(String(50), default="staff", nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    doctor = relationship("DoctorModel", back_populates="contracts")

    __table_args__ = (
        CheckConstraint("end_date IS NULL OR end_date >= start_date", name="ck_doctor_contracts_dates"),
    )


class DoctorScheduleSlotModel(Base, TimestampMixin):
    """SQLAlchemy model for a weekly availability window (0=Monday)."""

    __tablename__ = "doctor_schedule_slots"

    id = Column(Integer, primary_key=True, index=True)
    doctor_id = Column(Integer, ForeignKey("doctors.id"), nullable=False, index=True)
    day_of_week = Column(Integer, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    doctor = relationship("DoctorModel", back_populates="schedule_slots")

    __table_args__ = (
        CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_doctor_schedule_slots_day"),
        CheckConstraint("start_time < end_time", name="ck_doctor_schedule_slots_window"),
        Index("ix_doctor_schedule_slots_doctor_day", "doctor_id", "day_of_week"),
    )


class AppointmentModel(Base, TimestampMixin):
    """
    SQLAlchemy model for Appointment entity.

    ``starts_at``/``ends_at`` duplicate date + times as clinic-local
    timestamps so PostgreSQL can enforce non-overlap with an exclusion
    constraint.
    """

    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, index=True)

    # References
    doctor_id = Column(Integer, ForeignKey("doctors.id"), nullable=False, index=True)
    patient_id = Column(Integer, nullable=False, index=True)

    # Scheduling
    appointment_date = Column(Date, nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    starts_at = Column(DateTime, nullable=False)
    ends_at = Column(DateTime, nullable=False)

    # Status
    status = Column(
        SQLEnum(
            AppointmentStatus,
            name="appointment_status",
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        default=AppointmentStatus.SCHEDULED,
        nullable=False,
        index=True,
    )
    status_history = Column(JSON, default=list)

    reason = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    # Timestamps
    confirmed_at = Column(DateTime(timezone=True), nullable=True)
    started_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    no_show_at = Column(DateTime(timezone=True), nullable=True)
    rescheduled_at = Column(DateTime(timezone=True), nullable=True)
    cancellation_reason = Column(Text, nullable=True)
    cancelled_by = Column(String(100), nullable=True)

    # Reschedule chain
    rescheduled_from_id = Column(Integer, ForeignKey("appointments.id"), nullable=True)
    rescheduled_to_id = Column(Integer, ForeignKey("appointments.id"), nullable=True)

    # Audit
    deleted_at = Column(DateTime(timezone=True), nullable=True)
    version = Column(Integer, default=0, nullable=False)

    # Relationships
    doctor = relationship("DoctorModel", back_populates="appointments")

    __table_args__ = (
        CheckConstraint("starts_at < ends_at", name="ck_appointments_interval"),
        Index("ix_appointments_doctor_date", "doctor_id", "appointment_date"),
        Index("ix_appointments_patient_date", "patient_id", "appointment_date"),
    )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "doctor_id": self.doctor_id,
            "patient_id": self.patient_id,
            "appointment_date": self.appointment_date.isoformat() if self.appointment_date else None,
            "start_time": self.start_time.strftime("%H:%M") if self.start_time else None,
            "end_time": self.end_time.strftime("%H:%M") if self.end_time else None,
            "status": self.status.value if self.status else None,
            "reason": self.reason,
            "rescheduled_from_id": self.rescheduled_from_id,
            "rescheduled_to_id": self.rescheduled_to_id,
            "deleted_at": self.deleted_at.isoformat() if self.deleted_at else None,
        }


# PostgreSQL-only guard against double-booking across processes
_active_values = ", ".join(f"'{status.value}'" for status in sorted(ACTIVE_STATUSES, key=lambda s: s.value))

event.listen(
    AppointmentModel.__table__,
    "before_create",
    DDL("CREATE EXTENSION IF NOT EXISTS btree_gist").execute_if(dialect="postgresql"),
)
event.listen(
    AppointmentModel.__table__,
    "after_create",
    DDL(
        "ALTER TABLE appointments ADD CONSTRAINT ex_appointments_doctor_overlap "
        "EXCLUDE USING gist (doctor_id WITH =, tsrange(starts_at, ends_at, '[)') WITH &&) "
        f"WHERE (status IN ({_active_values}) AND deleted_at IS NULL)"
    ).execute_if(dialect="postgresql"),
)

EXCLUSION_CONSTRAINT_NAME = "ex_appointments_doctor_overlap"
