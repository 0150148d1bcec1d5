from __future__ import annotations

import enum
from datetime import date, datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from punchclock.db import Base


class PunchEventKind(str, enum.Enum):
    HOME_DEPARTURE = "HOME_DEPARTURE"
    COMPANY_ARRIVAL = "COMPANY_ARRIVAL"
    COMPANY_DEPARTURE = "COMPANY_DEPARTURE"
    CLIENT_ARRIVAL = "CLIENT_ARRIVAL"
    CLIENT_DEPARTURE = "CLIENT_DEPARTURE"
    HOME_ARRIVAL = "HOME_ARRIVAL"
    HOTEL_ARRIVAL = "HOTEL_ARRIVAL"
    HOTEL_DEPARTURE = "HOTEL_DEPARTURE"
    # Pre tracking-mode records
    ENTRY = "ENTRY"
    EXIT = "EXIT"

    @property
    def is_legacy(self) -> bool:
        return self in (PunchEventKind.ENTRY, PunchEventKind.EXIT)


class JustificationType(str, enum.Enum):
    MEDICAL_LEAVE = "MEDICAL_LEAVE"
    AUTHORIZED_LEAVE = "AUTHORIZED_LEAVE"
    TIME_BANK = "TIME_BANK"
    UNJUSTIFIED = "UNJUSTIFIED"
    VACATION = "VACATION"
    COMPENSATORY = "COMPENSATORY"


class AuditActorType(str, enum.Enum):
    EMPLOYEE = "EMPLOYEE"
    ADMIN = "ADMIN"
    SYSTEM = "SYSTEM"


class Employee(Base):
    __tablename__ = "employees"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True, unique=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=text("true"))

    time_records: Mapped[list[TimeRecord]] = relationship(back_populates="employee")
    justifications: Mapped[list[Justification]] = relationship(back_populates="employee")


class Project(Base):
    __tablename__ = "projects"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    location: Mapped[str | None] = mapped_column(String(500), nullable=True)
    # Free-form on purpose: rows may still carry modes that were renamed or retired.
    tracking_mode: Mapped[str | None] = mapped_column(String(40), nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=text("true"))

    time_records: Mapped[list[TimeRecord]] = relationship(back_populates="project")


class TimeRecord(Base):
    __tablename__ = "time_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    employee_id: Mapped[int] = mapped_column(
        ForeignKey("employees.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    project_id: Mapped[int] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    kind: Mapped[PunchEventKind] = mapped_column(
        Enum(PunchEventKind, name="punch_event_kind"),
        nullable=False,
    )
    ts_utc: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    lat: Mapped[float | None] = mapped_column(Float, nullable=True)
    lon: Mapped[float | None] = mapped_column(Float, nullable=True)
    note: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    employee: Mapped[Employee] = relationship(back_populates="time_records")
    project: Mapped[Project] = relationship(back_populates="time_records")


class Justification(Base):
    __tablename__ = "justifications"
    __table_args__ = (UniqueConstraint("employee_id", "day_date", name="uq_justifications_employee_day"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    employee_id: Mapped[int] = mapped_column(
        ForeignKey("employees.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    day_date: Mapped[date] = mapped_column(Date, nullable=False)
    type: Mapped[JustificationType] = mapped_column(
        Enum(JustificationType, name="justification_type"),
        nullable=False,
    )
    notes: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    attachment_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    employee: Mapped[Employee] = relationship(back_populates="justifications")


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    ts_utc: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
        index=True,
    )
    actor_type: Mapped[AuditActorType] = mapped_column(
        Enum(AuditActorType, name="audit_actor_type"),
        nullable=False,
    )
    actor_id: Mapped[str] = mapped_column(String(255), nullable=False)
    action: Mapped[str] = mapped_column(String(255), nullable=False)
    entity_type: Mapped[str | None] = mapped_column(String(255), nullable=True)
    entity_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    success: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=text("true"))
    details: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
