from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from sqlalchemy import select
from sqlalchemy.orm import Session

from punchclock.domain import JustificationRecord, ProjectMeta, PunchEvent
from punchclock.errors import DateOutOfRangeError
from punchclock.models import Employee, Justification, Project, PunchEventKind, TimeRecord
from punchclock.services.attendance_calendar import MAX_SUPPORTED_YEAR, MIN_SUPPORTED_YEAR
from punchclock.settings import get_attendance_timezone


def _to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def local_date_range_to_utc_bounds(
    start_date: date,
    end_date: date,
    tz: ZoneInfo | None = None,
) -> tuple[datetime, datetime]:
    """Half-open UTC window covering local days start_date..end_date inclusive."""
    for day_date in (start_date, end_date):
        if not MIN_SUPPORTED_YEAR <= day_date.year <= MAX_SUPPORTED_YEAR:
            raise DateOutOfRangeError(day_date)
    zone = tz or get_attendance_timezone()
    start_local = datetime.combine(start_date, time.min, tzinfo=zone)
    end_local = datetime.combine(end_date + timedelta(days=1), time.min, tzinfo=zone)
    return start_local.astimezone(timezone.utc), end_local.astimezone(timezone.utc)


def to_punch_event(row: TimeRecord) -> PunchEvent:
    return PunchEvent(
        id=row.id,
        employee_id=row.employee_id,
        project_id=row.project_id,
        kind=row.kind,
        ts_utc=_to_utc(row.ts_utc),
        lat=row.lat,
        lon=row.lon,
        note=row.note,
    )


def to_justification_record(row: Justification) -> JustificationRecord:
    return JustificationRecord(
        id=row.id,
        employee_id=row.employee_id,
        day_date=row.day_date,
        type=row.type,
        notes=row.notes,
        attachment_name=row.attachment_name,
    )


def fetch_events_in_range(
    db: Session,
    *,
    start: date,
    end: date,
    employee_id: int | None = None,
    project_id: int | None = None,
) -> list[PunchEvent]:
    start_utc, end_utc = local_date_range_to_utc_bounds(start, end)
    stmt = (
        select(TimeRecord)
        .where(TimeRecord.ts_utc >= start_utc, TimeRecord.ts_utc < end_utc)
        .order_by(TimeRecord.ts_utc.asc(), TimeRecord.id.asc())
    )
    if employee_id is not None:
        stmt = stmt.where(TimeRecord.employee_id == employee_id)
    if project_id is not None:
        stmt = stmt.where(TimeRecord.project_id == project_id)
    return [to_punch_event(row) for row in db.scalars(stmt).all()]


def fetch_events_for_employee_in_range(
    db: Session,
    employee_id: int,
    start: date,
    end: date,
) -> list[PunchEvent]:
    return fetch_events_in_range(db, start=start, end=end, employee_id=employee_id)


def fetch_justifications_for_employee_in_range(
    db: Session,
    employee_id: int,
    start: date,
    end: date,
) -> list[JustificationRecord]:
    # Ordered by id so duplicate resolution follows arrival order.
    stmt = (
        select(Justification)
        .where(
            Justification.employee_id == employee_id,
            Justification.day_date >= start,
            Justification.day_date <= end,
        )
        .order_by(Justification.id.asc())
    )
    return [to_justification_record(row) for row in db.scalars(stmt).all()]


def fetch_project_metadata(db: Session, project_id: int) -> ProjectMeta | None:
    project = db.get(Project, project_id)
    if project is None:
        return None
    return ProjectMeta(id=project.id, name=project.name, tracking_mode=project.tracking_mode)


def fetch_project_names(db: Session, project_ids: Iterable[int]) -> dict[int, str]:
    ids = sorted(set(project_ids))
    if not ids:
        return {}
    rows = db.execute(select(Project.id, Project.name).where(Project.id.in_(ids))).all()
    return {row[0]: row[1] for row in rows}


def fetch_employee_names(db: Session, employee_ids: Iterable[int]) -> dict[int, str]:
    ids = sorted(set(employee_ids))
    if not ids:
        return {}
    rows = db.execute(select(Employee.id, Employee.full_name).where(Employee.id.in_(ids))).all()
    return {row[0]: row[1] for row in rows}


def append_punch_event(
    db: Session,
    *,
    employee_id: int,
    project_id: int,
    kind: PunchEventKind,
    ts_utc: datetime,
    lat: float | None = None,
    lon: float | None = None,
    note: str | None = None,
) -> PunchEvent:
    row = TimeRecord(
        employee_id=employee_id,
        project_id=project_id,
        kind=kind,
        ts_utc=_to_utc(ts_utc),
        lat=lat,
        lon=lon,
        note=note,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return to_punch_event(row)
