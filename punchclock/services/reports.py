from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date
from zoneinfo import ZoneInfo

from fastapi import HTTPException
from sqlalchemy.orm import Session

from punchclock import store
from punchclock.domain import PunchEvent
from punchclock.services.pairing import compute_hours_by_day
from punchclock.settings import get_attendance_timezone, get_settings


@dataclass(frozen=True, slots=True)
class HoursReportDay:
    day: date
    hours: float
    interval_count: int


@dataclass(frozen=True, slots=True)
class HoursReportRow:
    employee_id: int
    employee_name: str
    project_id: int
    project_name: str
    days: tuple[HoursReportDay, ...]
    total_hours: float
    total_days: int


@dataclass(frozen=True, slots=True)
class HoursReport:
    rows: tuple[HoursReportRow, ...]
    total_employees: int
    total_projects: int
    total_hours: float
    total_days: int


def build_hours_report(
    events: Iterable[PunchEvent],
    *,
    employee_names: Mapping[int, str],
    project_names: Mapping[int, str],
    tz: ZoneInfo | None = None,
) -> HoursReport:
    """Hours per employee and project over an arbitrary date range.

    A day only counts toward total_days when it produced at least one
    complete interval for that employee and project.
    """
    zone = tz or get_attendance_timezone()
    unknown_name = get_settings().unknown_label

    grouped: dict[tuple[int, int], list[PunchEvent]] = defaultdict(list)
    for event in events:
        grouped[(event.employee_id, event.project_id)].append(event)

    rows: list[HoursReportRow] = []
    raw_total_hours = 0.0
    for (employee_id, project_id), pair_events in grouped.items():
        daily = compute_hours_by_day(pair_events, project_names=project_names, tz=zone)
        days = tuple(
            HoursReportDay(
                day=day,
                hours=round(result.total_hours, 2),
                interval_count=len(result.intervals),
            )
            for day, result in daily.items()
        )
        total_hours = sum(result.total_hours for result in daily.values())
        raw_total_hours += total_hours
        rows.append(
            HoursReportRow(
                employee_id=employee_id,
                employee_name=employee_names.get(employee_id, unknown_name),
                project_id=project_id,
                project_name=project_names.get(project_id, unknown_name),
                days=days,
                total_hours=round(total_hours, 2),
                total_days=sum(1 for item in days if item.interval_count > 0),
            )
        )

    rows.sort(key=lambda row: (row.employee_name.casefold(), row.employee_id, row.project_name.casefold(), row.project_id))
    return HoursReport(
        rows=tuple(rows),
        total_employees=len({row.employee_id for row in rows}),
        total_projects=len({row.project_id for row in rows}),
        total_hours=round(raw_total_hours, 2),
        total_days=sum(row.total_days for row in rows),
    )


def hours_report(
    db: Session,
    *,
    start_date: date,
    end_date: date,
    employee_id: int | None = None,
    project_id: int | None = None,
) -> HoursReport:
    if end_date < start_date:
        raise HTTPException(
            status_code=422,
            detail="end_date must be greater than or equal to start_date",
        )

    events = store.fetch_events_in_range(
        db,
        start=start_date,
        end=end_date,
        employee_id=employee_id,
        project_id=project_id,
    )
    return build_hours_report(
        events,
        employee_names=store.fetch_employee_names(db, (event.employee_id for event in events)),
        project_names=store.fetch_project_names(db, (event.project_id for event in events)),
    )
