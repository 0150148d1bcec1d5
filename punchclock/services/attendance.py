from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone

from sqlalchemy.orm import Session

from punchclock import store
from punchclock.domain import PunchEvent
from punchclock.errors import ApiError
from punchclock.models import PunchEventKind
from punchclock.services.attendance_calendar import (
    CalendarDay,
    DayStatus,
    day_status,
    index_justifications,
    local_today,
    month_calendar,
    parse_month,
)
from punchclock.services.flow import flow_position
from punchclock.services.monthly import MonthlySummary, summarize, validate_employee_id
from punchclock.services.pairing import local_day, normalize_ts
from punchclock.services.tracking_modes import get_label

logger = logging.getLogger("punchclock.attendance")


@dataclass(frozen=True, slots=True)
class NextPunch:
    employee_id: int
    project_id: int
    day: date
    tracking_mode: str
    recorded_kinds: tuple[PunchEventKind, ...]
    expected: PunchEventKind | None
    expected_label: str | None

    @property
    def is_complete(self) -> bool:
        return self.expected is None


@dataclass(frozen=True, slots=True)
class RecordedPunch:
    event: PunchEvent
    label: str
    tracking_mode: str


def summarize_employee_month(
    db: Session,
    employee_id: int,
    month: str,
    *,
    today: date | None = None,
) -> MonthlySummary:
    month_ref = parse_month(month)
    validate_employee_id(employee_id)
    events = store.fetch_events_for_employee_in_range(db, employee_id, month_ref.start, month_ref.end)
    justifications = store.fetch_justifications_for_employee_in_range(
        db,
        employee_id,
        month_ref.start,
        month_ref.end,
    )
    project_names = store.fetch_project_names(db, (event.project_id for event in events))
    return summarize(
        month_ref,
        employee_id,
        events,
        justifications,
        today=today,
        project_names=project_names,
    )


def employee_month_calendar(
    db: Session,
    employee_id: int,
    month: str,
    *,
    today: date | None = None,
) -> tuple[MonthlySummary, list[CalendarDay]]:
    cutoff = today or local_today()
    summary = summarize_employee_month(db, employee_id, month, today=cutoff)
    justification_by_date = {record.day_date: record for record in summary.justifications}
    days = month_calendar(
        summary.month,
        summary.worked_dates,
        justification_by_date,
        today=cutoff,
        hours_by_day=summary.per_day_hours,
    )
    return summary, days


def employee_day_status(
    db: Session,
    employee_id: int,
    day: date,
    *,
    today: date | None = None,
) -> DayStatus:
    validate_employee_id(employee_id)
    events = store.fetch_events_for_employee_in_range(db, employee_id, day, day)
    justifications = store.fetch_justifications_for_employee_in_range(db, employee_id, day, day)
    justification_by_date, _ = index_justifications(justifications)
    worked_days = {local_day(event.ts_utc) for event in events}
    return day_status(day, worked_days, justification_by_date, today=today or local_today())


def next_expected_for_project(
    db: Session,
    project_id: int,
    employee_id: int,
    day: date | None = None,
) -> NextPunch:
    validate_employee_id(employee_id)
    project = store.fetch_project_metadata(db, project_id)
    if project is None:
        raise ApiError(status_code=404, code="PROJECT_NOT_FOUND", message="Project not found.")

    target_day = day or local_today()
    events = store.fetch_events_for_employee_in_range(db, employee_id, target_day, target_day)
    recorded = tuple(
        event.kind
        for event in sorted(events, key=lambda item: normalize_ts(item.ts_utc))
        if event.project_id == project_id and local_day(event.ts_utc) == target_day
    )
    position = flow_position(project.tracking_mode, recorded)
    expected = None if position.is_complete else position.expected
    mode = position.spec.mode.value
    return NextPunch(
        employee_id=employee_id,
        project_id=project_id,
        day=target_day,
        tracking_mode=mode,
        recorded_kinds=recorded,
        expected=expected,
        expected_label=get_label(mode, expected) if expected is not None else None,
    )


def record_punch(
    db: Session,
    *,
    employee_id: int,
    project_id: int,
    ts_utc: datetime | None = None,
    lat: float | None = None,
    lon: float | None = None,
    note: str | None = None,
) -> RecordedPunch:
    punch_ts = normalize_ts(ts_utc) if ts_utc is not None else datetime.now(timezone.utc)
    next_punch = next_expected_for_project(db, project_id, employee_id, local_day(punch_ts))
    if next_punch.expected is None:
        raise ApiError(
            status_code=409,
            code="FLOW_COMPLETE",
            message="All punches for this project are already recorded today.",
        )

    event = store.append_punch_event(
        db,
        employee_id=employee_id,
        project_id=project_id,
        kind=next_punch.expected,
        ts_utc=punch_ts,
        lat=lat,
        lon=lon,
        note=note,
    )
    logger.info(
        "punch_recorded",
        extra={
            "employee_id": employee_id,
            "project_id": project_id,
            "event_id": event.id,
            "kind": event.kind.value,
            "tracking_mode": next_punch.tracking_mode,
            "step": len(next_punch.recorded_kinds) + 1,
        },
    )
    return RecordedPunch(
        event=event,
        label=next_punch.expected_label or event.kind.value,
        tracking_mode=next_punch.tracking_mode,
    )
