from datetime import date

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from punchclock.audit import log_audit
from punchclock.db import get_db
from punchclock.models import AuditActorType
from punchclock.schemas import (
    CalendarDayRead,
    DayStatusRead,
    HoursReportDayRead,
    HoursReportResponse,
    HoursReportRowRead,
    JustificationRead,
    MonthlyCalendarResponse,
    MonthlySummaryResponse,
    NextPunchRead,
    PunchCreateRequest,
    PunchEventRead,
    PunchRecordedResponse,
    TrackingModeRead,
    WorkIntervalRead,
)
from punchclock.services.attendance import (
    NextPunch,
    employee_day_status,
    employee_month_calendar,
    next_expected_for_project,
    record_punch,
    summarize_employee_month,
)
from punchclock.services.attendance_calendar import status_counts
from punchclock.services.monthly import MonthlySummary
from punchclock.services.reports import hours_report
from punchclock.services.tracking_modes import list_modes

router = APIRouter(tags=["attendance"])


def _to_next_punch_read(next_punch: NextPunch) -> NextPunchRead:
    return NextPunchRead(
        employee_id=next_punch.employee_id,
        project_id=next_punch.project_id,
        day=next_punch.day,
        tracking_mode=next_punch.tracking_mode,
        recorded_kinds=list(next_punch.recorded_kinds),
        next_kind=next_punch.expected,
        next_label=next_punch.expected_label,
        flow_complete=next_punch.is_complete,
    )


def _to_summary_response(summary: MonthlySummary) -> MonthlySummaryResponse:
    return MonthlySummaryResponse(
        employee_id=summary.employee_id,
        month=summary.month,
        total_hours=summary.total_hours,
        worked_days=summary.worked_days,
        business_days=summary.business_days,
        absences=summary.absences,
        justification_count=summary.justification_count,
        justifications_by_type=dict(summary.justifications_by_type),
        average_hours_per_day=summary.average_hours_per_day,
        daily_hours=dict(summary.per_day_hours),
        daily_details={
            day: [
                WorkIntervalRead(
                    project_id=interval.project_id,
                    project_name=interval.project_name,
                    entry=interval.entry,
                    exit=interval.exit,
                    hours=interval.hours,
                    flags=list(interval.flags),
                )
                for interval in intervals
            ]
            for day, intervals in summary.per_day_details.items()
        },
        day_records={
            day: [PunchEventRead.model_validate(event) for event in events]
            for day, events in summary.per_day_raw_events.items()
        },
        justifications=[JustificationRead.model_validate(record) for record in summary.justifications],
        flags=list(summary.flags),
    )


@router.get("/api/tracking-modes", response_model=list[TrackingModeRead])
def get_tracking_modes() -> list[TrackingModeRead]:
    return [
        TrackingModeRead(
            mode=spec.mode.value,
            label=spec.label,
            description=spec.description,
            flow=list(spec.flow),
            flow_labels={kind.value: label for kind, label in spec.flow_labels.items()},
        )
        for spec in list_modes()
    ]


@router.get("/api/attendance/next-punch", response_model=NextPunchRead)
def get_next_punch(
    employee_id: int = Query(ge=1),
    project_id: int = Query(ge=1),
    day: date | None = Query(default=None),
    db: Session = Depends(get_db),
) -> NextPunchRead:
    return _to_next_punch_read(next_expected_for_project(db, project_id, employee_id, day))


@router.post("/api/time-records", response_model=PunchRecordedResponse, status_code=status.HTTP_201_CREATED)
def create_time_record(
    payload: PunchCreateRequest,
    request: Request,
    db: Session = Depends(get_db),
) -> PunchRecordedResponse:
    request.state.actor = "employee"
    request.state.employee_id = payload.employee_id
    recorded = record_punch(
        db,
        employee_id=payload.employee_id,
        project_id=payload.project_id,
        ts_utc=payload.ts_utc,
        lat=payload.lat,
        lon=payload.lon,
        note=payload.note,
    )
    request.state.event_id = recorded.event.id
    log_audit(
        db,
        actor_type=AuditActorType.EMPLOYEE,
        actor_id=str(payload.employee_id),
        action="PUNCH_RECORDED",
        entity_type="time_record",
        entity_id=str(recorded.event.id),
        details={
            "project_id": payload.project_id,
            "kind": recorded.event.kind.value,
            "tracking_mode": recorded.tracking_mode,
        },
        request_id=getattr(request.state, "request_id", None),
    )
    return PunchRecordedResponse(
        event=PunchEventRead.model_validate(recorded.event),
        label=recorded.label,
        tracking_mode=recorded.tracking_mode,
    )


@router.get("/api/attendance/summary", response_model=MonthlySummaryResponse)
def get_monthly_summary(
    employee_id: int = Query(ge=1),
    month: str = Query(),
    db: Session = Depends(get_db),
) -> MonthlySummaryResponse:
    return _to_summary_response(summarize_employee_month(db, employee_id, month))


@router.get("/api/attendance/calendar", response_model=MonthlyCalendarResponse)
def get_monthly_calendar(
    employee_id: int = Query(ge=1),
    month: str = Query(),
    db: Session = Depends(get_db),
) -> MonthlyCalendarResponse:
    summary, days = employee_month_calendar(db, employee_id, month)
    return MonthlyCalendarResponse(
        employee_id=employee_id,
        month=summary.month,
        days=[
            CalendarDayRead(
                day=item.day,
                status=item.status.kind,
                justification_type=item.status.justification_type,
                hours=item.hours,
            )
            for item in days
        ],
        counts=status_counts(days),
    )


@router.get("/api/attendance/day-status", response_model=DayStatusRead)
def get_day_status(
    employee_id: int = Query(ge=1),
    day: date = Query(),
    db: Session = Depends(get_db),
) -> DayStatusRead:
    result = employee_day_status(db, employee_id, day)
    return DayStatusRead(
        employee_id=employee_id,
        day=day,
        status=result.kind,
        justification_type=result.justification_type,
    )


@router.get("/api/reports/hours", response_model=HoursReportResponse)
def get_hours_report(
    start_date: date = Query(),
    end_date: date = Query(),
    employee_id: int | None = Query(default=None, ge=1),
    project_id: int | None = Query(default=None, ge=1),
    db: Session = Depends(get_db),
) -> HoursReportResponse:
    report = hours_report(
        db,
        start_date=start_date,
        end_date=end_date,
        employee_id=employee_id,
        project_id=project_id,
    )
    return HoursReportResponse(
        rows=[
            HoursReportRowRead(
                employee_id=row.employee_id,
                employee_name=row.employee_name,
                project_id=row.project_id,
                project_name=row.project_name,
                days=[
                    HoursReportDayRead(day=item.day, hours=item.hours, interval_count=item.interval_count)
                    for item in row.days
                ],
                total_hours=row.total_hours,
                total_days=row.total_days,
            )
            for row in report.rows
        ],
        total_employees=report.total_employees,
        total_projects=report.total_projects,
        total_hours=report.total_hours,
        total_days=report.total_days,
    )
