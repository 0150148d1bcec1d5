from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from punchclock.models import JustificationType, PunchEventKind
from punchclock.services.attendance_calendar import DayStatusKind


class TrackingModeRead(BaseModel):
    mode: str
    label: str
    description: str
    flow: list[PunchEventKind]
    flow_labels: dict[str, str]


class NextPunchRead(BaseModel):
    employee_id: int
    project_id: int
    day: date
    tracking_mode: str
    recorded_kinds: list[PunchEventKind]
    next_kind: PunchEventKind | None = None
    next_label: str | None = None
    flow_complete: bool


class PunchCreateRequest(BaseModel):
    employee_id: int = Field(ge=1)
    project_id: int = Field(ge=1)
    ts_utc: datetime | None = None
    lat: float | None = Field(default=None, ge=-90, le=90)
    lon: float | None = Field(default=None, ge=-180, le=180)
    note: str | None = Field(default=None, max_length=1000)


class PunchEventRead(BaseModel):
    id: int | None
    employee_id: int
    project_id: int
    kind: PunchEventKind
    ts_utc: datetime
    lat: float | None = None
    lon: float | None = None
    note: str | None = None

    model_config = ConfigDict(from_attributes=True)


class PunchRecordedResponse(BaseModel):
    event: PunchEventRead
    label: str
    tracking_mode: str


class WorkIntervalRead(BaseModel):
    project_id: int
    project_name: str
    entry: datetime
    exit: datetime
    hours: float
    flags: list[str] = Field(default_factory=list)


class JustificationRead(BaseModel):
    id: int | None
    employee_id: int
    day_date: date
    type: JustificationType
    notes: str | None = None
    attachment_name: str | None = None

    model_config = ConfigDict(from_attributes=True)


class MonthlySummaryResponse(BaseModel):
    employee_id: int
    month: str
    total_hours: float
    worked_days: int
    business_days: int
    absences: int
    justification_count: int
    justifications_by_type: dict[str, int]
    average_hours_per_day: float
    daily_hours: dict[date, float]
    daily_details: dict[date, list[WorkIntervalRead]]
    day_records: dict[date, list[PunchEventRead]]
    justifications: list[JustificationRead]
    flags: list[str] = Field(default_factory=list)


class DayStatusRead(BaseModel):
    employee_id: int
    day: date
    status: DayStatusKind
    justification_type: JustificationType | None = None


class CalendarDayRead(BaseModel):
    day: date
    status: DayStatusKind
    justification_type: JustificationType | None = None
    hours: float = 0.0


class MonthlyCalendarResponse(BaseModel):
    employee_id: int
    month: str
    days: list[CalendarDayRead]
    counts: dict[str, int]


class HoursReportDayRead(BaseModel):
    day: date
    hours: float
    interval_count: int


class HoursReportRowRead(BaseModel):
    employee_id: int
    employee_name: str
    project_id: int
    project_name: str
    days: list[HoursReportDayRead]
    total_hours: float
    total_days: int


class HoursReportResponse(BaseModel):
    rows: list[HoursReportRowRead]
    total_employees: int
    total_projects: int
    total_hours: float
    total_days: int
