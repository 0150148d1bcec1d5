from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from punchclock.models import JustificationType, PunchEventKind


@dataclass(frozen=True, slots=True)
class PunchEvent:
    id: int | None
    employee_id: int
    project_id: int
    kind: PunchEventKind
    ts_utc: datetime
    lat: float | None = None
    lon: float | None = None
    note: str | None = None


@dataclass(frozen=True, slots=True)
class JustificationRecord:
    id: int | None
    employee_id: int
    day_date: date
    type: JustificationType
    notes: str | None = None
    attachment_name: str | None = None


@dataclass(frozen=True, slots=True)
class ProjectMeta:
    id: int
    name: str
    tracking_mode: str | None
