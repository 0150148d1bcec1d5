from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from datetime import date
from types import MappingProxyType
from zoneinfo import ZoneInfo

from punchclock.domain import JustificationRecord, PunchEvent
from punchclock.services.attendance_calendar import (
    MonthRef,
    business_days,
    index_justifications,
    local_today,
    parse_month,
)
from punchclock.services.pairing import WorkInterval, compute_hours_by_day
from punchclock.settings import get_attendance_timezone

logger = logging.getLogger("punchclock.monthly")

FLAG_DUPLICATE_JUSTIFICATION = "DUPLICATE_JUSTIFICATION"


@dataclass(frozen=True, slots=True)
class MonthlySummary:
    employee_id: int
    month: str
    total_hours: float
    worked_days: int
    business_days: int
    absences: int
    justification_count: int
    justifications_by_type: Mapping[str, int]
    average_hours_per_day: float
    per_day_hours: Mapping[date, float]
    per_day_details: Mapping[date, tuple[WorkInterval, ...]]
    per_day_raw_events: Mapping[date, tuple[PunchEvent, ...]]
    justifications: tuple[JustificationRecord, ...]
    flags: tuple[str, ...] = ()

    @property
    def worked_dates(self) -> frozenset[date]:
        return frozenset(self.per_day_raw_events)


def _round(value: float) -> float:
    return round(value, 2)


def validate_employee_id(employee_id: int) -> int:
    if isinstance(employee_id, bool) or not isinstance(employee_id, int) or employee_id <= 0:
        raise ValueError(f"employee_id must be a positive integer, got {employee_id!r}")
    return employee_id


def count_absences(
    month: MonthRef,
    worked_dates: Iterable[date],
    justified_dates: Iterable[date],
    *,
    today: date,
) -> int:
    covered = set(worked_dates) | set(justified_dates)
    return sum(1 for day in business_days(month) if day < today and day not in covered)


def summarize(
    month: MonthRef | str,
    employee_id: int,
    events: Iterable[PunchEvent],
    justifications: Iterable[JustificationRecord],
    *,
    today: date | None = None,
    project_names: Mapping[int, str] | None = None,
    tz: ZoneInfo | None = None,
) -> MonthlySummary:
    month_ref = parse_month(month)
    validate_employee_id(employee_id)
    zone = tz or get_attendance_timezone()
    cutoff = today or local_today(zone)

    employee_events = [event for event in events if event.employee_id == employee_id]
    daily = {
        day: result
        for day, result in compute_hours_by_day(employee_events, project_names=project_names, tz=zone).items()
        if day in month_ref
    }

    month_justifications = [
        record for record in justifications if record.employee_id == employee_id and record.day_date in month_ref
    ]
    justification_by_date, duplicates = index_justifications(month_justifications)

    # Round only here, after every sum has been taken on raw floats.
    total_hours = sum(result.total_hours for result in daily.values())
    worked_days = len(daily)
    by_type = Counter(record.type.value for record in justification_by_date.values())

    flags: set[str] = set()
    for result in daily.values():
        flags.update(result.flags)
    if duplicates:
        flags.add(FLAG_DUPLICATE_JUSTIFICATION)

    summary = MonthlySummary(
        employee_id=employee_id,
        month=month_ref.key,
        total_hours=_round(total_hours),
        worked_days=worked_days,
        business_days=len(business_days(month_ref)),
        absences=count_absences(month_ref, daily, justification_by_date, today=cutoff),
        justification_count=len(justification_by_date),
        justifications_by_type=MappingProxyType({key: by_type[key] for key in sorted(by_type)}),
        average_hours_per_day=_round(total_hours / worked_days) if worked_days > 0 else 0.0,
        per_day_hours=MappingProxyType({day: _round(result.total_hours) for day, result in daily.items()}),
        per_day_details=MappingProxyType(
            {
                day: tuple(replace(interval, hours=_round(interval.hours)) for interval in result.intervals)
                for day, result in daily.items()
            }
        ),
        per_day_raw_events=MappingProxyType({day: result.raw_events for day, result in daily.items()}),
        justifications=tuple(sorted(justification_by_date.values(), key=lambda record: record.day_date)),
        flags=tuple(sorted(flags)),
    )
    logger.debug(
        "monthly_summary_computed",
        extra={
            "employee_id": employee_id,
            "month": month_ref.key,
            "worked_days": summary.worked_days,
            "absences": summary.absences,
            "flags": list(summary.flags),
        },
    )
    return summary
