from __future__ import annotations

import enum
import logging
import re
from calendar import monthrange
from collections import Counter
from collections.abc import Collection, Iterable, Iterator, Mapping
from dataclasses import dataclass
from datetime import date, datetime
from zoneinfo import ZoneInfo

from punchclock.domain import JustificationRecord
from punchclock.errors import DuplicateJustificationError, InvalidMonthError
from punchclock.models import JustificationType
from punchclock.settings import get_attendance_timezone

logger = logging.getLogger("punchclock.calendar")

_MONTH_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")

# The store widens local days into a UTC window, which needs one spare day
# on each side of the calendar range.
MIN_SUPPORTED_YEAR = 2
MAX_SUPPORTED_YEAR = 9998


@dataclass(frozen=True, slots=True)
class MonthRef:
    year: int
    month: int

    @property
    def key(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    @property
    def start(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def end(self) -> date:
        return date(self.year, self.month, monthrange(self.year, self.month)[1])

    def days(self) -> Iterator[date]:
        for day in range(1, monthrange(self.year, self.month)[1] + 1):
            yield date(self.year, self.month, day)

    def __contains__(self, day: object) -> bool:
        return isinstance(day, date) and (day.year, day.month) == (self.year, self.month)


def parse_month(value: str | MonthRef) -> MonthRef:
    if isinstance(value, MonthRef):
        return value
    match = _MONTH_PATTERN.match((value or "").strip())
    if match is None:
        raise InvalidMonthError(f"Month must be formatted as YYYY-MM, got {value!r}")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12 or not MIN_SUPPORTED_YEAR <= year <= MAX_SUPPORTED_YEAR:
        raise InvalidMonthError(f"Month out of range: {value!r}")
    return MonthRef(year=year, month=month)


def is_weekend(day: date) -> bool:
    return day.weekday() >= 5


def business_days(month: MonthRef) -> list[date]:
    return [day for day in month.days() if not is_weekend(day)]


def local_today(tz: ZoneInfo | None = None) -> date:
    return datetime.now(tz or get_attendance_timezone()).date()


def index_justifications(
    justifications: Iterable[JustificationRecord],
    *,
    strict: bool = False,
) -> tuple[dict[date, JustificationRecord], list[JustificationRecord]]:
    """Key justifications by date, first by arrival order wins.

    Returns the index and the duplicates that were dropped.
    """
    indexed: dict[date, JustificationRecord] = {}
    duplicates: list[JustificationRecord] = []
    for record in justifications:
        if record.day_date in indexed:
            if strict:
                raise DuplicateJustificationError(record.employee_id, record.day_date)
            duplicates.append(record)
            logger.warning(
                "duplicate_justification",
                extra={
                    "employee_id": record.employee_id,
                    "day_date": record.day_date.isoformat(),
                    "kept_id": indexed[record.day_date].id,
                    "dropped_id": record.id,
                },
            )
            continue
        indexed[record.day_date] = record
    return indexed, duplicates


class DayStatusKind(str, enum.Enum):
    WORKED = "WORKED"
    ABSENCE = "ABSENCE"
    JUSTIFIED = "JUSTIFIED"
    WEEKEND = "WEEKEND"
    NO_DATA = "NO_DATA"


@dataclass(frozen=True, slots=True)
class DayStatus:
    kind: DayStatusKind
    justification_type: JustificationType | None = None

    @classmethod
    def justified(cls, justification_type: JustificationType) -> DayStatus:
        return cls(kind=DayStatusKind.JUSTIFIED, justification_type=justification_type)


WORKED = DayStatus(DayStatusKind.WORKED)
ABSENCE = DayStatus(DayStatusKind.ABSENCE)
WEEKEND = DayStatus(DayStatusKind.WEEKEND)
NO_DATA = DayStatus(DayStatusKind.NO_DATA)


def day_status(
    day: date,
    worked_days: Collection[date],
    justification_by_date: Mapping[date, JustificationType | JustificationRecord],
    *,
    today: date,
) -> DayStatus:
    # Display priority: weekend, justification, worked, past absence, nothing yet.
    if is_weekend(day):
        return WEEKEND
    justification = justification_by_date.get(day)
    if justification is not None:
        if isinstance(justification, JustificationRecord):
            return DayStatus.justified(justification.type)
        return DayStatus.justified(justification)
    if day in worked_days:
        return WORKED
    if day < today:
        return ABSENCE
    return NO_DATA


@dataclass(frozen=True, slots=True)
class CalendarDay:
    day: date
    status: DayStatus
    hours: float = 0.0


def month_calendar(
    month: MonthRef | str,
    worked_days: Collection[date],
    justification_by_date: Mapping[date, JustificationType | JustificationRecord],
    *,
    today: date,
    hours_by_day: Mapping[date, float] | None = None,
) -> list[CalendarDay]:
    month_ref = parse_month(month)
    hours = hours_by_day or {}
    return [
        CalendarDay(
            day=day,
            status=day_status(day, worked_days, justification_by_date, today=today),
            hours=hours.get(day, 0.0),
        )
        for day in month_ref.days()
    ]


def status_counts(days: Iterable[CalendarDay]) -> dict[str, int]:
    counts = Counter(item.status.kind.value for item in days)
    return {kind.value: counts.get(kind.value, 0) for kind in DayStatusKind}
