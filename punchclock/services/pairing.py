from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from punchclock.domain import PunchEvent
from punchclock.errors import MalformedEventOrderError
from punchclock.settings import get_attendance_timezone, get_settings

logger = logging.getLogger("punchclock.pairing")

FLAG_NEGATIVE_DURATION = "NEGATIVE_DURATION"
FLAG_UNPAIRED_EVENT = "UNPAIRED_EVENT"

_SECONDS_PER_HOUR = 3600.0


@dataclass(frozen=True, slots=True)
class WorkInterval:
    project_id: int
    project_name: str
    entry: datetime
    exit: datetime
    hours: float
    flags: tuple[str, ...] = ()

    @property
    def is_suspect(self) -> bool:
        return FLAG_NEGATIVE_DURATION in self.flags


@dataclass(frozen=True, slots=True)
class ProjectDayHours:
    project_id: int
    project_name: str
    intervals: tuple[WorkInterval, ...]
    hours: float
    unpaired_event: PunchEvent | None = None


@dataclass(frozen=True, slots=True)
class DailyHours:
    day: date
    projects: tuple[ProjectDayHours, ...]
    total_hours: float
    raw_events: tuple[PunchEvent, ...]

    @property
    def intervals(self) -> tuple[WorkInterval, ...]:
        return tuple(interval for project in self.projects for interval in project.intervals)

    @property
    def unpaired_events(self) -> tuple[PunchEvent, ...]:
        return tuple(project.unpaired_event for project in self.projects if project.unpaired_event is not None)

    @property
    def flags(self) -> tuple[str, ...]:
        flags: set[str] = set()
        for interval in self.intervals:
            flags.update(interval.flags)
        if self.unpaired_events:
            flags.add(FLAG_UNPAIRED_EVENT)
        return tuple(sorted(flags))


def normalize_ts(ts: datetime) -> datetime:
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def local_day(ts: datetime, tz: ZoneInfo | None = None) -> date:
    return normalize_ts(ts).astimezone(tz or get_attendance_timezone()).date()


def _sort_key(event: PunchEvent) -> tuple[datetime, int]:
    return normalize_ts(event.ts_utc), event.id if event.id is not None else -1


def group_events_by_day(
    events: Iterable[PunchEvent],
    tz: ZoneInfo | None = None,
) -> dict[date, list[PunchEvent]]:
    zone = tz or get_attendance_timezone()
    grouped: dict[date, list[PunchEvent]] = defaultdict(list)
    for event in events:
        grouped[local_day(event.ts_utc, zone)].append(event)
    return {day: sorted(grouped[day], key=_sort_key) for day in sorted(grouped)}


def pair_project_events(
    project_id: int,
    project_name: str,
    events: Iterable[PunchEvent],
    *,
    strict: bool = False,
) -> ProjectDayHours:
    ordered = sorted(events, key=_sort_key)
    intervals: list[WorkInterval] = []
    hours = 0.0
    for index in range(0, len(ordered) - 1, 2):
        entry_ts = normalize_ts(ordered[index].ts_utc)
        exit_ts = normalize_ts(ordered[index + 1].ts_utc)
        interval_hours = (exit_ts - entry_ts).total_seconds() / _SECONDS_PER_HOUR
        flags: tuple[str, ...] = ()
        if exit_ts <= entry_ts:
            if strict:
                raise MalformedEventOrderError(project_id, entry_ts, exit_ts)
            flags = (FLAG_NEGATIVE_DURATION,)
            logger.warning(
                "negative_interval",
                extra={
                    "project_id": project_id,
                    "entry_ts": entry_ts.isoformat(),
                    "exit_ts": exit_ts.isoformat(),
                    "hours": interval_hours,
                },
            )
        intervals.append(
            WorkInterval(
                project_id=project_id,
                project_name=project_name,
                entry=entry_ts,
                exit=exit_ts,
                hours=interval_hours,
                flags=flags,
            )
        )
        hours += interval_hours

    unpaired = ordered[-1] if len(ordered) % 2 == 1 else None
    return ProjectDayHours(
        project_id=project_id,
        project_name=project_name,
        intervals=tuple(intervals),
        hours=hours,
        unpaired_event=unpaired,
    )


def compute_daily_hours(
    events: Iterable[PunchEvent],
    day: date,
    *,
    project_names: Mapping[int, str] | None = None,
    tz: ZoneInfo | None = None,
    strict: bool = False,
) -> DailyHours:
    zone = tz or get_attendance_timezone()
    names = project_names or {}
    unknown_name = get_settings().unknown_label

    day_events = sorted(
        (event for event in events if local_day(event.ts_utc, zone) == day),
        key=_sort_key,
    )
    by_project: dict[int, list[PunchEvent]] = defaultdict(list)
    for event in day_events:
        by_project[event.project_id].append(event)

    projects = tuple(
        pair_project_events(
            project_id,
            names.get(project_id, unknown_name),
            by_project[project_id],
            strict=strict,
        )
        for project_id in sorted(by_project)
    )
    return DailyHours(
        day=day,
        projects=projects,
        total_hours=sum(project.hours for project in projects),
        raw_events=tuple(day_events),
    )


def compute_hours_by_day(
    events: Iterable[PunchEvent],
    *,
    project_names: Mapping[int, str] | None = None,
    tz: ZoneInfo | None = None,
    strict: bool = False,
) -> dict[date, DailyHours]:
    zone = tz or get_attendance_timezone()
    return {
        day: compute_daily_hours(day_events, day, project_names=project_names, tz=zone, strict=strict)
        for day, day_events in group_events_by_day(events, zone).items()
    }
