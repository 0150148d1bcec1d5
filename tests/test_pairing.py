from __future__ import annotations

import itertools
import unittest
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from punchclock.domain import PunchEvent
from punchclock.errors import MalformedEventOrderError
from punchclock.models import PunchEventKind
from punchclock.services.pairing import (
    FLAG_NEGATIVE_DURATION,
    FLAG_UNPAIRED_EVENT,
    compute_daily_hours,
    compute_hours_by_day,
    group_events_by_day,
    local_day,
    pair_project_events,
)

UTC = ZoneInfo("UTC")
DAY = date(2024, 3, 4)


def _event(
    event_id: int,
    hour: int,
    minute: int = 0,
    *,
    project_id: int = 1,
    kind: PunchEventKind = PunchEventKind.CLIENT_ARRIVAL,
    day: date = DAY,
) -> PunchEvent:
    return PunchEvent(
        id=event_id,
        employee_id=7,
        project_id=project_id,
        kind=kind,
        ts_utc=datetime(day.year, day.month, day.day, hour, minute, tzinfo=timezone.utc),
    )


class PairProjectEventsTests(unittest.TestCase):
    def test_even_count_pairs_consecutive_events(self) -> None:
        events = [_event(1, 8), _event(2, 12), _event(3, 13), _event(4, 17, 30)]

        result = pair_project_events(1, "Site A", events)

        self.assertEqual(len(result.intervals), 2)
        self.assertIsNone(result.unpaired_event)
        self.assertEqual(result.intervals[0].hours, 4.0)
        self.assertEqual(result.intervals[1].hours, 4.5)
        self.assertEqual(result.hours, 8.5)

    def test_odd_count_leaves_last_event_unpaired(self) -> None:
        events = [_event(1, 8), _event(2, 12), _event(3, 13)]

        result = pair_project_events(1, "Site A", events)

        self.assertEqual(len(result.intervals), 1)
        self.assertEqual(result.unpaired_event, events[2])
        self.assertEqual(result.hours, 4.0)

    def test_hours_are_exact_seconds_over_3600(self) -> None:
        entry = _event(1, 8)
        exit_ = _event(2, 9, 20)

        result = pair_project_events(1, "Site A", [entry, exit_])

        expected = (exit_.ts_utc - entry.ts_utc).total_seconds() / 3600
        self.assertEqual(result.intervals[0].hours, expected)
        self.assertNotEqual(result.intervals[0].hours, round(expected, 2))

    def test_pairing_is_positional_not_kind_based(self) -> None:
        events = [
            _event(1, 8, kind=PunchEventKind.HOME_DEPARTURE),
            _event(2, 9, kind=PunchEventKind.CLIENT_ARRIVAL),
        ]

        result = pair_project_events(1, "Site A", events)

        self.assertEqual(result.intervals[0].hours, 1.0)

    def test_equal_timestamps_are_flagged_not_dropped(self) -> None:
        events = [_event(1, 8), _event(2, 8)]

        with self.assertLogs("punchclock.pairing", level="WARNING") as logs:
            result = pair_project_events(1, "Site A", events)

        self.assertEqual(result.intervals[0].hours, 0.0)
        self.assertEqual(result.intervals[0].flags, (FLAG_NEGATIVE_DURATION,))
        self.assertTrue(result.intervals[0].is_suspect)
        self.assertIn("negative_interval", logs.output[0])

    def test_strict_mode_raises_on_non_positive_interval(self) -> None:
        events = [_event(1, 8), _event(2, 8)]

        with self.assertRaises(MalformedEventOrderError) as exc:
            pair_project_events(1, "Site A", events, strict=True)
        self.assertEqual(exc.exception.project_id, 1)

    def test_equal_timestamps_order_by_id(self) -> None:
        first = _event(5, 8, kind=PunchEventKind.CLIENT_ARRIVAL)
        second = _event(9, 8, kind=PunchEventKind.CLIENT_DEPARTURE)

        with self.assertLogs("punchclock.pairing", level="WARNING"):
            result = pair_project_events(1, "Site A", [second, first])

        self.assertEqual(result.unpaired_event, None)
        self.assertEqual(len(result.intervals), 1)


class ComputeDailyHoursTests(unittest.TestCase):
    def test_result_is_independent_of_input_order(self) -> None:
        events = [
            _event(1, 8),
            _event(2, 12),
            _event(3, 13, project_id=2),
            _event(4, 15, project_id=2),
            _event(5, 16),
        ]
        baseline = compute_daily_hours(events, DAY, project_names={1: "A", 2: "B"}, tz=UTC)

        for permutation in itertools.permutations(events):
            with self.subTest(order=[event.id for event in permutation]):
                self.assertEqual(
                    compute_daily_hours(list(permutation), DAY, project_names={1: "A", 2: "B"}, tz=UTC),
                    baseline,
                )

    def test_projects_are_paired_independently(self) -> None:
        events = [
            _event(1, 8, project_id=1),
            _event(2, 9, project_id=2),
            _event(3, 10, project_id=1),
            _event(4, 12, project_id=2),
        ]

        result = compute_daily_hours(events, DAY, project_names={1: "Alpha", 2: "Beta"}, tz=UTC)

        self.assertEqual([project.project_id for project in result.projects], [1, 2])
        self.assertEqual(result.projects[0].hours, 2.0)
        self.assertEqual(result.projects[1].hours, 3.0)
        self.assertEqual(result.total_hours, 5.0)
        self.assertEqual(len(result.raw_events), 4)
        self.assertEqual(result.flags, ())

    def test_unpaired_events_surface_in_flags(self) -> None:
        result = compute_daily_hours([_event(1, 8)], DAY, tz=UTC)

        self.assertEqual(result.total_hours, 0.0)
        self.assertEqual(result.intervals, ())
        self.assertEqual(len(result.unpaired_events), 1)
        self.assertEqual(result.flags, (FLAG_UNPAIRED_EVENT,))

    def test_missing_project_name_renders_unknown(self) -> None:
        result = compute_daily_hours([_event(1, 8), _event(2, 9)], DAY, project_names={}, tz=UTC)

        self.assertEqual(result.projects[0].project_name, "unknown")
        self.assertEqual(result.intervals[0].project_name, "unknown")

    def test_events_of_other_days_are_ignored(self) -> None:
        events = [_event(1, 8), _event(2, 9), _event(3, 8, day=date(2024, 3, 5))]

        result = compute_daily_hours(events, DAY, tz=UTC)

        self.assertEqual(len(result.raw_events), 2)
        self.assertEqual(result.total_hours, 1.0)

    def test_empty_day(self) -> None:
        result = compute_daily_hours([], DAY, tz=UTC)

        self.assertEqual(result.projects, ())
        self.assertEqual(result.total_hours, 0.0)


class LocalDayTests(unittest.TestCase):
    def test_local_day_uses_attendance_timezone(self) -> None:
        ts = datetime(2024, 3, 5, 1, 30, tzinfo=timezone.utc)

        self.assertEqual(local_day(ts, ZoneInfo("America/Sao_Paulo")), date(2024, 3, 4))
        self.assertEqual(local_day(ts, UTC), date(2024, 3, 5))

    def test_naive_timestamps_are_treated_as_utc(self) -> None:
        self.assertEqual(local_day(datetime(2024, 3, 5, 1, 30), UTC), date(2024, 3, 5))

    def test_group_events_by_day_sorts_each_bucket(self) -> None:
        events = [_event(2, 12), _event(1, 8), _event(3, 9, day=date(2024, 3, 5))]

        grouped = group_events_by_day(events, UTC)

        self.assertEqual(list(grouped), [date(2024, 3, 4), date(2024, 3, 5)])
        self.assertEqual([event.id for event in grouped[DAY]], [1, 2])

    def test_compute_hours_by_day_splits_at_local_midnight(self) -> None:
        tz = ZoneInfo("America/Sao_Paulo")
        events = [
            PunchEvent(1, 7, 1, PunchEventKind.CLIENT_ARRIVAL, datetime(2024, 3, 4, 23, 0, tzinfo=timezone.utc)),
            PunchEvent(2, 7, 1, PunchEventKind.CLIENT_DEPARTURE, datetime(2024, 3, 5, 2, 0, tzinfo=timezone.utc)),
            PunchEvent(3, 7, 1, PunchEventKind.CLIENT_ARRIVAL, datetime(2024, 3, 5, 4, 0, tzinfo=timezone.utc)),
        ]

        daily = compute_hours_by_day(events, tz=tz)

        self.assertEqual(list(daily), [date(2024, 3, 4), date(2024, 3, 5)])
        self.assertEqual(daily[date(2024, 3, 4)].total_hours, 3.0)
        self.assertEqual(len(daily[date(2024, 3, 5)].unpaired_events), 1)


if __name__ == "__main__":
    unittest.main()
