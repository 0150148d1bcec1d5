from __future__ import annotations

import unittest
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from punchclock.errors import DateOutOfRangeError
from punchclock.store import local_date_range_to_utc_bounds


class LocalDateRangeBoundsTests(unittest.TestCase):
    def test_local_day_maps_to_half_open_utc_window(self) -> None:
        start, end = local_date_range_to_utc_bounds(date(2024, 3, 4), date(2024, 3, 4), ZoneInfo("America/Sao_Paulo"))

        self.assertEqual(start, datetime(2024, 3, 4, 3, tzinfo=timezone.utc))
        self.assertEqual(end, datetime(2024, 3, 5, 3, tzinfo=timezone.utc))

    def test_dates_at_calendar_limits_are_rejected(self) -> None:
        for day_date in (date.max, date.min, date(9999, 1, 1)):
            with self.subTest(day_date=day_date):
                with self.assertRaises(DateOutOfRangeError) as exc:
                    local_date_range_to_utc_bounds(day_date, day_date, ZoneInfo("UTC"))
                self.assertEqual(exc.exception.day_date, day_date)


if __name__ == "__main__":
    unittest.main()
