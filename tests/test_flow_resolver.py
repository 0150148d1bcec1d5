from __future__ import annotations

import unittest
from types import SimpleNamespace
from unittest.mock import patch

from punchclock.models import PunchEventKind
from punchclock.services.flow import (
    FLOW_COMPLETE,
    FlowComplete,
    flow_position,
    is_flow_complete,
    next_expected,
    resolve_flow,
)
from punchclock.services.tracking_modes import TrackingMode, list_modes


class FlowResolverTests(unittest.TestCase):
    def test_next_expected_walks_every_flow_position(self) -> None:
        for spec in list_modes():
            flow = spec.flow
            for recorded in range(len(flow) + 3):
                history = list(flow[:recorded]) + [PunchEventKind.EXIT] * max(0, recorded - len(flow))
                with self.subTest(mode=spec.mode, recorded=recorded):
                    result = next_expected(spec.mode, history)
                    if recorded < len(flow):
                        self.assertEqual(result, flow[recorded])
                    else:
                        self.assertIs(result, FLOW_COMPLETE)

    def test_empty_history_returns_first_step(self) -> None:
        self.assertEqual(next_expected(TrackingMode.HOME_TO_CLIENT, []), PunchEventKind.HOME_DEPARTURE)

    def test_history_of_exact_length_is_complete(self) -> None:
        history = [PunchEventKind.COMPANY_ARRIVAL, PunchEventKind.COMPANY_DEPARTURE]
        self.assertIs(next_expected(TrackingMode.DAY_TO_DAY, history), FLOW_COMPLETE)
        self.assertTrue(is_flow_complete(TrackingMode.DAY_TO_DAY, history))

    def test_late_duplicate_beyond_flow_does_not_error(self) -> None:
        history = [PunchEventKind.CLIENT_ARRIVAL] * 5
        self.assertIs(next_expected(TrackingMode.SIMPLE, history), FLOW_COMPLETE)

    def test_recorded_kinds_are_not_revalidated(self) -> None:
        # Positional state machine: only the count moves the flow forward.
        history = [PunchEventKind.HOTEL_ARRIVAL]
        self.assertEqual(next_expected(TrackingMode.SIMPLE, history), PunchEventKind.CLIENT_DEPARTURE)

    def test_unknown_mode_falls_back_to_legacy_flow(self) -> None:
        with self.assertLogs("punchclock.flow", level="WARNING") as logs:
            result = next_expected("SUBMARINE", [])
        self.assertEqual(result, PunchEventKind.ENTRY)
        self.assertIn("unknown_tracking_mode", logs.output[0])
        self.assertEqual(next_expected("SUBMARINE", ["ENTRY"]), PunchEventKind.EXIT)
        self.assertIs(next_expected("SUBMARINE", ["ENTRY", "EXIT"]), FLOW_COMPLETE)

    def test_missing_mode_uses_configured_default(self) -> None:
        fake_settings = SimpleNamespace(default_tracking_mode="DAY_TO_DAY")
        with patch("punchclock.services.flow.get_settings", return_value=fake_settings):
            self.assertIs(resolve_flow(None).mode, TrackingMode.DAY_TO_DAY)
            self.assertIs(resolve_flow("  ").mode, TrackingMode.DAY_TO_DAY)

    def test_renamed_hotel_mode_keeps_resolving(self) -> None:
        self.assertEqual(resolve_flow("WITH_HOTEL").flow, resolve_flow("CLIENT_WITH_HOTEL").flow)

    def test_flow_position_advances_one_step(self) -> None:
        position = flow_position(TrackingMode.HOTEL_TO_CLIENT, [])
        seen = []
        while not position.is_complete:
            seen.append(position.expected)
            position = position.advance()
        self.assertEqual(tuple(seen), position.spec.flow)
        self.assertIs(position.expected, FLOW_COMPLETE)

    def test_flow_complete_is_a_falsy_singleton(self) -> None:
        self.assertIs(FlowComplete(), FLOW_COMPLETE)
        self.assertFalse(FLOW_COMPLETE)
        self.assertEqual(repr(FLOW_COMPLETE), "FLOW_COMPLETE")


if __name__ == "__main__":
    unittest.main()
