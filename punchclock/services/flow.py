from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Final

from punchclock.errors import UnknownModeError
from punchclock.models import PunchEventKind
from punchclock.services.tracking_modes import TrackingMode, TrackingModeSpec, get_mode
from punchclock.settings import get_settings

logger = logging.getLogger("punchclock.flow")


class FlowComplete:
    _instance: FlowComplete | None = None

    def __new__(cls) -> FlowComplete:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "FLOW_COMPLETE"

    def __bool__(self) -> bool:
        return False


FLOW_COMPLETE: Final = FlowComplete()


def normalize_mode(raw_mode: TrackingMode | str | None) -> TrackingMode | str:
    if isinstance(raw_mode, TrackingMode):
        return raw_mode
    value = (raw_mode or "").strip().upper()
    if not value:
        return get_settings().default_tracking_mode
    return value


def resolve_flow(raw_mode: TrackingMode | str | None) -> TrackingModeSpec:
    """Registry lookup with the fallbacks a punch-time caller needs.

    Empty modes use the configured default; modes missing from the registry
    fall back to the two-step legacy entry/exit flow.
    """
    mode = normalize_mode(raw_mode)
    try:
        return get_mode(mode)
    except UnknownModeError:
        logger.warning(
            "unknown_tracking_mode",
            extra={"tracking_mode": str(raw_mode), "fallback_mode": TrackingMode.LEGACY.value},
        )
        return get_mode(TrackingMode.LEGACY)


@dataclass(frozen=True, slots=True)
class FlowPosition:
    spec: TrackingModeSpec
    index: int = 0

    @property
    def is_complete(self) -> bool:
        return self.index >= self.spec.length

    @property
    def expected(self) -> PunchEventKind | FlowComplete:
        if self.is_complete:
            return FLOW_COMPLETE
        return self.spec.flow[self.index]

    def advance(self) -> FlowPosition:
        return FlowPosition(spec=self.spec, index=self.index + 1)


def flow_position(
    mode: TrackingMode | str | None,
    kinds_recorded_today: Sequence[PunchEventKind | str],
) -> FlowPosition:
    # Only the count matters: the flow is positional, recorded kinds are never re-validated.
    return FlowPosition(spec=resolve_flow(mode), index=len(kinds_recorded_today))


def next_expected(
    mode: TrackingMode | str | None,
    kinds_recorded_today: Sequence[PunchEventKind | str],
) -> PunchEventKind | FlowComplete:
    return flow_position(mode, kinds_recorded_today).expected


def is_flow_complete(
    mode: TrackingMode | str | None,
    kinds_recorded_today: Sequence[PunchEventKind | str],
) -> bool:
    return flow_position(mode, kinds_recorded_today).is_complete
