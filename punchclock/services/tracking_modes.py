from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from punchclock.errors import UnknownModeError
from punchclock.models import PunchEventKind


class TrackingMode(str, enum.Enum):
    SIMPLE = "SIMPLE"
    DAY_TO_DAY = "DAY_TO_DAY"
    HOME_TO_CLIENT = "HOME_TO_CLIENT"
    HOTEL_TO_CLIENT = "HOTEL_TO_CLIENT"
    COMPANY_TO_CLIENT = "COMPANY_TO_CLIENT"
    CLIENT_WITH_HOTEL = "CLIENT_WITH_HOTEL"
    WITH_HOTEL = "WITH_HOTEL"
    LEGACY = "LEGACY"


@dataclass(frozen=True, slots=True)
class TrackingModeSpec:
    mode: TrackingMode
    label: str
    description: str
    flow: tuple[PunchEventKind, ...]
    flow_labels: Mapping[PunchEventKind, str]

    @property
    def length(self) -> int:
        return len(self.flow)


_K = PunchEventKind

_KIND_LABELS: dict[PunchEventKind, str] = {
    _K.HOME_DEPARTURE: "Home departure",
    _K.HOME_ARRIVAL: "Home arrival",
    _K.COMPANY_ARRIVAL: "Company arrival",
    _K.COMPANY_DEPARTURE: "Company departure",
    _K.CLIENT_ARRIVAL: "Client arrival",
    _K.CLIENT_DEPARTURE: "Client departure",
    _K.HOTEL_ARRIVAL: "Hotel arrival",
    _K.HOTEL_DEPARTURE: "Hotel departure",
}

# Checked before any mode's own labels.
LEGACY_LABELS: Mapping[str, str] = MappingProxyType(
    {
        _K.ENTRY.value: "Entry",
        _K.EXIT.value: "Exit",
        _K.HOTEL_DEPARTURE.value: "Hotel departure",
    }
)

_HOTEL_ROUND_TRIP = (
    _K.HOME_DEPARTURE,
    _K.COMPANY_ARRIVAL,
    _K.COMPANY_DEPARTURE,
    _K.HOTEL_ARRIVAL,
    _K.HOTEL_DEPARTURE,
    _K.CLIENT_ARRIVAL,
    _K.CLIENT_DEPARTURE,
    _K.HOTEL_ARRIVAL,
    _K.HOTEL_DEPARTURE,
    _K.COMPANY_ARRIVAL,
    _K.COMPANY_DEPARTURE,
    _K.HOME_ARRIVAL,
)


def _spec(mode: TrackingMode, label: str, description: str, flow: tuple[PunchEventKind, ...]) -> TrackingModeSpec:
    labels = {kind: _KIND_LABELS.get(kind, kind.value) for kind in flow}
    return TrackingModeSpec(
        mode=mode,
        label=label,
        description=description,
        flow=flow,
        flow_labels=MappingProxyType(labels),
    )


_REGISTRY: Mapping[TrackingMode, TrackingModeSpec] = MappingProxyType(
    {
        TrackingMode.SIMPLE: _spec(
            TrackingMode.SIMPLE,
            "Simple (client entry and exit)",
            "Entry and exit at the client or job site only",
            (_K.CLIENT_ARRIVAL, _K.CLIENT_DEPARTURE),
        ),
        TrackingMode.DAY_TO_DAY: _spec(
            TrackingMode.DAY_TO_DAY,
            "Day to day (company)",
            "Entry and exit at the company",
            (_K.COMPANY_ARRIVAL, _K.COMPANY_DEPARTURE),
        ),
        TrackingMode.HOME_TO_CLIENT: _spec(
            TrackingMode.HOME_TO_CLIENT,
            "Home -> Client -> Home (direct)",
            "Leaves home straight to the client and returns straight home",
            (_K.HOME_DEPARTURE, _K.CLIENT_ARRIVAL, _K.CLIENT_DEPARTURE, _K.HOME_ARRIVAL),
        ),
        TrackingMode.HOTEL_TO_CLIENT: _spec(
            TrackingMode.HOTEL_TO_CLIENT,
            "Hotel -> Client -> Hotel",
            "Leaves the hotel, works at the client, returns to the hotel",
            (_K.HOTEL_DEPARTURE, _K.CLIENT_ARRIVAL, _K.CLIENT_DEPARTURE, _K.HOTEL_ARRIVAL),
        ),
        TrackingMode.COMPANY_TO_CLIENT: _spec(
            TrackingMode.COMPANY_TO_CLIENT,
            "Company -> Client -> Company",
            "Home, company, client, company again and back home",
            (
                _K.HOME_DEPARTURE,
                _K.COMPANY_ARRIVAL,
                _K.COMPANY_DEPARTURE,
                _K.CLIENT_ARRIVAL,
                _K.CLIENT_DEPARTURE,
                _K.COMPANY_ARRIVAL,
                _K.COMPANY_DEPARTURE,
                _K.HOME_ARRIVAL,
            ),
        ),
        TrackingMode.CLIENT_WITH_HOTEL: _spec(
            TrackingMode.CLIENT_WITH_HOTEL,
            "Client with hotel",
            "Home -> Company -> Hotel -> Client -> Hotel -> Company -> Home",
            _HOTEL_ROUND_TRIP,
        ),
        TrackingMode.WITH_HOTEL: _spec(
            TrackingMode.WITH_HOTEL,
            "Client with hotel (legacy)",
            "Home -> Company -> Hotel -> Client -> Hotel -> Company -> Home",
            _HOTEL_ROUND_TRIP,
        ),
        TrackingMode.LEGACY: _spec(
            TrackingMode.LEGACY,
            "Entry and exit (legacy)",
            "Records created before tracking modes existed",
            (_K.ENTRY, _K.EXIT),
        ),
    }
)


def _coerce_mode(mode: TrackingMode | str) -> TrackingMode:
    if isinstance(mode, TrackingMode):
        return mode
    try:
        return TrackingMode(str(mode).strip().upper())
    except ValueError:
        raise UnknownModeError(mode) from None


def get_mode(mode: TrackingMode | str) -> TrackingModeSpec:
    spec = _REGISTRY.get(_coerce_mode(mode))
    if spec is None:
        raise UnknownModeError(mode)
    return spec


def get_flow(mode: TrackingMode | str) -> tuple[PunchEventKind, ...]:
    return get_mode(mode).flow


def list_modes() -> list[TrackingModeSpec]:
    return list(_REGISTRY.values())


def get_label(mode: TrackingMode | str | None, kind: PunchEventKind | str) -> str:
    raw = kind.value if isinstance(kind, PunchEventKind) else str(kind)
    if raw in LEGACY_LABELS:
        return LEGACY_LABELS[raw]
    if mode is None:
        return raw
    try:
        spec = get_mode(mode)
    except UnknownModeError:
        return raw
    for flow_kind, label in spec.flow_labels.items():
        if flow_kind.value == raw:
            return label
    return raw
