# gatewheel/core/angles.py
from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, List

from gatewheel.core.constants import (
    ANGLE_TOLERANCE_DEG,
    LINES_PER_GATE,
    QUANTUM,
    TOTAL_GATES,
    TOTAL_LINES,
    delta_deg,
    wrap_deg,
)
from gatewheel.core.errors import AddressError, ErrorSet, WheelError
from gatewheel.core.progression import CardinalLabel
from gatewheel.core.rotation import base_angle, line_position
from gatewheel.core.wheel import ValidatedConfiguration

__all__ = [
    "WheelPosition",
    "NearestAddress",
    "angle_of",
    "position_of",
    "wheel_position",
    "nearest_address",
    "addresses_within",
    "cardinal_angles",
]


@dataclass(frozen=True)
class WheelPosition:
    gate: int
    line: int
    wheel_index: int      # 0..63
    line_position: int    # 0..383
    base_angle: float     # index-based, before rotation
    angle: float          # visual, [0, 360)

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class NearestAddress:
    gate: int
    line: int
    angle: float
    distance: float       # target - angle, in (-180, 180]

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)

# ───────────────────────── input checks ─────────────────────────

def _is_int(v: Any) -> bool:
    return isinstance(v, int) and not isinstance(v, bool)


def _check_address(config: ValidatedConfiguration, gate: Any, line: Any) -> None:
    errors: List[WheelError] = []
    if not _is_int(gate) or not 1 <= gate <= TOTAL_GATES:
        errors.append(AddressError("gate", gate, f"gate must be an integer in 1..{TOTAL_GATES}"))
    elif gate not in config.sequence:
        errors.append(AddressError("gate", gate, "gate does not occur in the sequence"))
    if not _is_int(line) or not 1 <= line <= LINES_PER_GATE:
        errors.append(AddressError("line", line, f"line must be an integer in 1..{LINES_PER_GATE}"))
    if errors:
        raise ErrorSet(errors)


def _as_angle(v: Any, field_name: str = "angle") -> float:
    if isinstance(v, bool) or not isinstance(v, (int, float)) or not math.isfinite(v):
        raise ErrorSet([AddressError(field_name, v, "angle must be a finite number of degrees")])
    return float(v)

# ───────────────────────── forward ─────────────────────────

def angle_of(config: ValidatedConfiguration, gate: int, line: int = 1) -> float:
    """Visual angle of (gate, line) in [0, 360)."""
    _check_address(config, gate, line)
    return wrap_deg(base_angle(config.sequence, gate, line) + config.rotation_offset)


def position_of(config: ValidatedConfiguration, gate: int) -> int:
    """Index of `gate` within the sequence (0..63)."""
    _check_address(config, gate, 1)
    return config.sequence.position(gate)


def wheel_position(config: ValidatedConfiguration, gate: int, line: int = 1) -> WheelPosition:
    _check_address(config, gate, line)
    raw = base_angle(config.sequence, gate, line)
    return WheelPosition(
        gate=gate,
        line=line,
        wheel_index=config.sequence.position(gate),
        line_position=line_position(config.sequence, gate, line),
        base_angle=raw,
        angle=wrap_deg(raw + config.rotation_offset),
    )

# ───────────────────────── inverse ─────────────────────────

def _address_at(config: ValidatedConfiguration, slot: int):
    slot %= TOTAL_LINES
    gate = config.sequence.gate_at(slot // LINES_PER_GATE)
    line = slot % LINES_PER_GATE + 1
    return gate, line, wrap_deg(slot * QUANTUM + config.rotation_offset)


def nearest_address(config: ValidatedConfiguration, angle: float) -> NearestAddress:
    """
    Address whose line start is closest to `angle`. Exact midpoints resolve
    to the later address.
    """
    target = wrap_deg(_as_angle(angle))
    slot = math.floor(wrap_deg(target - config.rotation_offset) / QUANTUM + 0.5)
    gate, line, at = _address_at(config, slot)
    return NearestAddress(gate, line, at, delta_deg(at, target))


def addresses_within(config: ValidatedConfiguration, angle: float, window: float) -> List[NearestAddress]:
    """Every address within `window` degrees of `angle`, nearest first."""
    target = wrap_deg(_as_angle(angle))
    w = _as_angle(window, "window")
    if not 0.0 <= w <= 180.0:
        raise ErrorSet([AddressError("window", window, "window must lie in 0..180 degrees")])

    hits: List[NearestAddress] = []
    for slot in range(TOTAL_LINES):
        gate, line, at = _address_at(config, slot)
        d = delta_deg(at, target)
        if abs(d) <= w + ANGLE_TOLERANCE_DEG:
            hits.append(NearestAddress(gate, line, at, d))
    hits.sort(key=lambda h: (abs(h.distance), h.angle))
    return hits


def cardinal_angles(config: ValidatedConfiguration) -> Dict[CardinalLabel, float]:
    """Resolved angle of each cardinal (North is always 0°)."""
    return dict(config.cardinal_angles)
