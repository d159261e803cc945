# gatewheel/core/progression.py
from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from gatewheel.core.constants import (
    ANGLE_TOLERANCE_DEG,
    CARDINAL_STEP_DEG,
    CENTER_LINE_OFFSET,
    LINES_PER_GATE,
    QUANTUM,
    TOTAL_LINES,
    abs_sep_deg,
    wrap_deg,
)
from gatewheel.core.errors import CardinalInconsistencyError, ErrorSet, UnknownProgressionError, WheelError
from gatewheel.core.positions import Centered, PositionSpec, Straddled
from gatewheel.core.rotation import anchor_angle
from gatewheel.core.sequence import Sequence

log = logging.getLogger(__name__)

__all__ = [
    "CardinalLabel",
    "Handedness",
    "OrientationConvention",
    "parse_progression",
    "expected_angle",
    "satisfying_spec",
    "resolve_progression",
]

# ───────────────────────── enumerations ─────────────────────────

class CardinalLabel(str, Enum):
    NORTH = "N"
    EAST = "E"
    SOUTH = "S"
    WEST = "W"

    @property
    def canonical_angle(self) -> float:
        return _CANONICAL_ANGLE[self]

    @property
    def field_name(self) -> str:
        """Raw-document key holding this cardinal's position."""
        return f"{self.name.lower()}Position"


_CANONICAL_ANGLE: Dict[CardinalLabel, float] = {
    CardinalLabel.NORTH: 0.0,
    CardinalLabel.EAST: 90.0,
    CardinalLabel.SOUTH: 180.0,
    CardinalLabel.WEST: 270.0,
}


class Handedness(Enum):
    CLOCKWISE = "clockwise"                  # N → E → S → W as index increases
    COUNTER_CLOCKWISE = "counter-clockwise"  # N → W → S → E as index increases


_STEP_SIGN: Dict[Handedness, float] = {
    Handedness.CLOCKWISE: 1.0,
    Handedness.COUNTER_CLOCKWISE: -1.0,
}


class OrientationConvention(str, Enum):
    """
    Cardinal labels in the order met as the sequence index increases.
    The first letter is the cardinal at the start of the traversal; the
    letter following N fixes the handedness.
    """
    NWSE = "NWSE"
    NESW = "NESW"
    ESWN = "ESWN"
    ENWS = "ENWS"
    SWNE = "SWNE"
    SENW = "SENW"
    WNES = "WNES"
    WSEN = "WSEN"

    @property
    def labels(self) -> Tuple[CardinalLabel, ...]:
        return tuple(CardinalLabel(ch) for ch in self.value)

    @property
    def start(self) -> CardinalLabel:
        return _CONVENTIONS[self][0]

    @property
    def handedness(self) -> Handedness:
        return _CONVENTIONS[self][1]

    @property
    def step_order(self) -> Tuple[CardinalLabel, ...]:
        """The three labels after North, in increasing-index order."""
        labels = self.labels
        i = labels.index(CardinalLabel.NORTH)
        return tuple(labels[(i + k) % 4] for k in (1, 2, 3))


_CONVENTIONS: Dict[OrientationConvention, Tuple[CardinalLabel, Handedness]] = {
    OrientationConvention.NWSE: (CardinalLabel.NORTH, Handedness.COUNTER_CLOCKWISE),
    OrientationConvention.NESW: (CardinalLabel.NORTH, Handedness.CLOCKWISE),
    OrientationConvention.ESWN: (CardinalLabel.EAST, Handedness.CLOCKWISE),
    OrientationConvention.ENWS: (CardinalLabel.EAST, Handedness.COUNTER_CLOCKWISE),
    OrientationConvention.SWNE: (CardinalLabel.SOUTH, Handedness.CLOCKWISE),
    OrientationConvention.SENW: (CardinalLabel.SOUTH, Handedness.COUNTER_CLOCKWISE),
    OrientationConvention.WNES: (CardinalLabel.WEST, Handedness.CLOCKWISE),
    OrientationConvention.WSEN: (CardinalLabel.WEST, Handedness.COUNTER_CLOCKWISE),
}

_unhandled = set(OrientationConvention) - set(_CONVENTIONS)
if _unhandled:  # pragma: no cover
    raise RuntimeError(f"orientation conventions without a decoding: {sorted(c.value for c in _unhandled)}")
for _conv, (_start, _hand) in _CONVENTIONS.items():
    _after_north = _conv.step_order[0]
    if _conv.labels[0] != _start or (_after_north == CardinalLabel.EAST) != (_hand is Handedness.CLOCKWISE):  # pragma: no cover
        raise RuntimeError(f"orientation convention {_conv.value} decodes inconsistently")


def parse_progression(raw: Any, field_name: str = "cardinalProgression") -> OrientationConvention:
    allowed = tuple(c.value for c in OrientationConvention)
    if isinstance(raw, str) and raw in allowed:
        return OrientationConvention(raw)
    raise ErrorSet([UnknownProgressionError(field_name, raw, allowed)])

# ───────────────────────── expectations ─────────────────────────

def expected_angle(convention: OrientationConvention, label: CardinalLabel) -> float:
    """
    North's 0° plus k quarter turns walked in the convention's direction,
    k being the label's step after North.
    """
    if label is CardinalLabel.NORTH:
        return 0.0
    k = convention.step_order.index(label) + 1
    return wrap_deg(_STEP_SIGN[convention.handedness] * k * CARDINAL_STEP_DEG)


def satisfying_spec(sequence: Sequence, rotation_offset: float, angle: float) -> Optional[PositionSpec]:
    """Gate pair or gate whose anchor would land exactly on `angle`, if any."""
    slot = wrap_deg(angle - rotation_offset) / QUANTUM
    tol = ANGLE_TOLERANCE_DEG / QUANTUM

    boundary = round(slot)
    if abs(slot - boundary) <= tol and boundary % LINES_PER_GATE == 0:
        idx = (boundary % TOTAL_LINES) // LINES_PER_GATE
        return Straddled(sequence.gate_at(idx - 1), sequence.gate_at(idx))

    centre = (slot - CENTER_LINE_OFFSET) / LINES_PER_GATE
    if abs(centre - round(centre)) <= tol / LINES_PER_GATE:
        return Centered(sequence.gate_at(round(centre)))
    return None


def resolve_progression(
    sequence: Sequence,
    convention: OrientationConvention,
    rotation_offset: float,
    anchors: Mapping[CardinalLabel, PositionSpec],
) -> Dict[CardinalLabel, float]:
    """
    Cross-check independently supplied East/South/West anchors against the
    angle implied by North and the convention. Returns the resolved angle of
    every cardinal; raises ErrorSet with one CardinalInconsistencyError per
    disagreeing anchor. Anchors are never corrected.
    """
    resolved: Dict[CardinalLabel, float] = {CardinalLabel.NORTH: 0.0}
    errors: List[WheelError] = []
    for label in convention.step_order:
        expected = expected_angle(convention, label)
        spec = anchors.get(label)
        if spec is None:
            resolved[label] = expected
            continue
        actual = wrap_deg(anchor_angle(sequence, spec) + rotation_offset)
        if abs_sep_deg(expected, actual) <= ANGLE_TOLERANCE_DEG:
            resolved[label] = expected
            continue
        hint = satisfying_spec(sequence, rotation_offset, expected)
        errors.append(CardinalInconsistencyError(
            label.field_name,
            spec.canonical(),
            label.name.title(),
            expected,
            actual,
            hint.canonical() if hint is not None else None,
        ))
    if errors:
        log.info("cardinal cross-check failed for %d anchor(s) under %s", len(errors), convention.value)
        raise ErrorSet(errors)
    return resolved
