# gatewheel/core/rotation.py
"""
Rotation solving.

Raw (index-based) angles put sequence index 0 at 0°. The rotation offset is
the single correction that moves the north anchor to 0°:

    base_angle(gate, line) = (index(gate) * 6 + line - 1) * quantum
    anchor(Centered g)     = (index(g) * 6 + 2.5) * quantum
    anchor(Straddled b|a)  = index(a) * 6 * quantum        (end of b's span)
    offset                 = (360 - anchor) mod 360

Inputs are expected to be adjacency-checked already; nothing here fails.
"""
from __future__ import annotations

import logging

from gatewheel.core.constants import CENTER_LINE_OFFSET, LINES_PER_GATE, QUANTUM, wrap_deg
from gatewheel.core.positions import Centered, PositionSpec, Straddled
from gatewheel.core.sequence import Sequence

log = logging.getLogger(__name__)

__all__ = ["line_position", "base_angle", "anchor_line_position", "anchor_angle", "solve_rotation"]


def line_position(sequence: Sequence, gate: int, line: int) -> int:
    """Absolute line slot 0..383 of (gate, line)."""
    return sequence.position(gate) * LINES_PER_GATE + (line - 1)


def base_angle(sequence: Sequence, gate: int, line: int) -> float:
    return line_position(sequence, gate, line) * QUANTUM


def anchor_line_position(sequence: Sequence, spec: PositionSpec) -> float:
    if isinstance(spec, Centered):
        return sequence.position(spec.gate) * LINES_PER_GATE + CENTER_LINE_OFFSET
    if isinstance(spec, Straddled):
        return float(sequence.position(spec.after) * LINES_PER_GATE)
    raise TypeError(f"unsupported position spec: {spec!r}")


def anchor_angle(sequence: Sequence, spec: PositionSpec) -> float:
    return anchor_line_position(sequence, spec) * QUANTUM


def solve_rotation(sequence: Sequence, north: PositionSpec) -> float:
    offset = wrap_deg(360.0 - anchor_angle(sequence, north))
    log.debug("north=%s anchor=%.4f° rotation_offset=%.4f°", north.canonical(), anchor_angle(sequence, north), offset)
    return offset
