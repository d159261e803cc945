# gatewheel/core/constants.py
# -*- coding: utf-8 -*-
"""
Gate wheel - core constants & small helpers

Purpose
-------
Single source of truth for:
- wheel geometry (gates, lines, the 0.9375° quantum)
- the canonical gate sequence (wheel order starting at gate 41)
- cardinal spacing and comparison tolerance
- tiny angle helpers (wrap/Δ/separation)

Design
------
- Pure-Python, no external dependencies.
- Safe to import from any core module.
- Functions are pure; constants are immutable by convention.

Notes
-----
- 64 × 6 × 0.9375° = 360° exactly. The quantum is 15/16 of a degree, so every
  line boundary and every gate midpoint is exactly representable as a float.
"""

from __future__ import annotations
from typing import Tuple
import math

__all__ = [
    # geometry
    "TOTAL_GATES", "LINES_PER_GATE", "TOTAL_LINES",
    "DEGREES_PER_LINE", "QUANTUM", "DEGREES_PER_GATE", "CENTER_LINE_OFFSET",
    "CARDINAL_STEP_DEG", "ANGLE_TOLERANCE_DEG",
    # sequence
    "CANONICAL_SEQUENCE",
    # helpers
    "wrap_deg", "delta_deg", "abs_sep_deg",
    # version tag
    "WHEEL_CONSTANTS_VERSION",
]

# ── version tag ───────────────────────────────────────────────────────────────
WHEEL_CONSTANTS_VERSION: str = "v1.0.0"

# ── wheel geometry ───────────────────────────────────────────────────────────
TOTAL_GATES: int = 64
LINES_PER_GATE: int = 6
TOTAL_LINES: int = TOTAL_GATES * LINES_PER_GATE  # 384

DEGREES_PER_LINE: float = 360.0 / TOTAL_LINES    # 0.9375
QUANTUM: float = DEGREES_PER_LINE
DEGREES_PER_GATE: float = 360.0 / TOTAL_GATES    # 5.625

# Centred anchors sit at "line 3.5": 2.5 quanta past the gate's first line.
CENTER_LINE_OFFSET: float = 2.5

CARDINAL_STEP_DEG: float = 90.0

# Cardinal cross-checks allow one-thousandth of a quantum (float epsilon only).
ANGLE_TOLERANCE_DEG: float = QUANTUM / 1000.0

if TOTAL_GATES * LINES_PER_GATE * DEGREES_PER_LINE != 360.0:  # pragma: no cover
    raise RuntimeError("wheel geometry does not close to 360°")

# ── canonical wheel order ────────────────────────────────────────────────────
# Index 0 is gate 41; gate 11 sits at index 57 and gate 10 at index 58.
CANONICAL_SEQUENCE: Tuple[int, ...] = (
    41, 19, 13, 49, 30, 55, 37, 63, 22, 36, 25, 17, 21, 51, 42, 3,
    27, 24, 2, 23, 8, 20, 16, 35, 45, 12, 15, 52, 39, 53, 62, 56,
    31, 33, 7, 4, 29, 59, 40, 64, 47, 6, 46, 18, 48, 57, 32, 50,
    28, 44, 1, 43, 14, 34, 9, 5, 26, 11, 10, 58, 38, 54, 61, 60,
)

# ── tiny angle helpers (no external imports) ──────────────────────────────────
def wrap_deg(x: float) -> float:
    """
    Wrap any angle to [0, 360).
    """
    x = math.fmod(float(x), 360.0)
    if x < 0.0:
        x += 360.0
    # -1e-17 + 360 rounds to 360.0
    return 0.0 if x >= 360.0 else x + 0.0

def delta_deg(a: float, b: float) -> float:
    """
    Shortest signed difference b - a in degrees, range (-180, 180].
    """
    d = wrap_deg(b) - wrap_deg(a)
    if d > 180.0:
        d -= 360.0
    elif d <= -180.0:
        d += 360.0
    return d

def abs_sep_deg(a: float, b: float) -> float:
    """
    Absolute smallest separation between angles a and b (deg, 0..180].
    """
    return abs(delta_deg(a, b))
