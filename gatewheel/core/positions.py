# gatewheel/core/positions.py
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, List, Union

from gatewheel.core.constants import TOTAL_GATES
from gatewheel.core.errors import (
    ErrorSet,
    GateNotInSequenceError,
    NotAdjacentError,
    ParseError,
    ReversedAdjacencyError,
    WheelError,
)
from gatewheel.core.sequence import Sequence

__all__ = [
    "Straddled",
    "Centered",
    "PositionSpec",
    "parse_position",
    "check_adjacency",
]

SEPARATOR = "|"

# ───────────────────────── descriptors ─────────────────────────

@dataclass(frozen=True)
class Straddled:
    """Anchor on the zero-width boundary between `before` and the gate after it."""
    before: int
    after: int

    def canonical(self) -> str:
        return f"{self.before}{SEPARATOR}{self.after}"

    def gates(self) -> tuple:
        return (self.before, self.after)


@dataclass(frozen=True)
class Centered:
    """Anchor at a gate's midpoint (line 3.5)."""
    gate: int

    def canonical(self) -> str:
        return str(self.gate)

    def gates(self) -> tuple:
        return (self.gate,)


PositionSpec = Union[Straddled, Centered]

# ───────────────────────── parser ─────────────────────────

_INT_RE = re.compile(r"^[0-9]+$")


def parse_position(raw: Any, field_name: str = "northPosition") -> PositionSpec:
    """
    Parse '<int>|<int>' (straddled, before|after in increasing index order)
    or '<int>' (centred). No sequence is consulted here.
    """
    def fail(rule: str) -> ErrorSet:
        return ErrorSet([ParseError(field_name, raw, rule)])

    if not isinstance(raw, str):
        raise fail("position must be a string like '11|10' or '10'")
    if not raw.strip():
        raise fail("position is empty")

    tokens = [t.strip() for t in raw.split(SEPARATOR)]
    if len(tokens) > 2:
        raise fail(f"expected one gate or two gates joined by '{SEPARATOR}', got {len(tokens)} tokens")
    for tok in tokens:
        if not _INT_RE.match(tok):
            raise fail(f"token {tok!r} is not an integer gate number")

    gates = [int(t) for t in tokens]
    for g in gates:
        if not 1 <= g <= TOTAL_GATES:
            raise fail(f"gate {g} is outside 1..{TOTAL_GATES}")

    if len(gates) == 1:
        return Centered(gates[0])
    if gates[0] == gates[1]:
        raise fail("a straddle must name two different gates")
    return Straddled(gates[0], gates[1])

# ───────────────────────── adjacency ─────────────────────────

def check_adjacency(sequence: Sequence, spec: PositionSpec, field_name: str = "northPosition") -> PositionSpec:
    """
    Confirm `spec` fits `sequence`. Gates must exist; a straddle's `after`
    must immediately follow `before` (mod 64). Adjacent-but-swapped is
    reported as ReversedAdjacencyError, anything else as NotAdjacentError.
    """
    text = spec.canonical()
    missing: List[WheelError] = [
        GateNotInSequenceError(field_name, text, g) for g in spec.gates() if g not in sequence
    ]
    if missing:
        raise ErrorSet(missing)

    if isinstance(spec, Centered):
        return spec
    if not isinstance(spec, Straddled):
        raise TypeError(f"unsupported position spec: {spec!r}")

    n = len(sequence)
    i_before = sequence.position(spec.before)
    i_after = sequence.position(spec.after)
    if (i_before + 1) % n == i_after:
        return spec
    if (i_after + 1) % n == i_before:
        swapped = Straddled(spec.after, spec.before).canonical()
        raise ErrorSet([ReversedAdjacencyError(field_name, text, swapped)])
    raise ErrorSet([NotAdjacentError(field_name, text, i_before, i_after)])
