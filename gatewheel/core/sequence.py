# gatewheel/core/sequence.py
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterator, List, Mapping, Optional, Tuple

from gatewheel.core.constants import TOTAL_GATES
from gatewheel.core.errors import (
    DuplicateElementError,
    ErrorSet,
    MissingElementError,
    StructuralError,
    WheelError,
)

__all__ = ["Sequence", "validate_sequence"]


@dataclass(frozen=True)
class Sequence:
    """
    Circular wheel order of the 64 gates. Index 63's successor is index 0.

    The gate → index table is built once here; every later lookup is O(1).
    Build instances with `validate_sequence` unless the input is known good.
    """
    gates: Tuple[int, ...]
    _index: Mapping[int, int] = field(init=False, repr=False, compare=False, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "gates", tuple(self.gates))
        object.__setattr__(self, "_index", MappingProxyType({g: i for i, g in enumerate(self.gates)}))

    def __len__(self) -> int:
        return len(self.gates)

    def __iter__(self) -> Iterator[int]:
        return iter(self.gates)

    def __contains__(self, gate: object) -> bool:
        return gate in self._index

    def index_of(self, gate: int) -> Optional[int]:
        return self._index.get(gate)

    def position(self, gate: int) -> int:
        """Index of `gate`; KeyError if it is not in the sequence."""
        return self._index[gate]

    def gate_at(self, index: int) -> int:
        return self.gates[index % len(self.gates)]

    def successor(self, gate: int) -> int:
        return self.gate_at(self.position(gate) + 1)

    def predecessor(self, gate: int) -> int:
        return self.gate_at(self.position(gate) - 1)

    def as_list(self) -> List[int]:
        return list(self.gates)


def _is_gate_int(v: Any) -> bool:
    # bool is an int subclass; True is not gate 1
    return isinstance(v, int) and not isinstance(v, bool)


def validate_sequence(raw: Any, field_name: str = "sequence") -> Sequence:
    """
    Check that `raw` is a permutation of 1..64.

    Shape problems (not a list, wrong length, non-integer or out-of-range
    element) abort on the first hit. Content problems are collected: one
    DuplicateElementError per repeated gate and one MissingElementError per
    absent gate, so a single pass reports everything.
    """
    if not isinstance(raw, (list, tuple)):
        raise ErrorSet([StructuralError(field_name, raw, f"must be a list of {TOTAL_GATES} integers")])
    if len(raw) != TOTAL_GATES:
        raise ErrorSet([StructuralError(field_name, len(raw), f"must contain exactly {TOTAL_GATES} gates")])

    for i, v in enumerate(raw):
        if not _is_gate_int(v):
            raise ErrorSet([StructuralError(f"{field_name}[{i}]", v, "must be an integer")])
        if not 1 <= v <= TOTAL_GATES:
            raise ErrorSet([StructuralError(f"{field_name}[{i}]", v, f"must be a gate number in 1..{TOTAL_GATES}")])

    errors: List[WheelError] = []
    counts = Counter(raw)
    for gate in sorted(g for g, n in counts.items() if n > 1):
        indices = tuple(i for i, v in enumerate(raw) if v == gate)
        errors.append(DuplicateElementError(field_name, gate, indices))
    for gate in sorted(set(range(1, TOTAL_GATES + 1)) - set(counts)):
        errors.append(MissingElementError(field_name, gate))
    if errors:
        raise ErrorSet(errors)

    return Sequence(tuple(raw))
