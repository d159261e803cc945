# gatewheel/core/errors.py
from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Iterable, Iterator, List, Optional, Tuple, Type

from gatewheel.core.constants import TOTAL_GATES

__all__ = [
    "WheelError",
    "StructuralError",
    "DuplicateElementError",
    "MissingElementError",
    "ParseError",
    "GateNotInSequenceError",
    "NotAdjacentError",
    "ReversedAdjacencyError",
    "UnknownProgressionError",
    "CardinalInconsistencyError",
    "MissingFieldError",
    "UnknownFieldError",
    "AddressError",
    "ErrorSet",
]

_LOC_PART = re.compile(r"([^\[\]]+)|\[(\d+)\]")


def _loc(field: str) -> List[Any]:
    """'sequence[3]' -> ['sequence', 3]"""
    out: List[Any] = []
    for name, idx in _LOC_PART.findall(field or ""):
        out.append(int(idx) if idx else name)
    return out


def _jsonable(v: Any) -> Any:
    if isinstance(v, float) and not math.isfinite(v):
        return repr(v)
    if v is None or isinstance(v, (bool, int, float, str)):
        return v
    if isinstance(v, (list, tuple)):
        return [_jsonable(x) for x in v]
    return repr(v)


# ───────────────────────── error values ─────────────────────────

@dataclass(frozen=True)
class WheelError:
    """
    One diagnostic: the offending field, the offending value and the invariant
    it breaks. Subclasses add the fields their message needs; text is only
    produced by `message` / `as_dict()`.
    """
    field: str
    value: Any

    kind: ClassVar[str] = "wheel_error"

    @property
    def message(self) -> str:
        return f"{self.field}: invalid value {self.value!r}"

    def as_dict(self) -> Dict[str, Any]:
        return {
            "loc": _loc(self.field),
            "msg": self.message,
            "type": f"value_error.{self.kind}",
            "value": _jsonable(self.value),
        }


@dataclass(frozen=True)
class StructuralError(WheelError):
    rule: str

    kind: ClassVar[str] = "structural"

    @property
    def message(self) -> str:
        return f"{self.field}: {self.rule} (got {self.value!r})"


@dataclass(frozen=True)
class DuplicateElementError(WheelError):
    indices: Tuple[int, ...]

    kind: ClassVar[str] = "duplicate_element"

    @property
    def message(self) -> str:
        where = ", ".join(str(i) for i in self.indices)
        return f"{self.field}: gate {self.value} appears {len(self.indices)} times (indices {where}); each gate must appear exactly once"


@dataclass(frozen=True)
class MissingElementError(WheelError):
    kind: ClassVar[str] = "missing_element"

    @property
    def message(self) -> str:
        return f"{self.field}: gate {self.value} is missing; the sequence must contain every gate 1..{TOTAL_GATES}"


@dataclass(frozen=True)
class ParseError(WheelError):
    rule: str

    kind: ClassVar[str] = "parse"

    @property
    def message(self) -> str:
        return f"{self.field}: cannot parse {self.value!r}: {self.rule}"


@dataclass(frozen=True)
class GateNotInSequenceError(WheelError):
    gate: int

    kind: ClassVar[str] = "gate_not_in_sequence"

    @property
    def message(self) -> str:
        return f"{self.field}: gate {self.gate} in {self.value!r} does not occur in the sequence"


@dataclass(frozen=True)
class NotAdjacentError(WheelError):
    before_index: int
    after_index: int

    kind: ClassVar[str] = "not_adjacent"

    @property
    def message(self) -> str:
        return (
            f"{self.field}: gates in {self.value!r} sit at indices {self.before_index} and "
            f"{self.after_index}; a straddle must name two circularly adjacent gates"
        )


@dataclass(frozen=True)
class ReversedAdjacencyError(WheelError):
    suggestion: str

    kind: ClassVar[str] = "reversed_adjacency"

    @property
    def message(self) -> str:
        return (
            f"{self.field}: gates in {self.value!r} are adjacent but reversed; "
            f"the gate before the boundary comes first, use {self.suggestion!r}"
        )


@dataclass(frozen=True)
class UnknownProgressionError(WheelError):
    allowed: Tuple[str, ...]

    kind: ClassVar[str] = "unknown_progression"

    @property
    def message(self) -> str:
        return f"{self.field}: {self.value!r} is not one of {', '.join(self.allowed)}"


@dataclass(frozen=True)
class CardinalInconsistencyError(WheelError):
    cardinal: str
    expected_deg: float
    actual_deg: float
    suggestion: Optional[str] = None

    kind: ClassVar[str] = "cardinal_inconsistency"

    @property
    def message(self) -> str:
        msg = (
            f"{self.field}: {self.cardinal} anchor {self.value!r} sits at {self.actual_deg:g}°, "
            f"expected {self.expected_deg:g}° from north and the cardinal progression"
        )
        if self.suggestion is not None:
            msg += f"; {self.suggestion!r} would sit there"
        return msg

    def as_dict(self) -> Dict[str, Any]:
        out = super().as_dict()
        out.update(expected_deg=self.expected_deg, actual_deg=self.actual_deg, suggestion=self.suggestion)
        return out


@dataclass(frozen=True)
class MissingFieldError(WheelError):
    kind: ClassVar[str] = "missing"

    @property
    def message(self) -> str:
        return f"{self.field}: field required"


@dataclass(frozen=True)
class UnknownFieldError(WheelError):
    kind: ClassVar[str] = "unknown_field"

    @property
    def message(self) -> str:
        return f"{self.field}: unrecognized field"


@dataclass(frozen=True)
class AddressError(WheelError):
    rule: str

    kind: ClassVar[str] = "address"

    @property
    def message(self) -> str:
        return f"{self.field}: {self.rule} (got {self.value!r})"


# ───────────────────────── error set ─────────────────────────

class ErrorSet(ValueError):
    """Every diagnostic from one validation pass (has .errors() like routes expect)."""

    def __init__(self, errors: Iterable[WheelError], stage: Any = None):
        self.items: Tuple[WheelError, ...] = tuple(errors)
        self.stage = stage
        if not self.items:
            super().__init__("validation_error")
        elif len(self.items) == 1:
            super().__init__(self.items[0].message)
        else:
            super().__init__(f"{self.items[0].message} (+{len(self.items) - 1} more)")

    def errors(self) -> List[Dict[str, Any]]:
        return [e.as_dict() for e in self.items]

    def of_type(self, cls: Type[WheelError]) -> List[WheelError]:
        return [e for e in self.items if isinstance(e, cls)]

    def kinds(self) -> List[str]:
        return [e.kind for e in self.items]

    def __iter__(self) -> Iterator[WheelError]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)
