# gatewheel/core/wheel.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from gatewheel.core.positions import PositionSpec
from gatewheel.core.progression import CardinalLabel, OrientationConvention
from gatewheel.core.sequence import Sequence

__all__ = ["Stage", "ValidatedConfiguration"]


class Stage(Enum):
    """Validation stages in order; an ErrorSet records the last one that passed."""
    UNVALIDATED = 0
    SEQUENCE_CHECKED = 1
    ADJACENCY_CHECKED = 2
    ROTATION_RESOLVED = 3
    PROGRESSION_CHECKED = 4
    VALIDATED = 5


@dataclass(frozen=True)
class ValidatedConfiguration:
    """
    A wheel configuration that passed every validation stage.

    Produced only by `gatewheel.core.validators.validate`; never mutated.
    Any change to the source document means validating again.
    """
    sequence: Sequence
    convention: OrientationConvention
    north: PositionSpec
    rotation_offset: float
    east: Optional[PositionSpec] = None
    south: Optional[PositionSpec] = None
    west: Optional[PositionSpec] = None
    cardinal_angles: Mapping[CardinalLabel, float] = field(default_factory=dict, compare=False, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "cardinal_angles", MappingProxyType(dict(self.cardinal_angles)))

    @property
    def stage(self) -> Stage:
        return Stage.VALIDATED

    def anchors(self) -> Dict[CardinalLabel, PositionSpec]:
        out: Dict[CardinalLabel, PositionSpec] = {CardinalLabel.NORTH: self.north}
        for label, spec in ((CardinalLabel.EAST, self.east), (CardinalLabel.SOUTH, self.south), (CardinalLabel.WEST, self.west)):
            if spec is not None:
                out[label] = spec
        return out

    def to_document(self) -> Dict[str, Any]:
        """Serialize back to the raw document shape accepted by `validate`."""
        doc: Dict[str, Any] = {
            "sequence": self.sequence.as_list(),
            "cardinalProgression": self.convention.value,
        }
        for label, spec in self.anchors().items():
            doc[label.field_name] = spec.canonical()
        return doc

    def summary(self) -> Dict[str, Any]:
        return {
            "cardinalProgression": self.convention.value,
            "handedness": self.convention.handedness.value,
            "start": self.convention.start.name.title(),
            "rotation_offset": self.rotation_offset,
            "anchors": {label.name.lower(): spec.canonical() for label, spec in self.anchors().items()},
            "cardinal_angles": {label.name.lower(): a for label, a in self.cardinal_angles.items()},
        }
