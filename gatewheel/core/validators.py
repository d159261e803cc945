# gatewheel/core/validators.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Union

from gatewheel.core.errors import (
    ErrorSet,
    MissingFieldError,
    StructuralError,
    UnknownFieldError,
    WheelError,
)
from gatewheel.core.positions import PositionSpec, check_adjacency, parse_position
from gatewheel.core.progression import (
    CardinalLabel,
    OrientationConvention,
    parse_progression,
    resolve_progression,
)
from gatewheel.core.rotation import solve_rotation
from gatewheel.core.sequence import Sequence, validate_sequence
from gatewheel.core.wheel import Stage, ValidatedConfiguration

log = logging.getLogger(__name__)

__all__ = [
    "Stage",
    "REQUIRED_FIELDS",
    "OPTIONAL_FIELDS",
    "validate",
    "validate_or_raise",
    "revalidate",
]

REQUIRED_FIELDS = ("sequence", "cardinalProgression", "northPosition")
OPTIONAL_FIELDS = ("eastPosition", "southPosition", "westPosition")

_POSITION_FIELDS = {
    CardinalLabel.NORTH: "northPosition",
    CardinalLabel.EAST: "eastPosition",
    CardinalLabel.SOUTH: "southPosition",
    CardinalLabel.WEST: "westPosition",
}


def _reject(errors: List[WheelError], stage: Stage) -> ErrorSet:
    log.info("wheel configuration rejected at %s with %d error(s)", stage.name, len(errors))
    return ErrorSet(errors, stage=stage)


def validate(raw: Any) -> Union[ValidatedConfiguration, ErrorSet]:
    """
    Validate a raw wheel document and resolve its rotation.

    Stages run in order (sequence → adjacency → rotation → progression) and a
    stage never runs past a failed prerequisite. Inside a stage every
    independent problem is collected, so the returned ErrorSet is complete
    for everything that could be checked. `ErrorSet.stage` is the last stage
    that passed.
    """
    stage = Stage.UNVALIDATED
    if not isinstance(raw, dict):
        return _reject([StructuralError("config", raw, "configuration must be an object")], stage)

    errors: List[WheelError] = []
    for key in REQUIRED_FIELDS:
        if key not in raw:
            errors.append(MissingFieldError(key, None))
    for key in raw:
        if key not in REQUIRED_FIELDS and key not in OPTIONAL_FIELDS:
            errors.append(UnknownFieldError(str(key), raw[key]))

    # leaf parses: independent of each other
    sequence: Optional[Sequence] = None
    if "sequence" in raw:
        try:
            sequence = validate_sequence(raw["sequence"])
        except ErrorSet as e:
            errors.extend(e)

    convention: Optional[OrientationConvention] = None
    if "cardinalProgression" in raw:
        try:
            convention = parse_progression(raw["cardinalProgression"])
        except ErrorSet as e:
            errors.extend(e)

    specs: Dict[CardinalLabel, PositionSpec] = {}
    for label, key in _POSITION_FIELDS.items():
        if key not in raw:
            continue
        try:
            specs[label] = parse_position(raw[key], key)
        except ErrorSet as e:
            errors.extend(e)

    if sequence is None:
        return _reject(errors, stage)
    stage = Stage.SEQUENCE_CHECKED

    # adjacency: needs the sequence and each spec's own parse
    for label, spec in specs.items():
        try:
            check_adjacency(sequence, spec, _POSITION_FIELDS[label])
        except ErrorSet as e:
            errors.extend(e)
    if not any(e.field in _POSITION_FIELDS.values() for e in errors):
        stage = Stage.ADJACENCY_CHECKED

    north = specs.get(CardinalLabel.NORTH)
    if errors or convention is None or north is None:
        return _reject(errors, stage)

    offset = solve_rotation(sequence, north)
    stage = Stage.ROTATION_RESOLVED

    try:
        resolved = resolve_progression(sequence, convention, offset, specs)
    except ErrorSet as e:
        return _reject(list(e), stage)
    stage = Stage.PROGRESSION_CHECKED

    config = ValidatedConfiguration(
        sequence=sequence,
        convention=convention,
        north=north,
        rotation_offset=offset,
        east=specs.get(CardinalLabel.EAST),
        south=specs.get(CardinalLabel.SOUTH),
        west=specs.get(CardinalLabel.WEST),
        cardinal_angles=resolved,
    )
    log.debug("wheel configuration validated after %s: %s north=%s offset=%.4f°",
              stage.name, convention.value, north.canonical(), offset)
    return config


def validate_or_raise(raw: Any) -> ValidatedConfiguration:
    result = validate(raw)
    if isinstance(result, ErrorSet):
        raise result
    return result


def revalidate(config: ValidatedConfiguration) -> Union[ValidatedConfiguration, ErrorSet]:
    """Validate the serialized form of an existing configuration again."""
    return validate(config.to_document())
