# tests/test_validators.py
from __future__ import annotations

import logging

import pytest
from hypothesis import given, strategies as st

from conftest import make_document
from gatewheel.core.angles import angle_of, cardinal_angles
from gatewheel.core.constants import CANONICAL_SEQUENCE
from gatewheel.core.errors import (
    CardinalInconsistencyError,
    DuplicateElementError,
    ErrorSet,
    MissingElementError,
    MissingFieldError,
    NotAdjacentError,
    ParseError,
    ReversedAdjacencyError,
    StructuralError,
    UnknownFieldError,
    UnknownProgressionError,
)
from gatewheel.core.positions import Centered, Straddled
from gatewheel.core.progression import CardinalLabel, OrientationConvention
from gatewheel.core.validators import Stage, revalidate, validate, validate_or_raise
from gatewheel.core.wheel import ValidatedConfiguration


# ─────────────────────────────────────────────────────────────────────────────
# Happy paths
# ─────────────────────────────────────────────────────────────────────────────

def test_full_scenario(canonical_doc) -> None:
    cfg = validate(canonical_doc)
    assert isinstance(cfg, ValidatedConfiguration)
    assert cfg.rotation_offset == 33.75
    assert cfg.convention is OrientationConvention.NWSE
    assert cfg.north == Straddled(11, 10)
    assert angle_of(cfg, 10, 1) == 0.0
    assert angle_of(cfg, 25, 1) == 90.0
    assert angle_of(cfg, 15, 1) == 180.0
    assert angle_of(cfg, 46, 1) == 270.0


def test_north_only_is_enough() -> None:
    cfg = validate(make_document())
    assert isinstance(cfg, ValidatedConfiguration)
    assert cfg.east is None and cfg.south is None and cfg.west is None
    assert cfg.rotation_offset == 33.75


def test_tuple_sequence_is_accepted() -> None:
    cfg = validate(make_document(sequence=tuple(CANONICAL_SEQUENCE)))
    assert isinstance(cfg, ValidatedConfiguration)


def test_revalidation_is_idempotent(canonical_doc) -> None:
    cfg = validate_or_raise(canonical_doc)
    again = revalidate(cfg)
    assert again == cfg
    assert again is not cfg
    assert cfg.to_document() == canonical_doc


@given(
    st.permutations(list(range(1, 65))),
    st.integers(min_value=0, max_value=63),
    st.booleans(),
    st.sampled_from([c.value for c in OrientationConvention]),
)
def test_any_valid_document_round_trips(perm, i, centered, progression) -> None:
    north = str(perm[i]) if centered else f"{perm[i - 1]}|{perm[i]}"
    doc = {"sequence": list(perm), "cardinalProgression": progression, "northPosition": north}
    cfg = validate_or_raise(doc)
    assert validate_or_raise(cfg.to_document()) == cfg
    assert 0.0 <= cfg.rotation_offset < 360.0


def test_configuration_is_immutable(canonical_doc) -> None:
    cfg = validate_or_raise(canonical_doc)
    with pytest.raises(AttributeError):
        cfg.rotation_offset = 0.0  # type: ignore[misc]


# ─────────────────────────────────────────────────────────────────────────────
# Rejections
# ─────────────────────────────────────────────────────────────────────────────

def test_adjacency_ordering_scenario() -> None:
    assert validate(make_document(northPosition="11|10")).rotation_offset == 33.75
    result = validate(make_document(northPosition="10|11"))
    assert isinstance(result, ErrorSet)
    assert [type(e) for e in result] == [ReversedAdjacencyError]
    assert result.stage is Stage.SEQUENCE_CHECKED


def test_not_adjacent_north() -> None:
    result = validate(make_document(northPosition="10|25"))
    assert isinstance(result, ErrorSet)
    assert isinstance(result.items[0], NotAdjacentError)


def test_inconsistent_east_scenario(canonical_doc) -> None:
    canonical_doc["eastPosition"] = "17|21"
    result = validate(canonical_doc)
    assert isinstance(result, ErrorSet)
    (err,) = result.items
    assert isinstance(err, CardinalInconsistencyError)
    assert err.expected_deg == 90.0
    assert err.actual_deg == 101.25
    assert result.stage is Stage.ROTATION_RESOLVED
    assert "expected 90°" in err.message


def test_missing_and_duplicate_in_one_pass() -> None:
    seq = list(CANONICAL_SEQUENCE)
    seq[seq.index(42)] = 7
    result = validate(make_document(sequence=seq))
    assert isinstance(result, ErrorSet)
    assert [e.value for e in result.of_type(MissingElementError)] == [42]
    assert [e.value for e in result.of_type(DuplicateElementError)] == [7]
    assert result.stage is Stage.UNVALIDATED


def test_leaf_errors_are_collected_together() -> None:
    seq = list(CANONICAL_SEQUENCE)
    seq[0] = 19
    doc = make_document(sequence=seq, cardinalProgression="INVALID", eastPosition="a|b")
    result = validate(doc)
    assert isinstance(result, ErrorSet)
    kinds = set(result.kinds())
    assert kinds == {"duplicate_element", "missing_element", "unknown_progression", "parse"}


def test_structural_error_blocks_later_stages() -> None:
    result = validate(make_document(sequence=[1, 2, 3], northPosition="10|25"))
    assert isinstance(result, ErrorSet)
    assert [type(e) for e in result] == [StructuralError]


def test_rotation_never_runs_on_unchecked_north() -> None:
    # reversed north plus an east anchor that would only be judged after rotation
    result = validate(make_document(northPosition="10|11", eastPosition="17|21"))
    assert isinstance(result, ErrorSet)
    assert not result.of_type(CardinalInconsistencyError)


def test_missing_and_unknown_fields() -> None:
    result = validate({"sequence": list(CANONICAL_SEQUENCE), "northPositon": "11|10"})
    assert isinstance(result, ErrorSet)
    missing = {e.field for e in result.of_type(MissingFieldError)}
    unknown = {e.field for e in result.of_type(UnknownFieldError)}
    assert missing == {"cardinalProgression", "northPosition"}
    assert unknown == {"northPositon"}


@pytest.mark.parametrize("raw", [None, [], "NWSE", 42])
def test_non_object_document(raw) -> None:
    result = validate(raw)
    assert isinstance(result, ErrorSet)
    assert isinstance(result.items[0], StructuralError)


def test_unknown_progression_field() -> None:
    result = validate(make_document(cardinalProgression="ENWN"))
    assert isinstance(result, ErrorSet)
    (err,) = result.items
    assert isinstance(err, UnknownProgressionError)
    assert err.value == "ENWN"


def test_parse_error_names_field() -> None:
    result = validate(make_document(southPosition="12|15|16"))
    assert isinstance(result, ErrorSet)
    (err,) = result.items
    assert isinstance(err, ParseError)
    assert err.field == "southPosition"


def test_validate_or_raise() -> None:
    with pytest.raises(ErrorSet) as ei:
        validate_or_raise(make_document(northPosition="10|11"))
    details = ei.value.errors()
    assert details[0]["loc"] == ["northPosition"]
    assert details[0]["type"] == "value_error.reversed_adjacency"
    assert details[0]["value"] == "10|11"


# ─────────────────────────────────────────────────────────────────────────────
# Conventions and anchor kinds end to end
# ─────────────────────────────────────────────────────────────────────────────

@pytest.mark.parametrize("progression", ["NESW", "ESWN", "SWNE", "WNES"])
def test_clockwise_convention_with_all_anchors(canonical_doc, progression) -> None:
    canonical_doc["cardinalProgression"] = progression
    cfg = validate_or_raise(canonical_doc)
    assert cfg.convention.value == progression
    assert dict(cfg.cardinal_angles) == {
        CardinalLabel.NORTH: 0.0,
        CardinalLabel.EAST: 90.0,
        CardinalLabel.SOUTH: 180.0,
        CardinalLabel.WEST: 270.0,
    }


def test_centered_anchors_pass_the_cross_check() -> None:
    doc = make_document(
        cardinalProgression="NESW",
        northPosition="10",
        eastPosition="25",
        southPosition="15",
        westPosition="46",
    )
    cfg = validate_or_raise(doc)
    assert cfg.rotation_offset == 31.40625
    assert cfg.east == Centered(25)
    assert cfg.cardinal_angles[CardinalLabel.WEST] == 270.0


def test_centered_anchor_off_by_one_gate_is_inconsistent() -> None:
    doc = make_document(cardinalProgression="NESW", northPosition="10", eastPosition="17")
    result = validate(doc)
    assert isinstance(result, ErrorSet)
    (err,) = result.items
    assert isinstance(err, CardinalInconsistencyError)
    assert err.suggestion == "25"


# ─────────────────────────────────────────────────────────────────────────────
# Immutability and stages
# ─────────────────────────────────────────────────────────────────────────────

def test_cardinal_angles_are_read_only(canonical_doc) -> None:
    cfg = validate_or_raise(canonical_doc)
    with pytest.raises(TypeError):
        cfg.cardinal_angles[CardinalLabel.EAST] = 12.0  # type: ignore[index]
    copy = cardinal_angles(cfg)
    copy[CardinalLabel.EAST] = 12.0
    assert cardinal_angles(cfg)[CardinalLabel.EAST] == 90.0


def test_sequence_index_is_read_only(canonical_doc) -> None:
    cfg = validate_or_raise(canonical_doc)
    with pytest.raises(TypeError):
        cfg.sequence._index[10] = 0  # type: ignore[index]
    assert angle_of(cfg, 10, 1) == 0.0


def test_validated_stage(canonical_doc, caplog) -> None:
    with caplog.at_level(logging.DEBUG, logger="gatewheel.core.validators"):
        cfg = validate_or_raise(canonical_doc)
    assert cfg.stage is Stage.VALIDATED
    assert "after PROGRESSION_CHECKED" in caplog.text


def test_missing_progression_stops_before_rotation() -> None:
    doc = make_document()
    del doc["cardinalProgression"]
    result = validate(doc)
    assert isinstance(result, ErrorSet)
    assert [type(e) for e in result] == [MissingFieldError]
    assert result.stage is Stage.ADJACENCY_CHECKED


def test_non_finite_values_are_reported_as_text() -> None:
    seq = list(CANONICAL_SEQUENCE)
    seq[0] = float("nan")
    result = validate(make_document(sequence=seq))
    assert isinstance(result, ErrorSet)
    assert result.errors()[0]["value"] == "nan"
