# tests/test_angles.py
from __future__ import annotations

import pytest
from hypothesis import given, strategies as st

from gatewheel.core.angles import (
    addresses_within,
    angle_of,
    cardinal_angles,
    nearest_address,
    position_of,
    wheel_position,
)
from gatewheel.core.constants import CANONICAL_SEQUENCE, QUANTUM
from gatewheel.core.errors import AddressError, ErrorSet
from gatewheel.core.progression import CardinalLabel
from gatewheel.core.validators import validate_or_raise

DEFAULT = validate_or_raise({
    "sequence": list(CANONICAL_SEQUENCE),
    "cardinalProgression": "NWSE",
    "northPosition": "11|10",
    "eastPosition": "36|25",
    "southPosition": "12|15",
    "westPosition": "6|46",
})

CENTERED = validate_or_raise({
    "sequence": list(CANONICAL_SEQUENCE),
    "cardinalProgression": "NESW",
    "northPosition": "10",
})

ALL_ADDRESSES = [(g, ln) for g in range(1, 65) for ln in range(1, 7)]


# ─────────────────────────────────────────────────────────────────────────────
# Forward
# ─────────────────────────────────────────────────────────────────────────────

@pytest.mark.parametrize(
    "gate, expected",
    [(10, 0.0), (25, 90.0), (15, 180.0), (46, 270.0)],
)
def test_cardinal_gates(gate, expected) -> None:
    assert angle_of(DEFAULT, gate, 1) == expected


def test_gate_11_ends_just_before_north() -> None:
    assert angle_of(DEFAULT, 11, 6) == 360.0 - QUANTUM
    assert angle_of(DEFAULT, 11, 1) == 354.375


@pytest.mark.parametrize("cfg", [DEFAULT, CENTERED])
def test_every_angle_in_range_and_unique(cfg) -> None:
    angles = [angle_of(cfg, g, ln) for g, ln in ALL_ADDRESSES]
    assert all(0.0 <= a < 360.0 for a in angles)
    assert len(set(angles)) == 384


@pytest.mark.parametrize("cfg", [DEFAULT, CENTERED])
def test_lines_are_one_quantum_apart(cfg) -> None:
    for g in range(1, 65):
        for ln in range(1, 6):
            step = (angle_of(cfg, g, ln + 1) - angle_of(cfg, g, ln)) % 360.0
            assert step == pytest.approx(QUANTUM, abs=1e-9)


@pytest.mark.parametrize("cfg", [DEFAULT, CENTERED])
def test_gate_boundaries_close(cfg) -> None:
    seq = cfg.sequence
    for g in seq:
        nxt = seq.successor(g)
        assert (angle_of(cfg, g, 6) + QUANTUM) % 360.0 == pytest.approx(angle_of(cfg, nxt, 1), abs=1e-9)


def test_wheel_position_record() -> None:
    pos = wheel_position(DEFAULT, 10, 1)
    assert pos.wheel_index == 58
    assert pos.line_position == 348
    assert pos.base_angle == 326.25
    assert pos.angle == 0.0
    assert pos.as_dict()["gate"] == 10


def test_position_of() -> None:
    assert position_of(DEFAULT, 41) == 0
    assert position_of(DEFAULT, 60) == 63


@pytest.mark.parametrize(
    "gate, line, bad_field",
    [(0, 1, "gate"), (65, 1, "gate"), ("10", 1, "gate"), (True, 1, "gate"), (10, 0, "line"), (10, 7, "line"), (10, 2.0, "line")],
)
def test_invalid_address(gate, line, bad_field) -> None:
    with pytest.raises(ErrorSet) as ei:
        angle_of(DEFAULT, gate, line)
    (err,) = ei.value.items
    assert isinstance(err, AddressError)
    assert err.field == bad_field


def test_cardinal_angles() -> None:
    assert cardinal_angles(DEFAULT) == {
        CardinalLabel.NORTH: 0.0,
        CardinalLabel.EAST: 90.0,
        CardinalLabel.SOUTH: 180.0,
        CardinalLabel.WEST: 270.0,
    }


# ─────────────────────────────────────────────────────────────────────────────
# Inverse
# ─────────────────────────────────────────────────────────────────────────────

def test_nearest_exact_hit() -> None:
    hit = nearest_address(DEFAULT, 90.0)
    assert (hit.gate, hit.line) == (25, 1)
    assert hit.distance == 0.0


def test_nearest_with_signed_distance() -> None:
    hit = nearest_address(DEFAULT, 0.3)
    assert (hit.gate, hit.line) == (10, 1)
    assert hit.distance == pytest.approx(0.3)

    hit = nearest_address(DEFAULT, 359.7)
    assert (hit.gate, hit.line) == (10, 1)
    assert hit.distance == pytest.approx(-0.3)


def test_nearest_wraps_negative_and_large_angles() -> None:
    assert nearest_address(DEFAULT, -270.0).gate == 25
    assert nearest_address(DEFAULT, 450.0).gate == 25


@given(st.sampled_from(ALL_ADDRESSES))
def test_inverse_of_forward(addr) -> None:
    gate, line = addr
    hit = nearest_address(DEFAULT, angle_of(DEFAULT, gate, line))
    assert (hit.gate, hit.line) == (gate, line)
    assert hit.distance == pytest.approx(0.0, abs=1e-9)


@given(st.floats(min_value=-720.0, max_value=720.0, allow_nan=False))
def test_nearest_is_within_half_a_quantum(angle) -> None:
    hit = nearest_address(DEFAULT, angle)
    assert abs(hit.distance) <= QUANTUM / 2 + 1e-9


@pytest.mark.parametrize("bad", [float("nan"), float("inf"), "90", None])
def test_nearest_rejects_non_finite(bad) -> None:
    with pytest.raises(ErrorSet):
        nearest_address(DEFAULT, bad)


def test_addresses_within_north() -> None:
    hits = addresses_within(DEFAULT, 0.0, 1.0)
    # ties on distance order by angle
    assert [(h.gate, h.line) for h in hits] == [(10, 1), (10, 2), (11, 6)]
    assert hits[0].distance == 0.0


def test_addresses_within_full_window_lists_everything() -> None:
    assert len(addresses_within(DEFAULT, 0.0, 180.0)) == 384


def test_addresses_within_rejects_bad_window() -> None:
    with pytest.raises(ErrorSet):
        addresses_within(DEFAULT, 0.0, 200.0)
