"""Tests for coordinate transforms and angle normalization."""

from __future__ import annotations

import math

import pytest

from pnp_control.board.models import Dimension, Pad, Part, Position
from pnp_control.geometry.transform import (
    board_to_global,
    normalize_angle,
    pad_to_global,
    rotate_point,
    translate,
)


# ---------------------------------------------------------------------------
# Angle normalization
# ---------------------------------------------------------------------------


class TestNormalizeAngle:
    @pytest.mark.parametrize(
        "angle, expected",
        [
            (0.0, 0.0),
            (90.0, 90.0),
            (360.0, 0.0),
            (450.0, 90.0),
            (-90.0, 270.0),
            (-360.0, 0.0),
            (-720.5, 359.5),
            (1080.0, 0.0),
        ],
    )
    def test_known_values(self, angle: float, expected: float) -> None:
        assert normalize_angle(angle) == pytest.approx(expected)

    @pytest.mark.parametrize("angle", [-1e-14, -1e-300])
    def test_tiny_negative_stays_below_360(self, angle: float) -> None:
        result = normalize_angle(angle)
        assert 0.0 <= result < 360.0


# ---------------------------------------------------------------------------
# Rotation
# ---------------------------------------------------------------------------


class TestRotatePoint:
    def test_quarter_turn(self) -> None:
        x, y = rotate_point(2.0, 0.0, 90.0)
        assert x == pytest.approx(0.0, abs=1e-12)
        assert y == pytest.approx(2.0)

    def test_half_turn(self) -> None:
        x, y = rotate_point(1.0, 2.0, 180.0)
        assert x == pytest.approx(-1.0)
        assert y == pytest.approx(-2.0)

    def test_zero_angle_is_identity(self) -> None:
        assert rotate_point(3.5, -1.25, 0.0) == (3.5, -1.25)

    def test_negative_angle_is_clockwise(self) -> None:
        x, y = rotate_point(0.0, 1.0, -90.0)
        assert x == pytest.approx(1.0)
        assert y == pytest.approx(0.0, abs=1e-12)

    @pytest.mark.parametrize("angle", [0.0, 17.0, 90.0, 233.3, -45.0, 720.0])
    def test_magnitude_preserved(self, angle: float) -> None:
        x, y = rotate_point(3.0, 4.0, angle)
        assert math.hypot(x, y) == pytest.approx(5.0)


# ---------------------------------------------------------------------------
# Frame changes
# ---------------------------------------------------------------------------


class TestFrames:
    def test_translate(self) -> None:
        assert translate(Position(10.0, 20.0), 1.5, -2.0) == (11.5, 18.0)

    def test_board_to_global(self) -> None:
        origin = Position(10.0, 20.0)
        assert board_to_global(origin, Position(12.5, 7.0)) == (22.5, 27.0)

    def test_pad_rotated_by_part_angle(self) -> None:
        part = Part(
            component_name="R1",
            footprint="0805",
            value="10k",
            pos=Position(12.5, 7.0),
            angle=90.0,
        )
        pad = Pad("1", Position(2.0, 0.0), Dimension(1.0, 1.5))
        x, y = pad_to_global(Position(10.0, 20.0), part, pad)
        assert x == pytest.approx(22.5)
        assert y == pytest.approx(29.0)

    def test_pad_unrotated_part(self) -> None:
        part = Part("C1", "0805", "100n", Position(5.0, 5.0))
        pad = Pad("2", Position(-1.0, 0.5), Dimension(1.0, 1.0))
        assert pad_to_global(Position(0.0, 0.0), part, pad) == (4.0, 5.5)
