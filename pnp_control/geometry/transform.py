"""Coordinate transforms -- pad-local -> part-local -> board -> global.

Three frames are involved:

Pad-local
    Pad offsets relative to the part centre, unrotated (footprint frame).
Board-local
    Part positions relative to the board origin, in mm.
Global
    Machine coordinates.  ``global = board.origin + board_local``.

Angles are in **degrees**, counter-clockwise positive.  Rotation is the
standard 2D rotation about the origin, so the magnitude of a rotated
offset is preserved for any angle.
"""

from __future__ import annotations

import math

from pnp_control.board.models import Pad, Part, Position


def normalize_angle(angle_deg: float) -> float:
    """Map an angle in degrees into ``[0, 360)``.

    Works for any sign and any number of full turns.
    """
    angle = math.fmod(angle_deg, 360.0)
    if angle < 0:
        angle += 360.0
    # fmod of a tiny negative value can round back up to 360.0
    if angle >= 360.0:
        angle = 0.0
    return angle


def rotate_point(x: float, y: float, angle_deg: float) -> tuple[float, float]:
    """Rotate ``(x, y)`` about the origin by ``angle_deg``.

    Parameters
    ----------
    x, y : float
        Offset to rotate, in mm.
    angle_deg : float
        Rotation angle in degrees (counter-clockwise positive).

    Returns
    -------
    tuple[float, float]
        ``(x * cos t - y * sin t, x * sin t + y * cos t)`` with
        ``t = 2 * pi * angle_deg / 360``.
    """
    theta = 2 * math.pi * angle_deg / 360.0
    cos_t = math.cos(theta)
    sin_t = math.sin(theta)
    return x * cos_t - y * sin_t, x * sin_t + y * cos_t


def translate(origin: Position, x: float, y: float) -> tuple[float, float]:
    """Shift ``(x, y)`` by the frame origin offset."""
    return x + origin.x, y + origin.y


def board_to_global(origin: Position, pos: Position) -> tuple[float, float]:
    """Convert a board-local position to global machine coordinates."""
    return translate(origin, pos.x, pos.y)


def pad_to_global(
    origin: Position, part: Part, pad: Pad,
) -> tuple[float, float]:
    """Global position of a pad centre.

    The pad offset is rotated by the part angle, shifted by the part
    position on the board, then by the board origin.

    Parameters
    ----------
    origin : Position
        Board origin in global coordinates.
    part : Part
        Owning part (board-local position and rotation).
    pad : Pad
        Pad with a part-local offset.

    Returns
    -------
    tuple[float, float]
        Global X, Y in mm.
    """
    dx, dy = rotate_point(pad.pos.x, pad.pos.y, part.angle)
    part_x, part_y = board_to_global(origin, part.pos)
    return part_x + dx, part_y + dy
