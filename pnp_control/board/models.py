"""Board records -- parts and pads as plain geometric / identity data.

All positions are board-local millimetres until transformed by
``pnp_control.geometry``.  Pad positions are offsets from the part
centre in the unrotated footprint frame.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Position:
    """Point in mm."""

    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True, slots=True)
class Dimension:
    """Width / height in mm."""

    w: float = 0.0
    h: float = 0.0


@dataclass(frozen=True, slots=True)
class Pad:
    """Solder pad of a part.

    Parameters
    ----------
    name : str
        Pad name as in the footprint (e.g. ``"1"``, ``"A3"``).
    pos : Position
        Offset of the pad centre from the part centre (part-local mm).
    size : Dimension
        Pad width and height in mm.
    """

    name: str
    pos: Position
    size: Dimension

    @property
    def area(self) -> float:
        """Pad area in mm^2."""
        return self.size.w * self.size.h


@dataclass(frozen=True, slots=True)
class Part:
    """Component to be placed on the board.

    Parameters
    ----------
    component_name : str
        Reference designator (e.g. ``"R12"``).
    footprint : str
        Package name (e.g. ``"0805"``).
    value : str
        Component value (e.g. ``"100n"``).
    pos : Position
        Target centre on the board (board-local mm).
    angle : float
        Target rotation in degrees; any range, meaning is mod 360.
    pads : tuple[Pad, ...]
        Pads in part-local coordinates.  Only used for dispensing.
    """

    component_name: str
    footprint: str
    value: str
    pos: Position
    angle: float = 0.0
    pads: tuple[Pad, ...] = ()

    @property
    def key(self) -> str:
        """Tape registry key: ``"footprint@value"``."""
        return f"{self.footprint}@{self.value}"

    @property
    def print_name(self) -> str:
        """Human-readable identity used in G-code comments."""
        return f"{self.component_name} ({self.footprint}@{self.value})"
