"""Tape -- a component supply reel with a forward-only cursor.

Components sit on the tape at a fixed spacing, starting at the position
of the first component.  ``next_position()`` hands out one position per
call and advances the cursor; the cursor never moves backwards.

Positions are in **global** machine coordinates (the tape sits on the
machine bed, not on the board).
"""

from __future__ import annotations

import logging

from pnp_control.board.models import Position

logger = logging.getLogger(__name__)


class TapeExhaustedError(Exception):
    """Raised when a tape has no components left."""

    pass


def tape_key(footprint: str, value: str) -> str:
    """Registry key under which a tape for ``footprint``/``value`` is found."""
    return f"{footprint}@{value}"


class Tape:
    """Supply reel for one kind of component.

    Parameters
    ----------
    first : Position
        Global position of the first component on the tape.
    spacing : Position
        Offset from one component to the next (mm).
    count : int
        Number of components available.
    height : float
        Height of the component surface above the machine bed (mm).
    angle : float
        Rotation of the components on the reel (degrees).
    """

    def __init__(
        self,
        first: Position,
        spacing: Position,
        count: int,
        height: float,
        angle: float = 0.0,
    ) -> None:
        if count < 0:
            raise ValueError(f"Tape count must be >= 0, got {count}")
        self._first = first
        self._spacing = spacing
        self._count = count
        self._height = height
        self._angle = angle
        self._cursor = 0

    def __repr__(self) -> str:
        return (
            f"Tape(first={self._first}, spacing={self._spacing}, "
            f"count={self._count}, height={self._height}, "
            f"angle={self._angle}, taken={self._cursor})"
        )

    @property
    def height(self) -> float:
        return self._height

    @property
    def angle(self) -> float:
        return self._angle

    @property
    def count(self) -> int:
        return self._count

    @property
    def remaining(self) -> int:
        """Components not yet handed out."""
        return self._count - self._cursor

    def peek_position(self) -> Position:
        """Position of the next component without taking it.

        Raises
        ------
        TapeExhaustedError
            If no components remain.
        """
        if self._cursor >= self._count:
            raise TapeExhaustedError(
                f"Tape exhausted after {self._count} component(s)"
            )
        return Position(
            x=self._first.x + self._cursor * self._spacing.x,
            y=self._first.y + self._cursor * self._spacing.y,
        )

    def next_position(self) -> Position:
        """Take the next component and return its position.

        The cursor advances only on success.

        Raises
        ------
        TapeExhaustedError
            If no components remain.
        """
        pos = self.peek_position()
        self._cursor += 1
        logger.debug(
            "Tape component %d/%d taken at (%.3f, %.3f)",
            self._cursor, self._count, pos.x, pos.y,
        )
        return pos
