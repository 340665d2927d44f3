"""Board data records: parts, pads and plain geometric value types."""

from pnp_control.board.models import Dimension, Pad, Part, Position

__all__ = ["Dimension", "Pad", "Part", "Position"]
