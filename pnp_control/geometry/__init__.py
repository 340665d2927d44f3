"""Frame transforms between pad-local, part-local and global coordinates."""

from pnp_control.geometry.transform import (
    board_to_global,
    normalize_angle,
    pad_to_global,
    rotate_point,
    translate,
)

__all__ = [
    "board_to_global",
    "normalize_angle",
    "pad_to_global",
    "rotate_point",
    "translate",
]
