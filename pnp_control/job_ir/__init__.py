"""
G-code command vocabulary.

Defines every command the encoders emit as an immutable dataclass, plus
the ``Block`` grouping written to output sinks.  Text is produced only by
``pnp_control.gcode.serializer``.
"""

from pnp_control.job_ir.commands import (
    AbsolutePositioning,
    AllowColdExtrusion,
    Block,
    BlockKind,
    Command,
    Comment,
    DisableMotors,
    DispenserOff,
    DispenserOn,
    Dwell,
    Home,
    LinearMove,
    RapidMove,
    SelectTool,
    SetAxisPosition,
    SetPin,
    SetUnitsMM,
)

__all__ = [
    "AbsolutePositioning",
    "AllowColdExtrusion",
    "Block",
    "BlockKind",
    "Command",
    "Comment",
    "DisableMotors",
    "DispenserOff",
    "DispenserOn",
    "Dwell",
    "Home",
    "LinearMove",
    "RapidMove",
    "SelectTool",
    "SetAxisPosition",
    "SetPin",
    "SetUnitsMM",
]
