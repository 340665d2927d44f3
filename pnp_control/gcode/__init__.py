"""
G-code encoding module.

Turns parts, tapes and pads into command blocks, writes them to explicit
output sinks, and serializes commands to text at the output boundary.
"""

from pnp_control.gcode.machine import (
    GCodeMachine,
    MachineState,
    MachineStateError,
)
from pnp_control.gcode.serializer import (
    GCodeError,
    SerializationError,
    render_blocks,
)
from pnp_control.gcode.sink import BlockRecorder, BlockSink, GCodeWriter

__all__ = [
    "BlockRecorder",
    "BlockSink",
    "GCodeError",
    "GCodeMachine",
    "GCodeWriter",
    "MachineState",
    "MachineStateError",
    "SerializationError",
    "render_blocks",
]
