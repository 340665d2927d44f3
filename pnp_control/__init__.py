"""
Pick-and-Place Control Package.

Toolpath encoder for a pick-and-place machine driven by Marlin-style G-code.
Turns parts, tapes and pads into an ordered command stream; the rotation
nozzle is driven through the repurposed extruder (``E``) axis.

Subpackages:
    geometry: Frame transforms (rotation, translation, angle normalization)
    board: Part / Pad records in board-local coordinates
    tapes: Component supply reels with a forward-only cursor
    configs: Machine configuration loading and validation
    job_ir: Structured G-code command vocabulary
    gcode: Block encoders, serializer, output sinks, machine state
    jobs: Job file loading and pick/place / dispense sequencing
"""

__all__ = [
    "geometry",
    "board",
    "tapes",
    "configs",
    "job_ir",
    "gcode",
    "jobs",
]
