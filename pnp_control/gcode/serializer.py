"""Serializer -- command dataclasses to G-code text.

This is the only place where commands become text.  Decimal precision
per field is part of the wire contract with the controller:

    ====================  =========
    field                 format
    ====================  =========
    rapid X / Y / Z / E   ``%.3f``
    linear Z              per move (``z_precision``)
    dwell P               per dwell (``precision``)
    feed F                integer mm/min
    ====================  =========

Feed rate convention:
    Python stores feed rates in **mm/s**.  The ``F`` word is mm/min::

        F_value = feed_mm_s * 60.0

Layout:
    Words are separated by one space, a trailing note follows ``" ; "``.
    Setup commands align their notes in one column.  A blank line
    separates consecutive blocks, except that a dispense-paste block
    directly follows its dispense-move block.
"""

from __future__ import annotations

from collections.abc import Iterable

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

# Width of the command words before the note in the setup block.
SETUP_NOTE_COLUMN = 10


class GCodeError(Exception):
    """Raised when G-code encoding fails."""

    pass


class SerializationError(GCodeError):
    """Raised for a command type the serializer does not know."""

    pass


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _f(feed_mm_s: float) -> str:
    """Convert mm/s feed rate to G-code ``F`` parameter (mm/min)."""
    return f"F{feed_mm_s * 60.0:.0f}"


def _g(value: float) -> str:
    """Shortest exact rendering, used for axis resets (``E0``)."""
    return f"{value:g}"


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def format_command(cmd: Command) -> str:
    """G-code words for one command, without its note.

    Raises
    ------
    SerializationError
        If ``cmd`` is not a known command type.
    """
    if isinstance(cmd, Comment):
        return f"{';' * cmd.level} {cmd.text}"
    if isinstance(cmd, Home):
        return "G28 " + " ".join(f"{axis}0" for axis in cmd.axes)
    if isinstance(cmd, SetUnitsMM):
        return "G21"
    if isinstance(cmd, SelectTool):
        return f"T{cmd.index}"
    if isinstance(cmd, AllowColdExtrusion):
        return "M302"
    if isinstance(cmd, AbsolutePositioning):
        return "G90"
    if isinstance(cmd, SetAxisPosition):
        return f"G92 E{_g(cmd.e)}"
    if isinstance(cmd, RapidMove):
        words = ["G0"]
        if cmd.feed_mm_s is not None:
            words.append(_f(cmd.feed_mm_s))
        words += [f"X{cmd.x:.3f}", f"Y{cmd.y:.3f}", f"Z{cmd.z:.3f}"]
        if cmd.e is not None:
            words.append(f"E{cmd.e:.3f}")
        return " ".join(words)
    if isinstance(cmd, LinearMove):
        words = ["G1", f"Z{cmd.z:.{cmd.z_precision}f}"]
        if cmd.e is not None:
            words.append(f"E{_g(cmd.e)}")
        if cmd.feed_mm_s is not None:
            words.append(_f(cmd.feed_mm_s))
        return " ".join(words)
    if isinstance(cmd, Dwell):
        if cmd.ms is None:
            return "G4"
        return f"G4 P{cmd.ms:.{cmd.precision}f}"
    if isinstance(cmd, SetPin):
        return f"M42 P{cmd.pin} S{cmd.value}"
    if isinstance(cmd, DispenserOn):
        return "M106"
    if isinstance(cmd, DispenserOff):
        return "M107"
    if isinstance(cmd, DisableMotors):
        return "M84"
    raise SerializationError(
        f"Unsupported command: {type(cmd).__name__}"
    )


def format_line(cmd: Command, note_column: int = 0) -> str:
    """One output line: command words plus the optional trailing note.

    Parameters
    ----------
    cmd : Command
        Command to render.
    note_column : int
        Minimum width of the command words before the note.
    """
    words = format_command(cmd)
    if not cmd.note:
        return words
    return f"{words:<{note_column}} ; {cmd.note}"


# ---------------------------------------------------------------------------
# Blocks
# ---------------------------------------------------------------------------


def format_block(block: Block) -> list[str]:
    """Render every command of ``block`` to a line."""
    column = SETUP_NOTE_COLUMN if block.kind is BlockKind.SETUP else 0
    return [format_line(cmd, column) for cmd in block.commands]


def needs_separator(previous: Block | None, block: Block) -> bool:
    """Whether a blank line goes between ``previous`` and ``block``."""
    if previous is None:
        return False
    return block.kind is not BlockKind.DISPENSE_PASTE


def render_blocks(blocks: Iterable[Block]) -> str:
    """Render a sequence of blocks to a complete G-code text."""
    lines: list[str] = []
    previous: Block | None = None
    for block in blocks:
        if needs_separator(previous, block):
            lines.append("")
        lines.extend(format_block(block))
        previous = block
    if not lines:
        return ""
    return "\n".join(lines) + "\n"
