"""G-code command vocabulary -- the contract between encoders and output.

Every command the machine understands is an immutable, slotted
dataclass carrying **values**, never text.  Encoders build commands;
``pnp_control.gcode.serializer`` turns them into G-code lines at the
output boundary.  Tests assert on these values directly.

Units: millimetres, degrees converted to ``E`` units by the caller,
feed rates in **mm/s** (converted to mm/min by the serializer),
durations in milliseconds.

Grouping
--------
A *Block* is the self-contained group of commands one encoder call
emits (setup, pick, place, dispense move, dispense paste, shutdown).
Blocks are the unit written to an output sink.

Every command may carry a ``note``: a trailing ``;`` comment that the
controller ignores but an operator reads.
"""

from __future__ import annotations

from abc import ABC
from dataclasses import dataclass, field
from enum import Enum

# ---------------------------------------------------------------------------
# Base class
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True, kw_only=True)
class Command(ABC):
    """Base class for all G-code commands."""

    note: str | None = None


# ---------------------------------------------------------------------------
# Annotations
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Comment(Command):
    """Full-line comment.

    Parameters
    ----------
    text : str
        Comment text.
    level : int
        Number of leading ``;`` characters.  Block headers use 2.
    """

    text: str
    level: int = 1

    def __post_init__(self) -> None:
        if self.level < 1:
            raise ValueError(f"Comment level must be >= 1, got {self.level}")


# ---------------------------------------------------------------------------
# Machine setup
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Home(Command):
    """Home the given axes (``G28``).

    Parameters
    ----------
    axes : tuple[str, ...]
        Axis letters, e.g. ``("X", "Y")``.
    """

    axes: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.axes:
            raise ValueError("Home requires at least one axis")
        for axis in self.axes:
            if axis not in ("X", "Y", "Z", "E"):
                raise ValueError(f"Unknown axis {axis!r}")


@dataclass(frozen=True, slots=True)
class SetUnitsMM(Command):
    """Interpret all lengths as millimetres (``G21``)."""

    pass


@dataclass(frozen=True, slots=True)
class SelectTool(Command):
    """Select the extruder that drives the rotary nozzle (``T<n>``)."""

    index: int


@dataclass(frozen=True, slots=True)
class AllowColdExtrusion(Command):
    """Cold-extrusion override (``M302``).

    The extruder axis rotates the nozzle; there is no hot end to wait for.
    """

    pass


@dataclass(frozen=True, slots=True)
class AbsolutePositioning(Command):
    """Absolute coordinates for all subsequent moves (``G90``)."""

    pass


@dataclass(frozen=True, slots=True)
class SetAxisPosition(Command):
    """Declare the current rotary position without moving (``G92 E``)."""

    e: float = 0.0


@dataclass(frozen=True, slots=True)
class DisableMotors(Command):
    """Switch off all stepper drivers (``M84``)."""

    pass


# ---------------------------------------------------------------------------
# Motion  (absolute global coordinates, mm)
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RapidMove(Command):
    """Travel move (``G0``) with optional nozzle rotation.

    Parameters
    ----------
    x, y, z : float
        Target position in mm.
    e : float | None
        Nozzle rotation in ``E`` units.  ``None`` leaves it unchanged.
    feed_mm_s : float | None
        Feed rate in mm/s.  ``None`` keeps the modal feed rate.
    """

    x: float
    y: float
    z: float
    e: float | None = None
    feed_mm_s: float | None = None


@dataclass(frozen=True, slots=True)
class LinearMove(Command):
    """Vertical linear move (``G1 Z``).

    Parameters
    ----------
    z : float
        Target height in mm.
    z_precision : int
        Decimals written for ``Z``.
    e : float | None
        Optional rotary target written alongside ``Z``.
    feed_mm_s : float | None
        Feed rate in mm/s.  ``None`` keeps the modal feed rate.
    """

    z: float
    z_precision: int = 3
    e: float | None = None
    feed_mm_s: float | None = None


@dataclass(frozen=True, slots=True)
class Dwell(Command):
    """Wait (``G4``).

    Without a duration, ``G4`` only flushes the planner buffer so that the
    following output command happens after all queued motion.

    Parameters
    ----------
    ms : float | None
        Duration in milliseconds, or ``None`` for a plain flush.
    precision : int
        Decimals written for the duration.
    """

    ms: float | None = None
    precision: int = 0


# ---------------------------------------------------------------------------
# Actuators
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SetPin(Command):
    """Drive a digital output pin (``M42``).

    Parameters
    ----------
    pin : int
        Firmware pin number.
    value : int
        Output value in [0, 255].
    """

    pin: int
    value: int

    def __post_init__(self) -> None:
        if not 0 <= self.value <= 255:
            raise ValueError(
                f"SetPin value must be in [0, 255], got {self.value}"
            )


@dataclass(frozen=True, slots=True)
class DispenserOn(Command):
    """Open the paste solenoid (wired to the fan output, ``M106``)."""

    pass


@dataclass(frozen=True, slots=True)
class DispenserOff(Command):
    """Close the paste solenoid (``M107``)."""

    pass


# ---------------------------------------------------------------------------
# Blocks
# ---------------------------------------------------------------------------


class BlockKind(Enum):
    """Which encoder produced a block."""

    SETUP = "setup"
    PICK = "pick"
    PLACE = "place"
    DISPENSE_MOVE = "dispense_move"
    DISPENSE_PASTE = "dispense_paste"
    SHUTDOWN = "shutdown"


@dataclass(frozen=True, slots=True)
class Block:
    """Ordered commands emitted together by one encoder call."""

    kind: BlockKind
    commands: tuple[Command, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.commands)

    def of_type(self, cls: type[Command]) -> list[Command]:
        """Commands of the given type, in emission order."""
        return [cmd for cmd in self.commands if isinstance(cmd, cls)]

    @property
    def instructions(self) -> tuple[Command, ...]:
        """All commands except full-line comments."""
        return tuple(
            cmd for cmd in self.commands if not isinstance(cmd, Comment)
        )
