"""Block builders -- one pure function per encoder.

Each builder turns domain inputs into one ``Block`` of commands.  They
never touch tape cursors or sinks; ``GCodeMachine`` does that.

Heights
-------
``travel_height``
    Tape surface + board thickness + hover clearance.  Used while a
    component hangs on the needle.  Always >= every descend height of the
    same pick/place, since clearances are non-negative.
``clearance_height``
    Highest of board top and all tape surfaces, plus a margin.  The
    needle parks there after homing.

Angles
------
The nozzle turns through the extruder axis.  Degrees are normalized to
``[0, 360)`` and multiplied by ``RotationConfig.angle_factor``.  At
pickup the nozzle matches the reel angle; at placement it only turns by
the difference between the part angle and the reel angle.
"""

from __future__ import annotations

from pnp_control.board.models import Pad, Part, Position
from pnp_control.configs.loader import MachineConfig
from pnp_control.geometry.transform import (
    board_to_global,
    normalize_angle,
    pad_to_global,
)
from pnp_control.job_ir.commands import (
    AbsolutePositioning,
    AllowColdExtrusion,
    Block,
    BlockKind,
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
from pnp_control.tapes.tape import Tape

# ---------------------------------------------------------------------------
# Derived quantities
# ---------------------------------------------------------------------------


def clearance_height(config: MachineConfig) -> float:
    """Z the needle parks at after homing."""
    return config.highest_tape_mm() + config.motion.clearance_margin_mm


def travel_height(config: MachineConfig, tape: Tape) -> float:
    """Z used while carrying a component between tape and board."""
    return (
        tape.height
        + config.board.thickness_mm
        + config.motion.hover_clearance_mm
    )


def relative_angle(part_angle: float, tape_angle: float) -> float:
    """Rotation still needed at placement, in degrees within ``[0, 360)``.

    Same value as ``(part_angle - tape_angle + 360) mod 360``.
    """
    return normalize_angle(part_angle - tape_angle)


def pickup_angle(config: MachineConfig, tape: Tape) -> float:
    """Nozzle ``E`` position when picking from ``tape``."""
    return normalize_angle(tape.angle) * config.rotation.angle_factor


def place_angle(config: MachineConfig, part: Part, tape: Tape) -> float:
    """Nozzle ``E`` position when placing ``part`` picked from ``tape``."""
    return (
        relative_angle(part.angle, tape.angle)
        * config.rotation.angle_factor
    )


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def setup_block(config: MachineConfig, comment: str) -> Block:
    """One-time homing and mode setup, ending at the clearance height."""
    return Block(
        kind=BlockKind.SETUP,
        commands=(
            Comment(comment),
            Home(("X", "Y"), note="Home (x/y) - needle over free space"),
            Home(("Z",), note="Now it is safe to home z"),
            SetUnitsMM(note="set to mm"),
            SelectTool(
                config.rotation.tool_index,
                note=(
                    f"Use E{config.rotation.tool_index} extruder, "
                    f"our 'A' axis."
                ),
            ),
            AllowColdExtrusion(
                note=(
                    "cold extrusion override - because it is not "
                    "actually an extruder."
                ),
            ),
            AbsolutePositioning(note="Use absolute positions in general."),
            SetAxisPosition(0.0, note="'home' E axis"),
            LinearMove(
                clearance_height(config),
                z_precision=1,
                e=0.0,
                note="Move needle out of way",
            ),
        ),
    )


def pick_block(
    config: MachineConfig, part: Part, tape: Tape, supply: Position,
) -> Block:
    """Pick ``part`` from ``tape`` at the already-taken ``supply`` position.

    Parameters
    ----------
    config : MachineConfig
        Machine configuration.
    part : Part
        Part being picked (identity only).
    tape : Tape
        Tape the component comes from (height and angle).
    supply : Position
        Global position returned by ``tape.next_position()``.
    """
    m = config.motion
    a = config.actuators
    return Block(
        kind=BlockKind.PICK,
        commands=(
            Comment(f"-- Pick {part.print_name}", level=2),
            RapidMove(
                supply.x,
                supply.y,
                tape.height + m.hover_clearance_mm,
                e=pickup_angle(config, tape),
                feed_mm_s=m.to_tape_speed_mm_s,
                note="Move over component to pick.",
            ),
            LinearMove(
                tape.height,
                z_precision=2,
                feed_mm_s=m.descend_feed_mm_s,
                note="move down on tape.",
            ),
            Dwell(note="flush buffer"),
            SetPin(a.vacuum_pin, a.pin_on_value, note="turn on suckage"),
            LinearMove(
                travel_height(config, tape),
                z_precision=3,
                note="Move up a bit for travelling",
            ),
        ),
    )


def place_block(config: MachineConfig, part: Part, tape: Tape) -> Block:
    """Place ``part`` (held on the needle) at its board position."""
    m = config.motion
    a = config.actuators
    target_x, target_y = board_to_global(config.board.origin, part.pos)
    travel = travel_height(config, tape)
    return Block(
        kind=BlockKind.PLACE,
        commands=(
            Comment(f"-- Place {part.print_name}", level=2),
            RapidMove(
                target_x,
                target_y,
                travel,
                e=place_angle(config, part, tape),
                feed_mm_s=m.to_board_speed_mm_s,
                note="Move component to place on board.",
            ),
            LinearMove(
                tape.height + config.board.thickness_mm - m.tape_thickness_mm,
                z_precision=3,
                feed_mm_s=m.descend_feed_mm_s,
                note="move down over board thickness.",
            ),
            Dwell(note="flush buffer."),
            SetPin(a.vacuum_pin, 0, note="turn off suckage"),
            Dwell(note="flush buffer."),
            SetPin(a.release_pin, a.pin_on_value, note="blow"),
            Dwell(
                a.release_pulse_ms,
                note=f".. for {a.release_pulse_ms:g}ms",
            ),
            SetPin(a.release_pin, 0, note="done."),
            LinearMove(travel, z_precision=2, note="Move up"),
        ),
    )


def dispense_blocks(
    config: MachineConfig, part: Part, pad: Pad,
) -> tuple[Block, Block]:
    """Move over ``pad`` and dispense paste sized by its area.

    Returns
    -------
    tuple[Block, Block]
        ``(dispense_move, dispense_paste)``
    """
    d = config.dispense
    top = config.board.top_mm
    x, y = pad_to_global(config.board.origin, part, pad)
    area = pad.area
    move = Block(
        kind=BlockKind.DISPENSE_MOVE,
        commands=(
            Comment(
                f"-- component {part.component_name}, pad {pad.name}",
                level=2,
            ),
            RapidMove(x, y, top + d.hover_above_mm, note="move there."),
        ),
    )
    paste = Block(
        kind=BlockKind.DISPENSE_PASTE,
        commands=(
            LinearMove(
                top + d.dispense_above_mm,
                z_precision=2,
                note="Go down to dispense",
            ),
            DispenserOn(note="switch on fan (=solenoid)"),
            Dwell(
                d.dwell_ms(area),
                precision=1,
                note=f"Wait time dependent on area {area:.2f} mm^2",
            ),
            DispenserOff(note="switch off solenoid"),
            LinearMove(
                top + d.separation_above_mm,
                z_precision=2,
                note="high above to have paste separated",
            ),
        ),
    )
    return move, paste


def shutdown_block() -> Block:
    """Home X/Y (Z stays clear) and release the motors."""
    return Block(
        kind=BlockKind.SHUTDOWN,
        commands=(
            Home(("X", "Y"), note="Home x/y, but leave z clear"),
            DisableMotors(note="stop motors"),
        ),
    )
