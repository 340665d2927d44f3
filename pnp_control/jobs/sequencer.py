"""Job sequencer -- drive a ``GCodeMachine`` through a whole board.

Two passes exist, each a complete program (setup ... shutdown):

Pick-and-place
    For every part, pick from its tape and place on the board.  Parts
    whose ``footprint@value`` has no tape are logged and skipped.  A pick
    from an exhausted tape is skipped by the machine; the place call for
    that part still follows, exactly as for any other part.
Dispense
    For every pad of every part, dispense paste.

Parts are processed in job order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from pnp_control.configs.loader import MachineConfig
from pnp_control.gcode.machine import GCodeMachine
from pnp_control.gcode.sink import BlockSink
from pnp_control.jobs.loader import Job

logger = logging.getLogger(__name__)


@dataclass
class JobSummary:
    """What a pass did, for reporting."""

    picked: int = 0
    placed: int = 0
    dispensed_pads: int = 0
    no_tape: list[str] = field(default_factory=list)
    out_of_components: list[str] = field(default_factory=list)

    @property
    def skipped(self) -> int:
        return len(self.no_tape) + len(self.out_of_components)


def encode_pick_place(
    machine: GCodeMachine,
    sink: BlockSink,
    config: MachineConfig,
    job: Job,
) -> JobSummary:
    """Encode the pick-and-place program for ``job``.

    Parameters
    ----------
    machine : GCodeMachine
        Fresh (uninitialized) machine.
    sink : BlockSink
        Output.
    config : MachineConfig
        Configuration whose tapes feed the parts.
    job : Job
        Parts to place.

    Returns
    -------
    JobSummary
        Counts and the names of skipped parts.
    """
    summary = JobSummary()
    machine.init(sink, config, job.comment, job.board)

    for part in job.parts:
        tape = config.tape_for(part)
        if tape is None:
            logger.warning(
                "No tape for %s (%s), not placing", part.component_name,
                part.key,
            )
            summary.no_tape.append(part.component_name)
        elif machine.pick_part(sink, part, tape):
            summary.picked += 1
        else:
            summary.out_of_components.append(part.component_name)

        if machine.place_part(sink, part, tape):
            summary.placed += 1

    machine.finish(sink)
    logger.info(
        "Pick-and-place: %d picked, %d placed, %d without tape, "
        "%d out of components",
        summary.picked,
        summary.placed,
        len(summary.no_tape),
        len(summary.out_of_components),
    )
    return summary


def encode_dispense(
    machine: GCodeMachine,
    sink: BlockSink,
    config: MachineConfig,
    job: Job,
) -> JobSummary:
    """Encode the paste-dispensing program for ``job``."""
    summary = JobSummary()
    machine.init(sink, config, job.comment, job.board)

    for part in job.parts:
        if not part.pads:
            logger.debug("Part %s has no pads", part.component_name)
        for pad in part.pads:
            machine.dispense(sink, part, pad)
            summary.dispensed_pads += 1

    machine.finish(sink)
    logger.info("Dispense: %d pad(s)", summary.dispensed_pads)
    return summary
