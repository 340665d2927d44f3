"""
Jobs module.

Loads board job files and sequences whole pick-and-place or dispense
programs through a ``GCodeMachine``.
"""

from pnp_control.jobs.loader import Job, JobError, load_job, parse_job
from pnp_control.jobs.sequencer import (
    JobSummary,
    encode_dispense,
    encode_pick_place,
)

__all__ = [
    "Job",
    "JobError",
    "JobSummary",
    "encode_dispense",
    "encode_pick_place",
    "load_job",
    "parse_job",
]
