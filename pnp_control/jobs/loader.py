"""Job file loader.

A job file lists the parts of one board in board-local coordinates::

    comment: "power board rev B"
    board:
      width_mm: 50.0
      height_mm: 30.0
    parts:
      - name: R1
        footprint: "0805"
        value: 10k
        x: 12.5
        y: 7.0
        angle: 90
        pads:
          - {name: "1", x: -0.95, y: 0.0, width: 1.0, height: 1.3}
          - {name: "2", x: 0.95, y: 0.0, width: 1.0, height: 1.3}

``pads`` is only needed for dispensing.  Footprint and value are read as
strings; quote numeric-looking footprints (``"0603"``) so YAML does not
turn them into integers.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pnp_control.board.models import Dimension, Pad, Part, Position
from pnp_control.utils.fs import load_yaml

logger = logging.getLogger(__name__)


class JobError(Exception):
    """Raised when a job file is missing fields or has invalid values."""

    pass


@dataclass(frozen=True)
class Job:
    """Parts of one board, in placement order."""

    parts: tuple[Part, ...]
    board: Dimension = Dimension()
    comment: str = ""

    @property
    def pad_count(self) -> int:
        return sum(len(p.pads) for p in self.parts)


# ---------------------------------------------------------------------------
# Internal parsing helpers
# ---------------------------------------------------------------------------


def _parse_pad(part_name: str, data: dict[str, Any]) -> Pad:
    """Parse one pad entry of a part."""
    if not isinstance(data, dict):
        raise JobError(
            f"Part '{part_name}' pad must be a mapping, got {data!r}"
        )
    return Pad(
        name=str(data["name"]),
        pos=Position(
            x=float(data.get("x", 0.0)), y=float(data.get("y", 0.0)),
        ),
        size=Dimension(w=float(data["width"]), h=float(data["height"])),
    )


def _parse_part(index: int, data: dict[str, Any]) -> Part:
    """Parse one entry of the ``parts`` list."""
    if not isinstance(data, dict):
        raise JobError(f"parts[{index}] must be a mapping, got {data!r}")
    name = str(data["name"])
    pads_raw = data.get("pads") or []
    if not isinstance(pads_raw, list):
        raise JobError(f"Part '{name}' pads must be a list")
    return Part(
        component_name=name,
        footprint=str(data["footprint"]),
        value=str(data["value"]),
        pos=Position(x=float(data["x"]), y=float(data["y"])),
        angle=float(data.get("angle", 0.0)),
        pads=tuple(_parse_pad(name, pad) for pad in pads_raw),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_job(data: dict[str, Any]) -> Job:
    """Build a job from an already-parsed mapping.

    Raises
    ------
    JobError
        If a required field is missing or a value has the wrong type.
    """
    if not isinstance(data, dict):
        raise JobError(f"Job must be a mapping, got {type(data).__name__}")

    try:
        parts_raw = data["parts"]
        if not isinstance(parts_raw, list):
            raise JobError("parts must be a list")
        parts = tuple(
            _parse_part(i, raw) for i, raw in enumerate(parts_raw)
        )
        board_raw = data.get("board") or {}
        if not isinstance(board_raw, dict):
            raise JobError(f"board must be a mapping, got {board_raw!r}")
        board = Dimension(
            w=float(board_raw.get("width_mm", 0.0)),
            h=float(board_raw.get("height_mm", 0.0)),
        )
    except KeyError as exc:
        raise JobError(f"Missing required job key: {exc}") from exc
    except (TypeError, ValueError) as exc:
        raise JobError(f"Invalid job value: {exc}") from exc

    names = [p.component_name for p in parts]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        logger.warning(
            "Duplicate part names in job: %s", ", ".join(duplicates),
        )

    return Job(
        parts=parts,
        board=board,
        comment=str(data.get("comment", "")),
    )


def load_job(path: str | Path) -> Job:
    """Load a job from a YAML file.

    Raises
    ------
    FileNotFoundError
        If *path* does not exist.
    JobError
        If the file is empty or invalid.
    """
    path = Path(path)
    logger.info("Loading job from %s", path)
    data = load_yaml(path)
    if data is None:
        raise JobError(f"Empty job file: {path}")
    job = parse_job(data)
    if not job.comment:
        job = dataclasses.replace(job, comment=path.name)
    logger.info(
        "Job has %d part(s), %d pad(s)", len(job.parts), job.pad_count,
    )
    return job
