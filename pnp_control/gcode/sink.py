"""Output sinks -- where encoded blocks go.

Every encoder call receives its sink explicitly.  A sink is append-only
and preserves emission order: the controller executes commands in the
order they are written.

``GCodeWriter``
    Serializes each block to a text stream as it arrives (stdout, an
    open file, a ``StringIO``).
``BlockRecorder``
    Keeps the structured blocks, for tests and for callers that want to
    inspect or post-process the program before writing it.
"""

from __future__ import annotations

import logging
from typing import Protocol, TextIO

from pnp_control.gcode.serializer import (
    format_block,
    needs_separator,
    render_blocks,
)
from pnp_control.job_ir.commands import Block, BlockKind

logger = logging.getLogger(__name__)


class BlockSink(Protocol):
    """Anything that accepts blocks in emission order."""

    def emit(self, block: Block) -> None:
        ...


class GCodeWriter:
    """Serialize blocks to a text stream.

    Parameters
    ----------
    stream : TextIO
        Destination.  Not closed by the writer.
    """

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream
        self._previous: Block | None = None
        self._lines_written = 0

    @property
    def lines_written(self) -> int:
        """Number of G-code lines written so far (separators excluded)."""
        return self._lines_written

    def emit(self, block: Block) -> None:
        lines = format_block(block)
        if needs_separator(self._previous, block):
            self._stream.write("\n")
        for line in lines:
            self._stream.write(line + "\n")
        self._lines_written += len(lines)
        self._previous = block
        logger.debug("Wrote %s block (%d lines)", block.kind.value, len(lines))


class BlockRecorder:
    """Collect blocks in memory."""

    def __init__(self) -> None:
        self.blocks: list[Block] = []

    def emit(self, block: Block) -> None:
        self.blocks.append(block)

    def of_kind(self, kind: BlockKind) -> list[Block]:
        """Recorded blocks of one kind, in emission order."""
        return [b for b in self.blocks if b.kind is kind]

    def text(self) -> str:
        """The recorded program as G-code text."""
        return render_blocks(self.blocks)

    def lines(self) -> list[str]:
        """The recorded program as G-code lines."""
        return self.text().splitlines()
