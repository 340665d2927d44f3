"""GCodeMachine -- the encoder entry points and their call-order contract.

Lifecycle::

    UNINITIALIZED --init()--> INITIALIZED --pick/place/dispense--> OPERATING
                                  |                                   |
                                  +---------- finish() ---------------+
                                                                      v
                                                                  FINISHED

Out-of-contract calls (encoding before ``init()``, anything after
``finish()``, a second ``init()``) raise ``MachineStateError``.

Every encoder receives the output sink explicitly.  Blocks are emitted
in call order; a call emits at most the blocks it documents and nothing
on a skip.

Failure kinds:
    - Missing configuration at ``init()`` is fatal: ``ConfigError`` is
      raised and nothing is emitted.
    - An exhausted tape during ``pick_part()`` is recoverable: a warning
      names the component, nothing is emitted, the run continues.
"""

from __future__ import annotations

import logging
from enum import Enum, auto

from pnp_control.board.models import Dimension, Pad, Part
from pnp_control.configs.loader import ConfigError, MachineConfig
from pnp_control.gcode.blocks import (
    clearance_height,
    dispense_blocks,
    pick_block,
    place_block,
    setup_block,
    shutdown_block,
)
from pnp_control.gcode.serializer import GCodeError
from pnp_control.gcode.sink import BlockSink
from pnp_control.tapes.tape import Tape, TapeExhaustedError

logger = logging.getLogger(__name__)


class MachineStateError(GCodeError):
    """Raised when an encoder is called outside its allowed state."""

    pass


class MachineState(Enum):
    """Position of the machine in its init -> operate -> finish lifecycle."""

    UNINITIALIZED = auto()
    INITIALIZED = auto()
    OPERATING = auto()
    FINISHED = auto()


class GCodeMachine:
    """Encode pick, place and dispense operations as G-code blocks.

    The configuration is supplied once to ``init()`` and only read
    afterwards.  Tape cursors are advanced through
    ``Tape.next_position()`` by ``pick_part()`` and nowhere else.
    """

    def __init__(self) -> None:
        self._cfg: MachineConfig | None = None
        self._state = MachineState.UNINITIALIZED
        self._board_dim: Dimension | None = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> MachineState:
        return self._state

    @property
    def config(self) -> MachineConfig | None:
        return self._cfg

    @property
    def board_dimension(self) -> Dimension | None:
        """Board size given to ``init()`` (kept for callers, unused here)."""
        return self._board_dim

    def _require_operable(self, operation: str) -> MachineConfig:
        if self._state is MachineState.UNINITIALIZED:
            raise MachineStateError(f"{operation} called before init()")
        if self._state is MachineState.FINISHED:
            raise MachineStateError(f"{operation} called after finish()")
        assert self._cfg is not None
        return self._cfg

    # ------------------------------------------------------------------
    # Encoders
    # ------------------------------------------------------------------

    def init(
        self,
        sink: BlockSink,
        config: MachineConfig | None,
        comment: str,
        dim: Dimension | None = None,
    ) -> None:
        """Store the configuration and emit the setup block.

        Parameters
        ----------
        sink : BlockSink
            Output.
        config : MachineConfig | None
            Machine configuration.  Required.
        comment : str
            Free text written as the first line of the program.
        dim : Dimension | None
            Board size; passed through, not used for encoding.

        Raises
        ------
        ConfigError
            If ``config`` is ``None``.  Nothing is emitted.
        MachineStateError
            If the machine was already initialized.
        """
        if self._state is not MachineState.UNINITIALIZED:
            raise MachineStateError(
                f"init() called in state {self._state.name}"
            )
        if config is None:
            raise ConfigError("Need configuration")

        self._cfg = config
        self._board_dim = dim
        logger.info("Board-thickness = %.1fmm", config.board.thickness_mm)
        logger.debug("Clearance height = %.1fmm", clearance_height(config))

        sink.emit(setup_block(config, comment))
        self._state = MachineState.INITIALIZED

    def pick_part(
        self, sink: BlockSink, part: Part, tape: Tape | None,
    ) -> bool:
        """Take the next component from ``tape`` onto the needle.

        Returns
        -------
        bool
            ``True`` if a pick block was emitted.  ``False`` when there is
            no tape (silent) or the tape is exhausted (warning logged).
        """
        cfg = self._require_operable("pick_part()")
        if tape is None:
            return False

        try:
            supply = tape.next_position()
        except TapeExhaustedError:
            logger.warning(
                "We are out of components for %s %s",
                part.footprint,
                part.value,
            )
            return False

        sink.emit(pick_block(cfg, part, tape, supply))
        self._state = MachineState.OPERATING
        return True

    def place_part(
        self, sink: BlockSink, part: Part, tape: Tape | None,
    ) -> bool:
        """Put the component held on the needle at ``part``'s position.

        ``tape`` is the tape the component was picked from; ``None`` makes
        this a no-op.

        Returns
        -------
        bool
            ``True`` if a place block was emitted.
        """
        cfg = self._require_operable("place_part()")
        if tape is None:
            return False

        sink.emit(place_block(cfg, part, tape))
        self._state = MachineState.OPERATING
        return True

    def dispense(self, sink: BlockSink, part: Part, pad: Pad) -> None:
        """Dispense paste on one pad of ``part``."""
        cfg = self._require_operable("dispense()")
        move, paste = dispense_blocks(cfg, part, pad)
        sink.emit(move)
        sink.emit(paste)
        self._state = MachineState.OPERATING

    def finish(self, sink: BlockSink) -> None:
        """Emit the shutdown block.  No encoder may be called afterwards."""
        self._require_operable("finish()")
        sink.emit(shutdown_block())
        self._state = MachineState.FINISHED
