"""Component supply tapes."""

from pnp_control.tapes.tape import Tape, TapeExhaustedError, tape_key

__all__ = ["Tape", "TapeExhaustedError", "tape_key"]
