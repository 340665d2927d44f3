"""Tests for GCodeMachine.

Validates the init -> operate -> finish contract, the skip behaviour for
missing / exhausted tapes, and the exact G-code of each encoder against
the round-number machine from ``conftest.py``.
"""

from __future__ import annotations

import io
import logging
from typing import Any

import pytest

from pnp_control.board.models import Part
from pnp_control.configs.loader import ConfigError, MachineConfig, parse_config
from pnp_control.gcode import (
    BlockRecorder,
    GCodeMachine,
    GCodeWriter,
    MachineState,
    MachineStateError,
)
from pnp_control.job_ir.commands import BlockKind

SETUP_TEXT = [
    "; test run",
    "G28 X0 Y0  ; Home (x/y) - needle over free space",
    "G28 Z0     ; Now it is safe to home z",
    "G21        ; set to mm",
    "T1         ; Use E1 extruder, our 'A' axis.",
    "M302       ; cold extrusion override - because it is not actually "
    "an extruder.",
    "G90        ; Use absolute positions in general.",
    "G92 E0     ; 'home' E axis",
    "G1 Z17.5 E0 ; Move needle out of way",
]

PICK_TEXT = [
    ";; -- Pick R1 (0805@10k)",
    "G0 F60000 X100.000 Y50.000 Z15.000 E350.000 ; Move over component "
    "to pick.",
    "G1 Z5.00 F4000 ; move down on tape.",
    "G4 ; flush buffer",
    "M42 P6 S255 ; turn on suckage",
    "G1 Z16.000 ; Move up a bit for travelling",
]

PLACE_TEXT = [
    ";; -- Place R1 (0805@10k)",
    "G0 F6000 X22.500 Y27.000 Z16.000 E40.000 ; Move component to place "
    "on board.",
    "G1 Z6.000 F4000 ; move down over board thickness.",
    "G4 ; flush buffer.",
    "M42 P6 S0 ; turn off suckage",
    "G4 ; flush buffer.",
    "M42 P8 S255 ; blow",
    "G4 P40 ; .. for 40ms",
    "M42 P8 S0 ; done.",
    "G1 Z16.00 ; Move up",
]

SHUTDOWN_TEXT = [
    "G28 X0 Y0 ; Home x/y, but leave z clear",
    "M84 ; stop motors",
]


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


class TestLifecycle:
    def test_init_emits_setup(
        self, machine: GCodeMachine, recorder: BlockRecorder,
    ) -> None:
        assert machine.state is MachineState.INITIALIZED
        assert [b.kind for b in recorder.blocks] == [BlockKind.SETUP]
        assert recorder.lines() == SETUP_TEXT

    def test_init_without_config(self, recorder: BlockRecorder) -> None:
        m = GCodeMachine()
        with pytest.raises(ConfigError, match="Need configuration"):
            m.init(recorder, None, "x")
        assert recorder.blocks == []
        assert m.state is MachineState.UNINITIALIZED

    def test_double_init(
        self,
        machine: GCodeMachine,
        recorder: BlockRecorder,
        config: MachineConfig,
    ) -> None:
        with pytest.raises(MachineStateError):
            machine.init(recorder, config, "again")
        assert len(recorder.blocks) == 1

    def test_pick_before_init(
        self,
        recorder: BlockRecorder,
        config: MachineConfig,
        resistor: Part,
    ) -> None:
        m = GCodeMachine()
        with pytest.raises(MachineStateError, match="before init"):
            m.pick_part(recorder, resistor, config.tapes["0805@10k"])
        assert config.tapes["0805@10k"].remaining == 2

    def test_finish_before_init(self, recorder: BlockRecorder) -> None:
        with pytest.raises(MachineStateError):
            GCodeMachine().finish(recorder)

    def test_nothing_after_finish(
        self,
        machine: GCodeMachine,
        recorder: BlockRecorder,
        resistor: Part,
    ) -> None:
        machine.finish(recorder)
        assert machine.state is MachineState.FINISHED
        with pytest.raises(MachineStateError, match="after finish"):
            machine.dispense(recorder, resistor, resistor.pads[0])
        with pytest.raises(MachineStateError):
            machine.finish(recorder)

    def test_operating_after_first_encoder(
        self,
        machine: GCodeMachine,
        recorder: BlockRecorder,
        resistor: Part,
    ) -> None:
        machine.dispense(recorder, resistor, resistor.pads[0])
        assert machine.state is MachineState.OPERATING

    def test_keeps_config_and_dimension(
        self, machine: GCodeMachine, config: MachineConfig,
    ) -> None:
        assert machine.config is config
        assert machine.board_dimension.w == 50.0


# ---------------------------------------------------------------------------
# Pick / place
# ---------------------------------------------------------------------------


class TestPickPlace:
    def test_pick_text(
        self,
        machine: GCodeMachine,
        recorder: BlockRecorder,
        config: MachineConfig,
        resistor: Part,
    ) -> None:
        assert machine.pick_part(recorder, resistor, config.tape_for(resistor))
        assert recorder.lines()[len(SETUP_TEXT) + 1:] == PICK_TEXT

    def test_pick_advances_tape(
        self,
        machine: GCodeMachine,
        recorder: BlockRecorder,
        config: MachineConfig,
        resistor: Part,
    ) -> None:
        tape = config.tape_for(resistor)
        machine.pick_part(recorder, resistor, tape)
        machine.pick_part(recorder, resistor, tape)
        picks = recorder.of_kind(BlockKind.PICK)
        assert picks[1].commands[1].x == pytest.approx(104.0)
        assert tape.remaining == 0

    def test_place_text(
        self,
        machine: GCodeMachine,
        recorder: BlockRecorder,
        config: MachineConfig,
        resistor: Part,
    ) -> None:
        assert machine.place_part(
            recorder, resistor, config.tape_for(resistor),
        )
        assert recorder.lines()[len(SETUP_TEXT) + 1:] == PLACE_TEXT

    def test_no_tape_is_silent_noop(
        self,
        machine: GCodeMachine,
        recorder: BlockRecorder,
        resistor: Part,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        with caplog.at_level(logging.WARNING):
            assert not machine.pick_part(recorder, resistor, None)
            assert not machine.place_part(recorder, resistor, None)
        assert len(recorder.blocks) == 1
        assert not [r for r in caplog.records if r.levelno >= logging.WARNING]

    def test_exhausted_tape_skips_with_warning(
        self,
        machine: GCodeMachine,
        recorder: BlockRecorder,
        config: MachineConfig,
        transistor: Part,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        tape = config.tape_for(transistor)
        assert machine.pick_part(recorder, transistor, tape)
        emitted = len(recorder.blocks)

        with caplog.at_level(logging.WARNING):
            assert not machine.pick_part(recorder, transistor, tape)

        assert len(recorder.blocks) == emitted
        assert "out of components for SOT-23 BSS138" in caplog.text

    def test_exhausted_pick_leaves_rest_unchanged(
        self,
        machine_data: dict[str, Any],
        resistor: Part,
        transistor: Part,
    ) -> None:
        def run(with_failed_pick: bool) -> str:
            cfg = parse_config(machine_data)
            cfg.tapes["SOT-23@BSS138"].next_position()
            rec = BlockRecorder()
            m = GCodeMachine()
            m.init(rec, cfg, "test run")
            if with_failed_pick:
                m.pick_part(rec, transistor, cfg.tape_for(transistor))
            m.pick_part(rec, resistor, cfg.tape_for(resistor))
            m.place_part(rec, resistor, cfg.tape_for(resistor))
            m.finish(rec)
            return rec.text()

        assert run(True) == run(False)

    def test_place_angle_in_range(
        self,
        machine: GCodeMachine,
        recorder: BlockRecorder,
        config: MachineConfig,
        transistor: Part,
    ) -> None:
        machine.place_part(recorder, transistor, config.tape_for(transistor))
        (place,) = recorder.of_kind(BlockKind.PLACE)
        assert place.commands[1].e == pytest.approx(270.0)


# ---------------------------------------------------------------------------
# Dispense
# ---------------------------------------------------------------------------


class TestDispense:
    def test_dispense_text(
        self,
        machine: GCodeMachine,
        recorder: BlockRecorder,
        resistor: Part,
    ) -> None:
        rotated = Part(
            resistor.component_name,
            resistor.footprint,
            resistor.value,
            resistor.pos,
            angle=90.0,
            pads=resistor.pads,
        )
        machine.dispense(recorder, rotated, rotated.pads[1])
        assert recorder.lines()[len(SETUP_TEXT) + 1:] == [
            ";; -- component R1, pad 2",
            "G0 X22.500 Y28.000 Z8.000 ; move there.",
            "G1 Z6.30 ; Go down to dispense",
            "M106 ; switch on fan (=solenoid)",
            "G4 P60.0 ; Wait time dependent on area 1.50 mm^2",
            "M107 ; switch off solenoid",
            "G1 Z11.00 ; high above to have paste separated",
        ]

    def test_emits_move_then_paste(
        self,
        machine: GCodeMachine,
        recorder: BlockRecorder,
        resistor: Part,
    ) -> None:
        for pad in resistor.pads:
            machine.dispense(recorder, resistor, pad)
        assert [b.kind for b in recorder.blocks[1:]] == [
            BlockKind.DISPENSE_MOVE,
            BlockKind.DISPENSE_PASTE,
            BlockKind.DISPENSE_MOVE,
            BlockKind.DISPENSE_PASTE,
        ]

    def test_dispense_does_not_touch_tapes(
        self,
        machine: GCodeMachine,
        recorder: BlockRecorder,
        config: MachineConfig,
        resistor: Part,
    ) -> None:
        machine.dispense(recorder, resistor, resistor.pads[0])
        assert config.tapes["0805@10k"].remaining == 2


# ---------------------------------------------------------------------------
# Finish / full program
# ---------------------------------------------------------------------------


class TestProgram:
    def test_finish_two_instructions(
        self, machine: GCodeMachine, recorder: BlockRecorder,
    ) -> None:
        machine.finish(recorder)
        (shutdown,) = recorder.of_kind(BlockKind.SHUTDOWN)
        assert len(shutdown.instructions) == 2
        assert recorder.lines()[-2:] == SHUTDOWN_TEXT

    def test_writer_matches_recorder(
        self, config: MachineConfig, resistor: Part,
    ) -> None:
        buf = io.StringIO()
        writer = GCodeWriter(buf)
        m = GCodeMachine()
        m.init(writer, config, "test run")
        m.pick_part(writer, resistor, config.tape_for(resistor))
        m.place_part(writer, resistor, config.tape_for(resistor))
        m.finish(writer)

        expected = (
            SETUP_TEXT + [""] + PICK_TEXT + [""] + PLACE_TEXT + [""]
            + SHUTDOWN_TEXT
        )
        assert buf.getvalue() == "\n".join(expected) + "\n"
        assert writer.lines_written == len(expected) - 3
