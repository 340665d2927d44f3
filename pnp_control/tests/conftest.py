"""Shared fixtures for pnp_control tests.

The in-code machine uses round numbers (angle factor 1.0, board 1 mm
thick on a bed at Z=5) so expected G-code values can be read off
directly.
"""

from __future__ import annotations

from typing import Any

import pytest

from pnp_control.board.models import Dimension, Pad, Part, Position
from pnp_control.configs.loader import MachineConfig, parse_config
from pnp_control.gcode.machine import GCodeMachine
from pnp_control.gcode.sink import BlockRecorder


@pytest.fixture()
def machine_data() -> dict[str, Any]:
    """Raw configuration mapping, same layout as ``machine.yaml``."""
    return {
        "board": {
            "top_mm": 6.0,
            "bed_level_mm": 5.0,
            "origin_mm": [10.0, 20.0],
        },
        "motion": {
            "to_tape_speed_mm_s": 1000.0,
            "to_board_speed_mm_s": 100.0,
            "descend_feed_mm_s": 66.6667,
            "hover_clearance_mm": 10.0,
            "clearance_margin_mm": 10.0,
            "tape_thickness_mm": 0.0,
        },
        "rotation": {"units_per_turn": 360.0, "tool_index": 1},
        "actuators": {
            "vacuum_pin": 6,
            "release_pin": 8,
            "release_pulse_ms": 40,
            "pin_on_value": 255,
        },
        "dispense": {
            "init_ms": 30.0,
            "area_ms": 20.0,
            "hover_above_mm": 2.0,
            "dispense_above_mm": 0.3,
            "separation_above_mm": 5.0,
        },
        "tapes": {
            "0805@10k": {
                "first_mm": [100.0, 50.0],
                "spacing_mm": [4.0, 0.0],
                "count": 2,
                "height_mm": 5.0,
                "angle_deg": 350.0,
            },
            "SOT-23@BSS138": {
                "first_mm": [100.0, 70.0],
                "spacing_mm": [0.0, 4.0],
                "count": 1,
                "height_mm": 7.5,
                "angle_deg": 0.0,
            },
        },
    }


@pytest.fixture()
def config(machine_data: dict[str, Any]) -> MachineConfig:
    """Fresh configuration (fresh tape cursors) for every test."""
    return parse_config(machine_data)


@pytest.fixture()
def recorder() -> BlockRecorder:
    return BlockRecorder()


@pytest.fixture()
def machine(config: MachineConfig, recorder: BlockRecorder) -> GCodeMachine:
    """Machine already initialized against ``recorder``."""
    m = GCodeMachine()
    m.init(recorder, config, "test run", Dimension(50.0, 30.0))
    return m


@pytest.fixture()
def resistor() -> Part:
    return Part(
        component_name="R1",
        footprint="0805",
        value="10k",
        pos=Position(12.5, 7.0),
        angle=30.0,
        pads=(
            Pad("1", Position(-1.0, 0.0), Dimension(1.0, 1.5)),
            Pad("2", Position(1.0, 0.0), Dimension(1.0, 1.5)),
        ),
    )


@pytest.fixture()
def transistor() -> Part:
    return Part(
        component_name="Q1",
        footprint="SOT-23",
        value="BSS138",
        pos=Position(30.0, 15.0),
        angle=-90.0,
    )
