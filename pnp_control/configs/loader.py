"""Configuration loader for the pick-and-place encoder.

Loads and validates ``machine.yaml`` into typed, frozen dataclasses.
Board geometry, tape registry, motion speeds, rotation calibration,
actuator pins and dispense timing all come from the config -- nothing is
compiled in.

Feed rates are stored in **mm/s** throughout Python.  Conversion to the
G-code ``F`` parameter (mm/min) happens only at the serialization
boundary.

Usage::

    from pnp_control.configs.loader import load_config
    cfg = load_config()                       # default path
    cfg = load_config("/custom/machine.yaml") # explicit path
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pnp_control.board.models import Part, Position
from pnp_control.tapes.tape import Tape
from pnp_control.utils.fs import load_yaml

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(Exception):
    """Raised when configuration is missing or fails validation."""

    pass


# ---------------------------------------------------------------------------
# Dataclasses -- mirror the YAML structure
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BoardConfig:
    """Board surface heights and origin.

    ``top_mm`` is the Z of the board's top surface, ``bed_level_mm`` the Z
    of the machine bed the board rests on.  ``origin`` is the global
    position of the board-local ``(0, 0)``.
    """

    top_mm: float
    bed_level_mm: float
    origin: Position

    @property
    def thickness_mm(self) -> float:
        """Board thickness (top minus bed level)."""
        return self.top_mm - self.bed_level_mm


@dataclass(frozen=True)
class MotionConfig:
    """Head speeds and clearances.  All feeds in mm/s."""

    to_tape_speed_mm_s: float
    to_board_speed_mm_s: float
    descend_feed_mm_s: float
    hover_clearance_mm: float = 10.0
    clearance_margin_mm: float = 10.0
    tape_thickness_mm: float = 0.0


@dataclass(frozen=True)
class RotationConfig:
    """Rotary nozzle calibration.

    The nozzle is driven through the extruder axis.  ``units_per_turn``
    is the number of ``E`` units for one full nozzle revolution.
    """

    units_per_turn: float
    tool_index: int = 1

    @property
    def angle_factor(self) -> float:
        """``E`` units per degree."""
        return self.units_per_turn / 360.0


@dataclass(frozen=True)
class ActuatorConfig:
    """Output pins for vacuum and release (blow-off) valves."""

    vacuum_pin: int
    release_pin: int
    release_pulse_ms: float = 40.0
    pin_on_value: int = 255


@dataclass(frozen=True)
class DispenseConfig:
    """Paste dispensing: timing model and heights above the board top.

    Dwell per pad is ``init_ms + area_mm2 * area_ms``.
    """

    init_ms: float
    area_ms: float
    hover_above_mm: float = 2.0
    dispense_above_mm: float = 0.3
    separation_above_mm: float = 5.0

    def dwell_ms(self, area_mm2: float) -> float:
        """Solenoid on-time for a pad of ``area_mm2``."""
        return self.init_ms + area_mm2 * self.area_ms


@dataclass(frozen=True)
class MachineConfig:
    """Complete machine configuration loaded from ``machine.yaml``.

    All linear dimensions are in **millimeters**.
    All feed rates are in **mm/s**.

    The tapes themselves are mutable (their cursors advance as components
    are picked); the mapping and every other field are read-only.
    """

    board: BoardConfig
    motion: MotionConfig
    rotation: RotationConfig
    actuators: ActuatorConfig
    dispense: DispenseConfig
    tapes: dict[str, Tape] = dataclasses.field(default_factory=dict)

    # -- Convenience helpers ------------------------------------------------

    def tape_for(self, part: Part) -> Tape | None:
        """Return the tape feeding ``part``, or ``None`` if there is none."""
        return self.tapes.get(part.key)

    def highest_tape_mm(self) -> float:
        """Tallest tape surface, never lower than the board top."""
        highest = self.board.top_mm
        for tape in self.tapes.values():
            highest = max(highest, tape.height)
        return highest

    def with_dispense_timing(
        self,
        init_ms: float | None = None,
        area_ms: float | None = None,
    ) -> MachineConfig:
        """Copy of this config with dispense timing overridden.

        ``None`` keeps the configured value.  Tapes are shared, not copied.

        Raises
        ------
        ConfigError
            If the overridden timing fails validation.
        """
        dispense = dataclasses.replace(
            self.dispense,
            init_ms=self.dispense.init_ms if init_ms is None else init_ms,
            area_ms=self.dispense.area_ms if area_ms is None else area_ms,
        )
        config = dataclasses.replace(self, dispense=dispense)
        _validate_config(config)
        return config


# ---------------------------------------------------------------------------
# Internal parsing helpers
# ---------------------------------------------------------------------------


def _parse_xy(label: str, raw: Any) -> Position:
    """Parse a 2-element ``[x, y]`` list."""
    if not isinstance(raw, (list, tuple)) or len(raw) != 2:
        raise ConfigError(f"{label} must be a 2-element list, got {raw!r}")
    return Position(x=float(raw[0]), y=float(raw[1]))


def _parse_board(data: dict[str, Any]) -> BoardConfig:
    """Parse the ``board`` section."""
    return BoardConfig(
        top_mm=float(data["top_mm"]),
        bed_level_mm=float(data["bed_level_mm"]),
        origin=_parse_xy("board.origin_mm", data.get("origin_mm", [0.0, 0.0])),
    )


def _parse_motion(data: dict[str, Any]) -> MotionConfig:
    """Parse the ``motion`` section."""
    return MotionConfig(
        to_tape_speed_mm_s=float(data["to_tape_speed_mm_s"]),
        to_board_speed_mm_s=float(data["to_board_speed_mm_s"]),
        descend_feed_mm_s=float(data["descend_feed_mm_s"]),
        hover_clearance_mm=float(data.get("hover_clearance_mm", 10.0)),
        clearance_margin_mm=float(data.get("clearance_margin_mm", 10.0)),
        tape_thickness_mm=float(data.get("tape_thickness_mm", 0.0)),
    )


def _parse_rotation(data: dict[str, Any]) -> RotationConfig:
    """Parse the ``rotation`` section."""
    return RotationConfig(
        units_per_turn=float(data["units_per_turn"]),
        tool_index=int(data.get("tool_index", 1)),
    )


def _parse_actuators(data: dict[str, Any]) -> ActuatorConfig:
    """Parse the ``actuators`` section."""
    return ActuatorConfig(
        vacuum_pin=int(data["vacuum_pin"]),
        release_pin=int(data["release_pin"]),
        release_pulse_ms=float(data.get("release_pulse_ms", 40.0)),
        pin_on_value=int(data.get("pin_on_value", 255)),
    )


def _parse_dispense(data: dict[str, Any]) -> DispenseConfig:
    """Parse the ``dispense`` section."""
    return DispenseConfig(
        init_ms=float(data["init_ms"]),
        area_ms=float(data["area_ms"]),
        hover_above_mm=float(data.get("hover_above_mm", 2.0)),
        dispense_above_mm=float(data.get("dispense_above_mm", 0.3)),
        separation_above_mm=float(data.get("separation_above_mm", 5.0)),
    )


def _parse_tape(key: str, data: dict[str, Any]) -> Tape:
    """Parse a single tape entry from the ``tapes`` mapping."""
    if "@" not in key:
        raise ConfigError(
            f"Tape key '{key}' must have the form 'footprint@value'"
        )
    count = int(data["count"])
    if count < 0:
        raise ConfigError(f"Tape '{key}' count must be >= 0, got {count}")
    return Tape(
        first=_parse_xy(f"tapes.{key}.first_mm", data["first_mm"]),
        spacing=_parse_xy(f"tapes.{key}.spacing_mm", data["spacing_mm"]),
        count=count,
        height=float(data["height_mm"]),
        angle=float(data.get("angle_deg", 0.0)),
    )


def _parse_tapes(data: dict[str, Any] | None) -> dict[str, Tape]:
    """Parse the optional ``tapes`` mapping (``footprint@value`` -> tape)."""
    if not data:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"tapes must be a mapping, got {type(data)}")
    return {str(key): _parse_tape(str(key), raw) for key, raw in data.items()}


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def _validate_config(cfg: MachineConfig) -> None:
    """Validate cross-field consistency.

    Raises
    ------
    ConfigError
        On any invalid combination.
    """
    # -- Board sits on the bed ----------------------------------------------
    if cfg.board.bed_level_mm > cfg.board.top_mm:
        raise ConfigError(
            f"board.bed_level_mm ({cfg.board.bed_level_mm}) is above "
            f"board.top_mm ({cfg.board.top_mm})"
        )

    # -- Speeds positive ----------------------------------------------------
    m = cfg.motion
    for name, value in [
        ("to_tape_speed_mm_s", m.to_tape_speed_mm_s),
        ("to_board_speed_mm_s", m.to_board_speed_mm_s),
        ("descend_feed_mm_s", m.descend_feed_mm_s),
    ]:
        if value <= 0:
            raise ConfigError(f"motion.{name} must be > 0, got {value}")

    # -- Clearances non-negative --------------------------------------------
    for name, value in [
        ("hover_clearance_mm", m.hover_clearance_mm),
        ("clearance_margin_mm", m.clearance_margin_mm),
    ]:
        if value < 0:
            raise ConfigError(f"motion.{name} must be >= 0, got {value}")

    # -- Rotation calibration -----------------------------------------------
    if cfg.rotation.units_per_turn <= 0:
        raise ConfigError(
            f"rotation.units_per_turn must be > 0, "
            f"got {cfg.rotation.units_per_turn}"
        )

    # -- Dispense timing ----------------------------------------------------
    d = cfg.dispense
    if d.init_ms < 0 or d.area_ms < 0:
        raise ConfigError(
            f"dispense timing must be >= 0, got init_ms={d.init_ms}, "
            f"area_ms={d.area_ms}"
        )
    if not d.dispense_above_mm <= d.separation_above_mm:
        logger.warning(
            "Droplet separation height (%.2f) is below dispense height "
            "(%.2f); paste may not separate",
            d.separation_above_mm,
            d.dispense_above_mm,
        )

    # -- Actuator pins distinct ---------------------------------------------
    if cfg.actuators.vacuum_pin == cfg.actuators.release_pin:
        raise ConfigError(
            f"actuators.vacuum_pin and release_pin must differ, both are "
            f"{cfg.actuators.vacuum_pin}"
        )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_config(data: dict[str, Any]) -> MachineConfig:
    """Build and validate a configuration from an already-parsed mapping.

    Parameters
    ----------
    data : dict[str, Any]
        Same structure as ``machine.yaml``.

    Returns
    -------
    MachineConfig
        Validated configuration.

    Raises
    ------
    ConfigError
        If any field is missing or fails validation.
    """
    if not isinstance(data, dict):
        raise ConfigError(
            f"Configuration must be a mapping, got {type(data).__name__}"
        )

    try:
        config = MachineConfig(
            board=_parse_board(data["board"]),
            motion=_parse_motion(data["motion"]),
            rotation=_parse_rotation(data["rotation"]),
            actuators=_parse_actuators(data["actuators"]),
            dispense=_parse_dispense(data["dispense"]),
            tapes=_parse_tapes(data.get("tapes")),
        )
    except KeyError as exc:
        raise ConfigError(
            f"Missing required configuration key: {exc}"
        ) from exc
    except (TypeError, ValueError) as exc:
        raise ConfigError(
            f"Invalid configuration value: {exc}"
        ) from exc

    _validate_config(config)
    return config


def load_config(path: str | Path | None = None) -> MachineConfig:
    """Load and validate machine configuration from YAML.

    Parameters
    ----------
    path : str | Path | None
        Path to ``machine.yaml``.  ``None`` loads the default shipped
        alongside this module.

    Returns
    -------
    MachineConfig
        Fully validated configuration object.

    Raises
    ------
    ConfigError
        If any field is missing or fails validation.
    FileNotFoundError
        If *path* does not exist.
    """
    if path is None:
        path = Path(__file__).parent / "machine.yaml"
    else:
        path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    logger.info("Loading configuration from %s", path)

    data: dict[str, Any] = load_yaml(path)
    if data is None:
        raise ConfigError(f"Empty configuration file: {path}")

    config = parse_config(data)
    logger.info(
        "Configuration loaded successfully (%d tape(s))", len(config.tapes)
    )
    return config
