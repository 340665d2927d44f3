"""Machine configuration loading and validation."""

from pnp_control.configs.loader import (
    ActuatorConfig,
    BoardConfig,
    ConfigError,
    DispenseConfig,
    MachineConfig,
    MotionConfig,
    RotationConfig,
    load_config,
    parse_config,
)

__all__ = [
    "ActuatorConfig",
    "BoardConfig",
    "ConfigError",
    "DispenseConfig",
    "MachineConfig",
    "MotionConfig",
    "RotationConfig",
    "load_config",
    "parse_config",
]
