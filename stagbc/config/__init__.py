"""
Boundary-condition configuration.

Pydantic models for every rule of the constraint engine plus YAML I/O.

Usage:
    >>> from stagbc.config import BCConfig, load_bc_config
    >>> config = load_bc_config("bc/setup.yaml")
    >>> config = BCConfig(open_top=True, temperature={"top": 0.0, "bottom": 1300.0})
"""

from .core import (
    MAX_INFLOW_PHASES,
    MAX_PATH_POINTS,
    MAX_PERIODS,
    MAX_POLY_POINTS,
    MAX_REGIONS,
    BackgroundStrainConfig,
    BCConfig,
    BoundaryWindowConfig,
    KinematicBlockConfig,
    PlumeConfig,
    PressureBCConfig,
    ScheduleConfig,
    TemperatureBCConfig,
    VelocityBoxConfig,
    VelocityCylinderConfig,
)
from .io import load_bc_config, save_bc_config, validate_yaml_config

__all__ = [
    "MAX_INFLOW_PHASES",
    "MAX_PATH_POINTS",
    "MAX_PERIODS",
    "MAX_POLY_POINTS",
    "MAX_REGIONS",
    "BCConfig",
    "BackgroundStrainConfig",
    "BoundaryWindowConfig",
    "KinematicBlockConfig",
    "PlumeConfig",
    "PressureBCConfig",
    "ScheduleConfig",
    "TemperatureBCConfig",
    "VelocityBoxConfig",
    "VelocityCylinderConfig",
    "load_bc_config",
    "save_bc_config",
    "validate_yaml_config",
]
