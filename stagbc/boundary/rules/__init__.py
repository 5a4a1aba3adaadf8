"""
Constraint rules.

``build_rule_chain`` returns the rules enabled by a configuration in their
fixed application order; later rules override earlier ones on shared slots.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .background import BackgroundStrain, BackgroundVelocityRule, StrainRates, stretch_grid
from .base import Rule, StepContext, column_mask, locked_faces
from .blocks import KinematicBlockRule, block_from_config
from .locks import CellLockRule, PhaseLockRule
from .noslip import NoSlipRule
from .plume import PlumeInflow, PlumeInflowRule
from .regions import VelocityBox, VelocityBoxRule, VelocityCylinder, VelocityCylinderRule
from .thermal import PlumeThermal, PressureRule, TemperatureRule
from .window import BoundaryWindow, BoundaryWindowRule, mass_balance_outflow

if TYPE_CHECKING:
    from stagbc.config.core import BCConfig

RULE_ORDER = (
    TemperatureRule,
    PressureRule,
    BackgroundVelocityRule,
    KinematicBlockRule,
    BoundaryWindowRule,
    VelocityBoxRule,
    VelocityCylinderRule,
    PhaseLockRule,
    CellLockRule,
    PlumeInflowRule,
)


def build_rule_chain(config: BCConfig) -> list[Rule]:
    """Rules enabled by ``config`` in application order."""
    chain = []
    for rule_cls in RULE_ORDER:
        rule = rule_cls.from_config(config)
        if rule is not None:
            chain.append(rule)
    return chain


__all__ = [
    "RULE_ORDER",
    "BackgroundStrain",
    "BackgroundVelocityRule",
    "BoundaryWindow",
    "BoundaryWindowRule",
    "CellLockRule",
    "KinematicBlockRule",
    "NoSlipRule",
    "PhaseLockRule",
    "PlumeInflow",
    "PlumeInflowRule",
    "PlumeThermal",
    "PressureRule",
    "Rule",
    "StepContext",
    "StrainRates",
    "TemperatureRule",
    "VelocityBox",
    "VelocityBoxRule",
    "VelocityCylinder",
    "VelocityCylinderRule",
    "block_from_config",
    "build_rule_chain",
    "column_mask",
    "locked_faces",
    "mass_balance_outflow",
    "stretch_grid",
]
