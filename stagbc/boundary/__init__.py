"""
Boundary-condition constraint engine.

Per step, the rule chain turns the configuration into constraint fields over
the staggered grid; the assembler synchronizes ghost layers, merges the
no-slip two-point constraints and extracts single-point constraint lists.
"""

from .assembler import ConstraintAssembler, assemble_decomposed
from .checkpoint import fixed_cell_path, read_fixed_cells, read_restart, write_fixed_cells, write_restart
from .fields import UNCONSTRAINED, ConstraintField, ConstraintFields, ConstraintPatch, TwoPointPatch, is_free
from .inflow import InflowTemperature, Marker, MarkerInflowOverride
from .rules import StepContext, build_rule_chain, stretch_grid
from .schedule import Schedule
from .spc import (
    Addressing,
    ConstraintSet,
    IndexMode,
    ShiftDirection,
    SPCList,
    apply_spc,
    extract_spc,
    shift_spc,
    translate_indices,
)

__all__ = [
    "UNCONSTRAINED",
    "Addressing",
    "ConstraintAssembler",
    "ConstraintField",
    "ConstraintFields",
    "ConstraintPatch",
    "ConstraintSet",
    "IndexMode",
    "InflowTemperature",
    "Marker",
    "MarkerInflowOverride",
    "SPCList",
    "Schedule",
    "ShiftDirection",
    "StepContext",
    "TwoPointPatch",
    "apply_spc",
    "assemble_decomposed",
    "build_rule_chain",
    "extract_spc",
    "fixed_cell_path",
    "is_free",
    "read_fixed_cells",
    "read_restart",
    "shift_spc",
    "stretch_grid",
    "translate_indices",
    "write_fixed_cells",
    "write_restart",
]
