from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("stagbc")
except PackageNotFoundError:
    # package is not installed
    __version__ = "0.0.0-dev"

from .boundary import (
    ConstraintAssembler,
    ConstraintFields,
    ConstraintSet,
    MarkerInflowOverride,
    ShiftDirection,
    StepContext,
    apply_spc,
    assemble_decomposed,
    shift_spc,
)
from .config import BCConfig, load_bc_config, save_bc_config
from .grid import DOFKind, InProcessHalo, StaggeredGrid
from .utils import (
    BCConfigurationError,
    BCError,
    CheckpointError,
    IndexShiftError,
    configure_logging,
    get_logger,
)

__all__ = [
    "BCConfig",
    "BCConfigurationError",
    "BCError",
    "CheckpointError",
    "ConstraintAssembler",
    "ConstraintFields",
    "ConstraintSet",
    "DOFKind",
    "InProcessHalo",
    "IndexShiftError",
    "MarkerInflowOverride",
    "ShiftDirection",
    "StaggeredGrid",
    "StepContext",
    "__version__",
    "apply_spc",
    "assemble_decomposed",
    "configure_logging",
    "get_logger",
    "load_bc_config",
    "save_bc_config",
    "shift_spc",
]
