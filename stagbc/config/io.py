"""
YAML I/O for boundary-condition configurations.

This module loads and saves ``BCConfig`` from/to YAML files. Loaded data is
validated by the pydantic models; validation failures are reported as
``BCConfigurationError``.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import yaml
from pydantic import ValidationError

from stagbc.utils.exceptions import BCConfigurationError

if TYPE_CHECKING:
    from .core import BCConfig


def _configuration_error(path: Path, error: ValidationError) -> BCConfigurationError:
    first = error.errors()[0]
    parameter = ".".join(str(part) for part in first["loc"]) or "<root>"
    return BCConfigurationError(
        parameter_name=parameter,
        reason=f"{first['msg']} ({error.error_count()} error(s) in {path})",
        provided_value=first.get("input"),
        component="BCConfig",
        suggested_action="Fix the boundary-condition YAML file and reload it",
    )


def load_bc_config(path: str | Path) -> BCConfig:
    """
    Load a boundary-condition configuration from a YAML file.

    Parameters
    ----------
    path : str | Path
        Path to YAML configuration file

    Returns
    -------
    BCConfig
        Validated configuration

    Raises
    ------
    FileNotFoundError
        If the configuration file doesn't exist
    yaml.YAMLError
        If YAML syntax is invalid
    BCConfigurationError
        If the configuration is invalid

    Examples
    --------
    >>> config = load_bc_config("bc/subduction.yaml")
    >>> assembler = ConstraintAssembler.from_config(config, grid)

    YAML Format
    -----------
    background:
      exx: {values: [-1.0e-15, 0.0], delims: [2.0]}
      ref_point: [0.0, 0.0, -100.0]
    window:
      face: Left
      bot: -100.0
      top: -20.0
      velin: 1.0
    noslip: [false, false, false, false, true, false]
    temperature:
      top: 0.0
      bottom: 1300.0
    """
    from .core import BCConfig

    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Boundary-condition file not found: {path}")

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise yaml.YAMLError(f"Invalid YAML syntax in {path}: {e}") from e

    if data is None:
        data = {}

    try:
        return BCConfig.model_validate(data)
    except ValidationError as e:
        raise _configuration_error(path, e) from e


def save_bc_config(config: BCConfig, path: str | Path) -> None:
    """
    Save a boundary-condition configuration to a YAML file.

    Parameters
    ----------
    config : BCConfig
        Configuration to save
    path : str | Path
        Output file path
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    config_dict = config.model_dump(exclude_none=True, mode="json")

    with open(path, "w") as f:
        yaml.dump(config_dict, f, default_flow_style=False, sort_keys=False, indent=2, allow_unicode=True)


def validate_yaml_config(path: str | Path) -> tuple[bool, str]:
    """
    Validate a YAML configuration file.

    Returns
    -------
    tuple[bool, str]
        (is_valid, message)

    Examples
    --------
    >>> is_valid, msg = validate_yaml_config("bc/subduction.yaml")
    >>> if not is_valid:
    ...     print(f"Config invalid: {msg}")
    """
    try:
        load_bc_config(path)
        return True, "Configuration is valid"
    except FileNotFoundError as e:
        return False, str(e)
    except yaml.YAMLError as e:
        return False, f"YAML syntax error: {e}"
    except BCConfigurationError as e:
        return False, f"Validation error: {e}"
