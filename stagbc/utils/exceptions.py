"""
Exception classes for stagbc with actionable error messages.

Every error raised by the constraint engine is unrecoverable at the point of
detection: configuration inconsistencies, checkpoint I/O mismatches and index
shift protocol misuse all abort the current run with a descriptive message.
"""

from __future__ import annotations

from typing import Any

import numpy as np


class BCError(Exception):
    """
    Base exception for boundary-condition errors with context and suggestions.

    The formatted message contains:
    - The component that detected the problem
    - A clear error description
    - An optional suggested action
    - Optional diagnostic data
    """

    def __init__(
        self,
        message: str,
        component: str | None = None,
        suggested_action: str | None = None,
        error_code: str | None = None,
        diagnostic_data: dict[str, Any] | None = None,
    ):
        self.component = component or "BoundaryConditions"
        self.suggested_action = suggested_action
        self.error_code = error_code
        self.diagnostic_data = diagnostic_data or {}

        full_message = f"[{self.component}] {message}"

        if self.suggested_action:
            full_message += f"\nSuggestion: {self.suggested_action}"

        if self.error_code:
            full_message += f"\nError Code: {self.error_code}"

        if self.diagnostic_data:
            full_message += "\nDiagnostic Information:"
            for key, value in self.diagnostic_data.items():
                full_message += f"\n   - {key}: {value}"

        super().__init__(full_message)


class BCConfigurationError(BCError):
    """Exception raised when the boundary-condition configuration is inconsistent."""

    def __init__(
        self,
        parameter_name: str,
        reason: str,
        provided_value: Any = None,
        component: str | None = None,
        suggested_action: str | None = None,
    ):
        diagnostic_data: dict[str, Any] = {"parameter": parameter_name}
        if provided_value is not None:
            diagnostic_data["provided_value"] = str(provided_value)
            diagnostic_data["provided_type"] = type(provided_value).__name__

        super().__init__(
            message=f"Invalid configuration for '{parameter_name}': {reason}",
            component=component or "BCConfig",
            suggested_action=suggested_action or f"Check {parameter_name} and try again",
            error_code="INVALID_CONFIGURATION",
            diagnostic_data=diagnostic_data,
        )
        self.parameter_name = parameter_name
        self.reason = reason


class CheckpointError(BCError):
    """Exception raised when a persisted cell-flag file is missing or malformed."""

    def __init__(
        self,
        path: str,
        reason: str,
        expected_size: int | None = None,
        actual_size: int | None = None,
    ):
        diagnostic_data: dict[str, Any] = {"path": path}
        if expected_size is not None:
            diagnostic_data["expected_bytes"] = expected_size
        if actual_size is not None:
            diagnostic_data["actual_bytes"] = actual_size

        if actual_size is not None and expected_size is not None:
            suggested_action = "Regenerate the file with the same domain decomposition"
        else:
            suggested_action = "Check the fixed-cell file base name and the number of ranks"

        super().__init__(
            message=f"Cannot read fixed-cell flags: {reason}",
            component="FixedCellStore",
            suggested_action=suggested_action,
            error_code="CHECKPOINT_MISMATCH",
            diagnostic_data=diagnostic_data,
        )
        self.path = path


class IndexShiftError(BCError):
    """Exception raised when SPC indices are shifted twice in the same direction."""

    def __init__(self, direction: str, addressing: str):
        super().__init__(
            message=f"Cannot shift constraint indices {direction}: list is already in {addressing} addressing",
            component="SPCList",
            suggested_action="Shift once to global before solving and once back to local before rebuilding",
            error_code="INDEX_SHIFT_PROTOCOL",
            diagnostic_data={"direction": direction, "current_addressing": addressing},
        )
        self.direction = direction
        self.addressing = addressing


class DimensionMismatchError(BCError):
    """Exception raised when an input array does not match the local grid."""

    def __init__(
        self,
        array_name: str,
        provided_shape: tuple,
        expected_shape: tuple,
        component: str | None = None,
    ):
        diagnostic_data = {
            "array_name": array_name,
            "provided_shape": str(provided_shape),
            "expected_shape": str(expected_shape),
            "dimension_mismatch": _describe_dimension_mismatch(provided_shape, expected_shape),
        }

        super().__init__(
            message=f"Dimension mismatch for {array_name}",
            component=component,
            suggested_action=f"Reshape {array_name} to match the owned sub-domain: {expected_shape}",
            error_code="DIMENSION_MISMATCH",
            diagnostic_data=diagnostic_data,
        )


def _describe_dimension_mismatch(provided_shape: tuple, expected_shape: tuple) -> str:
    """Describe the specific nature of dimension mismatch."""

    if len(provided_shape) != len(expected_shape):
        return f"Wrong number of dimensions: got {len(provided_shape)}, expected {len(expected_shape)}"

    mismatches = []
    for i, (provided, expected) in enumerate(zip(provided_shape, expected_shape, strict=False)):
        if provided != expected:
            mismatches.append(f"axis {i}: got {provided}, expected {expected}")

    return " | ".join(mismatches)


def validate_array_dimensions(
    array: np.ndarray, expected_shape: tuple, array_name: str, component: str | None = None
):
    """Validate that array has expected dimensions."""
    if array.shape != expected_shape:
        raise DimensionMismatchError(
            array_name=array_name,
            provided_shape=array.shape,
            expected_shape=expected_shape,
            component=component,
        )
