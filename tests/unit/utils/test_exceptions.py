"""
Unit tests for stagbc/utils/exceptions.py

Tests the formatted messages and diagnostic data of the boundary-condition
exceptions, and the array validation helper.
"""

import pytest

import numpy as np

from stagbc.utils.exceptions import (
    BCConfigurationError,
    BCError,
    CheckpointError,
    DimensionMismatchError,
    IndexShiftError,
    validate_array_dimensions,
)

# =============================================================================
# Test BCError (Base Exception)
# =============================================================================


@pytest.mark.unit
def test_bc_error_basic():
    """Test basic BCError creation."""
    error = BCError("Test error message", component="TestRule")

    assert str(error).startswith("[TestRule] Test error message")
    assert error.component == "TestRule"


@pytest.mark.unit
def test_bc_error_default_component():
    error = BCError("Something failed")
    assert error.component == "BoundaryConditions"


@pytest.mark.unit
def test_bc_error_full_message():
    """Test BCError with suggestion, code and diagnostics."""
    error = BCError(
        "Error occurred",
        suggested_action="Try a smaller step",
        error_code="E42",
        diagnostic_data={"dt": 0.5},
    )

    message = str(error)
    assert "Suggestion: Try a smaller step" in message
    assert "Error Code: E42" in message
    assert "dt: 0.5" in message


# =============================================================================
# Test specific errors
# =============================================================================


@pytest.mark.unit
def test_configuration_error():
    error = BCConfigurationError("window.bot", "must lie below top", provided_value=3.0)

    assert isinstance(error, BCError)
    assert "Invalid configuration for 'window.bot'" in str(error)
    assert error.diagnostic_data["provided_type"] == "float"
    assert error.error_code == "INVALID_CONFIGURATION"


@pytest.mark.unit
def test_checkpoint_error_size_mismatch():
    error = CheckpointError("bc/cdb.00000000.dat", "wrong file size", expected_size=24, actual_size=30)

    assert error.path == "bc/cdb.00000000.dat"
    assert error.diagnostic_data["expected_bytes"] == 24
    assert "same domain decomposition" in str(error)


@pytest.mark.unit
def test_checkpoint_error_missing_file():
    error = CheckpointError("bc/cdb.00000001.dat", "file not found")

    assert "expected_bytes" not in error.diagnostic_data
    assert "number of ranks" in str(error)


@pytest.mark.unit
def test_index_shift_error():
    error = IndexShiftError("local_to_global", "global")

    assert "already in global addressing" in str(error)
    assert error.direction == "local_to_global"
    assert error.error_code == "INDEX_SHIFT_PROTOCOL"


# =============================================================================
# Test dimension validation
# =============================================================================


@pytest.mark.unit
def test_validate_array_dimensions_ok():
    validate_array_dimensions(np.zeros((3, 2, 4)), (3, 2, 4), "flags")


@pytest.mark.unit
def test_validate_array_dimensions_wrong_axis():
    with pytest.raises(DimensionMismatchError) as excinfo:
        validate_array_dimensions(np.zeros((3, 2, 5)), (3, 2, 4), "flags", component="CellLockRule")

    error = excinfo.value
    assert error.component == "CellLockRule"
    assert error.diagnostic_data["dimension_mismatch"] == "axis 2: got 5, expected 4"


@pytest.mark.unit
def test_validate_array_dimensions_wrong_ndim():
    with pytest.raises(DimensionMismatchError, match="Wrong number of dimensions"):
        validate_array_dimensions(np.zeros((3, 2)), (3, 2, 4), "flags")
