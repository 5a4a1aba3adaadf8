"""
Unit tests for stagbc/config/io.py

Tests loading, saving and validating YAML boundary-condition files.
"""

import pytest
import yaml

from stagbc.config import BCConfig, load_bc_config, save_bc_config, validate_yaml_config
from stagbc.utils.exceptions import BCConfigurationError

SETUP = """
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


@pytest.fixture
def setup_file(temp_dir):
    path = temp_dir / "bc.yaml"
    path.write_text(SETUP)
    return path


class TestLoad:
    def test_load(self, setup_file):
        config = load_bc_config(setup_file)

        assert config.background.exx.delims == [2.0]
        assert config.window.face == "Left"
        assert config.active_noslip_faces() == ["bottom"]
        assert config.temperature.bottom.values == [1300.0]

    def test_missing_file(self, temp_dir):
        with pytest.raises(FileNotFoundError, match="not found"):
            load_bc_config(temp_dir / "missing.yaml")

    def test_invalid_yaml(self, temp_dir):
        path = temp_dir / "broken.yaml"
        path.write_text("window: [unclosed\n")

        with pytest.raises(yaml.YAMLError, match="Invalid YAML syntax"):
            load_bc_config(path)

    def test_empty_file(self, temp_dir):
        path = temp_dir / "empty.yaml"
        path.write_text("")

        assert load_bc_config(path) == BCConfig()

    def test_validation_error(self, temp_dir):
        path = temp_dir / "bad.yaml"
        path.write_text("boxes:\n  - {center: [0, 0, 0], width: [1, -1, 1], vx: 1.0}\n")

        with pytest.raises(BCConfigurationError, match="boxes.0.width") as excinfo:
            load_bc_config(path)
        assert excinfo.value.parameter_name == "boxes.0.width"


class TestSave:
    def test_round_trip(self, setup_file, temp_dir):
        config = load_bc_config(setup_file)
        out = temp_dir / "out" / "bc.yaml"

        save_bc_config(config, out)

        assert load_bc_config(out) == config

    def test_none_fields_omitted(self, temp_dir):
        out = temp_dir / "bc.yaml"
        save_bc_config(BCConfig(open_top=True), out)

        data = yaml.safe_load(out.read_text())
        assert data["open_top"] is True
        assert "window" not in data


class TestValidate:
    def test_valid(self, setup_file):
        assert validate_yaml_config(setup_file) == (True, "Configuration is valid")

    def test_missing(self, temp_dir):
        is_valid, message = validate_yaml_config(temp_dir / "missing.yaml")

        assert not is_valid
        assert "not found" in message

    def test_invalid(self, temp_dir):
        path = temp_dir / "bad.yaml"
        path.write_text("open_top: true\nnoslip: [false, false, false, false, false, true]\n")

        is_valid, message = validate_yaml_config(path)
        assert not is_valid
        assert message.startswith("Validation error")
