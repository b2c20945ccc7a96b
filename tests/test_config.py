"""Tests for option loading from files and the environment."""

from __future__ import annotations

import pytest

from render_redact import ConfigurationError, MaskDirection
from render_redact.config import (
    DEFAULT_CONFIG,
    get_config_file,
    load_options,
    options_from_env,
    options_from_file,
)


class TestEnvironment:
    """Tests for options_from_env."""

    def test_empty_environment(self):
        """Test no variables yields no options."""
        assert options_from_env({}) == {}

    def test_reads_variables(self):
        """Test every supported variable is mapped to its option."""
        environ = {
            "RENDER_REDACT_TAG": " secret ",
            "RENDER_REDACT_REPLACEMENT": "hidden",
            "RENDER_REDACT_RECURSION": "cycle",
            "RENDER_REDACT_MASK_CHAR": "*",
            "RENDER_REDACT_MASK_LENGTH": " -1 ",
            "RENDER_REDACT_MASK_DIRECTION": "SUFFIX",
        }
        assert options_from_env(environ) == {
            "redact_tag": "secret",
            "replacement_placeholder": "hidden",
            "recursion_placeholder": "cycle",
            "masking_char": "*",
            "masking_length": -1,
            "masking_direction": "suffix",
        }

    def test_blank_variables_ignored(self):
        """Test empty variables are treated as unset."""
        assert options_from_env({"RENDER_REDACT_TAG": ""}) == {}

    def test_space_mask_char_kept(self):
        """Test a single space is a valid masking character."""
        assert options_from_env({"RENDER_REDACT_MASK_CHAR": " "}) == {"masking_char": " "}

    def test_invalid_mask_length(self):
        """Test a non-integer length is a configuration error."""
        with pytest.raises(ConfigurationError, match="RENDER_REDACT_MASK_LENGTH"):
            options_from_env({"RENDER_REDACT_MASK_LENGTH": "four"})

    def test_reads_process_environment(self, monkeypatch):
        """Test os.environ is used by default."""
        monkeypatch.setenv("RENDER_REDACT_REPLACEMENT", "gone")
        assert options_from_env() == {"replacement_placeholder": "gone"}


class TestConfigFile:
    """Tests for options_from_file."""

    def test_missing_file(self, tmp_path):
        """Test a missing file yields no options."""
        assert options_from_file(tmp_path / "absent.yaml") == {}

    def test_default_location(self, tmp_path):
        """Test the default file lives under the home directory."""
        assert get_config_file() == tmp_path / ".config" / "render-redact" / "config.yaml"

    def test_default_config_parses(self, tmp_path):
        """Test the generated configuration template is valid."""
        path = tmp_path / "config.yaml"
        path.write_text(DEFAULT_CONFIG)
        options = options_from_file(path)
        assert options["masking_char"] == "#"
        assert options["masking_length"] == 4
        assert load_options(path, environ={}).masking_direction is MaskDirection.PREFIX

    def test_empty_file(self, tmp_path):
        """Test an empty file yields no options."""
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert options_from_file(path) == {}

    def test_invalid_yaml(self, tmp_path):
        """Test unparseable YAML is a configuration error."""
        path = tmp_path / "config.yaml"
        path.write_text("options: [unclosed")
        with pytest.raises(ConfigurationError):
            options_from_file(path)

    def test_non_mapping_document(self, tmp_path):
        """Test a top-level list is rejected."""
        path = tmp_path / "config.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError):
            options_from_file(path)

    def test_non_mapping_options(self, tmp_path):
        """Test an options section that is not a mapping is rejected."""
        path = tmp_path / "config.yaml"
        path.write_text("options: 3\n")
        with pytest.raises(ConfigurationError):
            options_from_file(path)

    def test_unknown_option(self, tmp_path):
        """Test unknown option names are rejected."""
        path = tmp_path / "config.yaml"
        path.write_text("options:\n  mask_everything: true\n")
        with pytest.raises(ConfigurationError, match="mask_everything"):
            options_from_file(path)


class TestLoadOptions:
    """Tests for load_options precedence."""

    def test_defaults(self, tmp_path):
        """Test defaults apply without a file or variables."""
        options = load_options(tmp_path / "absent.yaml", environ={})
        assert options.redact_tag == "redact"
        assert options.masking_length == 4

    def test_precedence(self, tmp_path):
        """Test overrides beat the environment, which beats the file."""
        path = tmp_path / "config.yaml"
        path.write_text("options:\n  masking_char: '*'\n  masking_length: 2\n  redact_tag: file\n")
        environ = {"RENDER_REDACT_MASK_LENGTH": "3", "RENDER_REDACT_TAG": "env"}
        options = load_options(path, environ=environ, redact_tag="explicit", masking_char=None)
        assert options.masking_char == "*"
        assert options.masking_length == 3
        assert options.redact_tag == "explicit"

    def test_invalid_value(self, tmp_path):
        """Test invalid values from any source raise ConfigurationError."""
        with pytest.raises(ConfigurationError):
            load_options(tmp_path / "absent.yaml", environ={"RENDER_REDACT_MASK_CHAR": "ab"})

    def test_invalid_direction(self, tmp_path):
        """Test an unknown masking direction is rejected."""
        with pytest.raises(ConfigurationError):
            load_options(tmp_path / "absent.yaml", environ={"RENDER_REDACT_MASK_DIRECTION": "up"})
