"""Tests for RenderOptions and Marshaller configuration."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from render_redact import (
    ConfigurationError,
    MaskDirection,
    Marshaller,
    RedactMode,
    RenderOptions,
    RenderRedactError,
)
from render_redact.protocol.types import build_options, default_pointer_renderer


class TestRenderOptions:
    """Tests for the RenderOptions model."""

    def test_defaults(self):
        """Test default option values."""
        options = RenderOptions()
        assert options.redact_tag == "redact"
        assert options.replacement_placeholder == "redacted"
        assert options.recursion_placeholder == "recursive"
        assert options.masking_char == "#"
        assert options.masking_length == 4
        assert options.masking_direction is MaskDirection.PREFIX
        assert options.type_formatters == {}
        assert options.pointer_renderer is default_pointer_renderer

    def test_frozen(self):
        """Test options cannot be mutated."""
        options = RenderOptions()
        with pytest.raises(ValidationError):
            options.masking_length = 2

    def test_direction_parsed_from_text(self):
        """Test the masking direction accepts its text value."""
        assert RenderOptions(masking_direction="suffix").masking_direction is MaskDirection.SUFFIX


class TestBuildOptions:
    """Tests for build_options validation."""

    def test_overrides_merge_onto_base(self):
        """Test overrides take precedence over base options."""
        base = RenderOptions(masking_char="*")
        options = build_options(base, masking_length=1)
        assert options.masking_char == "*"
        assert options.masking_length == 1

    def test_mapping_base(self):
        """Test plain mappings are accepted as base options."""
        assert build_options({"redact_tag": "pii"}).redact_tag == "pii"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"redact_tag": ""},
            {"redact_tag": "has space"},
            {"masking_char": ""},
            {"masking_char": "##"},
            {"masking_direction": "middle"},
            {"type_formatters": ["not", "a", "mapping"]},
        ],
    )
    def test_invalid_values(self, overrides):
        """Test invalid values raise ConfigurationError."""
        with pytest.raises(ConfigurationError):
            build_options(**overrides)

    def test_unknown_option(self):
        """Test unknown option names are rejected."""
        with pytest.raises(ConfigurationError, match="mask_everything"):
            build_options(mask_everything=True)

    def test_error_hierarchy(self):
        """Test ConfigurationError is both a library error and a ValueError."""
        assert issubclass(ConfigurationError, RenderRedactError)
        assert issubclass(ConfigurationError, ValueError)


class TestRedactMode:
    """Tests for directive parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("REMOVE", RedactMode.REMOVE),
            ("replace", RedactMode.REPLACE),
            (" Mask ", RedactMode.MASK),
            (RedactMode.MASK, RedactMode.MASK),
            ("HIDE", None),
            (1, None),
            (None, None),
        ],
    )
    def test_parse(self, value, expected):
        """Test directives parse case-insensitively."""
        assert RedactMode.parse(value) is expected


class TestMarshallerOptions:
    """Tests for Marshaller option handling."""

    def test_invalid_options_raise(self):
        """Test the constructor validates options."""
        with pytest.raises(ConfigurationError):
            Marshaller(masking_char="")

    def test_with_options_returns_new_marshaller(self):
        """Test with_options leaves the source marshaller unchanged."""
        marshaller = Marshaller()
        changed = marshaller.with_options(masking_length=2)
        assert changed.options.masking_length == 2
        assert marshaller.options.masking_length == 4

    def test_with_type_formatter_keeps_options(self):
        """Test adding a formatter keeps the other options."""
        marshaller = Marshaller(masking_char="*").with_type_formatter(int, str)
        assert marshaller.options.masking_char == "*"
        assert "int" in marshaller.options.type_formatters

    def test_custom_pointer_renderer(self):
        """Test the pointer renderer writes handle identities."""
        marshaller = Marshaller(pointer_renderer=lambda writer, ident: writer.write("here"))
        assert marshaller.render(len) == "(builtin_function_or_method)(here)"

    def test_default_pointer_renderer(self):
        """Test the default pointer text is a padded hexadecimal address."""

        class Sink:
            text = ""

            def write(self, value):
                self.text += value

        sink = Sink()
        default_pointer_renderer(sink, 255)
        assert sink.text == "0x00000000000000ff"
