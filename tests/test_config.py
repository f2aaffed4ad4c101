"""Tests for htmplx.config — HandlerConfig defaults and validation."""

import pytest

from htmplx.config import HandlerConfig
from htmplx.errors import ConfigurationError


class TestDefaults:
    def test_template_layout(self) -> None:
        config = HandlerConfig()
        assert config.template_suffix == ".html.tmpl"
        assert config.head_file() == "head.html.tmpl"
        assert config.body_file() == "body.html.tmpl"
        assert config.not_found_marker == "404"

    def test_patterns(self) -> None:
        config = HandlerConfig()
        assert (config.pattern_open, config.pattern_close) == ("{", "}")

    def test_static(self) -> None:
        config = HandlerConfig()
        assert config.sniff_length == 512
        assert config.chunk_size == 64 * 1024

    def test_flags(self) -> None:
        config = HandlerConfig()
        assert config.autoescape is True
        assert config.debug is False


class TestHiddenExtension:
    def test_default(self) -> None:
        assert HandlerConfig().hidden_extension == ".tmpl"

    def test_custom_suffix(self) -> None:
        assert HandlerConfig(template_suffix=".page.j2").hidden_extension == ".j2"

    def test_single_extension(self) -> None:
        assert HandlerConfig(template_suffix=".kida").hidden_extension == ".kida"


class TestValidation:
    def test_frozen(self) -> None:
        config = HandlerConfig()
        with pytest.raises(AttributeError):
            config.debug = True  # type: ignore[misc]

    def test_empty_suffix(self) -> None:
        with pytest.raises(ConfigurationError, match="template_suffix"):
            HandlerConfig(template_suffix="")

    def test_empty_delimiter(self) -> None:
        with pytest.raises(ConfigurationError, match="delimiters"):
            HandlerConfig(pattern_close="")

    @pytest.mark.parametrize("field", ["sniff_length", "chunk_size"])
    def test_non_positive_sizes(self, field: str) -> None:
        with pytest.raises(ConfigurationError, match=field):
            HandlerConfig(**{field: 0})
