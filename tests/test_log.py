"""Tests for htmplx.log — level resolution and handler installation."""

import logging
from collections.abc import Iterator

import pytest

from htmplx.log import ENV_LOGLEVEL, configure_logging, resolve_level


@pytest.fixture
def htmplx_logger() -> Iterator[logging.Logger]:
    logger = logging.getLogger("htmplx")
    handlers, level = list(logger.handlers), logger.level
    yield logger
    logger.handlers[:] = handlers
    logger.setLevel(level)


class TestResolveLevel:
    def test_explicit_name(self) -> None:
        assert resolve_level("debug") == logging.DEBUG
        assert resolve_level(" Warning ") == logging.WARNING

    def test_explicit_number(self) -> None:
        assert resolve_level(logging.ERROR) == logging.ERROR

    def test_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(ENV_LOGLEVEL, "error")
        assert resolve_level() == logging.ERROR

    def test_default_info(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv(ENV_LOGLEVEL, raising=False)
        assert resolve_level() == logging.INFO

    def test_unknown_falls_back(self) -> None:
        assert resolve_level("chatty") == logging.INFO


class TestConfigureLogging:
    def test_sets_level_and_handler(self, htmplx_logger: logging.Logger) -> None:
        logger = configure_logging("debug")
        assert logger is htmplx_logger
        assert logger.level == logging.DEBUG
        assert any(getattr(h, "_htmplx", False) for h in logger.handlers)

    def test_idempotent(self, htmplx_logger: logging.Logger) -> None:
        configure_logging()
        configure_logging()
        assert sum(1 for h in htmplx_logger.handlers if getattr(h, "_htmplx", False)) == 1
