"""
Tests for logging setup.
"""

import logging
from collections.abc import Generator
from pathlib import Path

import pytest
from rich.logging import RichHandler

from cortex_map.shared.exceptions import ConfigurationError
from cortex_map.shared.logging import (
    LOGGER_NAME,
    get_logger,
    level_for_flags,
    parse_level,
    setup_logging,
)


@pytest.fixture(autouse=True)
def restore_loggers() -> Generator[None]:
    yield
    root = logging.getLogger(LOGGER_NAME)
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    root.setLevel(logging.NOTSET)
    get_logger("layout").setLevel(logging.NOTSET)


class TestLevels:
    """Tests for level resolution."""

    def test_parse_level(self) -> None:
        """Test level names are case-insensitive."""
        assert parse_level("debug") == logging.DEBUG
        assert parse_level(" Warning ") == logging.WARNING

    def test_unknown_level(self) -> None:
        """Test unknown level names raise ConfigurationError."""
        with pytest.raises(ConfigurationError) as exc_info:
            parse_level("loud")
        assert exc_info.value.context["level"] == "loud"

    @pytest.mark.parametrize(
        ("verbose", "quiet", "expected"),
        [
            (False, False, "INFO"),
            (True, False, "DEBUG"),
            (False, True, "WARNING"),
            (True, True, "WARNING"),
        ],
    )
    def test_level_for_flags(self, verbose: bool, quiet: bool, expected: str) -> None:
        assert level_for_flags(verbose, quiet) == expected


class TestGetLogger:
    """Tests for logger naming."""

    def test_default(self) -> None:
        assert get_logger().name == "cortex_map"

    def test_relative_name(self) -> None:
        """Test relative names resolve inside the package namespace."""
        assert get_logger("export").name == "cortex_map.export"
        assert get_logger("cortex_map.layout.force_engine").name == "cortex_map.layout.force_engine"


class TestSetupLogging:
    """Tests for handler configuration."""

    def test_rich_handler_without_markup(self) -> None:
        """Test console output goes through Rich with markup disabled."""
        logger = setup_logging("INFO")
        handlers = [h for h in logger.handlers if isinstance(h, RichHandler)]
        assert len(handlers) == 1
        assert handlers[0].markup is False
        assert logger.level == logging.INFO

    def test_repeated_setup_replaces_handlers(self) -> None:
        """Test calling setup twice does not duplicate handlers."""
        setup_logging("INFO")
        logger = setup_logging("DEBUG", use_rich=False)
        assert len(logger.handlers) == 1
        assert not isinstance(logger.handlers[0], RichHandler)

    def test_log_file(self, temp_dir: Path) -> None:
        """Test records from package modules reach the log file."""
        log_file = temp_dir / "nested" / "cortex.log"
        setup_logging("INFO", log_file=log_file, use_rich=False)
        logging.getLogger("cortex_map.session").info("graph for [ex.com] rebuilt")
        for handler in logging.getLogger(LOGGER_NAME).handlers:
            handler.flush()
        assert "graph for [ex.com] rebuilt" in log_file.read_text(encoding="utf-8")

    def test_module_levels(self) -> None:
        """Test per-module overrides apply to the named subtree."""
        setup_logging("DEBUG", use_rich=False, module_levels={"layout": "WARNING"})
        assert get_logger("layout").level == logging.WARNING
        assert not logging.getLogger("cortex_map.layout.force_engine").isEnabledFor(logging.INFO)
        assert logging.getLogger("cortex_map.export").isEnabledFor(logging.DEBUG)

    def test_bad_module_level(self) -> None:
        """Test an unknown override level is rejected."""
        with pytest.raises(ConfigurationError):
            setup_logging("INFO", use_rich=False, module_levels={"layout": "chatty"})
