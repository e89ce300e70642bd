"""
Logging utilities for CorteX Map.

All loggers live under the ``cortex_map`` namespace. Messages routinely
carry labels taken from reconnaissance payloads, so console output never
interprets Rich markup.
"""

import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from .exceptions import ConfigurationError, create_error_context

LOGGER_NAME = "cortex_map"
LEVEL_NAMES = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def parse_level(level: str) -> int:
    """Resolve a level name, raising ConfigurationError for unknown names."""
    name = level.strip().upper()
    if name not in LEVEL_NAMES:
        raise ConfigurationError(
            f"Unknown log level: {level}",
            create_error_context(level=level, available=", ".join(LEVEL_NAMES)),
        )
    return getattr(logging, name)


def level_for_flags(verbose: bool = False, quiet: bool = False) -> str:
    """Level for the global CLI flags; ``quiet`` wins over ``verbose``."""
    if quiet:
        return "WARNING"
    if verbose:
        return "DEBUG"
    return "INFO"


def setup_logging(
    level: str = "INFO",
    log_file: Path | None = None,
    use_rich: bool = True,
    module_levels: dict[str, str] | None = None,
) -> logging.Logger:
    """Set up logging configuration.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to log file
        use_rich: Whether to use Rich formatting for console output
        module_levels: Per-module overrides such as ``{"layout": "WARNING"}``,
            names relative to the ``cortex_map`` package

    Returns:
        Configured logger instance

    Raises:
        ConfigurationError: If a level name is unknown
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(parse_level(level))

    # Remove existing handlers to avoid duplicates
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    if use_rich:
        console = Console(stderr=True)
        console_handler: logging.Handler = RichHandler(
            console=console, show_time=True, show_path=False, markup=False
        )
        formatter = logging.Formatter(fmt="%(message)s", datefmt="[%X]")
    else:
        console_handler = logging.StreamHandler(sys.stderr)
        formatter = logging.Formatter(fmt=FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(fmt=FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(file_handler)

    for module, module_level in (module_levels or {}).items():
        get_logger(module).setLevel(parse_level(module_level))

    return logger


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """Get a logger inside the ``cortex_map`` namespace.

    Args:
        name: Logger name, either fully qualified or relative to the package
            (``"export"`` resolves to ``cortex_map.export``)

    Returns:
        Logger instance
    """
    if name != LOGGER_NAME and not name.startswith(LOGGER_NAME + "."):
        name = f"{LOGGER_NAME}.{name}"
    return logging.getLogger(name)
