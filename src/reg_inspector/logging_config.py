"""
reg-inspector Logging Configuration

Configurable logging with debug mode support.
"""

import os
import logging
import sys
from pathlib import Path
from typing import Optional


# Check for debug mode
DEBUG_MODE = os.environ.get("REG_INSPECTOR_DEBUG", "").lower() in ("1", "true", "yes")


def setup_logging(
    level: Optional[int] = None,
    log_file: Optional[Path] = None,
    quiet: bool = False
) -> logging.Logger:
    """Set up logging configuration.

    Args:
        level: Logging level (default: DEBUG if REG_INSPECTOR_DEBUG, else WARNING)
        log_file: Optional path to log file
        quiet: If True, suppress console output

    Returns:
        Configured logger
    """
    if level is None:
        level = logging.DEBUG if DEBUG_MODE else logging.WARNING

    logger = logging.getLogger("reg_inspector")
    logger.setLevel(level)

    # Clear existing handlers
    logger.handlers.clear()

    # Console handler; stdout is reserved for command output
    if not quiet:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)

        if DEBUG_MODE:
            console_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
        else:
            console_format = "%(levelname)s: %(message)s"

        console_handler.setFormatter(logging.Formatter(console_format))
        logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_format = "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d: %(message)s"
        file_handler.setFormatter(logging.Formatter(file_format))
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str = "reg_inspector") -> logging.Logger:
    """Get a logger under the reg_inspector namespace.

    Args:
        name: Logger name (will be prefixed with 'reg_inspector.')

    Returns:
        Logger instance
    """
    if not name.startswith("reg_inspector"):
        name = f"reg_inspector.{name}"
    return logging.getLogger(name)


# Environment variable documentation
ENV_VARS = {
    "REG_INSPECTOR_DEBUG": {
        "description": "Enable debug mode with verbose logging",
        "values": ["1", "true", "yes"],
        "default": "false"
    },
    "REG_INSPECTOR_CONFIG": {
        "description": "Path to the YAML configuration file",
        "default": "~/.reg-inspector/config.yaml"
    },
    "REG_INSPECTOR_STORE": {
        "description": "YAML snapshot to use instead of the live registry",
        "default": ""
    },
    "REG_INSPECTOR_TIMEOUT": {
        "description": "Seconds to wait for the flags tool before giving up",
        "default": "none (wait forever)"
    },
}
