#!/usr/bin/env python3
"""
Centralized logging configuration for the Jira assistant.
Library modules log through children of the "jira_assist" logger; this module
attaches the handlers once, for the MCP server and the CLI.
"""
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

PACKAGE_LOGGER = "jira_assist"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
SECRET_MARKERS = ("token", "secret", "password", "pat", "authorization")


def setup_logging(
    logger_name: str = PACKAGE_LOGGER,
    log_level: str = "INFO",
    log_file: Path | None = None,
    max_bytes: int = 10485760,  # 10 MB
    backup_count: int = 5,
    console_level: str = "ERROR",  # stdout belongs to the MCP stdio transport
) -> logging.Logger:
    """
    Set up logging for the Jira assistant.

    Args:
        logger_name: Name of the logger
        log_level: File logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to log file
        max_bytes: Max size of log file before rotation
        backup_count: Number of backup log files to keep
        console_level: Console logging level

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(logger_name)
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    logger.handlers.clear()
    logger.propagate = False

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(getattr(logging, console_level.upper(), logging.ERROR))
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s | %(levelname)-8s | %(name)s | %(funcName)s:%(lineno)d | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(file_handler)

    return logger


def mask_config(config: dict[str, Any]) -> dict[str, Any]:
    """Replace secret-looking values with asterisks."""
    masked: dict[str, Any] = {}
    for key, value in config.items():
        if value and any(marker in key.lower() for marker in SECRET_MARKERS):
            masked[key] = "*" * 8
        else:
            masked[key] = value
    return masked


def log_server_startup(logger: logging.Logger, server_name: str, config: dict[str, Any]) -> None:
    """Log startup information with secrets masked."""
    logger.info("=" * 70)
    logger.info(f"{server_name} Starting")
    logger.info("=" * 70)
    logger.info(f"Python Version: {sys.version.split()[0]}")
    logger.info(f"Log Level: {logging.getLevelName(logger.level)}")

    for key, value in mask_config(config).items():
        logger.info(f"{key}: {value}")

    logger.info("=" * 70)


def log_server_shutdown(logger: logging.Logger, server_name: str) -> None:
    """Log shutdown information."""
    logger.info("=" * 70)
    logger.info(f"{server_name} Shutting Down")
    logger.info("=" * 70)
