#!/usr/bin/env python3
"""
COLLADA Module Logging

Provides a package-wide logger plus per-component child loggers.
Uses Python's standard logging module for consistency.
"""

import logging
import sys


# Create the main COLLADA logger
logger = logging.getLogger('collada_module')
logger.setLevel(logging.INFO)

# Prevent duplicate handlers if module is imported multiple times
if not logger.handlers:
    # Create console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG)

    # Create formatter
    formatter = logging.Formatter(
        '%(name)s - %(levelname)s - %(message)s'
    )
    console_handler.setFormatter(formatter)

    # Add handler to logger
    logger.addHandler(console_handler)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a specific COLLADA module component.

    Args:
        name: Component name (e.g., 'handler', 'reader')

    Returns:
        Logger instance for the component
    """
    return logging.getLogger(f'collada_module.{name}')


def set_log_level(level: int):
    """
    Set the log level for the COLLADA module.

    Args:
        level: Logging level (e.g., logging.DEBUG, logging.INFO, logging.WARNING)
    """
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)
