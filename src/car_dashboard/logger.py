"""
Logging configuration for the dashboard.

Provides a package logger configured once from the LOG_LEVEL environment
variable, plus child loggers for individual modules.
"""
import logging
import os
import sys

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logger = logging.getLogger("car_dashboard")
logger.setLevel(LOG_LEVEL)

if not logger.handlers:
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(LOG_LEVEL)

    formatter = logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    console_handler.setFormatter(formatter)

    logger.addHandler(console_handler)

# Streamlit installs its own root handler; keep our records out of it.
logger.propagate = False


def get_logger(name: str = None) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Optional name for the logger (appended to 'car_dashboard')

    Returns:
        Logger instance
    """
    if name:
        return logging.getLogger(f"car_dashboard.{name}")
    return logger
