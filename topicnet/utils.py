"""
General purpose utility functions for the topicnet package.

This module contains clean, side-effect-free helpers used across the codebase:
1. Configuration loading and merging
2. Logging setup and log/print helpers
3. Argument validation shared by several pipeline stages
"""

import copy
import logging
import math
import numbers
from pathlib import Path

import yaml

from .exceptions import InvalidArgument


DEFAULT_CONFIG_PATH = Path(__file__).parent / 'config.yaml'
LOGGER_NAME = 'topicnet'


def load_default_config(config_path=None) -> dict:
    """Load default configuration from YAML file."""
    config_path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
    logger = logging.getLogger(LOGGER_NAME)

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            config = yaml.safe_load(f)
    except FileNotFoundError:
        logger.error(f"Config file not found at {config_path}")
        raise
    except yaml.YAMLError as e:
        logger.error(f"Error parsing config file: {e}")
        raise
    return config or {}


def merge_config(base: dict, overrides: dict = None) -> dict:
    """
    Recursively merge user overrides into a copy of the base configuration.

    Nested dicts are merged key by key, any other value in overrides replaces the base value.
    """
    merged = copy.deepcopy(base)
    for key, value in (overrides or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def setup_logger(level: str = "INFO", name: str = LOGGER_NAME) -> logging.Logger:
    """Setup default logger for topicnet operations."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    try:
        logger.setLevel(getattr(logging, str(level).upper()))
    except AttributeError as e:
        raise InvalidArgument(f"Invalid logging level: {level}") from e
    return logger


def log_print(message: str, level: str = "info", logger: logging.Logger = None, also_print: bool = True):
    """
    Logs and optionally prints a message.

    Parameters:
        message (str): The message to log/print.
        level (str): Logging level: 'debug', 'info', 'warning', 'error', or 'critical'.
        logger (logging.Logger): Logger instance. If None, uses the package logger.
        also_print (bool): Whether to also print to stdout.
    """
    if logger is None:
        logger = logging.getLogger(LOGGER_NAME)

    log_func = getattr(logger, level.lower(), logger.info)
    log_func(message)

    if also_print:
        print(message)


def validate_topic_count(k) -> int:
    """Return k as int if it is a positive integer, raise InvalidArgument otherwise."""
    if isinstance(k, bool) or not isinstance(k, numbers.Integral):
        raise InvalidArgument(f"Topic count must be an integer, got {k!r}")
    if k < 1:
        raise InvalidArgument(f"Topic count must be positive, got {k}")
    return int(k)


def validate_threshold(value, name: str = "min_assoc") -> float:
    """Thresholds are non-negative reals. Values above 1 are legal but cannot be met by a correlation."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real) or math.isnan(value):
        raise InvalidArgument(f"{name} must be a real number, got {value!r}")
    if value < 0:
        raise InvalidArgument(f"{name} must lie in [0, 1], got {value}")
    return float(value)
