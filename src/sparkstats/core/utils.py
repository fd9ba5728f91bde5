"""
Utility functions for the SparkStats aggregation engine.

This module provides:
- Half-up rounding matching the dashboard's published numbers
- Tolerant numeric coercion for user-submitted match records
- Performance timing helpers
"""

import logging
import math
import sys
import time
from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

# Type variable for generic decorators
F = TypeVar("F", bound=Callable[..., Any])


def timed(func: F) -> F:
    """
    Decorator to measure and log function execution time at debug level.

    Usage:
        @timed
        def my_function():
            ...
    """

    @wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.perf_counter()
        result = func(*args, **kwargs)
        elapsed = time.perf_counter() - start_time
        logger.debug(f"{func.__name__} completed in {elapsed:.3f}s")
        return result

    return wrapper  # type: ignore


class PerformanceMonitor:
    """
    Context manager for monitoring performance of code blocks.

    Usage:
        with PerformanceMonitor("loading corpus"):
            load_characters(...)
    """

    def __init__(self, operation_name: str, log_level: int = logging.INFO):
        self.operation_name = operation_name
        self.log_level = log_level
        self.start_time: float | None = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        elapsed = time.perf_counter() - (self.start_time or 0)
        if exc_type is not None:
            logger.error(f"{self.operation_name} failed after {elapsed:.3f}s: {exc_val}")
        else:
            logger.log(self.log_level, f"{self.operation_name} completed in {elapsed:.3f}s")
        return False


def round_half_up(value: float, digits: int = 0) -> float:
    """
    Round halves toward positive infinity (2.5 -> 3, -2.5 -> -2).

    Python's round() uses banker's rounding (round(2.5) == 2), which would
    shift published averages by a tenth at every .x5 boundary.

    Args:
        value: Number to round
        digits: Decimal places to keep

    Returns:
        Rounded value (float; callers wanting an int use round_int)
    """
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def round_int(value: float) -> int:
    """Half-up round to a whole number."""
    return int(math.floor(value + 0.5))


def to_number(value: Any) -> float:
    """
    Coerce a match record field to a number.

    Missing, None, boolean-false and non-numeric values count as 0.

    Args:
        value: Raw JSON value

    Returns:
        Numeric value, 0 when the value is unusable
    """
    if value is None or isinstance(value, bool):
        return float(value or 0)
    if isinstance(value, float):
        return value if math.isfinite(value) else 0
    if isinstance(value, int):
        # Integers beyond float range count as unusable
        return value if abs(value) <= sys.float_info.max else 0
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0
    return number if math.isfinite(number) else 0


def clamp(value: float, min_val: float, max_val: float) -> float:
    """
    Clamp a value to a range.

    Args:
        value: Value to clamp
        min_val: Minimum allowed value
        max_val: Maximum allowed value

    Returns:
        Clamped value
    """
    return max(min_val, min(value, max_val))


def format_percentage(value: float, decimals: int = 1) -> str:
    """Format an already-percent value (0-100) as a string."""
    return f"{value:.{decimals}f}%"


def format_signed_percent(value: float) -> str:
    """Format a percent difference with an explicit sign, e.g. '+12%'."""
    rounded = round_int(value)
    return f"+{rounded}%" if value >= 0 else f"{rounded}%"
