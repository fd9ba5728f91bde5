"""
Statistical helpers for comparing an AI against its population.
"""

from collections.abc import Sequence

import numpy as np

from sparkstats.core.utils import round_int


def calculate_percentile(value: float, all_values: Sequence[float]) -> int:
    """
    Percentile rank of a value within a population.

    Ties count half, so a value equal to every member ranks at 50.

    Args:
        value: Value to rank
        all_values: Population values (may include value itself)

    Returns:
        Whole-number percentile 0-100 (50 for an empty population)
    """
    if not all_values:
        return 50
    below = sum(1 for v in all_values if v < value)
    equal = sum(1 for v in all_values if v == value)
    return round_int((below + equal / 2) / len(all_values) * 100)


def calculate_mean(values: Sequence[float]) -> float:
    if len(values) == 0:
        return 0.0
    return float(np.mean(values))


def normalize_to_scale(value: float, low: float, high: float) -> int:
    """
    Place a value on 0-100 relative to a [low, high] range.

    A flat range gives 50; values outside the range clamp to 0 or 100.
    """
    if high == low:
        return 50
    if value <= low:
        return 0
    if value >= high:
        return 100
    return round_int((value - low) / (high - low) * 100)


def get_percentile_label(percentile: float) -> str:
    if percentile >= 90:
        return "Elite"
    if percentile >= 75:
        return "Strong"
    if percentile >= 60:
        return "Above Average"
    if percentile >= 40:
        return "Average"
    if percentile >= 25:
        return "Below Average"
    return "Weak"


def get_percentile_comparison(percentile: float) -> str:
    if percentile >= 85:
        return "Much higher than average"
    if percentile >= 65:
        return "Above average"
    if percentile >= 35:
        return "Average"
    if percentile >= 15:
        return "Below average"
    return "Much lower than average"
