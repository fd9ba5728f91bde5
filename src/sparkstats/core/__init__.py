"""
SparkStats Core - Foundation modules for match aggregation.

This module contains the fundamental components:
- constants: Strategy categories, field mappings, and fixed scoring weights
- config: Application configuration management
- utils: Rounding, numeric coercion, and timing helpers
- schemas: JSON contracts for uploaded match data
"""

from sparkstats.core.constants import (
    ACTION_COUNTER_FIELDS,
    BEHAVIOR_COMPOSITE_WEIGHTS,
    BUILD_COST_CATEGORIES,
    CHARACTER_UNIVERSE_SIZE,
    COMBAT_SCORE_WEIGHTS,
    FALLBACK_BATTLE_SECONDS,
    MATCH_COUNTER_FIELDS,
    Confidence,
    StrategyType,
)
from sparkstats.core.schemas import (
    BuildComposition,
    BuildCostItem,
    CharacterAggregateDict,
    EquippedCapsule,
    MatchRecord,
)

__all__ = [
    # Enums
    "Confidence",
    "StrategyType",
    # Constants
    "ACTION_COUNTER_FIELDS",
    "BEHAVIOR_COMPOSITE_WEIGHTS",
    "BUILD_COST_CATEGORIES",
    "CHARACTER_UNIVERSE_SIZE",
    "COMBAT_SCORE_WEIGHTS",
    "FALLBACK_BATTLE_SECONDS",
    "MATCH_COUNTER_FIELDS",
    # Schemas (data contracts)
    "BuildComposition",
    "BuildCostItem",
    "CharacterAggregateDict",
    "EquippedCapsule",
    "MatchRecord",
]
