"""
SparkStats Analysis - aggregation, normalization and classification.

This module contains:
- accumulator: Single-pass match accumulation per AI strategy
- derivation: Averages, rates, composite scores and usage
- normalization: 0-100 behavioral dimensions
- archetypes: Playstyle archetype classification
- character_filter: Character-filtered re-aggregation and baselines
- insights: Behavioral insight generation
- stats: Percentile and scaling helpers
"""

from sparkstats.analysis.archetypes import detect_playstyle_archetype
from sparkstats.analysis.character_filter import (
    compute_character_baseline,
    filter_metrics_by_character,
)
from sparkstats.analysis.derivation import calculate_data_quality, compute_ai_strategy_metrics
from sparkstats.analysis.insights import (
    extract_unique_characters,
    generate_ai_insights,
    generate_behavioral_insights,
    get_top_ai_strategies,
)
from sparkstats.analysis.models import (
    AIStrategyMetrics,
    ArchetypeMatch,
    ArchetypeResult,
    BehaviorProfile,
    CharacterAggregate,
    CharacterBaseline,
    DataQuality,
    NormalizedScores,
)
from sparkstats.analysis.normalization import compute_normalized_scores

__all__: list[str] = [
    "compute_ai_strategy_metrics",
    "calculate_data_quality",
    "compute_normalized_scores",
    "detect_playstyle_archetype",
    "compute_character_baseline",
    "filter_metrics_by_character",
    "generate_behavioral_insights",
    "get_top_ai_strategies",
    "generate_ai_insights",
    "extract_unique_characters",
    "AIStrategyMetrics",
    "ArchetypeMatch",
    "ArchetypeResult",
    "BehaviorProfile",
    "CharacterAggregate",
    "CharacterBaseline",
    "DataQuality",
    "NormalizedScores",
]
