"""
Population Normalizer - rescales an AI's behavior to 0-100 dimensions.

Two comparison bases:

- Population: min/max across AIs with enough matches to be comparable
- Character baseline: [0, 2 x baseline], so the baseline itself lands at 50
"""

import logging
from collections.abc import Iterable, Mapping

from sparkstats.analysis.models import (
    AIStrategyMetrics,
    CharacterBaseline,
    NormalizedScores,
    StatAverages,
)
from sparkstats.analysis.stats import normalize_to_scale
from sparkstats.core.config import AnalysisConfig

logger = logging.getLogger(__name__)

# Normalized dimension -> StatAverages attribute it is computed from
SCORE_SOURCES: dict[str, str] = {
    # Core combat
    "damage_dealt": "avg_damage_dealt",
    "dps": "avg_dps",
    "damage_taken_per_sec": "avg_damage_taken_per_second",
    "damage_efficiency": "damage_efficiency",
    "survival_rate": "avg_survival_rate",
    # Offensive actions
    "throws": "avg_throws",
    "vanishing_attacks": "avg_vanishing_attacks",
    "dragon_dash": "avg_dragon_dash_distance",
    "dragon_homing": "avg_dragon_homing",
    "lightning_attacks": "avg_lightning_attacks",
    "energy_blasts": "avg_energy_blasts",
    "s1_blast": "avg_s1_blast",
    "s2_blast": "avg_s2_blast",
    "ult_blast": "avg_ult_blast",
    "ult_hit_rate": "avg_ult_hit_rate",
    # Defensive actions
    "guards": "avg_guards",
    "z_counters": "avg_z_counters",
    "super_counters": "avg_super_counters",
    "revenge_counters": "avg_revenge_counters",
    # Combos
    "max_combo": "avg_max_combo",
    "max_combo_damage": "avg_max_combo_damage",
    "sparking_combo": "avg_sparking_combo_hits",
    # Resources
    "charges": "avg_charges",
    "sparking_count": "avg_sparking_count",
    # Skills
    "exa1_count": "avg_exa1_count",
    "exa2_count": "avg_exa2_count",
}

# Percent dimensions compared on their absolute range in baseline mode
ABSOLUTE_RANGES: dict[str, tuple[float, float]] = {
    "survival_rate": (0.0, 100.0),
    "ult_hit_rate": (0.0, 100.0),
}


def _values(all_ai_metrics: Mapping[str, AIStrategyMetrics] | Iterable[AIStrategyMetrics]):
    if isinstance(all_ai_metrics, Mapping):
        return list(all_ai_metrics.values())
    return list(all_ai_metrics)


def comparable_ais(
    all_ai_metrics: Mapping[str, AIStrategyMetrics] | Iterable[AIStrategyMetrics],
    min_matches: int,
) -> list[AIStrategyMetrics]:
    """AIs with enough matches to join population comparisons."""
    return [m for m in _values(all_ai_metrics) if m.total_matches >= min_matches]


def normalize_against_baseline(stats: StatAverages, baseline: CharacterBaseline) -> NormalizedScores:
    scores = {}
    for dimension, attr in SCORE_SOURCES.items():
        low, high = ABSOLUTE_RANGES.get(dimension, (0.0, getattr(baseline.stats, attr) * 2))
        scores[dimension] = normalize_to_scale(getattr(stats, attr), low, high)
    return NormalizedScores(**scores)


def normalize_against_population(
    stats: StatAverages, population: list[AIStrategyMetrics]
) -> NormalizedScores:
    scores = {}
    for dimension, attr in SCORE_SOURCES.items():
        values = [getattr(m.stats, attr) for m in population]
        scores[dimension] = normalize_to_scale(getattr(stats, attr), min(values), max(values))
    return NormalizedScores(**scores)


def compute_normalized_scores(
    ai_metrics: AIStrategyMetrics,
    all_ai_metrics: Mapping[str, AIStrategyMetrics] | Iterable[AIStrategyMetrics],
    character_baseline: CharacterBaseline | None = None,
    config: AnalysisConfig | None = None,
) -> NormalizedScores | None:
    """
    Rescale an AI's averages onto 26 behavioral dimensions.

    Args:
        ai_metrics: AI to score
        all_ai_metrics: Population it is compared against (population mode)
        character_baseline: When given, compare against the character's
            averages instead of the population
        config: Analysis settings (minimum matches for population members)

    Returns:
        NormalizedScores, or None when no AI in the population has enough
        matches to compare against
    """
    if character_baseline is not None:
        return normalize_against_baseline(ai_metrics.stats, character_baseline)

    config = config or AnalysisConfig()
    population = comparable_ais(all_ai_metrics, config.min_matches_for_comparison)
    if not population:
        logger.debug(
            f"No AI has {config.min_matches_for_comparison}+ matches; "
            f"cannot normalize {ai_metrics.name}"
        )
        return None
    return normalize_against_population(ai_metrics.stats, population)
