"""
SparkStats - AI Strategy Aggregation & Behavioral Insight Engine

Aggregates fighting-game match records per AI opponent strategy, derives
averages and composite scores, normalizes behavior against the AI population
(or a character baseline) and classifies playstyle archetypes.

Usage:
    from sparkstats import compute_ai_strategy_metrics, detect_playstyle_archetype
    from sparkstats import compute_normalized_scores

    metrics = compute_ai_strategy_metrics(characters)
    for ai in metrics.values():
        scores = compute_normalized_scores(ai, metrics)
        archetype = detect_playstyle_archetype(scores)
"""

__version__ = "0.1.0"
__author__ = "SparkStats Contributors"

# Public name -> module that defines it
_LAZY_IMPORTS = {
    "compute_ai_strategy_metrics": "sparkstats.analysis.derivation",
    "calculate_data_quality": "sparkstats.analysis.derivation",
    "compute_normalized_scores": "sparkstats.analysis.normalization",
    "detect_playstyle_archetype": "sparkstats.analysis.archetypes",
    "filter_metrics_by_character": "sparkstats.analysis.character_filter",
    "compute_character_baseline": "sparkstats.analysis.character_filter",
    "generate_behavioral_insights": "sparkstats.analysis.insights",
    "get_top_ai_strategies": "sparkstats.analysis.insights",
    "generate_ai_insights": "sparkstats.analysis.insights",
    "extract_unique_characters": "sparkstats.analysis.insights",
    "categorize_ai_strategy": "sparkstats.analysis.accumulator",
    "CharacterAggregate": "sparkstats.analysis.models",
    "AIStrategyMetrics": "sparkstats.analysis.models",
    "load_characters": "sparkstats.loader",
}


def __getattr__(name):
    """Lazy import so ``import sparkstats`` stays cheap (numpy/pandas load on use)."""
    module_name = _LAZY_IMPORTS.get(name)
    if module_name is None:
        raise AttributeError(f"module 'sparkstats' has no attribute '{name}'")

    import importlib

    return getattr(importlib.import_module(module_name), name)


__all__ = [
    # Version
    "__version__",
    # Engine
    "compute_ai_strategy_metrics",
    "calculate_data_quality",
    "compute_normalized_scores",
    "detect_playstyle_archetype",
    "filter_metrics_by_character",
    "compute_character_baseline",
    "categorize_ai_strategy",
    # Insights
    "generate_behavioral_insights",
    "get_top_ai_strategies",
    "generate_ai_insights",
    "extract_unique_characters",
    # Data
    "CharacterAggregate",
    "AIStrategyMetrics",
    "load_characters",
]
