"""
Character-Filter Re-Aggregator

Re-derives every AI's metrics from the matches a single character played
against it, and builds that character's baseline across all AIs so the
filtered metrics can be compared against how the character normally plays.
"""

import logging

from sparkstats.analysis.derivation import (
    FinalMetrics,
    GlobalTotals,
    derive_averages,
    derive_metrics,
    percent_rate,
)
from sparkstats.analysis.models import AIStrategyMetrics, CharacterBaseline, StatTotals
from sparkstats.core.config import AnalysisConfig

logger = logging.getLogger(__name__)


def compute_character_baseline(
    ai_metrics: dict[str, AIStrategyMetrics], character_name: str | None
) -> CharacterBaseline | None:
    """
    Average a character's matches across every AI strategy it faced.

    Args:
        ai_metrics: Output of compute_ai_strategy_metrics
        character_name: Character to build the baseline for

    Returns:
        CharacterBaseline, or None when the character has no active matches
    """
    if not character_name or not ai_metrics:
        return None

    totals = StatTotals()
    for metrics in ai_metrics.values():
        slice_ = metrics.raw_characters.get(character_name)
        if slice_ is not None:
            totals.merge(slice_.totals)

    if totals.matches == 0:
        return None

    return CharacterBaseline(
        character_name=character_name,
        total_matches=totals.matches,
        win_count=totals.wins,
        win_rate=percent_rate(totals.wins, totals.matches),
        stats=derive_averages(totals),
    )


def filter_metrics_by_character(
    ai_metrics: dict[str, AIStrategyMetrics],
    character_name: str | None,
    config: AnalysisConfig | None = None,
) -> FinalMetrics:
    """
    Recompute every AI's metrics from one character's matches only.

    AIs the character never played against are omitted. Every derived field
    is replaced; the unfiltered headline numbers are kept in the
    ``unfiltered_*`` fields.

    Args:
        ai_metrics: Output of compute_ai_strategy_metrics
        character_name: Character to filter to (empty returns ai_metrics)
        config: Analysis settings (defaults to AnalysisConfig())

    Returns:
        Mapping of AI name to character-filtered AIStrategyMetrics
    """
    if not character_name:
        return ai_metrics

    config = config or AnalysisConfig()
    baseline = compute_character_baseline(ai_metrics, character_name)

    derived: dict[str, AIStrategyMetrics] = {}
    for name, metrics in ai_metrics.items():
        slice_ = metrics.raw_characters.get(character_name)
        if slice_ is None or slice_.totals.matches == 0:
            continue

        characters = {character_name: slice_}
        filtered = derive_metrics(name, metrics.strategy_type, slice_, characters, config)
        filtered.raw_characters = characters
        filtered.character_filtered = True
        filtered.character_name = character_name
        filtered.character_baseline = baseline

        # Re-filtering already filtered metrics keeps the original shadows
        if metrics.character_filtered:
            shadows = (
                metrics.unfiltered_total_matches,
                metrics.unfiltered_win_rate,
                metrics.unfiltered_win_count,
                metrics.unfiltered_loss_count,
                metrics.unfiltered_performance_score,
            )
        else:
            shadows = (
                metrics.total_matches,
                metrics.win_rate,
                metrics.win_count,
                metrics.loss_count,
                metrics.combat_performance_score,
            )
        (
            filtered.unfiltered_total_matches,
            filtered.unfiltered_win_rate,
            filtered.unfiltered_win_count,
            filtered.unfiltered_loss_count,
            filtered.unfiltered_performance_score,
        ) = shadows
        derived[name] = filtered

    if not derived:
        logger.info(f"No AI strategy has matches for character {character_name!r}")
        return {}

    logger.debug(f"Filtered {len(derived)} AI strategies to {character_name}")
    return GlobalTotals.from_metrics(derived).finalize(derived)
