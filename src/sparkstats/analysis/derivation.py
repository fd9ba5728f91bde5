"""
Metric Derivation - turns accumulated totals into per-AI metrics.

Runs as three explicit stages:

- PerAITotals: accumulator output, AIs with zero active matches dropped
- GlobalTotals: corpus-wide values every AI is measured against
  (total match count, composite behavior ranges)
- FinalMetrics: name -> AIStrategyMetrics with usage rate and behavior
  profile filled in

The same formulas serve the unfiltered per-AI view and the
character-filtered view (see character_filter.py).
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from sparkstats.analysis.accumulator import accumulate_matches
from sparkstats.analysis.models import (
    ActionProfile,
    AIAccumulator,
    AIStrategyMetrics,
    BehaviorProfile,
    BucketAccumulator,
    BuildTypeUsage,
    CapsuleUsage,
    CharacterAccumulator,
    CharacterAggregate,
    CharacterUsage,
    DataQuality,
    StatAverages,
    StatTotals,
)
from sparkstats.core.config import AnalysisConfig
from sparkstats.core.constants import (
    BEHAVIOR_COMPOSITE_WEIGHTS,
    CHARACTER_UNIVERSE_SIZE,
    COMBAT_SCORE_CAP,
    COMBAT_SCORE_WEIGHTS,
    FALLBACK_BATTLE_SECONDS,
    HIGH_CONFIDENCE_RULES,
    MEDIUM_CONFIDENCE_RULES,
    NO_DAMAGE_TAKEN_EFFICIENCY_DIVISOR,
    Confidence,
    StrategyType,
)
from sparkstats.core.utils import clamp, round_half_up, round_int, timed

logger = logging.getLogger(__name__)

FinalMetrics = dict[str, AIStrategyMetrics]


# =============================================================================
# Formulas
# =============================================================================


def percent_rate(part: float, whole: float) -> float:
    """part / whole as a one-decimal percent (0 when whole is 0)."""
    if whole <= 0:
        return 0.0
    return round_int(part / whole * 1000) / 10


def hit_rate(hits: float, attempts: float) -> float:
    if attempts <= 0:
        return 0.0
    return round_half_up(hits / attempts * 100, 1)


def calculate_combat_score(
    avg_damage_dealt: float, avg_damage_taken: float, win_rate: float, survival_rate: float
) -> float:
    """
    Combat performance score on 0-100.

    ratio x 30 + win rate x 0.5 + survival rate x 0.2, where ratio is
    dealt / taken (1 when the AI never took damage), rounded to one decimal
    and capped at 100.
    """
    damage_ratio = avg_damage_dealt / avg_damage_taken if avg_damage_taken > 0 else 1
    base = (
        damage_ratio * COMBAT_SCORE_WEIGHTS["damage_ratio"]
        + win_rate * COMBAT_SCORE_WEIGHTS["win_rate"]
        + survival_rate * COMBAT_SCORE_WEIGHTS["survival_rate"]
    )
    return min(COMBAT_SCORE_CAP, round_half_up(base, 1))


def calculate_data_quality(total_matches: int, unique_characters: int) -> DataQuality:
    """
    Assess how trustworthy an AI's sample is.

    Diversity compares the characters actually seen to the coverage expected
    for the sample size: (unique / 200) / sqrt(min(matches / 200, 1)), capped
    at 1. Confidence needs both enough matches and enough diversity, except
    that near-complete diversity alone is High.

    Args:
        total_matches: Active matches in the sample
        unique_characters: Distinct characters that played them

    Returns:
        DataQuality with the diversity score rounded to two decimals
    """
    coverage_ratio = unique_characters / CHARACTER_UNIVERSE_SIZE
    sample_ratio = min(total_matches / CHARACTER_UNIVERSE_SIZE, 1.0)
    diversity = min(1.0, coverage_ratio / math.sqrt(sample_ratio)) if sample_ratio > 0 else 0.0

    def satisfies(rules: tuple[tuple[int, float], ...]) -> bool:
        return any(total_matches >= m and diversity >= d for m, d in rules)

    if satisfies(HIGH_CONFIDENCE_RULES):
        confidence = Confidence.HIGH
    elif satisfies(MEDIUM_CONFIDENCE_RULES):
        confidence = Confidence.MEDIUM
    else:
        confidence = Confidence.LOW

    return DataQuality(
        sample_size=total_matches,
        confidence=confidence,
        character_diversity=unique_characters,
        diversity_score=round_half_up(diversity, 2),
    )


def derive_averages(totals: StatTotals) -> StatAverages:
    """Per-match averages for a non-empty set of totals."""
    matches = totals.matches

    def avg1(value: float) -> float:
        return round_half_up(value / matches, 1)

    avg_dealt = round_int(totals.damage_dealt / matches)
    avg_taken = round_int(totals.damage_taken / matches)
    avg_battle_time = totals.battle_time / matches

    if avg_taken > 0:
        efficiency = avg_dealt / avg_taken
    elif avg_dealt > 0:
        efficiency = avg_dealt / NO_DAMAGE_TAKEN_EFFICIENCY_DIVISOR
    else:
        efficiency = 0.0

    if avg_battle_time > 0:
        dps = avg_dealt / avg_battle_time
    elif avg_dealt > 0:
        dps = avg_dealt / FALLBACK_BATTLE_SECONDS
    else:
        dps = 0.0

    return StatAverages(
        avg_damage_dealt=avg_dealt,
        avg_damage_taken=avg_taken,
        avg_damage_taken_per_second=avg_taken / avg_battle_time if avg_battle_time > 0 else 0.0,
        avg_health_remaining=round_int(totals.health_remaining / matches),
        avg_max_health=round_int(totals.max_health / matches),
        avg_battle_time=round_half_up(avg_battle_time, 1),
        avg_dps=round_int(dps),
        damage_efficiency=round_half_up(efficiency, 2),
        avg_kills=avg1(totals.kills),
        avg_survival_rate=percent_rate(totals.survived, matches),
        avg_max_combo=avg1(totals.max_combo),
        avg_max_combo_damage=round_int(totals.max_combo_damage / matches),
        avg_sparking_combo_hits=avg1(totals.sparking_combo_hits),
        avg_s1_blast=avg1(totals.s1_blast),
        avg_s2_blast=avg1(totals.s2_blast),
        avg_ult_blast=avg1(totals.ult_blast),
        avg_s1_hit_blast=avg1(totals.s1_hit_blast),
        avg_s2_hit_blast=avg1(totals.s2_hit_blast),
        avg_ult_hit_blast=avg1(totals.ult_hit_blast),
        avg_s1_hit_rate=hit_rate(totals.s1_hit_blast, totals.s1_blast),
        avg_s2_hit_rate=hit_rate(totals.s2_hit_blast, totals.s2_blast),
        avg_ult_hit_rate=hit_rate(totals.ult_hit_blast, totals.ult_blast),
        avg_exa1_count=avg1(totals.exa1_count),
        avg_exa2_count=avg1(totals.exa2_count),
        avg_throws=avg1(totals.throws),
        avg_vanishing_attacks=avg1(totals.vanishing_attacks),
        avg_dragon_homing=avg1(totals.dragon_homing),
        avg_lightning_attacks=avg1(totals.lightning_attacks),
        avg_speed_impacts=avg1(totals.speed_impacts),
        avg_speed_impact_wins=avg1(totals.speed_impact_wins),
        avg_guards=avg1(totals.guards),
        avg_z_counters=avg1(totals.z_counters),
        avg_super_counters=avg1(totals.super_counters),
        avg_revenge_counters=avg1(totals.revenge_counters),
        avg_sparking_count=avg1(totals.sparking_count),
        avg_dragon_dash_distance=round_int(totals.dragon_dash_distance / matches),
        avg_energy_blasts=avg1(totals.energy_blasts),
        avg_charges=avg1(totals.charges),
        avg_tags=avg1(totals.tags),
    )


def _by_count(buckets: Iterable[BucketAccumulator]) -> list[BucketAccumulator]:
    # Stable: equal counts keep first-seen order
    return sorted(buckets, key=lambda b: b.count, reverse=True)


def build_type_distribution(source: CharacterAccumulator) -> list[BuildTypeUsage]:
    matches = source.totals.matches
    return [
        BuildTypeUsage(
            build_type=bucket.key,
            count=bucket.count,
            percentage=percent_rate(bucket.count, matches),
            win_rate=percent_rate(bucket.wins, bucket.count),
            action_averages=ActionProfile.from_totals(bucket.actions, bucket.count),
        )
        for bucket in _by_count(source.build_types.values())
    ]


def top_capsules(source: CharacterAccumulator, limit: int) -> list[CapsuleUsage]:
    return [
        CapsuleUsage(
            id=bucket.key,
            name=bucket.name,
            count=bucket.count,
            win_rate=percent_rate(bucket.wins, bucket.count),
            action_averages=ActionProfile.from_totals(bucket.actions, bucket.count),
        )
        for bucket in _by_count(source.capsules.values())[:limit]
    ]


def character_usage(characters: dict[str, CharacterAccumulator]) -> list[CharacterUsage]:
    summaries = []
    for slice_ in characters.values():
        matches = slice_.totals.matches
        if matches == 0:
            continue
        build_types = _by_count(slice_.build_types.values())
        summaries.append(
            CharacterUsage(
                name=slice_.name,
                matches=matches,
                win_rate=percent_rate(slice_.totals.wins, matches),
                avg_damage=round_int(slice_.totals.damage_dealt / matches),
                most_used_build_type=build_types[0].key if build_types else "N/A",
            )
        )
    return sorted(summaries, key=lambda s: s.matches, reverse=True)


def derive_metrics(
    name: str,
    strategy_type: StrategyType,
    source: CharacterAccumulator,
    characters: dict[str, CharacterAccumulator],
    config: AnalysisConfig,
) -> AIStrategyMetrics:
    """
    Derive the metrics for one AI from one set of accumulated data.

    Args:
        name: AI strategy name
        strategy_type: AI strategy category
        source: Totals and loadout buckets to derive from (whole AI or one
            AI x character slice)
        characters: Character slices summarised in character_usage
        config: Analysis settings (top capsule limit)
    """
    totals = source.totals
    stats = derive_averages(totals)
    win_rate = percent_rate(totals.wins, totals.matches)
    unique_characters = sum(1 for c in characters.values() if c.totals.matches > 0)

    return AIStrategyMetrics(
        name=name,
        strategy_type=strategy_type,
        total_matches=totals.matches,
        win_count=totals.wins,
        loss_count=totals.losses,
        win_rate=win_rate,
        combat_performance_score=calculate_combat_score(
            stats.avg_damage_dealt, stats.avg_damage_taken, win_rate, stats.avg_survival_rate
        ),
        stats=stats,
        unique_characters=unique_characters,
        data_quality=calculate_data_quality(totals.matches, unique_characters),
        character_usage=character_usage(characters),
        build_type_distribution=build_type_distribution(source),
        top_capsules=top_capsules(source, config.top_capsule_limit),
        avg_build_costs=totals.build_costs.averaged(totals.matches),
    )


def composite_value(stats: StatAverages, dimension: str) -> float:
    return sum(getattr(stats, attr) * weight for attr, weight in BEHAVIOR_COMPOSITE_WEIGHTS[dimension])


def rescale(value: float, low: float, high: float) -> int:
    """Min/max rescale to a whole number on 0-100 (50 when the range is flat)."""
    if high == low:
        return 50
    return int(clamp(round_int((value - low) / (high - low) * 100), 0, 100))


# =============================================================================
# Stages
# =============================================================================


@dataclass
class PerAITotals:
    """Accumulated totals for every AI with at least one active match."""

    ais: dict[str, AIAccumulator] = field(default_factory=dict)

    @classmethod
    def from_characters(
        cls, characters: Iterable[CharacterAggregate | dict[str, Any]]
    ) -> PerAITotals:
        accumulated = accumulate_matches(characters)
        return cls({name: ai for name, ai in accumulated.items() if ai.totals.matches > 0})

    def derive(self, config: AnalysisConfig) -> dict[str, AIStrategyMetrics]:
        derived = {}
        for name, ai in self.ais.items():
            metrics = derive_metrics(name, ai.strategy_type, ai, ai.characters, config)
            metrics.raw_characters = ai.characters
            derived[name] = metrics
        return derived


@dataclass(frozen=True)
class GlobalTotals:
    """Corpus-wide values computed once every AI has been derived."""

    total_matches: int
    composite_ranges: dict[str, tuple[float, float]]

    @classmethod
    def from_metrics(cls, derived: dict[str, AIStrategyMetrics]) -> GlobalTotals:
        ranges: dict[str, tuple[float, float]] = {}
        for dimension in BEHAVIOR_COMPOSITE_WEIGHTS:
            values = [composite_value(m.stats, dimension) for m in derived.values()]
            ranges[dimension] = (min(values), max(values)) if values else (0.0, 100.0)
        return cls(
            total_matches=sum(m.total_matches for m in derived.values()),
            composite_ranges=ranges,
        )

    def behavior_profile(self, stats: StatAverages) -> BehaviorProfile:
        return BehaviorProfile(
            **{
                dimension: rescale(composite_value(stats, dimension), low, high)
                for dimension, (low, high) in self.composite_ranges.items()
            }
        )

    def finalize(self, derived: dict[str, AIStrategyMetrics]) -> FinalMetrics:
        """Fill in usage rate and behavior profile for every AI."""
        for metrics in derived.values():
            metrics.usage_rate = percent_rate(metrics.total_matches, self.total_matches)
            metrics.behavior_profile = self.behavior_profile(metrics.stats)
        return derived


@timed
def compute_ai_strategy_metrics(
    characters: Iterable[CharacterAggregate | dict[str, Any]],
    config: AnalysisConfig | None = None,
) -> FinalMetrics:
    """
    Aggregate a character corpus into per-AI strategy metrics.

    Args:
        characters: Character aggregates, each with its match list
        config: Analysis settings (defaults to AnalysisConfig())

    Returns:
        Mapping of AI strategy name to AIStrategyMetrics; empty when no match
        has a positive battle time
    """
    config = config or AnalysisConfig()

    per_ai = PerAITotals.from_characters(characters)
    derived = per_ai.derive(config)
    final = GlobalTotals.from_metrics(derived).finalize(derived)

    logger.info(f"Derived metrics for {len(final)} AI strategies")
    return final
