"""
Behavioral Insights for AI Strategies

Builds the insight package shown for a single AI strategy:

- Normalized scores and playstyle archetype
- Combat effectiveness percentiles against the AI population
- Action frequency highlights (signature and rare actions)
- How build types and capsules shift the AI's action mix
- Short natural-language key insights

Also provides corpus-level helpers: top AI rankings, summary insights and
the list of characters seen across all AIs.
"""

import logging
from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from typing import Any

from sparkstats.analysis.archetypes import detect_playstyle_archetype
from sparkstats.analysis.models import (
    ActionProfile,
    AIStrategyMetrics,
    ArchetypeResult,
    CharacterBaseline,
    DataQuality,
    NormalizedScores,
)
from sparkstats.analysis.normalization import comparable_ais, compute_normalized_scores
from sparkstats.analysis.stats import (
    calculate_mean,
    calculate_percentile,
    get_percentile_comparison,
    get_percentile_label,
)
from sparkstats.core.config import AnalysisConfig
from sparkstats.core.constants import FALLBACK_BATTLE_SECONDS
from sparkstats.core.utils import format_signed_percent, round_half_up, round_int

logger = logging.getLogger(__name__)


# =============================================================================
# Action Tables
# =============================================================================

# (StatAverages attribute, label, emoji)
FREQUENCY_ACTIONS = (
    ("avg_throws", "Throws", "🤜"),
    ("avg_vanishing_attacks", "Vanishing Attacks", "💨"),
    ("avg_dragon_homing", "Dragon Homing", "🐉"),
    ("avg_lightning_attacks", "Lightning Attacks", "⚡"),
    ("avg_energy_blasts", "Energy Blasts", "💫"),
    ("avg_s1_blast", "Super 1 Blasts", "🔵"),
    ("avg_s2_blast", "Super 2 Blasts", "🔷"),
    ("avg_ult_blast", "Ultimate Blasts", "💥"),
    ("avg_exa1_count", "Skill 1 Uses", "🎯"),
    ("avg_exa2_count", "Skill 2 Uses", "🎯"),
    ("avg_guards", "Guards", "🛡️"),
    ("avg_z_counters", "Z-Counters", "↩️"),
    ("avg_super_counters", "Super Counters", "🔄"),
    ("avg_revenge_counters", "Revenge Counters", "💢"),
    ("avg_sparking_count", "Sparking Activations", "✨"),
    ("avg_charges", "Ki Charges", "⚡"),
)

# (ActionProfile attribute, label) compared for build / capsule impact
IMPACT_ACTIONS = (
    ("energy_blasts", "Energy Blasts"),
    ("s1_blast", "S1 Blasts"),
    ("s2_blast", "S2 Blasts"),
    ("ult_blast", "Ult Blasts"),
    ("throws", "Throws"),
    ("vanishing_attacks", "Vanishing Attacks"),
    ("guards", "Guards"),
    ("z_counters", "Z-Counters"),
    ("super_counters", "Super Counters"),
    ("charges", "Charges"),
    ("sparking_count", "Sparking"),
    ("tags", "Tags"),
    ("max_combo", "Max Combo"),
)

# Capsule impact spells the ultimate label out in full
CAPSULE_LABEL_OVERRIDES = {"ult_blast": "Ultimate Blasts"}

POPULATION_FREQUENCY_LIMIT = 6
BASELINE_FREQUENCY_LIMIT = 8
NOTABLE_FREQUENCY_COUNT = 6
SIGNATURE_PERCENTILE = 85
RARE_PERCENTILE = 15
BASELINE_NOTABLE_DIFF_PCT = 30.0

MAX_SHIFTS_PER_BUCKET = 5
MAX_BUILD_IMPACTS = 6
MAX_CAPSULE_IMPACTS = 5
MAX_KEY_INSIGHTS = 4


# =============================================================================
# Result Types
# =============================================================================


@dataclass
class ActionFrequencyInsight:
    """How often an AI performs one action relative to its comparison basis."""

    action: str
    emoji: str
    value: float
    percentile: int
    label: str
    comparison: str
    diff: str
    is_signature: bool
    is_rare: bool
    notability: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class PercentileStat:
    value: float
    percentile: int
    label: str


@dataclass
class CombatEffectiveness:
    """Percentile ranks of headline combat stats within the AI population."""

    win_rate: PercentileStat
    performance: PercentileStat
    efficiency: PercentileStat
    survival: PercentileStat
    damage: PercentileStat
    dps: PercentileStat

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ActionShift:
    """A notable difference between a bucket's action average and the reference."""

    action: str
    value: float
    avg: float
    percent_diff: float
    direction: str  # "above" or "below"


@dataclass
class BuildImpact:
    build_type: str
    count: int
    percentage: float
    win_rate: float
    frequencies: list[ActionShift]


@dataclass
class BuildBehavioralImpact:
    impacts: list[BuildImpact] = field(default_factory=list)
    most_distinct: BuildImpact | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class CapsuleImpact:
    name: str | None
    count: int
    win_rate: float
    frequencies: list[ActionShift]


@dataclass
class CapsuleBehavioralImpact:
    impacts: list[CapsuleImpact] = field(default_factory=list)
    most_impactful: CapsuleImpact | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class InsightMessage:
    """A one-line insight for display."""

    type: str  # "success", "info" or "warning"
    emoji: str | None
    text: str


@dataclass
class BehavioralInsights:
    """Everything the insight view shows for one AI strategy."""

    normalized_scores: NormalizedScores | None
    archetype: ArchetypeResult | None
    effectiveness: CombatEffectiveness | None
    action_frequency: list[ActionFrequencyInsight]
    build_behavioral_impact: BuildBehavioralImpact | None
    capsule_behavioral_impact: CapsuleBehavioralImpact | None
    key_insights: list[InsightMessage]
    data_quality: DataQuality

    def to_dict(self) -> dict[str, Any]:
        return {
            "normalized_scores": self.normalized_scores.to_dict() if self.normalized_scores else None,
            "archetype": self.archetype.to_dict() if self.archetype else None,
            "effectiveness": self.effectiveness.to_dict() if self.effectiveness else None,
            "action_frequency": [a.to_dict() for a in self.action_frequency],
            "build_behavioral_impact": (
                self.build_behavioral_impact.to_dict() if self.build_behavioral_impact else None
            ),
            "capsule_behavioral_impact": (
                self.capsule_behavioral_impact.to_dict() if self.capsule_behavioral_impact else None
            ),
            "key_insights": [asdict(k) for k in self.key_insights],
            "data_quality": self.data_quality.to_dict(),
        }


# =============================================================================
# Action Frequency
# =============================================================================


def _frequency_against_population(
    ai_metrics: AIStrategyMetrics, population: list[AIStrategyMetrics]
) -> list[ActionFrequencyInsight]:
    insights = []
    for attr, label, emoji in FREQUENCY_ACTIONS:
        value = getattr(ai_metrics.stats, attr)
        all_values = [getattr(m.stats, attr) for m in population]
        mean = calculate_mean(all_values)
        percentile = calculate_percentile(value, all_values)
        diff = (value - mean) / mean * 100 if mean > 0 else 0.0

        insights.append(
            ActionFrequencyInsight(
                action=label,
                emoji=emoji,
                value=round_half_up(value, 1),
                percentile=percentile,
                label=get_percentile_label(percentile),
                comparison=get_percentile_comparison(percentile),
                diff=format_signed_percent(diff),
                is_signature=percentile >= SIGNATURE_PERCENTILE,
                is_rare=percentile <= RARE_PERCENTILE,
                notability=abs(percentile - 50),
            )
        )

    insights.sort(key=lambda i: i.notability, reverse=True)
    notable = [i for i in insights if i.is_signature or i.is_rare]
    if len(notable) > NOTABLE_FREQUENCY_COUNT:
        return notable
    return insights[:POPULATION_FREQUENCY_LIMIT]


def _frequency_against_baseline(
    ai_metrics: AIStrategyMetrics, baseline: CharacterBaseline
) -> list[ActionFrequencyInsight]:
    insights = []
    for attr, label, emoji in FREQUENCY_ACTIONS:
        value = getattr(ai_metrics.stats, attr)
        reference = getattr(baseline.stats, attr)
        if value == 0 and reference == 0:
            continue

        diff = (value - reference) / reference * 100 if reference > 0 else 0.0

        # Ratio mapped onto a percentile-like scale: 1x -> 50, 2x -> 90
        percentile = 50.0
        if reference > 0:
            ratio = value / reference
            if ratio <= 1.0:
                percentile = ratio * 50
            else:
                percentile = min(100.0, 50 + (ratio - 1.0) * 40)

        insights.append(
            ActionFrequencyInsight(
                action=label,
                emoji=emoji,
                value=round_half_up(value, 1),
                percentile=round_int(percentile),
                label=get_percentile_label(percentile),
                comparison=get_percentile_comparison(percentile),
                diff=format_signed_percent(diff),
                is_signature=diff >= BASELINE_NOTABLE_DIFF_PCT,
                is_rare=diff <= -BASELINE_NOTABLE_DIFF_PCT,
                notability=abs(diff),
            )
        )

    insights.sort(key=lambda i: i.notability, reverse=True)
    notable = [i for i in insights if i.notability >= BASELINE_NOTABLE_DIFF_PCT]
    if len(notable) > NOTABLE_FREQUENCY_COUNT:
        return notable
    return insights[:BASELINE_FREQUENCY_LIMIT]


def generate_action_frequency_insights(
    ai_metrics: AIStrategyMetrics,
    all_ai_metrics: Mapping[str, AIStrategyMetrics],
    character_baseline: CharacterBaseline | None = None,
    character_filtered: bool = False,
    config: AnalysisConfig | None = None,
) -> list[ActionFrequencyInsight]:
    """
    Highlight the actions this AI performs unusually often or rarely.

    Character-filtered metrics with a baseline are compared against the
    character's own averages; otherwise against every comparable AI (at
    least two are needed).
    """
    if character_filtered and character_baseline is not None:
        return _frequency_against_baseline(ai_metrics, character_baseline)

    config = config or AnalysisConfig()
    population = comparable_ais(all_ai_metrics, config.min_matches_for_comparison)
    if len(population) < 2:
        logger.debug(f"Not enough AIs for action comparison (need 2, have {len(population)})")
        return []
    return _frequency_against_population(ai_metrics, population)


# =============================================================================
# Combat Effectiveness
# =============================================================================


def generate_combat_effectiveness_insights(
    ai_metrics: AIStrategyMetrics,
    all_ai_metrics: Mapping[str, AIStrategyMetrics],
    config: AnalysisConfig | None = None,
) -> CombatEffectiveness | None:
    """Percentile ranks of the headline combat stats (None with < 2 comparable AIs)."""
    config = config or AnalysisConfig()
    population = comparable_ais(all_ai_metrics, config.min_matches_for_comparison)
    if len(population) < 2:
        return None

    def rank(getter) -> PercentileStat:
        value = getter(ai_metrics)
        percentile = calculate_percentile(value, [getter(m) for m in population])
        return PercentileStat(value=value, percentile=percentile, label=get_percentile_label(percentile))

    return CombatEffectiveness(
        win_rate=rank(lambda m: m.win_rate),
        performance=rank(lambda m: m.combat_performance_score),
        efficiency=rank(lambda m: m.stats.damage_efficiency),
        survival=rank(lambda m: m.stats.avg_survival_rate),
        damage=rank(lambda m: m.stats.avg_damage_dealt),
        dps=rank(lambda m: m.stats.avg_dps),
    )


# =============================================================================
# Build / Capsule Behavioral Impact
# =============================================================================


def compare_action_profiles(
    bucket: ActionProfile,
    reference: ActionProfile,
    threshold_pct: float,
    labels: Mapping[str, str] | None = None,
) -> list[ActionShift]:
    """
    Notable action shifts of a bucket against a reference profile.

    Only actions present in both profiles are compared. Increases come
    before decreases, each group largest first; at most five are kept.
    """
    labels = labels or {}
    shifts = []
    for attr, default_label in IMPACT_ACTIONS:
        value = getattr(bucket, attr)
        avg = getattr(reference, attr)
        if avg <= 0 or value <= 0:
            continue
        percent_diff = (value - avg) / avg * 100
        if abs(percent_diff) >= threshold_pct:
            shifts.append(
                ActionShift(
                    action=labels.get(attr, default_label),
                    value=value,
                    avg=avg,
                    percent_diff=round_half_up(percent_diff, 1),
                    direction="above" if percent_diff > 0 else "below",
                )
            )

    shifts.sort(key=lambda s: (s.direction != "above", -abs(s.percent_diff)))
    return shifts[:MAX_SHIFTS_PER_BUCKET]


def _reference_profile(
    ai_metrics: AIStrategyMetrics,
    character_baseline: CharacterBaseline | None,
    character_filtered: bool,
) -> ActionProfile:
    if character_filtered and character_baseline is not None:
        return ActionProfile.from_averages(character_baseline.stats)
    return ActionProfile.from_averages(ai_metrics.stats)


def generate_build_behavioral_impact(
    ai_metrics: AIStrategyMetrics,
    character_baseline: CharacterBaseline | None = None,
    character_filtered: bool = False,
    config: AnalysisConfig | None = None,
) -> BuildBehavioralImpact | None:
    """
    How each well-used build type shifts the AI's action frequencies.

    Returns:
        BuildBehavioralImpact (most used builds first), or None when no build
        type has enough matches
    """
    config = config or AnalysisConfig()
    min_count = config.min_build_count_filtered if character_filtered else config.min_build_count

    builds = [
        b
        for b in ai_metrics.build_type_distribution
        if b.count >= min_count and b.action_averages is not None
    ]
    if not builds:
        return None

    reference = _reference_profile(ai_metrics, character_baseline, character_filtered)
    impacts = []
    for build in builds:
        shifts = compare_action_profiles(
            build.action_averages, reference, config.behavioral_impact_threshold_pct
        )
        if shifts:
            impacts.append(
                BuildImpact(
                    build_type=build.build_type,
                    count=build.count,
                    percentage=build.percentage,
                    win_rate=build.win_rate,
                    frequencies=shifts,
                )
            )

    impacts.sort(key=lambda i: i.count, reverse=True)
    return BuildBehavioralImpact(
        impacts=impacts[:MAX_BUILD_IMPACTS],
        most_distinct=impacts[0] if impacts else None,
    )


def generate_capsule_behavioral_impact(
    ai_metrics: AIStrategyMetrics,
    character_baseline: CharacterBaseline | None = None,
    character_filtered: bool = False,
    config: AnalysisConfig | None = None,
) -> CapsuleBehavioralImpact | None:
    """
    How each well-used capsule shifts the AI's action frequencies.

    Capsules that were always equipped together produce identical shift
    patterns; only the first of each pattern is kept.

    Returns:
        CapsuleBehavioralImpact, or None when no capsule shows a notable shift
    """
    config = config or AnalysisConfig()
    min_count = (
        config.min_capsule_count_filtered if character_filtered else config.min_capsule_count
    )

    capsules = [
        c for c in ai_metrics.top_capsules if c.count >= min_count and c.action_averages is not None
    ]
    if not capsules:
        return None

    reference = _reference_profile(ai_metrics, character_baseline, character_filtered)
    impacts = []
    for capsule in capsules:
        shifts = compare_action_profiles(
            capsule.action_averages,
            reference,
            config.behavioral_impact_threshold_pct,
            labels=CAPSULE_LABEL_OVERRIDES,
        )
        if shifts:
            impacts.append(
                CapsuleImpact(
                    name=capsule.name,
                    count=capsule.count,
                    win_rate=capsule.win_rate,
                    frequencies=shifts,
                )
            )

    impacts.sort(key=lambda i: i.count, reverse=True)
    impacts = impacts[:MAX_CAPSULE_IMPACTS]

    unique: list[CapsuleImpact] = []
    seen: set[tuple[str, ...]] = set()
    for impact in impacts:
        signature = tuple(sorted(f"{s.action}:{s.percent_diff}" for s in impact.frequencies))
        if signature not in seen:
            seen.add(signature)
            unique.append(impact)

    if not unique:
        return None
    return CapsuleBehavioralImpact(impacts=unique, most_impactful=unique[0])


# =============================================================================
# Key Insights
# =============================================================================


def generate_key_behavioral_insights(
    ai_metrics: AIStrategyMetrics,
    all_ai_metrics: Mapping[str, AIStrategyMetrics],
    archetype: ArchetypeResult | None,
    effectiveness: CombatEffectiveness | None,
    config: AnalysisConfig | None = None,
) -> list[InsightMessage]:
    """Up to four short sentences summarising what stands out about the AI."""
    config = config or AnalysisConfig()
    insights: list[InsightMessage] = []

    if effectiveness is not None:
        performance = effectiveness.performance
        win_rate = effectiveness.win_rate
        efficiency = effectiveness.efficiency
        survival = effectiveness.survival
        damage = effectiveness.damage

        if performance.percentile >= 75 and win_rate.percentile >= 65:
            insights.append(
                InsightMessage(
                    "success",
                    "🏆",
                    f"Elite Performer - Ranks in top {100 - performance.percentile}% for combat "
                    f"performance with {win_rate.value:.1f}% win rate",
                )
            )
        elif win_rate.percentile >= 60 and efficiency.percentile >= 70:
            insights.append(
                InsightMessage(
                    "success",
                    "⚡",
                    f"Highly Efficient Fighter - Converts opportunities into wins with "
                    f"{efficiency.value:.2f}x damage efficiency",
                )
            )
        elif performance.percentile <= 35 and win_rate.percentile <= 40:
            insights.append(
                InsightMessage(
                    "warning",
                    "⚠️",
                    f"Below Average Performance - Struggles compared to other AI strategies "
                    f"({win_rate.value:.1f}% win rate)",
                )
            )

        if damage.percentile >= 75 and survival.percentile <= 40:
            insights.append(
                InsightMessage(
                    "info",
                    "💥",
                    f"Risk Taker - Strong damage output but lower survival rate ({survival.value:.1f}%)",
                )
            )
        elif survival.percentile >= 75 and damage.percentile <= 40:
            insights.append(
                InsightMessage(
                    "info",
                    "🛡️",
                    f"Survivalist - Excellent survival ({survival.value:.1f}%) but conservative "
                    f"damage output",
                )
            )

        battle_time = ai_metrics.stats.avg_battle_time
        population = comparable_ais(all_ai_metrics, config.min_matches_for_comparison)
        mean_time = calculate_mean(
            [m.stats.avg_battle_time or FALLBACK_BATTLE_SECONDS for m in population]
        )
        if battle_time and mean_time > 0:
            time_diff = (battle_time - mean_time) / mean_time * 100
            if time_diff < -15:
                insights.append(
                    InsightMessage(
                        "info",
                        "⚡",
                        f"Fast Finisher - Wins matches {abs(round_int(time_diff))}% faster than average",
                    )
                )
            elif time_diff > 20:
                insights.append(
                    InsightMessage(
                        "info",
                        "🐌",
                        f"Methodical Fighter - Takes {round_int(time_diff)}% longer than average "
                        f"to finish matches",
                    )
                )

    if not insights and archetype is not None:
        insights.append(InsightMessage("info", archetype.primary.icon, archetype.primary.description))

    return insights[:MAX_KEY_INSIGHTS]


def generate_behavioral_insights(
    ai_metrics: AIStrategyMetrics,
    all_ai_metrics: Mapping[str, AIStrategyMetrics],
    character_filtered: bool | None = None,
    config: AnalysisConfig | None = None,
) -> BehavioralInsights:
    """
    Build the complete insight package for one AI strategy.

    Args:
        ai_metrics: AI to analyse (unfiltered or character-filtered)
        all_ai_metrics: The mapping ai_metrics came from
        character_filtered: Compare against the character baseline
            (defaults to ai_metrics.character_filtered)
        config: Analysis settings

    Returns:
        BehavioralInsights
    """
    config = config or AnalysisConfig()
    if character_filtered is None:
        character_filtered = ai_metrics.character_filtered
    baseline = ai_metrics.character_baseline

    normalized = compute_normalized_scores(ai_metrics, all_ai_metrics, baseline, config)
    archetype = detect_playstyle_archetype(normalized)
    effectiveness = generate_combat_effectiveness_insights(ai_metrics, all_ai_metrics, config)

    return BehavioralInsights(
        normalized_scores=normalized,
        archetype=archetype,
        effectiveness=effectiveness,
        action_frequency=generate_action_frequency_insights(
            ai_metrics, all_ai_metrics, baseline, character_filtered, config
        ),
        build_behavioral_impact=generate_build_behavioral_impact(
            ai_metrics, baseline, character_filtered, config
        ),
        capsule_behavioral_impact=generate_capsule_behavioral_impact(
            ai_metrics, baseline, character_filtered, config
        ),
        key_insights=generate_key_behavioral_insights(
            ai_metrics, all_ai_metrics, archetype, effectiveness, config
        ),
        data_quality=ai_metrics.data_quality,
    )


# =============================================================================
# Corpus-Level Helpers
# =============================================================================

TOP_STRATEGY_SORTS = {
    "winRate": (lambda m: m.win_rate, True),
    "usage": (lambda m: m.total_matches, True),
    "performance": (lambda m: m.combat_performance_score, True),
    "offense": (lambda m: m.stats.avg_damage_dealt, True),
    "defense": (lambda m: m.stats.avg_damage_taken_per_second, False),
}


def get_top_ai_strategies(
    ai_metrics: Mapping[str, AIStrategyMetrics], metric: str = "winRate", limit: int = 5
) -> list[AIStrategyMetrics]:
    """Rank AI strategies by a metric (unknown metrics rank by win rate)."""
    key, descending = TOP_STRATEGY_SORTS.get(metric, TOP_STRATEGY_SORTS["winRate"])
    return sorted(ai_metrics.values(), key=key, reverse=descending)[:limit]


def generate_ai_insights(
    ai_metrics: Mapping[str, AIStrategyMetrics], config: AnalysisConfig | None = None
) -> list[InsightMessage]:
    """Corpus summary: best win rate, most damage, least damage taken, most used."""
    config = config or AnalysisConfig()
    strategies = comparable_ais(ai_metrics, config.min_matches_for_comparison)
    if not strategies:
        return []

    # max()/min() keep the first of equal values
    top_win_rate = max(strategies, key=lambda m: m.win_rate)
    top_offense = max(strategies, key=lambda m: m.stats.avg_damage_dealt)
    top_defense = min(strategies, key=lambda m: m.stats.avg_damage_taken_per_second)
    most_used = max(strategies, key=lambda m: m.total_matches)

    return [
        InsightMessage(
            "success",
            "🏆",
            f"{top_win_rate.name} has the highest win rate at {top_win_rate.win_rate}%",
        ),
        InsightMessage(
            "info",
            "💪",
            f"{top_offense.name} deals the most damage on average "
            f"({top_offense.stats.avg_damage_dealt:,})",
        ),
        InsightMessage(
            "info",
            "🛡️",
            f"{top_defense.name} takes the least damage per second "
            f"({round_int(top_defense.stats.avg_damage_taken_per_second)})",
        ),
        InsightMessage(
            "info",
            "⭐",
            f"{most_used.name} is the most popular with {most_used.total_matches} matches "
            f"({most_used.usage_rate}%)",
        ),
    ]


def extract_unique_characters(ai_metrics: Mapping[str, AIStrategyMetrics]) -> list[dict[str, str]]:
    """Every character seen across all AI strategies, sorted by name."""
    seen: dict[str, dict[str, str]] = {}
    for metrics in ai_metrics.values():
        for usage in metrics.character_usage:
            if usage.name and usage.name not in seen:
                seen[usage.name] = {"id": usage.name, "name": usage.name}
    return sorted(seen.values(), key=lambda c: c["name"].lower())
