"""
Data Models for AI Strategy Analysis

Dataclass definitions shared by the aggregation passes:

- Input: CharacterAggregate
- Accumulation: StatTotals, ActionTotals, BuildCosts, BucketAccumulator,
  CharacterAccumulator, AIAccumulator
- Derived results: StatAverages, ActionProfile, DataQuality, usage summaries,
  BehaviorProfile, AIStrategyMetrics, CharacterBaseline
- Classification: NormalizedScores, ArchetypeMatch, ArchetypeResult
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from typing import Any

from sparkstats.core.constants import (
    ACTION_COUNTER_FIELDS,
    BUILD_COST_CATEGORIES,
    MATCH_COUNTER_FIELDS,
    Confidence,
    StrategyType,
)
from sparkstats.core.utils import round_half_up, round_int, to_number


def match_value(match: dict[str, Any], keys: tuple[str, ...]) -> float:
    """Read the first present key of a match record as a number (0 if absent)."""
    for key in keys:
        value = match.get(key)
        if value is not None:
            return to_number(value)
    return 0


def match_is_active(match: dict[str, Any]) -> bool:
    """A match counts only if it ran for a positive battle time."""
    return to_number(match.get("battleTime")) > 0


# =============================================================================
# Input
# =============================================================================


@dataclass
class CharacterAggregate:
    """A character and its ordered match list (immutable engine input)."""

    name: str
    matches: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CharacterAggregate:
        """Build from the uploaded JSON shape ``{name, matches}``."""
        matches = data.get("matches") or []
        return cls(name=str(data.get("name") or "Unknown"), matches=list(matches))


# =============================================================================
# Accumulators
# =============================================================================


@dataclass
class BuildCosts:
    """Build cost per category (totals while accumulating, averages once derived)."""

    melee: float = 0
    blast: float = 0
    ki_blast: float = 0
    defense: float = 0
    skill: float = 0
    ki_efficiency: float = 0
    utility: float = 0

    def add_breakdown(self, breakdown: list[dict[str, Any]]) -> None:
        for item in breakdown:
            if not isinstance(item, dict):
                continue
            attr = BUILD_COST_CATEGORIES.get(item.get("name"))
            if attr:
                setattr(self, attr, getattr(self, attr) + to_number(item.get("cost")))

    def merge(self, other: BuildCosts) -> None:
        for f in fields(self):
            setattr(self, f.name, getattr(self, f.name) + getattr(other, f.name))

    def averaged(self, matches: int) -> BuildCosts:
        return BuildCosts(
            **{f.name: round_half_up(getattr(self, f.name) / matches, 1) for f in fields(self)}
        )


@dataclass
class ActionTotals:
    """Running sums of the action counters tracked per build type / capsule."""

    energy_blasts: float = 0
    throws: float = 0
    vanishing_attacks: float = 0
    guards: float = 0
    z_counters: float = 0
    super_counters: float = 0
    revenge_counters: float = 0
    charges: float = 0
    dragon_dash_distance: float = 0
    s1_blast: float = 0
    s2_blast: float = 0
    ult_blast: float = 0
    sparking_count: float = 0
    tags: float = 0
    max_combo: float = 0

    def add_match(self, match: dict[str, Any]) -> None:
        for attr in ACTION_COUNTER_FIELDS:
            value = match_value(match, MATCH_COUNTER_FIELDS[attr])
            setattr(self, attr, getattr(self, attr) + value)


@dataclass
class ActionProfile:
    """
    Per-match action frequencies.

    Used for bucket action averages (per build type / capsule) and for the
    reference profile those buckets are compared against (an AI's overall
    averages or a character baseline).
    """

    energy_blasts: float = 0
    throws: float = 0
    vanishing_attacks: float = 0
    guards: float = 0
    z_counters: float = 0
    super_counters: float = 0
    revenge_counters: float = 0
    charges: float = 0
    dragon_dash_distance: float = 0
    s1_blast: float = 0
    s2_blast: float = 0
    ult_blast: float = 0
    sparking_count: float = 0
    tags: float = 0
    max_combo: float = 0

    @classmethod
    def from_totals(cls, totals: ActionTotals, count: int) -> ActionProfile:
        values = {}
        for attr in ACTION_COUNTER_FIELDS:
            average = getattr(totals, attr) / count
            if attr == "dragon_dash_distance":
                values[attr] = round_int(average)
            else:
                values[attr] = round_half_up(average, 1)
        return cls(**values)

    @classmethod
    def from_averages(cls, stats: StatAverages) -> ActionProfile:
        return cls(**{attr: getattr(stats, f"avg_{attr}") for attr in ACTION_COUNTER_FIELDS})

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


@dataclass
class BucketAccumulator:
    """Usage count, wins and action sums for one build type or capsule."""

    key: str
    name: str | None = None
    count: int = 0
    wins: int = 0
    actions: ActionTotals = field(default_factory=ActionTotals)

    def record(self, match: dict[str, Any], won: bool) -> None:
        self.count += 1
        if won:
            self.wins += 1
        self.actions.add_match(match)


@dataclass
class StatTotals:
    """Running sums of every tracked counter over a set of active matches."""

    matches: int = 0
    wins: int = 0
    losses: int = 0
    survived: int = 0

    damage_dealt: float = 0
    damage_taken: float = 0
    battle_time: float = 0
    kills: float = 0
    health_remaining: float = 0
    max_health: float = 0

    max_combo: float = 0
    max_combo_damage: float = 0
    sparking_combo_hits: float = 0
    s1_blast: float = 0
    s2_blast: float = 0
    ult_blast: float = 0
    s1_hit_blast: float = 0
    s2_hit_blast: float = 0
    ult_hit_blast: float = 0
    exa1_count: float = 0
    exa2_count: float = 0
    throws: float = 0
    vanishing_attacks: float = 0
    dragon_homing: float = 0
    lightning_attacks: float = 0
    speed_impacts: float = 0
    speed_impact_wins: float = 0

    guards: float = 0
    z_counters: float = 0
    super_counters: float = 0
    revenge_counters: float = 0

    sparking_count: float = 0
    dragon_dash_distance: float = 0
    energy_blasts: float = 0
    charges: float = 0
    tags: float = 0

    build_costs: BuildCosts = field(default_factory=BuildCosts)

    def add_match(self, match: dict[str, Any]) -> None:
        self.matches += 1
        if match.get("won"):
            self.wins += 1
        else:
            self.losses += 1
        if to_number(match.get("hPGaugeValue")) > 0:
            self.survived += 1

        for attr, keys in MATCH_COUNTER_FIELDS.items():
            setattr(self, attr, getattr(self, attr) + match_value(match, keys))

        composition = match.get("buildComposition")
        if isinstance(composition, dict) and isinstance(composition.get("breakdown"), list):
            self.build_costs.add_breakdown(composition["breakdown"])

    def merge(self, other: StatTotals) -> None:
        """Add another set of totals into this one."""
        for f in fields(self):
            if f.name == "build_costs":
                continue
            setattr(self, f.name, getattr(self, f.name) + getattr(other, f.name))
        self.build_costs.merge(other.build_costs)


@dataclass
class CharacterAccumulator:
    """Totals plus build type / capsule buckets for one slice of matches."""

    name: str
    totals: StatTotals = field(default_factory=StatTotals)
    build_types: dict[str, BucketAccumulator] = field(default_factory=dict)
    capsules: dict[str, BucketAccumulator] = field(default_factory=dict)

    def build_type(self, label: str) -> BucketAccumulator:
        bucket = self.build_types.get(label)
        if bucket is None:
            bucket = self.build_types[label] = BucketAccumulator(key=label, name=label)
        return bucket

    def capsule(self, capsule_id: str, name: str | None) -> BucketAccumulator:
        bucket = self.capsules.get(capsule_id)
        if bucket is None:
            bucket = self.capsules[capsule_id] = BucketAccumulator(key=capsule_id, name=name)
        return bucket

    def record(self, match: dict[str, Any]) -> None:
        """Fold one active match into totals and loadout buckets."""
        won = bool(match.get("won"))
        self.totals.add_match(match)

        composition = match.get("buildComposition")
        if isinstance(composition, dict) and composition.get("label"):
            self.build_type(str(composition["label"])).record(match, won)

        capsules = match.get("equippedCapsules")
        if isinstance(capsules, list):
            for capsule in capsules:
                if isinstance(capsule, dict) and capsule.get("id"):
                    self.capsule(str(capsule["id"]), capsule.get("name")).record(match, won)


@dataclass
class AIAccumulator(CharacterAccumulator):
    """Accumulated data for one AI strategy, with per-character sub-slices."""

    strategy_type: StrategyType = StrategyType.OTHER
    characters: dict[str, CharacterAccumulator] = field(default_factory=dict)

    def character(self, name: str) -> CharacterAccumulator:
        slice_ = self.characters.get(name)
        if slice_ is None:
            slice_ = self.characters[name] = CharacterAccumulator(name=name)
        return slice_


# =============================================================================
# Derived results
# =============================================================================


@dataclass
class StatAverages:
    """Per-match averages and rates derived from a StatTotals."""

    avg_damage_dealt: int = 0
    avg_damage_taken: int = 0
    avg_damage_taken_per_second: float = 0.0
    avg_health_remaining: int = 0
    avg_max_health: int = 0
    avg_battle_time: float = 0.0
    avg_dps: int = 0
    damage_efficiency: float = 0.0
    avg_kills: float = 0.0
    avg_survival_rate: float = 0.0

    avg_max_combo: float = 0.0
    avg_max_combo_damage: int = 0
    avg_sparking_combo_hits: float = 0.0
    avg_s1_blast: float = 0.0
    avg_s2_blast: float = 0.0
    avg_ult_blast: float = 0.0
    avg_s1_hit_blast: float = 0.0
    avg_s2_hit_blast: float = 0.0
    avg_ult_hit_blast: float = 0.0
    avg_s1_hit_rate: float = 0.0
    avg_s2_hit_rate: float = 0.0
    avg_ult_hit_rate: float = 0.0
    avg_exa1_count: float = 0.0
    avg_exa2_count: float = 0.0
    avg_throws: float = 0.0
    avg_vanishing_attacks: float = 0.0
    avg_dragon_homing: float = 0.0
    avg_lightning_attacks: float = 0.0
    avg_speed_impacts: float = 0.0
    avg_speed_impact_wins: float = 0.0

    avg_guards: float = 0.0
    avg_z_counters: float = 0.0
    avg_super_counters: float = 0.0
    avg_revenge_counters: float = 0.0

    avg_sparking_count: float = 0.0
    avg_dragon_dash_distance: int = 0
    avg_energy_blasts: float = 0.0
    avg_charges: float = 0.0
    avg_tags: float = 0.0


@dataclass
class DataQuality:
    """Sample size and character coverage assessment for an AI strategy."""

    sample_size: int
    confidence: Confidence
    character_diversity: int
    diversity_score: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "sample_size": self.sample_size,
            "confidence": self.confidence.value,
            "character_diversity": self.character_diversity,
            "diversity_score": self.diversity_score,
        }


@dataclass
class BuildTypeUsage:
    """How often an AI's matches used a build type, and what happened."""

    build_type: str
    count: int
    percentage: float
    win_rate: float
    action_averages: ActionProfile | None = None


@dataclass
class CapsuleUsage:
    """How often an AI's matches equipped a capsule, and what happened."""

    id: str
    name: str | None
    count: int
    win_rate: float
    action_averages: ActionProfile | None = None


@dataclass
class CharacterUsage:
    """Summary of one character's matches under an AI strategy."""

    name: str
    matches: int
    win_rate: float
    avg_damage: int
    performance_delta: float = 0.0
    most_used_build_type: str = "N/A"


@dataclass
class BehaviorProfile:
    """Composite behavior dimensions rescaled to 0-100 across a set of AIs."""

    offense: int = 50
    defense: int = 50
    aggression: int = 50
    zoning: int = 50
    resource_management: int = 50
    combo_focus: int = 50


@dataclass
class CharacterBaseline:
    """A character's averages across every AI strategy it was paired with."""

    character_name: str
    total_matches: int
    win_count: int
    win_rate: float
    stats: StatAverages

    def __getattr__(self, name: str) -> Any:
        # Expose averages directly (baseline.avg_throws) like an AI's metrics
        if name.startswith("avg_") or name == "damage_efficiency":
            stats = self.__dict__.get("stats")
            if stats is not None:
                return getattr(stats, name)
        raise AttributeError(name)


@dataclass
class AIStrategyMetrics:
    """Derived metrics for one AI strategy (or one AI/character pairing)."""

    name: str
    strategy_type: StrategyType
    total_matches: int
    win_count: int
    loss_count: int
    win_rate: float
    combat_performance_score: float
    stats: StatAverages
    unique_characters: int
    data_quality: DataQuality
    usage_rate: float = 0.0
    character_usage: list[CharacterUsage] = field(default_factory=list)
    build_type_distribution: list[BuildTypeUsage] = field(default_factory=list)
    top_capsules: list[CapsuleUsage] = field(default_factory=list)
    avg_build_costs: BuildCosts = field(default_factory=BuildCosts)
    behavior_profile: BehaviorProfile | None = None

    # Raw per-character accumulations, kept for character filtering
    raw_characters: dict[str, CharacterAccumulator] = field(default_factory=dict, repr=False)

    # Character filter state
    character_filtered: bool = False
    character_name: str | None = None
    character_baseline: CharacterBaseline | None = None
    unfiltered_total_matches: int | None = None
    unfiltered_win_rate: float | None = None
    unfiltered_win_count: int | None = None
    unfiltered_loss_count: int | None = None
    unfiltered_performance_score: float | None = None

    def __getattr__(self, name: str) -> Any:
        # Averages read like top-level fields: metrics.avg_damage_dealt
        if name.startswith("avg_") or name == "damage_efficiency":
            stats = self.__dict__.get("stats")
            if stats is not None:
                return getattr(stats, name)
        raise AttributeError(name)

    @property
    def type(self) -> StrategyType:
        return self.strategy_type

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary (raw accumulators omitted)."""
        result: dict[str, Any] = {
            "name": self.name,
            "type": self.strategy_type.value,
            "total_matches": self.total_matches,
            "usage_rate": self.usage_rate,
            "unique_characters": self.unique_characters,
            "win_count": self.win_count,
            "loss_count": self.loss_count,
            "win_rate": self.win_rate,
            "combat_performance_score": self.combat_performance_score,
            **asdict(self.stats),
            "character_usage": [asdict(c) for c in self.character_usage],
            "build_type_distribution": [asdict(b) for b in self.build_type_distribution],
            "top_capsules": [asdict(c) for c in self.top_capsules],
            "avg_build_costs": asdict(self.avg_build_costs),
            "behavior_profile": asdict(self.behavior_profile) if self.behavior_profile else None,
            "data_quality": self.data_quality.to_dict(),
        }
        if self.character_filtered:
            baseline = self.character_baseline
            result.update(
                {
                    "character_filtered": True,
                    "character_name": self.character_name,
                    "character_baseline": (
                        {
                            "character_name": baseline.character_name,
                            "total_matches": baseline.total_matches,
                            "win_rate": baseline.win_rate,
                            **asdict(baseline.stats),
                        }
                        if baseline
                        else None
                    ),
                    "unfiltered_total_matches": self.unfiltered_total_matches,
                    "unfiltered_win_rate": self.unfiltered_win_rate,
                    "unfiltered_win_count": self.unfiltered_win_count,
                    "unfiltered_loss_count": self.unfiltered_loss_count,
                    "unfiltered_performance_score": self.unfiltered_performance_score,
                }
            )
        return result


# =============================================================================
# Classification
# =============================================================================


@dataclass
class NormalizedScores:
    """Behavioral dimensions rescaled to 0-100 against a comparison basis."""

    # Core combat
    damage_dealt: int = 0
    dps: int = 0
    damage_taken_per_sec: int = 0
    damage_efficiency: int = 0
    survival_rate: int = 0
    # Offensive actions
    throws: int = 0
    vanishing_attacks: int = 0
    dragon_dash: int = 0
    dragon_homing: int = 0
    lightning_attacks: int = 0
    energy_blasts: int = 0
    s1_blast: int = 0
    s2_blast: int = 0
    ult_blast: int = 0
    ult_hit_rate: int = 0
    # Defensive actions
    guards: int = 0
    z_counters: int = 0
    super_counters: int = 0
    revenge_counters: int = 0
    # Combos
    max_combo: int = 0
    max_combo_damage: int = 0
    sparking_combo: int = 0
    # Resources
    charges: int = 0
    sparking_count: int = 0
    # Skills
    exa1_count: int = 0
    exa2_count: int = 0

    def get(self, name: str, default: int = 0) -> int:
        return getattr(self, name, default)

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass
class ArchetypeMatch:
    """How well a normalized profile fits one archetype."""

    archetype: str
    score: float
    description: str
    icon: str | None = None
    color: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "archetype": self.archetype,
            "score": round(self.score, 1),
            "description": self.description,
            "icon": self.icon,
            "color": self.color,
        }


@dataclass
class ArchetypeResult:
    """Primary archetype, optional close secondary, and matching sub-types."""

    primary: ArchetypeMatch
    secondary: ArchetypeMatch | None = None
    sub_types: list[ArchetypeMatch] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "primary": self.primary.to_dict(),
            "secondary": self.secondary.to_dict() if self.secondary else None,
            "sub_types": [s.to_dict() for s in self.sub_types],
        }
