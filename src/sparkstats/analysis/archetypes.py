"""
SparkStats Archetype Classifier

Matches an AI's normalized behavior scores against a catalogue of playstyle
archetypes.

Every archetype carries a match strategy and its thresholds; a scoring
function per strategy turns (scores, archetype) into a total and a criteria
count, and the archetype's match score is total / criteria.

- Primary archetypes: the best match, plus a close runner-up as secondary
- Sub-types: every sub-type scoring 60+, best first
"""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum

from sparkstats.analysis.models import ArchetypeMatch, ArchetypeResult, NormalizedScores
from sparkstats.core.constants import (
    SECONDARY_ARCHETYPE_MAX_GAP,
    SECONDARY_ARCHETYPE_MIN_SCORE,
    SUBTYPE_MIN_SCORE,
)

logger = logging.getLogger(__name__)


class MatchStrategy(StrEnum):
    """How an archetype's thresholds are turned into a match score."""

    STANDARD = "standard"
    COMBINED_PAIR = "combined_pair"
    LOW_BLAST_MELEE = "low_blast_melee"
    RUSHDOWN_GATE = "rushdown_gate"
    CORE_INDICATOR_GATE = "core_indicator_gate"


@dataclass(frozen=True)
class Threshold:
    min: float | None = None
    ideal: float | None = None
    max: float | None = None


@dataclass(frozen=True)
class Archetype:
    """One catalogue entry."""

    name: str
    description: str
    strategy: MatchStrategy
    thresholds: dict[str, Threshold]
    icon: str | None = None
    color: str | None = None
    # COMBINED_PAIR: the two dimensions averaged into the "combined" threshold
    combined: tuple[str, str] | None = None
    # Supporting indicators: extra credit, never required
    supporting: dict[str, Threshold] = field(default_factory=dict)


# =============================================================================
# Archetype Catalogue
# =============================================================================

PRIMARY_ARCHETYPES: tuple[Archetype, ...] = (
    Archetype(
        name="Melee Fighter",
        description="Relies on close-range melee combat with minimal blast usage",
        strategy=MatchStrategy.LOW_BLAST_MELEE,
        thresholds={
            "s1_blast": Threshold(max=40),
            "s2_blast": Threshold(max=40),
            "ult_blast": Threshold(max=40),
            "throws": Threshold(min=55, ideal=75),
            "vanishing_attacks": Threshold(min=55, ideal=75),
            "dragon_homing": Threshold(min=50, ideal=70),
            "lightning_attacks": Threshold(min=50, ideal=70),
        },
        icon="Swords",
        color="red",
    ),
    Archetype(
        name="Blast Spammer",
        description="Heavy user of Super 1 and Super 2 blast attacks",
        strategy=MatchStrategy.COMBINED_PAIR,
        thresholds={"combined": Threshold(min=60, ideal=80)},
        combined=("s1_blast", "s2_blast"),
        supporting={
            "charges": Threshold(min=55),
            "ult_blast": Threshold(min=45),
        },
        icon="Flame",
        color="orange",
    ),
    Archetype(
        name="Ultimate Specialist",
        description="Focuses primarily on landing ultimate attacks",
        strategy=MatchStrategy.STANDARD,
        thresholds={
            "ult_blast": Threshold(min=70, ideal=90),
            "sparking_count": Threshold(min=60, ideal=80),
        },
        icon="Star",
        color="yellow",
    ),
    Archetype(
        name="Defensive Fighter",
        description="Defensive-focused fighter utilizing counters and guards",
        strategy=MatchStrategy.STANDARD,
        thresholds={
            "guards": Threshold(min=60, ideal=80),
            "z_counters": Threshold(min=55, ideal=75),
            "super_counters": Threshold(min=55, ideal=75),
            "revenge_counters": Threshold(min=50, ideal=70),
        },
        icon="Shield",
        color="blue",
    ),
)

SUBTYPE_ARCHETYPES: tuple[Archetype, ...] = (
    Archetype(
        name="Skill User",
        description="Makes heavy use of special skills and abilities",
        strategy=MatchStrategy.COMBINED_PAIR,
        thresholds={"combined": Threshold(min=60, ideal=85)},
        combined=("exa1_count", "exa2_count"),
        icon="🎯",
    ),
    Archetype(
        name="Rushdown Fighter",
        description="Aggressively pursues opponents with follow-up attacks",
        strategy=MatchStrategy.RUSHDOWN_GATE,
        thresholds={
            "vanishing_attacks": Threshold(min=65, ideal=85),
            "dragon_homing": Threshold(min=60, ideal=80),
            "lightning_attacks": Threshold(min=60, ideal=80),
        },
        supporting={"dragon_dash": Threshold(min=60, ideal=80)},
        icon="🏃",
    ),
    Archetype(
        name="Grappler",
        description="Specializes in throw techniques and grappling",
        strategy=MatchStrategy.STANDARD,
        thresholds={"throws": Threshold(min=65, ideal=85)},
        icon="🤼",
    ),
    Archetype(
        name="Sparking User",
        description="Frequently activates Sparking Mode",
        strategy=MatchStrategy.STANDARD,
        thresholds={"sparking_count": Threshold(min=70, ideal=90)},
        icon="✨",
    ),
    Archetype(
        name="Combo Fighter",
        description="Specializes in extended combos and high damage strings",
        strategy=MatchStrategy.CORE_INDICATOR_GATE,
        thresholds={
            "max_combo": Threshold(min=70, ideal=90),
            "max_combo_damage": Threshold(min=65, ideal=85),
        },
        supporting={"sparking_combo": Threshold(min=60, ideal=80)},
        icon="🥊",
    ),
    Archetype(
        name="Ki-Blast Spammer",
        description="Uses energy blasts extensively for zoning",
        strategy=MatchStrategy.STANDARD,
        thresholds={"energy_blasts": Threshold(min=75, ideal=90)},
        icon="💫",
    ),
)

# Points for a met supporting indicator
COMBINED_SUPPORT_POINTS = 50
GATE_SUPPORT_POINTS = 40

# Rushdown core thresholds drop to 90% when dragon dash use is high
RUSHDOWN_DASH_RELAXATION = 0.9


# =============================================================================
# Scoring Functions
# =============================================================================

Scores = Mapping[str, float] | NormalizedScores


def _score(scores: Scores, dimension: str) -> float:
    return scores.get(dimension, 0) or 0


def _min_credit(score: float, threshold: Threshold, partial_weight: float, minimum: float) -> float:
    """100 (+20 at ideal) when the minimum is met, else partial credit."""
    if score >= minimum:
        if threshold.ideal is not None and score >= threshold.ideal:
            return 120
        return 100
    return score / minimum * partial_weight


def score_standard(scores: Scores, archetype: Archetype) -> tuple[float, int]:
    total = 0.0
    criteria = 0
    for dimension, threshold in archetype.thresholds.items():
        score = _score(scores, dimension)
        criteria += 1
        if threshold.min is not None and threshold.max is not None:
            if threshold.min <= score <= threshold.max:
                total += 100
        elif threshold.min is not None:
            total += _min_credit(score, threshold, 50, threshold.min)
        elif threshold.max is not None:
            if score <= threshold.max:
                total += 100
            else:
                total += threshold.max / score * 50
    return total, criteria


def score_low_blast_melee(scores: Scores, archetype: Archetype) -> tuple[float, int]:
    """Every low-blast ceiling met is worth 100 (no partial credit)."""
    total = 0.0
    criteria = 0
    for dimension, threshold in archetype.thresholds.items():
        score = _score(scores, dimension)
        criteria += 1
        if threshold.min is None:
            if score <= threshold.max:
                total += 100
        else:
            total += _min_credit(score, threshold, 50, threshold.min)
    return total, criteria


def score_combined_pair(scores: Scores, archetype: Archetype) -> tuple[float, int]:
    """
    Average two dimensions into one strong indicator.

    Met: 150 (+20 at ideal). Missed: proximity x 75. Each supporting indicator
    that reaches its minimum adds 50 and one criterion.
    """
    first, second = archetype.combined
    combined = (_score(scores, first) + _score(scores, second)) / 2
    threshold = archetype.thresholds["combined"]

    if combined >= threshold.min:
        total = 150.0
        if threshold.ideal is not None and combined >= threshold.ideal:
            total += 20
    else:
        total = combined / threshold.min * 75
    criteria = 1

    for dimension, support in archetype.supporting.items():
        if _score(scores, dimension) >= support.min:
            total += COMBINED_SUPPORT_POINTS
            criteria += 1
    return total, criteria


def score_rushdown_gate(scores: Scores, archetype: Archetype) -> tuple[float, int]:
    """Needs two core indicators; high dragon dash relaxes the core minimums."""
    dash_dimension, dash = next(iter(archetype.supporting.items()))
    has_dash = _score(scores, dash_dimension) >= dash.min
    relaxation = RUSHDOWN_DASH_RELAXATION if has_dash else 1.0

    total = 0.0
    met = 0
    for dimension, threshold in archetype.thresholds.items():
        score = _score(scores, dimension)
        effective_min = threshold.min * relaxation
        if score >= effective_min:
            met += 1
        total += _min_credit(score, threshold, 30, effective_min)

    if has_dash:
        total += GATE_SUPPORT_POINTS
    if met < 2:
        total *= 0.5
    return total, len(archetype.thresholds)


def score_core_indicator_gate(scores: Scores, archetype: Archetype) -> tuple[float, int]:
    """Needs at least one core indicator; the supporting one adds a bonus."""
    total = 0.0
    met = 0
    for dimension, threshold in archetype.thresholds.items():
        score = _score(scores, dimension)
        if score >= threshold.min:
            met += 1
        total += _min_credit(score, threshold, 50, threshold.min)

    for dimension, support in archetype.supporting.items():
        if _score(scores, dimension) >= support.min:
            total += GATE_SUPPORT_POINTS
    if met == 0:
        total *= 0.5
    return total, len(archetype.thresholds)


SCORERS: dict[MatchStrategy, Callable[[Scores, Archetype], tuple[float, int]]] = {
    MatchStrategy.STANDARD: score_standard,
    MatchStrategy.COMBINED_PAIR: score_combined_pair,
    MatchStrategy.LOW_BLAST_MELEE: score_low_blast_melee,
    MatchStrategy.RUSHDOWN_GATE: score_rushdown_gate,
    MatchStrategy.CORE_INDICATOR_GATE: score_core_indicator_gate,
}


# =============================================================================
# Classification
# =============================================================================


def score_archetype(scores: Scores, archetype: Archetype) -> ArchetypeMatch | None:
    total, criteria = SCORERS[archetype.strategy](scores, archetype)
    if criteria == 0:
        return None
    return ArchetypeMatch(
        archetype=archetype.name,
        score=total / criteria,
        description=archetype.description,
        icon=archetype.icon,
        color=archetype.color,
    )


def rank_archetypes(scores: Scores, catalogue: tuple[Archetype, ...]) -> list[ArchetypeMatch]:
    """Score every archetype, best first (ties keep catalogue order)."""
    matches = [m for m in (score_archetype(scores, a) for a in catalogue) if m is not None]
    return sorted(matches, key=lambda m: m.score, reverse=True)


def detect_playstyle_archetype(normalized_scores: Scores | None) -> ArchetypeResult | None:
    """
    Classify a normalized score profile.

    Args:
        normalized_scores: Output of compute_normalized_scores (or any
            mapping of dimension name to 0-100 score)

    Returns:
        ArchetypeResult, or None when there are no scores to classify
    """
    if normalized_scores is None:
        return None

    primaries = rank_archetypes(normalized_scores, PRIMARY_ARCHETYPES)
    primary = primaries[0]

    secondary = None
    if len(primaries) > 1:
        runner_up = primaries[1]
        if (
            runner_up.score >= SECONDARY_ARCHETYPE_MIN_SCORE
            and primary.score - runner_up.score <= SECONDARY_ARCHETYPE_MAX_GAP
        ):
            secondary = runner_up

    sub_types = [
        m for m in rank_archetypes(normalized_scores, SUBTYPE_ARCHETYPES) if m.score >= SUBTYPE_MIN_SCORE
    ]

    logger.debug(
        f"Primary archetype {primary.archetype} ({primary.score:.1f}), "
        f"{len(sub_types)} sub-types"
    )
    return ArchetypeResult(primary=primary, secondary=secondary, sub_types=sub_types)
