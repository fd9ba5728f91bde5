"""
SparkStats - Constants

Defines AI strategy categories, match record field mappings, and the fixed
scoring coefficients used by the aggregation engine.
"""

from enum import StrEnum


class StrategyType(StrEnum):
    """
    AI strategy category.

    Derived from the strategy name; anything that is not one of the three
    stock strategy families is grouped under OTHER.
    """

    ATTACK = "Attack"
    DEFENSE = "Defense"
    BALANCED = "Balanced"
    OTHER = "Other"


class Confidence(StrEnum):
    """Data quality confidence bucket for an AI strategy sample."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


# Names that never identify a real AI strategy
PLACEHOLDER_AI_NAMES = {"Unknown", "Com", "Player", "Default"}

UNKNOWN_AI_NAME = "Unknown"

# Case-insensitive name fragments -> strategy type (checked in order)
STRATEGY_NAME_PATTERNS = (
    ("attack strategy", StrategyType.ATTACK),
    ("defense strategy", StrategyType.DEFENSE),
    ("balanced strategy", StrategyType.BALANCED),
)

# Counter totals accumulated per match: total attribute -> match record key(s).
# When several keys are listed the first present one wins (upload format spells
# the ultimate hit counter "uLTHitBlast").
MATCH_COUNTER_FIELDS: dict[str, tuple[str, ...]] = {
    "damage_dealt": ("damageDone",),
    "damage_taken": ("damageTaken",),
    "battle_time": ("battleTime",),
    "kills": ("kills",),
    "health_remaining": ("hPGaugeValue",),
    "max_health": ("hPGaugeValueMax",),
    # Offense
    "max_combo": ("maxComboNum",),
    "max_combo_damage": ("maxComboDamage",),
    "sparking_combo_hits": ("sparkingComboCount",),
    "s1_blast": ("s1Blast",),
    "s2_blast": ("s2Blast",),
    "ult_blast": ("ultBlast",),
    "s1_hit_blast": ("s1HitBlast",),
    "s2_hit_blast": ("s2HitBlast",),
    "ult_hit_blast": ("uLTHitBlast", "ultHitBlast"),
    "exa1_count": ("exa1Count",),
    "exa2_count": ("exa2Count",),
    "throws": ("throwCount",),
    "vanishing_attacks": ("vanishingAttackCount",),
    "dragon_homing": ("dragonHomingCount",),
    "lightning_attacks": ("lightningAttackCount",),
    "speed_impacts": ("speedImpactCount",),
    "speed_impact_wins": ("speedImpactWins",),
    # Defense
    "guards": ("guardCount",),
    "z_counters": ("zCounterCount",),
    "super_counters": ("superCounterCount",),
    "revenge_counters": ("revengeCounterCount",),
    # Tactics
    "sparking_count": ("sparkingCount",),
    "dragon_dash_distance": ("dragonDashMileage",),
    "energy_blasts": ("shotEnergyBulletCount",),
    "charges": ("chargeCount",),
    "tags": ("tags",),
}

# Action counters tracked per build type and per capsule
ACTION_COUNTER_FIELDS = (
    "energy_blasts",
    "throws",
    "vanishing_attacks",
    "guards",
    "z_counters",
    "super_counters",
    "revenge_counters",
    "charges",
    "dragon_dash_distance",
    "s1_blast",
    "s2_blast",
    "ult_blast",
    "sparking_count",
    "tags",
    "max_combo",
)

# buildComposition.breakdown[].name -> build cost total attribute
BUILD_COST_CATEGORIES = {
    "Melee": "melee",
    "Blast": "blast",
    "Ki Blast": "ki_blast",
    "Defense": "defense",
    "Skill": "skill",
    "Ki Efficiency": "ki_efficiency",
    "Utility": "utility",
}

# Combat performance score weights (fixed for parity with published numbers)
COMBAT_SCORE_WEIGHTS = {
    "damage_ratio": 30.0,
    "win_rate": 0.5,
    "survival_rate": 0.2,
}
COMBAT_SCORE_CAP = 100.0

# Damage efficiency divisor when an AI never took damage
NO_DAMAGE_TAKEN_EFFICIENCY_DIVISOR = 1000.0

# Assumed battle length (seconds) for DPS when no battle time was recorded.
# An approximation, not a game constant.
FALLBACK_BATTLE_SECONDS = 120.0

# Composite behavior weights: dimension -> ((average attribute, weight), ...)
BEHAVIOR_COMPOSITE_WEIGHTS: dict[str, tuple[tuple[str, float], ...]] = {
    "offense": (
        ("avg_damage_dealt", 1.0),
        ("avg_s2_blast", 1000.0),
        ("avg_ult_blast", 2000.0),
    ),
    "defense": (
        ("avg_guards", 100.0),
        ("avg_z_counters", 300.0),
        ("avg_super_counters", 200.0),
        ("avg_damage_taken_per_second", -50.0),
    ),
    "aggression": (
        ("avg_dragon_dash_distance", 0.01),
        ("avg_throws", 500.0),
        ("avg_vanishing_attacks", 300.0),
    ),
    "zoning": (
        ("avg_energy_blasts", 100.0),
        ("avg_s1_blast", 200.0),
    ),
    "resource_management": (
        ("avg_charges", 100.0),
        ("avg_sparking_count", 500.0),
    ),
    "combo_focus": (
        ("avg_max_combo", 100.0),
        ("avg_damage_dealt", 0.01),
    ),
}

# Data quality model
CHARACTER_UNIVERSE_SIZE = 200

# (min matches, min diversity) pairs; any satisfied pair grants the level
HIGH_CONFIDENCE_RULES = ((75, 0.40), (50, 0.55), (0, 0.90))
MEDIUM_CONFIDENCE_RULES = ((30, 0.35), (20, 0.50))

# Secondary archetype acceptance
SECONDARY_ARCHETYPE_MIN_SCORE = 60.0
SECONDARY_ARCHETYPE_MAX_GAP = 15.0
SUBTYPE_MIN_SCORE = 60.0
