"""
SparkStats Data Contracts

Shapes of the JSON match data produced by the upload pipeline and consumed
by the aggregation engine. Every key is optional: the engine defaults
missing values rather than rejecting a record.

Producers: upload widget / validation endpoint (JSON files)
Consumers: loader.py, analysis/accumulator.py
"""

from __future__ import annotations

from typing import TypedDict


class BuildCostItem(TypedDict, total=False):
    """One category of a build's cost breakdown."""

    name: str  # "Melee", "Blast", "Ki Blast", "Defense", "Skill", "Ki Efficiency", "Utility"
    cost: float


class BuildComposition(TypedDict, total=False):
    """Loadout summary attached to a match."""

    label: str  # build type, e.g. "Melee Build"
    breakdown: list[BuildCostItem]


class EquippedCapsule(TypedDict, total=False):
    """A capsule equipped for the match."""

    id: str
    name: str


class MatchRecord(TypedDict, total=False):
    """One bout for one character against one AI strategy."""

    aiStrategy: str
    won: bool
    battleTime: float  # seconds; <= 0 means the match did not complete
    damageDone: float
    damageTaken: float
    kills: int
    hPGaugeValue: float
    hPGaugeValueMax: float
    # Combos
    maxComboNum: int
    maxComboDamage: float
    sparkingComboCount: int
    # Blasts
    s1Blast: int
    s2Blast: int
    ultBlast: int
    s1HitBlast: int
    s2HitBlast: int
    uLTHitBlast: int
    ultHitBlast: int  # alias accepted for uLTHitBlast
    # Skills and melee tactics
    exa1Count: int
    exa2Count: int
    throwCount: int
    vanishingAttackCount: int
    dragonHomingCount: int
    lightningAttackCount: int
    speedImpactCount: int
    speedImpactWins: int
    # Defense
    guardCount: int
    zCounterCount: int
    superCounterCount: int
    revengeCounterCount: int
    # Tactics
    sparkingCount: int
    dragonDashMileage: float
    shotEnergyBulletCount: int
    chargeCount: int
    tags: int
    # Loadout
    buildComposition: BuildComposition
    equippedCapsules: list[EquippedCapsule]


class CharacterAggregateDict(TypedDict, total=False):
    """A character with its ordered match list, as loaded from JSON."""

    name: str
    matches: list[MatchRecord]
