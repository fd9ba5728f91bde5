"""Shared fixtures for SparkStats tests."""

import json

import pytest

from sparkstats.analysis.derivation import compute_ai_strategy_metrics
from sparkstats.core.config import reset_config


def make_match(ai="Attack Strategy", won=True, battle_time=100, **overrides):
    """Build a match record in the uploaded JSON format."""
    match = {
        "aiStrategy": ai,
        "won": won,
        "battleTime": battle_time,
        "damageDone": 5000,
        "damageTaken": 2500,
        "kills": 1,
        "hPGaugeValue": 10000 if won else 0,
        "hPGaugeValueMax": 40000,
        "maxComboNum": 10,
        "maxComboDamage": 3000,
        "sparkingComboCount": 2,
        "s1Blast": 2,
        "s2Blast": 2,
        "ultBlast": 1,
        "s1HitBlast": 1,
        "s2HitBlast": 1,
        "uLTHitBlast": 1,
        "exa1Count": 1,
        "exa2Count": 1,
        "throwCount": 2,
        "vanishingAttackCount": 3,
        "dragonHomingCount": 2,
        "lightningAttackCount": 1,
        "speedImpactCount": 2,
        "speedImpactWins": 1,
        "guardCount": 10,
        "zCounterCount": 1,
        "superCounterCount": 1,
        "revengeCounterCount": 0,
        "sparkingCount": 1,
        "dragonDashMileage": 500,
        "shotEnergyBulletCount": 10,
        "chargeCount": 3,
        "tags": 0,
        "buildComposition": {
            "label": "Balanced",
            "breakdown": [
                {"name": "Melee", "cost": 3},
                {"name": "Blast", "cost": 2},
            ],
        },
        "equippedCapsules": [{"id": "c1", "name": "Power Up"}],
    }
    match.update(overrides)
    return match


def attack_match(won=True, **overrides):
    values = {"damageDone": 6000, "throwCount": 4}
    values.update(overrides)
    return make_match("Attack Strategy", won, **values)


def defense_match(won=True, **overrides):
    values = {"damageDone": 4000, "guardCount": 20}
    values.update(overrides)
    return make_match("Defense Strategy", won, **values)


@pytest.fixture
def match_factory():
    """Factory for single match records."""
    return make_match


@pytest.fixture
def sample_corpus():
    """
    Two characters against three AI strategies.

    Attack Strategy: 10 matches (Goku 6 / Vegeta 4), 6 wins
    Defense Strategy: 8 matches (Goku 3 / Vegeta 5), 4 wins
    Balanced Strategy: 1 match (Vegeta), 1 win
    Plus one zero-length Vegeta match that must be ignored.
    """
    goku = [attack_match(won=i < 4) for i in range(6)]
    goku += [defense_match(won=i < 1) for i in range(3)]

    vegeta = [attack_match(won=i < 2) for i in range(4)]
    vegeta += [defense_match(won=i < 3) for i in range(5)]
    vegeta.append(make_match("Balanced Strategy", won=True))
    vegeta.append(attack_match(won=True, battleTime=0))

    return [
        {"name": "Goku", "matches": goku},
        {"name": "Vegeta", "matches": vegeta},
    ]


@pytest.fixture
def sample_metrics(sample_corpus):
    """Unfiltered metrics for the sample corpus."""
    return compute_ai_strategy_metrics(sample_corpus)


@pytest.fixture
def corpus_file(tmp_path, sample_corpus):
    """The sample corpus written to a JSON file."""
    path = tmp_path / "matches.json"
    path.write_text(json.dumps(sample_corpus), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def clean_config():
    """Every test starts from the default global configuration."""
    reset_config()
    yield
    reset_config()
