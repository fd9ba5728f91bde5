"""Tests for metric derivation."""

import copy

import pytest

from sparkstats.analysis.derivation import (
    GlobalTotals,
    PerAITotals,
    calculate_combat_score,
    calculate_data_quality,
    compute_ai_strategy_metrics,
    derive_averages,
    percent_rate,
    rescale,
)
from sparkstats.analysis.models import AIStrategyMetrics, CharacterBaseline, StatTotals
from sparkstats.core.config import AnalysisConfig
from sparkstats.core.constants import Confidence, StrategyType


class TestCombatScore:
    """Tests for the combat performance score."""

    def test_capped_at_100(self):
        """2.0 ratio x 30 + 60 x 0.5 + 60 x 0.2 = 102 is capped."""
        assert calculate_combat_score(5000, 2500, 60.0, 60.0) == 100

    def test_uncapped(self):
        assert calculate_combat_score(3000, 3000, 50.0, 50.0) == 65.0

    def test_no_damage_taken_uses_ratio_one(self):
        assert calculate_combat_score(1000, 0, 0.0, 0.0) == 30.0

    def test_rounded_to_one_decimal(self):
        # 1/3 x 30 = 10.0 (floating 9.999...)
        assert calculate_combat_score(1000, 3000, 0.0, 0.0) == 10.0


class TestDataQuality:
    """Tests for sample size and diversity assessment."""

    def test_low_diversity_is_low_confidence(self):
        """80 matches, 35 characters: (35/200) / sqrt(80/200) = 0.277."""
        quality = calculate_data_quality(80, 35)
        assert quality.diversity_score == 0.28
        assert quality.confidence == Confidence.LOW
        assert quality.sample_size == 80
        assert quality.character_diversity == 35

    def test_high_confidence(self):
        quality = calculate_data_quality(100, 60)
        assert quality.diversity_score == 0.42
        assert quality.confidence == Confidence.HIGH

    def test_medium_confidence(self):
        quality = calculate_data_quality(40, 40)
        assert quality.diversity_score == 0.45
        assert quality.confidence == Confidence.MEDIUM

    def test_full_coverage_is_high(self):
        quality = calculate_data_quality(200, 200)
        assert quality.diversity_score == 1.0
        assert quality.confidence == Confidence.HIGH

    def test_diversity_capped_at_one(self):
        assert calculate_data_quality(300, 250).diversity_score == 1.0

    def test_empty_sample(self):
        quality = calculate_data_quality(0, 0)
        assert quality.diversity_score == 0.0
        assert quality.confidence == Confidence.LOW


class TestFormulas:
    """Tests for rate and rescale helpers."""

    def test_percent_rate(self):
        assert percent_rate(6, 10) == 60.0
        assert percent_rate(1, 3) == 33.3
        assert percent_rate(2, 3) == 66.7
        assert percent_rate(1, 8) == 12.5
        assert percent_rate(5, 0) == 0.0

    def test_rescale(self):
        assert rescale(5, 0, 10) == 50
        assert rescale(-1, 0, 10) == 0
        assert rescale(11, 0, 10) == 100
        assert rescale(3, 3, 3) == 50


class TestDeriveAverages:
    """Tests for per-match averages."""

    def test_half_up_rounding(self):
        totals = StatTotals(matches=2, damage_dealt=3001, battle_time=200, throws=3)
        stats = derive_averages(totals)
        assert stats.avg_damage_dealt == 1501
        assert stats.avg_throws == 1.5

    def test_dps_and_efficiency(self):
        totals = StatTotals(matches=2, damage_dealt=10000, damage_taken=5000, battle_time=200)
        stats = derive_averages(totals)
        assert stats.avg_dps == 50
        assert stats.damage_efficiency == 2.0
        assert stats.avg_damage_taken_per_second == 25.0
        assert stats.avg_battle_time == 100.0

    def test_dps_fallback_without_battle_time(self):
        """No recorded battle time falls back to a 120 second estimate."""
        stats = derive_averages(StatTotals(matches=1, damage_dealt=1200))
        assert stats.avg_dps == 10
        assert stats.avg_damage_taken_per_second == 0.0

    def test_efficiency_without_damage_taken(self):
        stats = derive_averages(StatTotals(matches=1, damage_dealt=500, battle_time=60))
        assert stats.damage_efficiency == 0.5

    def test_no_damage_at_all(self):
        stats = derive_averages(StatTotals(matches=1, battle_time=60))
        assert stats.damage_efficiency == 0.0
        assert stats.avg_dps == 0

    def test_hit_rates(self):
        totals = StatTotals(matches=1, battle_time=60, s1_blast=3, s1_hit_blast=1, ult_blast=0)
        stats = derive_averages(totals)
        assert stats.avg_s1_hit_rate == 33.3
        assert stats.avg_ult_hit_rate == 0.0

    def test_survival_rate(self):
        stats = derive_averages(StatTotals(matches=3, survived=2, battle_time=300))
        assert stats.avg_survival_rate == 66.7

    def test_dragon_dash_is_whole_number(self):
        stats = derive_averages(StatTotals(matches=2, battle_time=200, dragon_dash_distance=1001))
        assert stats.avg_dragon_dash_distance == 501


class TestComputeAIStrategyMetrics:
    """Tests for the full derivation pipeline."""

    def test_balanced_strategy_scenario(self, match_factory):
        """10 matches, 6 wins, 5000 dealt / 2500 taken, 60% survival."""
        matches = [match_factory("Balanced Strategy", won=i < 6) for i in range(10)]
        metrics = compute_ai_strategy_metrics([{"name": "Goku", "matches": matches}])
        ai = metrics["Balanced Strategy"]

        assert ai.total_matches == 10
        assert ai.win_count == 6
        assert ai.loss_count == 4
        assert ai.win_rate == 60.0
        assert ai.avg_damage_dealt == 5000
        assert ai.avg_damage_taken == 2500
        assert ai.avg_battle_time == 100.0
        assert ai.avg_survival_rate == 60.0
        assert ai.damage_efficiency == 2.0
        assert ai.combat_performance_score == 100
        assert ai.strategy_type == StrategyType.BALANCED
        assert ai.type == StrategyType.BALANCED
        assert ai.usage_rate == 100.0

    def test_oversized_counter_counts_as_zero(self):
        """An integer too large for a float is an unusable field, not a crash."""
        corpus = [
            {
                "name": "Goku",
                "matches": [{"battleTime": 10, "damageDone": 10**400, "aiStrategy": "Melee"}],
            }
        ]
        metrics = compute_ai_strategy_metrics(corpus)

        assert metrics["Melee"].total_matches == 1
        assert metrics["Melee"].avg_damage_dealt == 0

    def test_empty_corpus(self):
        assert compute_ai_strategy_metrics([]) == {}

    def test_only_zero_length_matches(self, match_factory):
        corpus = [{"name": "Goku", "matches": [match_factory(battle_time=0)]}]
        assert compute_ai_strategy_metrics(corpus) == {}

    def test_zero_length_match_excluded(self, sample_metrics):
        """Vegeta's zero-length Attack match does not count."""
        attack = sample_metrics["Attack Strategy"]
        assert attack.total_matches == 10
        assert attack.win_count == 6

    def test_usage_rates_sum_to_100(self, sample_metrics):
        rates = {name: ai.usage_rate for name, ai in sample_metrics.items()}
        assert rates == {
            "Attack Strategy": 52.6,
            "Defense Strategy": 42.1,
            "Balanced Strategy": 5.3,
        }
        assert sum(rates.values()) == pytest.approx(100.0, abs=0.3)

    def test_character_usage(self, sample_metrics):
        usage = sample_metrics["Defense Strategy"].character_usage
        assert [u.name for u in usage] == ["Vegeta", "Goku"]
        assert usage[0].matches == 5
        assert usage[0].win_rate == 60.0
        assert usage[0].avg_damage == 4000
        assert usage[0].most_used_build_type == "Balanced"

    def test_unique_characters_and_quality(self, sample_metrics):
        attack = sample_metrics["Attack Strategy"]
        assert attack.unique_characters == 2
        assert attack.data_quality.sample_size == 10
        assert attack.data_quality.character_diversity == 2

    def test_build_type_distribution(self, match_factory):
        matches = [
            match_factory(won=True, buildComposition={"label": "Melee"}),
            match_factory(won=False, buildComposition={"label": "Blast"}),
            match_factory(won=True, buildComposition={"label": "Blast"}, throwCount=4),
            match_factory(won=True, buildComposition={"label": "Blast"}, throwCount=5),
        ]
        ai = compute_ai_strategy_metrics([{"name": "Goku", "matches": matches}])["Attack Strategy"]

        distribution = ai.build_type_distribution
        assert [b.build_type for b in distribution] == ["Blast", "Melee"]
        assert distribution[0].count == 3
        assert distribution[0].percentage == 75.0
        assert distribution[0].win_rate == 66.7
        assert distribution[0].action_averages.throws == 3.7

    def test_top_capsules_limit(self, match_factory):
        capsules = [{"id": f"c{i}", "name": f"Capsule {i}"} for i in range(12)]
        matches = [match_factory(equippedCapsules=capsules[: i + 1]) for i in range(12)]
        ai = compute_ai_strategy_metrics(
            [{"name": "Goku", "matches": matches}], AnalysisConfig(top_capsule_limit=3)
        )["Attack Strategy"]

        assert [c.id for c in ai.top_capsules] == ["c0", "c1", "c2"]
        assert ai.top_capsules[0].count == 12

    def test_avg_build_costs(self, sample_metrics):
        costs = sample_metrics["Attack Strategy"].avg_build_costs
        assert costs.melee == 3.0
        assert costs.blast == 2.0
        assert costs.utility == 0.0

    def test_behavior_profile_bounds(self, sample_metrics):
        for ai in sample_metrics.values():
            profile = ai.behavior_profile
            for value in vars(profile).values():
                assert 0 <= value <= 100

    def test_behavior_profile_extremes(self, sample_metrics):
        """Attack deals the most damage, Defense guards the most."""
        assert sample_metrics["Attack Strategy"].behavior_profile.offense == 100
        assert sample_metrics["Defense Strategy"].behavior_profile.offense == 0
        assert sample_metrics["Defense Strategy"].behavior_profile.defense == 100

    def test_single_ai_profile_is_flat(self, match_factory):
        metrics = compute_ai_strategy_metrics([{"name": "Goku", "matches": [match_factory()]}])
        profile = metrics["Attack Strategy"].behavior_profile
        assert set(vars(profile).values()) == {50}

    def test_order_independent(self, sample_corpus):
        """Reversing characters and matches yields the same metrics."""
        reversed_corpus = [
            {"name": c["name"], "matches": list(reversed(c["matches"]))}
            for c in reversed(sample_corpus)
        ]
        forward = compute_ai_strategy_metrics(sample_corpus)
        backward = compute_ai_strategy_metrics(reversed_corpus)

        assert set(forward) == set(backward)
        for name in forward:
            a = forward[name].to_dict()
            b = backward[name].to_dict()
            a.pop("character_usage")
            b.pop("character_usage")
            assert a == b

    def test_to_dict(self, sample_metrics):
        data = sample_metrics["Attack Strategy"].to_dict()
        assert data["type"] == "Attack"
        assert data["total_matches"] == 10
        assert data["data_quality"]["confidence"] in {"Low", "Medium", "High"}
        assert "raw_characters" not in data
        assert "character_filtered" not in data

    def test_copy_and_partial_instances(self, sample_metrics):
        """Average lookups on an instance without stats raise AttributeError."""
        ai = sample_metrics["Attack Strategy"]
        clone = copy.deepcopy(ai)
        assert clone.avg_damage_dealt == ai.avg_damage_dealt

        for cls in (AIStrategyMetrics, CharacterBaseline):
            partial = cls.__new__(cls)
            assert not hasattr(partial, "avg_damage_dealt")
            with pytest.raises(AttributeError):
                partial.damage_efficiency


class TestPipelineStages:
    """Tests for the explicit PerAITotals -> GlobalTotals stages."""

    def test_per_ai_totals_drop_empty(self, match_factory):
        corpus = [
            {"name": "Goku", "matches": [match_factory("Attack Strategy")]},
            {"name": "Vegeta", "matches": [match_factory("Defense Strategy", battle_time=0)]},
        ]
        per_ai = PerAITotals.from_characters(corpus)
        assert list(per_ai.ais) == ["Attack Strategy"]

    def test_global_totals(self, sample_corpus):
        derived = PerAITotals.from_characters(sample_corpus).derive(AnalysisConfig())
        totals = GlobalTotals.from_metrics(derived)
        assert totals.total_matches == 19
        assert set(totals.composite_ranges) == {
            "offense",
            "defense",
            "aggression",
            "zoning",
            "resource_management",
            "combo_focus",
        }

    def test_derive_keeps_raw_characters(self, sample_corpus):
        derived = PerAITotals.from_characters(sample_corpus).derive(AnalysisConfig())
        assert set(derived["Attack Strategy"].raw_characters) == {"Goku", "Vegeta"}
