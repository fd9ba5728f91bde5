"""Tests for behavioral insight generation."""

import pytest

from sparkstats.analysis.archetypes import detect_playstyle_archetype
from sparkstats.analysis.character_filter import filter_metrics_by_character
from sparkstats.analysis.derivation import compute_ai_strategy_metrics
from sparkstats.analysis.insights import (
    BehavioralInsights,
    compare_action_profiles,
    extract_unique_characters,
    generate_action_frequency_insights,
    generate_ai_insights,
    generate_behavioral_insights,
    generate_build_behavioral_impact,
    generate_capsule_behavioral_impact,
    generate_combat_effectiveness_insights,
    generate_key_behavioral_insights,
    get_top_ai_strategies,
)
from sparkstats.analysis.models import ActionProfile
from sparkstats.core.config import AnalysisConfig


class TestCompareActionProfiles:
    """Tests for compare_action_profiles."""

    def test_increases_before_decreases(self):
        bucket = ActionProfile(throws=6, guards=2, energy_blasts=10)
        reference = ActionProfile(throws=4, guards=4, energy_blasts=10)

        shifts = compare_action_profiles(bucket, reference, 10.0)

        assert [(s.action, s.percent_diff, s.direction) for s in shifts] == [
            ("Throws", 50.0, "above"),
            ("Guards", -50.0, "below"),
        ]
        assert shifts[0].value == 6
        assert shifts[0].avg == 4

    def test_below_threshold_ignored(self):
        shifts = compare_action_profiles(ActionProfile(throws=4.3), ActionProfile(throws=4), 10.0)
        assert shifts == []

    def test_zero_on_either_side_ignored(self):
        shifts = compare_action_profiles(ActionProfile(throws=0, guards=5), ActionProfile(throws=4, guards=0), 10.0)
        assert shifts == []

    def test_at_most_five(self):
        bucket = ActionProfile(**{f: 2 for f in vars(ActionProfile())})
        reference = ActionProfile(**{f: 1 for f in vars(ActionProfile())})
        assert len(compare_action_profiles(bucket, reference, 10.0)) == 5

    def test_label_overrides(self):
        shifts = compare_action_profiles(
            ActionProfile(ult_blast=3), ActionProfile(ult_blast=1), 10.0, labels={"ult_blast": "Ultimate Blasts"}
        )
        assert shifts[0].action == "Ultimate Blasts"


class TestLoadoutImpact:
    """Tests for build type and capsule behavioral impact."""

    @pytest.fixture
    def loadout_metrics(self, match_factory):
        """Two matches with a capsule pair and a melee build that throw a lot, two without."""
        capsules = [{"id": "a", "name": "Power Up"}, {"id": "b", "name": "Guard Boost"}]
        matches = [
            match_factory(throwCount=10, equippedCapsules=capsules, buildComposition={"label": "Melee Build"}),
            match_factory(throwCount=10, equippedCapsules=capsules, buildComposition={"label": "Melee Build"}),
            match_factory(throwCount=2, equippedCapsules=[], buildComposition={"label": "Blast Build"}),
            match_factory(throwCount=2, equippedCapsules=[], buildComposition={"label": "Blast Build"}),
        ]
        return compute_ai_strategy_metrics([{"name": "Goku", "matches": matches}])

    def test_capsules_with_identical_shifts_collapse(self, loadout_metrics):
        impact = generate_capsule_behavioral_impact(loadout_metrics["Attack Strategy"])

        assert impact is not None
        assert len(impact.impacts) == 1
        assert impact.most_impactful.name == "Power Up"
        shift = impact.impacts[0].frequencies[0]
        assert shift.action == "Throws"
        assert shift.percent_diff == 66.7
        assert shift.direction == "above"

    def test_builds_below_minimum_count(self, loadout_metrics):
        assert generate_build_behavioral_impact(loadout_metrics["Attack Strategy"]) is None

    def test_build_impacts(self, loadout_metrics):
        config = AnalysisConfig(min_build_count=2)
        impact = generate_build_behavioral_impact(loadout_metrics["Attack Strategy"], config=config)

        assert [i.build_type for i in impact.impacts] == ["Melee Build", "Blast Build"]
        assert impact.most_distinct.build_type == "Melee Build"
        assert impact.impacts[0].percentage == 50.0
        assert impact.impacts[1].frequencies[0].percent_diff == -66.7

    def test_build_without_shift_has_empty_impacts(self, sample_metrics):
        """A build used in every match matches the AI average exactly."""
        impact = generate_build_behavioral_impact(sample_metrics["Attack Strategy"])
        assert impact is not None
        assert impact.impacts == []
        assert impact.most_distinct is None

    def test_capsule_without_shift_is_none(self, sample_metrics):
        assert generate_capsule_behavioral_impact(sample_metrics["Attack Strategy"]) is None

    def test_filtered_build_compared_to_baseline(self, sample_metrics):
        """Goku's Attack matches throw more and guard less than Goku's average."""
        attack = filter_metrics_by_character(sample_metrics, "Goku")["Attack Strategy"]
        impact = generate_build_behavioral_impact(
            attack, attack.character_baseline, character_filtered=True
        )

        assert impact.most_distinct.build_type == "Balanced"
        actions = {s.action: s.direction for s in impact.most_distinct.frequencies}
        assert actions["Throws"] == "above"
        assert actions["Guards"] == "below"


class TestActionFrequency:
    """Tests for action frequency insights."""

    def test_population_comparison(self, sample_metrics):
        insights = generate_action_frequency_insights(sample_metrics["Attack Strategy"], sample_metrics)

        assert len(insights) == 6
        assert insights[0].action == "Throws"
        assert insights[0].percentile == 75
        assert insights[0].diff == "+33%"
        assert insights[1].action == "Guards"
        assert insights[1].percentile == 25

    def test_needs_two_comparable_ais(self, match_factory):
        metrics = compute_ai_strategy_metrics([{"name": "Goku", "matches": [match_factory()] * 6}])
        assert generate_action_frequency_insights(metrics["Attack Strategy"], metrics) == []

    def test_baseline_comparison(self, sample_metrics):
        filtered = filter_metrics_by_character(sample_metrics, "Goku")
        attack = filtered["Attack Strategy"]

        insights = generate_action_frequency_insights(
            attack, filtered, attack.character_baseline, character_filtered=True
        )

        actions = [i.action for i in insights]
        assert len(insights) <= 8
        assert actions[0] == "Guards"
        assert insights[0].diff == "-25%"
        # Both zero: nothing to compare
        assert "Revenge Counters" not in actions


class TestCombatEffectiveness:
    """Tests for combat effectiveness percentiles."""

    def test_percentiles(self, sample_metrics):
        effectiveness = generate_combat_effectiveness_insights(sample_metrics["Attack Strategy"], sample_metrics)

        assert effectiveness.win_rate.value == 60.0
        assert effectiveness.win_rate.percentile == 75
        assert effectiveness.win_rate.label == "Strong"
        assert effectiveness.damage.percentile == 75

    def test_needs_two_comparable_ais(self, match_factory):
        metrics = compute_ai_strategy_metrics([{"name": "Goku", "matches": [match_factory()] * 6}])
        assert generate_combat_effectiveness_insights(metrics["Attack Strategy"], metrics) is None


class TestKeyInsights:
    """Tests for the short key insight sentences."""

    def test_elite_performer(self, sample_metrics):
        package = generate_behavioral_insights(sample_metrics["Attack Strategy"], sample_metrics)
        assert package.key_insights[0].type == "success"
        assert package.key_insights[0].text.startswith("Elite Performer")

    def test_below_average(self, sample_metrics):
        package = generate_behavioral_insights(sample_metrics["Defense Strategy"], sample_metrics)
        assert package.key_insights[0].type == "warning"

    def test_archetype_fallback(self, sample_metrics):
        archetype = detect_playstyle_archetype({})
        insights = generate_key_behavioral_insights(
            sample_metrics["Attack Strategy"], sample_metrics, archetype, effectiveness=None
        )
        assert len(insights) == 1
        assert insights[0].text == archetype.primary.description
        assert insights[0].emoji == archetype.primary.icon

    def test_nothing_to_say(self, sample_metrics):
        assert generate_key_behavioral_insights(sample_metrics["Attack Strategy"], sample_metrics, None, None) == []


class TestBehavioralInsightPackage:
    """Tests for generate_behavioral_insights."""

    def test_complete_package(self, sample_metrics):
        package = generate_behavioral_insights(sample_metrics["Attack Strategy"], sample_metrics)

        assert isinstance(package, BehavioralInsights)
        assert package.normalized_scores is not None
        assert package.archetype is not None
        assert package.effectiveness is not None
        assert package.data_quality is sample_metrics["Attack Strategy"].data_quality

        data = package.to_dict()
        assert data["archetype"]["primary"]["archetype"]
        assert data["data_quality"]["sample_size"] == 10

    def test_filtered_package_uses_baseline(self, sample_metrics):
        filtered = filter_metrics_by_character(sample_metrics, "Goku")
        package = generate_behavioral_insights(filtered["Attack Strategy"], filtered)

        assert package.normalized_scores.damage_dealt > 50
        assert package.build_behavioral_impact is not None

    def test_no_comparable_population(self, match_factory):
        metrics = compute_ai_strategy_metrics([{"name": "Goku", "matches": [match_factory()]}])
        package = generate_behavioral_insights(metrics["Attack Strategy"], metrics)

        assert package.normalized_scores is None
        assert package.archetype is None
        assert package.effectiveness is None
        assert package.action_frequency == []


class TestCorpusHelpers:
    """Tests for rankings, summary insights and character listing."""

    def test_top_by_usage(self, sample_metrics):
        ranked = get_top_ai_strategies(sample_metrics, "usage", 3)
        assert [ai.name for ai in ranked] == ["Attack Strategy", "Defense Strategy", "Balanced Strategy"]

    def test_top_by_win_rate_with_limit(self, sample_metrics):
        ranked = get_top_ai_strategies(sample_metrics, "winRate", 2)
        assert [ai.name for ai in ranked] == ["Balanced Strategy", "Attack Strategy"]

    def test_unknown_metric_uses_win_rate(self, sample_metrics):
        assert get_top_ai_strategies(sample_metrics, "bogus") == get_top_ai_strategies(sample_metrics)

    def test_ai_insights(self, sample_metrics):
        insights = generate_ai_insights(sample_metrics)

        assert len(insights) == 4
        assert insights[0].text == "Attack Strategy has the highest win rate at 60.0%"
        assert "(6,000)" in insights[1].text
        assert insights[3].text == "Attack Strategy is the most popular with 10 matches (52.6%)"

    def test_ai_insights_need_comparable_ais(self, match_factory):
        metrics = compute_ai_strategy_metrics([{"name": "Goku", "matches": [match_factory()]}])
        assert generate_ai_insights(metrics) == []

    def test_unique_characters(self, sample_metrics):
        assert extract_unique_characters(sample_metrics) == [
            {"id": "Goku", "name": "Goku"},
            {"id": "Vegeta", "name": "Vegeta"},
        ]

    def test_unique_characters_sorted_case_insensitively(self, match_factory):
        metrics = compute_ai_strategy_metrics(
            [
                {"name": "Broly", "matches": [match_factory()]},
                {"name": "android 18", "matches": [match_factory()]},
            ]
        )
        assert [c["name"] for c in extract_unique_characters(metrics)] == ["android 18", "Broly"]
