"""
Tests for the additive scorer, category boundaries and scorer replacement.
"""
from dataclasses import replace

import pytest

from water_potability.config import PotabilityConfig
from water_potability.models import Category, CriterionStatus, Sample, ScoreResult
from water_potability.scoring import (
    Band,
    classify,
    get_scorer,
    heuristic_score,
    register_scorer,
    score,
)
from water_potability.validation import validate


@pytest.fixture
def reference_sample(reference_fields):
    return validate(reference_fields)


class TestReferenceSamples:
    def test_reference_sample_scores_100_good(self, reference_sample):
        result = score(reference_sample)
        assert result.score == 100
        assert result.category == Category.GOOD

    def test_ph_outside_both_bands_scores_70_moderate(self, reference_sample):
        result = score(replace(reference_sample, ph=9.5))
        assert result.score == 70
        assert result.category == Category.MODERATE
        ph = result.criteria[0]
        assert ph.field_name == "ph"
        assert ph.status == CriterionStatus.OUTSIDE
        assert ph.points == 0

    def test_ph_acceptable_band_gives_15(self, reference_sample):
        result = score(replace(reference_sample, ph=6.2))
        assert result.score == 85
        assert result.criteria[0].status == CriterionStatus.ACCEPTABLE

    def test_everything_outside_scores_zero_poor(self):
        sample = Sample(
            ph=2.0, hardness=900.0, solids=5000.0, chloramines=12.0, sulfate=400.0,
            conductivity=50.0, organic_carbon=25.0, trihalomethanes=120.0, turbidity=9.0,
        )
        result = score(sample)
        assert result.score == 0
        assert result.category == Category.POOR

    def test_breakdown_covers_all_fields(self, reference_sample):
        result = score(reference_sample)
        assert len(result.criteria) == 9
        assert sum(c.points for c in result.criteria) == result.score
        assert sum(c.max_points for c in result.criteria) == 110


class TestMonotonic:
    @pytest.mark.parametrize("ph_values", [(4.0, 6.2, 7.0), (11.0, 8.8, 8.0)])
    def test_ph_outside_acceptable_optimal(self, reference_sample, ph_values):
        scores = [score(replace(reference_sample, ph=v)).score for v in ph_values]
        assert scores == sorted(scores)
        assert scores[0] < scores[1] < scores[2]

    @pytest.mark.parametrize(
        "field_name, outside, inside",
        [
            ("hardness", 100.0, 200.0),
            ("solids", 900.0, 300.0),
            ("chloramines", 8.0, 1.0),
            ("conductivity", 1000.0, 500.0),
            ("turbidity", 7.0, 2.0),
        ],
    )
    def test_single_band_fields(self, reference_sample, field_name, outside, inside):
        low = score(replace(reference_sample, **{field_name: outside})).score
        high = score(replace(reference_sample, **{field_name: inside})).score
        assert low + 10 == high


class TestBandEdges:
    @pytest.mark.parametrize("ph, points", [(6.5, 30), (8.5, 30), (6.0, 15), (9.0, 15), (5.99, 0), (9.01, 0)])
    def test_ph_edges(self, reference_sample, ph, points):
        assert score(replace(reference_sample, ph=ph)).criteria[0].points == points

    @pytest.mark.parametrize(
        "field_name, at_limit, below",
        [
            ("solids", 600.0, 599.9),
            ("chloramines", 4.0, 3.9),
            ("sulfate", 250.0, 249.9),
            ("trihalomethanes", 80.0, 79.9),
            ("turbidity", 5.0, 4.9),
        ],
    )
    def test_strict_upper_limits(self, reference_sample, field_name, at_limit, below):
        idx = [c.field_name for c in score(reference_sample).criteria].index(field_name)
        assert score(replace(reference_sample, **{field_name: at_limit})).criteria[idx].points == 0
        assert score(replace(reference_sample, **{field_name: below})).criteria[idx].points == 10

    def test_organic_carbon_limit_inclusive(self, reference_sample):
        assert score(replace(reference_sample, organic_carbon=10.0)).criteria[6].points == 10
        assert score(replace(reference_sample, organic_carbon=10.1)).criteria[6].points == 0

    def test_strict_organic_carbon_when_configured(self, reference_sample):
        cfg = PotabilityConfig()
        cfg.optimal_bands["organic_carbon"] = (None, 10.0, True, False)
        result = heuristic_score(reference_sample, cfg)
        assert result.score == 90
        assert result.category == Category.GOOD

    def test_score_capped_at_100(self, reference_sample):
        result = score(replace(reference_sample, sulfate=200.0))
        assert sum(c.points for c in result.criteria) == 110
        assert result.score == 100
        assert result.category == Category.GOOD

    def test_band_describe(self):
        assert Band(6.5, 8.5).describe() == "[6.5, 8.5]"
        assert Band(None, 600.0, True, False).describe() == "< 600"
        assert Band(None, 10.0).describe() == "<= 10"


class TestClassify:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (100, Category.GOOD),
            (80, Category.GOOD),
            (79.9, Category.MODERATE),
            (50, Category.MODERATE),
            (49.9, Category.POOR),
            (0, Category.POOR),
        ],
    )
    def test_boundaries(self, value, expected):
        assert classify(value) == expected

    def test_score_result_rejects_out_of_range(self):
        with pytest.raises(ValueError):
            ScoreResult(score=101, category=Category.GOOD)


class TestScorerRegistry:
    def test_unknown_scorer_raises(self):
        with pytest.raises(KeyError):
            get_scorer("does-not-exist")

    def test_registered_scorer_replaces_heuristic(self, reference_sample):
        def always_poor(sample, cfg):
            return ScoreResult(score=10.0, category=classify(10.0, cfg))

        register_scorer("always_poor", always_poor)
        cfg = PotabilityConfig(scorer_name="always_poor")
        result = score(reference_sample, cfg)
        assert result.category == Category.POOR
        assert result.score == 10.0

    def test_empty_scorer_name_rejected(self):
        with pytest.raises(ValueError):
            register_scorer("  ", heuristic_score)
