"""
Score derivation tests

Overall score, confidence and quality flags from the four core dimensions.
"""

import pytest

from casejudge_core.domain.value_objects import QualityThresholds
from casejudge_core.use_cases.scoring import (
    ScoreDerivationError,
    core_scores,
    derive_confidence,
    derive_metrics,
    derive_overall_score,
    derive_quality_flags,
    round_half_up,
)


def _scores(faithfulness, completeness, relevance, clarity, **extra):
    return dict(
        faithfulness=faithfulness,
        completeness=completeness,
        relevance=relevance,
        clarity=clarity,
        **extra,
    )


class TestRoundHalfUp:
    def test_halves_round_up(self):
        assert round_half_up(7.5) == 8
        assert round_half_up(6.5) == 7

    def test_below_half(self):
        assert round_half_up(7.49) == 7


class TestCoreScores:
    def test_ignores_non_numbers(self):
        scores = {"faithfulness": 9, "completeness": None, "relevance": "8", "clarity": True}
        assert core_scores(scores) == [9.0]

    def test_ignores_task_specific(self):
        assert core_scores(_scores(1, 1, 1, 1, compliance=10)) == [1.0, 1.0, 1.0, 1.0]


class TestDeriveOverallScore:
    def test_rounded_mean(self):
        # mean 7.5 rounds half up
        assert derive_overall_score(_scores(9, 7, 8, 6)) == 8

    def test_exact_mean(self):
        assert derive_overall_score(_scores(5, 5, 5, 5)) == 5

    def test_partial_scores(self):
        assert derive_overall_score({"faithfulness": 6, "clarity": 9}) == 8

    def test_no_scores_raises(self):
        with pytest.raises(ScoreDerivationError, match="No valid scores found"):
            derive_overall_score({})

    def test_bounds(self):
        grid = [1, 1.5, 4, 5.5, 9.5, 10]
        for f in grid:
            for c in grid:
                for r in grid:
                    for cl in grid:
                        overall = derive_overall_score(_scores(f, c, r, cl))
                        assert isinstance(overall, int)
                        assert 1 <= overall <= 10
        assert derive_overall_score(_scores(1, 1, 1, 1)) == 1
        assert derive_overall_score(_scores(10, 10, 10, 10)) == 10


class TestDeriveConfidence:
    def test_identical_scores(self):
        assert derive_confidence(_scores(7, 7, 7, 7)) == 1.0

    def test_spread_scores(self):
        # population std dev of 9, 7, 8, 6 is ~1.118
        assert derive_confidence(_scores(9, 7, 8, 6)) == pytest.approx(0.75)

    def test_clamped_at_zero(self):
        assert derive_confidence(_scores(1, 10, 1, 10), QualityThresholds(confidence_normalizer=1.0)) == 0.0

    def test_no_scores(self):
        assert derive_confidence({}) == 0.0

    def test_bounds(self):
        for values in [(1, 10, 1, 10), (10, 10, 10, 10), (3, 4, 5, 6)]:
            assert 0.0 <= derive_confidence(_scores(*values)) <= 1.0


class TestDeriveQualityFlags:
    def test_balanced_scores_have_no_flags(self):
        assert derive_quality_flags(_scores(9, 7, 8, 6)) == ()

    def test_high_and_consistent(self):
        assert derive_quality_flags(_scores(9, 9, 9, 9)) == ("high_quality", "consistent_quality")

    def test_low_quality_with_dimension_flags(self):
        flags = derive_quality_flags(_scores(2, 3, 3, 2))
        assert flags == (
            "low_quality",
            "potential_hallucination",
            "incomplete_response",
            "off_topic",
            "unclear_response",
            "consistent_quality",
        )

    def test_inconsistent(self):
        flags = derive_quality_flags(_scores(10, 2, 10, 9))
        assert "incomplete_response" in flags
        assert "inconsistent_quality" in flags
        assert "consistent_quality" not in flags

    def test_thresholds_inclusive(self):
        # mean of exactly 8.0 counts as high quality, 3 counts as low dimension
        assert "high_quality" in derive_quality_flags(_scores(8, 8, 8, 8))
        assert "off_topic" in derive_quality_flags(_scores(8, 8, 3, 8))

    def test_custom_thresholds(self):
        thresholds = QualityThresholds(high_quality_mean=7.0)
        assert "high_quality" in derive_quality_flags(_scores(9, 7, 8, 6), thresholds)

    def test_no_scores(self):
        assert derive_quality_flags({}) == ()


class TestDeriveMetrics:
    def test_happy_path(self):
        metrics = derive_metrics(_scores(9, 7, 8, 6))
        assert metrics.overall == 8
        assert metrics.confidence == pytest.approx(0.75)
        assert metrics.flags == ()
