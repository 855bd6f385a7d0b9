"""Tests for domain entities and value objects"""

from datetime import datetime, timezone

import pytest

from casejudge_core.domain.entities import (
    EvaluationMetadata,
    EvaluationOptions,
    EvaluationReasoning,
    EvaluationRequest,
    EvaluationResult,
    EvaluationScores,
    FewShotExample,
    HealthCheckResult,
)
from casejudge_core.domain.value_objects import (
    CallParameters,
    CostMetrics,
    ModelResponse,
    QualityThresholds,
)


def _make_result(**score_overrides) -> EvaluationResult:
    scores = dict(overall=8, faithfulness=9, completeness=7, relevance=8, clarity=6)
    scores.update(score_overrides)
    return EvaluationResult(
        id="eval-1",
        interaction_id="int-1",
        evaluation_model="openai/gpt-4o",
        scores=EvaluationScores(**scores),
        reasoning=EvaluationReasoning(
            overall="good", faithfulness="accurate", completeness="mostly",
            relevance="on topic", clarity="a bit dense",
        ),
        metadata=EvaluationMetadata(
            evaluated_at=datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc),
            evaluation_duration_ms=120,
            confidence=0.75,
            flags=("consistent_quality",),
        ),
    )


class TestEvaluationResult:
    def test_construction(self):
        result = _make_result()
        assert result.scores.overall == 8
        assert result.scores.task_specific == {}
        assert result.metadata.evaluation_cost is None  # default

    def test_core_scores_in_dimension_order(self):
        result = _make_result()
        assert list(result.scores.core()) == ["faithfulness", "completeness", "relevance", "clarity"]

    def test_score_out_of_range_raises(self):
        with pytest.raises(ValueError, match="scores.clarity"):
            _make_result(clarity=11)

    def test_empty_reasoning_raises(self):
        with pytest.raises(ValueError, match="reasoning.overall"):
            EvaluationResult(
                id="e", interaction_id="i", evaluation_model="m",
                scores=EvaluationScores(overall=5, faithfulness=5, completeness=5, relevance=5, clarity=5),
                reasoning=EvaluationReasoning(
                    overall="", faithfulness="x", completeness="x", relevance="x", clarity="x",
                ),
                metadata=EvaluationMetadata(
                    evaluated_at=datetime.now(timezone.utc), evaluation_duration_ms=0, confidence=1.0,
                ),
            )

    def test_dict_round_trip(self):
        result = _make_result()
        data = result.to_dict()
        assert data["metadata"]["evaluated_at"] == "2026-01-01T12:00:00+00:00"
        assert data["metadata"]["flags"] == ["consistent_quality"]
        assert EvaluationResult.from_dict(data) == result


class TestEvaluationOptions:
    def test_defaults(self):
        options = EvaluationOptions()
        assert options.include_chain_of_thought is True
        assert options.max_retries == 3
        assert options.timeout_ms == 30000

    def test_zero_retries_rejected(self):
        with pytest.raises(ValueError, match="max_retries must be at least 1"):
            EvaluationOptions(max_retries=0)

    def test_non_positive_timeout_rejected(self):
        with pytest.raises(ValueError, match="timeout_ms"):
            EvaluationOptions(timeout_ms=0)


class TestEvaluationRequest:
    def test_requires_interaction_id(self):
        with pytest.raises(ValueError, match="interaction_id"):
            EvaluationRequest(interaction_id="", evaluation_model="openai/gpt-4o")

    def test_requires_model(self):
        with pytest.raises(ValueError, match="evaluation_model"):
            EvaluationRequest(interaction_id="int-1", evaluation_model="")


class TestFewShotExample:
    def test_score_range(self):
        with pytest.raises(ValueError, match="between 1 and 10"):
            FewShotExample(input="i", output="o", score=0, reasoning="r")


class TestHealthCheckResult:
    def test_success(self):
        result = HealthCheckResult(model_name="openai/gpt-4o", success=True, latency_ms=100, error=None)
        assert result.success is True
        assert result.error is None

    def test_failure(self):
        result = HealthCheckResult(model_name="openai/gpt-4o", success=False, latency_ms=None, error="timeout")
        assert result.success is False
        assert result.error == "timeout"


class TestModelResponse:
    def test_total_tokens(self):
        response = ModelResponse(text="hi", model_id="m", latency_ms=10, tokens_in=100, tokens_out=50)
        assert response.total_tokens == 150

    def test_defaults(self):
        response = ModelResponse(text="hi", model_id="m", latency_ms=10)
        assert response.total_tokens == 0
        assert response.cost_estimate is None


class TestCallParameters:
    def test_from_mapping_ignores_unknown_keys(self):
        params = CallParameters.from_mapping({"temperature": 0.1, "max_tokens": 2000, "stop": ["x"]})
        assert params == CallParameters(temperature=0.1, max_tokens=2000)

    def test_explicit_timeout_wins(self):
        params = CallParameters.from_mapping({"timeout_seconds": 5}, timeout_seconds=30)
        assert params.timeout_seconds == 30


class TestQualityThresholds:
    def test_non_positive_normalizer_rejected(self):
        with pytest.raises(ValueError, match="confidence_normalizer"):
            QualityThresholds(confidence_normalizer=0)


class TestCostMetrics:
    def test_total_cost(self):
        cost = CostMetrics(
            input_tokens=1_000_000,
            output_tokens=500_000,
            input_price_per_m=2.5,
            output_price_per_m=10.0,
        )
        assert cost.total_cost == pytest.approx(7.5)

    def test_negative_tokens_raises(self):
        with pytest.raises(ValueError):
            CostMetrics(input_tokens=-1, output_tokens=0)
