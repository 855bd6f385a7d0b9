"""Tests for domain constants"""

from casejudge_core.domain.constants import (
    CORE_DIMENSIONS,
    DEFAULT_EVALUATION_MODELS,
    DIMENSION_FLAGS,
    JUDGE_COT_TEMPLATE_ID,
    JUDGE_TEMPLATE_ID,
    MODEL_PRICING,
)


class TestCoreDimensions:
    def test_four_dimensions(self):
        assert CORE_DIMENSIONS == ("faithfulness", "completeness", "relevance", "clarity")

    def test_every_dimension_has_a_flag(self):
        assert set(DIMENSION_FLAGS) == set(CORE_DIMENSIONS)
        assert DIMENSION_FLAGS["faithfulness"] == "potential_hallucination"


class TestTemplateIds:
    def test_judge_ids_are_distinct(self):
        assert JUDGE_TEMPLATE_ID == "judge_evaluation_v1"
        assert JUDGE_COT_TEMPLATE_ID == "judge_evaluation_cot_v1"


class TestModelPricing:
    def test_prices_have_input_and_output(self):
        for model_name, pricing in MODEL_PRICING.items():
            assert set(pricing) == {"input", "output"}, model_name
            assert pricing["input"] >= 0
            assert pricing["output"] >= 0


class TestDefaultEvaluationModels:
    def test_at_least_one_recommended(self):
        assert any(model["recommended"] for model in DEFAULT_EVALUATION_MODELS)

    def test_ids_are_unique(self):
        ids = [model["id"] for model in DEFAULT_EVALUATION_MODELS]
        assert len(ids) == len(set(ids))
