"""Evaluation reporting tests"""

from datetime import datetime, timezone

import pandas as pd
import pytest

from casejudge_core.domain.entities import (
    EvaluationMetadata,
    EvaluationReasoning,
    EvaluationResult,
    EvaluationScores,
)
from casejudge_core.use_cases.reporting import (
    SUMMARY_COLUMNS,
    evaluations_to_frame,
    summarize_evaluations,
)


def _result(evaluation_id, model, core, flags=(), cost=None, tokens=None, confidence=0.8):
    faithfulness, completeness, relevance, clarity = core
    return EvaluationResult(
        id=evaluation_id,
        interaction_id="int-" + evaluation_id,
        evaluation_model=model,
        scores=EvaluationScores(
            overall=round(sum(core) / 4),
            faithfulness=faithfulness,
            completeness=completeness,
            relevance=relevance,
            clarity=clarity,
        ),
        reasoning=EvaluationReasoning(
            overall="o", faithfulness="f", completeness="c", relevance="r", clarity="cl",
        ),
        metadata=EvaluationMetadata(
            evaluated_at=datetime(2026, 3, 1, tzinfo=timezone.utc),
            evaluation_duration_ms=1000,
            confidence=confidence,
            flags=tuple(flags),
            evaluation_cost=cost,
            evaluation_tokens=tokens,
        ),
    )


class TestEvaluationsToFrame:
    def test_one_row_per_result(self):
        df = evaluations_to_frame([
            _result("e1", "openai/gpt-4o", (9, 9, 9, 9), flags=("high_quality", "consistent_quality")),
        ])

        assert len(df) == 1
        assert df.iloc[0]["flags"] == "high_quality,consistent_quality"
        assert df.iloc[0]["faithfulness"] == 9


class TestSummarizeEvaluations:
    def test_empty(self):
        df = summarize_evaluations([])
        assert df.empty
        assert list(df.columns) == SUMMARY_COLUMNS

    def test_grouped_by_model(self):
        df = summarize_evaluations([
            _result("e1", "openai/gpt-4o", (9, 9, 9, 9), flags=("high_quality", "consistent_quality"),
                    cost=0.002, tokens=700, confidence=1.0),
            _result("e2", "openai/gpt-4o", (5, 7, 5, 7), cost=0.004, tokens=900, confidence=0.78),
            _result("e3", "x-ai/grok-beta", (2, 3, 3, 2), flags=("low_quality",)),
        ])

        assert list(df.columns) == SUMMARY_COLUMNS
        assert list(df["evaluation_model"]) == ["openai/gpt-4o", "x-ai/grok-beta"]

        gpt = df.iloc[0]
        assert gpt["num_evaluations"] == 2
        assert gpt["mean_faithfulness"] == pytest.approx(7.0)
        assert gpt["mean_confidence"] == pytest.approx(0.89)
        assert gpt["total_cost"] == pytest.approx(0.006)
        assert gpt["total_tokens"] == 1600
        assert gpt["flag_high_quality"] == 1
        assert gpt["flag_low_quality"] == 0

        grok = df.iloc[1]
        assert grok["flag_low_quality"] == 1
        # No cost recorded at all
        assert pd.isna(grok["total_cost"])
