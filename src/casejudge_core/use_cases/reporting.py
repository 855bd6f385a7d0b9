"""
Evaluation reporting

Aggregates persisted judge evaluations into pandas DataFrames.
"""

from __future__ import annotations

import pandas as pd

from casejudge_core.domain.constants import CORE_DIMENSIONS, DIMENSION_FLAGS
from casejudge_core.domain.entities import EvaluationResult

QUALITY_FLAGS = (
    "high_quality",
    "low_quality",
    *DIMENSION_FLAGS.values(),
    "inconsistent_quality",
    "consistent_quality",
)

SUMMARY_COLUMNS = [
    "evaluation_model",
    "num_evaluations",
    "mean_overall",
    *[f"mean_{name}" for name in CORE_DIMENSIONS],
    "mean_confidence",
    "total_cost",
    "total_tokens",
    "mean_duration_ms",
    *[f"flag_{flag}" for flag in QUALITY_FLAGS],
]


def evaluations_to_frame(results: list[EvaluationResult]) -> pd.DataFrame:
    """One row per evaluation with scores, confidence and flags flattened"""
    rows = []
    for result in results:
        metadata = result.metadata
        rows.append({
            "id": result.id,
            "interaction_id": result.interaction_id,
            "evaluation_model": result.evaluation_model,
            "evaluated_at": metadata.evaluated_at.isoformat(),
            "overall": result.scores.overall,
            **result.scores.core(),
            "confidence": metadata.confidence,
            "flags": ",".join(metadata.flags),
            "evaluation_cost": metadata.evaluation_cost,
            "evaluation_tokens": metadata.evaluation_tokens,
            "evaluation_duration_ms": metadata.evaluation_duration_ms,
        })
    return pd.DataFrame(rows)


def summarize_evaluations(results: list[EvaluationResult]) -> pd.DataFrame:
    """
    Aggregate evaluations by evaluation model.

    Args:
        results: Persisted evaluation results

    Returns:
        pd.DataFrame: One row per evaluation model (SUMMARY_COLUMNS)
    """
    if not results:
        return pd.DataFrame(columns=SUMMARY_COLUMNS)

    df = evaluations_to_frame(results)
    summary_rows = []
    for model_name, group in df.groupby("evaluation_model", sort=True):
        flag_lists = [flags.split(",") if flags else [] for flags in group["flags"]]
        row = {
            "evaluation_model": model_name,
            "num_evaluations": len(group),
            "mean_overall": group["overall"].mean(),
            **{f"mean_{name}": group[name].mean() for name in CORE_DIMENSIONS},
            "mean_confidence": group["confidence"].mean(),
            "total_cost": group["evaluation_cost"].sum(min_count=1),
            "total_tokens": group["evaluation_tokens"].sum(min_count=1),
            "mean_duration_ms": group["evaluation_duration_ms"].mean(),
        }
        for flag in QUALITY_FLAGS:
            row[f"flag_{flag}"] = sum(flag in flags for flags in flag_lists)
        summary_rows.append(row)

    return pd.DataFrame(summary_rows, columns=SUMMARY_COLUMNS)
